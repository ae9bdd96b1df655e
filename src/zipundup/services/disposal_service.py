"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

services/disposal_service.py
Applies the decisions of one directory pass.

1. Duplicate groups: keep the most useful archive, move the others to the trash.
2. Inclusions: move each contained archive into a ".disposed" folder beside it,
   picking "name.zip", "name (2).zip", "name (3).zip", ... until a free name is found.

Existence is re-checked before every action: an earlier action of the same pass may
already have removed the file.
"""
import logging
import os
from typing import Iterable, List

from zipundup.core.grouper import ArchiveGroups, ArchiveInclusions
from zipundup.core.models import (
    ArchiveSummary, DisposalAction, DisposalKind, UnduplicationConfig, UnduplicationReport
)
from zipundup.core.ordering import parse_archive_name, sort_by_usefulness
from zipundup.services.file_service import FileService

logger = logging.getLogger(__name__)


class DisposalService:

    def __init__(self, report: UnduplicationReport):
        self.report = report

    def dispose(self, groups: ArchiveGroups, inclusions: ArchiveInclusions) -> None:
        for group in groups.groups():
            self.dispose_duplicates(group)
        self.relocate_contained(contained for _, contained in inclusions)

    def dispose_duplicates(self, group: List[ArchiveSummary]) -> None:
        """Moves every member but the most useful one to the trash."""
        if len(group) < 2:
            return

        ranked = sort_by_usefulness(group)
        logger.debug(f"Keeping {ranked[0].path} out of {len(ranked)} duplicates")
        for summary in ranked[1:]:
            if not summary.exists():
                logger.debug(f"Already gone: {summary.path}")
                continue

            size = FileService.file_size(summary.path)
            try:
                FileService.move_to_trash(summary.path)
            except RuntimeError as e:
                logger.error(f"Failed to trash {summary.path}: {e}")
                self.report.error(f"Failed to dispose of duplicate ZIP archive: \"{summary.path}\": {e}")
                continue

            self.report.add_action(DisposalAction(DisposalKind.TRASHED, summary.path, None, size))
            logger.info(f"Trashed duplicate: {summary.path}")
            self.report.info(f"Duplicate ZIP archive has been disposed: \"{summary.path}\"")

    def relocate_contained(self, contained_archives: Iterable[ArchiveSummary]) -> None:
        for summary in contained_archives:
            if not summary.exists():
                continue

            try:
                destination = self.relocate(summary.path)
            except OSError as e:
                logger.error(f"Failed to relocate {summary.path}: {e}")
                self.report.error(f"Failed to move contained ZIP archive: \"{summary.path}\": {e}")
                continue

            self.report.add_action(DisposalAction(
                DisposalKind.RELOCATED, summary.path, destination, FileService.file_size(destination)
            ))
            logger.info(f"Relocated contained archive: {summary.path} -> {destination}")
            self.report.info(
                f"Useless ZIP archive has been moved: "
                f"uselessArchive=\"{summary.path}\", movedTo=\"{destination}\""
            )

    @staticmethod
    def relocate(file_path: str) -> str:
        """Moves a file into the quarantine folder beside it. Returns the destination."""
        directory, file_name = os.path.split(file_path)
        destination_directory = FileService.ensure_directory(
            os.path.join(directory, UnduplicationConfig.DISPOSED_DIRECTORY_NAME)
        )
        body, _, extension = parse_archive_name(file_name)

        count = 1
        while True:
            suffix = "" if count <= 1 else f" ({count})"
            destination = str(destination_directory / f"{body}{suffix}{extension}")
            if not os.path.lexists(destination):
                try:
                    FileService.move_without_overwrite(file_path, destination)
                    return destination
                except FileExistsError:
                    logger.debug(f"Destination taken while moving, trying next name: {destination}")
            count += 1
