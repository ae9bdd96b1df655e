"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/scanner.py
Finds candidate ZIP archives and groups them by containing directory.
Features:
- Accepts any mix of files and directories (directories are scanned recursively)
- Keeps regular .zip files only (case-insensitive extension, no symlinks)
- Skips every path with a file or directory name starting with a dot
- Deterministic order: sorted traversal, first-seen directory order
- Returns only directories holding two or more archives
"""

import os
from pathlib import Path
from typing import Callable, Dict, List, Optional
import logging

logger = logging.getLogger(__name__)

# Local imports
from zipundup.core.models import ArchiveDirectory, UnduplicationConfig
from zipundup.core.ordering import path_key
from zipundup.core.progress import ProgressCallback


class ArchiveScannerImpl:
    """
    Collects archive candidates from command line style arguments.

    Attributes:
        paths: Files and/or directories to look into
        extension: Archive extension to accept (lowercase, with dot)
    """

    def __init__(self, paths: List[str], extension: str = UnduplicationConfig.ARCHIVE_EXTENSION):
        self.paths = [str(p) for p in paths]
        self.extension = extension.lower()

    def scan(
            self,
            stopped_flag: Optional[Callable[[], bool]] = None,
            progress_callback: Optional[ProgressCallback] = None
    ) -> List[ArchiveDirectory]:
        """
        Returns candidate archives grouped by directory.
        Raises RuntimeError if an argument does not exist.
        """
        logger.debug(f"Starting scan of {len(self.paths)} argument(s)")

        if progress_callback:
            progress_callback(0.0, "Searching files...")

        directories: Dict[str, ArchiveDirectory] = {}
        seen_files = set()

        for argument in self.paths:
            if stopped_flag and stopped_flag():
                logger.debug("Scan interrupted by user")
                return []

            root_path = Path(argument)
            if not root_path.exists():
                error_msg = f"Path does not exist: {argument}"
                logger.error(error_msg)
                raise RuntimeError(error_msg)

            for file_path in self._iter_files(root_path, stopped_flag):
                if not self._accepts(file_path):
                    continue
                key = path_key(str(file_path))
                if key in seen_files:
                    continue
                seen_files.add(key)

                directory = str(file_path.parent)
                group = directories.setdefault(path_key(directory), ArchiveDirectory(directory, []))
                group.files.append(str(file_path))

        result = [d for d in directories.values() if d.archive_count > 1]
        logger.debug(
            f"Scan completed. {sum(d.archive_count for d in result)} archives "
            f"in {len(result)} directories to compare."
        )
        return result

    def _iter_files(self, root_path: Path, stopped_flag: Optional[Callable[[], bool]] = None):
        if root_path.is_file():
            yield Path(os.path.abspath(root_path))
            return

        try:
            for root, dirs, files in os.walk(os.path.abspath(root_path)):
                if stopped_flag and stopped_flag():
                    logger.debug("Scan interrupted by user")
                    return

                # Pre-filter subdirectories BEFORE os.walk enters them
                dirs[:] = sorted(d for d in dirs if not d.startswith("."))
                for filename in sorted(files):
                    yield Path(root) / filename
        except PermissionError as pe:
            logger.warning(f"Permission denied during scan: {pe}")

    def _accepts(self, path: Path) -> bool:
        if path.suffix.lower() != self.extension:
            return False

        if self._has_hidden_segment(path):
            logger.debug(f"Skipping hidden path: {path}")
            return False

        try:
            if path.is_symlink() or not path.is_file():
                logger.debug(f"Skipping non-regular file: {path}")
                return False
        except (OSError, PermissionError) as e:
            logger.debug(f"Could not check {path}: {e}")
            return False

        return True

    @staticmethod
    def _has_hidden_segment(path: Path) -> bool:
        """True if the file name or any ancestor directory name starts with a dot."""
        return any(part.startswith(".") for part in Path(os.path.abspath(path)).parts)
