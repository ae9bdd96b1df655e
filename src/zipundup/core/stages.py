"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/stages.py
The two passes run over every directory holding two or more archives.

CLASS HIERARCHY
---------------
AnalysisStage   : pass 1, builds an ArchiveSummary per archive
ComparisonStage : pass 2, runs the comparator over every ordered pair of summaries

STAGE CONTRACTS
---------------
Each stage implements a `process()` method that:
  • Reports progress via callback (value in [0, 1], context string), ending at 1.0
  • Respects cancellation via stopped_flag, polled before each archive / ordered pair,
    and returns what it has so far (the caller decides not to act on it)
  • Never raises for a single bad archive or pair: the archive goes into the shared
    invalid set, an error notice is added to the report, and the stage moves on

FAILURE ISOLATION
-----------------
• An archive that cannot be analyzed is invalid for the rest of the directory pass
• When a comparison fails, both archives are re-read completely; those failing the
  re-read become invalid. The failed pair counts as "no duplicate, no inclusion"
• Pairs involving an invalid archive are skipped without any I/O
"""

import logging
from typing import Callable, List, Optional, Set, Tuple

from zipundup.core.comparator import (
    contain_entries, contain_entry_contents, equal_entries, equal_entry_contents, validate_archive
)
from zipundup.core.errors import ArchiveCompareError, ArchiveCorruptedError, ArchiveReadError
from zipundup.core.grouper import ArchiveGroups, ArchiveInclusions
from zipundup.core.models import ArchiveSummary, UnduplicationReport
from zipundup.core.ordering import path_key
from zipundup.core.progress import ProgressCallback, ProgressCounter, bind_context

logger = logging.getLogger(__name__)


class InvalidArchives:
    """Archives excluded from the rest of a directory pass (case-insensitive paths)."""

    def __init__(self, report: UnduplicationReport):
        self._keys: Set[str] = set()
        self._report = report

    def add(self, path: str) -> None:
        self._keys.add(path_key(path))
        self._report.mark_invalid(path)

    def __contains__(self, path: str) -> bool:
        return path_key(path) in self._keys

    def __len__(self) -> int:
        return len(self._keys)


class AnalysisStage:

    def process(
            self,
            files: List[str],
            invalid: InvalidArchives,
            report: UnduplicationReport,
            stopped_flag: Optional[Callable[[], bool]] = None,
            progress_callback: Optional[ProgressCallback] = None
    ) -> List[ArchiveSummary]:
        """Summarizes each archive; unreadable ones are reported and marked invalid."""
        summaries = []
        context = ""
        try:
            for index, path in enumerate(files):
                if stopped_flag and stopped_flag():
                    logger.debug("Analysis interrupted by user")
                    return summaries

                context = f"analyzing \"{path}\""
                if progress_callback:
                    progress_callback(index / len(files), context)

                try:
                    summaries.append(ArchiveSummary.from_path(path))
                except (ArchiveReadError, ValueError) as e:
                    error = ArchiveReadError(f"Failed to read zip archive: \"{path}\"", path)
                    logger.error(f"{error} ({e})")
                    report.error(f"{error} ({e})")
                    invalid.add(path)
        finally:
            if progress_callback:
                progress_callback(1.0, context)

        return summaries


class ComparisonStage:

    def __init__(self, strict: bool = False):
        self.strict = strict

    def process(
            self,
            directory: str,
            summaries: List[ArchiveSummary],
            invalid: InvalidArchives,
            report: UnduplicationReport,
            stopped_flag: Optional[Callable[[], bool]] = None,
            progress_callback: Optional[ProgressCallback] = None
    ) -> Tuple[ArchiveGroups, ArchiveInclusions]:
        """
        Visits every ordered pair (a, b), a != b:
        - duplicates are tested once per unordered pair (a before b), skipped if
          both are already known to be in the same group
        - containment of b in a is tested for every ordered pair
        """
        groups = ArchiveGroups()
        inclusions = ArchiveInclusions()
        total_pairs = len(summaries) * (len(summaries) - 1)
        context = f"comparing files on directory \"{directory}\""
        callback = bind_context(progress_callback, context) if progress_callback else None

        with ProgressCounter(callback) as counter:
            processed_pairs = 0
            for index1, summary1 in enumerate(summaries):
                for index2, summary2 in enumerate(summaries):
                    if index1 == index2:
                        continue
                    if stopped_flag and stopped_flag():
                        logger.debug("Comparison interrupted by user")
                        return groups, inclusions

                    if summary1.path not in invalid and summary2.path not in invalid:
                        base = processed_pairs

                        def pair_progress(value: float) -> None:
                            counter.set_value((base + value) / total_pairs)

                        self._compare_pair(
                            summary1, summary2, index1 < index2,
                            groups, inclusions, invalid, report, pair_progress
                        )

                    processed_pairs += 1
                    counter.set_value(processed_pairs / total_pairs)

        return groups, inclusions

    def _compare_pair(
            self,
            summary1: ArchiveSummary,
            summary2: ArchiveSummary,
            test_duplicate: bool,
            groups: ArchiveGroups,
            inclusions: ArchiveInclusions,
            invalid: InvalidArchives,
            report: UnduplicationReport,
            progress: Callable[[float], None]
    ) -> None:
        try:
            if test_duplicate and not groups.in_same_group(summary1, summary2):
                if (equal_entries(summary1, summary2, self.strict)
                        and equal_entry_contents(summary1, summary2, self.strict, progress)):
                    logger.debug(f"Duplicates: {summary1.path} == {summary2.path}")
                    groups.add(summary1, summary2)

            if (contain_entries(summary1, summary2)
                    and contain_entry_contents(summary1, summary2, progress)):
                logger.debug(f"Inclusion: {summary1.path} contains {summary2.path}")
                inclusions.add(summary1, summary2)
        except Exception as e:
            # any failure, whatever the decoder raised, only costs this pair
            self._revalidate(summary1.path, invalid, report)
            self._revalidate(summary2.path, invalid, report)
            error = ArchiveCompareError(
                f"Failed to compare ZIP archives: "
                f"archive1=\"{summary1.path}\", archive2=\"{summary2.path}\"",
                summary1.path,
                summary2.path
            )
            logger.error(f"{error} ({e})")
            report.error(f"{error} ({e})")

    @staticmethod
    def _revalidate(path: str, invalid: InvalidArchives, report: UnduplicationReport) -> None:
        if path in invalid:
            return
        try:
            validate_archive(path)
        except ArchiveCorruptedError as e:
            invalid.add(path)
            logger.error(f"{e} ({e.__cause__})")
            report.error(f"{e} ({e.__cause__})")
