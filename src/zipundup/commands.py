"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

Unified command orchestrator for unduplication.
This is the SINGLE source of truth for the run workflow, used by the CLI and by library callers.
"""
import logging
from typing import Callable, List, Optional

from zipundup.core.models import (
    ArchiveDirectory, Notice, RunOutcome, UnduplicationParams, UnduplicationReport
)
from zipundup.core.progress import MonotonicProgress, ProgressCallback, scale_progress
from zipundup.core.reader import register_codecs
from zipundup.core.scanner import ArchiveScannerImpl
from zipundup.core.unduplicator import UnduplicatorImpl

logger = logging.getLogger(__name__)


class UnduplicationCommand:
    """
    Orchestrates the entire run:
    1. Register archive codecs (once per process)
    2. Find candidate archives grouped by directory
    3. Run the per-directory pipeline, weighting each directory by its archive count

    Usage:
        params = UnduplicationParams(paths=["~/Backups"], strict=False)
        command = UnduplicationCommand()
        report = command.execute(
            params,
            progress_callback=cli_progress_printer,
            stopped_flag=signal_handler_check,
            notice_listener=cli_notice_printer
        )
        sys.exit(report.outcome.exit_code)
    """

    def __init__(self):
        self._directories: List[ArchiveDirectory] = []

    def execute(
            self,
            params: UnduplicationParams,
            progress_callback: Optional[ProgressCallback] = None,
            stopped_flag: Optional[Callable[[], bool]] = None,
            notice_listener: Optional[Callable[[Notice], None]] = None
    ) -> UnduplicationReport:
        """
        Execute a run with the given parameters. Never raises: unexpected errors
        end the run with RunOutcome.FAILED and an error notice.

        Args:
            params: Validated run parameters
            progress_callback: (value: float in [0, 1], context: str) -> None, never decreasing
            stopped_flag: () -> bool (returns True if the run should stop)
            notice_listener: (notice: Notice) -> None, called for every info/error notice

        Returns:
            UnduplicationReport with outcome, notices, disposal actions and statistics
        """
        report = UnduplicationReport()
        if notice_listener:
            report.add_listener(notice_listener)
        progress = MonotonicProgress(progress_callback)

        try:
            register_codecs()

            scanner = ArchiveScannerImpl(params.paths)
            self._directories = scanner.scan(stopped_flag=stopped_flag, progress_callback=progress)
            if stopped_flag and stopped_flag():
                report.finish(RunOutcome.CANCELLED)
                return report

            unduplicator = UnduplicatorImpl(strict=params.strict)
            total_count = sum(d.archive_count for d in self._directories)
            processed_count = 0
            for directory in self._directories:
                offset = processed_count / total_count
                scale = directory.archive_count / total_count
                outcome = unduplicator.process_directory(
                    directory,
                    report,
                    stopped_flag=stopped_flag,
                    progress_callback=scale_progress(progress, offset, scale)
                )
                if outcome == RunOutcome.CANCELLED:
                    logger.debug("Run cancelled by user")
                    report.finish(RunOutcome.CANCELLED)
                    return report
                processed_count += directory.archive_count

            report.finish(RunOutcome.SUCCESS)
        except Exception as e:
            logger.exception("Unexpected error during unduplication")
            report.error(f"Unexpected error: {e}")
            report.finish(RunOutcome.FAILED)
        finally:
            progress(1.0, "")

        return report

    def get_directories(self) -> List[ArchiveDirectory]:
        """Candidate directories found by the last execution."""
        return self._directories.copy()
