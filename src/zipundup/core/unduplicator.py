"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

unduplicator.py
Per-directory pipeline: analysis (pass 1) → comparison (pass 2) → disposal.

Progress model:
    analysis cost   = ANALYSIS_COST_PER_ARCHIVE × n
    comparison cost = COMPARISON_COST_PER_PAIR × n × (n − 1)
Pass 1 fills [0, analysis / total] of the directory's progress range,
pass 2 fills the rest.
"""
import logging
from typing import Callable, Optional

from zipundup.core.models import ArchiveDirectory, RunOutcome, UnduplicationConfig, UnduplicationReport
from zipundup.core.progress import ProgressCallback, scale_progress
from zipundup.core.stages import AnalysisStage, ComparisonStage, InvalidArchives
from zipundup.services.disposal_service import DisposalService

logger = logging.getLogger(__name__)


def _no_progress(value: float, context: str = "") -> None:
    pass


class UnduplicatorImpl:
    """Runs the whole pipeline for one directory of candidate archives."""

    def __init__(self, strict: bool = False):
        self.strict = strict
        self.analysis_stage = AnalysisStage()
        self.comparison_stage = ComparisonStage(strict)

    def process_directory(
            self,
            directory: ArchiveDirectory,
            report: UnduplicationReport,
            stopped_flag: Optional[Callable[[], bool]] = None,
            progress_callback: Optional[ProgressCallback] = None
    ) -> RunOutcome:
        """
        Returns RunOutcome.CANCELLED if the stop flag was raised; nothing is
        disposed in that case. Otherwise applies the decisions and returns SUCCESS.
        """
        progress_callback = progress_callback or _no_progress
        pass1_scale, pass2_scale = self.pass_weights(directory.archive_count)
        invalid = InvalidArchives(report)

        logger.debug(f"Processing directory {directory.directory} ({directory.archive_count} archives)")

        summaries = self.analysis_stage.process(
            directory.files,
            invalid,
            report,
            stopped_flag=stopped_flag,
            progress_callback=scale_progress(progress_callback, 0.0, pass1_scale)
        )
        report.archives_analyzed += len(summaries)
        if stopped_flag and stopped_flag():
            return RunOutcome.CANCELLED

        groups, inclusions = self.comparison_stage.process(
            directory.directory,
            summaries,
            invalid,
            report,
            stopped_flag=stopped_flag,
            progress_callback=scale_progress(progress_callback, pass1_scale, pass2_scale)
        )
        if stopped_flag and stopped_flag():
            return RunOutcome.CANCELLED

        logger.debug(
            f"{len(groups)} duplicate group(s), {len(inclusions)} inclusion(s), "
            f"{len(invalid)} invalid archive(s) in {directory.directory}"
        )
        DisposalService(report).dispose(groups, inclusions)
        report.directories_processed += 1
        return RunOutcome.SUCCESS

    @staticmethod
    def pass_weights(archive_count: int):
        """Shares of the directory's progress range taken by pass 1 and pass 2."""
        cost_of_analyzing = UnduplicationConfig.ANALYSIS_COST_PER_ARCHIVE * archive_count
        cost_of_comparing = UnduplicationConfig.COMPARISON_COST_PER_PAIR * archive_count * (archive_count - 1)
        total_cost = cost_of_analyzing + cost_of_comparing
        if total_cost <= 0:
            return 1.0, 0.0
        return cost_of_analyzing / total_cost, cost_of_comparing / total_cost
