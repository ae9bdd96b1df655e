"""
Core archive comparison engine: reader, summaries, comparator, accumulators and stages.

This package contains the algorithmic foundation of zipundup:
- ZipArchiveReader + register_codecs: zipfile-based entry enumeration and content streaming
- EntrySummary / ArchiveSummary: immutable metadata with three pre-sorted entry views
- comparator: cheap metadata tests, byte-level content tests, archive validation
- ArchiveGroups / ArchiveInclusions: duplicate groups (union-find) and containment relations
- ordering: entry orderings and the usefulness ranking that picks the archive to keep
- AnalysisStage / ComparisonStage: the two passes run per directory

The per-directory pipeline (UnduplicatorImpl) lives in core.unduplicator.
"""

from .errors import ZipUndupError, ArchiveReadError, ArchiveCorruptedError, ArchiveCompareError
from .reader import ZipArchiveReader, ZipEntry, register_codecs
from .models import (
    EntrySummary, ArchiveSummary, ArchiveDirectory, UnduplicationParams, UnduplicationConfig,
    UnduplicationReport, RunOutcome, Notice, NoticeLevel, DisposalAction, DisposalKind)
from .comparator import (
    equal_entries, equal_entry_contents, contain_entries, contain_entry_contents, validate_archive)
from .grouper import ArchiveGroups, ArchiveInclusions
from .ordering import usefulness_key, sort_by_usefulness, parse_archive_name
from .scanner import ArchiveScannerImpl
from .stages import AnalysisStage, ComparisonStage, InvalidArchives

__all__ = [
    "ZipUndupError",
    "ArchiveReadError",
    "ArchiveCorruptedError",
    "ArchiveCompareError",
    "ZipArchiveReader",
    "ZipEntry",
    "register_codecs",
    "EntrySummary",
    "ArchiveSummary",
    "ArchiveDirectory",
    "UnduplicationParams",
    "UnduplicationConfig",
    "UnduplicationReport",
    "RunOutcome",
    "Notice",
    "NoticeLevel",
    "DisposalAction",
    "DisposalKind",
    "equal_entries",
    "equal_entry_contents",
    "contain_entries",
    "contain_entry_contents",
    "validate_archive",
    "ArchiveGroups",
    "ArchiveInclusions",
    "usefulness_key",
    "sort_by_usefulness",
    "parse_archive_name",
    "ArchiveScannerImpl",
    "AnalysisStage",
    "ComparisonStage",
    "InvalidArchives",
]
