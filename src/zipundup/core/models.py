"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/models.py
Data models and domain logic for archive comparison and disposal.
"""

import os
import time
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from zipundup.core.ordering import by_full_name, by_id, by_size_and_crc, path_key
from zipundup.core.reader import ZipArchiveReader, ZipEntry
from zipundup.utils.convert_utils import ConvertUtils


# =============================
# Enums
# =============================

class RunOutcome(Enum):
    """Final state of a run."""
    SUCCESS = "success"
    CANCELLED = "cancelled"
    FAILED = "failed"

    @property
    def exit_code(self) -> int:
        mapping = {
            RunOutcome.SUCCESS: 0,
            RunOutcome.CANCELLED: 130,
            RunOutcome.FAILED: 1,
        }
        return mapping[self]


class NoticeLevel(str, Enum):
    INFO = "info"
    ERROR = "error"


class DisposalKind(str, Enum):
    TRASHED = "trashed"
    RELOCATED = "relocated"


# =============================
# Configuration
# =============================

class UnduplicationConfig:
    ARCHIVE_EXTENSION = ".zip"
    DISPOSED_DIRECTORY_NAME = ".disposed"
    ANALYSIS_COST_PER_ARCHIVE = 10.0  # one archive analysis ~ ten pairwise comparisons
    COMPARISON_COST_PER_PAIR = 1.0
    STREAM_CHUNK_SIZE = 64 * 1024


# ======================
#  Core Data Models
# ======================

@dataclass(frozen=True)
class EntrySummary:
    """
    Immutable metadata of one file entry in one archive.
    Size must be strictly positive; empty entries make the archive unsupported.
    """
    id: int
    full_name: str
    size: int
    crc: int
    last_write_time_utc: Optional[datetime] = None

    def __post_init__(self):
        if self.size <= 0:
            raise ValueError(f"Entry size must be positive: \"{self.full_name}\" has {self.size} bytes")

    @classmethod
    def from_entry(cls, entry: ZipEntry) -> "EntrySummary":
        return cls(
            id=entry.id,
            full_name=entry.full_name,
            size=entry.size,
            crc=entry.crc,
            last_write_time_utc=entry.last_write_time_utc,
        )


@dataclass(frozen=True)
class ArchiveSummary:
    """
    Immutable summary of one archive: path, newest entry timestamp, and the three
    entry orderings, each sorted once and reused by every pairwise comparison.
    """
    path: str
    last_write_time: Optional[datetime]
    entries_by_id: Tuple[EntrySummary, ...]
    entries_by_full_name: Tuple[EntrySummary, ...]
    entries_by_size_and_crc: Tuple[EntrySummary, ...]
    path_key: str = field(init=False, compare=False, repr=False)

    def __post_init__(self):
        object.__setattr__(self, "path_key", path_key(self.path))

    @classmethod
    def from_entries(cls, path: str, entries: Sequence[EntrySummary]) -> "ArchiveSummary":
        timestamps = [e.last_write_time_utc for e in entries if e.last_write_time_utc is not None]
        return cls(
            path=str(path),
            last_write_time=max(timestamps) if timestamps else None,
            entries_by_id=tuple(sorted(entries, key=by_id)),
            entries_by_full_name=tuple(sorted(entries, key=by_full_name)),
            entries_by_size_and_crc=tuple(sorted(entries, key=by_size_and_crc)),
        )

    @classmethod
    def from_path(cls, path: str) -> "ArchiveSummary":
        """Reads the archive's central directory. Raises ArchiveReadError or ValueError."""
        with ZipArchiveReader(path) as reader:
            entries = [EntrySummary.from_entry(entry) for entry in reader.entries()]
        return cls.from_entries(path, entries)

    @property
    def entry_count(self) -> int:
        return len(self.entries_by_id)

    @property
    def name(self) -> str:
        return os.path.basename(self.path)

    def exists(self) -> bool:
        return os.path.isfile(self.path)

    def __repr__(self):
        return f"<ArchiveSummary path={self.path}, entries={self.entry_count}>"


@dataclass
class ArchiveDirectory:
    """Candidate archives sharing one containing directory."""
    directory: str
    files: List[str]

    @property
    def archive_count(self) -> int:
        return len(self.files)


@dataclass(frozen=True)
class Notice:
    level: NoticeLevel
    message: str


@dataclass(frozen=True)
class DisposalAction:
    kind: DisposalKind
    source: str
    destination: Optional[str] = None
    size: int = 0


# =============================
# Parameters
# =============================

@dataclass
class UnduplicationParams:
    """Parameters for an unduplication run with validation."""
    paths: List[str]
    strict: bool = False

    def __post_init__(self):
        if not self.paths:
            raise ValueError("At least one path must be specified")

        normalized = []
        for p in self.paths:
            p = str(p).strip()
            if not p:
                raise ValueError("Path cannot be empty")
            normalized.append(os.path.abspath(p))
        self.paths = normalized


# =============================
# Report
# =============================

class UnduplicationReport:
    """
    Notices, disposal actions and statistics collected during a run.
    Listeners receive every notice as soon as it is added.
    """

    def __init__(self):
        self.outcome: RunOutcome = RunOutcome.SUCCESS
        self.total_time: float = 0.0
        self.directories_processed: int = 0
        self.archives_analyzed: int = 0
        self.invalid_archives: List[str] = []
        self.notices: List[Notice] = []
        self.actions: List[DisposalAction] = []
        self._listeners: List[Callable[[Notice], None]] = []
        self._start_time = time.time()

    def add_listener(self, listener: Callable[[Notice], None]) -> None:
        """Adds a listener to receive notices as they are reported."""
        self._listeners.append(listener)

    def info(self, message: str) -> None:
        self._add_notice(Notice(NoticeLevel.INFO, message))

    def error(self, message: str) -> None:
        self._add_notice(Notice(NoticeLevel.ERROR, message))

    def _add_notice(self, notice: Notice) -> None:
        self.notices.append(notice)
        for listener in self._listeners:
            listener(notice)

    def add_action(self, action: DisposalAction) -> None:
        self.actions.append(action)

    def mark_invalid(self, path: str) -> None:
        if path not in self.invalid_archives:
            self.invalid_archives.append(path)

    def finish(self, outcome: RunOutcome) -> None:
        self.outcome = outcome
        self.total_time = time.time() - self._start_time

    @property
    def errors(self) -> List[Notice]:
        return [n for n in self.notices if n.level == NoticeLevel.ERROR]

    @property
    def trashed(self) -> List[DisposalAction]:
        return [a for a in self.actions if a.kind == DisposalKind.TRASHED]

    @property
    def relocated(self) -> List[DisposalAction]:
        return [a for a in self.actions if a.kind == DisposalKind.RELOCATED]

    @property
    def reclaimed_bytes(self) -> int:
        return sum(a.size for a in self.trashed)

    def counts(self) -> Dict[str, int]:
        return {
            "directories": self.directories_processed,
            "archives": self.archives_analyzed,
            "invalid": len(self.invalid_archives),
            "trashed": len(self.trashed),
            "relocated": len(self.relocated),
            "errors": len(self.errors),
        }

    def print_summary(self) -> str:
        counts = self.counts()
        lines = [
            "📊 Unduplication Statistics:",
            f"Total Execution Time: {self.total_time:.3f}s",
            f"Directories compared: {counts['directories']}",
            f"Archives analyzed: {counts['archives']}",
            f"Invalid archives: {counts['invalid']}",
            f"Duplicates moved to trash: {counts['trashed']}",
            f"Contained archives moved to {UnduplicationConfig.DISPOSED_DIRECTORY_NAME}: {counts['relocated']}",
            f"Errors: {counts['errors']}",
            f"Disk space reclaimed: {ConvertUtils.bytes_to_human(self.reclaimed_bytes)}",
        ]
        return "\n".join(lines)
