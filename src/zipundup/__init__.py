"""
ZipUndup: removes duplicate and contained ZIP archives.

Core features:
- Archives in the same folder are compared entry by entry: metadata first (size, CRC, name),
  then byte-for-byte content
- Duplicates: the most useful copy is kept, the others go to the system trash (via send2trash)
- Contained archives (every entry also present in a bigger archive) are moved into ".disposed"
- Cooperative cancellation and monotonic progress reporting for CLI and library callers
"""
from pathlib import Path

# Get version
try:
    from importlib.metadata import version as _version
    __version__ = _version("zipundup")
except Exception:
    try:
        import tomllib  # Python 3.11+
    except ImportError:
        import tomli as tomllib  # Python < 3.11: pip install tomli

    with open(Path(__file__).resolve().parents[2] / "pyproject.toml", "rb") as f:
        __version__ = tomllib.load(f)["project"]["version"]

# Public API: only what users should import directly
from zipundup.commands import UnduplicationCommand
from zipundup.core import (
    UnduplicationParams, UnduplicationReport, RunOutcome, Notice, NoticeLevel,
    DisposalAction, DisposalKind, ArchiveSummary, EntrySummary
)
from zipundup.utils.convert_utils import ConvertUtils
from zipundup.services import DisposalService
from zipundup.services.file_service import FileService

__all__ = [
    "UnduplicationCommand",
    "UnduplicationParams",
    "UnduplicationReport",
    "RunOutcome",
    "Notice",
    "NoticeLevel",
    "DisposalAction",
    "DisposalKind",
    "ArchiveSummary",
    "EntrySummary",
    "ConvertUtils",
    "DisposalService",
    "FileService",
    "__version__",
]
