"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/errors.py
Error kinds raised by the archive comparison engine.

Only read/compare failures are recovered locally (the archive or pair is excluded
and the run continues). Anything else is unexpected and propagates to the command.
"""


class ZipUndupError(RuntimeError):
    """Base class for all recoverable engine errors."""


class ArchiveReadError(ZipUndupError):
    """An archive cannot be opened, enumerated or streamed."""

    def __init__(self, message: str, path: str = ""):
        super().__init__(message)
        self.path = path


class ArchiveCorruptedError(ArchiveReadError):
    """Full validation re-read of an archive failed."""


class ArchiveCompareError(ZipUndupError):
    """A pairwise comparison failed mid-operation."""

    def __init__(self, message: str, path1: str = "", path2: str = ""):
        super().__init__(message)
        self.path1 = path1
        self.path2 = path2
