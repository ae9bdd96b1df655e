"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/reader.py
Thin ZIP container reader on top of the standard `zipfile` module.

Responsibilities:
- One-time, idempotent registration of the compression codecs the engine accepts
- Enumeration of file entries (directories filtered out) with a stable id
- UTC last-write time extraction (NTFS / extended-timestamp extra fields, DOS time fallback)
- Content streaming with every low-level failure translated into ArchiveReadError
"""

import importlib
import logging
import struct
import zipfile
import zlib
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

from zipundup.core.errors import ArchiveReadError

try:
    import lzma
except ImportError:  # interpreter built without liblzma
    lzma = None

logger = logging.getLogger(__name__)

# Everything zipfile (and the codecs below it) raises for damaged or unsupported input.
# bz2 reports corrupt streams as OSError, lzma has an exception type of its own.
READ_ERRORS = (
    OSError,
    zipfile.BadZipFile,
    zipfile.LargeZipFile,
    NotImplementedError,
    RuntimeError,
    zlib.error,
    EOFError,
    ValueError,
    struct.error,
) + ((lzma.LZMAError,) if lzma is not None else ())

ZIP_DEFLATED64 = 9

_EXTRA_NTFS = 0x000A
_EXTRA_EXTENDED_TIMESTAMP = 0x5455
_FILETIME_EPOCH = datetime(1601, 1, 1, tzinfo=timezone.utc)

# (method, display name, module that must be importable)
_CODECS = (
    (zipfile.ZIP_STORED, "stored", None),
    (zipfile.ZIP_DEFLATED, "deflate", "zlib"),
    (zipfile.ZIP_BZIP2, "bzip2", "bz2"),
    (zipfile.ZIP_LZMA, "lzma", "lzma"),
    # importing zipfile_deflate64 patches zipfile so it can decode method 9
    (ZIP_DEFLATED64, "deflate64", "zipfile_deflate64"),
)

_registered_codecs: Dict[int, str] = {}


def register_codecs() -> Dict[int, str]:
    """
    Enables every compression method the running interpreter can decode.
    Safe to call any number of times; only the first call does work.
    Returns a copy of the registry (method id -> name).
    """
    if _registered_codecs:
        return dict(_registered_codecs)

    for method, name, module_name in _CODECS:
        if module_name is not None:
            try:
                importlib.import_module(module_name)
            except ImportError:
                logger.warning(f"Compression method '{name}' is unavailable in this interpreter")
                continue
        _registered_codecs[method] = name

    logger.debug(f"Registered ZIP codecs: {', '.join(_registered_codecs.values())}")
    return dict(_registered_codecs)


def is_codec_registered(method: int) -> bool:
    return method in _registered_codecs


@dataclass(frozen=True)
class ZipEntry:
    """A live file entry of an open archive."""
    id: int
    full_name: str
    size: int
    crc: int
    compress_type: int
    last_write_time_utc: Optional[datetime] = None
    info: Optional[zipfile.ZipInfo] = field(default=None, compare=False, repr=False)


class EntryContentStream:
    """Readable stream over one entry's decompressed content."""

    def __init__(self, raw, archive_path: str, entry: ZipEntry):
        self._raw = raw
        self._archive_path = archive_path
        self._entry = entry

    def read(self, size: int = -1) -> bytes:
        try:
            return self._raw.read(size)
        except ArchiveReadError:
            raise
        except READ_ERRORS as e:
            raise ArchiveReadError(
                f"Failed to read entry \"{self._entry.full_name}\" of \"{self._archive_path}\": {e}",
                self._archive_path
            ) from e

    def close(self) -> None:
        self._raw.close()

    def __enter__(self) -> "EntryContentStream":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class ZipArchiveReader:
    """
    Context manager around zipfile.ZipFile.

    Usage:
        with ZipArchiveReader(path) as reader:
            for entry in reader.entries():
                with reader.open_content(entry) as stream:
                    data = stream.read(1024)
    """

    def __init__(self, path: str):
        self.path = str(path)
        self._zip: Optional[zipfile.ZipFile] = None

    def __enter__(self) -> "ZipArchiveReader":
        register_codecs()
        try:
            self._zip = zipfile.ZipFile(self.path, "r")
        except READ_ERRORS as e:
            raise ArchiveReadError(f"Failed to open zip archive \"{self.path}\": {e}", self.path) from e
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self._zip is not None:
            self._zip.close()
            self._zip = None

    def entries(self) -> List[ZipEntry]:
        """File entries in central directory order; id is the central directory index."""
        if self._zip is None:
            raise RuntimeError("Reader is not open")

        result = []
        try:
            for index, info in enumerate(self._zip.infolist()):
                if info.is_dir():
                    continue
                result.append(ZipEntry(
                    id=index,
                    full_name=info.filename,
                    size=info.file_size,
                    crc=info.CRC,
                    compress_type=info.compress_type,
                    last_write_time_utc=_last_write_time_utc(info),
                    info=info,
                ))
        except READ_ERRORS as e:
            raise ArchiveReadError(f"Failed to enumerate entries of \"{self.path}\": {e}", self.path) from e
        return result

    def open_content(self, entry: ZipEntry) -> EntryContentStream:
        if self._zip is None:
            raise RuntimeError("Reader is not open")
        if not is_codec_registered(entry.compress_type):
            raise ArchiveReadError(
                f"Unsupported compression method {entry.compress_type} for entry "
                f"\"{entry.full_name}\" of \"{self.path}\"",
                self.path
            )
        if entry.info is not None and entry.info.flag_bits & 0x1:
            raise ArchiveReadError(f"Encrypted entry \"{entry.full_name}\" of \"{self.path}\"", self.path)

        try:
            raw = self._zip.open(entry.info if entry.info is not None else entry.full_name, "r")
        except READ_ERRORS as e:
            raise ArchiveReadError(
                f"Failed to open entry \"{entry.full_name}\" of \"{self.path}\": {e}", self.path
            ) from e
        return EntryContentStream(raw, self.path, entry)


# =============================
# Timestamp helpers
# =============================

def _iter_extra_fields(extra: bytes):
    offset = 0
    while offset + 4 <= len(extra):
        header_id, size = struct.unpack_from("<HH", extra, offset)
        offset += 4
        yield header_id, extra[offset:offset + size]
        offset += size


def _ntfs_mtime(data: bytes) -> Optional[datetime]:
    offset = 4  # reserved
    while offset + 4 <= len(data):
        tag, size = struct.unpack_from("<HH", data, offset)
        offset += 4
        if tag == 0x0001 and size >= 8 and offset + 8 <= len(data):
            (filetime,) = struct.unpack_from("<Q", data, offset)
            return _FILETIME_EPOCH + timedelta(microseconds=filetime // 10)
        offset += size
    return None


def _extended_mtime(data: bytes) -> Optional[datetime]:
    if len(data) >= 5 and data[0] & 0x1:
        (seconds,) = struct.unpack_from("<i", data, 1)
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    return None


def _last_write_time_utc(info: zipfile.ZipInfo) -> Optional[datetime]:
    """
    Prefers the UTC timestamps of the NTFS and extended-timestamp extra fields.
    Falls back to the DOS date/time, which zip writers store in local time.
    """
    try:
        for header_id, data in _iter_extra_fields(info.extra or b""):
            if header_id == _EXTRA_NTFS:
                value = _ntfs_mtime(data)
            elif header_id == _EXTRA_EXTENDED_TIMESTAMP:
                value = _extended_mtime(data)
            else:
                continue
            if value is not None:
                return value
    except (struct.error, OverflowError, OSError, ValueError):
        logger.debug(f"Ignoring malformed timestamp extra field of \"{info.filename}\"")

    try:
        return datetime(*info.date_time).astimezone(timezone.utc)
    except (ValueError, OverflowError, OSError):
        return None
