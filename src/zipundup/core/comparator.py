"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/comparator.py
Stateless archive comparison functions.

CHEAP TESTS (metadata only, cached summaries)
---------------------------------------------
equal_entries          : same entries by (name,) size and CRC, aligned by read order or by name
contain_entries        : greedy forward merge over (size, CRC)-sorted entries

EXPENSIVE TESTS (re-open archives, stream content)
--------------------------------------------------
equal_entry_contents   : byte-for-byte comparison of every aligned entry pair
contain_entry_contents : greedy merge where each (size, CRC) match is confirmed byte-for-byte
validate_archive       : streams every entry to detect corrupted archives

The expensive tests are only meaningful after the matching cheap test returned True.
Archives are opened fresh for every call so that at most two are open at a time.
"""

import logging
from collections import deque
from typing import Any, Callable, Optional, Sequence

from zipundup.core.errors import ArchiveCorruptedError
from zipundup.core.models import ArchiveSummary, UnduplicationConfig
from zipundup.core.ordering import (
    by_size_and_crc, equals_by_size_and_crc, strict_equality, strict_ordering
)
from zipundup.core.progress import ProgressCounter, ValueCallback
from zipundup.core.reader import ZipArchiveReader, ZipEntry

logger = logging.getLogger(__name__)

EntryMatcher = Callable[[Any, Any], bool]


# =============================
# Metadata tests
# =============================

def equal_entries(summary1: ArchiveSummary, summary2: ArchiveSummary, strict: bool) -> bool:
    """
    Strict: entries in read order must match by name, size and CRC.
    Non-strict: entries in name order must match by size and CRC.
    """
    entries1 = summary1.entries_by_id if strict else summary1.entries_by_full_name
    entries2 = summary2.entries_by_id if strict else summary2.entries_by_full_name
    if len(entries1) != len(entries2):
        return False

    equals = strict_equality(strict)
    return all(equals(x, y) for x, y in zip(entries1, entries2))


def contain_entries(container: ArchiveSummary, contained: ArchiveSummary) -> bool:
    """True if `container` has strictly more entries and a superset of `contained`'s (size, CRC)."""
    if container.entry_count <= contained.entry_count:
        return False
    return _greedy_contains(
        container.entries_by_size_and_crc,
        contained.entries_by_size_and_crc,
        equals_by_size_and_crc
    )


def _greedy_contains(
        entries1: Sequence[Any],
        entries2: Sequence[Any],
        matches: EntryMatcher,
        on_advance: Optional[Callable[[], None]] = None
) -> bool:
    """
    Single forward merge. Both sequences MUST be sorted with the same key
    (by_size_and_crc); a front of entries2 that is smaller than the front of
    entries1 can never be matched later.
    Stops as soon as entries1 has fewer entries left than entries2.
    """
    queue1 = deque(entries1)
    queue2 = deque(entries2)
    while queue2 and len(queue1) >= len(queue2):
        if matches(queue1[0], queue2[0]):
            queue2.popleft()
        queue1.popleft()
        if on_advance:
            on_advance()
    return not queue2


# =============================
# Content tests
# =============================

def equal_entry_contents(
        summary1: ArchiveSummary,
        summary2: ArchiveSummary,
        strict: bool,
        progress: Optional[ValueCallback] = None
) -> bool:
    """
    Re-reads both archives and compares every aligned entry pair byte-for-byte.
    Progress is the fraction of compared bytes.
    """
    with ProgressCounter(progress) as counter:
        with ZipArchiveReader(summary1.path) as reader1, ZipArchiveReader(summary2.path) as reader2:
            key = strict_ordering(strict)
            entries1 = sorted(reader1.entries(), key=key)
            entries2 = sorted(reader2.entries(), key=key)
            if len(entries1) != len(entries2):
                logger.debug(f"Entry count changed since analysis: {summary1.path}, {summary2.path}")
                return False

            total_size = sum(entry.size for entry in entries1)
            equals = strict_equality(strict)

            def advance(byte_count: int) -> None:
                if total_size > 0:
                    counter.add_value(byte_count / total_size)

            for entry1, entry2 in zip(entries1, entries2):
                if not _entry_contents_equal(reader1, entry1, reader2, entry2, equals, advance):
                    return False
            return True


def contain_entry_contents(
        container: ArchiveSummary,
        contained: ArchiveSummary,
        progress: Optional[ValueCallback] = None
) -> bool:
    """
    Same merge as contain_entries over live entries, with every candidate match
    confirmed by content. Progress is the fraction of container entries consumed.
    """
    if container.entry_count <= contained.entry_count:
        return False

    with ProgressCounter(progress) as counter:
        with ZipArchiveReader(container.path) as reader1, ZipArchiveReader(contained.path) as reader2:
            entries1 = sorted(reader1.entries(), key=by_size_and_crc)
            entries2 = sorted(reader2.entries(), key=by_size_and_crc)
            if len(entries1) <= len(entries2):
                return False

            total_count = len(entries1)

            def matches(entry1: ZipEntry, entry2: ZipEntry) -> bool:
                return _entry_contents_equal(reader1, entry1, reader2, entry2, equals_by_size_and_crc)

            return _greedy_contains(
                entries1,
                entries2,
                matches,
                on_advance=lambda: counter.add_value(1 / total_count)
            )


def _entry_contents_equal(
        reader1: ZipArchiveReader,
        entry1: ZipEntry,
        reader2: ZipArchiveReader,
        entry2: ZipEntry,
        metadata_equals: EntryMatcher,
        advance: Optional[Callable[[int], None]] = None
) -> bool:
    """Metadata check first; equal metadata is confirmed by streaming both entries."""
    if not metadata_equals(entry1, entry2):
        return False
    with reader1.open_content(entry1) as stream1, reader2.open_content(entry2) as stream2:
        return stream_bytes_equal(stream1, stream2, advance)


def stream_bytes_equal(
        stream1,
        stream2,
        advance: Optional[Callable[[int], None]] = None,
        chunk_size: int = UnduplicationConfig.STREAM_CHUNK_SIZE
) -> bool:
    """Compares two readable streams to the end; `advance` receives compared byte counts."""
    while True:
        data1 = _read_exact(stream1, chunk_size)
        data2 = _read_exact(stream2, chunk_size)
        if data1 != data2:
            return False
        if not data1:
            return True
        if advance:
            advance(len(data1))


def _read_exact(stream, size: int) -> bytes:
    """Reads up to `size` bytes, fewer only at end of stream."""
    chunks = []
    remaining = size
    while remaining > 0:
        data = stream.read(remaining)
        if not data:
            break
        chunks.append(data)
        remaining -= len(data)
    return b"".join(chunks)


# =============================
# Validation
# =============================

def validate_archive(path: str) -> None:
    """
    Streams the content of every entry; zipfile verifies each CRC at end of stream.
    Raises ArchiveCorruptedError if anything fails, whatever the decoder raised.
    """
    try:
        with ZipArchiveReader(path) as reader:
            for entry in reader.entries():
                with reader.open_content(entry) as stream:
                    while stream.read(UnduplicationConfig.STREAM_CHUNK_SIZE):
                        pass
    except Exception as e:
        raise ArchiveCorruptedError(f"ZIP archive is corrupted: \"{path}\"", path) from e
    logger.debug(f"Archive validated: {path}")
