"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/ordering.py
Pure ordering logic, zero dependencies outside the standard library.

Entry orderings work on anything exposing `id`, `full_name`, `size` and `crc`, so the
cached EntrySummary views and the live reader entries are always sorted with the SAME
key. The greedy containment merge relies on both sides sharing one key function.

Usefulness ordering (ascending, first element is kept):
1. Older last write time first; archives without any timestamp go last
2. Longer file stem (after stripping a trailing " (N)" counter) first
3. Lower counter first; no counter counts as -1
"""

import os
import re
from datetime import datetime, timezone
from typing import Any, Iterable, List, Tuple

_ARCHIVE_NAME_PATTERN = re.compile(r"^(?P<body>.*?)( +\((?P<number>\d+)\))?$", re.DOTALL)
_NO_TIMESTAMP = datetime.min.replace(tzinfo=timezone.utc)


def fold_name(name: str) -> str:
    """Case-insensitive comparison form of an entry name or path."""
    return name.casefold()


def path_key(path: str) -> str:
    """Identity key of a filesystem path: absolute, normalized, case-insensitive."""
    return fold_name(os.path.normpath(os.path.abspath(str(path))))


# =============================
# Entry orderings
# =============================

def by_id(entry: Any) -> Tuple[int]:
    return (entry.id,)


def by_full_name(entry: Any) -> Tuple[str, int]:
    return (fold_name(entry.full_name), entry.id)


def by_size_and_crc(entry: Any) -> Tuple[int, int, str, int]:
    return (entry.size, entry.crc, fold_name(entry.full_name), entry.id)


def strict_ordering(strict: bool):
    """Alignment key for equality tests: read order when strict, entry path otherwise."""
    return by_id if strict else by_full_name


def equals_by_size_and_crc(entry1: Any, entry2: Any) -> bool:
    return entry1.size == entry2.size and entry1.crc == entry2.crc


def equals_by_full_name_and_size_and_crc(entry1: Any, entry2: Any) -> bool:
    return (
        equals_by_size_and_crc(entry1, entry2)
        and fold_name(entry1.full_name) == fold_name(entry2.full_name)
    )


def strict_equality(strict: bool):
    """Metadata check for aligned pairs; non-strict pairs are already aligned by name."""
    return equals_by_full_name_and_size_and_crc if strict else equals_by_size_and_crc


# =============================
# Archive names and usefulness
# =============================

def parse_archive_name(file_name: str) -> Tuple[str, int, str]:
    """
    Splits "report (3).zip" into ("report", 3, ".zip").
    Names without a counter yield -1.
    """
    stem, extension = os.path.splitext(file_name)
    match = _ARCHIVE_NAME_PATTERN.match(stem)
    body = match.group("body")
    number = match.group("number")
    return body, int(number) if number is not None else -1, extension


def usefulness_key(summary: Any) -> Tuple[bool, datetime, int, int]:
    """Sort key over archive summaries; the minimum is the archive worth keeping."""
    body, number, _ = parse_archive_name(os.path.basename(summary.path))
    timestamp = summary.last_write_time
    return (
        timestamp is None,
        timestamp if timestamp is not None else _NO_TIMESTAMP,
        -len(body),
        number,
    )


def sort_by_usefulness(summaries: Iterable[Any]) -> List[Any]:
    return sorted(summaries, key=usefulness_key)
