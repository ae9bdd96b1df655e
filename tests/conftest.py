"""
Shared fixtures for archive comparison tests.
Builds real ZIP archives in isolated temporary directories with controlled
entry order, timestamps and content.
"""
import pytest
import random
import struct
import zipfile
from pathlib import Path
from typing import Sequence, Tuple, Union
import sys

# Add src to sys.path so 'zipundup' is importable without installation
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root / "src"))

DEFAULT_DATE_TIME = (2020, 1, 1, 12, 0, 0)

EntrySpec = Union[Tuple[str, bytes], Tuple[str, bytes, tuple]]


def write_zip(
        path: Path,
        entries: Sequence[EntrySpec],
        date_time: tuple = DEFAULT_DATE_TIME,
        compression: int = zipfile.ZIP_DEFLATED
) -> Path:
    """
    Writes `entries` in the given order (= central directory order).
    Each entry is (name, data) or (name, data, date_time); names ending with "/" are directories.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(path, "w") as archive:
        for entry in entries:
            name, data = entry[0], entry[1]
            info = zipfile.ZipInfo(name, date_time=entry[2] if len(entry) > 2 else date_time)
            info.compress_type = zipfile.ZIP_STORED if name.endswith("/") else compression
            archive.writestr(info, data)
    return path


@pytest.fixture
def make_zip():
    """Factory fixture: make_zip(path, entries, date_time=..., compression=...) -> Path."""
    return write_zip


@pytest.fixture
def corrupt_copy():
    """
    Factory fixture: writes a STORED archive, then flips bytes of one entry's data.
    The central directory stays valid (analysis succeeds) but streaming fails the CRC check.
    """
    def factory(path: Path, entries: Sequence[EntrySpec], damaged: bytes, date_time: tuple = DEFAULT_DATE_TIME):
        write_zip(path, entries, date_time=date_time, compression=zipfile.ZIP_STORED)
        raw = path.read_bytes()
        assert raw.count(damaged) == 1, "damaged content must appear exactly once"
        path.write_bytes(raw.replace(damaged, damaged.swapcase()))
        return path
    return factory


def noise(size: int, seed: int = 0) -> bytes:
    """Deterministic incompressible bytes: compressed data is about as long as the input."""
    return random.Random(seed).getrandbits(8 * size).to_bytes(size, "little")


def text_lines(count: int) -> bytes:
    """Compressible text without long repeats (no match reaches the 258-byte deflate maximum)."""
    return b"".join(b"line %05d of the sample\n" % i for i in range(count))


@pytest.fixture
def damage_entry():
    """
    Factory fixture: damage_entry(path, start, stop, index=0) flips bytes [start, stop)
    of the compressed data of one entry. Sizes and CRCs in the headers stay untouched.
    """
    def factory(path: Path, start: int, stop: int, index: int = 0) -> Path:
        with zipfile.ZipFile(path) as archive:
            info = archive.infolist()[index]
        assert stop <= info.compress_size, "damage must stay inside the compressed data"

        raw = bytearray(path.read_bytes())
        name_length, extra_length = struct.unpack_from("<HH", raw, info.header_offset + 26)
        data_offset = info.header_offset + 30 + name_length + extra_length
        for position in range(data_offset + start, data_offset + stop):
            raw[position] ^= 0xFF
        path.write_bytes(bytes(raw))
        return path
    return factory


@pytest.fixture
def rewrite_method():
    """
    Factory fixture: rewrite_method(path, method) relabels every entry's compression method
    in both the local and the central headers. A deflate stream without 258-byte matches
    is also a valid Deflate64 stream, so relabeled text_lines() archives stay readable.
    """
    def factory(path: Path, method: int) -> Path:
        raw = bytearray(path.read_bytes())
        end_of_directory = raw.rfind(b"PK\x05\x06")
        count, _, offset = struct.unpack_from("<HII", raw, end_of_directory + 10)
        for _ in range(count):
            struct.pack_into("<H", raw, offset + 10, method)
            (local_offset,) = struct.unpack_from("<I", raw, offset + 42)
            struct.pack_into("<H", raw, local_offset + 8, method)
            name_length, extra_length, comment_length = struct.unpack_from("<HHH", raw, offset + 28)
            offset += 46 + name_length + extra_length + comment_length
        path.write_bytes(bytes(raw))
        return path
    return factory
