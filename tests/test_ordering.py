"""
Tests for entry orderings, archive name parsing and the usefulness ranking
that decides which duplicate survives.
"""
from datetime import datetime, timezone
from types import SimpleNamespace

import pytest

from zipundup.core.models import EntrySummary
from zipundup.core.ordering import (
    by_full_name,
    by_id,
    by_size_and_crc,
    equals_by_full_name_and_size_and_crc,
    equals_by_size_and_crc,
    parse_archive_name,
    path_key,
    sort_by_usefulness,
    usefulness_key,
)


def archive(path: str, last_write_time=None):
    return SimpleNamespace(path=path, last_write_time=last_write_time)


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


class TestEntryOrderings:

    def test_by_full_name_is_case_insensitive_with_id_tiebreak(self):
        entries = [
            EntrySummary(id=2, full_name="readme.TXT", size=1, crc=1),
            EntrySummary(id=0, full_name="Zeta", size=1, crc=1),
            EntrySummary(id=1, full_name="README.txt", size=1, crc=1),
        ]
        assert [e.id for e in sorted(entries, key=by_full_name)] == [1, 2, 0]

    def test_by_size_and_crc_full_tiebreak_chain(self):
        entries = [
            EntrySummary(id=3, full_name="b", size=5, crc=9),
            EntrySummary(id=2, full_name="a", size=5, crc=9),
            EntrySummary(id=1, full_name="a", size=5, crc=9),
            EntrySummary(id=0, full_name="z", size=5, crc=1),
            EntrySummary(id=4, full_name="y", size=1, crc=100),
        ]
        assert [e.id for e in sorted(entries, key=by_size_and_crc)] == [4, 0, 1, 2, 3]

    def test_by_id(self):
        entries = [EntrySummary(id=i, full_name="x", size=1, crc=1) for i in (3, 1, 2)]
        assert [e.id for e in sorted(entries, key=by_id)] == [1, 2, 3]

    def test_equality_helpers(self):
        e1 = EntrySummary(id=0, full_name="Dir/File.txt", size=10, crc=7)
        e2 = EntrySummary(id=5, full_name="dir/file.txt", size=10, crc=7)
        e3 = EntrySummary(id=0, full_name="other.txt", size=10, crc=7)

        assert equals_by_full_name_and_size_and_crc(e1, e2)
        assert not equals_by_full_name_and_size_and_crc(e1, e3)
        assert equals_by_size_and_crc(e1, e3)


class TestParseArchiveName:

    @pytest.mark.parametrize("file_name, expected", [
        ("report.zip", ("report", -1, ".zip")),
        ("report (2).zip", ("report", 2, ".zip")),
        ("report  (15).ZIP", ("report", 15, ".ZIP")),
        ("report(2).zip", ("report(2)", -1, ".zip")),
        ("report (x).zip", ("report (x)", -1, ".zip")),
        ("a (1) (3).zip", ("a (1)", 3, ".zip")),
    ])
    def test_counter_suffix(self, file_name, expected):
        assert parse_archive_name(file_name) == expected


class TestUsefulness:

    def test_older_timestamp_kept_first(self):
        """Scenario: a.zip (2020) and a (2).zip (2021): a.zip is kept."""
        old = archive("/d/a.zip", utc(2020, 1, 1))
        new = archive("/d/a (2).zip", utc(2021, 1, 1))
        assert sort_by_usefulness([new, old])[0] is old

    def test_absent_timestamp_ranks_last(self):
        dated = archive("/d/b.zip", utc(2030, 1, 1))
        undated = archive("/d/a.zip", None)
        assert sort_by_usefulness([undated, dated]) == [dated, undated]

    def test_longer_stripped_name_first(self):
        ts = utc(2020, 1, 1)
        short = archive("/d/data.zip", ts)
        long = archive("/d/data-full (4).zip", ts)
        assert sort_by_usefulness([short, long])[0] is long

    def test_lower_counter_first(self):
        ts = utc(2020, 1, 1)
        plain = archive("/d/data.zip", ts)
        second = archive("/d/data (2).zip", ts)
        third = archive("/d/data (3).zip", ts)
        assert sort_by_usefulness([third, second, plain]) == [plain, second, third]

    def test_ranking_is_total_for_distinct_names(self):
        ts = utc(2020, 1, 1)
        members = [archive(f"/d/{name}", ts) for name in ("x.zip", "x (2).zip", "xy.zip", "x (10).zip")]
        keys = [usefulness_key(m) for m in members]
        assert len(set(keys)) == len(keys)


def test_path_key_normalizes_and_folds_case(tmp_path):
    assert path_key(str(tmp_path / "Sub" / ".." / "A.zip")) == path_key(str(tmp_path / "a.zip"))
