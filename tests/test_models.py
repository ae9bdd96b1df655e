"""
Tests for data models: entry/archive summaries, parameters and the run report.
"""
from datetime import datetime, timezone

import pytest

from zipundup.core.errors import ArchiveReadError
from zipundup.core.models import (
    ArchiveSummary,
    DisposalAction,
    DisposalKind,
    EntrySummary,
    Notice,
    NoticeLevel,
    RunOutcome,
    UnduplicationParams,
    UnduplicationReport,
)


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


class TestEntrySummary:

    def test_rejects_empty_entry(self):
        """Zero-length entries are unsupported input."""
        with pytest.raises(ValueError, match="must be positive"):
            EntrySummary(id=0, full_name="empty.txt", size=0, crc=0)

    def test_rejects_negative_size(self):
        with pytest.raises(ValueError):
            EntrySummary(id=0, full_name="bad.txt", size=-1, crc=0)

    def test_is_immutable(self):
        entry = EntrySummary(id=0, full_name="a.txt", size=1, crc=1)
        with pytest.raises(Exception):
            entry.size = 2


class TestArchiveSummary:

    def test_views_are_sorted_once(self):
        entries = [
            EntrySummary(id=0, full_name="b.txt", size=20, crc=1),
            EntrySummary(id=1, full_name="A.txt", size=10, crc=2),
            EntrySummary(id=2, full_name="c.txt", size=10, crc=1),
        ]
        summary = ArchiveSummary.from_entries("x.zip", entries)

        assert [e.id for e in summary.entries_by_id] == [0, 1, 2]
        assert [e.full_name for e in summary.entries_by_full_name] == ["A.txt", "b.txt", "c.txt"]
        assert [(e.size, e.crc) for e in summary.entries_by_size_and_crc] == [(10, 1), (10, 2), (20, 1)]
        assert summary.entry_count == 3

    def test_last_write_time_is_max_of_present_timestamps(self):
        entries = [
            EntrySummary(id=0, full_name="a", size=1, crc=1, last_write_time_utc=utc(2020, 1, 1)),
            EntrySummary(id=1, full_name="b", size=1, crc=1),
            EntrySummary(id=2, full_name="c", size=1, crc=1, last_write_time_utc=utc(2021, 6, 1)),
        ]
        summary = ArchiveSummary.from_entries("x.zip", entries)
        assert summary.last_write_time == utc(2021, 6, 1)

    def test_last_write_time_absent_without_timestamps(self):
        summary = ArchiveSummary.from_entries("x.zip", [EntrySummary(id=0, full_name="a", size=1, crc=1)])
        assert summary.last_write_time is None

    def test_path_key_is_case_insensitive(self, tmp_path):
        s1 = ArchiveSummary.from_entries(str(tmp_path / "Data.ZIP"), [])
        s2 = ArchiveSummary.from_entries(str(tmp_path / "data.zip"), [])
        assert s1.path_key == s2.path_key

    def test_from_path_reads_entries_and_skips_directories(self, tmp_path, make_zip):
        path = make_zip(tmp_path / "a.zip", [
            ("docs/", b""),
            ("docs/readme.txt", b"hello"),
            ("main.py", b"print(1)"),
        ])
        summary = ArchiveSummary.from_path(str(path))

        assert summary.entry_count == 2
        assert [e.full_name for e in summary.entries_by_id] == ["docs/readme.txt", "main.py"]
        # id keeps the central directory position, the directory entry included
        assert [e.id for e in summary.entries_by_id] == [1, 2]
        assert summary.last_write_time is not None

    def test_from_path_fails_on_empty_entry(self, tmp_path, make_zip):
        """One empty entry makes the whole archive fail analysis."""
        path = make_zip(tmp_path / "a.zip", [("a.txt", b"data"), ("empty.txt", b"")])
        with pytest.raises(ValueError):
            ArchiveSummary.from_path(str(path))

    def test_from_path_fails_on_garbage(self, tmp_path):
        path = tmp_path / "broken.zip"
        path.write_bytes(b"this is not a zip archive")
        with pytest.raises(ArchiveReadError) as exc_info:
            ArchiveSummary.from_path(str(path))
        assert exc_info.value.path == str(path)

    def test_exists_reflects_disk_state(self, tmp_path, make_zip):
        path = make_zip(tmp_path / "a.zip", [("a.txt", b"data")])
        summary = ArchiveSummary.from_path(str(path))
        assert summary.exists()
        path.unlink()
        assert not summary.exists()


class TestUnduplicationParams:

    def test_requires_paths(self):
        with pytest.raises(ValueError, match="At least one path"):
            UnduplicationParams(paths=[])

    def test_rejects_blank_path(self):
        with pytest.raises(ValueError, match="empty"):
            UnduplicationParams(paths=["  "])

    def test_normalizes_to_absolute(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        params = UnduplicationParams(paths=["archives"], strict=True)
        assert params.paths == [str(tmp_path / "archives")]
        assert params.strict is True


class TestRunOutcome:

    @pytest.mark.parametrize("outcome, code", [
        (RunOutcome.SUCCESS, 0),
        (RunOutcome.CANCELLED, 130),
        (RunOutcome.FAILED, 1),
    ])
    def test_exit_codes(self, outcome, code):
        assert outcome.exit_code == code


class TestUnduplicationReport:

    def test_listeners_receive_notices_in_order(self):
        report = UnduplicationReport()
        received = []
        report.add_listener(received.append)

        report.info("first")
        report.error("second")

        assert received == [Notice(NoticeLevel.INFO, "first"), Notice(NoticeLevel.ERROR, "second")]
        assert report.errors == [Notice(NoticeLevel.ERROR, "second")]

    def test_reclaimed_bytes_counts_trashed_only(self):
        report = UnduplicationReport()
        report.add_action(DisposalAction(DisposalKind.TRASHED, "a.zip", None, 100))
        report.add_action(DisposalAction(DisposalKind.TRASHED, "b.zip", None, 50))
        report.add_action(DisposalAction(DisposalKind.RELOCATED, "c.zip", ".disposed/c.zip", 70))

        assert report.reclaimed_bytes == 150
        assert len(report.trashed) == 2
        assert len(report.relocated) == 1

    def test_mark_invalid_is_idempotent(self):
        report = UnduplicationReport()
        report.mark_invalid("a.zip")
        report.mark_invalid("a.zip")
        assert report.invalid_archives == ["a.zip"]

    def test_finish_sets_outcome_and_summary(self):
        report = UnduplicationReport()
        report.archives_analyzed = 3
        report.finish(RunOutcome.CANCELLED)

        assert report.outcome == RunOutcome.CANCELLED
        assert report.total_time >= 0
        summary = report.print_summary()
        assert "Archives analyzed: 3" in summary
        assert "Disk space reclaimed: 0.00B" in summary
