"""
Tests for progress plumbing: monotonic counters, scoped completion and range scaling.
"""
import pytest

from zipundup.core.progress import MonotonicProgress, ProgressCounter, bind_context, scale_progress


class TestProgressCounter:

    def test_never_decreases(self):
        values = []
        counter = ProgressCounter(values.append)
        counter.set_value(0.5)
        counter.set_value(0.2)
        counter.add_value(0.1)

        assert values == [0.5, 0.6]
        assert counter.value == 0.6

    def test_clamps_to_unit_range(self):
        values = []
        counter = ProgressCounter(values.append)
        counter.add_value(5)
        assert values == [1.0]

    def test_scope_reports_one_on_success(self):
        values = []
        with ProgressCounter(values.append) as counter:
            counter.set_value(0.3)
        assert values == [0.0, 0.3, 1.0]

    def test_scope_reports_one_on_failure(self):
        values = []
        with pytest.raises(RuntimeError):
            with ProgressCounter(values.append):
                raise RuntimeError("boom")
        assert values[-1] == 1.0

    def test_no_duplicate_reports(self):
        values = []
        with ProgressCounter(values.append) as counter:
            counter.set_value(1.0)
        assert values == [0.0, 1.0]

    def test_without_callback(self):
        with ProgressCounter() as counter:
            counter.add_value(0.5)
        assert counter.value == 1.0


class TestMonotonicProgress:

    def test_holds_highest_value(self):
        received = []
        progress = MonotonicProgress(lambda value, context: received.append((value, context)))
        progress(0.4, "a")
        progress(0.1, "b")
        progress(0.9, "c")

        assert received == [(0.4, "a"), (0.4, "b"), (0.9, "c")]
        assert progress.last == 0.9


class TestConverters:

    def test_scale_progress_maps_onto_slice(self):
        received = []
        child = scale_progress(lambda value, context: received.append(value), 0.25, 0.5)
        child(0.0)
        child(0.5)
        child(1.0)
        assert received == [0.25, 0.5, 0.75]

    def test_nested_scaling(self):
        received = []
        outer = scale_progress(lambda value, context: received.append(value), 0.5, 0.5)
        inner = scale_progress(outer, 0.5, 0.5)
        inner(1.0)
        assert received == [1.0]

    def test_bind_context(self):
        received = []
        bound = bind_context(lambda value, context: received.append((value, context)), "comparing")
        bound(0.5)
        assert received == [(0.5, "comparing")]
