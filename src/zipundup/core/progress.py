"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/progress.py
Progress plumbing for the two-pass, cost-weighted pipeline.

- ProgressCounter: local [0, 1] counter that never decreases and always ends at 1.0
  when used as a context manager (success, failure or early return).
- MonotonicProgress: outermost (value, context) reporter; guards the user callback.
- scale_progress: maps a sub-task's [0, 1] onto a slice of its parent's range.
"""

from typing import Callable, Optional

ValueCallback = Callable[[float], None]
ProgressCallback = Callable[[float, str], None]


def clamp(value: float) -> float:
    return min(1.0, max(0.0, value))


class ProgressCounter:
    """
    Accumulates progress of one operation.

    Usage:
        with ProgressCounter(progress) as counter:
            for item in items:
                ...
                counter.add_value(1 / len(items))
        # progress(1.0) has been reported here
    """

    def __init__(self, callback: Optional[ValueCallback] = None, initial: float = 0.0):
        self._callback = callback
        self._value = clamp(initial)
        self._reported: Optional[float] = None

    @property
    def value(self) -> float:
        return self._value

    def set_value(self, value: float) -> None:
        value = clamp(value)
        if value < self._value:
            return
        self._value = value
        self.report()

    def add_value(self, delta: float) -> None:
        self.set_value(self._value + delta)

    def report(self) -> None:
        if self._callback is None:
            return
        if self._reported is None or self._value > self._reported:
            self._reported = self._value
            self._callback(self._value)

    def finish(self) -> None:
        self.set_value(1.0)

    def __enter__(self) -> "ProgressCounter":
        self.report()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.finish()


class MonotonicProgress:
    """Forwards (value, context) pairs, holding the value when a lower one arrives."""

    def __init__(self, callback: Optional[ProgressCallback] = None):
        self._callback = callback
        self._last = 0.0

    @property
    def last(self) -> float:
        return self._last

    def __call__(self, value: float, context: str = "") -> None:
        value = max(self._last, clamp(value))
        self._last = value
        if self._callback is not None:
            self._callback(value, context)


def scale_progress(callback: ProgressCallback, offset: float, scale: float) -> ProgressCallback:
    """Returns a callback mapping [0, 1] onto [offset, offset + scale] of `callback`."""
    def converted(value: float, context: str = "") -> None:
        callback(offset + scale * clamp(value), context)
    return converted


def bind_context(callback: ProgressCallback, context: str) -> ValueCallback:
    """Turns a (value, context) callback into a value-only one."""
    def bound(value: float) -> None:
        callback(value, context)
    return bound
