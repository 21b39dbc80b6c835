"""Clock collaborators.

`now()` is monotonic and only meaningful as a difference (durations).
`utcnow()` is wall-clock time used for run metadata.
"""

from __future__ import annotations

import time
from datetime import UTC, datetime, timedelta
from typing import Protocol

DEFAULT_FIXED_START = datetime(2025, 1, 1, tzinfo=UTC)


class Clock(Protocol):
    def now(self) -> float: ...

    def utcnow(self) -> datetime: ...


class SystemClock:
    def now(self) -> float:
        return time.monotonic()

    def utcnow(self) -> datetime:
        return datetime.now(tz=UTC)


class FixedClock:
    """Deterministic clock for tests and replayable runs.

    Every `now()` call returns the current tick and then advances by `step_seconds`,
    so a run that reads the clock twice reports a duration of exactly one step.
    """

    def __init__(
        self, start: datetime = DEFAULT_FIXED_START, step_seconds: float = 1.0
    ) -> None:
        self._start = start
        self._step = step_seconds
        self._elapsed = 0.0

    def now(self) -> float:
        value = self._elapsed
        self._elapsed += self._step
        return value

    def utcnow(self) -> datetime:
        return self._start + timedelta(seconds=self._elapsed)

    def advance(self, seconds: float | None = None) -> None:
        self._elapsed += self._step if seconds is None else seconds

    def reset(self) -> None:
        self._elapsed = 0.0
