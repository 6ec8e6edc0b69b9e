"""
Countdown — per-round timer for timed mode.

Two states, RUNNING and IDLE. The countdown owns a single repeating
one-second handle on the shared Scheduler and always cancels it before
arming a new one, so timers never overlap across rounds.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum

TICK_MS = 1000
MIN_SECONDS = 5
MAX_SECONDS = 20
DEFAULT_SECONDS = 10


class CountdownPhase(Enum):
    IDLE = "idle"
    RUNNING = "running"


@dataclass(frozen=True)
class TimerState:
    """Snapshot of the countdown for display."""
    remaining_seconds: int
    is_running: bool


def clamp_seconds(seconds) -> int:
    """Clamp a requested duration into the supported 5-20 second range.

    Raises ValueError for NaN, infinite or unparseable input.
    """
    if isinstance(seconds, float) and not math.isfinite(seconds):
        raise ValueError(f"timer duration must be finite, got {seconds!r}")
    return max(MIN_SECONDS, min(MAX_SECONDS, int(seconds)))


class Countdown:
    """Counts whole seconds down to zero, then calls on_expire once."""

    def __init__(self, scheduler, on_expire) -> None:
        self._scheduler = scheduler
        self._on_expire = on_expire
        self._handle = None
        self.phase = CountdownPhase.IDLE
        self.remaining_seconds = 0
        self.duration_seconds = 0

    def start(self, seconds: int) -> None:
        """(Re)arm the countdown from a full duration."""
        self.cancel()
        self.duration_seconds = seconds
        self.remaining_seconds = seconds
        self.phase = CountdownPhase.RUNNING
        self._handle = self._scheduler.call_every(TICK_MS, self._tick)

    def cancel(self) -> None:
        """Stop counting and drop the scheduled tick entirely."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        self.phase = CountdownPhase.IDLE

    def clear(self) -> None:
        """Cancel and forget the remaining time (session reset)."""
        self.cancel()
        self.remaining_seconds = 0
        self.duration_seconds = 0

    @property
    def is_running(self) -> bool:
        return self.phase is CountdownPhase.RUNNING

    @property
    def state(self) -> TimerState:
        return TimerState(remaining_seconds=self.remaining_seconds, is_running=self.is_running)

    @property
    def fraction_left(self) -> float:
        """Remaining time as 0.0-1.0 (0.0 when never started)."""
        if self.duration_seconds <= 0:
            return 0.0
        return self.remaining_seconds / self.duration_seconds

    def _tick(self) -> None:
        self.remaining_seconds = max(0, self.remaining_seconds - 1)
        if self.remaining_seconds == 0:
            self.cancel()
            self._on_expire()
