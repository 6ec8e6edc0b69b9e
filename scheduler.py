"""
Scheduler — cancelable delayed callbacks driven by the frontend's clock.

Nothing here reads a wall clock or sleeps. Each frontend feeds elapsed
milliseconds into advance() from its own loop (pygame clock, Textual interval,
web tick thread), so tests can step time exactly. Pure Python, no pygame.
"""
from __future__ import annotations

import itertools


class TaskHandle:
    """A scheduled callback. cancel() guarantees it will never fire again."""

    def __init__(self, due_ms: int, callback, interval_ms: int | None, seq: int) -> None:
        self.due_ms = due_ms
        self.callback = callback
        self.interval_ms = interval_ms
        self.seq = seq
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True

    @property
    def active(self) -> bool:
        return not self.cancelled

    @property
    def repeating(self) -> bool:
        return self.interval_ms is not None


class Scheduler:
    """Holds one-shot and repeating tasks and fires them as time advances."""

    def __init__(self) -> None:
        self.now_ms = 0
        self._tasks: list[TaskHandle] = []
        self._seq = itertools.count()

    def call_later(self, delay_ms: int, callback) -> TaskHandle:
        """Run callback once, delay_ms from now."""
        handle = TaskHandle(self.now_ms + max(0, delay_ms), callback, None, next(self._seq))
        self._tasks.append(handle)
        return handle

    def call_every(self, interval_ms: int, callback) -> TaskHandle:
        """Run callback every interval_ms until the handle is cancelled."""
        if interval_ms <= 0:
            raise ValueError("interval_ms must be positive")
        handle = TaskHandle(self.now_ms + interval_ms, callback, interval_ms, next(self._seq))
        self._tasks.append(handle)
        return handle

    def advance(self, elapsed_ms: int) -> int:
        """Move the clock forward, firing due tasks in due-time order.

        A callback may schedule or cancel other tasks; a task cancelled by an
        earlier callback in the same advance does not fire.

        Returns:
            Number of callbacks fired.
        """
        target = self.now_ms + max(0, elapsed_ms)
        fired = 0
        while True:
            due = [t for t in self._tasks if t.active and t.due_ms <= target]
            if not due:
                break
            task = min(due, key=lambda t: (t.due_ms, t.seq))
            self.now_ms = task.due_ms
            if task.repeating:
                task.due_ms += task.interval_ms
            else:
                task.cancel()
            task.callback()
            fired += 1
        self.now_ms = target
        self._tasks = [t for t in self._tasks if t.active]
        return fired

    def cancel_all(self) -> None:
        for task in self._tasks:
            task.cancel()
        self._tasks = []

    @property
    def pending(self) -> int:
        """Number of tasks that are still due to fire."""
        return sum(1 for t in self._tasks if t.active)
