"""Round log for Number City — records what happened in each round.

Pure Python, no pygame dependency. Captures round starts, answers and
timeouts so the end-of-session summary can show how each round went.
"""
from __future__ import annotations

from dataclasses import dataclass


@dataclass
class LogEntry:
    """A single logged session event."""
    round_index: int                            # 1-based
    event_type: str                             # "start", "answer", "timeout"
    target: int
    answer: int | None = None
    correct: bool | None = None


class RoundLog:
    """Accumulates LogEntry records during a session."""

    def __init__(self) -> None:
        self.entries: list[LogEntry] = []

    def log_start(self, round_index: int, target: int) -> None:
        """Record a round starting with a new target."""
        self.entries.append(LogEntry(
            round_index=round_index,
            event_type="start",
            target=target,
        ))

    def log_answer(self, round_index: int, target: int, answer: int) -> None:
        """Record an answer attempt."""
        self.entries.append(LogEntry(
            round_index=round_index,
            event_type="answer",
            target=target,
            answer=answer,
            correct=(answer == target),
        ))

    def log_timeout(self, round_index: int, target: int) -> None:
        """Record a round that ran out of time."""
        self.entries.append(LogEntry(
            round_index=round_index,
            event_type="timeout",
            target=target,
            correct=False,
        ))

    def get_round_entries(self, round_index: int) -> list[LogEntry]:
        """Return all entries for one round."""
        return [e for e in self.entries if e.round_index == round_index]

    def summary(self) -> dict:
        """Totals for the end-of-session screen.

        attempts maps each round index to the number of answers given in it.
        """
        answers = [e for e in self.entries if e.event_type == "answer"]
        attempts: dict[int, int] = {}
        for e in answers:
            attempts[e.round_index] = attempts.get(e.round_index, 0) + 1
        return {
            "rounds": len([e for e in self.entries if e.event_type == "start"]),
            "correct": sum(1 for e in answers if e.correct),
            "wrong": sum(1 for e in answers if not e.correct),
            "timeouts": sum(1 for e in self.entries if e.event_type == "timeout"),
            "attempts": attempts,
        }

    def clear(self) -> None:
        """Remove all entries."""
        self.entries = []
