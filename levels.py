"""
Level catalog for Number City.

Static, immutable difficulty levels. No pygame dependency.
"""
from dataclasses import dataclass


@dataclass(frozen=True)
class Level:
    """A difficulty level: answers run from 1 to answer_range inclusive."""
    id: int
    label: str
    answer_range: int


LEVELS = (
    Level(id=1, label="Level 1", answer_range=5),
    Level(id=2, label="Level 2", answer_range=10),
    Level(id=3, label="Level 3", answer_range=20),
)


def get_level(level_id):
    """Look up a level by id. Returns None for unknown ids."""
    for level in LEVELS:
        if level.id == level_id:
            return level
    return None


def level_blurb(level):
    """One-line description used by the intro screens."""
    return f"{level.label}: count from 1 to {level.answer_range}"
