"""
Number City Game Engine - Pure round logic without GUI dependencies

This module contains the round and session rules for Number City, with no pygame
dependencies. It uses immutable data structures and pure functions so the rules
can be unit tested without a GUI. Randomness is always passed in as an explicit
random.Random-like object so tests can fix the sequence.
"""
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Tuple

from levels import Level

TOTAL_ROUNDS = 10

# Delays (ms) before the coordinator's follow-up continuation runs
CORRECT_DELAY_MS = 700
INCORRECT_DELAY_MS = 600

REWARD_HUES = (16, 28, 40, 190, 220, 260, 300)
MIN_WINDOWS = 3
MAX_WINDOWS = 9
BASE_HEIGHT = 80
MAX_EXTRA_HEIGHT = 120


class Feedback(Enum):
    """Outcome flag for the most recent answer attempt"""
    NONE = "none"
    CORRECT = "correct"
    INCORRECT = "incorrect"


class Outcome(Enum):
    """What submit_answer did with an answer"""
    CORRECT = "correct"
    INCORRECT = "incorrect"
    IGNORED = "ignored"


def clamp(value, low, high):
    """Clamp value into [low, high]."""
    return max(low, min(high, value))


@dataclass(frozen=True)
class Reward:
    """A building added to the city for one correct answer"""
    identifier: str
    color_hue: int
    window_count: int
    height_px: int


def make_reward(target: int, index: int, rng) -> Reward:
    """
    Build the reward for a correct answer.

    Args:
        target: The number that was answered correctly
        index: Position of the new reward in the city (used for the identifier)
        rng: Random source providing choice()

    Returns:
        New Reward with a palette hue and target-derived size
    """
    return Reward(
        identifier=f"b{index}-{target}",
        color_hue=rng.choice(REWARD_HUES),
        window_count=clamp(target, MIN_WINDOWS, MAX_WINDOWS),
        height_px=BASE_HEIGHT + clamp(target * 8, 0, MAX_EXTRA_HEIGHT),
    )


@dataclass(frozen=True)
class SessionState:
    """Immutable session state.

    level is None until the player picks a level. round_resolved is True once
    the current round has been answered correctly or has timed out.
    """
    level: Optional[Level] = None
    target: int = 1
    round_index: int = 0
    rewards: Tuple[Reward, ...] = ()
    feedback: Feedback = Feedback.NONE
    shake_token: int = 0
    round_resolved: bool = False

    @staticmethod
    def create_initial(level=None) -> 'SessionState':
        """Create a fresh session with no rounds played."""
        return SessionState(level=level)

    @property
    def is_complete(self) -> bool:
        """Whether the final round has been played out."""
        return self.round_index >= TOTAL_ROUNDS and self.round_resolved


def start_round(state: SessionState, rng) -> SessionState:
    """
    Draw a new target and advance the round counter.

    Has no round cap: callers decide whether to advance. Returns state unchanged
    when no level is active.
    """
    if state.level is None:
        return state
    return replace(state,
                   target=rng.randint(1, state.level.answer_range),
                   round_index=state.round_index + 1,
                   feedback=Feedback.NONE,
                   round_resolved=False)


def submit_answer(state: SessionState, answer, rng):
    """
    Compare an answer against the target.

    Correct answers resolve the round and add a reward (rewards never grow past
    TOTAL_ROUNDS). Wrong answers flag INCORRECT and bump shake_token but keep
    the same target so the player can retry.

    Args:
        state: Current session state
        answer: The number the player picked
        rng: Random source for the reward colour

    Returns:
        Tuple of (new SessionState, Outcome)
    """
    if state.level is None or state.round_resolved:
        return state, Outcome.IGNORED
    if not isinstance(answer, int) or isinstance(answer, bool):
        return state, Outcome.IGNORED

    if answer == state.target:
        rewards = state.rewards
        if len(rewards) < TOTAL_ROUNDS:
            rewards = rewards + (make_reward(state.target, len(rewards), rng),)
        return replace(state,
                       rewards=rewards,
                       feedback=Feedback.CORRECT,
                       round_resolved=True), Outcome.CORRECT

    return replace(state,
                   feedback=Feedback.INCORRECT,
                   shake_token=state.shake_token + 1), Outcome.INCORRECT


def time_out(state: SessionState) -> SessionState:
    """Resolve the current round as a miss. No-op if already resolved."""
    if state.level is None or state.round_resolved:
        return state
    return replace(state,
                   feedback=Feedback.INCORRECT,
                   shake_token=state.shake_token + 1,
                   round_resolved=True)


def clear_feedback(state: SessionState) -> SessionState:
    """Drop the transient feedback flag."""
    return replace(state, feedback=Feedback.NONE)


def should_auto_advance(state: SessionState) -> bool:
    """Whether a resolved round may roll straight into the next one."""
    return state.level is not None and state.round_index < TOTAL_ROUNDS


def reset_session(state: SessionState, rng) -> SessionState:
    """
    Clear rewards and counters, keeping the level.

    If a level is active, the first round starts immediately.
    """
    fresh = SessionState.create_initial(level=state.level)
    return start_round(fresh, rng)


def select_level(level, rng) -> SessionState:
    """Start a brand new session on the given level."""
    return start_round(SessionState.create_initial(level=level), rng)
