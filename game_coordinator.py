"""
GameCoordinator — All non-pygame session coordination logic.

Owns the session state, the scheduled continuations and the timed-mode
countdown. The GUI layers (main.py, tui.py, web.py) delegate to this and only
handle rendering + events, feeding elapsed time in through tick().
"""
from __future__ import annotations

import argparse
import logging
import random

from countdown import DEFAULT_SECONDS, Countdown, TimerState, clamp_seconds
from game_engine import (
    CORRECT_DELAY_MS,
    INCORRECT_DELAY_MS,
    TOTAL_ROUNDS,
    Feedback,
    Outcome,
    Reward,
    SessionState,
    clear_feedback,
    should_auto_advance,
    time_out,
)
from game_engine import (
    reset_session as engine_reset_session,
)
from game_engine import (
    select_level as engine_select_level,
)
from game_engine import (
    start_round as engine_start_round,
)
from game_engine import (
    submit_answer as engine_submit_answer,
)
from levels import Level, get_level
from round_log import RoundLog
from scheduler import Scheduler

logger = logging.getLogger(__name__)


class GameCoordinator:
    """Coordinates the session state machine without any pygame dependency.

    The GUI reads coordinator properties to decide what to render, and calls
    coordinator action methods in response to user input. Every transition
    cancels the previous continuation before scheduling a new one, so a stale
    callback can never touch a superseded round.
    """

    def __init__(self, rng=None, timed_mode: bool = False, timer_seconds: int = DEFAULT_SECONDS,
                 scheduler: Scheduler | None = None) -> None:
        """Initialize the coordinator.

        Args:
            rng: Random source (random.Random or compatible). None uses an unseeded one.
            timed_mode: Whether rounds get a countdown.
            timer_seconds: Countdown length, clamped to 5-20 seconds.
            scheduler: Optional shared Scheduler (tests may step it directly).
        """
        self.rng = rng if rng is not None else random.Random()
        self.scheduler = scheduler if scheduler is not None else Scheduler()
        self.state = SessionState.create_initial()

        # Timed mode
        self.timed_mode = timed_mode
        self.timer_seconds = clamp_seconds(timer_seconds)
        self.countdown = Countdown(self.scheduler, self._on_countdown_expired)

        # The single outstanding continuation (advance after correct/timeout, clear after wrong)
        self._pending = None

        # Feeds the end-of-session summary
        self.round_log = RoundLog()

        # Signals set here, consumed by the frontend adapter
        self.last_reward: Reward | None = None
        self.timed_out = False

    # ── Properties ───────────────────────────────────────────────────────

    @property
    def level(self) -> Level | None:
        return self.state.level

    @property
    def target(self) -> int:
        return self.state.target

    @property
    def round_index(self) -> int:
        return self.state.round_index

    @property
    def total_rounds(self) -> int:
        return TOTAL_ROUNDS

    @property
    def rewards(self) -> tuple[Reward, ...]:
        return self.state.rewards

    @property
    def feedback(self) -> Feedback:
        return self.state.feedback

    @property
    def shake_token(self) -> int:
        """Bumped on every miss so frontends can replay the shake animation."""
        return self.state.shake_token

    @property
    def session_complete(self) -> bool:
        return self.state.is_complete

    @property
    def answer_choices(self) -> list[int]:
        """Numbers shown on the answer buttons (empty with no level)."""
        if self.state.level is None:
            return []
        return list(range(1, self.state.level.answer_range + 1))

    @property
    def progress(self) -> float:
        """Session progress 0.0-1.0."""
        return min(1.0, self.state.round_index / TOTAL_ROUNDS)

    @property
    def timer_state(self) -> TimerState:
        return self.countdown.state

    @property
    def has_pending_continuation(self) -> bool:
        return self._pending is not None and self._pending.active

    # ── Action methods (called by GUI on input) ──────────────────────────

    def select_level(self, level_id) -> bool:
        """Switch to a level and start a fresh session on it.

        Returns False (and changes nothing) for an unknown level id.
        """
        level = get_level(level_id)
        if level is None:
            return False
        self._cancel_scheduled()
        self.round_log.clear()
        self.last_reward = None
        self.timed_out = False
        self.state = engine_select_level(level, self.rng)
        self._on_round_started()
        return True

    def next_question(self) -> bool:
        """Manually start a new round. Not limited by the round cap."""
        if self.state.level is None:
            return False
        self._start_next_round()
        return True

    def submit_answer(self, answer) -> Outcome:
        """Check an answer and schedule whatever follows it."""
        before = self.state
        self.state, outcome = engine_submit_answer(self.state, answer, self.rng)
        if outcome is Outcome.IGNORED:
            return outcome

        self.round_log.log_answer(before.round_index, before.target, answer)
        if outcome is Outcome.CORRECT:
            self.countdown.cancel()
            if len(self.state.rewards) > len(before.rewards):
                self.last_reward = self.state.rewards[-1]
            self._schedule(CORRECT_DELAY_MS, self._advance)
        else:
            self._schedule(INCORRECT_DELAY_MS, self._clear_feedback)
        return outcome

    def reset_session(self) -> None:
        """Clear rewards and rounds; restart immediately if a level is active."""
        self._cancel_scheduled()
        self.countdown.clear()
        self.round_log.clear()
        self.last_reward = None
        self.timed_out = False
        self.state = engine_reset_session(self.state, self.rng)
        self._on_round_started()

    def set_timed_mode(self, enabled: bool) -> None:
        """Turn timed mode on or off. Turning it on arms the current round."""
        self.timed_mode = bool(enabled)
        if self.timed_mode:
            if not self.countdown.is_running:
                self._arm_countdown()
        else:
            self.countdown.clear()

    def set_timer_seconds(self, seconds) -> int:
        """Change the countdown length. Applies from the next round start."""
        try:
            self.timer_seconds = clamp_seconds(seconds)
        except (TypeError, ValueError):
            pass
        return self.timer_seconds

    # ── Time ─────────────────────────────────────────────────────────────

    def tick(self, elapsed_ms: int) -> None:
        """Advance scheduled continuations and the countdown by elapsed_ms."""
        self.scheduler.advance(elapsed_ms)

    # ── Internal ─────────────────────────────────────────────────────────

    def _start_next_round(self) -> None:
        self._cancel_pending()
        self.state = engine_start_round(self.state, self.rng)
        self._on_round_started()

    def _on_round_started(self) -> None:
        if self.state.level is None:
            return
        self.round_log.log_start(self.state.round_index, self.state.target)
        logger.debug("Round %d started, target=%d", self.state.round_index, self.state.target)
        self._arm_countdown()

    def _arm_countdown(self) -> None:
        """Start the countdown if this round should be timed, else make sure it is idle."""
        s = self.state
        if (self.timed_mode and s.level is not None and not s.round_resolved
                and s.feedback is not Feedback.CORRECT):
            self.countdown.start(self.timer_seconds)
        else:
            self.countdown.cancel()

    def _schedule(self, delay_ms: int, callback) -> None:
        self._cancel_pending()
        self._pending = self.scheduler.call_later(delay_ms, callback)

    def _cancel_pending(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def _cancel_scheduled(self) -> None:
        self._cancel_pending()
        self.countdown.cancel()

    def _advance(self) -> None:
        """Continuation after a resolved round: next round, or finish the session."""
        self._pending = None
        if should_auto_advance(self.state):
            self._start_next_round()
        else:
            self.state = clear_feedback(self.state)
            logger.debug("Session complete after %d rounds", self.state.round_index)

    def _clear_feedback(self) -> None:
        self._pending = None
        self.state = clear_feedback(self.state)

    def _on_countdown_expired(self) -> None:
        if self.state.round_resolved:
            return
        self.round_log.log_timeout(self.state.round_index, self.state.target)
        self.state = time_out(self.state)
        self.timed_out = True
        self._schedule(INCORRECT_DELAY_MS, self._advance)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Args:
        argv: Optional list of args (for testing). None uses sys.argv.

    Returns:
        Parsed argparse.Namespace.
    """
    parser = argparse.ArgumentParser(description="Number City counting game")
    parser.add_argument("--level", type=int, choices=[1, 2, 3],
                        help="Start straight into a level (1-3)")
    parser.add_argument("--timed", action="store_true", default=None,
                        help="Enable timed rounds")
    parser.add_argument("--seconds", type=int, metavar="S",
                        help="Seconds per timed round (5-20)")
    parser.add_argument("--seed", type=int, help="Seed the random number draws")
    return parser.parse_args(argv)


def make_coordinator(args: argparse.Namespace) -> GameCoordinator:
    """Build a coordinator, seeding its random source when --seed is given."""
    rng = random.Random(args.seed) if args.seed is not None else None
    return GameCoordinator(rng=rng)


def apply_cli_args(coord: GameCoordinator, args: argparse.Namespace) -> None:
    """Layer CLI flags over loaded settings, then enter --level if given."""
    if args.timed is not None:
        coord.set_timed_mode(args.timed)
    if args.seconds is not None:
        coord.set_timer_seconds(args.seconds)
    if args.level is not None:
        coord.select_level(args.level)
