"""
GameCoordinator Test Suite

Tests the session coordination logic without any pygame dependency.
Covers: level selection, answer flow, scheduled continuations, timed mode,
the round cap, reset, and CLI parsing.

Conventions match the other test files:
- Class grouping by topic
- Seeded or scripted random sources for determinism
- No mocking — exercises the real engine, scheduler and countdown
"""
import random

import pytest

from countdown import MAX_SECONDS, MIN_SECONDS
from game_coordinator import GameCoordinator, apply_cli_args, make_coordinator, parse_args
from game_engine import CORRECT_DELAY_MS, INCORRECT_DELAY_MS, TOTAL_ROUNDS, Feedback, Outcome


# ── Helpers ──────────────────────────────────────────────────────────────────

class ScriptedRng:
    """random.Random stand-in: randint returns queued targets, then low."""

    def __init__(self, targets=()):
        self.targets = list(targets)

    def randint(self, low, high):
        return self.targets.pop(0) if self.targets else low

    def choice(self, seq):
        return seq[0]


def make_coord(level_id=1, seed=1, **kwargs):
    coord = GameCoordinator(rng=random.Random(seed), **kwargs)
    if level_id is not None:
        coord.select_level(level_id)
    return coord


def wrong_answer(coord):
    return next(n for n in coord.answer_choices if n != coord.target)


def play_correct_round(coord):
    """Answer correctly and let the scheduled advance run."""
    assert coord.submit_answer(coord.target) is Outcome.CORRECT
    coord.tick(CORRECT_DELAY_MS)


# ═══════════════════════════════════════════════════════════════════════════════
# 1. SETUP
# ═══════════════════════════════════════════════════════════════════════════════

class TestSetup:

    def test_starts_without_level(self):
        coord = GameCoordinator(rng=random.Random(0))
        assert coord.level is None
        assert coord.answer_choices == []
        assert coord.round_index == 0
        assert not coord.timer_state.is_running

    def test_select_level_starts_first_round(self):
        coord = make_coord(level_id=2)
        assert coord.level.answer_range == 10
        assert coord.round_index == 1
        assert 1 <= coord.target <= 10
        assert coord.answer_choices == list(range(1, 11))

    def test_unknown_level_rejected(self):
        coord = make_coord(level_id=1)
        target = coord.target
        assert coord.select_level(7) is False
        assert coord.level.id == 1
        assert coord.target == target

    def test_next_question_without_level(self):
        coord = GameCoordinator(rng=random.Random(0))
        assert coord.next_question() is False
        assert coord.round_index == 0

    def test_timer_seconds_clamped_on_construction(self):
        assert GameCoordinator(timer_seconds=2).timer_seconds == MIN_SECONDS
        assert GameCoordinator(timer_seconds=60).timer_seconds == MAX_SECONDS


# ═══════════════════════════════════════════════════════════════════════════════
# 2. ANSWER FLOW
# ═══════════════════════════════════════════════════════════════════════════════

class TestAnswerFlow:

    def test_level_two_wrong_then_right(self):
        coord = GameCoordinator(rng=ScriptedRng([7, 4]))
        coord.select_level(2)
        assert coord.target == 7

        assert coord.submit_answer(3) is Outcome.INCORRECT
        assert coord.feedback is Feedback.INCORRECT
        assert coord.rewards == ()
        assert coord.target == 7

        assert coord.submit_answer(7) is Outcome.CORRECT
        assert coord.feedback is Feedback.CORRECT
        assert len(coord.rewards) == 1

        coord.tick(CORRECT_DELAY_MS)
        assert coord.round_index == 2
        assert coord.target == 4

    def test_correct_advances_only_after_delay(self):
        coord = make_coord()
        coord.submit_answer(coord.target)
        coord.tick(CORRECT_DELAY_MS - 1)
        assert coord.round_index == 1
        assert coord.feedback is Feedback.CORRECT
        coord.tick(1)
        assert coord.round_index == 2
        assert coord.feedback is Feedback.NONE

    def test_wrong_feedback_clears_after_delay(self):
        coord = make_coord()
        target = coord.target
        coord.submit_answer(wrong_answer(coord))
        coord.tick(INCORRECT_DELAY_MS - 1)
        assert coord.feedback is Feedback.INCORRECT
        coord.tick(1)
        assert coord.feedback is Feedback.NONE
        assert coord.target == target
        assert coord.round_index == 1

    def test_correct_after_wrong_is_not_cleared_early(self):
        coord = make_coord()
        coord.submit_answer(wrong_answer(coord))
        coord.tick(300)
        coord.submit_answer(coord.target)
        coord.tick(INCORRECT_DELAY_MS)
        assert coord.feedback is Feedback.CORRECT
        coord.tick(CORRECT_DELAY_MS)
        assert coord.round_index == 2

    def test_second_answer_while_resolved_ignored(self):
        coord = make_coord()
        coord.submit_answer(coord.target)
        assert coord.submit_answer(coord.target) is Outcome.IGNORED
        assert len(coord.rewards) == 1

    def test_shake_token_bumps_on_each_miss(self):
        coord = make_coord()
        coord.submit_answer(wrong_answer(coord))
        coord.submit_answer(wrong_answer(coord))
        assert coord.shake_token == 2

    def test_last_reward_signal(self):
        coord = make_coord()
        coord.submit_answer(coord.target)
        assert coord.last_reward is coord.rewards[-1]

    def test_only_one_pending_continuation(self):
        coord = make_coord()
        coord.submit_answer(wrong_answer(coord))
        coord.submit_answer(wrong_answer(coord))
        assert coord.scheduler.pending == 1
        assert coord.has_pending_continuation

    def test_manual_next_cancels_pending_advance(self):
        coord = make_coord()
        coord.submit_answer(coord.target)
        coord.next_question()
        assert coord.round_index == 2
        coord.tick(CORRECT_DELAY_MS * 2)
        assert coord.round_index == 2

    def test_round_log_summary(self):
        coord = make_coord()
        coord.submit_answer(wrong_answer(coord))
        play_correct_round(coord)
        summary = coord.round_log.summary()
        assert summary["rounds"] == 2
        assert summary["wrong"] == 1
        assert summary["correct"] == 1
        assert summary["attempts"] == {1: 2}


# ═══════════════════════════════════════════════════════════════════════════════
# 3. ROUND CAP
# ═══════════════════════════════════════════════════════════════════════════════

class TestRoundCap:

    def test_ten_correct_answers_stop_auto_advance(self):
        coord = make_coord(level_id=3)
        for _ in range(TOTAL_ROUNDS):
            play_correct_round(coord)
        assert len(coord.rewards) == TOTAL_ROUNDS
        assert coord.round_index == TOTAL_ROUNDS
        assert coord.session_complete
        assert coord.feedback is Feedback.NONE
        coord.tick(10000)
        assert coord.round_index == TOTAL_ROUNDS

    def test_manual_next_still_works_past_cap(self):
        coord = make_coord()
        for _ in range(TOTAL_ROUNDS):
            play_correct_round(coord)
        assert coord.next_question() is True
        assert coord.round_index == TOTAL_ROUNDS + 1
        assert not coord.session_complete
        coord.submit_answer(coord.target)
        assert len(coord.rewards) == TOTAL_ROUNDS

    def test_progress_never_exceeds_one(self):
        coord = make_coord()
        for _ in range(TOTAL_ROUNDS):
            play_correct_round(coord)
        coord.next_question()
        assert coord.progress == 1.0


# ═══════════════════════════════════════════════════════════════════════════════
# 4. RESET AND LEVEL CHANGES
# ═══════════════════════════════════════════════════════════════════════════════

class TestReset:

    def test_reset_clears_rewards_and_restarts(self):
        coord = make_coord()
        play_correct_round(coord)
        play_correct_round(coord)
        coord.reset_session()
        assert coord.rewards == ()
        assert coord.round_index == 1
        assert coord.level.id == 1
        assert coord.round_log.summary()["rounds"] == 1

    def test_reset_cancels_pending_advance(self):
        coord = make_coord()
        coord.submit_answer(coord.target)
        coord.reset_session()
        coord.tick(CORRECT_DELAY_MS * 3)
        assert coord.round_index == 1
        assert coord.rewards == ()
        assert coord.last_reward is None

    def test_reset_without_level(self):
        coord = GameCoordinator(rng=random.Random(0))
        coord.reset_session()
        assert coord.level is None
        assert coord.round_index == 0

    def test_level_change_cancels_pending_clear(self):
        coord = make_coord(level_id=1)
        coord.submit_answer(wrong_answer(coord))
        coord.select_level(3)
        assert coord.feedback is Feedback.NONE
        assert coord.shake_token == 0
        assert coord.scheduler.pending == 0

    def test_level_change_cancels_timer(self):
        coord = make_coord(level_id=1, timed_mode=True, timer_seconds=5)
        coord.tick(3000)
        coord.select_level(2)
        assert coord.timer_state.remaining_seconds == 5
        coord.tick(4000)
        assert not coord.timed_out
        assert coord.round_index == 1


# ═══════════════════════════════════════════════════════════════════════════════
# 5. TIMED MODE
# ═══════════════════════════════════════════════════════════════════════════════

class TestTimedMode:

    def test_round_start_arms_countdown(self):
        coord = make_coord(timed_mode=True, timer_seconds=8)
        assert coord.timer_state.is_running
        assert coord.timer_state.remaining_seconds == 8

    def test_untimed_rounds_have_no_countdown(self):
        coord = make_coord()
        assert not coord.timer_state.is_running
        assert coord.scheduler.pending == 0

    def test_timeout_resolves_and_advances(self):
        coord = make_coord(timed_mode=True, timer_seconds=5)
        coord.tick(5000)
        assert coord.timed_out
        assert coord.feedback is Feedback.INCORRECT
        assert not coord.timer_state.is_running
        assert coord.rewards == ()
        coord.tick(INCORRECT_DELAY_MS)
        assert coord.round_index == 2
        assert coord.timer_state.is_running
        assert coord.timer_state.remaining_seconds == 5

    def test_correct_answer_cancels_countdown(self):
        coord = make_coord(timed_mode=True, timer_seconds=5)
        coord.tick(4900)
        coord.submit_answer(coord.target)
        assert not coord.timer_state.is_running
        coord.tick(CORRECT_DELAY_MS)
        assert not coord.timed_out
        assert coord.round_index == 2
        assert coord.timer_state.remaining_seconds == 5

    def test_wrong_answer_keeps_countdown_running(self):
        coord = make_coord(timed_mode=True, timer_seconds=5)
        coord.tick(2000)
        coord.submit_answer(wrong_answer(coord))
        assert coord.timer_state.is_running
        assert coord.timer_state.remaining_seconds == 3

    def test_no_overlapping_countdowns_across_rounds(self):
        coord = make_coord(timed_mode=True, timer_seconds=5)
        for _ in range(3):
            coord.next_question()
        # One countdown tick, nothing else
        assert coord.scheduler.pending == 1

    def test_timeout_on_final_round_completes_session(self):
        coord = make_coord(timed_mode=True, timer_seconds=5)
        for _ in range(TOTAL_ROUNDS - 1):
            play_correct_round(coord)
        assert coord.round_index == TOTAL_ROUNDS
        coord.tick(5000)
        coord.tick(INCORRECT_DELAY_MS)
        assert coord.session_complete
        assert coord.round_index == TOTAL_ROUNDS
        assert not coord.timer_state.is_running

    def test_enabling_mid_round_arms_countdown(self):
        coord = make_coord(timer_seconds=6)
        coord.set_timed_mode(True)
        assert coord.timer_state.is_running
        assert coord.timer_state.remaining_seconds == 6

    def test_enabling_twice_does_not_restart(self):
        coord = make_coord(timed_mode=True, timer_seconds=6)
        coord.tick(2000)
        coord.set_timed_mode(True)
        assert coord.timer_state.remaining_seconds == 4

    def test_enabling_after_correct_answer_waits_for_next_round(self):
        coord = make_coord()
        coord.submit_answer(coord.target)
        coord.set_timed_mode(True)
        assert not coord.timer_state.is_running
        coord.tick(CORRECT_DELAY_MS)
        assert coord.timer_state.is_running

    def test_disabling_clears_countdown(self):
        coord = make_coord(timed_mode=True, timer_seconds=5)
        coord.set_timed_mode(False)
        coord.tick(10000)
        assert not coord.timed_out
        assert coord.timer_state.remaining_seconds == 0

    def test_timer_seconds_apply_from_next_round(self):
        coord = make_coord(timed_mode=True, timer_seconds=10)
        coord.set_timer_seconds(6)
        assert coord.timer_state.remaining_seconds == 10
        coord.next_question()
        assert coord.timer_state.remaining_seconds == 6

    @pytest.mark.parametrize("requested,expected", [(3, 5), (25, 20), (12, 12)])
    def test_set_timer_seconds_clamps(self, requested, expected):
        coord = make_coord()
        assert coord.set_timer_seconds(requested) == expected

    def test_set_timer_seconds_ignores_garbage(self):
        coord = make_coord(timer_seconds=9)
        assert coord.set_timer_seconds("lots") == 9
        assert coord.set_timer_seconds(None) == 9
        assert coord.set_timer_seconds(float("inf")) == 9
        assert coord.set_timer_seconds(float("nan")) == 9


# ═══════════════════════════════════════════════════════════════════════════════
# 6. CLI
# ═══════════════════════════════════════════════════════════════════════════════

class TestParseArgs:

    def test_defaults(self):
        args = parse_args([])
        assert args.level is None
        assert args.timed is None
        assert args.seconds is None
        assert args.seed is None

    def test_all_flags(self):
        args = parse_args(["--level", "3", "--timed", "--seconds", "7", "--seed", "42"])
        assert args.level == 3
        assert args.timed is True
        assert args.seconds == 7
        assert args.seed == 42

    def test_invalid_level_rejected(self):
        with pytest.raises(SystemExit):
            parse_args(["--level", "4"])

    def test_seed_makes_targets_repeatable(self):
        args = parse_args(["--seed", "5", "--level", "3"])
        first = make_coordinator(args)
        second = make_coordinator(args)
        apply_cli_args(first, args)
        apply_cli_args(second, args)
        targets_a, targets_b = [], []
        for _ in range(5):
            targets_a.append(first.target)
            targets_b.append(second.target)
            first.next_question()
            second.next_question()
        assert targets_a == targets_b

    def test_apply_cli_args_overrides_settings(self):
        coord = GameCoordinator(rng=random.Random(0))
        apply_cli_args(coord, parse_args(["--timed", "--seconds", "6", "--level", "1"]))
        assert coord.timed_mode
        assert coord.timer_seconds == 6
        assert coord.timer_state.remaining_seconds == 6

    def test_apply_cli_args_without_flags_changes_nothing(self):
        coord = GameCoordinator(rng=random.Random(0), timed_mode=True, timer_seconds=9)
        apply_cli_args(coord, parse_args([]))
        assert coord.timed_mode
        assert coord.timer_seconds == 9
        assert coord.level is None
