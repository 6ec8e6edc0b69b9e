"""FrontendAdapter — Shared UI state management for all Number City frontends.

Owns sound cue dispatch, preference persistence, the new-building flash,
avatar mood, progress text and the JSON snapshot used by the web frontend.
Pure Python — no pygame or other frontend dependency.

Each frontend (pygame, TUI, web) creates a FrontendAdapter wrapping a
GameCoordinator and delegates UI-state logic here, keeping only rendering
and input translation frontend-specific.
"""

from abc import ABC, abstractmethod

from game_engine import Feedback, Outcome
from levels import LEVELS, level_blurb
from settings import load_settings, save_settings

# ── Shared constants ─────────────────────────────────────────────────────────

TITLE = "Number City"
SUBTITLE = "A counting game for little builders"

FEEDBACK_MESSAGES = {
    Feedback.CORRECT: "Great! A new building went up!",
    Feedback.INCORRECT: "Try again!",
}
TIMEOUT_MESSAGE = "Time's up!"
EMPTY_CITY_HINT = "No buildings yet. Answer correctly to start building!"
INTRO_TEXT = (
    "Pick a level. A number appears; press the matching button to build a "
    "new colourful building. Every right answer plays a little celebration."
)

REWARD_FLASH_MS = 500


def reward_color_css(hue):
    """CSS colour for a building of the given hue."""
    return f"hsl({hue}, 90%, 55%)"


def accumulate_digit(buffer, digit, answer_range):
    """Keyboard answer entry for frontends without number buttons.

    Appends digit to the typed buffer. Returns (new_buffer, answer) where
    answer is the number to submit now, or None to keep waiting for another
    digit (only while a longer number could still be in range).
    """
    typed = buffer + str(digit)
    value = int(typed)
    if value == 0:
        return "", None
    if value * 10 > answer_range:
        return "", value
    return typed, None


# ── Sound interface ───────────────────────────────────────────────────────────

class SoundInterface(ABC):
    """Abstract sound interface — each frontend provides its own implementation."""

    @abstractmethod
    def celebrate(self, level_id): ...

    @abstractmethod
    def wrong(self): ...

    @abstractmethod
    def click(self): ...

    @abstractmethod
    def toggle(self): ...

    @abstractmethod
    def set_volume(self, volume): ...

    @abstractmethod
    def update(self, elapsed_ms): ...

    @property
    @abstractmethod
    def enabled(self) -> bool: ...

    @property
    @abstractmethod
    def volume(self) -> float: ...


class NullSound(SoundInterface):
    """No-op sound for frontends without local audio (TUI, server-side web)."""

    def __init__(self):
        self._enabled = False
        self._volume = 0.8

    def celebrate(self, level_id): pass
    def wrong(self): pass
    def click(self): pass
    def update(self, elapsed_ms): pass

    def toggle(self):
        self._enabled = not self._enabled
        return self._enabled

    def set_volume(self, volume):
        self._volume = max(0.0, min(1.0, float(volume)))

    @property
    def enabled(self):
        return self._enabled

    @enabled.setter
    def enabled(self, value):
        self._enabled = bool(value)

    @property
    def volume(self):
        return self._volume


# ── Frontend Adapter ──────────────────────────────────────────────────────────

class FrontendAdapter:
    """Shared UI state management for all Number City frontends.

    Wraps a GameCoordinator and turns its outcomes and signals into sound cues
    and display state, and keeps preferences on disk.
    """

    def __init__(self, coordinator, sound=None, settings_path=None):
        self.coordinator = coordinator
        self.sound = sound or NullSound()
        self.settings_path = settings_path

        # New-building flash (frontend-agnostic progress 0.0-1.0)
        self.flash_reward_id = None
        self.flash_timer_ms = 0

        # Whether the last miss came from the countdown rather than a wrong answer
        self.last_miss_was_timeout = False

        # One-shot flag for session completion
        self._completion_reported = False

        # Digits typed so far for keyboard answer entry
        self.typed = ""

    # ── Settings ──────────────────────────────────────────────────────────

    def load_settings(self):
        """Load persisted settings and apply to adapter + coordinator."""
        settings = load_settings(self.settings_path)
        self.sound.enabled = settings["sound_enabled"]
        self.sound.set_volume(settings["volume"])
        self.coordinator.set_timer_seconds(settings["timer_seconds"])
        self.coordinator.set_timed_mode(settings["timed_mode"])
        return settings

    def _save_settings(self):
        """Persist current settings to disk."""
        save_settings({
            "timed_mode": self.coordinator.timed_mode,
            "timer_seconds": self.coordinator.timer_seconds,
            "sound_enabled": self.sound.enabled,
            "volume": self.sound.volume,
        }, self.settings_path)

    def toggle_sound(self):
        """Toggle mute and save."""
        self.sound.toggle()
        self.sound.click()
        self._save_settings()

    def set_volume(self, volume):
        """Set the master volume (0-1) and save."""
        try:
            self.sound.set_volume(volume)
        except (TypeError, ValueError):
            return
        self._save_settings()

    def toggle_timed(self):
        """Toggle timed mode and save."""
        self.coordinator.set_timed_mode(not self.coordinator.timed_mode)
        self.sound.click()
        self._save_settings()

    def set_timer_seconds(self, seconds):
        """Change the countdown length (applies next round) and save."""
        self.coordinator.set_timer_seconds(seconds)
        self._save_settings()

    def change_timer_seconds(self, delta):
        """Nudge the countdown length by delta seconds."""
        self.set_timer_seconds(self.coordinator.timer_seconds + delta)

    # ── Game actions ──────────────────────────────────────────────────────

    def do_select_level(self, level_id):
        """Pick a level. Returns True if the level exists."""
        if not self.coordinator.select_level(level_id):
            return False
        self.sound.click()
        self._reset_ui_state()
        return True

    def do_answer(self, number):
        """Submit an answer and play the matching cue. Returns the Outcome."""
        coord = self.coordinator
        outcome = coord.submit_answer(number)
        if outcome is Outcome.CORRECT:
            self.sound.celebrate(coord.level.id)
        elif outcome is Outcome.INCORRECT:
            self.last_miss_was_timeout = False
            self.sound.wrong()
        return outcome

    def do_next(self):
        """Manual "next question". Returns True if a round started."""
        if self.coordinator.next_question():
            self.typed = ""
            self.sound.click()
            self.last_miss_was_timeout = False
            return True
        return False

    def do_reset(self):
        """Restart the session on the current level."""
        self.coordinator.reset_session()
        self.sound.click()
        self._reset_ui_state()

    def _reset_ui_state(self):
        self.typed = ""
        self.flash_reward_id = None
        self.flash_timer_ms = 0
        self.last_miss_was_timeout = False
        self._completion_reported = False

    # ── Keyboard answer entry ─────────────────────────────────────────────

    def type_digit(self, digit):
        """Feed one typed digit. Submits once the number is unambiguous.

        Returns the Outcome when an answer was submitted, else None.
        """
        level = self.coordinator.level
        if level is None:
            return None
        self.typed, answer = accumulate_digit(self.typed, digit, level.answer_range)
        if answer is None:
            return None
        return self.do_answer(answer)

    def submit_typed(self):
        """Submit the digits typed so far (Enter). Returns the Outcome or None."""
        if not self.typed:
            return None
        answer = int(self.typed)
        self.typed = ""
        return self.do_answer(answer)

    def clear_typed(self):
        self.typed = ""

    # ── Per-frame update ──────────────────────────────────────────────────

    def update(self, elapsed_ms):
        """Advance time, consume coordinator signals, advance the flash.

        Returns dict of events that occurred during this step:
            round_started, timed_out, reward_added, session_completed
        """
        coord = self.coordinator
        events = {
            "round_started": False,
            "timed_out": False,
            "reward_added": False,
            "session_completed": False,
        }

        round_before = coord.round_index
        coord.tick(elapsed_ms)
        self.sound.update(elapsed_ms)

        if coord.round_index != round_before:
            events["round_started"] = True
            self.typed = ""
            self.last_miss_was_timeout = False

        # Timeout: play the failure cue once per expiry
        if coord.timed_out:
            coord.timed_out = False
            self.last_miss_was_timeout = True
            self.sound.wrong()
            events["timed_out"] = True

        # New building: start its flash
        if coord.last_reward is not None:
            self.flash_reward_id = coord.last_reward.identifier
            self.flash_timer_ms = 0
            coord.last_reward = None
            events["reward_added"] = True
        elif self.flash_reward_id is not None:
            self.flash_timer_ms += elapsed_ms
            if self.flash_timer_ms >= REWARD_FLASH_MS:
                self.flash_reward_id = None

        if coord.session_complete and not self._completion_reported:
            self._completion_reported = True
            events["session_completed"] = True

        return events

    # ── Display helpers ───────────────────────────────────────────────────

    @property
    def flash_progress(self):
        """Return flash progress 0.0-1.0, or None if no flash active."""
        if self.flash_reward_id is None:
            return None
        return min(1.0, self.flash_timer_ms / REWARD_FLASH_MS)

    @property
    def avatar_mood(self):
        """"happy", "sad" or "idle", following the feedback flag."""
        fb = self.coordinator.feedback
        if fb is Feedback.CORRECT:
            return "happy"
        if fb is Feedback.INCORRECT:
            return "sad"
        return "idle"

    @property
    def progress_label(self):
        coord = self.coordinator
        return f"{min(coord.round_index, coord.total_rounds)} / {coord.total_rounds}"

    @property
    def feedback_message(self):
        """Banner text for the current feedback, or None."""
        fb = self.coordinator.feedback
        if fb is Feedback.INCORRECT and self.last_miss_was_timeout:
            return TIMEOUT_MESSAGE
        return FEEDBACK_MESSAGES.get(fb)

    def is_highlighted_choice(self, number):
        """Whether an answer button should show as the correct one."""
        coord = self.coordinator
        return coord.feedback is Feedback.CORRECT and number == coord.target

    def level_intro_lines(self):
        return [level_blurb(level) for level in LEVELS]

    def session_summary(self):
        """Round-log totals, or None while the session is still running."""
        if not self.coordinator.session_complete:
            return None
        return self.coordinator.round_log.summary()

    # ── Full state snapshot (for web frontend) ────────────────────────────

    def get_game_snapshot(self):
        """Return a complete JSON-serializable dict of game + UI state.

        Used by the web frontend to push full state over WebSocket.
        """
        coord = self.coordinator
        level = coord.level
        timer = coord.timer_state
        summary = self.session_summary()
        if summary is not None:
            summary = dict(summary, attempts={str(k): v for k, v in summary["attempts"].items()})

        return {
            "levels": [{"id": lv.id, "label": lv.label, "range": lv.answer_range} for lv in LEVELS],
            "level": None if level is None else {
                "id": level.id, "label": level.label, "range": level.answer_range,
            },
            "target": coord.target if level is not None else None,
            "round_index": coord.round_index,
            "total_rounds": coord.total_rounds,
            "progress": coord.progress,
            "progress_label": self.progress_label,
            "choices": [
                {"number": n, "highlight": self.is_highlighted_choice(n)}
                for n in coord.answer_choices
            ],
            "rewards": [
                {
                    "id": r.identifier,
                    "color": reward_color_css(r.color_hue),
                    "windows": r.window_count,
                    "height": r.height_px,
                }
                for r in coord.rewards
            ],
            "feedback": coord.feedback.value,
            "feedback_message": self.feedback_message,
            "shake_token": coord.shake_token,
            "avatar_mood": self.avatar_mood,
            "flash": {"id": self.flash_reward_id, "progress": self.flash_progress},
            "timed_mode": coord.timed_mode,
            "timer_seconds": coord.timer_seconds,
            "timer": {"remaining": timer.remaining_seconds, "running": timer.is_running},
            "session_complete": coord.session_complete,
            "summary": summary,
            "sound_enabled": self.sound.enabled,
            "volume": self.sound.volume,
        }
