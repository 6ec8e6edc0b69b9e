#!/usr/bin/env python3
"""
Number City TUI — Terminal-based frontend using Textual.

Keyboard-driven interface with block-art buildings, the target number,
progress and countdown bars, and a session summary.
"""
from textual import on
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Center, Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Footer, Header, Static

from frontend_adapter import (
    EMPTY_CITY_HINT, INTRO_TEXT, SUBTITLE, TITLE,
    FrontendAdapter, NullSound,
)
from game_coordinator import apply_cli_args, make_coordinator, parse_args
from game_engine import Feedback

TICK_MS = 50

AVATAR_FACES = {"idle": "(•‿•)", "happy": "(^‿^)", "sad": "(•︵•)"}

# Rich colour names roughly matching the reward palette hues
HUE_COLORS = {
    16: "red", 28: "dark_orange", 40: "orange1", 190: "cyan",
    220: "dodger_blue1", 260: "medium_purple", 300: "magenta",
}


def render_building(reward, rows=10):
    """Render one building as a list of `rows` text lines, bottom-aligned."""
    color = HUE_COLORS.get(reward.color_hue, "white")
    floors = max(2, reward.height_px // 20)
    window_rows = (reward.window_count + 2) // 3
    lines = []
    for floor in range(floors):
        if floor == 0:
            lines.append(f"[{color}]▄▄▄▄▄▄▄[/{color}]")
        elif floor <= window_rows:
            lit = min(3, reward.window_count - (floor - 1) * 3)
            windows = " ".join("▫" if i < lit else " " for i in range(3))
            lines.append(f"[{color}]█[/{color}]{windows}[{color}]█[/{color}]")
        else:
            lines.append(f"[{color}]███████[/{color}]")
    lines = lines[:rows]
    return ["       "] * (rows - len(lines)) + lines


def render_city(rewards, per_row=5):
    """Lay buildings out side by side, per_row to a line."""
    if not rewards:
        return f"[dim]{EMPTY_CITY_HINT}[/dim]"
    blocks = []
    for start in range(0, len(rewards), per_row):
        chunk = [render_building(r) for r in rewards[start:start + per_row]]
        for row in zip(*chunk):
            blocks.append("  ".join(row))
        blocks.append("─" * (9 * len(chunk)))
    return "\n".join(blocks)


def render_bar(fraction, width=30):
    filled = int(round(max(0.0, min(1.0, fraction)) * width))
    return "█" * filled + "░" * (width - filled)


# ── Widgets ──────────────────────────────────────────────────────────────────

class CityDisplay(Static):
    """The player's city: one building per correct answer."""

    def render(self):
        coord = self.app.coordinator
        if coord.level is None:
            lines = [f"[bold]Welcome to {TITLE}[/bold]", "", INTRO_TEXT, ""]
            lines += [f"  • {line}" for line in self.app.adapter.level_intro_lines()]
            lines += ["", "[dim]Press F1, F2 or F3 to pick a level[/dim]"]
            return "\n".join(lines)
        return "[bold]Your colourful city[/bold]\n\n" + render_city(coord.rewards)


class QuestionDisplay(Static):
    """Target number, typed answer, feedback and the avatar."""

    def render(self):
        app = self.app
        coord = app.coordinator
        adapter = app.adapter
        if coord.level is None:
            return ""

        lines = [f"Progress {adapter.progress_label}  {render_bar(coord.progress, 20)}"]
        if coord.timed_mode:
            timer = coord.timer_state
            if timer.is_running:
                lines.append(f"Time left {timer.remaining_seconds:>2}s  "
                             f"{render_bar(coord.countdown.fraction_left, 20)}")
            else:
                lines.append(f"Timer: {coord.timer_seconds}s per round")
        lines.append("")
        lines.append(f"{AVATAR_FACES[adapter.avatar_mood]}     [bold]{coord.target}[/bold]")
        lines.append("")
        choices = " ".join(
            f"[bold green]{n}[/bold green]" if adapter.is_highlighted_choice(n) else str(n)
            for n in coord.answer_choices
        )
        lines.append(choices)
        lines.append(f"Your answer: {adapter.typed or '_'}")

        message = adapter.feedback_message
        if message:
            style = "green" if coord.feedback is Feedback.CORRECT else "red"
            lines.append(f"\n[bold {style}]{message}[/bold {style}]")
        return "\n".join(lines)


class SettingsDisplay(Static):
    """Timed mode preferences. The terminal has no audio, so sound settings are left alone."""

    def render(self):
        coord = self.app.coordinator
        timed = "on" if coord.timed_mode else "off"
        return f"Timer: {timed} (T)  {coord.timer_seconds}s ([ / ])"


# ── Modal Screens ────────────────────────────────────────────────────────────

class SummaryScreen(ModalScreen):
    """End-of-session summary."""

    BINDINGS = [
        Binding("escape", "dismiss", "Close"),
        Binding("enter", "dismiss", "Close"),
    ]

    def compose(self) -> ComposeResult:
        yield Center(Static(self._build_text(), id="summary-panel"))

    def _build_text(self):
        coord = self.app.coordinator
        summary = self.app.adapter.session_summary() or {}
        text = "[bold]CITY FINISHED![/bold]\n\n"
        text += f"  Buildings:    {len(coord.rewards)}\n"
        text += f"  Wrong tries:  {summary.get('wrong', 0)}\n"
        text += f"  Timeouts:     {summary.get('timeouts', 0)}\n\n"
        attempts = summary.get("attempts", {})
        for round_index in sorted(attempts):
            text += f"  Round {round_index:>2}: {attempts[round_index]} tries\n"
        text += "\n[dim]R to build again, Esc to close[/dim]"
        return text


# ── Main App ─────────────────────────────────────────────────────────────────

class NumberCityApp(App):
    """Number City terminal UI application."""

    CSS = """
    Screen {
        layout: vertical;
    }

    #game-area {
        layout: horizontal;
        height: 1fr;
    }

    #city-panel {
        width: 1fr;
        padding: 1 2;
    }

    #question-panel {
        width: 48;
        padding: 1 2;
    }

    #controls {
        height: auto;
        margin-top: 1;
    }

    #summary-panel {
        padding: 2 4;
        border: thick $accent;
        background: $surface;
        width: 50;
        height: auto;
    }
    """

    BINDINGS = [
        Binding("f1", "level(1)", "Level 1", show=True),
        Binding("f2", "level(2)", "Level 2", show=True),
        Binding("f3", "level(3)", "Level 3", show=True),
        Binding("enter", "submit", "Answer", show=True),
        Binding("backspace", "clear_typed", "Clear"),
        Binding("n", "next", "Next question", show=True),
        Binding("r", "restart", "Start over", show=True),
        Binding("t", "timed", "Timer"),
        Binding("left_square_bracket", "seconds(-1)", "-1s"),
        Binding("right_square_bracket", "seconds(1)", "+1s"),
        Binding("escape", "quit_or_close", "Quit"),
    ] + [Binding(str(d), f"digit({d})", show=False) for d in range(10)]

    def __init__(self, coordinator=None):
        super().__init__()
        self.coordinator = coordinator if coordinator is not None else make_coordinator(parse_args([]))
        self.adapter = FrontendAdapter(self.coordinator, sound=NullSound())
        self._tick_timer = None

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal(id="game-area"):
            with Vertical(id="city-panel"):
                yield CityDisplay(id="city-display")
            with Vertical(id="question-panel"):
                yield QuestionDisplay(id="question-display")
                with Horizontal(id="controls"):
                    yield Button("Start over", id="restart-btn", variant="primary")
                    yield Button("Next", id="next-btn")
                yield SettingsDisplay(id="settings-display")
        yield Footer()

    def on_mount(self):
        self.title = TITLE
        self.sub_title = SUBTITLE
        self._tick_timer = self.set_interval(TICK_MS / 1000, self._game_tick)

    def _game_tick(self):
        """Per-frame game update at ~20 FPS."""
        events = self.adapter.update(TICK_MS)
        if events["session_completed"]:
            self.push_screen(SummaryScreen())
        self._refresh_display()

    def _refresh_display(self):
        """Refresh all display widgets."""
        for widget_id in ("#city-display", "#question-display", "#settings-display"):
            self.query_one(widget_id, Static).refresh()

    # ── Actions ──────────────────────────────────────────────────────────

    def action_level(self, level_id: int):
        self.adapter.do_select_level(level_id)
        self._refresh_display()

    def action_digit(self, digit: int):
        self.adapter.type_digit(digit)
        self._refresh_display()

    def action_submit(self):
        self.adapter.submit_typed()
        self._refresh_display()

    def action_clear_typed(self):
        self.adapter.clear_typed()
        self._refresh_display()

    def action_next(self):
        self.adapter.do_next()
        self._refresh_display()

    @on(Button.Pressed, "#next-btn")
    def on_next_button(self):
        self.action_next()

    def action_restart(self):
        if len(self.screen_stack) > 1:
            self.pop_screen()
        self.adapter.do_reset()
        self._refresh_display()

    @on(Button.Pressed, "#restart-btn")
    def on_restart_button(self):
        self.action_restart()

    def action_timed(self):
        self.adapter.toggle_timed()
        self._refresh_display()

    def action_seconds(self, delta: int):
        self.adapter.change_timer_seconds(delta)
        self._refresh_display()

    def action_quit_or_close(self):
        # If any screen is stacked, pop it
        if len(self.screen_stack) > 1:
            self.pop_screen()
        else:
            self.exit()


def main(argv=None):
    """Entry point for the TUI."""
    args = parse_args(argv)
    coordinator = make_coordinator(args)
    app = NumberCityApp(coordinator=coordinator)
    app.adapter.load_settings()
    apply_cli_args(coordinator, args)
    app.run()


if __name__ == "__main__":
    main()
