#!/usr/bin/env python3
"""
Number City - A graphical counting game using pygame

Rendering and input only; all game rules live in GameCoordinator and all
shared UI state in FrontendAdapter.
"""
import math
import sys

import pygame

from frontend_adapter import (
    EMPTY_CITY_HINT, INTRO_TEXT, SUBTITLE, TITLE, FrontendAdapter,
)
from game_coordinator import apply_cli_args, make_coordinator, parse_args
from game_engine import Feedback
from layout import (
    answer_button_rect, compute_layout, control_button_rects, level_button_rect,
    reward_tile_rect, tilt_offset, toggle_rects,
)
from levels import LEVELS
from sounds import SAMPLE_RATE, shared_tone_generator

FPS = 60
SHAKE_MS = 500

# Colors
BACKGROUND = (255, 247, 237)
PANEL = (255, 255, 255)
PANEL_BORDER = (231, 221, 210)
TEXT = (31, 41, 55)
MUTED_TEXT = (107, 114, 128)
ACCENT = (234, 88, 12)
ACCENT_LIGHT = (255, 237, 213)
GOOD = (34, 197, 94)
GOOD_LIGHT = (220, 252, 231)
BAD = (225, 29, 72)
BAD_LIGHT = (255, 228, 230)
DARK_BUTTON = (31, 41, 55)
SKIN = (255, 205, 150)


def hue_color(hue, lightness=55):
    """pygame Color for an HSL hue at 90% saturation."""
    color = pygame.Color(0, 0, 0)
    color.hsla = (hue % 360, 90, lightness, 100)
    return color


class Button:
    """A simple button class for UI interactions"""

    def __init__(self, rect, text, font, color=PANEL, text_color=TEXT):
        """
        Initialize a button

        Args:
            rect: (x, y, width, height) tuple
            text: Button text
            font: pygame font used for the label
            color: Background colour when idle
            text_color: Label colour
        """
        self.rect = pygame.Rect(rect)
        self.text = text
        self.font = font
        self.color = color
        self.text_color = text_color
        self.is_hovered = False
        self.active = False

    def handle_event(self, event):
        """
        Handle mouse events for the button

        Returns:
            True if button was clicked, False otherwise
        """
        if event.type == pygame.MOUSEMOTION:
            self.is_hovered = self.rect.collidepoint(event.pos)
        elif event.type == pygame.MOUSEBUTTONDOWN:
            if event.button == 1 and self.rect.collidepoint(event.pos):
                return True
        return False

    def draw(self, surface, offset=(0, 0)):
        """Draw the button"""
        rect = self.rect.move(offset)
        if self.active:
            color, text_color = ACCENT, PANEL
        elif self.is_hovered:
            color, text_color = ACCENT_LIGHT, self.text_color
        else:
            color, text_color = self.color, self.text_color

        pygame.draw.rect(surface, color, rect, border_radius=10)
        pygame.draw.rect(surface, PANEL_BORDER, rect, width=1, border_radius=10)

        text_surface = self.font.render(self.text, True, text_color)
        surface.blit(text_surface, text_surface.get_rect(center=rect.center))


class NumberCityGame:
    """Main game class for Number City"""

    def __init__(self, adapter):
        """Initialize the game window and widgets"""
        self.adapter = adapter
        self.coordinator = adapter.coordinator
        self.layout = compute_layout()
        self.screen = pygame.display.set_mode((self.layout.window_width, self.layout.window_height))
        pygame.display.set_caption(TITLE)
        self.clock = pygame.time.Clock()
        self.running = True

        self.font_big = pygame.font.Font(None, 110)
        self.font_title = pygame.font.Font(None, 48)
        self.font = pygame.font.Font(None, 30)
        self.font_small = pygame.font.Font(None, 22)

        self.level_buttons = [
            (level.id, Button(level_button_rect(self.layout, i), level.label, self.font))
            for i, level in enumerate(LEVELS)
        ]
        restart_rect, next_rect = control_button_rects(self.layout)
        self.restart_button = Button(restart_rect, "Start over", self.font, DARK_BUTTON, PANEL)
        self.next_button = Button(next_rect, "Next question", self.font)
        labels = {"timed": "Timer", "seconds_down": "-", "seconds_up": "+",
                  "mute": "Sound", "volume_down": "-", "volume_up": "+"}
        self.toggle_buttons = {
            name: Button(rect, labels[name], self.font_small)
            for name, rect in toggle_rects(self.layout).items()
        }
        self.answer_buttons = []
        self._answer_range = None

        # Shake animation: restarts whenever the coordinator bumps shake_token
        self._seen_shake_token = self.coordinator.shake_token
        self._shake_elapsed = SHAKE_MS
        self.mouse_pos = (0, 0)

    def _sync_answer_buttons(self):
        """Rebuild answer buttons when the level's range changes."""
        choices = self.coordinator.answer_choices
        if len(choices) == self._answer_range:
            return
        self._answer_range = len(choices)
        self.answer_buttons = [
            (n, Button(answer_button_rect(self.layout, n - 1), str(n), self.font))
            for n in choices
        ]

    # ── Input ────────────────────────────────────────────────────────────

    def handle_events(self):
        """Handle pygame events"""
        adapter = self.adapter
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False
                continue
            if event.type == pygame.MOUSEMOTION:
                self.mouse_pos = event.pos
            elif event.type == pygame.KEYDOWN:
                self._handle_key(event)
                continue

            for level_id, button in self.level_buttons:
                if button.handle_event(event):
                    adapter.do_select_level(level_id)

            if self.coordinator.level is None:
                continue

            for number, button in self.answer_buttons:
                if button.handle_event(event):
                    adapter.do_answer(number)
            if self.restart_button.handle_event(event):
                adapter.do_reset()
            if self.next_button.handle_event(event):
                adapter.do_next()

            toggles = self.toggle_buttons
            if toggles["timed"].handle_event(event):
                adapter.toggle_timed()
            if toggles["seconds_down"].handle_event(event):
                adapter.change_timer_seconds(-1)
            if toggles["seconds_up"].handle_event(event):
                adapter.change_timer_seconds(+1)
            if toggles["mute"].handle_event(event):
                adapter.toggle_sound()
            if toggles["volume_down"].handle_event(event):
                adapter.set_volume(round(adapter.sound.volume - 0.1, 2))
            if toggles["volume_up"].handle_event(event):
                adapter.set_volume(round(adapter.sound.volume + 0.1, 2))

    def _handle_key(self, event):
        adapter = self.adapter
        if event.key == pygame.K_ESCAPE:
            self.running = False
        elif pygame.K_0 <= event.key <= pygame.K_9:
            adapter.type_digit(event.key - pygame.K_0)
        elif pygame.K_KP0 <= event.key <= pygame.K_KP9:
            adapter.type_digit(event.key - pygame.K_KP0)
        elif event.key in (pygame.K_RETURN, pygame.K_KP_ENTER):
            adapter.submit_typed()
        elif event.key == pygame.K_BACKSPACE:
            adapter.clear_typed()
        elif event.key == pygame.K_n:
            adapter.do_next()
        elif event.key == pygame.K_r:
            adapter.do_reset()
        elif event.key == pygame.K_t:
            adapter.toggle_timed()
        elif event.key == pygame.K_m:
            adapter.toggle_sound()
        elif event.key in (pygame.K_F1, pygame.K_F2, pygame.K_F3):
            adapter.do_select_level(event.key - pygame.K_F1 + 1)

    # ── Update ───────────────────────────────────────────────────────────

    def update(self, elapsed_ms):
        """Advance game time and local animations"""
        self.adapter.update(elapsed_ms)
        token = self.coordinator.shake_token
        if token != self._seen_shake_token:
            # A reset drops the token back to 0; only a bump replays the shake
            if token > self._seen_shake_token:
                self._shake_elapsed = 0
            self._seen_shake_token = token
        elif self._shake_elapsed < SHAKE_MS:
            self._shake_elapsed += elapsed_ms
        self._sync_answer_buttons()

    # ── Drawing ──────────────────────────────────────────────────────────

    def draw(self):
        """Draw everything to the screen"""
        self.screen.fill(BACKGROUND)
        self._draw_header()
        if self.coordinator.level is None:
            self._draw_intro()
        else:
            self._draw_city()
            self._draw_hud()
            if self.coordinator.session_complete:
                self._draw_summary()
        pygame.display.flip()

    def _panel(self, rect):
        pygame.draw.rect(self.screen, PANEL, rect, border_radius=16)
        pygame.draw.rect(self.screen, PANEL_BORDER, rect, width=1, border_radius=16)

    def _draw_header(self):
        lay = self.layout
        title = self.font_title.render(TITLE, True, TEXT)
        self.screen.blit(title, (lay.title_x, lay.title_y - 8))
        subtitle = self.font_small.render(SUBTITLE, True, MUTED_TEXT)
        self.screen.blit(subtitle, (lay.title_x, lay.title_y + 30))
        current = self.coordinator.level
        for level_id, button in self.level_buttons:
            button.active = current is not None and current.id == level_id
            button.draw(self.screen)

    def _draw_intro(self):
        lay = self.layout
        rect = pygame.Rect(lay.city_x, lay.city_y + 20, lay.window_width - 2 * lay.city_x, 300)
        self._panel(rect)
        heading = self.font_title.render("Welcome to Number City", True, TEXT)
        self.screen.blit(heading, (rect.x + 30, rect.y + 25))
        y = rect.y + 85
        for line in _wrap(INTRO_TEXT, self.font, rect.width - 60):
            self.screen.blit(self.font.render(line, True, TEXT), (rect.x + 30, y))
            y += 30
        y += 10
        for line in self.adapter.level_intro_lines():
            self.screen.blit(self.font.render("- " + line, True, MUTED_TEXT), (rect.x + 45, y))
            y += 30
        self._draw_avatar((rect.right - 90, rect.y + 80), "happy", 50)

    def _draw_city(self):
        lay = self.layout
        rect = pygame.Rect(lay.city_x, lay.city_y, lay.city_width, lay.city_height)
        self._panel(rect)
        heading = self.font.render("Your colourful city", True, TEXT)
        self.screen.blit(heading, (rect.x + 14, rect.y + 12))

        rewards = self.coordinator.rewards
        if not rewards:
            hint = self.font_small.render(EMPTY_CITY_HINT, True, MUTED_TEXT)
            self.screen.blit(hint, hint.get_rect(center=rect.center))
            return

        for i, reward in enumerate(rewards):
            tile = reward_tile_rect(lay, i)
            dx, dy = tilt_offset(tile, self.mouse_pos)
            self._draw_building(pygame.Rect(tile).move(dx, dy), reward)

    def _draw_building(self, tile, reward):
        pygame.draw.rect(self.screen, (243, 236, 228), tile, border_radius=10)
        height = reward.height_px
        flash = None
        if reward.identifier == self.adapter.flash_reward_id:
            flash = self.adapter.flash_progress
            height = int(height * (0.6 + 0.4 * flash))
        body = pygame.Rect(tile.x + 6, tile.bottom - height, tile.width - 12, height)
        lightness = 55 if flash is None else int(70 - 15 * flash)
        pygame.draw.rect(self.screen, hue_color(reward.color_hue, lightness), body,
                         border_top_left_radius=6, border_top_right_radius=6)

        # Windows: three columns from the top of the building down
        win_w = (body.width - 16) // 3
        for w in range(reward.window_count):
            row, col = divmod(w, 3)
            win = pygame.Rect(body.x + 4 + col * (win_w + 4), body.y + 6 + row * 16, win_w, 10)
            if win.bottom < body.bottom:
                pygame.draw.rect(self.screen, (255, 255, 255), win, border_radius=2)

        badge = self.font_small.render("+1 building", True, MUTED_TEXT)
        self.screen.blit(badge, (tile.x + 6, tile.y + 6))

    def _draw_hud(self):
        lay = self.layout
        coord = self.coordinator
        adapter = self.adapter

        # Progress
        label = self.font_small.render(f"Progress  {adapter.progress_label}", True, MUTED_TEXT)
        self.screen.blit(label, (lay.hud_x, lay.progress_y))
        bar = pygame.Rect(lay.hud_x, lay.progress_y + 20, lay.hud_width, 12)
        pygame.draw.rect(self.screen, PANEL_BORDER, bar, border_radius=6)
        fill = bar.copy()
        fill.width = int(bar.width * coord.progress)
        if fill.width:
            pygame.draw.rect(self.screen, ACCENT, fill, border_radius=6)

        # Countdown
        if coord.timed_mode:
            timer = coord.timer_state
            text = f"Time left: {timer.remaining_seconds}s" if timer.is_running else "Timer ready"
            self.screen.blit(self.font_small.render(text, True, MUTED_TEXT), (lay.hud_x, lay.timer_y))
            tbar = pygame.Rect(lay.hud_x, lay.timer_y + 18, lay.hud_width, 8)
            pygame.draw.rect(self.screen, PANEL_BORDER, tbar, border_radius=4)
            tfill = tbar.copy()
            tfill.width = int(tbar.width * coord.countdown.fraction_left)
            if tfill.width:
                color = BAD if timer.remaining_seconds <= 3 else GOOD
                pygame.draw.rect(self.screen, color, tfill, border_radius=4)

        # Question card (shakes after a miss)
        shake_x = 0
        if self._shake_elapsed < SHAKE_MS:
            t = self._shake_elapsed / SHAKE_MS
            shake_x = int(math.sin(t * math.pi * 8) * 6 * (1 - t))
        card = pygame.Rect(lay.hud_x + shake_x, lay.card_y, lay.hud_width, lay.card_height)
        bg = BAD_LIGHT if coord.feedback is Feedback.INCORRECT else PANEL
        pygame.draw.rect(self.screen, bg, card, border_radius=16)
        pygame.draw.rect(self.screen, PANEL_BORDER, card, width=1, border_radius=16)

        prompt = self.font_small.render("Read the number and pick the matching button", True, MUTED_TEXT)
        self.screen.blit(prompt, (card.x + 12, card.y + 8))
        number = self.font_big.render(str(coord.target), True, TEXT)
        self.screen.blit(number, number.get_rect(midright=(card.right - 24, lay.target_y + 45)))
        self._draw_avatar((card.x + 55, lay.target_y + 45), adapter.avatar_mood, 34)
        if adapter.typed:
            typed = self.font_small.render(f"Typed: {adapter.typed}_", True, ACCENT)
            self.screen.blit(typed, (card.x + 110, lay.target_y + 70))

        for n, button in self.answer_buttons:
            if adapter.is_highlighted_choice(n):
                button.color, button.text_color = GOOD, PANEL
            else:
                button.color, button.text_color = PANEL, TEXT
            button.draw(self.screen, (shake_x, 0))

        message = adapter.feedback_message
        if message:
            good = coord.feedback is Feedback.CORRECT
            banner = pygame.Rect(card.x + 12, card.bottom - 44, card.width - 24, 32)
            pygame.draw.rect(self.screen, GOOD_LIGHT if good else BAD_LIGHT, banner, border_radius=8)
            text = self.font.render(message, True, GOOD if good else BAD)
            self.screen.blit(text, text.get_rect(center=banner.center))

        self.restart_button.draw(self.screen)
        self.next_button.draw(self.screen)
        self._draw_toggles()

    def _draw_toggles(self):
        adapter = self.adapter
        toggles = self.toggle_buttons
        toggles["timed"].active = self.coordinator.timed_mode
        toggles["mute"].text = "Sound" if adapter.sound.enabled else "Muted"
        toggles["mute"].active = adapter.sound.enabled
        for button in toggles.values():
            button.draw(self.screen)

        down, up = toggles["seconds_down"].rect, toggles["seconds_up"].rect
        secs = self.font_small.render(f"{self.coordinator.timer_seconds}s", True, TEXT)
        self.screen.blit(secs, secs.get_rect(center=((down.right + up.left) // 2, down.centery)))
        down, up = toggles["volume_down"].rect, toggles["volume_up"].rect
        vol = self.font_small.render(f"{int(round(adapter.sound.volume * 100))}", True, TEXT)
        self.screen.blit(vol, vol.get_rect(center=((down.right + up.left) // 2, down.centery)))

    def _draw_avatar(self, center, mood, radius):
        """Worker-kid face: the mouth curves with the mood."""
        cx, cy = center
        pygame.draw.circle(self.screen, SKIN, center, radius)
        pygame.draw.circle(self.screen, (224, 165, 107), center, radius, width=2)
        hat = pygame.Rect(cx - radius, cy - radius - 4, radius * 2, radius)
        pygame.draw.arc(self.screen, (245, 158, 11), hat, 0, math.pi, width=radius // 3)
        eye_dy = {"happy": -1, "sad": 1}.get(mood, 0) - radius // 6
        for ex in (cx - radius // 3, cx + radius // 3):
            pygame.draw.circle(self.screen, TEXT, (ex, cy + eye_dy), max(2, radius // 9))
        mouth = pygame.Rect(cx - radius // 3, cy + radius // 6, radius * 2 // 3, radius // 3)
        if mood == "happy":
            pygame.draw.arc(self.screen, TEXT, mouth, math.pi, 2 * math.pi, width=2)
        elif mood == "sad":
            pygame.draw.arc(self.screen, TEXT, mouth.move(0, radius // 6), 0, math.pi, width=2)
        else:
            pygame.draw.line(self.screen, TEXT, mouth.midleft, mouth.midright, 2)

    def _draw_summary(self):
        summary = self.adapter.session_summary()
        if summary is None:
            return
        lay = self.layout
        overlay = pygame.Surface((lay.city_width, 150), pygame.SRCALPHA)
        overlay.fill((255, 255, 255, 235))
        self.screen.blit(overlay, (lay.city_x, lay.window_height - 190))
        x, y = lay.city_x + 20, lay.window_height - 178
        self.screen.blit(self.font_title.render("City finished!", True, ACCENT), (x, y))
        lines = [
            f"Buildings: {len(self.coordinator.rewards)}    Wrong tries: {summary['wrong']}"
            f"    Timeouts: {summary['timeouts']}",
            "Press Start over or pick a level to build again.",
        ]
        for i, line in enumerate(lines):
            self.screen.blit(self.font.render(line, True, TEXT), (x, y + 50 + i * 30))

    def run(self):
        """Main game loop"""
        while self.running:
            elapsed = self.clock.tick(FPS)
            self.handle_events()
            self.update(elapsed)
            self.draw()

        pygame.quit()
        sys.exit()


def _wrap(text, font, width):
    """Greedy word wrap for a pygame font."""
    lines, current = [], ""
    for word in text.split():
        candidate = f"{current} {word}".strip()
        if font.size(candidate)[0] <= width:
            current = candidate
        else:
            lines.append(current)
            current = word
    if current:
        lines.append(current)
    return lines


def main(argv=None):
    """Entry point for the game"""
    args = parse_args(argv)
    pygame.mixer.pre_init(SAMPLE_RATE, -16, 1)
    pygame.init()
    coordinator = make_coordinator(args)
    adapter = FrontendAdapter(coordinator, sound=shared_tone_generator())
    adapter.load_settings()
    apply_cli_args(coordinator, args)
    game = NumberCityGame(adapter)
    game.run()


if __name__ == "__main__":
    main()
