"""
Pure-Python layout constants and computation for the pygame frontend.

Kept apart from main.py so that tests can import layout data without
triggering pygame initialization (which opens a window and plays audio).
Rects are plain (x, y, width, height) tuples.
"""
from dataclasses import dataclass

# Window
WINDOW_WIDTH = 1000
WINDOW_HEIGHT = 700

# City grid
TILE_COLUMNS = 5
TILE_WIDTH = 108
TILE_HEIGHT = 220
TILE_GAP = 10

# Answer grid
ANSWER_COLUMNS = 5
ANSWER_WIDTH = 56
ANSWER_HEIGHT = 40
ANSWER_GAP = 8


@dataclass(frozen=True)
class Layout:
    """Centralized layout constants for the game window.

    Dependent values (e.g. answer grid top derived from the question card) are
    computed once in compute_layout. Frozen because layout is immutable once
    computed.
    """

    window_width: int
    window_height: int

    # Header
    title_x: int
    title_y: int
    level_button_y: int
    level_button_width: int
    level_button_height: int
    level_buttons_x: int         # left edge of the first level button

    # City panel (left)
    city_x: int
    city_y: int
    city_width: int
    city_height: int

    # HUD (right)
    hud_x: int
    hud_width: int
    progress_y: int
    timer_y: int
    card_y: int
    card_height: int
    target_y: int
    answers_y: int               # computed: below the target number

    # Controls
    controls_y: int
    control_height: int
    toggles_y: int


def compute_layout() -> Layout:
    """Build a Layout with all dependent values computed from base constants."""
    window_width = WINDOW_WIDTH
    window_height = WINDOW_HEIGHT

    level_button_width = 110
    level_button_height = 36
    level_buttons_x = window_width - 3 * (level_button_width + 10) - 10

    city_x = 20
    city_y = 90
    city_width = TILE_COLUMNS * (TILE_WIDTH + TILE_GAP) + TILE_GAP
    city_height = window_height - city_y - 20

    hud_x = city_x + city_width + 20
    hud_width = window_width - hud_x - 20

    progress_y = 90
    timer_y = progress_y + 50
    card_y = timer_y + 40
    target_y = card_y + 20
    answers_y = target_y + 90
    card_height = answers_y - card_y + 4 * (ANSWER_HEIGHT + ANSWER_GAP) + 50

    controls_y = card_y + card_height + 15
    control_height = 44
    toggles_y = controls_y + control_height + 15

    return Layout(
        window_width=window_width,
        window_height=window_height,
        title_x=30,
        title_y=28,
        level_button_y=24,
        level_button_width=level_button_width,
        level_button_height=level_button_height,
        level_buttons_x=level_buttons_x,
        city_x=city_x,
        city_y=city_y,
        city_width=city_width,
        city_height=city_height,
        hud_x=hud_x,
        hud_width=hud_width,
        progress_y=progress_y,
        timer_y=timer_y,
        card_y=card_y,
        card_height=card_height,
        target_y=target_y,
        answers_y=answers_y,
        controls_y=controls_y,
        control_height=control_height,
        toggles_y=toggles_y,
    )


def level_button_rect(layout: Layout, index: int):
    """Rect of the index-th (0-based) level button."""
    x = layout.level_buttons_x + index * (layout.level_button_width + 10)
    return (x, layout.level_button_y, layout.level_button_width, layout.level_button_height)


def answer_button_rect(layout: Layout, index: int):
    """Rect of the answer button for number index + 1, in a 5-wide grid."""
    row, col = divmod(index, ANSWER_COLUMNS)
    grid_width = ANSWER_COLUMNS * ANSWER_WIDTH + (ANSWER_COLUMNS - 1) * ANSWER_GAP
    left = layout.hud_x + (layout.hud_width - grid_width) // 2
    return (left + col * (ANSWER_WIDTH + ANSWER_GAP),
            layout.answers_y + row * (ANSWER_HEIGHT + ANSWER_GAP),
            ANSWER_WIDTH, ANSWER_HEIGHT)


def reward_tile_rect(layout: Layout, index: int):
    """Rect of the index-th building tile in the city grid."""
    row, col = divmod(index, TILE_COLUMNS)
    return (layout.city_x + TILE_GAP + col * (TILE_WIDTH + TILE_GAP),
            layout.city_y + 40 + row * (TILE_HEIGHT + TILE_GAP),
            TILE_WIDTH, TILE_HEIGHT)


def control_button_rects(layout: Layout):
    """Rects for the restart and next-question buttons (in that order)."""
    half = (layout.hud_width - 10) // 2
    restart = (layout.hud_x, layout.controls_y, half, layout.control_height)
    nxt = (layout.hud_x + half + 10, layout.controls_y, half, layout.control_height)
    return restart, nxt


def toggle_rects(layout: Layout):
    """Rects for the settings row: timed, seconds -, seconds +, mute, volume -, volume +."""
    w = 52
    small = 26
    x = layout.hud_x
    y = layout.toggles_y
    h = 30
    rects = {
        "timed": (x, y, w + 18, h),
        "seconds_down": (x + w + 24, y, small, h),
        "seconds_up": (x + w + 24 + small + 40, y, small, h),
    }
    x2 = x + layout.hud_width - (w + 2 * small + 44)
    rects["mute"] = (x2, y, w, h)
    rects["volume_down"] = (x2 + w + 6, y, small, h)
    rects["volume_up"] = (x2 + w + 6 + small + 34, y, small, h)
    return rects


def tilt_offset(rect, mouse_pos, max_shift: int = 6):
    """Cosmetic hover tilt: shift a tile toward the pointer (0, 0 when outside)."""
    x, y, w, h = rect
    mx, my = mouse_pos
    if not (x <= mx < x + w and y <= my < y + h):
        return (0, 0)
    px = (mx - x) / w - 0.5
    py = (my - y) / h - 0.5
    return (round(px * 2 * max_shift), round(py * 2 * max_shift) - 2)
