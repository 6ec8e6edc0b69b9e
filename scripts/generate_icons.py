#!/usr/bin/env python3
"""Generate PWA icon PNGs for the Number City web app.

Draws a little skyline: three coloured buildings with lit windows on a sky tile.
Run once from the repo root: python scripts/generate_icons.py
"""
import colorsys
import os

from PIL import Image, ImageDraw

# (left, width, height) as fractions of the icon size, and the building hue
BUILDINGS = [
    ((0.12, 0.24, 0.45), 16),
    ((0.38, 0.24, 0.70), 220),
    ((0.64, 0.24, 0.55), 40),
]


def hue_rgb(hue):
    """Same saturated colour the game uses for a building of this hue."""
    r, g, b = colorsys.hls_to_rgb(hue / 360, 0.55, 0.9)
    return int(r * 255), int(g * 255), int(b * 255)


def draw_city_icon(size):
    """Draw a sky-blue rounded tile with three buildings on it."""
    img = Image.new("RGBA", (size, size), (0, 0, 0, 0))
    draw = ImageDraw.Draw(img)

    radius = size * 15 // 100
    draw.rounded_rectangle([0, 0, size - 1, size - 1], radius=radius, fill=(191, 230, 255))

    ground = int(size * 0.86)
    window = max(2, size * 5 // 100)
    for (left, width, height), hue in BUILDINGS:
        x0 = int(size * left)
        x1 = int(size * (left + width))
        y0 = ground - int(size * height)
        draw.rectangle([x0, y0, x1, ground], fill=hue_rgb(hue))

        # Two columns of windows, one row every 12% of the size
        y = y0 + window
        while y + window < ground - window:
            for col in (0.3, 0.7):
                wx = x0 + int((x1 - x0) * col) - window // 2
                draw.rectangle([wx, y, wx + window, y + window], fill=(255, 247, 194))
            y += size * 12 // 100

    draw.rectangle([0, ground, size - 1, ground + size // 60], fill=(60, 80, 90))
    return img


if __name__ == "__main__":
    os.makedirs("static", exist_ok=True)
    for size in (192, 512):
        img = draw_city_icon(size)
        path = f"static/icon-{size}.png"
        img.save(path)
        print(f"Generated {path}")
