"""Persistent preferences for Number City.

Stores user preferences in ~/.number_city_settings.json. Only preferences
live here; session progress is never saved.
No pygame dependency — pure JSON with defaults.
"""

import json
import math
from pathlib import Path

from countdown import clamp_seconds

DEFAULTS = {
    "timed_mode": False,
    "timer_seconds": 10,
    "sound_enabled": True,
    "volume": 0.8,
}


def _default_path():
    """Return the default path for the settings file."""
    return Path.home() / ".number_city_settings.json"


def _sanitize(key, value):
    """Coerce a loaded value into range, or fall back to its default."""
    default = DEFAULTS[key]
    if isinstance(default, bool):
        return value if isinstance(value, bool) else default
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    if isinstance(value, float) and not math.isfinite(value):
        return default
    if key == "timer_seconds":
        return clamp_seconds(value)
    if key == "volume":
        return max(0.0, min(1.0, float(value)))
    return value


def load_settings(path=None):
    """Load settings from JSON file. Returns DEFAULTS on missing/corrupt.

    Merges with DEFAULTS so missing keys get default values.
    Unknown keys are ignored; bad values are clamped or reset.
    """
    if path is None:
        path = _default_path()
    path = Path(path)
    try:
        data = json.loads(path.read_text())
        if not isinstance(data, dict):
            return dict(DEFAULTS)
        result = dict(DEFAULTS)
        for key in DEFAULTS:
            if key in data:
                result[key] = _sanitize(key, data[key])
        return result
    except (FileNotFoundError, json.JSONDecodeError, OSError):
        return dict(DEFAULTS)


def save_settings(settings, path=None):
    """Write settings dict to JSON. Silently ignores write errors."""
    if path is None:
        path = _default_path()
    path = Path(path)
    try:
        path.write_text(json.dumps(settings, indent=2))
    except OSError:
        pass
