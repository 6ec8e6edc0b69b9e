"""
ToneGenerator — Synthesized audio cues for Number City using pure Python.

Generates 16-bit PCM waveforms via struct.pack + math (no numpy). The mixer is
brought up lazily on the first cue and the rendered sounds are cached, so all
later cues are fire-and-forget Sound.play() calls. If the audio device cannot
be opened every cue becomes a silent no-op: sound is never required to play.
"""
from __future__ import annotations

import io
import logging
import math
import struct
import wave

import pygame

logger = logging.getLogger(__name__)

SAMPLE_RATE = 44100

# Per-level base notes for the celebration chord: C5, D5, E5
LEVEL_BASE_FREQS = {1: 523.25, 2: 587.33, 3: 659.25}
MAJOR_TRIAD = (1.0, 5 / 4, 3 / 2)

CHORD_STAGGER_MS = 60
CHORD_NOTE_MS = 250
CHORD_ATTACK_MS = 30
CHORD_PEAK = 0.45

WRONG_START_HZ = 200.0
WRONG_END_HZ = 90.0
WRONG_SWEEP_MS = 250
WRONG_TOTAL_MS = 360
WRONG_ATTACK_MS = 20
WRONG_PEAK = 0.35

CLICK_HZ = 880.0
CLICK_MS = 80
CLICK_ATTACK_MS = 5
CLICK_PEAK = 0.15

FLOOR = 0.0001                # exponential ramps cannot reach exactly 0
VOLUME_TIME_CONSTANT_MS = 10.0


def _envelope(i: int, attack: int, length: int, peak: float) -> float:
    """Exponential attack-decay: FLOOR -> peak over attack samples, back to FLOOR at length."""
    if i < attack:
        return FLOOR * (peak / FLOOR) ** (i / attack)
    decay = max(1, length - attack)
    return peak * (FLOOR / peak) ** ((i - attack) / decay)


def _triangle(phase: float) -> float:
    """Triangle wave in [-1, 1] for a phase in radians."""
    x = (phase / (2 * math.pi)) % 1.0
    return 4 * x - 1 if x < 0.5 else 3 - 4 * x


def render_chord(base_freq: float, sample_rate: int = SAMPLE_RATE) -> list[float]:
    """Three staggered triangle notes of a major triad, mixed into one buffer."""
    stagger = int(sample_rate * CHORD_STAGGER_MS / 1000)
    note_len = int(sample_rate * CHORD_NOTE_MS / 1000)
    attack = int(sample_rate * CHORD_ATTACK_MS / 1000)
    total = stagger * (len(MAJOR_TRIAD) - 1) + note_len
    mix = [0.0] * total
    for n, ratio in enumerate(MAJOR_TRIAD):
        freq = base_freq * ratio
        offset = n * stagger
        for i in range(note_len):
            phase = 2 * math.pi * freq * i / sample_rate
            mix[offset + i] += _triangle(phase) * _envelope(i, attack, note_len, CHORD_PEAK)
    return mix


def render_wrong(sample_rate: int = SAMPLE_RATE) -> list[float]:
    """Low buzz sweeping 200 Hz -> 90 Hz, with a short attack-decay envelope."""
    total = int(sample_rate * WRONG_TOTAL_MS / 1000)
    sweep = int(sample_rate * WRONG_SWEEP_MS / 1000)
    attack = int(sample_rate * WRONG_ATTACK_MS / 1000)
    samples = []
    phase = 0.0
    for i in range(total):
        t = min(1.0, i / sweep)
        freq = WRONG_START_HZ * (WRONG_END_HZ / WRONG_START_HZ) ** t
        phase += 2 * math.pi * freq / sample_rate
        samples.append(_triangle(phase) * _envelope(i, attack, total, WRONG_PEAK))
    return samples


def render_click(sample_rate: int = SAMPLE_RATE) -> list[float]:
    """Short 880 Hz sine tick."""
    total = int(sample_rate * CLICK_MS / 1000)
    attack = int(sample_rate * CLICK_ATTACK_MS / 1000)
    return [
        math.sin(2 * math.pi * CLICK_HZ * i / sample_rate) * _envelope(i, attack, total, CLICK_PEAK)
        for i in range(total)
    ]


def to_pcm(samples: list[float], channels: int = 1) -> bytes:
    """Pack float samples [-1.0, 1.0] as signed 16-bit little-endian PCM.

    Mono samples are duplicated across channels for a stereo mixer.
    """
    frames = []
    for s in samples:
        v = int(max(-1.0, min(1.0, s)) * 32767)
        frames.append(struct.pack("<" + "h" * channels, *([v] * channels)))
    return b"".join(frames)


def to_wav(samples: list[float], sample_rate: int = SAMPLE_RATE) -> bytes:
    """Wrap mono samples in a WAV container (served to the browser frontend)."""
    buf = io.BytesIO()
    with wave.open(buf, "wb") as wav:
        wav.setnchannels(1)
        wav.setsampwidth(2)
        wav.setframerate(sample_rate)
        wav.writeframes(to_pcm(samples))
    return buf.getvalue()


def render_cue(name: str, sample_rate: int = SAMPLE_RATE) -> list[float] | None:
    """Render a cue by name: "celebrate-<level>", "wrong" or "click"."""
    if name == "wrong":
        return render_wrong(sample_rate)
    if name == "click":
        return render_click(sample_rate)
    if name.startswith("celebrate-"):
        try:
            level_id = int(name.split("-", 1)[1])
        except ValueError:
            return None
        base = LEVEL_BASE_FREQS.get(level_id)
        if base is not None:
            return render_chord(base, sample_rate)
    return None


CUE_NAMES = ["click", "wrong"] + [f"celebrate-{lvl}" for lvl in LEVEL_BASE_FREQS]


def _mixer_init():
    """Open the mixer if nothing else has. Returns (sample_rate, channels)."""
    if not pygame.mixer.get_init():
        pygame.mixer.init(frequency=SAMPLE_RATE, size=-16, channels=1)
    freq, _size, channels = pygame.mixer.get_init()
    return freq, channels


def _make_sound(pcm_bytes: bytes) -> pygame.mixer.Sound:
    """Wrap raw PCM bytes in a pygame.mixer.Sound."""
    return pygame.mixer.Sound(buffer=pcm_bytes)


class ToneGenerator:
    """Plays the game's three cues through a shared master volume.

    mixer_init and sound_factory default to pygame; tests pass fakes.
    """

    def __init__(self, mixer_init=None, sound_factory=None, volume: float = 0.8) -> None:
        self._mixer_init = mixer_init or _mixer_init
        self._sound_factory = sound_factory or _make_sound
        self._ready = False
        self._available = True
        self._sounds: dict[str, object] = {}
        self._enabled = True
        self._volume = _clamp_volume(volume)
        self.current_gain = self.target_gain

    # ── Backend ──────────────────────────────────────────────────────────

    def _ensure_ready(self) -> bool:
        """Initialise the mixer and render cues once. False if audio is unavailable."""
        if self._ready:
            return True
        if not self._available:
            return False
        try:
            sample_rate, channels = self._mixer_init()
            for name in CUE_NAMES:
                pcm = to_pcm(render_cue(name, sample_rate), channels)
                self._sounds[name] = self._sound_factory(pcm)
        except (pygame.error, OSError, ValueError, NotImplementedError):
            # Without SDL_mixer, pygame.mixer is a stub that raises NotImplementedError
            logger.debug("Audio backend unavailable; continuing without sound", exc_info=True)
            self._available = False
            self._sounds = {}
            return False
        self._ready = True
        self._apply_gain()
        return True

    @property
    def available(self) -> bool:
        return self._available

    def _play(self, name: str) -> None:
        if self.target_gain == 0.0 and self.current_gain == 0.0:
            return
        if not self._ensure_ready():
            return
        sound = self._sounds.get(name)
        if sound is None:
            return
        try:
            sound.set_volume(self.current_gain)
            sound.play()
        except pygame.error:
            logger.debug("Failed to play %s", name, exc_info=True)

    # ── Cues ─────────────────────────────────────────────────────────────

    def celebrate(self, level_id: int) -> None:
        self._play(f"celebrate-{level_id}")

    def wrong(self) -> None:
        self._play("wrong")

    def click(self) -> None:
        self._play("click")

    # ── Volume / mute ────────────────────────────────────────────────────

    @property
    def enabled(self) -> bool:
        return self._enabled

    @enabled.setter
    def enabled(self, value: bool) -> None:
        self._enabled = bool(value)

    def toggle(self) -> bool:
        """Toggle mute. Returns new enabled state."""
        self._enabled = not self._enabled
        return self._enabled

    @property
    def volume(self) -> float:
        return self._volume

    def set_volume(self, volume: float) -> None:
        self._volume = _clamp_volume(volume)

    @property
    def target_gain(self) -> float:
        """Master gain the ramp is heading for (0.0 when muted)."""
        return self._volume if self._enabled else 0.0

    def update(self, elapsed_ms: float) -> None:
        """Ease current_gain toward target_gain (10 ms time constant)."""
        target = self.target_gain
        if elapsed_ms > 0 and self.current_gain != target:
            k = 1.0 - math.exp(-elapsed_ms / VOLUME_TIME_CONSTANT_MS)
            self.current_gain += (target - self.current_gain) * k
            if abs(target - self.current_gain) < 1e-4:
                self.current_gain = target
            self._apply_gain()

    def _apply_gain(self) -> None:
        for sound in self._sounds.values():
            sound.set_volume(self.current_gain)


def _clamp_volume(volume) -> float:
    """Clamp to 0-1. Raises TypeError/ValueError for non-numeric input."""
    return max(0.0, min(1.0, float(volume)))


_shared: ToneGenerator | None = None


def shared_tone_generator() -> ToneGenerator:
    """Return the process-wide ToneGenerator, creating it on first use."""
    global _shared
    if _shared is None:
        _shared = ToneGenerator()
    return _shared
