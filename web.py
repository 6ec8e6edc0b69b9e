#!/usr/bin/env python3
"""
Number City Web — Flask + WebSocket server for browser-based play.

Each WebSocket connection gets its own GameCoordinator instance.
State is pushed to the client as JSON snapshots at ~30 FPS. Sound cues are
rendered server-side as WAV files; the snapshot names the cues the browser
should play since the previous frame.
"""
import json
import logging
import threading
import time

from flask import Flask, Response, abort, render_template
from flask_sock import Sock

from frontend_adapter import SUBTITLE, TITLE, FrontendAdapter, SoundInterface
from game_coordinator import GameCoordinator
from levels import LEVELS
from sounds import render_cue, to_wav

logger = logging.getLogger(__name__)

app = Flask(__name__)
sock = Sock(app)

FRAME_SECONDS = 1 / 30

_wav_cache = {}


class CueRecorder(SoundInterface):
    """Collects cue names for the browser to play instead of playing them."""

    def __init__(self, volume=0.8):
        self._enabled = True
        self._volume = volume
        self._pending = []

    def _record(self, name):
        if self._enabled and self._volume > 0:
            self._pending.append(name)

    def celebrate(self, level_id):
        self._record(f"celebrate-{level_id}")

    def wrong(self):
        self._record("wrong")

    def click(self):
        self._record("click")

    def update(self, elapsed_ms):
        pass

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

    def drain(self):
        """Return and forget the cues recorded since the last drain."""
        cues, self._pending = self._pending, []
        return cues


@app.route("/")
def index():
    """Landing page with the level picker."""
    return render_template("index.html", title=TITLE, subtitle=SUBTITLE, levels=LEVELS)


@app.route("/game")
def game():
    """Main game page — connects to WebSocket for real-time play."""
    return render_template("game.html", title=TITLE)


@app.route("/sounds/<cue>.wav")
def sound(cue):
    """A synthesized cue as a WAV file."""
    data = _wav_cache.get(cue)
    if data is None:
        samples = render_cue(cue)
        if samples is None:
            abort(404)
        data = _wav_cache[cue] = to_wav(samples)
    return Response(data, mimetype="audio/wav")


@sock.route("/ws")
def websocket(ws):
    """WebSocket handler — one game per connection."""
    sound = CueRecorder()
    coordinator = GameCoordinator()
    adapter = FrontendAdapter(coordinator, sound=sound)
    adapter.load_settings()
    sound.drain()
    lock = threading.Lock()
    running = True

    def tick_loop():
        """Background thread: tick coordinator and push state at ~30 FPS."""
        nonlocal running
        last = time.monotonic()
        while running:
            try:
                now = time.monotonic()
                elapsed_ms = int((now - last) * 1000)
                last += elapsed_ms / 1000
                with lock:
                    adapter.update(elapsed_ms)
                    snapshot = adapter.get_game_snapshot()
                    snapshot["cues"] = sound.drain()
                ws.send(json.dumps(snapshot))
            except Exception:
                logger.error("Tick loop error", exc_info=True)
                running = False
                break
            time.sleep(FRAME_SECONDS)

    tick_thread = threading.Thread(target=tick_loop, daemon=True)
    tick_thread.start()

    try:
        while running:
            data = ws.receive()
            if data is None:
                break
            try:
                action = json.loads(data)
            except json.JSONDecodeError:
                logger.warning("Invalid JSON from client: %s", data)
                continue
            if not isinstance(action, dict):
                logger.warning("Ignoring non-object message: %s", data)
                continue

            with lock:
                _handle_action(adapter, action)
    except Exception:
        logger.error("WebSocket receive error", exc_info=True)
    finally:
        running = False


def _handle_action(adapter, action):
    """Dispatch a client action to the adapter."""
    cmd = action.get("action", "")

    if cmd == "select_level":
        level_id = action.get("level")
        if isinstance(level_id, int) and not isinstance(level_id, bool):
            adapter.do_select_level(level_id)

    elif cmd == "answer":
        number = action.get("number")
        if isinstance(number, int) and not isinstance(number, bool):
            adapter.do_answer(number)

    elif cmd == "next":
        adapter.do_next()

    elif cmd == "reset":
        adapter.do_reset()

    elif cmd == "toggle_timed":
        adapter.toggle_timed()

    elif cmd == "set_timer_seconds":
        seconds = action.get("seconds")
        if isinstance(seconds, (int, float)) and not isinstance(seconds, bool):
            adapter.set_timer_seconds(seconds)

    elif cmd == "toggle_sound":
        adapter.toggle_sound()

    elif cmd == "set_volume":
        volume = action.get("volume")
        if isinstance(volume, (int, float)) and not isinstance(volume, bool):
            adapter.set_volume(volume)

    else:
        logger.debug("Unknown action: %r", cmd)


def main(argv=None):
    """Entry point for the web server."""
    import argparse
    parser = argparse.ArgumentParser(description="Number City Web Server")
    parser.add_argument("--host", default="127.0.0.1", help="Host to bind (default: 127.0.0.1)")
    parser.add_argument("--port", type=int, default=5000, help="Port (default: 5000)")
    parser.add_argument("--debug", action="store_true", help="Enable debug mode")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.debug else logging.INFO,
                        format="%(asctime)s %(name)s %(levelname)s %(message)s")
    print(f"Starting Number City web server at http://{args.host}:{args.port}")
    app.run(host=args.host, port=args.port, debug=args.debug)


if __name__ == "__main__":
    main()
