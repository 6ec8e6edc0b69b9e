#!/usr/bin/env python3
"""
Unified entry point for all Number City interfaces.

Usage:
    python number_city.py                            # Default: pygame
    python number_city.py --ui tui --level 2         # Terminal (Textual)
    python number_city.py --timed --seconds 8        # Timed rounds
    python number_city.py --ui web --port 8080       # Browser (Flask)

Individual entry points (main.py, tui.py, web.py) still work independently.
"""
import argparse


def main(argv=None):
    # Pre-parse just the --ui flag, pass everything else through
    parser = argparse.ArgumentParser(
        description="Number City — play in pygame, terminal, or browser",
        add_help=False,
    )
    parser.add_argument("--ui", choices=["pygame", "tui", "web"], default="pygame",
                        help="Interface: pygame (default), tui (terminal), web (browser)")
    args, remaining = parser.parse_known_args(argv)

    if args.ui == "pygame":
        from main import main as run_pygame
        run_pygame(remaining)

    elif args.ui == "tui":
        from tui import main as run_tui
        run_tui(remaining)

    elif args.ui == "web":
        from web import main as run_web
        run_web(remaining)


if __name__ == "__main__":
    main()
