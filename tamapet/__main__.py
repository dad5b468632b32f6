#!/usr/bin/env python3
"""
Tamapet - Main Entry Point

Run:
  python -m tamapet

Keys:
  h hatch    f feed    p play    n nap    c clean
  r restart  q quit
"""

import argparse
import logging

from .constants import DB_FILE, STORE_BACKEND


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="A tiny virtual pet that hatches, lives and dies.")
    parser.add_argument("--db", default=DB_FILE, help=f"save file path (default: {DB_FILE})")
    parser.add_argument("--store", choices=("sqlite", "json"), default=STORE_BACKEND,
                        help=f"save file format (default: {STORE_BACKEND})")
    parser.add_argument("--reset", action="store_true", help="discard the saved pet and start from an egg")
    parser.add_argument("--verbose", "-v", action="store_true", help="log every tick and save")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )

    # Imported late so --help works without initialising pygame
    from .tamagotchi import GameEngine

    game = GameEngine(db_path=args.db, backend=args.store, reset=args.reset)
    return game.run()


if __name__ == "__main__":
    raise SystemExit(main())
