#!/usr/bin/env python3
"""
Copy playlists from one Spotify account to another.

Both accounts are accessed with bearer tokens you supply (scopes:
playlist-read-private playlist-modify-public playlist-modify-private).

Usage:
  python3 migrate.py --source-token A --target-token B          # Pick playlists interactively
  python3 migrate.py --all                                      # Tokens from SPOTIFY_SOURCE_TOKEN / SPOTIFY_TARGET_TOKEN
  python3 migrate.py --filter-playlist "Road Trip" --filter-playlist "Workout Mix"
  python3 migrate.py --list                                     # List source playlists and exit
  python3 migrate.py --demo                                     # Fixture data, no tokens needed
"""

import argparse
import os
import sys

from demo_client import PAGE_DELAY, WRITE_DELAY, DemoService
from log_setup import get_logger, reset_latest, setup_library_logging
from migrator import Migrator
from models import MigrationError
from spotify_client import REQUIRED_SCOPES, SpotifyService

log = get_logger("migrate")


class ConsoleSink:
    """RunState subscriber that forwards new log lines and progress to a logger."""

    def __init__(self, logger):
        self.logger = logger
        self._seen_lines = 0
        self._seen_completed = 0

    def __call__(self, state):
        if len(state.log) < self._seen_lines:
            self._seen_lines = 0
        for line in state.log[self._seen_lines:]:
            if line.startswith("ERROR"):
                self.logger.error(f"  {line}")
            else:
                self.logger.info(f"  {line}")
        self._seen_lines = len(state.log)

        if state.completed < self._seen_completed:
            self._seen_completed = 0
        if state.completed > self._seen_completed:
            self._seen_completed = state.completed
            self.logger.info(f"[{state.completed}/{state.total}] {state.progress:.0%}")


# --- Setup ---

def resolve_tokens(args):
    source = args.source_token or os.environ.get("SPOTIFY_SOURCE_TOKEN")
    target = args.target_token or os.environ.get("SPOTIFY_TARGET_TOKEN")
    return source, target


def build_services(args):
    """Pick the live or demo implementation once, for both accounts."""
    if args.demo:
        delays = {"page_delay": PAGE_DELAY * args.demo_delay, "write_delay": WRITE_DELAY * args.demo_delay}
        return DemoService("source", **delays), DemoService("target", **delays)

    source_token, target_token = resolve_tokens(args)
    if not source_token or not target_token:
        return None
    return SpotifyService(source_token, role="source"), SpotifyService(target_token, role="target")


# --- Selection ---

def print_playlists(playlists, selected=()):
    for i, pl in enumerate(playlists, 1):
        mark = "*" if pl.id in selected else " "
        log.info(f"  {mark} [{i:>3}] {pl.name}  ({pl.track_count} tracks)")


def filter_playlists(playlists, names):
    """Filter playlists by exact name match. Returns filtered list."""
    filtered = [pl for pl in playlists if pl.name in names]
    found_names = {pl.name for pl in filtered}
    for name in names:
        if name not in found_names:
            log.warning(f"  Filter: no playlist named '{name}' found")
    return filtered


def parse_selection(text, playlists):
    """Parse '1,3,5', '2-4', 'a' (all) or 'q' (quit) into playlist ids.

    Returns None for quit. Raises ValueError on anything else.
    """
    text = text.strip().lower()
    if text == "q":
        return None
    if text == "a":
        if not playlists:
            raise ValueError("Nothing selected")
        return [pl.id for pl in playlists]

    ids = []
    for part in text.replace(",", " ").split():
        if "-" in part:
            start, end = part.split("-", 1)
            numbers = range(int(start), int(end) + 1)
        else:
            numbers = [int(part)]
        for n in numbers:
            if not 1 <= n <= len(playlists):
                raise ValueError(f"No playlist number {n}")
            ids.append(playlists[n - 1].id)
    if not ids:
        raise ValueError("Nothing selected")
    return ids


def prompt_selection(migrator):
    """Ask which playlists to copy. Returns False if the user quits."""
    print_playlists(migrator.playlists, migrator.selected)
    while True:
        choice = input("Playlists to copy (e.g. 1,3,5-7; a = all; q = quit): ")
        try:
            ids = parse_selection(choice, migrator.playlists)
        except ValueError as e:
            print(f"  → {e}")
            continue
        if ids is None:
            return False
        migrator.clear_selection()
        migrator.select(ids)
        return True


# --- Transfer ---

def run_transfer(migrator):
    """Copy the current selection. Returns True if every playlist succeeded."""
    count = len(migrator.selected)
    log.info(f"\n=== Copying {count} playlist(s) to {migrator.target_profile.display_name} ===")
    log.info("Please do not close this terminal until the transfer completes.\n")

    unsubscribe = migrator.state.subscribe(ConsoleSink(log))
    try:
        results = migrator.transfer()
    finally:
        unsubscribe()

    failed = [pl.name for pl, result in results if not result.success]
    log.info(f"\n{migrator.state.current_action}")
    log.info(migrator.summary())
    if failed:
        log.warning(f"{len(failed)} playlist(s) had errors: {', '.join(failed)}")
    return not failed


def main(argv=None):
    reset_latest()
    setup_library_logging()

    parser = argparse.ArgumentParser(description="Copy playlists between two Spotify accounts")
    parser.add_argument("--source-token", help="Bearer token of the account to copy from (or SPOTIFY_SOURCE_TOKEN)")
    parser.add_argument("--target-token", help="Bearer token of the account to copy to (or SPOTIFY_TARGET_TOKEN)")
    parser.add_argument("--demo", action="store_true", help="Use built-in demo data instead of the Spotify API")
    parser.add_argument("--demo-delay", type=float, default=1.0, metavar="FACTOR", help="Scale demo call delays (0 disables)")
    parser.add_argument("--list", action="store_true", help="List source playlists and exit")
    parser.add_argument("--all", action="store_true", help="Copy every playlist")
    parser.add_argument("--filter-playlist", action="append", metavar="NAME", help="Only copy playlists with this exact name (repeatable)")
    args = parser.parse_args(argv)

    services = build_services(args)
    if services is None:
        log.error("Error: both --source-token and --target-token are required (or use --demo)")
        log.error(f"  Tokens need the scopes: {REQUIRED_SCOPES}")
        return 1

    migrator = Migrator(*services)
    try:
        migrator.connect()
    except MigrationError as e:
        log.error(f"Error: {e}")
        return 1

    log.info(f"Source: {migrator.source_profile.display_name}")
    log.info(f"Target: {migrator.target_profile.display_name}")
    log.info(f"Found {len(migrator.playlists)} playlists.")

    if args.list:
        print_playlists(migrator.playlists)
        return 0

    if args.all or args.filter_playlist:
        if args.filter_playlist:
            playlists = filter_playlists(migrator.playlists, args.filter_playlist)
            if not playlists:
                log.error("No playlists matched the filter.")
                return 1
            migrator.select(pl.id for pl in playlists)
        else:
            migrator.select_all()
        if not migrator.selected:
            log.info("Nothing to copy.")
            return 0
        return 0 if run_transfer(migrator) else 1

    all_ok = True
    while prompt_selection(migrator):
        all_ok = run_transfer(migrator) and all_ok
        again = input("\n[c]opy more or [q]uit? ").strip().lower()
        if again != "c":
            break
        migrator.copy_more()
    migrator.reset()
    return 0 if all_ok else 1


if __name__ == "__main__":
    sys.exit(main())
