#!/usr/bin/env python3
"""
Esports League Calendar Generator

Fetches a league's matches from PandaScore and writes its ICS calendar
to disk. Useful for static hosting or checking a feed without running
the HTTP server.

Usage:
    python generate_calendar.py 4197                 # writes public/4197.ics
    python generate_calendar.py 4197 293 -o feeds    # several leagues
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from esports_calendar.cache import validate_ics
from esports_calendar.calendar_gen import create_league_calendar, match_to_event
from esports_calendar.config import load_settings
from esports_calendar.pandascore import PandaScoreClient, UpstreamError, fetch_league_data
from esports_calendar.server import InvalidLeagueId, parse_league_id


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Write PandaScore league calendars as ICS files")
    parser.add_argument("league_ids", nargs="+", help="PandaScore league ids")
    parser.add_argument("-o", "--output-dir", default="public", help="Output directory (default: public)")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    settings = load_settings()
    client = PandaScoreClient(
        token=settings.pandascore_token,
        api_base=settings.api_base,
        timeout=settings.upstream_timeout,
    )
    output_dir = Path(args.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    errors: list[str] = []

    for raw_id in args.league_ids:
        try:
            league_id = parse_league_id(raw_id)
        except InvalidLeagueId as e:
            errors.append(str(e))
            print(f"  ERROR: {e}")
            continue

        print(f"\nFetching league {league_id} from PandaScore...")

        try:
            league, matches = fetch_league_data(client, league_id)
        except UpstreamError as e:
            error_msg = f"Failed to fetch league {league_id}: {e}"
            print(f"  ERROR: {error_msg}")
            errors.append(error_msg)
            continue

        events = [ev for ev in (match_to_event(m) for m in matches) if ev is not None]
        print(f"  {league.title}: {len(matches)} matches, {len(events)} scheduled")

        ics_bytes = create_league_calendar(league, matches, settings.ttl_seconds).to_ical()
        if not validate_ics(ics_bytes):
            error_msg = f"Generated ICS for league {league_id} failed validation"
            print(f"  ERROR: {error_msg}")
            errors.append(error_msg)
            continue

        ics_path = output_dir / f"{league_id}.ics"
        ics_path.write_bytes(ics_bytes)
        print(f"  Saved {ics_path}")

    if errors:
        print(f"\nErrors encountered: {len(errors)}")
        for err in errors:
            print(f"  - {err}")
        return 1

    print("\nDone — all calendars generated successfully")
    return 0


if __name__ == "__main__":
    sys.exit(main())
