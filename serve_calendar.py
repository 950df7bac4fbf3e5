#!/usr/bin/env python3
"""
Esports League Calendar Server

Serves subscribable ICS feeds at /calendar/{league_id}, refreshed from
PandaScore at most once per cache TTL.

Usage:
    PANDASCORE_TOKEN=... python serve_calendar.py --port 8000
"""

from __future__ import annotations

import argparse
import logging
import sys

import uvicorn

from esports_calendar.server import create_app


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Serve esports league calendars")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    uvicorn.run(create_app(), host=args.host, port=args.port, log_level=args.log_level.lower())
    return 0


if __name__ == "__main__":
    sys.exit(main())
