"""HTTP feed endpoint serving league calendars.

Provides:
- GET /calendar/{league_id} - ICS feed for a league
- GET /health - Liveness and cache size
"""

from __future__ import annotations

import logging
import time
from typing import Callable

from fastapi import FastAPI
from fastapi.responses import PlainTextResponse, Response

from esports_calendar.cache import CalendarCache, InvalidCalendarError
from esports_calendar.calendar_gen import render_league_calendar
from esports_calendar.config import Settings, load_settings
from esports_calendar.pandascore import PandaScoreClient, UpstreamError, fetch_league_data

logger = logging.getLogger(__name__)

ICS_MEDIA_TYPE = "text/calendar; charset=utf-8"


class InvalidLeagueId(ValueError):
    """League id in the request path is missing or not a positive integer."""


def parse_league_id(raw: str | None) -> int:
    value = (raw or "").strip()
    if not (value.isascii() and value.isdigit()):
        raise InvalidLeagueId(f"League id must be a positive integer, got {raw!r}")
    league_id = int(value)
    if league_id <= 0:
        raise InvalidLeagueId(f"League id must be a positive integer, got {raw!r}")
    return league_id


def build_cache(settings: Settings, clock: Callable[[], float] = time.monotonic) -> CalendarCache:
    """Wire a PandaScore-backed calendar cache from settings."""
    client = PandaScoreClient(
        token=settings.pandascore_token,
        api_base=settings.api_base,
        timeout=settings.upstream_timeout,
    )

    def render(league_id: int) -> bytes:
        league, matches = fetch_league_data(client, league_id)
        return render_league_calendar(league, matches, refresh_seconds=settings.ttl_seconds)

    return CalendarCache(
        render,
        ttl=settings.ttl_seconds,
        max_entries=settings.cache_size,
        clock=clock,
    )


def create_app(cache: CalendarCache | None = None) -> FastAPI:
    if cache is None:
        cache = build_cache(load_settings())

    app = FastAPI(title="Esports League Calendar")
    app.state.calendar_cache = cache

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok", "cached_leagues": len(cache)}

    @app.get("/calendar/{league_id}")
    def get_calendar(league_id: str) -> Response:
        """Serve the ICS feed for a league.

        Runs in the server's worker pool; if the client disconnects the
        refresh still completes and fills the cache for the next request.
        """
        try:
            parsed_id = parse_league_id(league_id)
        except InvalidLeagueId as e:
            return PlainTextResponse(str(e), status_code=400)

        try:
            document = cache.get(parsed_id)
        except UpstreamError as e:
            logger.error("Calendar for league %s unavailable: %s", parsed_id, e)
            return PlainTextResponse(f"Upstream error: {e}", status_code=502)
        except InvalidCalendarError as e:
            logger.error("Calendar for league %s unavailable: %s", parsed_id, e)
            return PlainTextResponse("Calendar generation failed", status_code=500)

        return Response(
            content=document,
            media_type=ICS_MEDIA_TYPE,
            headers={"Content-Disposition": f"inline; filename={parsed_id}.ics"},
        )

    return app
