"""PandaScore API client for league metadata and matches."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Any, Callable, TypeVar

import requests

from esports_calendar import League, Match, MatchResult, Opponent

logger = logging.getLogger(__name__)

DEFAULT_API_BASE = "https://api.pandascore.co"
USER_AGENT = "EsportsLeagueCalendar/1.0 (+ics feed)"

# Concatenation order of the match buckets
PARTITIONS = ("running", "past", "upcoming")

T = TypeVar("T")


class UpstreamError(Exception):
    """A PandaScore request did not succeed."""

    def __init__(self, endpoint: str, status_code: int | None, detail: str = ""):
        self.endpoint = endpoint
        self.status_code = status_code
        message = f"PandaScore {endpoint} request failed: {status_code}"
        if detail:
            message += f" ({detail})"
        super().__init__(message)


class PandaScoreClient:
    """Thin HTTP client over the PandaScore REST API."""

    def __init__(
        self,
        token: str,
        api_base: str = DEFAULT_API_BASE,
        timeout: float = 10.0,
    ):
        self._token = token
        self._api_base = api_base.rstrip("/")
        self._timeout = timeout

    def _get(self, path: str, endpoint: str, parse: Callable[[Any], T]) -> T:
        """GET a resource and parse its JSON body.

        Transport failures, error statuses, undecodable bodies and records
        that do not parse all raise UpstreamError.
        """
        headers = {
            "Authorization": f"Bearer {self._token}",
            "Accept": "application/json",
            "User-Agent": USER_AGENT,
        }
        url = f"{self._api_base}{path}"
        logger.debug("GET %s", url)
        try:
            response = requests.get(url, headers=headers, timeout=self._timeout)
        except requests.RequestException as e:
            raise UpstreamError(endpoint, None, str(e)) from e

        if not response.ok:
            raise UpstreamError(endpoint, response.status_code)

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamError(endpoint, response.status_code, f"invalid JSON: {e}") from e

        try:
            return parse(data)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise UpstreamError(endpoint, response.status_code, f"malformed record: {e!r}") from e

    def fetch_partition(self, league_id: int, partition: str) -> list[Match]:
        """Fetch one match bucket (running, past or upcoming)."""
        if partition not in PARTITIONS:
            raise ValueError(f"Unknown match partition: {partition}")
        return self._get(
            f"/leagues/{league_id}/matches/{partition}",
            partition,
            lambda data: [parse_match(item) for item in data],
        )

    def fetch_matches(self, league_id: int) -> list[Match]:
        """Fetch running, past and upcoming matches sequentially, in that order.

        Refreshes use fetch_league_data, which issues the same requests concurrently.
        """
        matches: list[Match] = []
        for partition in PARTITIONS:
            matches.extend(self.fetch_partition(league_id, partition))
        return matches

    def fetch_league(self, league_id: int) -> League:
        return self._get(f"/leagues/{league_id}", "league", parse_league)


def fetch_league_data(client: PandaScoreClient, league_id: int) -> tuple[League, list[Match]]:
    """Fetch league metadata and all match partitions concurrently.

    Returns only once every request has succeeded. Matches keep partition
    order; if several requests fail, the first partition's error wins.
    """
    with ThreadPoolExecutor(max_workers=len(PARTITIONS) + 1) as pool:
        partition_futures = [
            pool.submit(client.fetch_partition, league_id, partition)
            for partition in PARTITIONS
        ]
        league_future = pool.submit(client.fetch_league, league_id)

        matches: list[Match] = []
        for future in partition_futures:
            matches.extend(future.result())
        league = league_future.result()

    return league, matches


def parse_league(data: dict) -> League:
    videogame = data.get("videogame") or {}
    return League(
        id=int(data["id"]),
        name=data.get("name") or f"League {data['id']}",
        game=videogame.get("name"),
    )


def parse_match(data: dict) -> Match:
    """Convert a raw PandaScore match record into a Match."""
    opponents = tuple(
        _parse_opponent(entry.get("opponent") or {})
        for entry in data.get("opponents") or []
    )
    results = tuple(
        MatchResult(score=int(r.get("score") or 0), team_id=r.get("team_id"))
        for r in data.get("results") or []
    )
    tournament = (data.get("tournament") or {}).get("name") or ""

    return Match(
        id=int(data["id"]),
        name=data.get("name") or "",
        status=data.get("status") or "not_started",
        tournament=tournament,
        begin_at=parse_timestamp(data.get("begin_at")),
        scheduled_at=parse_timestamp(data.get("scheduled_at")),
        end_at=parse_timestamp(data.get("end_at")),
        number_of_games=_optional_int(data.get("number_of_games")),
        opponents=opponents,
        results=results,
    )


def _optional_int(value) -> int | None:
    if value is None or value == "":
        return None
    return int(value)


def _parse_opponent(data: dict) -> Opponent:
    return Opponent(
        id=data.get("id"),
        acronym=data.get("acronym"),
        name=data.get("name"),
    )


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an ISO 8601 timestamp into an aware UTC datetime."""
    if not value:
        return None
    dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)
