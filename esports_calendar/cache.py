"""In-memory per-league calendar cache with TTL refresh."""

from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from concurrent.futures import Future
from dataclasses import dataclass
from typing import Callable

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 300
DEFAULT_MAX_ENTRIES = 256


class InvalidCalendarError(ValueError):
    """A freshly rendered document is not a well-formed calendar."""


@dataclass(frozen=True)
class CacheEntry:
    document: bytes
    rendered_at: float


def validate_ics(data: bytes) -> bool:
    """Basic validation that ICS data is well-formed."""
    text = data.decode("utf-8", errors="replace")
    return text.startswith("BEGIN:VCALENDAR") and "END:VCALENDAR" in text


class CalendarCache:
    """Maps league ids to their last rendered calendar.

    A stale or missing entry is refreshed through ``render`` on read. At most
    one refresh per league runs at a time; concurrent readers of the same
    league wait for it and share its outcome. A failed refresh raises and
    leaves the previous entry in place. Least recently used leagues are
    evicted once ``max_entries`` is exceeded.
    """

    def __init__(
        self,
        render: Callable[[int], bytes],
        ttl: float = DEFAULT_TTL_SECONDS,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self._render = render
        self._ttl = ttl
        self._max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[int, CacheEntry] = OrderedDict()
        self._in_flight: dict[int, Future] = {}
        self._lock = threading.Lock()

    @property
    def ttl(self) -> float:
        return self._ttl

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, league_id: int) -> bool:
        with self._lock:
            return league_id in self._entries

    def peek(self, league_id: int) -> CacheEntry | None:
        """Return the stored entry without refreshing or touching LRU order."""
        with self._lock:
            return self._entries.get(league_id)

    def is_fresh(self, entry: CacheEntry | None) -> bool:
        return entry is not None and self._clock() - entry.rendered_at <= self._ttl

    def get(self, league_id: int) -> bytes:
        """Return the calendar for a league, refreshing it if stale."""
        with self._lock:
            entry = self._entries.get(league_id)
            if self.is_fresh(entry):
                self._entries.move_to_end(league_id)
                logger.debug("Cache hit for league %s", league_id)
                return entry.document

            future = self._in_flight.get(league_id)
            leader = future is None
            if leader:
                future = Future()
                self._in_flight[league_id] = future

        if not leader:
            logger.debug("Waiting on in-flight refresh for league %s", league_id)
            return future.result()

        try:
            document = self._refresh(league_id)
        except BaseException as e:
            future.set_exception(e)
            raise
        else:
            future.set_result(document)
            return document
        finally:
            with self._lock:
                self._in_flight.pop(league_id, None)

    def _refresh(self, league_id: int) -> bytes:
        logger.info("Refreshing calendar for league %s", league_id)
        started = self._clock()
        try:
            document = self._render(league_id)
            if not validate_ics(document):
                raise InvalidCalendarError(f"Rendered calendar for league {league_id} failed validation")
        except Exception as e:
            logger.warning("Refresh failed for league %s: %s", league_id, e)
            raise

        entry = CacheEntry(document=document, rendered_at=self._clock())
        with self._lock:
            self._entries[league_id] = entry
            self._entries.move_to_end(league_id)
            while len(self._entries) > self._max_entries:
                evicted, _ = self._entries.popitem(last=False)
                logger.info("Evicted calendar for league %s", evicted)

        logger.info(
            "Refreshed calendar for league %s (%d bytes, %.2fs)",
            league_id,
            len(document),
            entry.rendered_at - started,
        )
        return document
