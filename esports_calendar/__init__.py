"""Esports League Calendar — shared data models."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

MATCH_STATUSES = ("not_started", "running", "finished", "postponed", "canceled")


@dataclass(frozen=True)
class League:
    """League metadata used as the calendar title."""

    id: int
    name: str
    game: str | None = None

    @property
    def title(self) -> str:
        if self.game and self.game.lower() not in self.name.lower():
            return f"{self.name} ({self.game})"
        return self.name


@dataclass(frozen=True)
class Opponent:
    id: int | None = None
    acronym: str | None = None
    name: str | None = None

    @property
    def label(self) -> str:
        return self.acronym or self.name or "TBD"


@dataclass(frozen=True)
class MatchResult:
    score: int
    team_id: int | None = None


@dataclass(frozen=True)
class Match:
    """A single match as reported by the data provider."""

    id: int
    name: str
    status: str
    tournament: str
    begin_at: datetime | None = None
    scheduled_at: datetime | None = None
    end_at: datetime | None = None
    number_of_games: int | None = None
    opponents: tuple[Opponent, ...] = ()
    results: tuple[MatchResult, ...] = ()

    @property
    def start(self) -> datetime | None:
        """Scheduling time; None means the match has no calendar slot."""
        return self.begin_at or self.scheduled_at

    @property
    def end(self) -> datetime | None:
        """Explicit end time if usable, else one hour per game (minimum one)."""
        start = self.start
        if start is None:
            return None
        if self.end_at is not None and self.end_at >= start:
            return self.end_at
        return start + timedelta(hours=max(self.number_of_games or 1, 1))


@dataclass(frozen=True)
class CalendarEvent:
    """A calendar entry derived from one match."""

    uid: str
    start: datetime
    end: datetime
    summary: str
    description: str
    status: str = "not_started"
