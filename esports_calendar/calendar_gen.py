"""ICS calendar generation from match data."""

from __future__ import annotations

from datetime import timezone

from icalendar import Calendar, Event

from esports_calendar import CalendarEvent, League, Match

UID_SOURCE = "pandascore"
CALENDAR_TIMEZONE = "UTC"
DEFAULT_REFRESH_SECONDS = 300


def match_title(match: Match) -> str:
    """Build the event summary for a match.

    Finished matches with at least two results show the score line in source
    order ("A 2 - 1 B"); otherwise opponents are joined with " vs ", and
    matches without opponents fall back to the provider's match name.
    """
    if (
        match.status == "finished"
        and len(match.results) >= 2
        and len(match.opponents) >= 2
    ):
        first, second = match.opponents[0], match.opponents[1]
        score1, score2 = match.results[0].score, match.results[1].score
        return f"{first.label} {score1} - {score2} {second.label}"

    if match.opponents:
        return " vs ".join(o.label for o in match.opponents)

    return match.name


def match_to_event(match: Match, source: str = UID_SOURCE) -> CalendarEvent | None:
    """Map a match to a calendar event, or None if it is not scheduled."""
    start = match.start
    if start is None:
        return None

    return CalendarEvent(
        uid=f"match-{match.id}@{source}",
        start=start.astimezone(timezone.utc),
        end=match.end.astimezone(timezone.utc),
        summary=match_title(match),
        description=f"{match.tournament} - {match.status}",
        status=match.status,
    )


def create_league_calendar(
    league: League,
    matches: list[Match],
    refresh_seconds: int = DEFAULT_REFRESH_SECONDS,
) -> Calendar:
    """Create an ICS calendar for a league's matches."""
    cal = Calendar()
    cal.add("prodid", f"-//{league.name} Match Calendar//pandascore.co//")
    cal.add("version", "2.0")
    cal.add("calscale", "GREGORIAN")
    cal.add("method", "PUBLISH")
    cal.add("x-wr-calname", league.title)
    cal.add("x-wr-timezone", CALENDAR_TIMEZONE)
    # Refresh interval hint for calendar clients, aligned with the cache TTL
    cal.add("x-published-ttl", f"PT{max(refresh_seconds // 60, 1)}M")

    for match in matches:
        event = match_to_event(match)
        if event is not None:
            cal.add_component(_create_event(event))

    return cal


def render_league_calendar(
    league: League,
    matches: list[Match],
    refresh_seconds: int = DEFAULT_REFRESH_SECONDS,
) -> bytes:
    return create_league_calendar(league, matches, refresh_seconds).to_ical()


def _create_event(event: CalendarEvent) -> Event:
    ical_event = Event()
    ical_event.add("uid", event.uid)
    # Derived from the match, never the wall clock
    ical_event.add("dtstamp", event.start)
    ical_event.add("summary", event.summary)
    ical_event.add("dtstart", event.start)
    ical_event.add("dtend", event.end)
    ical_event.add("description", event.description)

    if event.status == "canceled":
        ical_event.add("status", "CANCELLED")
    elif event.status == "postponed":
        ical_event.add("status", "TENTATIVE")
    else:
        ical_event.add("status", "CONFIRMED")

    if event.status in ("finished", "canceled"):
        ical_event.add("transp", "TRANSPARENT")  # Don't block time for past matches

    return ical_event
