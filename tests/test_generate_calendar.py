"""Tests for the command-line calendar generator."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import generate_calendar
from esports_calendar.cache import validate_ics
from esports_calendar.config import Settings

from tests.test_pandascore import API, FakeUpstream


def _run(argv: list[str], upstream: FakeUpstream) -> int:
    settings = Settings(pandascore_token="t", api_base=API)
    with patch.object(generate_calendar, "load_settings", return_value=settings), \
            patch("esports_calendar.pandascore.requests.get", side_effect=upstream):
        return generate_calendar.main(argv)


def test_writes_league_calendar(tmp_path: Path) -> None:
    assert _run(["5", "-o", str(tmp_path)], FakeUpstream()) == 0

    ics_bytes = (tmp_path / "5.ics").read_bytes()
    assert validate_ics(ics_bytes)
    assert ics_bytes.count(b"BEGIN:VEVENT") == 4


def test_reports_upstream_failure(tmp_path: Path, capsys) -> None:
    assert _run(["5", "-o", str(tmp_path)], FakeUpstream(failures={"league": 403})) == 1
    assert not (tmp_path / "5.ics").exists()
    assert "Failed to fetch league 5" in capsys.readouterr().out


def test_malformed_payload_does_not_stop_other_leagues(tmp_path: Path, capsys) -> None:
    upstream = FakeUpstream()
    upstream.payloads["past"] = [{"name": "no id"}]
    assert _run(["5", "not-a-league", "-o", str(tmp_path)], upstream) == 1

    out = capsys.readouterr().out
    assert "Failed to fetch league 5" in out
    assert "malformed record" in out
    assert "Errors encountered: 2" in out


def test_rejects_malformed_id(tmp_path: Path) -> None:
    upstream = FakeUpstream()
    assert _run(["five", "-o", str(tmp_path)], upstream) == 1
    assert upstream.urls == []
