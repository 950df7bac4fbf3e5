"""Runtime settings read from the environment."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping

from esports_calendar.cache import DEFAULT_MAX_ENTRIES, DEFAULT_TTL_SECONDS
from esports_calendar.pandascore import DEFAULT_API_BASE

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Settings:
    pandascore_token: str = ""
    api_base: str = DEFAULT_API_BASE
    ttl_seconds: int = DEFAULT_TTL_SECONDS
    cache_size: int = DEFAULT_MAX_ENTRIES
    upstream_timeout: float = 10.0


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Build Settings from PANDASCORE_* and CALENDAR_* environment variables.

    A missing token is not fatal: requests go out with an empty bearer
    token and PandaScore answers with 401, which surfaces as an upstream
    error.
    """
    env = os.environ if environ is None else environ

    token = env.get("PANDASCORE_TOKEN", "")
    if not token:
        logger.warning("PANDASCORE_TOKEN is not set; upstream requests will be unauthenticated")

    settings = Settings(
        pandascore_token=token,
        api_base=env.get("PANDASCORE_API_BASE", "") or DEFAULT_API_BASE,
        ttl_seconds=_positive(env, "CALENDAR_TTL_SECONDS", DEFAULT_TTL_SECONDS, int),
        cache_size=_positive(env, "CALENDAR_CACHE_SIZE", DEFAULT_MAX_ENTRIES, int),
        upstream_timeout=_positive(env, "UPSTREAM_TIMEOUT", 10.0, float),
    )
    return settings


def _positive(env: Mapping[str, str], name: str, default, cast):
    raw = env.get(name, "")
    if not raw:
        return default
    try:
        value = cast(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {raw!r}")
    return value
