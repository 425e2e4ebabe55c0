"""Matching engine settings.

Defaults mirror the tuned production values. Each can be overridden with an
environment variable for deployments that need a different window:

    SESSIONLINK_BUCKET_INTERVAL_MINUTES: Bucket width (default: 60)
    SESSIONLINK_RETENTION_HOURS: Max age of an unmatched event (default: 2)
    SESSIONLINK_MATCH_THRESHOLD: Minimum score to accept a pair (default: 60)
    SESSIONLINK_PREFILTER_MAX_DAYS: Max start-time gap before scoring (default: 7)
    SESSIONLINK_PREFILTER_MAX_DURATION_DIFF_HOURS: Optional duration guard (default: off)
    SESSIONLINK_CLEANUP_INTERVAL_SECONDS: Scheduler period (default: 300)
"""

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import timedelta

logger = logging.getLogger(__name__)

ENV_PREFIX = "SESSIONLINK_"

BUCKET_INTERVAL_MINUTES = 60

# Unmatched events older than this are evicted by cleanup()
RETENTION_HOURS = 2.0

# Accept a pair when its best score is at least "Likely"
MATCH_THRESHOLD = 60

# Pairs whose start times are further apart are never scored by the engine
PREFILTER_MAX_DAYS = 7

CLEANUP_INTERVAL_SECONDS = 300.0


@dataclass
class MatchingSettings:
    """Correlation engine settings."""

    bucket_interval_minutes: int = BUCKET_INTERVAL_MINUTES
    retention_hours: float = RETENTION_HOURS
    match_threshold: int = MATCH_THRESHOLD
    prefilter_max_days: float = PREFILTER_MAX_DAYS
    prefilter_max_duration_diff_hours: float | None = None
    cleanup_interval_seconds: float = CLEANUP_INTERVAL_SECONDS

    def __post_init__(self) -> None:
        if self.bucket_interval_minutes <= 0:
            raise ValueError("bucket_interval_minutes must be positive")
        if self.retention_hours <= 0:
            raise ValueError("retention_hours must be positive")
        if self.cleanup_interval_seconds <= 0:
            raise ValueError("cleanup_interval_seconds must be positive")

    @property
    def retention(self) -> timedelta:
        return timedelta(hours=self.retention_hours)


def _read(env: Mapping[str, str], name: str, cast, default):
    raw = env.get(ENV_PREFIX + name)
    if raw is None or raw == "":
        return default
    try:
        return cast(raw)
    except ValueError:
        logger.warning("[CONFIG] Ignoring invalid %s%s=%r", ENV_PREFIX, name, raw)
        return default


def load_settings(env: Mapping[str, str] | None = None) -> MatchingSettings:
    """Build settings from defaults plus SESSIONLINK_* environment overrides.

    Args:
        env: Mapping to read from (defaults to os.environ)

    Returns:
        MatchingSettings
    """
    env = os.environ if env is None else env
    defaults = MatchingSettings()
    return MatchingSettings(
        bucket_interval_minutes=_read(
            env, "BUCKET_INTERVAL_MINUTES", int, defaults.bucket_interval_minutes
        ),
        retention_hours=_read(env, "RETENTION_HOURS", float, defaults.retention_hours),
        match_threshold=_read(env, "MATCH_THRESHOLD", int, defaults.match_threshold),
        prefilter_max_days=_read(env, "PREFILTER_MAX_DAYS", float, defaults.prefilter_max_days),
        prefilter_max_duration_diff_hours=_read(
            env,
            "PREFILTER_MAX_DURATION_DIFF_HOURS",
            float,
            defaults.prefilter_max_duration_diff_hours,
        ),
        cleanup_interval_seconds=_read(
            env, "CLEANUP_INTERVAL_SECONDS", float, defaults.cleanup_interval_seconds
        ),
    )
