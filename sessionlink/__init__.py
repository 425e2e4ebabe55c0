"""Correlate tracking and video events that describe the same sports session."""

from sessionlink.config import MatchingSettings, load_settings
from sessionlink.consumers import (
    BatchMatcher,
    CleanupScheduler,
    CorrelationEngine,
    CorrelationOutcome,
    MatchCollector,
)
from sessionlink.core import (
    Activity,
    Confidence,
    GlobalMatch,
    MatchScoreResult,
    StreamType,
    TrackingEvent,
    VideoEvent,
)

__version__ = "0.1.0"

__all__ = [
    "Activity",
    "BatchMatcher",
    "CleanupScheduler",
    "Confidence",
    "CorrelationEngine",
    "CorrelationOutcome",
    "GlobalMatch",
    "MatchCollector",
    "MatchScoreResult",
    "MatchingSettings",
    "StreamType",
    "TrackingEvent",
    "VideoEvent",
    "load_settings",
]
