"""Core types."""

from sessionlink.core.types import (
    Activity,
    BufferedEntry,
    Confidence,
    GlobalMatch,
    MatchScoreResult,
    SessionEvent,
    StreamType,
    TrackingEvent,
    VideoEvent,
    generate_global_match_id,
)

__all__ = [
    "Activity",
    "BufferedEntry",
    "Confidence",
    "GlobalMatch",
    "MatchScoreResult",
    "SessionEvent",
    "StreamType",
    "TrackingEvent",
    "VideoEvent",
    "generate_global_match_id",
]
