"""Core data types.

Dataclasses for the two event streams, buffered entries and match results.
Events are immutable once received.
"""

import random
import string
import time
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, ClassVar


class StreamType(Enum):
    """Which stream an event arrived on."""

    TRACKING = "tracking"
    VIDEO = "video"

    @property
    def opposite(self) -> "StreamType":
        return StreamType.VIDEO if self is StreamType.TRACKING else StreamType.TRACKING


class Confidence(str, Enum):
    """Discrete confidence tier derived from a match score."""

    UNLIKELY = "Unlikely"
    POSSIBLE = "Possible"
    LIKELY = "Likely"
    CONFIDENT = "Confident"


def _require(data: dict, key: str, kind: str) -> Any:
    if key not in data or data[key] is None:
        raise ValueError(f"{kind} payload missing required field '{key}'")
    return data[key]


def _nested(data: dict, key: str, inner: str, kind: str) -> Any:
    value = _require(data, key, kind)
    if not isinstance(value, dict) or value.get(inner) is None:
        raise ValueError(f"{kind} payload missing required field '{key}.{inner}'")
    return value[inner]


@dataclass(frozen=True)
class Activity:
    """A sub-activity recorded inside a tracking session.

    Times are offsets like "00:40:01" and are informational only.
    """

    id: int | str
    name: str
    start_time: str
    end_time: str


@dataclass(frozen=True)
class TrackingEvent:
    """GPS/activity telemetry for one sports session."""

    stream_type: ClassVar[StreamType] = StreamType.TRACKING

    id: int | str
    name: str
    team_name: str
    start_time: str | datetime
    end_time: str | datetime
    activities: tuple[Activity, ...] = ()
    avg_total_time_active: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "TrackingEvent":
        """Build from the upstream tracking payload (camelCase keys).

        Raises:
            ValueError: If a required field is missing
        """
        activities = tuple(
            Activity(
                id=item.get("id"),
                name=item.get("name", ""),
                start_time=item.get("startTime", ""),
                end_time=item.get("endTime", ""),
            )
            for item in data.get("activities") or []
        )
        return cls(
            id=_require(data, "id", "tracking"),
            name=data.get("name") or "",
            team_name=_require(data, "teamName", "tracking"),
            start_time=_require(data, "startTime", "tracking"),
            end_time=_require(data, "endTime", "tracking"),
            activities=activities,
            avg_total_time_active=data.get("avgTotalTimeActive"),
        )

    @property
    def has_activities(self) -> bool:
        return len(self.activities) > 0

    def describe(self) -> str:
        return self.name or self.team_name


@dataclass(frozen=True)
class VideoEvent:
    """Recorded match metadata."""

    stream_type: ClassVar[StreamType] = StreamType.VIDEO

    id: str
    club_name: str
    home_name: str
    away_name: str
    start_time: str | datetime
    end_time: str | datetime
    timezone: str = "UTC"
    club_id: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "VideoEvent":
        """Build from the upstream video payload (nested club/home/away/date objects).

        Raises:
            ValueError: If a required field is missing
        """
        club = data.get("club") or {}
        return cls(
            id=str(_require(data, "id", "video")),
            club_name=_nested(data, "club", "name", "video"),
            home_name=_nested(data, "home", "name", "video"),
            away_name=_nested(data, "away", "name", "video"),
            start_time=_nested(data, "starting_at", "date", "video"),
            end_time=_nested(data, "stopping_at", "date", "video"),
            timezone=data.get("timezone") or "UTC",
            club_id=club.get("id"),
        )

    def describe(self) -> str:
        return f"{self.home_name} vs {self.away_name}"


# Tagged union over the two event kinds; dispatch on `stream_type`.
SessionEvent = TrackingEvent | VideoEvent


@dataclass(frozen=True)
class BufferedEntry:
    """A pending event waiting in a bucket buffer.

    received_at is wall-clock time at buffering, used only for eviction.
    """

    event: SessionEvent
    received_at: datetime

    @property
    def event_id(self) -> int | str:
        return self.event.id

    @property
    def stream_type(self) -> StreamType:
        return self.event.stream_type


@dataclass(frozen=True)
class MatchScoreResult:
    """Composite score for one tracking/video pair.

    score is the raw weighted sum (not clamped). details holds every
    sub-score and intermediate quantity for observability only.
    """

    score: int
    confidence: Confidence
    details: dict[str, Any] = field(default_factory=dict)


def generate_global_match_id() -> str:
    """Generate an id like MATCH_1760636713300_k3j9x0a2b."""
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=9))
    return f"MATCH_{int(time.time() * 1000)}_{suffix}"


@dataclass(frozen=True)
class GlobalMatch:
    """A confirmed tracking/video pairing, ready for persistence."""

    global_id: str
    score: int
    confidence: Confidence
    tracking: TrackingEvent
    video: VideoEvent
    details: dict[str, Any]
    matched_at: datetime

    @classmethod
    def from_result(
        cls,
        tracking: TrackingEvent,
        video: VideoEvent,
        result: MatchScoreResult,
        matched_at: datetime,
    ) -> "GlobalMatch":
        return cls(
            global_id=generate_global_match_id(),
            score=result.score,
            confidence=result.confidence,
            tracking=tracking,
            video=video,
            details=dict(result.details),
            matched_at=matched_at,
        )
