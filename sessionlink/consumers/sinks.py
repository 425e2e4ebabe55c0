"""Match sinks for the correlation engine."""

import logging
import threading
from collections.abc import Callable
from datetime import datetime

from sessionlink.core import GlobalMatch, MatchScoreResult, TrackingEvent, VideoEvent
from sessionlink.utilities.tz import now_utc

logger = logging.getLogger(__name__)


class MatchCollector:
    """Sink that turns every emitted pair into a GlobalMatch record.

    Records are kept in memory and optionally handed to a downstream
    callable (storage, publisher).
    """

    def __init__(
        self,
        forward: Callable[[GlobalMatch], None] | None = None,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._forward = forward
        self._clock = clock
        self._matches: list[GlobalMatch] = []
        self._lock = threading.Lock()

    def __call__(self, tracking: TrackingEvent, video: VideoEvent, result: MatchScoreResult) -> None:
        match = GlobalMatch.from_result(tracking, video, result, matched_at=self._clock())
        with self._lock:
            self._matches.append(match)
        logger.info(
            "[GLOBAL MATCH] %s: %s <-> %s score=%d (%s)",
            match.global_id,
            tracking.describe(),
            video.describe(),
            match.score,
            match.confidence.value,
        )
        if self._forward is not None:
            self._forward(match)

    def __len__(self) -> int:
        with self._lock:
            return len(self._matches)

    @property
    def matches(self) -> list[GlobalMatch]:
        with self._lock:
            return list(self._matches)

    def clear(self) -> list[GlobalMatch]:
        """Remove and return all collected matches."""
        with self._lock:
            drained, self._matches = self._matches, []
        return drained
