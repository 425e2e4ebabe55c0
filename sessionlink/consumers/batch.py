"""One-shot global matching over complete lists of events.

Used when both streams are already available (backfills, replays), rather
than arriving one at a time through the CorrelationEngine.
"""

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import datetime

from sessionlink.config import MATCH_THRESHOLD
from sessionlink.consumers.matching.scoring import score_match
from sessionlink.core import GlobalMatch, MatchScoreResult, TrackingEvent, VideoEvent
from sessionlink.utilities.tz import now_utc

logger = logging.getLogger(__name__)


@dataclass
class BatchResult:
    """Matches created by one process_all() call plus what stayed unmatched."""

    matches: list[GlobalMatch] = field(default_factory=list)
    unmatched_tracking: list[TrackingEvent] = field(default_factory=list)
    unmatched_video: list[VideoEvent] = field(default_factory=list)


class BatchMatcher:
    """Greedy best-video-per-tracking matcher.

    Tracking events are visited in order; each takes the highest scoring
    video that is still unmatched (first wins ties) if it reaches the
    threshold. Matched ids are remembered across calls.
    """

    def __init__(
        self,
        threshold: int = MATCH_THRESHOLD,
        clock: Callable[[], datetime] = now_utc,
    ):
        self.threshold = threshold
        self._clock = clock
        self._matches: list[GlobalMatch] = []
        self._processed_tracking: set[int | str] = set()
        self._processed_video: set[str] = set()

    @property
    def matches(self) -> list[GlobalMatch]:
        return list(self._matches)

    def get_match(self, global_id: str) -> GlobalMatch | None:
        for match in self._matches:
            if match.global_id == global_id:
                return match
        return None

    def process_all(
        self,
        tracking_events: Iterable[TrackingEvent],
        video_events: Iterable[VideoEvent],
    ) -> BatchResult:
        """Match every tracking event against every still-unmatched video.

        Args:
            tracking_events: Tracking events to match
            video_events: Candidate video events

        Returns:
            BatchResult with this call's matches and leftovers
        """
        tracking_events = list(tracking_events)
        video_events = list(video_events)
        logger.info(
            "[BATCH] Processing %d tracking and %d video events",
            len(tracking_events),
            len(video_events),
        )

        result = BatchResult()
        for tracking in tracking_events:
            if tracking.id in self._processed_tracking:
                continue

            best: tuple[VideoEvent, MatchScoreResult] | None = None
            for video in video_events:
                if video.id in self._processed_video:
                    continue
                scored = score_match(tracking, video)
                if scored.score >= self.threshold and (best is None or scored.score > best[1].score):
                    best = (video, scored)

            if best is None:
                continue

            video, scored = best
            match = GlobalMatch.from_result(tracking, video, scored, matched_at=self._clock())
            self._matches.append(match)
            self._processed_tracking.add(tracking.id)
            self._processed_video.add(video.id)
            result.matches.append(match)
            logger.info(
                "[BATCH] %s: tracking=%s video=%s score=%d (%s)",
                match.global_id,
                tracking.id,
                video.id,
                match.score,
                match.confidence.value,
            )

        result.unmatched_tracking = [
            t for t in tracking_events if t.id not in self._processed_tracking
        ]
        result.unmatched_video = [v for v in video_events if v.id not in self._processed_video]
        for tracking in result.unmatched_tracking:
            logger.debug("[BATCH] Unmatched tracking %s (%s)", tracking.id, tracking.start_time)
        for video in result.unmatched_video:
            logger.debug("[BATCH] Unmatched video %s (%s)", video.id, video.start_time)
        return result
