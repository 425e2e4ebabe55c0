"""Correlation engine for tracking and video events.

Pairs events from two independently arriving streams that describe the
same session. Whichever side arrives second triggers the match:

    engine = CorrelationEngine(on_match=store_match)
    engine.ingest_video(video)        # no counterpart yet -> buffered
    engine.ingest_tracking(tracking)  # finds the video -> on_match(...)
    engine.cleanup()                  # run periodically to evict stale events

Each buffered event ends either Matched (emitted once, removed) or Expired
(evicted after the retention window). Nothing is ever re-buffered.
"""

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from sessionlink.config import MatchingSettings, load_settings
from sessionlink.consumers.buffer import BucketBuffer, bucket_key, nearby_buckets
from sessionlink.consumers.matching.prefilter import is_potential_match
from sessionlink.consumers.matching.scoring import score_match
from sessionlink.core import (
    BufferedEntry,
    MatchScoreResult,
    SessionEvent,
    StreamType,
    TrackingEvent,
    VideoEvent,
)
from sessionlink.utilities.tz import now_utc

logger = logging.getLogger(__name__)

MatchSink = Callable[[TrackingEvent, VideoEvent, MatchScoreResult], None]


@dataclass(frozen=True)
class CorrelationOutcome:
    """What happened to one ingested event."""

    stream: StreamType
    event_id: int | str
    bucket: str
    matched: bool
    best_result: MatchScoreResult | None = None
    partner_id: int | str | None = None
    candidates_scored: int = 0
    candidates_skipped: int = 0

    @property
    def buffered(self) -> bool:
        return not self.matched


@dataclass
class _Best:
    entry: BufferedEntry
    tracking: TrackingEvent
    video: VideoEvent
    result: MatchScoreResult


class CorrelationEngine:
    """In-memory matcher owning one tracking buffer and one video buffer.

    ingest and cleanup are serialized by a lock, so events may be delivered
    from several threads. The match sink runs after the buffers have been
    updated and the lock released; it may call back into the engine.
    """

    def __init__(
        self,
        on_match: MatchSink,
        settings: MatchingSettings | None = None,
        clock: Callable[[], datetime] = now_utc,
        log: logging.Logger | logging.LoggerAdapter | None = None,
    ):
        """Initialize engine.

        Args:
            on_match: Called once per accepted (tracking, video, result) pair
            settings: Engine settings (defaults to load_settings(), which reads
                SESSIONLINK_* environment overrides)
            clock: Returns the current aware UTC time
            log: Observability hook; receives structured fields via `extra`
        """
        self._on_match = on_match
        self.settings = settings or load_settings()
        self._clock = clock
        self._log = log or logger
        self._lock = threading.Lock()
        self._buffers: dict[StreamType, BucketBuffer] = {
            StreamType.TRACKING: BucketBuffer("tracking"),
            StreamType.VIDEO: BucketBuffer("video"),
        }
        self._log.info(
            "[ENGINE] Initialized (bucket=%dmin, retention=%sh, threshold=%d)",
            self.settings.bucket_interval_minutes,
            self.settings.retention_hours,
            self.settings.match_threshold,
        )

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    @property
    def clock(self) -> Callable[[], datetime]:
        """Time source used for arrival stamps and eviction."""
        return self._clock

    def ingest_tracking(self, event: TrackingEvent) -> CorrelationOutcome:
        if not isinstance(event, TrackingEvent):
            raise TypeError(f"Expected TrackingEvent, got {type(event).__name__}")
        return self.ingest(event)

    def ingest_video(self, event: VideoEvent) -> CorrelationOutcome:
        if not isinstance(event, VideoEvent):
            raise TypeError(f"Expected VideoEvent, got {type(event).__name__}")
        return self.ingest(event)

    def ingest(self, event: SessionEvent) -> CorrelationOutcome:
        """Correlate an event against the opposite stream, or buffer it.

        Args:
            event: Tracking or video event

        Returns:
            CorrelationOutcome describing the match or buffering decision
        """
        stream = event.stream_type
        with self._lock:
            outcome, best = self._correlate(event, stream)

        if best is not None:
            self._on_match(best.tracking, best.video, best.result)
        return outcome

    def cleanup(self, now: datetime | None = None) -> int:
        """Evict buffered events older than the retention window.

        Idempotent: a second call with no new arrivals removes nothing.

        Args:
            now: Current time (defaults to the engine clock)

        Returns:
            Number of events evicted across both buffers
        """
        now = now or self._clock()
        retention = self.settings.retention
        with self._lock:
            evicted = {
                stream: buffer.evict(retention, now) for stream, buffer in self._buffers.items()
            }
        total = sum(evicted.values())
        self._log.info(
            "[EVICT] Cleanup removed %d tracking, %d video",
            evicted[StreamType.TRACKING],
            evicted[StreamType.VIDEO],
            extra={"evicted": total},
        )
        return total

    def pending_count(self, stream: StreamType | None = None) -> int:
        """Number of buffered events, for one stream or both."""
        with self._lock:
            if stream is not None:
                return len(self._buffers[stream])
            return sum(len(buffer) for buffer in self._buffers.values())

    def is_pending(self, stream: StreamType, event_id: int | str) -> bool:
        with self._lock:
            return event_id in self._buffers[stream]

    def snapshot(self) -> dict[str, dict[str, list[int | str]]]:
        """Stream -> bucket -> pending ids."""
        with self._lock:
            return {stream.value: buffer.snapshot() for stream, buffer in self._buffers.items()}

    # =========================================================================
    # PRIVATE METHODS
    # =========================================================================

    def _correlate(
        self, event: SessionEvent, stream: StreamType
    ) -> tuple[CorrelationOutcome, _Best | None]:
        """Scan, score, select and mutate. Caller holds the lock."""
        interval = self.settings.bucket_interval_minutes
        now = self._clock()
        default_tz = event.timezone if stream is StreamType.VIDEO else "UTC"
        bucket = bucket_key(event.start_time, interval, default_tz=default_tz, now=now)
        fields = {"stream": stream.value, "event_id": event.id, "bucket": bucket}

        self._log.debug("[INGEST] %s %s (%s)", stream.value, event.describe(), bucket, extra=fields)

        opposite = self._buffers[stream.opposite]
        best: _Best | None = None
        scored = 0
        skipped = 0

        for entry in opposite.candidates(nearby_buckets(bucket, interval)):
            tracking, video = self._orient(event, entry.event)
            if not is_potential_match(
                tracking,
                video,
                max_days=self.settings.prefilter_max_days,
                max_duration_diff_hours=self.settings.prefilter_max_duration_diff_hours,
            ):
                skipped += 1
                self._log.debug(
                    "[SKIP] No potential match (tracking=%s, video=%s)",
                    tracking.id,
                    video.id,
                    extra=fields,
                )
                continue

            result = score_match(tracking, video)
            scored += 1
            # Strict ">" so the first-seen candidate wins ties
            if best is None or result.score > best.result.score:
                best = _Best(entry=entry, tracking=tracking, video=video, result=result)

        if best is not None and best.result.score >= self.settings.match_threshold:
            opposite.remove(best.entry.event_id)
            self._log.info(
                "[MATCHED] tracking=%s video=%s score=%d (%s)",
                best.tracking.id,
                best.video.id,
                best.result.score,
                best.result.confidence.value,
                extra={**fields, "score": best.result.score},
            )
            outcome = CorrelationOutcome(
                stream=stream,
                event_id=event.id,
                bucket=bucket,
                matched=True,
                best_result=best.result,
                partner_id=best.entry.event_id,
                candidates_scored=scored,
                candidates_skipped=skipped,
            )
            return outcome, best

        self._buffers[stream].add(bucket, event, received_at=now)
        if best is not None:
            self._log.info(
                "[BUFFERED] No strong match for %s %s (best score: %d)",
                stream.value,
                event.id,
                best.result.score,
                extra={**fields, "score": best.result.score},
            )
        else:
            self._log.debug(
                "[BUFFERED] No potential matches for %s %s", stream.value, event.id, extra=fields
            )

        outcome = CorrelationOutcome(
            stream=stream,
            event_id=event.id,
            bucket=bucket,
            matched=False,
            best_result=best.result if best else None,
            partner_id=best.entry.event_id if best else None,
            candidates_scored=scored,
            candidates_skipped=skipped,
        )
        return outcome, None

    @staticmethod
    def _orient(
        incoming: SessionEvent, candidate: SessionEvent
    ) -> tuple[TrackingEvent, VideoEvent]:
        """Order an incoming/candidate pair as (tracking, video) by stream tag."""
        if incoming.stream_type is StreamType.TRACKING:
            return incoming, candidate
        return candidate, incoming
