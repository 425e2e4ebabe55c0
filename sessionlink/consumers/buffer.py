"""Time-bucketed buffers of unmatched events.

Each stream keeps its own BucketBuffer: bucket key -> pending entries in
arrival order. A bucket key is the event start floored to the bucket
interval and serialized as a UTC instant ("2025-10-16T17:00:00Z").

Searching the previous, current and next bucket finds every buffered event
whose start lies within one interval of the probe, wherever the floor
boundary falls.
"""

import logging
from collections.abc import Iterable, Iterator
from datetime import UTC, datetime, timedelta

from sessionlink.config import BUCKET_INTERVAL_MINUTES
from sessionlink.core import BufferedEntry, SessionEvent
from sessionlink.utilities.tz import format_utc, now_utc, parse_timestamp

logger = logging.getLogger(__name__)

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


def floor_to_interval(dt: datetime, interval_minutes: int = BUCKET_INTERVAL_MINUTES) -> datetime:
    """Floor an aware datetime to the interval, zeroing seconds and sub-seconds."""
    interval = timedelta(minutes=interval_minutes)
    utc = dt.astimezone(UTC).replace(second=0, microsecond=0)
    return _EPOCH + ((utc - _EPOCH) // interval) * interval


def bucket_key(
    value: str | datetime | None,
    interval_minutes: int = BUCKET_INTERVAL_MINUTES,
    default_tz: str | None = "UTC",
    now: datetime | None = None,
) -> str:
    """Derive the bucket key for a start timestamp.

    Invalid input is bucketed at "now" so the event is never dropped.

    Args:
        value: Start timestamp (ISO string or datetime)
        interval_minutes: Bucket width
        default_tz: Timezone for naive timestamps
        now: Current time for the invalid-input fallback

    Returns:
        ISO 8601 UTC bucket key
    """
    dt = parse_timestamp(value, default_tz)
    if dt is None:
        logger.warning("[BUCKET] Invalid date %r, bucketing at current time", value)
        dt = now or now_utc()
    return format_utc(floor_to_interval(dt, interval_minutes))


def nearby_buckets(bucket: str, interval_minutes: int = BUCKET_INTERVAL_MINUTES) -> list[str]:
    """Return [previous, bucket, next] keys around a bucket key.

    A neighbour outside the datetime range (before year 1 or after 9999)
    is left out.
    """
    base = parse_timestamp(bucket)
    if base is None:
        return [bucket]
    delta = timedelta(minutes=interval_minutes)
    buckets = []
    for offset in (-delta, delta):
        try:
            buckets.append(format_utc(base + offset))
        except OverflowError:
            logger.debug("[BUCKET] No neighbour %s of %s", offset, bucket)
            buckets.append(None)
    previous, following = buckets
    return [key for key in (previous, bucket, following) if key is not None]


class BucketBuffer:
    """Pending events for one stream, indexed by bucket key.

    Buckets and their entries iterate in insertion order, which makes
    candidate order (and therefore tie-breaking) deterministic.
    """

    def __init__(self, name: str = "buffer"):
        self.name = name
        self._buckets: dict[str, list[BufferedEntry]] = {}

    def __len__(self) -> int:
        return sum(len(entries) for entries in self._buckets.values())

    def __contains__(self, event_id: object) -> bool:
        return any(entry.event_id == event_id for entry in self.entries())

    def bucket_keys(self) -> list[str]:
        return list(self._buckets)

    def get(self, bucket: str) -> list[BufferedEntry]:
        return list(self._buckets.get(bucket, ()))

    def entries(self) -> Iterator[BufferedEntry]:
        for entries in self._buckets.values():
            yield from entries

    def candidates(self, buckets: Iterable[str]) -> Iterator[BufferedEntry]:
        """Entries of the given buckets, bucket by bucket, in arrival order."""
        for bucket in buckets:
            yield from self._buckets.get(bucket, ())

    def add(self, bucket: str, event: SessionEvent, received_at: datetime) -> BufferedEntry:
        """Append an event to a bucket."""
        entry = BufferedEntry(event=event, received_at=received_at)
        self._buckets.setdefault(bucket, []).append(entry)
        logger.debug(
            "[BUFFER] %s: added %s to %s (%d pending in bucket)",
            self.name,
            event.id,
            bucket,
            len(self._buckets[bucket]),
        )
        return entry

    def remove(self, event_id: int | str) -> int:
        """Remove every entry with this id from all buckets.

        Returns:
            Number of entries removed
        """
        removed = 0
        for bucket in list(self._buckets):
            entries = self._buckets[bucket]
            kept = [entry for entry in entries if entry.event_id != event_id]
            if len(kept) == len(entries):
                continue
            removed += len(entries) - len(kept)
            if kept:
                self._buckets[bucket] = kept
            else:
                del self._buckets[bucket]
            logger.debug("[BUFFER] %s: removed %s from %s", self.name, event_id, bucket)
        return removed

    def evict(self, retention: timedelta, now: datetime) -> int:
        """Drop entries whose age has reached the retention window.

        Keeps only entries with now - received_at < retention; buckets left
        empty are deleted.

        Returns:
            Number of entries evicted
        """
        evicted = 0
        for bucket in list(self._buckets):
            entries = self._buckets[bucket]
            fresh = [entry for entry in entries if now - entry.received_at < retention]
            evicted += len(entries) - len(fresh)
            if fresh:
                self._buckets[bucket] = fresh
            else:
                del self._buckets[bucket]
                logger.debug("[EVICT] %s: cleared expired bucket %s", self.name, bucket)
        return evicted

    def snapshot(self) -> dict[str, list[int | str]]:
        """Bucket key -> pending event ids, for inspection."""
        return {
            bucket: [entry.event_id for entry in entries]
            for bucket, entries in self._buckets.items()
        }
