"""Consumer layer: buffering, correlation and match delivery.

All processing uses dataclasses - no dict conversion layers.
"""

from sessionlink.consumers.batch import BatchMatcher, BatchResult
from sessionlink.consumers.buffer import BucketBuffer, bucket_key, nearby_buckets
from sessionlink.consumers.correlation import CorrelationEngine, CorrelationOutcome, MatchSink
from sessionlink.consumers.scheduler import CleanupScheduler
from sessionlink.consumers.sinks import MatchCollector

__all__ = [
    # Buffers
    "BucketBuffer",
    "bucket_key",
    "nearby_buckets",
    # Engine
    "CorrelationEngine",
    "CorrelationOutcome",
    "MatchSink",
    # Batch
    "BatchMatcher",
    "BatchResult",
    # Delivery
    "CleanupScheduler",
    "MatchCollector",
]
