"""Tests for MatchCollector and CleanupScheduler."""

import time
from datetime import UTC, datetime
from unittest.mock import MagicMock

import pytest

from sessionlink.config import MatchingSettings
from sessionlink.consumers.correlation import CorrelationEngine
from sessionlink.consumers.scheduler import CleanupScheduler
from sessionlink.consumers.sinks import MatchCollector
from sessionlink.core import Confidence, GlobalMatch, StreamType
from tests.factories import tracking, video


class TestMatchCollector:
    def test_collects_engine_matches_as_global_records(self, clock):
        forwarded = []
        collector = MatchCollector(forward=forwarded.append, clock=clock)
        engine = CorrelationEngine(on_match=collector, clock=clock)

        engine.ingest_video(video())
        engine.ingest_tracking(tracking())

        assert len(collector) == 1
        match = collector.matches[0]
        assert isinstance(match, GlobalMatch)
        assert match.tracking.id == 184
        assert match.score == 65
        assert match.confidence == Confidence.LIKELY
        assert match.matched_at == clock.now
        assert match.details["team_score"] == 25
        assert forwarded == [match]

    def test_clear_drains(self, clock):
        collector = MatchCollector(clock=clock)
        engine = CorrelationEngine(on_match=collector, clock=clock)
        engine.ingest_video(video())
        engine.ingest_tracking(tracking())

        drained = collector.clear()
        assert len(drained) == 1
        assert len(collector) == 0


class TestCleanupScheduler:
    def test_run_once_evicts(self, clock):
        engine = CorrelationEngine(on_match=MagicMock(), clock=clock)
        engine.ingest_video(video())
        clock.advance(hours=3)

        scheduler = CleanupScheduler(engine, interval_seconds=3600)
        assert scheduler.last_run is None
        assert scheduler.run_once() == 1
        assert engine.pending_count(StreamType.VIDEO) == 0
        assert isinstance(scheduler.last_run, datetime)
        assert scheduler.last_run.tzinfo == UTC
        assert scheduler.last_run == clock.now

    def test_interval_defaults_to_engine_settings(self, clock):
        settings = MatchingSettings(cleanup_interval_seconds=42.0)
        engine = CorrelationEngine(on_match=MagicMock(), settings=settings, clock=clock)

        scheduler = CleanupScheduler(engine)

        assert scheduler._interval_seconds == 42.0

    def test_engine_reads_environment_overrides(self, clock, monkeypatch):
        monkeypatch.setenv("SESSIONLINK_CLEANUP_INTERVAL_SECONDS", "15")
        engine = CorrelationEngine(on_match=MagicMock(), clock=clock)

        assert engine.settings.cleanup_interval_seconds == 15.0
        assert CleanupScheduler(engine)._interval_seconds == 15.0

    def test_run_once_uses_engine_clock(self, clock):
        engine = CorrelationEngine(on_match=MagicMock(), clock=clock)
        engine.ingest_video(video())
        clock.advance(minutes=90)

        scheduler = CleanupScheduler(engine, interval_seconds=3600)

        assert scheduler.run_once() == 0
        assert scheduler.last_run == clock.now
        clock.advance(minutes=30)
        assert scheduler.run_once() == 1
        assert scheduler.last_run == clock.now

    def test_start_stop(self):
        scheduler = CleanupScheduler(MagicMock(), interval_seconds=3600)

        assert scheduler.start() is True
        assert scheduler.is_running
        assert scheduler.start() is False
        assert scheduler.stop(timeout=5) is True
        assert not scheduler.is_running

    def test_runs_periodically_and_survives_errors(self):
        calls = []

        def cleanup(now=None):
            calls.append(1)
            if len(calls) == 1:
                raise RuntimeError("boom")
            return 0

        engine = MagicMock()
        engine.cleanup.side_effect = cleanup
        scheduler = CleanupScheduler(engine, interval_seconds=0.01)
        scheduler.start()
        try:
            deadline = time.monotonic() + 5
            while engine.cleanup.call_count < 3 and time.monotonic() < deadline:
                time.sleep(0.01)
        finally:
            scheduler.stop(timeout=5)

        assert engine.cleanup.call_count >= 3

    def test_rejects_non_positive_interval(self):
        with pytest.raises(ValueError):
            CleanupScheduler(MagicMock(), interval_seconds=0)
