"""Background scheduler for buffer eviction.

Calls CorrelationEngine.cleanup() on a fixed interval in a daemon thread.
Integrates with an application lifespan for clean startup/shutdown.
"""

import logging
import threading
from datetime import datetime

from sessionlink.consumers.correlation import CorrelationEngine

logger = logging.getLogger(__name__)


class CleanupScheduler:
    """Periodic eviction trigger for one engine.

    Usage:
        scheduler = CleanupScheduler(engine, interval_seconds=300)
        scheduler.start()
        # ... events flow into the engine ...
        scheduler.stop()
    """

    def __init__(
        self,
        engine: CorrelationEngine,
        interval_seconds: float | None = None,
    ):
        """Initialize the scheduler.

        Args:
            engine: Engine whose buffers get evicted
            interval_seconds: Seconds between cleanup runs (defaults to
                engine.settings.cleanup_interval_seconds)
        """
        if interval_seconds is None:
            interval_seconds = engine.settings.cleanup_interval_seconds
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self._engine = engine
        self._interval_seconds = interval_seconds

        self._thread: threading.Thread | None = None
        self._stop_event = threading.Event()
        self._running = False
        self._last_run: datetime | None = None

    @property
    def is_running(self) -> bool:
        """Check if scheduler is running."""
        return self._running and self._thread is not None and self._thread.is_alive()

    @property
    def last_run(self) -> datetime | None:
        """Get time of last cleanup run."""
        return self._last_run

    def start(self) -> bool:
        """Start the scheduler.

        Returns:
            True if started, False if already running
        """
        if self.is_running:
            logger.warning("Cleanup scheduler already running")
            return False

        self._stop_event.clear()
        self._running = True
        self._thread = threading.Thread(
            target=self._run_loop,
            name="sessionlink-cleanup",
            daemon=True,
        )
        self._thread.start()
        logger.info("Cleanup scheduler started (interval: %ss)", self._interval_seconds)
        return True

    def stop(self, timeout: float = 30.0) -> bool:
        """Stop the scheduler gracefully.

        Args:
            timeout: Maximum seconds to wait for thread to stop

        Returns:
            True if stopped, False if timeout
        """
        if not self.is_running:
            return True

        logger.info("Stopping cleanup scheduler...")
        self._stop_event.set()
        self._running = False

        if self._thread:
            self._thread.join(timeout=timeout)
            if self._thread.is_alive():
                logger.warning("Cleanup thread did not stop in time")
                return False

        logger.info("Cleanup scheduler stopped")
        return True

    def run_once(self) -> int:
        """Run one cleanup now (for testing/manual trigger).

        Returns:
            Number of events evicted
        """
        now = self._engine.clock()
        self._last_run = now
        return self._engine.cleanup(now)

    def _run_loop(self) -> None:
        """Main scheduler loop - runs in background thread."""
        while not self._stop_event.wait(self._interval_seconds):
            try:
                self.run_once()
            except Exception as e:
                logger.exception(f"Error in cleanup run: {e}")
