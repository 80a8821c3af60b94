"""Periodic purge of old metrics, alert history and resolved alerts."""
import logging
import threading
import time

import schedule

logger = logging.getLogger("v1z3r.alerts.retention")

DEFAULT_RETENTION_MS = 24 * 60 * 60 * 1000
DEFAULT_INTERVAL_SECONDS = 60 * 60


class ScheduleTicker:
    """Runs a callback every `interval` seconds on a daemon thread.

    Uses a private schedule.Scheduler so stopping one ticker never clears
    jobs registered elsewhere in the process.
    """

    def __init__(self, interval_seconds=DEFAULT_INTERVAL_SECONDS, poll_seconds=1):
        self.interval = interval_seconds
        self.poll = poll_seconds
        self._scheduler = schedule.Scheduler()
        self._thread = None
        self._stop = threading.Event()

    @property
    def running(self):
        return self._thread is not None

    def start(self, callback):
        if self._thread is not None:
            return
        self._stop.clear()
        self._scheduler.every(self.interval).seconds.do(callback)
        self._thread = threading.Thread(target=self._run_loop, name="retention-ticker", daemon=True)
        self._thread.start()
        logger.info(f"Retention ticker started (every {self.interval}s)")

    def stop(self):
        if self._thread is None:
            return
        self._stop.set()
        self._scheduler.clear()
        self._thread.join(timeout=5)
        self._thread = None
        logger.info("Retention ticker stopped")

    def _run_loop(self):
        while not self._stop.is_set():
            self._scheduler.run_pending()
            self._stop.wait(self.poll)


class ManualTicker:
    """Ticker driven by explicit tick() calls."""

    def __init__(self):
        self._callback = None
        self.ticks = 0

    @property
    def running(self):
        return self._callback is not None

    def start(self, callback):
        self._callback = callback

    def stop(self):
        self._callback = None

    def tick(self):
        if self._callback is None:
            return
        self.ticks += 1
        self._callback()


class RetentionSweeper:
    def __init__(self, metrics_history, alert_store, clock, retention_ms=DEFAULT_RETENTION_MS,
                 ticker=None, lock=None):
        self.metrics_history = metrics_history
        self.alert_store = alert_store
        self.clock = clock
        self.retention_ms = retention_ms
        self.ticker = ticker or ScheduleTicker()
        self._lock = lock or threading.RLock()

    def sweep(self):
        """Purge everything older than the retention window. Unresolved alerts stay."""
        started = time.monotonic()
        with self._lock:
            cutoff = self.clock() - self.retention_ms
            metrics_removed = self.metrics_history.purge_before(cutoff)
            history_removed, alerts_removed = self.alert_store.purge_before(cutoff)
        logger.debug(
            f"Retention sweep: {metrics_removed} metrics, {history_removed} history entries, "
            f"{alerts_removed} resolved alerts removed ({(time.monotonic() - started) * 1000:.1f}ms)"
        )
        return {
            "metrics": metrics_removed,
            "history": history_removed,
            "alerts": alerts_removed,
        }

    def _job(self):
        try:
            self.sweep()
        except Exception as e:
            logger.error(f"Retention sweep failed: {e}")

    def start(self):
        self.ticker.start(self._job)

    def stop(self):
        self.ticker.stop()
