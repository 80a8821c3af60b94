"""Tests for retention tickers and the sweeper."""
import time

from alerts.history import MetricsHistory
from alerts.retention import RetentionSweeper, ScheduleTicker, ManualTicker
from alerts.store import AlertStore
from models.alerts import AlertRule
from utils.clock import ManualClock


def _sweeper(clock, ticker=None, retention_ms=1000):
    return RetentionSweeper(MetricsHistory(clock), AlertStore(), clock,
                            retention_ms=retention_ms, ticker=ticker or ManualTicker())


def test_sweep_counts():
    clock = ManualClock(0)
    sweeper = _sweeper(clock)
    sweeper.metrics_history.record({"cpuUsage": 10})
    rule = AlertRule(id="cpu", name="CPU", metric="cpuUsage", threshold=5)
    resolved = sweeper.alert_store.create(rule, 10, 0)
    sweeper.alert_store.resolve(resolved, 0)
    sweeper.alert_store.create(AlertRule(id="mem", metric="memoryUsage"), 90, 0)

    clock.advance(5000)
    removed = sweeper.sweep()
    assert removed == {"metrics": 1, "history": 3, "alerts": 1}
    assert [a.rule_id for a in sweeper.alert_store.active()] == ["mem"]


def test_manual_ticker_start_stop():
    ticker = ManualTicker()
    calls = []
    ticker.tick()
    ticker.start(lambda: calls.append(1))
    assert ticker.running
    ticker.tick()
    ticker.stop()
    ticker.tick()
    assert calls == [1]


def test_job_swallows_errors():
    clock = ManualClock(0)
    ticker = ManualTicker()
    sweeper = _sweeper(clock, ticker)
    sweeper.metrics_history.purge_before = None  # not callable
    sweeper.start()
    ticker.tick()
    assert ticker.ticks == 1


def test_schedule_ticker_runs_and_stops():
    calls = []
    ticker = ScheduleTicker(interval_seconds=1, poll_seconds=0.05)
    ticker.start(lambda: calls.append(time.monotonic()))
    ticker.start(lambda: calls.append("duplicate"))
    assert ticker.running
    deadline = time.monotonic() + 5
    while not calls and time.monotonic() < deadline:
        time.sleep(0.05)
    ticker.stop()
    assert calls
    assert "duplicate" not in calls
    assert not ticker.running
    ticker.stop()
