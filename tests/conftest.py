"""Shared test fixtures."""
import os
import sys
import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from alerts.channels import NotificationDispatcher
from alerts.manager import AlertManager
from alerts.retention import ManualTicker
from models.alerts import AlertRule
from utils.clock import ManualClock

START_MS = 1_700_000_000_000


class RecordingSender:
    """Channel sender that remembers what it was asked to deliver."""

    def __init__(self, fail=False):
        self.fail = fail
        self.calls = []

    def send(self, config, alert, event="triggered"):
        self.calls.append((alert, event))
        if self.fail:
            raise RuntimeError("boom")
        return {"alert_id": alert.id, "event": event}


@pytest.fixture
def clock():
    return ManualClock(START_MS)


@pytest.fixture
def baseline_metrics():
    """Healthy values for every tracked metric."""
    return {
        "responseTime": 500,
        "errorRate": 2,
        "throughput": 100,
        "cpuUsage": 50,
        "memoryUsage": 60,
        "webglFrameRate": 60,
        "audioLatency": 10,
        "effectSwitchTime": 5,
        "stateUpdateTime": 2,
        "databaseConnections": 10,
        "cacheHitRate": 85,
        "websocketConnections": 5,
        "lcp": 1500,
        "fid": 50,
        "cls": 0.1,
        "fcp": 1000,
        "ttfb": 200,
    }


@pytest.fixture
def response_rule():
    return AlertRule(
        id="slow", name="Slow Responses", metric="responseTime",
        threshold=1000, operator="gt", severity="warning", duration=30000,
    )


@pytest.fixture
def recorder():
    return RecordingSender()


@pytest.fixture
def make_manager(clock, recorder):
    """Factory for managers on the fake clock with a recording channel sender."""
    def _make(rules=None, channels=None, **kwargs):
        dispatcher = NotificationDispatcher({"email": recorder, "slack": recorder,
                                             "webhook": recorder, "sms": recorder})
        return AlertManager(rules=rules, channels=channels, clock=clock,
                            dispatcher=dispatcher, ticker=ManualTicker(), **kwargs)
    return _make


def feed(manager, clock, metrics, count, step_ms=1000):
    """Process `count` copies of metrics, one `step_ms` apart; first at the current time."""
    results = []
    for i in range(count):
        if i > 0:
            clock.advance(step_ms)
        results.extend(manager.process_metrics(metrics))
    return results
