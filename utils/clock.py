"""Millisecond clocks used to timestamp snapshots and alerts."""
import time
from datetime import datetime, timezone


def now_ms():
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def to_iso(timestamp_ms):
    """Format epoch milliseconds as ISO-8601 UTC, e.g. 2024-01-01T00:00:00.000Z."""
    dt = datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


class ManualClock:
    """Clock that only moves when told to. Used for replays and tests."""

    def __init__(self, start_ms=0):
        self.current = int(start_ms)

    def __call__(self):
        return self.current

    def advance(self, ms):
        self.current += int(ms)
        return self.current

    def set(self, timestamp_ms):
        self.current = int(timestamp_ms)
