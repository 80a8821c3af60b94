"""Time-bounded buffer of metrics snapshots."""
from models.metrics import MetricsEntry, MetricsSnapshot
from utils.clock import now_ms


class MetricsHistory:
    def __init__(self, clock=None):
        self.clock = clock or now_ms
        self._entries = []

    def record(self, snapshot):
        """Append a snapshot stamped with the current time; returns the timestamp."""
        timestamp = self.clock()
        self._entries.append(MetricsEntry(timestamp, MetricsSnapshot.from_mapping(snapshot)))
        return timestamp

    def recent_since(self, window_ms):
        """Entries recorded within the last window_ms, oldest first, as a new list."""
        cutoff = self.clock() - window_ms
        return [e for e in self._entries if e.timestamp >= cutoff]

    def purge_before(self, cutoff):
        """Drop entries older than cutoff; returns how many were removed."""
        before = len(self._entries)
        self._entries = [e for e in self._entries if e.timestamp >= cutoff]
        return before - len(self._entries)

    def __len__(self):
        return len(self._entries)
