"""Active alert state plus an append-only alert history log."""
import logging
from dataclasses import replace

from models.alerts import Alert, generate_alert_id
from alerts.engine import format_alert_message

logger = logging.getLogger("v1z3r.alerts.store")


class AlertStore:
    """Alerts keyed by id.

    At most one unresolved alert exists per rule. Every creation and mutation
    is copied into the history log as (timestamp, alert) so later changes do
    not rewrite earlier history entries.
    """

    def __init__(self):
        self.alerts = {}
        self.history = []

    def _log(self, alert, logged_at=None):
        logged_at = alert.timestamp if logged_at is None else logged_at
        self.history.append((logged_at, replace(alert)))

    def find_active(self, rule_id):
        for alert in self.alerts.values():
            if alert.rule_id == rule_id and not alert.resolved:
                return alert
        return None

    def get(self, alert_id):
        return self.alerts.get(alert_id)

    def create(self, rule, value, timestamp):
        alert = Alert(
            id=generate_alert_id(timestamp),
            rule_id=rule.id,
            metric=rule.metric,
            value=value,
            threshold=rule.threshold,
            severity=rule.severity,
            timestamp=timestamp,
            message=format_alert_message(rule, value),
        )
        self.alerts[alert.id] = alert
        self._log(alert)
        return alert

    def refresh(self, alert, value, timestamp):
        alert.value = value
        alert.timestamp = timestamp
        self._log(alert)

    def acknowledge(self, alert_id, timestamp):
        alert = self.alerts.get(alert_id)
        if alert is None:
            return None
        alert.acknowledged = True
        self._log(alert, logged_at=timestamp)
        return alert

    def resolve(self, alert, timestamp):
        alert.resolved = True
        alert.timestamp = timestamp
        self._log(alert)
        return alert

    def active(self):
        return [a for a in self.alerts.values() if not a.resolved]

    def recent_history(self, limit=100):
        """Last `limit` history entries, newest timestamp first."""
        if limit <= 0:
            return []
        tail = [replace(alert) for _, alert in self.history[-limit:]]
        return sorted(tail, key=lambda a: a.timestamp, reverse=True)

    def purge_before(self, cutoff):
        """Drop history older than cutoff and resolved alerts last touched before it."""
        before = len(self.history)
        self.history = [(ts, a) for ts, a in self.history if ts >= cutoff]
        stale = [aid for aid, a in self.alerts.items() if a.resolved and a.timestamp < cutoff]
        for aid in stale:
            del self.alerts[aid]
        return before - len(self.history), len(stale)
