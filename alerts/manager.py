"""Alert manager: ingests metrics snapshots and drives the alert lifecycle."""
import logging
import threading
from dataclasses import replace

from alerts.channels import NotificationDispatcher, TRIGGERED, RESOLVED
from alerts.engine import evaluate_rule, is_sustained
from alerts.history import MetricsHistory
from alerts.retention import RetentionSweeper, DEFAULT_RETENTION_MS
from alerts.rules_manager import RulesManager
from alerts.store import AlertStore
from models.alerts import AlertRule, AlertChannel
from models.metrics import MetricsSnapshot
from utils.clock import now_ms

logger = logging.getLogger("v1z3r.alerts.manager")


class AlertManager:
    """Owns rules, metrics history, alert state and channels for one process.

    All state changes go through one re-entrant lock, so concurrent producers
    are serialized. Notifications are sent after the evaluation pass and
    outside the lock.
    """

    def __init__(self, rules=None, channels=None, retention_ms=DEFAULT_RETENTION_MS,
                 clock=None, dispatcher=None, ticker=None):
        self.clock = clock or now_ms
        self.rules_manager = RulesManager(rules)
        self.channels = [self._as_channel(c) for c in channels or []]
        self.metrics_history = MetricsHistory(self.clock)
        self.alert_store = AlertStore()
        self.dispatcher = dispatcher or NotificationDispatcher()
        self._lock = threading.RLock()
        self.sweeper = RetentionSweeper(
            self.metrics_history, self.alert_store, self.clock,
            retention_ms=retention_ms, ticker=ticker, lock=self._lock,
        )

    @staticmethod
    def _as_channel(channel):
        return AlertChannel.from_dict(channel) if isinstance(channel, dict) else channel

    # ── lifecycle ────────────────────────────────────

    def start(self):
        """Start the periodic retention sweep."""
        self.sweeper.start()

    def stop(self):
        self.sweeper.stop()

    # ── rules & channels ─────────────────────────────

    def add_rule(self, rule):
        with self._lock:
            self.rules_manager.add_rule(rule)

    def remove_rule(self, rule_id):
        with self._lock:
            self.rules_manager.remove_rule(rule_id)

    def update_rule(self, rule_id, changes=None, **kwargs):
        changes = dict(changes or {}, **kwargs)
        with self._lock:
            self.rules_manager.update_rule(rule_id, changes)

    def get_rule(self, rule_id):
        with self._lock:
            return self.rules_manager.get_rule(rule_id)

    def get_rules(self):
        with self._lock:
            return self.rules_manager.get_all_rules()

    def add_channel(self, channel):
        with self._lock:
            self.channels.append(self._as_channel(channel))

    def get_channels(self):
        with self._lock:
            return list(self.channels)

    # ── ingestion ────────────────────────────────────

    def process_metrics(self, metrics):
        """Record a snapshot and evaluate every enabled rule against it.

        Returns the delivery results of any notifications sent. Channel
        failures are reported there and in the log, never raised.
        """
        snapshot = MetricsSnapshot.from_mapping(metrics)
        with self._lock:
            timestamp = self.metrics_history.record(snapshot)
            notifications = []
            for rule in self.rules_manager.get_enabled_rules():
                value = snapshot.get(rule.metric)
                if value is None:
                    continue
                if evaluate_rule(rule, value):
                    alert = self._handle_violation(rule, value, timestamp)
                    if alert is not None:
                        notifications.append((replace(alert), TRIGGERED))
                else:
                    alert = self._check_resolution(rule, timestamp)
                    if alert is not None:
                        notifications.append((replace(alert), RESOLVED))
            channels = list(self.channels)

        results = []
        for alert, event in notifications:
            results.extend(self.dispatcher.dispatch(channels, alert, event))
        return results

    def _handle_violation(self, rule, value, timestamp):
        """Refresh the rule's active alert, or create one once the violation is sustained."""
        existing = self.alert_store.find_active(rule.id)
        if existing is not None:
            self.alert_store.refresh(existing, value, timestamp)
            return None

        recent = self.metrics_history.recent_since(rule.duration)
        if not is_sustained(rule, recent):
            return None

        alert = self.alert_store.create(rule, value, timestamp)
        logger.warning(f"Alert triggered [{alert.severity}] {alert.message}")
        return alert

    def _check_resolution(self, rule, timestamp):
        active = self.alert_store.find_active(rule.id)
        if active is None:
            return None
        self.alert_store.resolve(active, timestamp)
        logger.info(f"Alert resolved: {active.message}")
        return active

    # ── operator actions ─────────────────────────────

    def acknowledge_alert(self, alert_id):
        with self._lock:
            alert = self.alert_store.acknowledge(alert_id, self.clock())
        if alert is not None:
            logger.info(f"Alert acknowledged: {alert_id}")

    def resolve_alert(self, alert_id):
        """Close an alert by hand, independent of metric evaluation.

        Returns the delivery results; empty when the id is unknown or the
        alert is already resolved.
        """
        with self._lock:
            alert = self.alert_store.get(alert_id)
            if alert is None or alert.resolved:
                return []
            self.alert_store.resolve(alert, self.clock())
            snapshot = replace(alert)
            channels = list(self.channels)
        logger.info(f"Alert manually resolved: {alert_id}")
        return self.dispatcher.dispatch(channels, snapshot, RESOLVED)

    # ── queries ──────────────────────────────────────

    def get_active_alerts(self):
        with self._lock:
            return [replace(a) for a in self.alert_store.active()]

    def get_alert(self, alert_id):
        with self._lock:
            alert = self.alert_store.get(alert_id)
            return replace(alert) if alert is not None else None

    def get_alert_history(self, limit=100):
        with self._lock:
            return self.alert_store.recent_history(limit)

    def get_metrics_history(self, duration_ms):
        with self._lock:
            return self.metrics_history.recent_since(duration_ms)

    # ── maintenance & configuration ──────────────────

    def cleanup_old_data(self):
        return self.sweeper.sweep()

    def export_configuration(self):
        with self._lock:
            return {
                "rules": [r.to_dict() for r in self.rules_manager.get_all_rules()],
                "channels": [c.to_dict() for c in self.channels],
            }

    def import_configuration(self, config):
        """Replace all rules and channels with the given set."""
        rules = [r if isinstance(r, AlertRule) else AlertRule.from_dict(r) for r in config.get("rules", [])]
        channels = [self._as_channel(c) for c in config.get("channels", [])]
        with self._lock:
            self.rules_manager.clear()
            for rule in rules:
                self.rules_manager.add_rule(rule)
            self.channels = channels
        logger.info(f"Imported {len(rules)} rules and {len(channels)} channels")
