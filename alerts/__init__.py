"""Alert system module."""
from alerts.manager import AlertManager
from alerts.rules_manager import RulesManager, DEFAULT_RULES, default_rules
from alerts.engine import evaluate_rule, calculate_violating_duration
from alerts.history import MetricsHistory
from alerts.store import AlertStore
from alerts.channels import (
    NotificationDispatcher, DeliveryResult, EmailChannel, SlackChannel, WebhookChannel, SmsChannel,
)
from alerts.retention import RetentionSweeper, ScheduleTicker, ManualTicker
