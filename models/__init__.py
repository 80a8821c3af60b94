"""Data models."""
from models.enums import MetricName, Operator, Severity, ChannelType
from models.metrics import MetricsSnapshot, MetricsEntry
from models.alerts import AlertRule, Alert, AlertChannel, generate_alert_id
