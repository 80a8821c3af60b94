"""Dataclasses for alert rules, alerts and notification channels."""
import logging
import uuid
from dataclasses import dataclass, field, fields, asdict

logger = logging.getLogger("v1z3r.models.alerts")


def _value(v):
    """Unwrap str enums so stored fields stay plain strings."""
    return v.value if hasattr(v, "value") else v


@dataclass
class AlertRule:
    id: str = ""
    name: str = ""
    metric: str = ""
    threshold: float = 0.0
    operator: str = "gt"
    severity: str = "warning"
    duration: int = 0  # milliseconds
    enabled: bool = True
    description: str = ""

    def __post_init__(self):
        self.operator = _value(self.operator)
        self.severity = _value(self.severity)
        self.metric = _value(self.metric)

    def to_dict(self):
        return asdict(self)

    @classmethod
    def from_dict(cls, data):
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            logger.warning(f"Ignoring unknown rule fields for {data.get('id')}: {sorted(unknown)}")
        kwargs = {k: v for k, v in data.items() if k in known}
        if "threshold" in kwargs:
            kwargs["threshold"] = float(kwargs["threshold"])
        if "duration" in kwargs:
            kwargs["duration"] = int(kwargs["duration"])
        return cls(**kwargs)


def generate_alert_id(timestamp):
    return f"alert_{timestamp}_{uuid.uuid4().hex[:9]}"


@dataclass
class Alert:
    id: str = ""
    rule_id: str = ""
    metric: str = ""
    value: float = 0.0
    threshold: float = 0.0
    severity: str = "warning"
    timestamp: int = 0  # epoch milliseconds of the last update
    acknowledged: bool = False
    resolved: bool = False
    message: str = ""

    def to_dict(self):
        """Wire representation, keyed the way dashboards and webhooks expect."""
        return {
            "id": self.id,
            "ruleId": self.rule_id,
            "metric": self.metric,
            "value": self.value,
            "threshold": self.threshold,
            "severity": self.severity,
            "timestamp": self.timestamp,
            "acknowledged": self.acknowledged,
            "resolved": self.resolved,
            "message": self.message,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=data.get("id", ""),
            rule_id=data.get("ruleId", data.get("rule_id", "")),
            metric=data.get("metric", ""),
            value=data.get("value", 0.0),
            threshold=data.get("threshold", 0.0),
            severity=data.get("severity", "warning"),
            timestamp=data.get("timestamp", 0),
            acknowledged=data.get("acknowledged", False),
            resolved=data.get("resolved", False),
            message=data.get("message", ""),
        )


@dataclass
class AlertChannel:
    type: str = ""
    config: dict = field(default_factory=dict)
    enabled: bool = True

    def __post_init__(self):
        self.type = _value(self.type)

    def to_dict(self):
        return {"type": self.type, "config": dict(self.config), "enabled": self.enabled}

    @classmethod
    def from_dict(cls, data):
        return cls(
            type=data.get("type", ""),
            config=dict(data.get("config") or {}),
            enabled=data.get("enabled", True),
        )
