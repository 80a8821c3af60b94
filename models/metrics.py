"""Metrics snapshot and history entry types."""
import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional

logger = logging.getLogger("v1z3r.models.metrics")


def _is_number(value):
    return isinstance(value, (int, float)) and not isinstance(value, bool)


@dataclass(frozen=True)
class MetricsSnapshot:
    """One immutable reading of all tracked metric fields.

    Only numeric fields are kept. Looking up a metric that the producer did
    not report returns None, which callers treat as "skip this rule".
    """
    values: Mapping[str, float] = field(default_factory=dict)

    def __post_init__(self):
        clean = {}
        for name, value in dict(self.values).items():
            if _is_number(value):
                clean[str(name)] = value
            else:
                logger.debug(f"Dropping non-numeric metric {name}={value!r}")
        object.__setattr__(self, "values", MappingProxyType(clean))

    @classmethod
    def from_mapping(cls, data):
        if isinstance(data, cls):
            return data
        return cls(values=data)

    def get(self, metric) -> Optional[float]:
        metric = metric.value if hasattr(metric, "value") else metric
        return self.values.get(metric)

    def __contains__(self, metric):
        return self.get(metric) is not None

    def to_dict(self):
        return dict(self.values)


@dataclass(frozen=True)
class MetricsEntry:
    timestamp: int
    snapshot: MetricsSnapshot

    def to_dict(self):
        return {"timestamp": self.timestamp, "metrics": self.snapshot.to_dict()}
