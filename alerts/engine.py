"""Threshold evaluation and sustained-violation detection."""
import logging

logger = logging.getLogger("v1z3r.alerts.engine")

OPERATOR_MAP = {
    "gt": lambda v, t: v > t,
    "gte": lambda v, t: v >= t,
    "lt": lambda v, t: v < t,
    "lte": lambda v, t: v <= t,
    "eq": lambda v, t: v == t,
}


def evaluate_rule(rule, value):
    """True when value violates the rule. Unknown operators never fire."""
    if value is None:
        return False
    func = OPERATOR_MAP.get(rule.operator)
    if func is None:
        return False
    return func(value, rule.threshold)


def calculate_violating_duration(rule, entries):
    """How long, in ms, the rule has been continuously violated.

    ``entries`` is the chronological window of MetricsEntry objects. The walk
    starts at the most recent sample and moves back in time. A sample that
    does not violate (or lacks the metric) breaks the run; an older violating
    sample then starts a new run that cannot reach past the break.
    The input list is left untouched.
    """
    if not entries:
        return 0

    violating_duration = 0
    anchor = None

    for entry in reversed(entries):
        value = entry.snapshot.get(rule.metric)
        if evaluate_rule(rule, value):
            if anchor is None:
                anchor = entry.timestamp
            violating_duration = anchor - entry.timestamp
        else:
            anchor = None
            violating_duration = 0

    return violating_duration


def is_sustained(rule, entries):
    return calculate_violating_duration(rule, entries) >= rule.duration


def format_alert_message(rule, value):
    return f"{rule.name}: {rule.metric} is {format_number(value)} (threshold: {format_number(rule.threshold)}). {rule.description}"


def format_number(value):
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
