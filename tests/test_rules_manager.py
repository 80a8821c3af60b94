"""Tests for rule storage, defaults and YAML loading."""
import logging

from alerts.rules_manager import RulesManager, DEFAULT_RULES, default_rules
from models.alerts import AlertRule


EXPECTED_DEFAULTS = {
    "high-response-time": ("responseTime", "gt", 1000, "warning", 30000),
    "critical-response-time": ("responseTime", "gt", 3000, "critical", 10000),
    "high-error-rate": ("errorRate", "gt", 5, "warning", 60000),
    "critical-error-rate": ("errorRate", "gt", 10, "critical", 30000),
    "low-frame-rate": ("webglFrameRate", "lt", 30, "warning", 30000),
    "high-memory-usage": ("memoryUsage", "gt", 85, "warning", 120000),
    "poor-lcp": ("lcp", "gt", 2500, "warning", 60000),
    "poor-fid": ("fid", "gt", 100, "warning", 60000),
    "low-cache-hit-rate": ("cacheHitRate", "lt", 70, "info", 300000),
}


def test_default_rules_exact():
    rm = RulesManager()
    assert len(rm) == len(EXPECTED_DEFAULTS)
    for rule_id, (metric, op, threshold, severity, duration) in EXPECTED_DEFAULTS.items():
        rule = rm.get_rule(rule_id)
        assert rule is not None, rule_id
        assert (rule.metric, rule.operator, rule.threshold, rule.severity, rule.duration) == \
            (metric, op, threshold, severity, duration)
        assert rule.enabled is True


def test_default_rules_are_copies():
    rm = RulesManager()
    rm.update_rule("poor-fid", {"threshold": 1})
    rm.get_rule("poor-lcp").threshold = 1
    assert next(r for r in DEFAULT_RULES if r.id == "poor-lcp").threshold == 2500
    assert next(r for r in default_rules() if r.id == "poor-fid").threshold == 100


def test_empty_rule_set():
    assert len(RulesManager([])) == 0


def test_add_rule_overwrites_by_id():
    rm = RulesManager([])
    rm.add_rule(AlertRule(id="cpu", metric="cpuUsage", threshold=80))
    rm.add_rule(AlertRule(id="cpu", metric="cpuUsage", threshold=90))
    assert len(rm) == 1
    assert rm.get_rule("cpu").threshold == 90


def test_add_rule_from_dict():
    rm = RulesManager([])
    rm.add_rule({"id": "cpu", "metric": "cpuUsage", "threshold": "80", "operator": "gte"})
    assert rm.get_rule("cpu").threshold == 80.0


def test_remove_rule_and_missing_id():
    rm = RulesManager()
    rm.remove_rule("high-response-time")
    rm.remove_rule("does-not-exist")
    assert "high-response-time" not in rm
    assert len(rm) == len(EXPECTED_DEFAULTS) - 1


def test_update_rule_merges_fields():
    rm = RulesManager()
    rm.update_rule("high-response-time", {"threshold": 2000, "severity": "critical"})
    rule = rm.get_rule("high-response-time")
    assert rule.threshold == 2000
    assert rule.severity == "critical"
    assert rule.name == "High Response Time"


def test_update_unknown_rule_is_noop():
    rm = RulesManager()
    rm.update_rule("x", {"threshold": 2000})
    assert len(rm) == len(EXPECTED_DEFAULTS)
    assert rm.get_rule("x") is None


def test_update_ignores_unknown_fields(caplog):
    rm = RulesManager()
    with caplog.at_level(logging.WARNING, logger="v1z3r"):
        rm.update_rule("poor-fid", {"colour": "red", "id": "renamed", "enabled": False})
    rule = rm.get_rule("poor-fid")
    assert rule.id == "poor-fid"
    assert rule.enabled is False
    assert "ignoring fields" in caplog.text


def test_enabled_filter():
    rm = RulesManager()
    rm.update_rule("poor-fid", {"enabled": False})
    enabled = rm.get_enabled_rules()
    assert all(r.enabled for r in enabled)
    assert "poor-fid" not in {r.id for r in enabled}


def test_unknown_metric_warns(caplog):
    rm = RulesManager([])
    with caplog.at_level(logging.WARNING, logger="v1z3r"):
        rm.add_rule(AlertRule(id="custom", metric="queueDepth", threshold=10))
    assert "unknown metric" in caplog.text
    assert "custom" in rm


def test_load_yaml(tmp_path):
    path = tmp_path / "rules.yaml"
    path.write_text(
        "rules:\n"
        "  - id: high-cpu\n"
        "    name: High CPU\n"
        "    metric: cpuUsage\n"
        "    threshold: 90\n"
        "    operator: gt\n"
        "    severity: critical\n"
        "    duration: 15000\n"
    )
    rm = RulesManager([])
    assert rm.load_yaml(path) == 1
    rule = rm.get_rule("high-cpu")
    assert rule.threshold == 90.0
    assert rule.duration == 15000
    assert rule.severity == "critical"


def test_load_yaml_missing_file(tmp_path):
    rm = RulesManager([])
    assert rm.load_yaml(tmp_path / "nope.yaml") == 0
