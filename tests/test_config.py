"""Tests for configuration loading and AlertManager bootstrap."""
import pytest

from alerts.retention import ManualTicker
from config import load_config, _deep_merge
from config.bootstrap import build_alert_manager, register_env_channels
from utils.clock import ManualClock


def test_defaults_load():
    config = load_config(env={})
    assert config["environment"] == "development"
    assert config["alerts"]["retention_hours"] == 24
    assert config["alerts"]["cleanup_interval_seconds"] == 3600
    assert config["notifications"]["source"] == "v1z3r-monitoring"


def test_override_file_merges(tmp_path):
    path = tmp_path / "override.yaml"
    path.write_text("alerts:\n  retention_hours: 6\nlogging:\n  level: DEBUG\n")
    config = load_config(path, env={})
    assert config["alerts"]["retention_hours"] == 6
    assert config["alerts"]["use_default_rules"] is True
    assert config["logging"]["level"] == "DEBUG"


def test_env_overrides():
    config = load_config(env={"V1Z3R_ENV": "production", "V1Z3R_WEBHOOK_TIMEOUT": "3"})
    assert config["environment"] == "production"
    assert config["notifications"]["webhook_timeout"] == 3


def test_invalid_retention_rejected(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("alerts:\n  retention_hours: 0\n")
    with pytest.raises(ValueError):
        load_config(path, env={})


def test_deep_merge_keeps_siblings():
    merged = _deep_merge({"a": {"b": 1, "c": 2}}, {"a": {"c": 3}})
    assert merged == {"a": {"b": 1, "c": 3}}


def test_build_manager_from_defaults():
    manager = build_alert_manager(load_config(env={}), clock=ManualClock(0), env={}, ticker=ManualTicker())
    assert len(manager.get_rules()) == 9
    assert manager.get_channels() == []
    assert manager.sweeper.retention_ms == 24 * 60 * 60 * 1000


def test_build_manager_with_inline_rules_and_channels():
    config = load_config(env={})
    config["alerts"]["use_default_rules"] = False
    config["alerts"]["rules"] = [{"id": "cpu", "metric": "cpuUsage", "threshold": 80}]
    config["notifications"]["channels"] = [{"type": "sms", "config": {"phoneNumbers": ["+1"]}}]
    manager = build_alert_manager(config, clock=ManualClock(0), env={}, ticker=ManualTicker())
    assert [r.id for r in manager.get_rules()] == ["cpu"]
    assert [c.type for c in manager.get_channels()] == ["sms"]


def test_env_channels_only_in_production():
    env = {"SLACK_WEBHOOK_URL": "https://hooks.slack.example/T1"}
    config = load_config(env={})
    dev = build_alert_manager(config, clock=ManualClock(0), env=env, ticker=ManualTicker())
    assert dev.get_channels() == []

    config["environment"] = "production"
    prod = build_alert_manager(config, clock=ManualClock(0), env=env, ticker=ManualTicker())
    assert [c.type for c in prod.get_channels()] == ["slack"]


def test_register_env_channels():
    manager = build_alert_manager(load_config(env={}), clock=ManualClock(0), env={}, ticker=ManualTicker())
    added = register_env_channels(manager, {
        "SLACK_WEBHOOK_URL": "https://hooks.slack.example/T1",
        "ALERT_EMAIL_RECIPIENTS": "a@example.com, b@example.com",
        "ALERT_WEBHOOK_URL": "https://hooks.example.com/a",
        "ALERT_WEBHOOK_TOKEN": "secret",
    })
    assert added == 3
    slack, email, webhook = manager.get_channels()
    assert slack.config == {"url": "https://hooks.slack.example/T1", "channel": "#alerts"}
    assert email.config["recipients"] == ["a@example.com", "b@example.com"]
    assert webhook.config["headers"] == {"Authorization": "Bearer secret"}
    assert all(c.enabled for c in (slack, email, webhook))


def test_register_env_channels_none():
    manager = build_alert_manager(load_config(env={}), clock=ManualClock(0), env={}, ticker=ManualTicker())
    assert register_env_channels(manager, {}) == 0
