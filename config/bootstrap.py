"""Explicit construction of a fully wired AlertManager from configuration."""
import logging
import os

from alerts.channels import NotificationDispatcher, default_senders
from alerts.manager import AlertManager
from alerts.retention import ScheduleTicker
from alerts.rules_manager import RulesManager
from config import load_config
from models.alerts import AlertChannel, AlertRule
from notifications.email_sender import EmailSender
from utils.clock import now_ms
from utils.http_client import HTTPClient

logger = logging.getLogger("v1z3r.config.bootstrap")


def _configured_rules(alerts_cfg):
    rules = RulesManager(None if alerts_cfg.get("use_default_rules", True) else [])
    if alerts_cfg.get("rules_file"):
        rules.load_yaml(alerts_cfg["rules_file"])
    for raw in alerts_cfg.get("rules") or []:
        rules.add_rule(AlertRule.from_dict(raw))
    return rules.get_all_rules()


def build_dispatcher(config, clock=None):
    notif_cfg = config.get("notifications", {})
    http = HTTPClient(
        timeout=notif_cfg.get("webhook_timeout", 10),
        max_retries=notif_cfg.get("webhook_retries", 0),
    )
    senders = default_senders(
        http_client=http,
        email_sender=EmailSender(config),
        source=notif_cfg.get("source", "v1z3r-monitoring"),
        clock=clock,
    )
    return NotificationDispatcher(senders, max_workers=notif_cfg.get("dispatch_workers", 4))


def register_env_channels(manager, env=None):
    """Add channels described by environment variables. Returns how many were added."""
    env = os.environ if env is None else env
    added = 0

    if env.get("SLACK_WEBHOOK_URL"):
        manager.add_channel(AlertChannel(
            type="slack",
            config={"url": env["SLACK_WEBHOOK_URL"], "channel": "#alerts"},
        ))
        added += 1

    if env.get("ALERT_EMAIL_RECIPIENTS"):
        recipients = [r.strip() for r in env["ALERT_EMAIL_RECIPIENTS"].split(",") if r.strip()]
        manager.add_channel(AlertChannel(type="email", config={"recipients": recipients}))
        added += 1

    if env.get("ALERT_WEBHOOK_URL"):
        manager.add_channel(AlertChannel(
            type="webhook",
            config={
                "url": env["ALERT_WEBHOOK_URL"],
                "headers": {"Authorization": f"Bearer {env.get('ALERT_WEBHOOK_TOKEN', '')}"},
            },
        ))
        added += 1

    if added:
        logger.info(f"Registered {added} alert channel(s) from environment")
    return added


def build_alert_manager(config=None, clock=None, env=None, ticker=None):
    """Create an AlertManager with rules, channels and dispatcher from config.

    Environment-driven channels are only added when the configured
    environment is "production".
    """
    config = config or load_config(env=env)
    clock = clock or now_ms
    alerts_cfg = config.get("alerts", {})
    notif_cfg = config.get("notifications", {})

    manager = AlertManager(
        rules=_configured_rules(alerts_cfg),
        channels=[AlertChannel.from_dict(c) for c in notif_cfg.get("channels") or []],
        retention_ms=int(alerts_cfg.get("retention_hours", 24) * 60 * 60 * 1000),
        clock=clock,
        dispatcher=build_dispatcher(config, clock=clock),
        ticker=ticker or ScheduleTicker(alerts_cfg.get("cleanup_interval_seconds", 3600)),
    )

    if config.get("environment") == "production":
        register_env_channels(manager, env)

    logger.debug(f"Alert manager ready: {len(manager.get_rules())} rules, "
                 f"{len(manager.get_channels())} channels")
    return manager
