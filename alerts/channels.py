"""Alert notification channels and the fan-out dispatcher."""
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Optional, Protocol, runtime_checkable

from alerts.engine import format_number
from models.enums import ChannelType
from utils.clock import now_ms, to_iso
from utils.http_client import HTTPClient, DeliveryError

logger = logging.getLogger("v1z3r.alerts.channels")

TRIGGERED = "triggered"
RESOLVED = "resolved"

DEFAULT_SOURCE = "v1z3r-monitoring"
SMS_MAX_CHARS = 160

SEVERITY_COLORS = {
    "critical": "danger",
    "warning": "warning",
    "info": "good",
}


def severity_color(severity):
    return SEVERITY_COLORS.get(severity, "good")


@runtime_checkable
class ChannelSender(Protocol):
    def send(self, config: dict, alert, event: str = TRIGGERED) -> Any: ...


def format_email_body(alert):
    return "\n".join([
        "Alert Details:",
        f"- Message: {alert.message}",
        f"- Severity: {alert.severity.upper()}",
        f"- Metric: {alert.metric}",
        f"- Current Value: {format_number(alert.value)}",
        f"- Threshold: {format_number(alert.threshold)}",
        f"- Time: {to_iso(alert.timestamp)}",
        "",
        f"Alert ID: {alert.id}",
        f"Rule ID: {alert.rule_id}",
    ])


def format_email(config, alert, event=TRIGGERED):
    subject = f"{alert.severity.upper()}: {alert.message}"
    if event == RESOLVED:
        subject = f"RESOLVED {subject}"
    return {
        "to": list(config.get("recipients") or []),
        "subject": subject,
        "body": format_email_body(alert),
    }


def format_slack(config, alert, event=TRIGGERED):
    if event == RESOLVED:
        text = f"✅ {alert.severity.upper()} Alert Resolved"
        color = "good"
    else:
        text = f"\U0001F6A8 {alert.severity.upper()} Alert"
        color = severity_color(alert.severity)
    return {
        "channel": config.get("channel"),
        "text": text,
        "attachments": [
            {
                "color": color,
                "fields": [
                    {"title": "Alert", "value": alert.message, "short": False},
                    {"title": "Metric", "value": alert.metric, "short": True},
                    {"title": "Value", "value": format_number(alert.value), "short": True},
                    {"title": "Threshold", "value": format_number(alert.threshold), "short": True},
                    {"title": "Time", "value": to_iso(alert.timestamp), "short": True},
                ],
            }
        ],
    }


def format_sms(config, alert, event=TRIGGERED):
    message = f"{alert.severity.upper()}: {alert.message[:SMS_MAX_CHARS]}"
    if event == RESOLVED:
        message = f"RESOLVED {message}"
    return {"to": list(config.get("phoneNumbers") or []), "message": message}


class EmailChannel:
    """Email alerts. Sent over SMTP when a configured sender is present, logged otherwise."""

    def __init__(self, sender=None):
        self.sender = sender

    def send(self, config, alert, event=TRIGGERED):
        payload = format_email(config, alert, event)
        if self.sender is not None and self.sender.is_configured():
            if not self.sender.send_alert(payload["to"], payload["subject"], payload["body"]):
                raise DeliveryError(f"SMTP delivery failed for alert {alert.id}")
        else:
            logger.info(f"Email alert: to={payload['to']} subject={payload['subject']!r}")
        return payload


class SlackChannel:
    """Slack incoming-webhook message. Posted when the channel config carries a url."""

    def __init__(self, http_client=None):
        self.http = http_client or HTTPClient()

    def send(self, config, alert, event=TRIGGERED):
        payload = format_slack(config, alert, event)
        url = config.get("url")
        if url:
            self.http.post_json(url, payload, headers={"Content-Type": "application/json"})
        else:
            logger.info(f"Slack alert: {payload['text']} -> {payload['channel']}")
        return payload


class WebhookChannel:
    """Generic JSON webhook. Any non-2xx response is a delivery failure."""

    def __init__(self, http_client=None, source=DEFAULT_SOURCE, clock=None):
        self.http = http_client or HTTPClient()
        self.source = source
        self.clock = clock or now_ms

    def send(self, config, alert, event=TRIGGERED):
        url = config.get("url")
        if not url:
            raise DeliveryError("Webhook channel has no url configured")
        headers = {"Content-Type": "application/json"}
        headers.update(config.get("headers") or {})
        body = {
            "alert": alert.to_dict(),
            "timestamp": self.clock(),
            "source": self.source,
        }
        self.http.post_json(url, body, headers=headers)
        return body


class SmsChannel:
    """SMS text, truncated to one message. Provider integration is out of scope; logged."""

    def send(self, config, alert, event=TRIGGERED):
        payload = format_sms(config, alert, event)
        logger.info(f"SMS alert: to={payload['to']} message={payload['message']!r}")
        return payload


@dataclass
class DeliveryResult:
    channel_type: str
    ok: bool
    payload: Any = None
    error: Optional[str] = None


def default_senders(http_client=None, email_sender=None, source=DEFAULT_SOURCE, clock=None):
    http_client = http_client or HTTPClient()
    return {
        ChannelType.EMAIL.value: EmailChannel(email_sender),
        ChannelType.SLACK.value: SlackChannel(http_client),
        ChannelType.WEBHOOK.value: WebhookChannel(http_client, source=source, clock=clock),
        ChannelType.SMS.value: SmsChannel(),
    }


class NotificationDispatcher:
    """Fans an alert out to every enabled channel concurrently.

    Each channel fails on its own: errors are logged and reported in the
    returned results, never raised to the caller.
    """

    def __init__(self, senders=None, max_workers=4):
        self.senders = dict(senders) if senders is not None else default_senders()
        self.max_workers = max_workers

    def register(self, channel_type, sender):
        if not isinstance(sender, ChannelSender):
            raise TypeError(f"{sender!r} has no send(config, alert, event) method")
        self.senders[channel_type] = sender

    def dispatch(self, channels, alert, event=TRIGGERED):
        enabled = [c for c in channels if c.enabled]
        if not enabled:
            return []

        workers = max(1, min(self.max_workers, len(enabled)))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [executor.submit(self._deliver, c, alert, event) for c in enabled]
            results = [f.result() for f in futures]

        failed = [r.channel_type for r in results if not r.ok]
        if failed:
            logger.warning(f"Alert {alert.id} ({event}) failed on channels: {failed}")
        return results

    def _deliver(self, channel, alert, event):
        sender = self.senders.get(channel.type)
        if sender is None:
            logger.warning(f"Unknown alert channel type: {channel.type}")
            return DeliveryResult(channel.type, ok=False, error="unknown channel type")
        try:
            payload = sender.send(channel.config, alert, event)
            logger.debug(f"Delivered {event} alert {alert.id} via {channel.type}")
            return DeliveryResult(channel.type, ok=True, payload=payload)
        except Exception as e:
            logger.error(f"Failed to send alert to {channel.type}: {e}")
            return DeliveryResult(channel.type, ok=False, error=str(e))
