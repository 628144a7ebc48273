"""Webhook alert notifications (Discord-compatible)."""
from datetime import datetime

import requests

ALERT_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


class NotificationError(Exception):
    """Raised when an alert could not be delivered to the webhook."""


def format_alert(volume, reason, details, now=None):
    """Build the alert text sent as the webhook message content."""
    if now is None:
        now = datetime.now()
    return (
        f"🚨 Alert for volume {volume}\n"
        f"Reason: {reason}\n"
        f"Details: {details}\n"
        f"Time: {now.strftime(ALERT_TIME_FORMAT)}"
    )


def send_notification(webhook_url, volume, reason, details):
    """
    Post an alert to the webhook.

    Does nothing when webhook_url is empty. The webhook must answer
    204 No Content; anything else is treated as a failure.

    Raises:
        NotificationError: On a transport failure or unexpected status code
    """
    if not webhook_url:
        return

    payload = {"content": format_alert(volume, reason, details)}

    try:
        resp = requests.post(webhook_url, json=payload)
    except requests.RequestException as e:
        raise NotificationError(f"webhook request failed: {e}") from e

    if resp.status_code != 204:
        raise NotificationError(f"webhook returned status: {resp.status_code}")
