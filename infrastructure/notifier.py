"""Slack-compatible webhook notifications."""

import logging
from typing import Dict, Any

import requests

from domain import Event, NotificationSink, NotificationStatus


def build_message(event: Event) -> str:
    """Human readable multi-line announcement for a new event."""
    kind = 'ミーティング' if event.is_meeting else '共有イベント'
    lines = [
        f"*{event.title}* の{kind}",
        f"日時: {event.date} {event.start_time}",
    ]

    facilitator = ' '.join(part for part in (event.facilitator_name, event.facilitator_mention) if part)
    if facilitator:
        lines.append(f"ファシリテーター: {facilitator}")

    lines.append("アジェンダ:")
    lines.append(event.agenda)
    return '\n'.join(lines)


def build_payload(event: Event) -> Dict[str, Any]:
    return {'text': build_message(event)}


class SlackNotifier(NotificationSink):
    """POSTs new events to an incoming-webhook URL."""

    def __init__(self, webhook_url: str = "", timeout: int = 10):
        self.webhook_url = webhook_url
        self.timeout = timeout
        self.logger = logging.getLogger(__name__)

    def notify(self, event: Event) -> NotificationStatus:
        if not self.webhook_url:
            return NotificationStatus.NOT_CONFIGURED

        try:
            response = requests.post(self.webhook_url, json=build_payload(event), timeout=self.timeout)
        except requests.RequestException as e:
            self.logger.error(f"Webhook request failed for event {event.id}: {e}")
            return NotificationStatus.ERROR

        if not response.ok:
            self.logger.error(
                f"Webhook rejected event {event.id} ({response.status_code}): {response.text[:200]}"
            )
            return NotificationStatus.FAILED

        self.logger.info(f"Webhook notified for event {event.id}")
        return NotificationStatus.SENT
