"""Chat webhook notifier."""

import asyncio
import json
import logging
from datetime import UTC, datetime
from typing import Any

import aiohttp

from ..exceptions import NotificationError
from .base import AlertDescriptor, AlertLevel, NotificationResult

logger = logging.getLogger(__name__)

LEVEL_COLOURS: dict[AlertLevel, str] = {
    AlertLevel.SUCCESS: "#36a64f",
    AlertLevel.WARNING: "#f2c744",
    AlertLevel.ERROR: "#FF0000",
    AlertLevel.INFO: "#0000FF",
}


class SlackWebhookNotifier:
    """Posts colour-coded attachments to an incoming chat webhook."""

    channel = "slack"

    def __init__(
        self,
        *,
        session: aiohttp.ClientSession,
        webhook_url: str,
        timeout_seconds: float = 10.0,
    ):
        self._session = session
        self._webhook_url = webhook_url
        self._timeout = aiohttp.ClientTimeout(total=timeout_seconds)

    @staticmethod
    def format_message(alert: AlertDescriptor) -> dict[str, Any]:
        """Build the webhook payload for ``alert``."""
        fields = [
            {"title": "Operation", "value": alert.operation, "short": True},
            {
                "title": "Timestamp",
                "value": datetime.now(UTC).strftime("%Y-%m-%d %H:%M UTC"),
                "short": True,
            },
            {"title": "Error", "value": alert.error, "short": False},
        ]
        for key, value in alert.context.items():
            if not isinstance(value, str):
                value = json.dumps(value, default=str)
            fields.append({"title": key, "value": value, "short": len(value) < 40})

        return {
            "text": alert.title,
            "attachments": [
                {
                    "color": LEVEL_COLOURS.get(alert.level, LEVEL_COLOURS[AlertLevel.INFO]),
                    "title": alert.title,
                    "footer": alert.origin,
                    "fields": fields,
                }
            ],
        }

    async def notify(self, alert: AlertDescriptor) -> NotificationResult:
        """
        Send ``alert`` to the webhook.

        Raises:
            NotificationError: If the webhook cannot be reached or rejects the message.
        """
        try:
            async with self._session.post(
                self._webhook_url,
                json=self.format_message(alert),
                timeout=self._timeout,
            ) as response:
                if response.status >= 400:
                    text = await response.text()
                    raise NotificationError(
                        f"Chat webhook returned HTTP {response.status}: {text[:200]}"
                    )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise NotificationError(f"Chat webhook unreachable: {e}") from e

        logger.info(f"Alert sent to chat webhook: {alert.title}")
        return NotificationResult(delivered=True, channel=self.channel)
