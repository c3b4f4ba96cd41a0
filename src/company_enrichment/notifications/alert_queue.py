"""Alert queue notifier."""

import asyncio
import json
import logging

import aiohttp

from ..exceptions import NotificationError
from .base import AlertDescriptor, NotificationResult

logger = logging.getLogger(__name__)


class AlertQueueNotifier:
    """Posts a plain-text ``{message}`` document to an alert queue endpoint."""

    channel = "alert_queue"

    def __init__(
        self,
        *,
        session: aiohttp.ClientSession,
        queue_url: str,
        timeout_seconds: float = 10.0,
    ):
        self._session = session
        self._queue_url = queue_url
        self._timeout = aiohttp.ClientTimeout(total=timeout_seconds)

    @staticmethod
    def format_message(alert: AlertDescriptor) -> str:
        details = json.dumps(alert.context, indent=2, default=str)
        return (
            f"Service: {alert.origin}\n\nMethod: {alert.operation}\n\n"
            f"Error: {alert.error}\n\nDetails: {details}"
        )

    async def notify(self, alert: AlertDescriptor) -> NotificationResult:
        try:
            async with self._session.post(
                self._queue_url,
                json={"message": self.format_message(alert)},
                timeout=self._timeout,
            ) as response:
                if response.status >= 400:
                    raise NotificationError(
                        f"Alert queue returned HTTP {response.status}"
                    )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise NotificationError(f"Alert queue unreachable: {e}") from e

        logger.info(f"Alert queued: {alert.title}")
        return NotificationResult(delivered=True, channel=self.channel)
