"""Alert notifiers and report email hand-off."""

import logging

import aiohttp

from ..config import EnrichmentSettings
from .alert_queue import AlertQueueNotifier
from .base import (
    AlertDescriptor,
    AlertLevel,
    EmailPayload,
    EmailSender,
    NotificationResult,
    Notifier,
    NullNotifier,
)
from .email import HttpEmailSender, build_report_email
from .slack import SlackWebhookNotifier

logger = logging.getLogger(__name__)

__all__ = [
    "AlertDescriptor",
    "AlertLevel",
    "AlertQueueNotifier",
    "EmailPayload",
    "EmailSender",
    "HttpEmailSender",
    "NotificationResult",
    "Notifier",
    "NullNotifier",
    "SlackWebhookNotifier",
    "build_email_sender",
    "build_notifier",
    "build_report_email",
]


def build_notifier(
    settings: EnrichmentSettings, session: aiohttp.ClientSession
) -> Notifier:
    """Pick the notifier for ``settings.alert_channel``.

    Falls back to NullNotifier when the chosen channel has no endpoint.
    """
    if settings.alert_channel == "slack":
        if settings.slack_webhook_url is None:
            logger.warning("Alert channel 'slack' selected but no webhook URL is set")
            return NullNotifier()
        return SlackWebhookNotifier(
            session=session,
            webhook_url=settings.slack_webhook_url.get_secret_value(),
            timeout_seconds=settings.alert_timeout,
        )
    if settings.alert_channel == "alert_queue":
        if not settings.alert_queue_url:
            logger.warning("Alert channel 'alert_queue' selected but no URL is set")
            return NullNotifier()
        return AlertQueueNotifier(
            session=session,
            queue_url=settings.alert_queue_url,
            timeout_seconds=settings.alert_timeout,
        )
    return NullNotifier()


def build_email_sender(
    settings: EnrichmentSettings, session: aiohttp.ClientSession
) -> EmailSender | None:
    """HttpEmailSender for the configured service, or None when unset."""
    if not settings.email_service_url:
        return None
    return HttpEmailSender(
        session=session,
        service_url=settings.email_service_url,
        timeout_seconds=settings.email_timeout,
    )
