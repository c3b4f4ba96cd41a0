"""Tests for alert notifiers and the report email hand-off."""

import base64
from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest

from company_enrichment.exceptions import NotificationError
from company_enrichment.notifications import (
    AlertDescriptor,
    AlertQueueNotifier,
    HttpEmailSender,
    NullNotifier,
    SlackWebhookNotifier,
    build_email_sender,
    build_notifier,
    build_report_email,
)

# --- Helper function for mocking ---


def create_mock_session_with_response(mock_response=None, error=None):
    """
    Create an aiohttp-style session mock whose `.post()` returns an async context
    manager yielding the provided response, or raising ``error`` on entry.
    """
    mock_cm = MagicMock()
    if error is not None:
        mock_cm.__aenter__ = AsyncMock(side_effect=error)
    else:
        mock_cm.__aenter__ = AsyncMock(return_value=mock_response)
    mock_cm.__aexit__ = AsyncMock(return_value=None)

    mock_session = MagicMock()
    mock_session.post = MagicMock(return_value=mock_cm)
    return mock_session


def create_mock_response(status=200, text="ok"):
    mock_response = AsyncMock()
    mock_response.status = status
    mock_response.text = AsyncMock(return_value=text)
    return mock_response


@pytest.fixture
def alert():
    return AlertDescriptor(
        origin="company-enrichment",
        operation="batch enrichment",
        error="ProviderTransportError: metadata: HTTP 503",
        context={"domains": 42},
    )


class TestSlackWebhookNotifier:
    """Test suite for SlackWebhookNotifier."""

    @pytest.mark.asyncio
    async def test_posts_colour_coded_attachment(self, alert):
        session = create_mock_session_with_response(create_mock_response())
        notifier = SlackWebhookNotifier(
            session=session, webhook_url="https://hooks.test/T/B/X"
        )

        result = await notifier.notify(alert)

        assert result.delivered is True
        assert result.channel == "slack"
        url = session.post.call_args.args[0]
        message = session.post.call_args.kwargs["json"]
        assert url == "https://hooks.test/T/B/X"
        attachment = message["attachments"][0]
        assert attachment["color"] == "#FF0000"
        assert attachment["title"] == "company-enrichment: batch enrichment failed"
        values = {field["title"]: field["value"] for field in attachment["fields"]}
        assert values["Error"] == alert.error
        assert values["domains"] == "42"

    @pytest.mark.asyncio
    async def test_rejected_message(self, alert):
        session = create_mock_session_with_response(
            create_mock_response(status=403, text="invalid_token")
        )
        notifier = SlackWebhookNotifier(session=session, webhook_url="https://hooks.test")

        with pytest.raises(NotificationError, match="403"):
            await notifier.notify(alert)

    @pytest.mark.asyncio
    async def test_unreachable_webhook(self, alert):
        session = create_mock_session_with_response(
            error=aiohttp.ClientConnectionError("refused")
        )
        notifier = SlackWebhookNotifier(session=session, webhook_url="https://hooks.test")

        with pytest.raises(NotificationError, match="unreachable"):
            await notifier.notify(alert)


class TestAlertQueueNotifier:
    """Test suite for AlertQueueNotifier."""

    @pytest.mark.asyncio
    async def test_posts_message_document(self, alert):
        session = create_mock_session_with_response(create_mock_response())
        notifier = AlertQueueNotifier(session=session, queue_url="https://alerts.test")

        result = await notifier.notify(alert)

        assert result.delivered is True
        document = session.post.call_args.kwargs["json"]
        assert list(document) == ["message"]
        assert "Service: company-enrichment" in document["message"]
        assert "Method: batch enrichment" in document["message"]
        assert '"domains": 42' in document["message"]

    @pytest.mark.asyncio
    async def test_server_error(self, alert):
        session = create_mock_session_with_response(create_mock_response(status=500))
        notifier = AlertQueueNotifier(session=session, queue_url="https://alerts.test")

        with pytest.raises(NotificationError):
            await notifier.notify(alert)


class TestNullNotifier:
    @pytest.mark.asyncio
    async def test_not_delivered(self, alert):
        result = await NullNotifier().notify(alert)

        assert result.delivered is False
        assert result.channel == "none"


class TestHttpEmailSender:
    """Test suite for HttpEmailSender."""

    @pytest.mark.asyncio
    async def test_posts_base64_attachment(self):
        session = create_mock_session_with_response(create_mock_response())
        sender = HttpEmailSender(session=session, service_url="https://mail.test/send")
        report = b'"ID","Company Name"\n"1","Acme"\n'

        await sender.send("partner@example.com", build_report_email("Report", report))

        document = session.post.call_args.kwargs["json"]
        assert document["recipient"] == "partner@example.com"
        assert document["subject"] == "Report"
        assert "<html>" in document["body"]
        assert document["attachment"]["filename"] == "report.csv"
        assert document["attachment"]["content_type"] == "text/csv"
        assert base64.b64decode(document["attachment"]["data"]) == report

    @pytest.mark.asyncio
    async def test_rejected(self):
        session = create_mock_session_with_response(create_mock_response(status=502))
        sender = HttpEmailSender(session=session, service_url="https://mail.test/send")

        with pytest.raises(NotificationError):
            await sender.send("partner@example.com", build_report_email("Report", b""))


class TestBuilders:
    """Test suite for build_notifier() and build_email_sender()."""

    def test_default_is_null(self, settings):
        assert isinstance(build_notifier(settings, MagicMock()), NullNotifier)

    def test_slack(self, settings_factory):
        settings = settings_factory(
            alert_channel="slack", slack_webhook_url="https://hooks.test/x"
        )

        assert isinstance(build_notifier(settings, MagicMock()), SlackWebhookNotifier)

    def test_slack_without_webhook_falls_back(self, settings_factory):
        settings = settings_factory(alert_channel="slack")

        assert isinstance(build_notifier(settings, MagicMock()), NullNotifier)

    def test_alert_queue(self, settings_factory):
        settings = settings_factory(
            alert_channel="alert_queue", alert_queue_url="https://alerts.test"
        )

        assert isinstance(build_notifier(settings, MagicMock()), AlertQueueNotifier)

    def test_email_sender(self, settings, settings_factory):
        assert build_email_sender(settings, MagicMock()) is None
        configured = settings_factory(email_service_url="https://mail.test/send")
        assert isinstance(build_email_sender(configured, MagicMock()), HttpEmailSender)
