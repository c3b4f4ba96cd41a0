"""Report email hand-off over HTTP."""

import asyncio
import base64
import logging

import aiohttp

from ..exceptions import NotificationError
from .base import EmailPayload

logger = logging.getLogger(__name__)

REPORT_EMAIL_BODY = """\
<!DOCTYPE html>
<html>
<head><meta charset="UTF-8"><title>{subject}</title></head>
<body style="font-family: Arial, sans-serif;">
  <h1 style="font-size: 24px;">{subject}</h1>
  <p>Your enriched company report has been generated.</p>
  <p>Please find the attached CSV file containing your report.</p>
</body>
</html>
"""


def build_report_email(subject: str, report: bytes) -> EmailPayload:
    """Wrap the serialized report in the standard report email."""
    return EmailPayload(
        subject=subject,
        body=REPORT_EMAIL_BODY.format(subject=subject),
        attachment=report,
    )


class HttpEmailSender:
    """Posts the report email to an outbound email service as JSON."""

    def __init__(
        self,
        *,
        session: aiohttp.ClientSession,
        service_url: str,
        timeout_seconds: float = 30.0,
    ):
        self._session = session
        self._service_url = service_url
        self._timeout = aiohttp.ClientTimeout(total=timeout_seconds)

    async def send(self, recipient: str, payload: EmailPayload) -> None:
        """
        Hand ``payload`` to the email service for delivery to ``recipient``.

        Raises:
            NotificationError: If the email service is unreachable or rejects the request.
        """
        document = {
            "recipient": recipient,
            "subject": payload.subject,
            "body": payload.body,
            "attachment": {
                "filename": payload.filename,
                "content_type": payload.content_type,
                "data": base64.b64encode(payload.attachment).decode("ascii"),
            },
        }
        try:
            async with self._session.post(
                self._service_url, json=document, timeout=self._timeout
            ) as response:
                if response.status >= 400:
                    text = await response.text()
                    raise NotificationError(
                        f"Email service returned HTTP {response.status}: {text[:200]}"
                    )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise NotificationError(f"Email service unreachable: {e}") from e

        logger.info(f"Report email handed off for {recipient}")
