"""Alerting and email hand-off interfaces."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol


class AlertLevel(str, Enum):
    """Severity of an alert; chat notifiers colour-code on it."""

    SUCCESS = "SUCCESS"
    WARNING = "WARNING"
    ERROR = "ERROR"
    INFO = "INFO"


@dataclass(slots=True)
class AlertDescriptor:
    """What failed, where, and any context worth attaching to the alert."""

    origin: str
    operation: str
    error: str
    context: dict[str, Any] = field(default_factory=dict)
    level: AlertLevel = AlertLevel.ERROR

    @property
    def title(self) -> str:
        return f"{self.origin}: {self.operation} failed"


@dataclass(slots=True)
class NotificationResult:
    """Outcome of one notification attempt."""

    delivered: bool
    channel: str
    detail: str | None = None


@dataclass(slots=True)
class EmailPayload:
    """Report email: subject, HTML body and the CSV attachment."""

    subject: str
    body: str
    attachment: bytes
    filename: str = "report.csv"
    content_type: str = "text/csv"


class Notifier(Protocol):
    """Reports run-level failures to an operator channel."""

    async def notify(self, alert: AlertDescriptor) -> NotificationResult: ...


class EmailSender(Protocol):
    """Hands the finished report to an email delivery service."""

    async def send(self, recipient: str, payload: EmailPayload) -> None: ...


class NullNotifier:
    """Notifier used when no alert channel is configured."""

    channel = "none"

    async def notify(self, alert: AlertDescriptor) -> NotificationResult:
        return NotificationResult(delivered=False, channel=self.channel)
