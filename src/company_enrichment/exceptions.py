"""Exceptions for the company enrichment pipeline."""


class EnrichmentError(Exception):
    """Base exception for enrichment pipeline errors."""


class ProviderError(EnrichmentError):
    """Raised when a data provider call fails."""

    def __init__(self, provider: str, message: str, status: int | None = None):
        super().__init__(f"{provider}: {message}")
        self.provider = provider
        self.status = status


class ProviderTransportError(ProviderError):
    """Raised on timeouts, connection failures and non-2xx responses (retryable)."""


class ProviderQueryError(ProviderError):
    """Raised when a provider rejects the query as malformed (not retryable)."""


class InputFormatError(EnrichmentError):
    """Raised when the uploaded spreadsheet cannot be read."""


class RunAbortedError(EnrichmentError):
    """Raised when a run-level failure aborts the whole pipeline run."""

    def __init__(self, operation: str, cause: BaseException):
        super().__init__(f"Enrichment run aborted during {operation}: {cause}")
        self.operation = operation
        self.cause = cause


class NotificationError(EnrichmentError):
    """Raised when an email or alert hand-off fails."""
