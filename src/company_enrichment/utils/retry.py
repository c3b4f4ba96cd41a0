"""Retry utility for provider calls with pure exponential backoff."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import aiohttp

from ..exceptions import ProviderQueryError, ProviderTransportError

T = TypeVar("T")

logger = logging.getLogger(__name__)


def default_is_transient_error(error: Exception) -> bool:
    """Check if an error is worth retrying.

    Provider errors carry their own classification: transport failures
    (timeouts, connection errors, non-2xx responses) are retried, malformed
    queries are not. Anything else is matched by type.

    Args:
        error: Exception to check

    Returns:
        True if error is transient, False otherwise
    """
    if isinstance(error, ProviderQueryError):
        return False

    transient_types = (
        ProviderTransportError,
        aiohttp.ClientError,
        asyncio.TimeoutError,
        ConnectionError,
        TimeoutError,
    )
    return isinstance(error, transient_types)


async def retry_with_backoff(
    operation: Callable[..., Awaitable[T]],
    max_retries: int = 3,
    retry_delay: float = 0.3,
    operation_args: tuple[Any, ...] | None = None,
    operation_kwargs: dict[str, Any] | None = None,
    is_transient_error: Callable[[Exception], bool] | None = None,
    on_retry: Callable[..., None] | None = None,
) -> T:
    """Execute an async operation with retry logic and exponential backoff.

    The delay before retry k (1-indexed) is ``retry_delay * 2 ** (k - 1)``,
    without jitter. Once retries are exhausted, or on a non-transient error,
    the last exception is re-raised as-is so the caller decides whether to
    degrade.

    Args:
        operation: Async function to execute
        max_retries: Maximum number of retry attempts after the first call (default: 3)
        retry_delay: Initial delay in seconds between retries, doubles each retry (default: 0.3)
        operation_args: Tuple of positional arguments to pass to operation
        operation_kwargs: Dictionary of keyword arguments to pass to operation
        is_transient_error: Optional custom function to determine if error is transient
        on_retry: Optional callback called on each retry with (attempt, max_retries, error, delay)

    Returns:
        Result of the operation if successful

    Raises:
        ValueError: If max_retries or retry_delay are negative
        Exception: The last exception if all retries are exhausted or if non-transient error

    Example:
        >>> document = await retry_with_backoff(
        ...     operation=client.fetch_page,
        ...     max_retries=3,
        ...     retry_delay=0.3,
        ...     operation_args=("acme.com",),
        ... )
    """
    if max_retries < 0:
        raise ValueError("max_retries must be >= 0")  # noqa: TRY003
    if retry_delay < 0:
        raise ValueError("retry_delay must be >= 0")  # noqa: TRY003

    if operation_args is None:
        operation_args = ()
    if operation_kwargs is None:
        operation_kwargs = {}

    retry_count = 0

    while retry_count <= max_retries:
        try:
            result = await operation(*operation_args, **operation_kwargs)
        except Exception as e:
            retry_count += 1

            if is_transient_error is not None:
                is_transient = is_transient_error(e)
            else:
                is_transient = default_is_transient_error(e)

            if is_transient and retry_count <= max_retries:
                delay = retry_delay * (2 ** (retry_count - 1))

                logger.warning(
                    f"Transient error on attempt {retry_count}/{max_retries + 1}: {e}. "
                    f"Retrying in {delay}s..."
                )

                if on_retry:
                    on_retry(
                        attempt=retry_count,
                        max_retries=max_retries,
                        error=e,
                        delay=delay,
                    )

                await asyncio.sleep(delay)
            else:
                if retry_count > max_retries:
                    logger.error(f"Max retries ({max_retries}) exceeded: {e}")
                else:
                    logger.error(f"Non-transient error: {e}")

                raise
        else:
            return result

    # pragma: no cover - the loop always returns on success or raises on error
    raise RuntimeError
