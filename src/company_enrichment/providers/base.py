"""Low-level HTTP plumbing shared by every provider client.

This module is responsible for:
- Applying the provider's bounded timeout to each request.
- Mapping HTTP outcomes onto the provider error taxonomy.
- Retrying transport failures with exponential backoff.
- Returning decoded JSON (no business mapping).
"""

import asyncio
import logging
from typing import Any

import aiohttp

from ..config import EnrichmentSettings
from ..exceptions import ProviderError, ProviderQueryError, ProviderTransportError
from ..utils.retry import retry_with_backoff

logger = logging.getLogger(__name__)

# Statuses meaning "the provider understood us and rejects the query itself".
MALFORMED_QUERY_STATUSES = frozenset({400, 422})


class ProviderClient:
    """Base HTTP client for one data provider.

    Args:
        session: Shared aiohttp session owned by the pipeline run.
        settings: Process-wide settings passed by reference.
        timeout_seconds: Total timeout applied to every request of this provider.

    Outcomes of a single request:
        - 2xx: decoded JSON body
        - 404: None (the provider has no data; not an error)
        - 400/422: ProviderQueryError (not retried)
        - anything else, connection errors, timeouts: ProviderTransportError
    """

    provider_name = "provider"

    def __init__(
        self,
        *,
        session: aiohttp.ClientSession,
        settings: EnrichmentSettings,
        timeout_seconds: float,
    ) -> None:
        self._session = session
        self._settings = settings
        self._timeout = aiohttp.ClientTimeout(total=timeout_seconds)

    async def _request_json(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        json_body: Any | None = None,
        headers: dict[str, str] | None = None,
        auth: aiohttp.BasicAuth | None = None,
    ) -> Any | None:
        try:
            async with self._session.request(
                method,
                url,
                params=params,
                json=json_body,
                headers=headers,
                auth=auth,
                timeout=self._timeout,
            ) as response:
                status = response.status
                if status == 404:
                    logger.debug(f"{self.provider_name} has no data for {url} ({params})")
                    return None
                if status in MALFORMED_QUERY_STATUSES:
                    body = await response.text()
                    raise ProviderQueryError(
                        self.provider_name,
                        f"HTTP {status} rejected query: {body[:200]}",
                        status=status,
                    )
                if not 200 <= status < 300:
                    raise ProviderTransportError(
                        self.provider_name, f"HTTP {status} from {url}", status=status
                    )
                return await response.json(content_type=None)
        except ProviderError:
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise ProviderTransportError(
                self.provider_name, f"{type(e).__name__}: {e}"
            ) from e
        except ValueError as e:
            # Undecodable body from a 2xx response.
            raise ProviderTransportError(
                self.provider_name, f"invalid JSON body: {e}"
            ) from e

    async def _call(self, method: str, url: str, **kwargs: Any) -> Any | None:
        """Issue one request through the retry executor."""
        return await retry_with_backoff(
            self._request_json,
            max_retries=self._settings.retry_attempts,
            retry_delay=self._settings.retry_delay,
            operation_args=(method, url),
            operation_kwargs=kwargs,
        )
