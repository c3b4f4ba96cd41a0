"""Metadata provider client (batch lookup by website)."""

import logging

import aiohttp

from ..config import EnrichmentSettings
from ..models import MetadataResponse
from .base import ProviderClient

logger = logging.getLogger(__name__)


class MetadataClient(ProviderClient):
    """Looks up company attribute records for a batch of domains."""

    provider_name = "metadata"

    def __init__(
        self, *, session: aiohttp.ClientSession, settings: EnrichmentSettings
    ) -> None:
        super().__init__(
            session=session,
            settings=settings,
            timeout_seconds=settings.metadata_timeout,
        )

    async def fetch_batch(self, domains: list[str]) -> MetadataResponse:
        """
        Fetch attribute records for every domain in one request.

        Parameters:
            domains (list[str]): Canonical domains of one batch.

        Returns:
            MetadataResponse: Mapping of domain to its attribute records; domains the
            provider does not know are simply absent.

        Raises:
            ProviderTransportError: If the endpoint stays unreachable after retries.
            ProviderQueryError: If the endpoint rejects the request.
        """
        if not domains:
            return MetadataResponse({})

        payload = await self._call(
            "POST", self._settings.metadata_url, json_body={"websites": domains}
        )
        response = MetadataResponse.model_validate(payload or {})
        logger.info(
            f"Metadata returned records for {len(response.root)}/{len(domains)} domains"
        )
        return response
