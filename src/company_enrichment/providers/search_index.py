"""Search-index provider client (single-domain document lookup)."""

import logging

import aiohttp

from ..config import EnrichmentSettings
from ..models import SearchIndexDocument
from .base import ProviderClient

logger = logging.getLogger(__name__)


class SearchIndexClient(ProviderClient):
    """Queries the company search index by website."""

    provider_name = "search_index"

    def __init__(
        self, *, session: aiohttp.ClientSession, settings: EnrichmentSettings
    ) -> None:
        super().__init__(
            session=session,
            settings=settings,
            timeout_seconds=settings.search_index_timeout,
        )

    @staticmethod
    def build_query(domain: str) -> dict[str, str]:
        escaped = domain.replace("\\", "\\\\").replace('"', '\\"')
        return {
            "q.op": "OR",
            "q": f'Website:"{escaped}"',
            "sort": "_version_ DESC",
        }

    async def fetch(self, domain: str) -> SearchIndexDocument | None:
        """Return the newest indexed document for ``domain``, or None if there is none."""
        payload = await self._call(
            "GET", self._settings.search_index_url, params=self.build_query(domain)
        )
        if not isinstance(payload, dict):
            return None

        section = payload.get("response")
        docs = section.get("docs") if isinstance(section, dict) else None
        if not isinstance(docs, list) or not docs or not isinstance(docs[0], dict):
            logger.debug(f"Search index has no document for {domain}")
            return None
        return SearchIndexDocument.model_validate(docs[0])
