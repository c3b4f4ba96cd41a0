"""Relationship-graph provider client (paginated organization search)."""

import logging
from typing import Any

import aiohttp

from ..config import EnrichmentSettings
from ..models import GraphOrganization
from .base import ProviderClient

logger = logging.getLogger(__name__)


def _flag(value: bool) -> str:
    return "true" if value else "false"


class RelationshipGraphClient(ProviderClient):
    """Searches organizations and their interaction dates."""

    provider_name = "relationship_graph"

    def __init__(
        self, *, session: aiohttp.ClientSession, settings: EnrichmentSettings
    ) -> None:
        super().__init__(
            session=session,
            settings=settings,
            timeout_seconds=settings.relationship_graph_timeout,
        )

    def _auth(self) -> aiohttp.BasicAuth | None:
        # The API key goes in the password slot with an empty user name.
        if self._settings.relationship_graph_api_key is None:
            return None
        return aiohttp.BasicAuth(
            "", self._settings.relationship_graph_api_key.get_secret_value()
        )

    async def search_organizations(
        self,
        term: str | None = None,
        *,
        with_interaction_dates: bool = False,
        with_interaction_persons: bool = False,
        min_last_email_date: str | None = None,
        max_last_email_date: str | None = None,
    ) -> list[GraphOrganization]:
        """
        Search organizations, following continuation tokens until exhausted.

        Each page is its own retried request, so a transient failure on page N
        does not restart the pages already read.

        Parameters:
            term (str | None): Free-text search term (a domain for enrichment).
            with_interaction_dates (bool): Include interaction dates in results.
            with_interaction_persons (bool): Include interaction persons in results.
            min_last_email_date (str | None): Lower bound on the last email date.
            max_last_email_date (str | None): Upper bound on the last email date.

        Returns:
            list[GraphOrganization]: Every organization across all pages.
        """
        params: dict[str, Any] = {
            "term": term,
            "with_interaction_dates": _flag(with_interaction_dates),
            "with_interaction_persons": _flag(with_interaction_persons),
            "page_size": self._settings.relationship_graph_page_size,
            "min_last_email_date": min_last_email_date,
            "max_last_email_date": max_last_email_date,
        }
        params = {key: value for key, value in params.items() if value is not None}

        organizations: list[GraphOrganization] = []
        seen_tokens: set[str] = set()
        page_token: str | None = None

        while True:
            if page_token:
                params["page_token"] = page_token

            payload = await self._call(
                "GET",
                self._settings.relationship_graph_url,
                params=dict(params),
                auth=self._auth(),
            )
            if not isinstance(payload, dict):
                break

            for item in payload.get("organizations") or []:
                if isinstance(item, dict):
                    organizations.append(GraphOrganization.model_validate(item))

            page_token = payload.get("next_page_token")
            if not page_token or page_token in seen_tokens:
                break
            seen_tokens.add(page_token)

        return organizations

    async def fetch(self, domain: str) -> GraphOrganization | None:
        """
        Return the organization for ``domain`` with interaction dates, or None.

        An organization whose domain matches exactly is preferred over the
        first search hit. Without an API key the provider is skipped.
        """
        if self._settings.relationship_graph_api_key is None:
            return None

        organizations = await self.search_organizations(
            domain,
            with_interaction_dates=True,
            with_interaction_persons=True,
            min_last_email_date=self._settings.interaction_window_start,
            max_last_email_date=self._settings.interaction_window_end,
        )
        if not organizations:
            return None

        for organization in organizations:
            if organization.domain == domain or domain in organization.domains:
                return organization
        return organizations[0]
