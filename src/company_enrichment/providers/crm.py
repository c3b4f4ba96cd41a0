"""CRM provider client.

Two query shapes:
- a batch endpoint answering accounts (by website and by name) plus richer
  company records for a whole batch of domains;
- a per-domain account lookup used when the batch answer holds no account,
  trying increasingly loose website matches before falling back to the
  company name.
"""

import logging
from typing import Any

import aiohttp

from ..config import EnrichmentSettings
from ..models import CrmAccount, CrmBatchResponse
from .base import ProviderClient

logger = logging.getLogger(__name__)

ACCOUNT_FIELDS = (
    "Id, Name, Website, Owner.Name, BVP_Owners__c, "
    "Last_Activity_Date__c, Last_Email_Received_Date__c"
)


def escape_soql_literal(value: str) -> str:
    """Escape a value for use inside a single-quoted query literal."""
    return value.replace("\\", "\\\\").replace("'", "\\'")


def escape_soql_like(value: str) -> str:
    """Escape a value for use inside a LIKE pattern."""
    return escape_soql_literal(value).replace("%", "\\%").replace("_", "\\_")


class CrmClient(ProviderClient):
    """Queries the CRM for accounts matching a company."""

    provider_name = "crm"

    def __init__(
        self, *, session: aiohttp.ClientSession, settings: EnrichmentSettings
    ) -> None:
        super().__init__(
            session=session,
            settings=settings,
            timeout_seconds=settings.crm_timeout,
        )

    async def fetch_batch(self, companies: list[dict[str, str]]) -> CrmBatchResponse:
        """
        Fetch CRM accounts and company records for one batch.

        Parameters:
            companies (list[dict[str, str]]): Items of the form
                ``{"company_url": domain, "company_name": name}``.

        Returns:
            CrmBatchResponse: Decoded batch answer; empty when the endpoint has no data.

        Raises:
            ProviderTransportError: If the endpoint stays unreachable after retries.
            ProviderQueryError: If the endpoint rejects the request.
        """
        if not companies:
            return CrmBatchResponse()

        payload = await self._call(
            "POST", self._settings.crm_batch_url, json_body={"companies": companies}
        )
        return CrmBatchResponse.model_validate(payload or {})

    @staticmethod
    def account_queries(domain: str, company_name: str | None) -> list[str]:
        """Fallback queries in the order they are tried; the first match wins."""
        literal = escape_soql_literal(domain)
        queries = [
            f"SELECT {ACCOUNT_FIELDS} FROM Account WHERE Website = 'https://{literal}' LIMIT 1",
            f"SELECT {ACCOUNT_FIELDS} FROM Account WHERE Website = 'http://{literal}' LIMIT 1",
            f"SELECT {ACCOUNT_FIELDS} FROM Account WHERE Website = 'https://www.{literal}' LIMIT 1",
            f"SELECT {ACCOUNT_FIELDS} FROM Account WHERE Website LIKE '%{escape_soql_like(domain)}%' LIMIT 1",
        ]
        if company_name:
            queries.append(
                f"SELECT {ACCOUNT_FIELDS} FROM Account "
                f"WHERE Name = '{escape_soql_literal(company_name)}' LIMIT 1"
            )
        return queries

    async def find_account(
        self, domain: str, company_name: str | None = None
    ) -> CrmAccount | None:
        """
        Look up a single account by website, then by exact company name.

        Returns:
            CrmAccount | None: The first matching account, or None when no query
            matches or no query endpoint is configured.
        """
        if not self._settings.crm_query_url:
            return None

        for query in self.account_queries(domain, company_name):
            records = await self._query(query)
            if records:
                logger.debug(f"CRM fallback matched {domain} with: {query}")
                return CrmAccount.model_validate(records[0])

        logger.debug(f"CRM fallback found no account for {domain}")
        return None

    async def _query(self, soql: str) -> list[dict[str, Any]]:
        headers = {"Accept": "application/json"}
        if self._settings.crm_access_token:
            token = self._settings.crm_access_token.get_secret_value()
            headers["Authorization"] = f"Bearer {token}"

        payload = await self._call(
            "GET",
            self._settings.crm_query_url,
            params={"q": soql},
            headers=headers,
        )
        if not isinstance(payload, dict):
            return []
        records = payload.get("records") or []
        return [record for record in records if isinstance(record, dict)]
