"""
Per-domain enrichment.

Batch-level provider calls (metadata and CRM batch) run once per batch and
land in the run's ResponseCache; per-domain work then reads them back and
issues the conditional single-domain calls (CRM fallback, search index,
relationship graph) before handing everything to the merge engine.
"""

import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from .cache import ResponseCache
from .exceptions import ProviderError, ProviderQueryError
from .merge import FieldMergeEngine, ProviderResponses, resolve_company_name
from .models import (
    CrmAccount,
    CrmRecord,
    GraphOrganization,
    MergedCompany,
    MetadataRecord,
    ProviderKind,
    SearchIndexDocument,
)
from .providers import (
    CrmClient,
    MetadataClient,
    RelationshipGraphClient,
    SearchIndexClient,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class DomainEnricher:
    """Gathers provider records for one domain and merges them."""

    def __init__(
        self,
        *,
        cache: ResponseCache,
        merge_engine: FieldMergeEngine,
        metadata: MetadataClient,
        crm: CrmClient,
        search_index: SearchIndexClient,
        relationship_graph: RelationshipGraphClient,
    ) -> None:
        self.cache = cache
        self.merge_engine = merge_engine
        self.metadata = metadata
        self.crm = crm
        self.search_index = search_index
        self.relationship_graph = relationship_graph

    async def prepare_batch(self, batch: list[str]) -> None:
        """
        Run the batch-level metadata and CRM calls and cache their per-domain slices.

        The CRM request carries the company names resolved from metadata, so the
        two calls run one after the other. When a provider rejects the batch as
        a malformed query, nothing is cached for that provider and each domain
        falls back to its own single-domain call, so only the offending domain
        fails. Any other exception here is a run-level failure and propagates
        to the scheduler.
        """
        try:
            metadata = await self.metadata.fetch_batch(batch)
        except ProviderQueryError as e:
            logger.warning(
                f"Metadata rejected a batch of {len(batch)} domains, "
                f"falling back to per-domain calls: {e}"
            )
            return

        names: dict[str, str] = {}
        for domain in batch:
            record = metadata.richest(domain)
            await self.cache.put(domain, ProviderKind.METADATA, record)
            names[domain] = resolve_company_name(domain, record)

        try:
            crm = await self.crm.fetch_batch(
                [
                    {"company_url": domain, "company_name": names[domain]}
                    for domain in batch
                ]
            )
        except ProviderQueryError as e:
            logger.warning(
                f"CRM rejected a batch of {len(batch)} domains, "
                f"falling back to per-domain calls: {e}"
            )
            return

        for domain in batch:
            await self.cache.put(
                domain, ProviderKind.CRM, crm.record_for(domain, names[domain])
            )

    async def enrich(self, domain: str, _batch_context: Any = None) -> MergedCompany:
        """
        Gather every provider record for ``domain`` and merge them.

        Parameters:
            domain (str): Canonical domain.

        Returns:
            MergedCompany: The merged record.

        Raises:
            ProviderError: If a metadata or CRM call fails terminally; the
                scheduler turns this into a DomainFailure for this domain only.
                Search-index and relationship-graph failures are logged and the
                domain is merged without them.
        """
        sources = ProviderResponses(
            metadata=await self._metadata(domain),
            crm=await self._crm(domain),
        )

        if sources.crm is None or sources.crm.account is None:
            sources.crm_account = await self._crm_fallback(
                domain, resolve_company_name(domain, sources.metadata)
            )

        if self.merge_engine.needs_search_index(domain, sources):
            sources.search_index = await self._search_index(domain)

        sources.relationship_graph = await self._relationship_graph(domain)

        company = self.merge_engine.merge(domain, sources)
        logger.debug(
            f"Merged {domain}: {len(company.unresolved_fields())} fields unresolved"
        )
        return company

    async def _metadata(self, domain: str) -> MetadataRecord | None:
        async def fetch() -> MetadataRecord | None:
            response = await self.metadata.fetch_batch([domain])
            return response.richest(domain)

        return await self.cache.get_or_fetch(domain, ProviderKind.METADATA, fetch)

    async def _crm(self, domain: str) -> CrmRecord | None:
        async def fetch() -> CrmRecord | None:
            name = resolve_company_name(domain, await self._metadata(domain))
            response = await self.crm.fetch_batch(
                [{"company_url": domain, "company_name": name}]
            )
            return response.record_for(domain, name)

        return await self.cache.get_or_fetch(domain, ProviderKind.CRM, fetch)

    async def _crm_fallback(self, domain: str, company_name: str) -> CrmAccount | None:
        return await self.cache.get_or_fetch(
            domain,
            ProviderKind.CRM_LOOKUP,
            lambda: self.crm.find_account(domain, company_name),
        )

    async def _search_index(self, domain: str) -> SearchIndexDocument | None:
        return await self._optional(
            domain, ProviderKind.SEARCH_INDEX, lambda: self.search_index.fetch(domain)
        )

    async def _relationship_graph(self, domain: str) -> GraphOrganization | None:
        return await self._optional(
            domain,
            ProviderKind.RELATIONSHIP_GRAPH,
            lambda: self.relationship_graph.fetch(domain),
        )

    async def _optional(
        self,
        domain: str,
        kind: ProviderKind,
        fetch: Callable[[], Awaitable[T]],
    ) -> T | None:
        """Fetch through the cache, treating a terminal provider failure as NotFound."""
        try:
            return await self.cache.get_or_fetch(domain, kind, fetch)
        except ProviderError as e:
            logger.warning(f"{kind.value} failed for {domain}, continuing without it: {e}")
            return None
