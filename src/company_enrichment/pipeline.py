"""
Main enrichment pipeline.
Orchestrates input parsing, URL normalization, batched provider fan-out,
field merging and report assembly for one uploaded spreadsheet.
"""

import logging
import time
from dataclasses import dataclass
from types import TracebackType

import aiohttp

from .cache import ResponseCache
from .config import EnrichmentSettings, get_settings
from .enricher import DomainEnricher
from .exceptions import NotificationError, RunAbortedError
from .merge import FieldMergeEngine, ProviderResponses
from .models import InputRecord, OutputRow
from .notifications import (
    AlertDescriptor,
    EmailSender,
    Notifier,
    build_email_sender,
    build_notifier,
    build_report_email,
)
from .output import RowAssembler, read_input_records, serialize
from .providers import (
    CrmClient,
    MetadataClient,
    RelationshipGraphClient,
    SearchIndexClient,
)
from .scheduler import BatchScheduler
from .utils import normalize

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ProviderClients:
    """The four provider clients a run fans out to."""

    metadata: MetadataClient
    crm: CrmClient
    search_index: SearchIndexClient
    relationship_graph: RelationshipGraphClient

    @classmethod
    def from_session(
        cls, session: aiohttp.ClientSession, settings: EnrichmentSettings
    ) -> "ProviderClients":
        return cls(
            metadata=MetadataClient(session=session, settings=settings),
            crm=CrmClient(session=session, settings=settings),
            search_index=SearchIndexClient(session=session, settings=settings),
            relationship_graph=RelationshipGraphClient(
                session=session, settings=settings
            ),
        )


def unique_domains(domains: list[str]) -> list[str]:
    """Distinct non-empty domains in first-seen order."""
    return list(dict.fromkeys(domain for domain in domains if domain))


class EnrichmentPipeline:
    """
    Entry point for one enrichment run per uploaded spreadsheet.

    Use as an async context manager; a session is opened on entry unless one
    was injected, and closed on exit only if the pipeline opened it.
    """

    def __init__(
        self,
        settings: EnrichmentSettings | None = None,
        session: aiohttp.ClientSession | None = None,
        notifier: Notifier | None = None,
        email_sender: EmailSender | None = None,
        providers: ProviderClients | None = None,
    ):
        """
        Create an EnrichmentPipeline.

        Parameters:
            settings (EnrichmentSettings | None): Pipeline settings; defaults to get_settings().
            session (aiohttp.ClientSession | None): Shared HTTP session; opened on entry when omitted.
            notifier (Notifier | None): Alert channel for run-level failures; built from settings when omitted.
            email_sender (EmailSender | None): Report email hand-off; built from settings when omitted.
            providers (ProviderClients | None): Provider clients; built over the session when omitted.
        """
        self.settings = settings or get_settings()
        self._session = session
        self._owns_session = session is None
        self._notifier = notifier
        self._email_sender = email_sender
        self._providers = providers
        self.cache: ResponseCache | None = None

        # Performance tracking
        self.timing_breakdown: dict[str, float] = {}

    async def __aenter__(self) -> "EnrichmentPipeline":
        if self._session is None:
            self._session = aiohttp.ClientSession()
        if self._providers is None:
            self._providers = ProviderClients.from_session(self._session, self.settings)
        if self._notifier is None:
            self._notifier = build_notifier(self.settings, self._session)
        if self._email_sender is None:
            self._email_sender = build_email_sender(self.settings, self._session)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> bool:
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None
        return False

    @property
    def providers(self) -> ProviderClients:
        if self._providers is None:
            raise RuntimeError("EnrichmentPipeline must be used as an async context manager")
        return self._providers

    async def run(self, buffer: bytes, email: str | None = None) -> bytes:
        """
        Enrich an uploaded spreadsheet and return the report.

        Parameters:
            buffer (bytes): Uploaded CSV with a ``company_url`` column.
            email (str | None): Recipient of the report email; no email is sent when omitted.

        Returns:
            bytes: The enriched CSV, one row per input row, in input order.

        Raises:
            InputFormatError: If the upload cannot be read.
            RunAbortedError: If a batch-level provider call fails terminally.
            NotificationError: If the report email cannot be handed off.
        """
        start_time = time.time()
        records = read_input_records(buffer)
        rows = await self.enrich_records(records)
        report = serialize(rows)
        self.timing_breakdown["total"] = time.time() - start_time

        if email:
            await self._send_report(email, report)

        logger.info(
            f"Run complete: {len(rows)} rows in {self.timing_breakdown['total']:.2f}s"
        )
        return report

    async def enrich_records(self, records: list[InputRecord]) -> list[OutputRow]:
        """
        Enrich ``records`` and return one output row per record.

        Records that normalize to the same domain share one enrichment; each
        still gets its own row.
        """
        providers = self.providers
        domains = [normalize(record.raw_url) for record in records]
        targets = unique_domains(domains)
        logger.info(f"Enriching {len(targets)} unique domains from {len(records)} rows")

        # Fresh cache per run; kept on the pipeline for inspection afterwards.
        self.cache = ResponseCache()
        merge_engine = FieldMergeEngine(self.settings)
        enricher = DomainEnricher(
            cache=self.cache,
            merge_engine=merge_engine,
            metadata=providers.metadata,
            crm=providers.crm,
            search_index=providers.search_index,
            relationship_graph=providers.relationship_graph,
        )
        scheduler = BatchScheduler.from_settings(self.settings)

        step_start = time.time()
        try:
            result = await scheduler.run(
                targets, enricher.enrich, prepare_batch=enricher.prepare_batch
            )
        except Exception as e:
            logger.exception(f"Enrichment run aborted: {e}")
            await self._alert("batch enrichment", e, {"domains": len(targets)})
            raise RunAbortedError("batch enrichment", e) from e
        self.timing_breakdown["enrichment"] = time.time() - step_start

        assembler = RowAssembler()
        rows: list[OutputRow] = []
        for record, domain in zip(records, domains):
            if domain in result.companies:
                rows.append(assembler.assemble(result.companies[domain], record))
            elif domain in result.failures:
                rows.append(assembler.assemble_failure(result.failures[domain], record))
            else:
                # Blank URL: nothing was scheduled, so every field stays unknown.
                company = merge_engine.merge(domain, ProviderResponses())
                rows.append(assembler.assemble(company, record))
        return rows

    async def _alert(
        self, operation: str, error: BaseException, context: dict[str, object]
    ) -> None:
        if self._notifier is None:
            return
        alert = AlertDescriptor(
            origin="company-enrichment",
            operation=operation,
            error=f"{type(error).__name__}: {error}",
            context=dict(context),
        )
        try:
            await self._notifier.notify(alert)
        except NotificationError as e:
            logger.error(f"Failed to deliver alert for {operation}: {e}")

    async def _send_report(self, recipient: str, report: bytes) -> None:
        if self._email_sender is None:
            raise NotificationError(
                "An email recipient was given but no email service is configured"
            )
        await self._email_sender.send(
            recipient, build_report_email(self.settings.email_subject, report)
        )
