"""
Field merge engine.

Combines the raw provider records of one domain into a MergedCompany using a
fixed precedence. Each step only fills fields that are still unknown, except
the relationship graph, which is the most current source for interaction
recency and overwrites those fields whenever it has a value.

Precedence:
    1. Metadata provider's richest record, then the CRM batch's company record
    2. CRM account (website match, name match, then the per-domain fallback)
    3. Search-index document, only while the last-email date is unknown
    4. Relationship-graph organization (overwrites recency and identifier fields)
"""

import logging
from dataclasses import dataclass

from .config import EnrichmentSettings
from .models import (
    UNKNOWN,
    CrmAccount,
    CrmCompanyRecord,
    CrmRecord,
    GraphOrganization,
    MergedCompany,
    MetadataRecord,
    SearchIndexDocument,
)
from .utils.text_utils import extract_linkedin_url, parse_number

logger = logging.getLogger(__name__)

# MergedCompany field <- attribute-record field, shared by metadata and search index.
ATTRIBUTE_FIELD_MAP: dict[str, str] = {
    "company_name": "name",
    "organization_id": "organization_id",
    "linkedin_url": "linkedin_url",
    "total_funding": "total_funding",
    "last_funding_amount": "last_funding_amount",
    "last_funding_date": "last_funding_date",
    "employee_count": "employee_count",
    "employee_count_prior": "employee_count_prior",
    "employee_growth_rate": "employee_growth",
    "country": "country",
    "description": "description",
    "year_founded": "year_founded",
    "last_email_date": "last_email",
    "last_meeting_date": "last_meeting",
}

CRM_COMPANY_FIELD_MAP: dict[str, str] = {
    "year_founded": "founded_date",
    "linkedin_url": "linkedin_url",
    "employee_count": "employee_count",
    "description": "description",
    "country": "hq_region",
    "employee_growth_rate": "employee_growth",
    "total_funding": "total_funding",
    "last_funding_amount": "last_funding_amount",
    "last_funding_date": "last_funding_date",
}


@dataclass(slots=True)
class ProviderResponses:
    """Raw records gathered for one domain; any of them may be missing."""

    metadata: MetadataRecord | None = None
    crm: CrmRecord | None = None
    crm_account: CrmAccount | None = None
    search_index: SearchIndexDocument | None = None
    relationship_graph: GraphOrganization | None = None


def resolve_company_name(domain: str, metadata: MetadataRecord | None) -> str:
    """Company name used for CRM name lookups: metadata name, else the domain."""
    if metadata is not None:
        name = metadata.first("name")
        if name is not None:
            return str(name)
    return domain


def growth_rate(current: object, prior: object) -> float | None:
    """Percentage growth from ``prior`` to ``current`` rounded to two decimals.

    Returns None when either count is not a number or ``prior`` is zero.
    """
    current_count = parse_number(current)
    prior_count = parse_number(prior)
    if current_count is None or prior_count is None or prior_count == 0:
        return None
    return round((current_count - prior_count) / prior_count * 100, 2)


class FieldMergeEngine:
    """Applies the precedence cascade to produce one MergedCompany per domain."""

    def __init__(self, settings: EnrichmentSettings):
        self.settings = settings

    def merge(self, domain: str, sources: ProviderResponses) -> MergedCompany:
        """
        Merge every provider record of ``domain`` into a MergedCompany.

        Parameters:
            domain (str): Canonical domain the records belong to.
            sources (ProviderResponses): Records gathered for the domain.

        Returns:
            MergedCompany: Every field resolved or left as UNKNOWN.
        """
        company = self._merge_primary(domain, sources)

        if sources.search_index is not None and company.is_unknown("last_email_date"):
            self._apply_attribute_record(company, sources.search_index)

        if sources.relationship_graph is not None:
            self._apply_relationship_graph(company, sources.relationship_graph)

        self._derive_fields(company)
        company.fill("company_name", domain)
        return company

    def needs_search_index(self, domain: str, sources: ProviderResponses) -> bool:
        """True when the contact-date fields are still unknown after steps 1 and 2."""
        return self._merge_primary(domain, sources).is_unknown("last_email_date")

    def _merge_primary(self, domain: str, sources: ProviderResponses) -> MergedCompany:
        company = MergedCompany(domain=domain, website=domain or UNKNOWN)

        if sources.metadata is not None:
            self._apply_attribute_record(company, sources.metadata)

        if sources.crm is not None and sources.crm.company is not None:
            self._apply_crm_company(company, sources.crm.company)

        account = sources.crm.account if sources.crm is not None else None
        if account is None:
            account = sources.crm_account
        if account is not None:
            self._apply_crm_account(company, account)

        return company

    @staticmethod
    def _apply_attribute_record(
        company: MergedCompany, record: MetadataRecord
    ) -> None:
        for target, source in ATTRIBUTE_FIELD_MAP.items():
            company.fill(target, record.first(source))
        company.fill(
            "founder_linkedin_url",
            extract_linkedin_url(record.first("founders_linkedin")),
        )

    @staticmethod
    def _apply_crm_company(company: MergedCompany, record: CrmCompanyRecord) -> None:
        for target, source in CRM_COMPANY_FIELD_MAP.items():
            company.fill(target, record.first(source))
        founders = record.first("founders")
        company.fill("founder_linkedin_url", extract_linkedin_url(founders) or founders)

    def _apply_crm_account(self, company: MergedCompany, account: CrmAccount) -> None:
        if account.account_id:
            company.fill(
                "crm_account_link",
                self.settings.crm_account_link_template.format(
                    account_id=account.account_id
                ),
            )
        company.fill("crm_account_owner", account.owner_name)
        company.fill("last_email_date", account.last_email_received_date)
        company.fill("last_meeting_date", account.last_activity_date)

    @staticmethod
    def _apply_relationship_graph(
        company: MergedCompany, organization: GraphOrganization
    ) -> None:
        dates = organization.interaction_dates
        if dates is not None:
            company.overwrite("last_email_date", dates.last_email_date)
            company.overwrite("last_meeting_date", dates.last_event_date)
        company.overwrite("organization_id", organization.id)

    def _derive_fields(self, company: MergedCompany) -> None:
        if company.is_unknown("employee_growth_rate"):
            rate = growth_rate(company.employee_count, company.employee_count_prior)
            if rate is not None:
                company.employee_growth_rate = f"{rate:.2f}"

        if company.organization_id != UNKNOWN:
            company.crm_record_link = self.settings.crm_record_link_template.format(
                organization_id=company.organization_id
            )
