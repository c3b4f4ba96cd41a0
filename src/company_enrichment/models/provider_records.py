"""
Type models for provider payloads.

These are permissive: payloads are loosely shaped and may evolve. We model
only the fields we read while allowing extra keys at runtime. A missing field
decodes to None, which the merge treats as "unknown", never as an error.
"""

from enum import Enum
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    RootModel,
    field_validator,
    model_validator,
)


class ProviderKind(str, Enum):
    """Provider responses held in the per-run cache."""

    METADATA = "metadata"
    CRM = "crm"
    CRM_LOOKUP = "crm_lookup"
    SEARCH_INDEX = "search_index"
    RELATIONSHIP_GRAPH = "relationship_graph"


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _dict_entries(value: Any) -> list[dict[str, Any]]:
    """Keep only the object elements of a list; anything else decodes as empty."""
    if not isinstance(value, list):
        return []
    return [entry for entry in value if isinstance(entry, dict)]


def _text_or_none(value: Any) -> Any:
    """Numbers become text; any other non-string value decodes as absent."""
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return None


def _object_or_none(value: Any) -> Any:
    return value if isinstance(value, dict) else None


def _keyed_entries(value: Any) -> dict[str, list[dict[str, Any]]]:
    """Decode a key -> list-of-objects mapping, dropping malformed keys and elements."""
    if not isinstance(value, dict):
        return {}
    return {
        str(key): _dict_entries(entries)
        for key, entries in value.items()
        if isinstance(entries, list)
    }


# =============================================================================
# Positional (array-valued) records
# =============================================================================


class PositionalRecord(BaseModel):
    """Record whose attributes arrive as arrays and are read positionally."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    @field_validator("*", mode="before")
    @classmethod
    def wrap_scalar(cls, v: Any) -> Any:
        if v is None or isinstance(v, list):
            return v
        return [v]

    def first(self, field_name: str) -> Any | None:
        """Return the first non-blank value of an array field, or None."""
        values = getattr(self, field_name, None)
        if not values:
            return None
        for value in values:
            if not _is_blank(value):
                return value
        return None

    def populated_count(self) -> int:
        """Number of modelled fields carrying at least one non-blank value."""
        return sum(
            1 for name in type(self).model_fields if self.first(name) is not None
        )


class MetadataRecord(PositionalRecord):
    """Attribute record returned by the metadata provider."""

    name: list[Any] | None = Field(default=None, alias="Name")
    organization_id: list[Any] | None = Field(default=None, alias="Organization_Id")
    linkedin_url: list[Any] | None = Field(default=None, alias="LinkedIn_URL")
    founders_linkedin: list[Any] | None = Field(
        default=None, alias="LinkedIn_Profile__Founders_CEOs_"
    )
    total_funding: list[Any] | None = Field(
        default=None, alias="Total_Funding_Amount__USD_"
    )
    last_funding_amount: list[Any] | None = Field(
        default=None, alias="Last_Funding_Amount__USD_"
    )
    last_funding_date: list[Any] | None = Field(default=None, alias="Last_Funding_Date")
    employee_count: list[Any] | None = Field(default=None, alias="Number_of_Employees")
    employee_count_prior: list[Any] | None = Field(
        default=None, alias="Employees__12_Months_Ago"
    )
    employee_growth: list[Any] | None = Field(
        default=None, alias="Employees__Growth_YoY____"
    )
    country: list[Any] | None = Field(default=None, alias="Location__Country_")
    description: list[Any] | None = Field(default=None, alias="Description")
    year_founded: list[Any] | None = Field(default=None, alias="Year_Founded")
    last_email: list[Any] | None = Field(default=None, alias="Last_Email")
    last_meeting: list[Any] | None = Field(default=None, alias="Last_Meeting")


class SearchIndexDocument(MetadataRecord):
    """First document of a search-index response (same schema as metadata)."""


class CrmCompanyRecord(PositionalRecord):
    """Richer company attribute record from the CRM batch response."""

    company_name: list[Any] | None = Field(default=None, alias="Company_Name")
    founded_date: list[Any] | None = Field(default=None, alias="Founded_Date")
    linkedin_url: list[Any] | None = Field(default=None, alias="LinkedIn_-_URL")
    employee_count: list[Any] | None = Field(default=None, alias="Employee_Count")
    description: list[Any] | None = Field(default=None, alias="Description")
    hq_region: list[Any] | None = Field(default=None, alias="HQ_Region")
    founders: list[Any] | None = Field(default=None, alias="Founders")
    employee_growth: list[Any] | None = Field(
        default=None, alias="Employees_-_6_Months_Growth"
    )
    total_funding: list[Any] | None = Field(
        default=None, alias="Total_Funding_Amount__in_USD_"
    )
    last_funding_amount: list[Any] | None = Field(
        default=None, alias="Last_Funding_Amount__in_USD_"
    )
    last_funding_date: list[Any] | None = Field(default=None, alias="Last_Funding_Date")


class MetadataResponse(RootModel[dict[str, list[MetadataRecord]]]):
    """Metadata provider response: domain -> attribute records."""

    @field_validator("root", mode="before")
    @classmethod
    def drop_malformed_entries(cls, v: Any) -> Any:
        return _keyed_entries(v)

    def records_for(self, domain: str) -> list[MetadataRecord]:
        return self.root.get(domain, [])

    def richest(self, domain: str) -> MetadataRecord | None:
        """Return the record for ``domain`` with the most populated fields."""
        records = self.records_for(domain)
        if not records:
            return None
        return max(records, key=lambda record: record.populated_count())


# =============================================================================
# CRM accounts
# =============================================================================


class CrmOwner(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    name: str | None = Field(default=None, alias="Name")

    @field_validator("name", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> Any:
        return _text_or_none(v)


class CrmAttributes(BaseModel):
    model_config = ConfigDict(extra="allow")

    url: str | None = None

    @field_validator("url", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> Any:
        return _text_or_none(v)


class CrmAccount(BaseModel):
    """A CRM account as returned by the batch or query endpoints."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str | None = Field(default=None, alias="Id")
    name: str | None = Field(default=None, alias="Name")
    website: str | None = Field(default=None, alias="Website")
    owner: CrmOwner | None = Field(default=None, alias="Owner")
    owner_override: str | None = Field(default=None, alias="BVP_Owners__c")
    attributes: CrmAttributes | None = None
    last_activity_date: str | None = Field(default=None, alias="Last_Activity_Date__c")
    last_email_received_date: str | None = Field(
        default=None, alias="Last_Email_Received_Date__c"
    )

    @field_validator(
        "id",
        "name",
        "website",
        "owner_override",
        "last_activity_date",
        "last_email_received_date",
        mode="before",
    )
    @classmethod
    def coerce_text(cls, v: Any) -> Any:
        return _text_or_none(v)

    @field_validator("owner", "attributes", mode="before")
    @classmethod
    def drop_malformed_objects(cls, v: Any) -> Any:
        return _object_or_none(v)

    @property
    def account_id(self) -> str | None:
        """Account id, falling back to the last segment of the record URL."""
        if self.id:
            return self.id
        if self.attributes and self.attributes.url:
            return self.attributes.url.rstrip("/").rsplit("/", 1)[-1] or None
        return None

    @property
    def owner_name(self) -> str | None:
        """Owner display name; the explicit owner override wins."""
        if self.owner_override:
            return self.owner_override
        if self.owner and self.owner.name:
            return self.owner.name
        return None


class CrmAccountSections(BaseModel):
    model_config = ConfigDict(extra="allow")

    websites: dict[str, list[CrmAccount]] = {}
    names: dict[str, list[CrmAccount]] = {}

    @field_validator("websites", "names", mode="before")
    @classmethod
    def drop_malformed_entries(cls, v: Any) -> Any:
        return _keyed_entries(v)


class CrmRecord(BaseModel):
    """Slice of a CRM batch response that belongs to one domain."""

    website_accounts: list[CrmAccount] = []
    name_accounts: list[CrmAccount] = []
    company: CrmCompanyRecord | None = None

    @property
    def account(self) -> CrmAccount | None:
        """Website-matched account first, else the name-matched account."""
        if self.website_accounts:
            return self.website_accounts[0]
        if self.name_accounts:
            return self.name_accounts[0]
        return None


class CrmBatchResponse(BaseModel):
    """CRM batch endpoint response."""

    model_config = ConfigDict(extra="allow")

    salesforce: CrmAccountSections | None = None
    specter: list[CrmCompanyRecord] = []

    @model_validator(mode="before")
    @classmethod
    def default_payload(cls, v: Any) -> Any:
        return v if isinstance(v, dict) else {}

    @field_validator("salesforce", mode="before")
    @classmethod
    def default_salesforce(cls, v: Any) -> Any:
        return _object_or_none(v)

    @field_validator("specter", mode="before")
    @classmethod
    def default_specter(cls, v: Any) -> Any:
        return _dict_entries(v)

    def record_for(self, domain: str, company_name: str) -> CrmRecord | None:
        """Collect the accounts and company record for one domain.

        Returns None when the batch response holds nothing for the domain.
        """
        sections = self.salesforce or CrmAccountSections()
        company = next(
            (
                record
                for record in self.specter
                if record.first("company_name") == company_name
            ),
            None,
        )
        record = CrmRecord(
            website_accounts=sections.websites.get(domain, []),
            name_accounts=sections.names.get(company_name, []),
            company=company,
        )
        if not record.website_accounts and not record.name_accounts and not company:
            return None
        return record


# =============================================================================
# Relationship graph
# =============================================================================


class GraphInteractionDates(BaseModel):
    model_config = ConfigDict(extra="allow")

    last_email_date: str | None = None
    last_event_date: str | None = None

    @field_validator("last_email_date", "last_event_date", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> Any:
        return _text_or_none(v)


class GraphOrganization(BaseModel):
    """Organization record from the relationship-graph provider."""

    model_config = ConfigDict(extra="allow")

    id: int | str | None = None
    name: str | None = None
    domain: str | None = None
    domains: list[str] = []
    interaction_dates: GraphInteractionDates | None = None

    @field_validator("name", "domain", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> Any:
        return _text_or_none(v)

    @field_validator("interaction_dates", mode="before")
    @classmethod
    def drop_malformed_dates(cls, v: Any) -> Any:
        return _object_or_none(v)

    @field_validator("domains", mode="before")
    @classmethod
    def default_domains(cls, v: Any) -> Any:
        if not isinstance(v, list):
            return []
        return [domain for domain in v if isinstance(domain, str)]
