"""Pipeline-side records: input rows, merged companies and output rows."""

from dataclasses import dataclass, field, fields
from typing import Any

UNKNOWN = "N/A"
"""Sentinel for a field no provider has resolved yet (distinct from "")."""

ERROR_MARKER = "ERROR"
"""Value written to every enrichment field of a domain that failed."""


@dataclass(slots=True, frozen=True)
class InputRecord:
    """One spreadsheet row: its position and the raw company URL."""

    position: int
    raw_url: str


@dataclass(slots=True, frozen=True)
class DomainFailure:
    """Recorded outcome of a domain whose enrichment raised."""

    domain: str
    error: str


@dataclass(slots=True)
class MergedCompany:
    """Resolved value of every output field for one canonical domain."""

    domain: str
    company_name: str = UNKNOWN
    website: str = UNKNOWN
    last_email_date: str = UNKNOWN
    last_meeting_date: str = UNKNOWN
    crm_account_link: str = UNKNOWN
    crm_account_owner: str = UNKNOWN
    crm_record_link: str = UNKNOWN
    year_founded: str = UNKNOWN
    linkedin_url: str = UNKNOWN
    founder_linkedin_url: str = UNKNOWN
    employee_count: str = UNKNOWN
    employee_growth_rate: str = UNKNOWN
    description: str = UNKNOWN
    country: str = UNKNOWN
    total_funding: str = UNKNOWN
    last_funding_amount: str = UNKNOWN
    last_funding_date: str = UNKNOWN
    # Inputs to derived columns, not written out directly.
    employee_count_prior: str = UNKNOWN
    organization_id: str = UNKNOWN

    def is_unknown(self, name: str) -> bool:
        return getattr(self, name) == UNKNOWN

    def fill(self, name: str, value: Any) -> bool:
        """Set ``name`` only while it is still unknown.

        Blank values are ignored so that a provider which omits a field never
        counts as having resolved it.

        Returns:
            True if the field was set.
        """
        if not self.is_unknown(name) or _is_blank(value):
            return False
        setattr(self, name, str(value))
        return True

    def overwrite(self, name: str, value: Any) -> bool:
        """Set ``name`` regardless of its current value, ignoring blanks."""
        if _is_blank(value):
            return False
        setattr(self, name, str(value))
        return True

    def unresolved_fields(self) -> list[str]:
        return [f.name for f in fields(self) if getattr(self, f.name) == UNKNOWN]


@dataclass(slots=True)
class OutputRow:
    """MergedCompany projected onto the fixed output schema."""

    row_id: str
    position: int
    original_url: str
    date_added: str
    values: dict[str, str] = field(default_factory=dict)


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())
