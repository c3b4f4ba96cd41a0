"""Data models for the enrichment pipeline."""

from .company import (
    ERROR_MARKER,
    UNKNOWN,
    DomainFailure,
    InputRecord,
    MergedCompany,
    OutputRow,
)
from .provider_records import (
    CrmAccount,
    CrmBatchResponse,
    CrmCompanyRecord,
    CrmRecord,
    GraphOrganization,
    MetadataRecord,
    MetadataResponse,
    ProviderKind,
    SearchIndexDocument,
)

__all__ = [
    "ERROR_MARKER",
    "UNKNOWN",
    "CrmAccount",
    "CrmBatchResponse",
    "CrmCompanyRecord",
    "CrmRecord",
    "DomainFailure",
    "GraphOrganization",
    "InputRecord",
    "MergedCompany",
    "MetadataRecord",
    "MetadataResponse",
    "OutputRow",
    "ProviderKind",
    "SearchIndexDocument",
]
