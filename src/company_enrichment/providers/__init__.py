"""Provider clients for the enrichment pipeline."""

from .base import ProviderClient
from .crm import CrmClient
from .metadata import MetadataClient
from .relationship_graph import RelationshipGraphClient
from .search_index import SearchIndexClient

__all__ = [
    "CrmClient",
    "MetadataClient",
    "ProviderClient",
    "RelationshipGraphClient",
    "SearchIndexClient",
]
