"""Company enrichment pipeline.

Turns a spreadsheet of company URLs into an enriched spreadsheet by fanning
out to metadata, CRM, search-index and relationship-graph providers and
merging their answers under a fixed precedence.
"""

from .config import EnrichmentSettings, get_settings
from .pipeline import EnrichmentPipeline

__all__ = ["EnrichmentPipeline", "EnrichmentSettings", "get_settings"]
