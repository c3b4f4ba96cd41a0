"""Configuration package for the enrichment pipeline."""

from .settings import EnrichmentSettings, get_settings

__all__ = ["EnrichmentSettings", "get_settings"]
