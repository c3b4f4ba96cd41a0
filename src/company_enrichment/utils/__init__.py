"""Utility functions for the enrichment pipeline.

This package provides:
- Company URL normalization into canonical domains
- Retry with exponential backoff for provider calls
- Parsing helpers for loosely-typed provider values
"""

from .retry import default_is_transient_error, retry_with_backoff
from .text_utils import extract_linkedin_url, parse_number
from .url_normalizer import normalize, trim_url

__all__ = [
    "default_is_transient_error",
    "extract_linkedin_url",
    "normalize",
    "parse_number",
    "retry_with_backoff",
    "trim_url",
]
