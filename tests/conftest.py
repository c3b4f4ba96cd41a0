"""
Root test configuration for all tests.

Provides settings that never read the developer's environment or .env file.
"""

import os
from collections.abc import Callable

import pytest

from company_enrichment.config import EnrichmentSettings


@pytest.fixture
def settings_factory(
    monkeypatch: pytest.MonkeyPatch,
) -> Callable[..., EnrichmentSettings]:
    """
    Return a builder for EnrichmentSettings isolated from ENRICHMENT_* variables and .env files.

    Retries are kept but without delay so failing-provider tests stay fast.
    """
    for name in list(os.environ):
        if name.upper().startswith("ENRICHMENT_"):
            monkeypatch.delenv(name)

    def make_settings(**overrides) -> EnrichmentSettings:
        values = {
            "crm_query_url": "http://crm.test/query",
            "crm_access_token": "crm-token",
            "relationship_graph_api_key": "graph-key",
            "retry_attempts": 2,
            "retry_delay": 0.0,
            "batch_size": 4,
            "batch_concurrency": 2,
            "chunk_size": 2,
        }
        values.update(overrides)
        return EnrichmentSettings(_env_file=None, **values)

    return make_settings


@pytest.fixture
def settings(settings_factory: Callable[..., EnrichmentSettings]) -> EnrichmentSettings:
    """Isolated settings with the test defaults."""
    return settings_factory()
