"""Tests for EnrichmentSettings validation and environment loading."""

import pytest
from pydantic import ValidationError

from company_enrichment.config import EnrichmentSettings


class TestEnrichmentSettings:
    """Test suite for EnrichmentSettings."""

    def test_defaults(self, settings_factory):
        settings = EnrichmentSettings(_env_file=None)

        assert settings.batch_size == 80
        assert settings.batch_concurrency == 3
        assert settings.chunk_size == 20
        assert settings.retry_delay == pytest.approx(0.3)
        assert settings.alert_channel == "none"
        assert settings.max_in_flight_calls == 60

    def test_environment_override(self, settings_factory, monkeypatch):
        monkeypatch.setenv("ENRICHMENT_BATCH_SIZE", "40")
        monkeypatch.setenv("ENRICHMENT_RELATIONSHIP_GRAPH_API_KEY", "secret-key")

        settings = EnrichmentSettings(_env_file=None)

        assert settings.batch_size == 40
        assert settings.relationship_graph_api_key.get_secret_value() == "secret-key"
        assert "secret-key" not in repr(settings)

    def test_log_level_normalized(self, settings_factory):
        assert settings_factory(log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level(self, settings_factory):
        with pytest.raises(ValidationError):
            settings_factory(log_level="chatty")

    @pytest.mark.parametrize(
        "field", ["batch_size", "batch_concurrency", "chunk_size"]
    )
    def test_non_positive_sizes_rejected(self, settings_factory, field):
        with pytest.raises(ValidationError):
            settings_factory(**{field: 0})

    def test_chunk_larger_than_batch_rejected(self, settings_factory):
        with pytest.raises(ValidationError, match="chunk_size"):
            settings_factory(batch_size=5, chunk_size=10)

    def test_non_positive_timeout_rejected(self, settings_factory):
        with pytest.raises(ValidationError):
            settings_factory(metadata_timeout=0)

    def test_unknown_alert_channel_rejected(self, settings_factory):
        with pytest.raises(ValidationError):
            settings_factory(alert_channel="pager")
