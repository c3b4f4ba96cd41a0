"""
Configuration for the company enrichment pipeline.

A single settings object is built once per process and passed to every
provider client, so no endpoint or credential lives in module state.
"""

import logging
from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class EnrichmentSettings(BaseSettings):
    """Enrichment pipeline settings with validation."""

    model_config = SettingsConfigDict(
        env_prefix="ENRICHMENT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ============================================================================
    # PROVIDER ENDPOINTS
    # ============================================================================

    metadata_url: str = Field(
        default="http://localhost:8000/api/v1/website",
        description="Metadata provider endpoint (POST {websites: [...]})",
    )
    crm_batch_url: str = Field(
        default="http://localhost:8000/api/v1/core/batch",
        description="CRM batch endpoint (POST {companies: [...]})",
    )
    crm_query_url: str | None = Field(
        default=None,
        description="CRM query endpoint used for the per-domain account fallback",
    )
    crm_access_token: SecretStr | None = Field(
        default=None, description="Bearer token for the CRM query endpoint"
    )
    search_index_url: str = Field(
        default="http://localhost:8983/solr/companies/select",
        description="Search-index select endpoint",
    )
    relationship_graph_url: str = Field(
        default="https://api.affinity.co/organizations",
        description="Relationship-graph organizations endpoint",
    )
    relationship_graph_api_key: SecretStr | None = Field(
        default=None, description="Relationship-graph API key (basic auth password)"
    )
    relationship_graph_page_size: int = Field(
        default=500, ge=1, le=500, description="Organizations per page"
    )
    interaction_window_start: str = Field(
        default="2001-01-01T00:00:00",
        description="Earliest last-email date accepted from the relationship graph",
    )
    interaction_window_end: str = Field(
        default="2034-01-12T23:59:59",
        description="Latest last-email date accepted from the relationship graph",
    )

    # ============================================================================
    # OUTPUT LINKS
    # ============================================================================

    crm_account_link_template: str = Field(
        default="https://crm.lightning.force.com/lightning/r/Account/{account_id}/view",
        description="Template for the CRM account link column",
    )
    crm_record_link_template: str = Field(
        default="https://app.affinity.co/companies/{organization_id}",
        description="Template for the relationship-graph record link column",
    )

    # ============================================================================
    # TIMEOUTS & RETRIES
    # ============================================================================

    metadata_timeout: float = Field(
        default=15.0, gt=0, le=300, description="Metadata call timeout in seconds"
    )
    crm_timeout: float = Field(
        default=8.0, gt=0, le=300, description="CRM call timeout in seconds"
    )
    search_index_timeout: float = Field(
        default=5.0, gt=0, le=300, description="Search-index call timeout in seconds"
    )
    relationship_graph_timeout: float = Field(
        default=10.0,
        gt=0,
        le=300,
        description="Relationship-graph call timeout in seconds",
    )
    retry_attempts: int = Field(
        default=3, ge=0, le=10, description="Retries after the first failed attempt"
    )
    retry_delay: float = Field(
        default=0.3, ge=0, description="Initial retry delay in seconds, doubles each retry"
    )

    # ============================================================================
    # BATCH SCHEDULING
    # ============================================================================

    batch_size: int = Field(default=80, description="Domains per batch")
    batch_concurrency: int = Field(
        default=3, description="Maximum batches dispatched at once"
    )
    chunk_size: int = Field(
        default=20, description="Domains enriched concurrently within a batch"
    )

    # ============================================================================
    # NOTIFICATIONS
    # ============================================================================

    alert_channel: Literal["none", "slack", "alert_queue"] = Field(
        default="none", description="Where run-level failures are reported"
    )
    slack_webhook_url: SecretStr | None = Field(
        default=None, description="Chat webhook URL for alerts"
    )
    alert_queue_url: str | None = Field(
        default=None, description="Alert queue endpoint for alerts"
    )
    alert_timeout: float = Field(
        default=10.0, gt=0, description="Alert delivery timeout in seconds"
    )
    email_service_url: str | None = Field(
        default=None, description="Outbound email service endpoint"
    )
    email_subject: str = Field(
        default="Your enriched company report is ready",
        description="Subject line of the report email",
    )
    email_timeout: float = Field(
        default=30.0, gt=0, description="Email hand-off timeout in seconds"
    )

    # ============================================================================
    # LOGGING
    # ============================================================================

    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format string",
    )

    @field_validator("batch_size", "batch_concurrency", "chunk_size")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Batch sizes and concurrency must be at least 1")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v.upper()

    @model_validator(mode="after")
    def validate_chunk_size(self) -> "EnrichmentSettings":
        """Ensure chunk_size does not exceed batch_size."""
        if self.chunk_size > self.batch_size:
            raise ValueError(
                f"chunk_size ({self.chunk_size}) must not exceed "
                f"batch_size ({self.batch_size})"
            )
        return self

    @property
    def max_in_flight_calls(self) -> int:
        """Upper bound on simultaneously in-flight per-domain remote calls."""
        return self.batch_concurrency * self.chunk_size

    def log_configuration(self) -> None:
        """Log current configuration for debugging."""
        logger.info("Enrichment Pipeline Configuration:")
        logger.info(f"  Metadata endpoint: {self.metadata_url}")
        logger.info(f"  CRM batch endpoint: {self.crm_batch_url}")
        logger.info(
            f"  CRM fallback lookup: {'Enabled' if self.crm_query_url else 'Disabled'}"
        )
        logger.info(f"  Search-index endpoint: {self.search_index_url}")
        logger.info(f"  Relationship-graph endpoint: {self.relationship_graph_url}")
        logger.info(
            f"  Batches: size={self.batch_size} concurrency={self.batch_concurrency} "
            f"chunk={self.chunk_size}"
        )
        logger.info(
            f"  Retries: {self.retry_attempts} (initial delay {self.retry_delay}s)"
        )
        logger.info(f"  Alert channel: {self.alert_channel}")


@lru_cache
def get_settings() -> EnrichmentSettings:
    """Get cached settings instance."""
    return EnrichmentSettings()
