"""
Application configuration management.

This module handles configuration from environment variables using Pydantic Settings.
"""

from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application configuration from environment variables.

    All settings can be overridden via environment variables with the same name.
    """

    # API settings
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    # Term store (NCBITaxon terms by default)
    term_store_url: str = "sqlite:///terms.db"
    term_store_pool_size: int = 10
    term_store_echo_sql: bool = False

    # Batch orchestration
    enrichment_batch_size: int = 5
    enrichment_max_workers: int = 4
    enrichment_timeout_seconds: Optional[float] = None  # None = wait for every batch

    # Eligibility and fixed features written on enriched annotations
    eligible_provenance: str = "organism_from_ncbi"
    enrichment_major_type: str = "organism"
    enrichment_minor_type: str = "organism_from_ncbi"
    enrichment_language: str = "en"

    # Span resolution
    max_walk_back: int = 256  # Max chars to walk left looking for a covering token
    duplicate_token_policy: str = "last_wins"  # "last_wins" | "reject"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }


# Global settings instance
settings = Settings()
