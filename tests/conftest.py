"""
Global pytest fixtures and configuration for test suite.

This module provides reusable fixtures for:
- Async HTTP client
- Test settings
- In-memory and SQLite term stores
- Sample token/annotation documents
"""

from typing import AsyncGenerator, Generator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from span_enricher.api.app import app
from span_enricher.config import Settings
from span_enricher.term_store import SqlTermStore, load_terms
from tests.fixtures.term_store import ORGANISM_TEXT, FakeTermStore, tokenize


TAXA = {
    "homo sapiens": {"taxonId": "9606", "rank": "species"},
    "mus musculus": {"taxonId": "10090", "rank": "species"},
    "canis lupus familiaris": {"taxonId": "9615", "rank": "subspecies"},
    "canine": {"taxonId": "9615"},
}


@pytest.fixture
def test_settings() -> Settings:
    """
    Settings with safe defaults for tests.

    Returns:
        Settings instance with test configuration
    """
    return Settings(
        log_level="INFO",
        log_json=False,  # Easier to read in tests
        term_store_url="sqlite:///:memory:",
        enrichment_batch_size=5,
        enrichment_max_workers=4,
        enrichment_timeout_seconds=None,
        eligible_provenance="organism_from_ncbi",
        max_walk_back=256,
        duplicate_token_policy="last_wins",
    )


@pytest.fixture
def fake_store() -> FakeTermStore:
    """In-memory term store seeded with a few NCBITaxon organisms."""
    return FakeTermStore(records=TAXA)


@pytest.fixture
def organism_tokens():
    """Tokens of ORGANISM_TEXT."""
    return tokenize(ORGANISM_TEXT)


@pytest.fixture
def sqlite_store(tmp_path) -> Generator[SqlTermStore, None, None]:
    """
    SQLite file term store seeded with TAXA.

    Yields:
        Connected SqlTermStore; disconnected after the test
    """
    store = SqlTermStore(f"sqlite:///{tmp_path / 'terms.db'}", pool_size=5)
    store.connect()
    load_terms(
        store,
        [{"label": label, "features": features} for label, features in TAXA.items()],
        source="ncbitaxon",
    )
    yield store
    store.disconnect()


@pytest_asyncio.fixture
async def async_client() -> AsyncGenerator[AsyncClient, None]:
    """
    Create async HTTP client for testing FastAPI endpoints.

    Yields:
        AsyncClient instance
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
