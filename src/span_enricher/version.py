"""
Version constants for the span enrichment service.
"""

from typing import Dict

# API Version
API_VERSION = "1.0.0"

# Component versions (update these when implementations change)
TOKEN_INDEX_VERSION = "token-index-1.0.0"
SPAN_RESOLVER_VERSION = "span-resolver-1.1.0"  # trim applied once to the stitched label
ENRICHER_VERSION = "enricher-1.0.0"
TERM_STORE_SCHEMA_VERSION = "terms-v1"


def get_component_versions() -> Dict[str, str]:
    """Component versions reported by the version endpoint and the CLI output."""
    return {
        "token_index": TOKEN_INDEX_VERSION,
        "span_resolver": SPAN_RESOLVER_VERSION,
        "enricher": ENRICHER_VERSION,
        "term_store_schema": TERM_STORE_SCHEMA_VERSION,
    }
