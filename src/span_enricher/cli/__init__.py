"""
CLI module for span enrichment.

Provides command-line tools for enriching documents and seeding the term store.
"""

from span_enricher.cli.enrich import main as enrich_main

__all__ = ["enrich_main"]
