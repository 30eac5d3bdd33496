"""HTTP API for span enrichment."""
