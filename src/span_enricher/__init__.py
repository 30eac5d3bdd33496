"""Span enrichment: stitch entity spans from tokens and attach term attributes."""

from .version import API_VERSION

__version__ = API_VERSION
