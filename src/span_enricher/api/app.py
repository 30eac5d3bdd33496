"""
FastAPI application for the span enrichment service.
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI
import structlog

from ..version import API_VERSION
from ..config import settings
from ..logging_config import setup_logging
from .routes import enrich, health, version
from .middleware import setup_error_handling_middleware, setup_logging_middleware

# Setup logging on module import
setup_logging()
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log startup and shutdown with the active enrichment settings."""
    logger.info(
        "span_enricher_api_starting",
        version=API_VERSION,
        log_level=settings.log_level,
        batch_size=settings.enrichment_batch_size,
        max_workers=settings.enrichment_max_workers,
        eligible_provenance=settings.eligible_provenance,
    )
    yield
    logger.info("span_enricher_api_stopping")


def create_app() -> FastAPI:
    """
    Create and configure FastAPI application.

    Returns:
        Configured FastAPI app instance
    """
    app = FastAPI(
        title="Span Enricher",
        description="Reconstructs entity span labels from tokens and attaches term-store attributes",
        version=API_VERSION,
        lifespan=lifespan,
    )

    # Custom middleware
    setup_error_handling_middleware(app)
    setup_logging_middleware(app)

    app.include_router(health.router, tags=["Health"])
    app.include_router(version.router, prefix="/api/v1", tags=["Version"])
    app.include_router(enrich.router)

    return app


# Create app instance
app = create_app()


def main() -> None:
    """
    Entry point for running the API server directly.

    For development use. In production, use uvicorn directly.
    """
    import uvicorn

    uvicorn.run(
        "span_enricher.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
