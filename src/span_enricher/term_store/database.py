"""
SQL-backed term store.

Connection pooling and a thread-scoped session factory let the enrichment
workers share one store instance.
"""

from contextlib import contextmanager
from typing import Any, Dict, Generator, Optional

import structlog
from sqlalchemy import create_engine, inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, scoped_session, sessionmaker

from ..errors import TermStoreConnectionError, TermStoreError
from .base import BaseTermStore
from .models import Base, TermRecord

logger = structlog.get_logger(__name__)


class SqlTermStore(BaseTermStore):
    """
    Term store over the ``terms`` table of any SQLAlchemy database.

    Examples:
        >>> store = SqlTermStore("sqlite:///terms.db")
        >>> with store:
        ...     store.lookup("canine")
        {'taxonId': '9615'}
    """

    def __init__(
        self,
        url: Optional[str] = None,
        pool_size: Optional[int] = None,
        echo: Optional[bool] = None,
    ):
        from ..config import settings

        self.url = url or settings.term_store_url
        self.pool_size = pool_size if pool_size is not None else settings.term_store_pool_size
        self.echo = settings.term_store_echo_sql if echo is None else echo

        self._engine: Engine | None = None
        self._sessions: scoped_session | None = None

    @property
    def connected(self) -> bool:
        return self._engine is not None

    def connect(self) -> None:
        if self._engine is not None:
            return

        connect_args = {}
        if self.url.startswith("sqlite"):
            # Worker threads check connections out of a shared pool
            connect_args["check_same_thread"] = False

        engine = create_engine(
            self.url,
            pool_size=self.pool_size,
            echo=self.echo,
            pool_pre_ping=True,
            connect_args=connect_args,
        )

        try:
            with engine.connect() as connection:
                connection.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            engine.dispose()
            logger.error("term_store_connect_failed", url=self._safe_url(), error=str(e))
            raise TermStoreConnectionError(f"Cannot reach term store: {e}") from e

        self._engine = engine
        self._sessions = scoped_session(sessionmaker(bind=engine))
        logger.info("term_store_connected", url=self._safe_url(), pool_size=self.pool_size)

    def lookup(self, label: str) -> Optional[Dict[str, Any]]:
        sessions = self._require_sessions()
        try:
            record = sessions().get(TermRecord, label)
            features = dict(record.features) if record is not None else None
        except SQLAlchemyError as e:
            logger.error("term_lookup_failed", label=label, error=str(e))
            raise TermStoreError(f"Lookup failed for {label!r}: {e}") from e
        finally:
            sessions.remove()

        logger.debug("term_lookup", label=label, found=features is not None)
        return features

    def disconnect(self) -> None:
        if self._engine is None:
            return

        self._sessions.remove()
        self._engine.dispose()
        self._engine = None
        self._sessions = None
        logger.info("term_store_disconnected", url=self._safe_url())

    def create_tables(self) -> None:
        """Create the ``terms`` table if it does not exist."""
        Base.metadata.create_all(self._require_engine())
        logger.info("term_store_tables_created")

    def has_terms_table(self) -> bool:
        return inspect(self._require_engine()).has_table(TermRecord.__tablename__)

    @contextmanager
    def session_scope(self) -> Generator[Session, None, None]:
        """
        Context manager for write sessions with automatic commit/rollback.

        Yields:
            SQLAlchemy Session instance

        Raises:
            TermStoreError: Any database exception (after rollback)
        """
        session = self._require_sessions()()

        try:
            yield session
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            logger.error("term_store_session_rollback", error=str(e), error_type=type(e).__name__)
            raise TermStoreError(str(e)) from e
        finally:
            self._sessions.remove()

    def _require_engine(self) -> Engine:
        if self._engine is None:
            raise TermStoreError("Term store is not connected")
        return self._engine

    def _require_sessions(self) -> scoped_session:
        if self._sessions is None:
            raise TermStoreError("Term store is not connected")
        return self._sessions

    def _safe_url(self) -> str:
        if self._engine is not None:
            return self._engine.url.render_as_string(hide_password=True)
        return self.url.split("@")[-1]
