# perftrack/db/sql.py
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from perftrack.db.tables import Base

logger = logging.getLogger(__name__)


def build_engine(url: str, pool_size: int = 5) -> Engine:
    if url.startswith("sqlite"):
        # sqlite pools per-thread; sizing does not apply
        return create_engine(url, connect_args={"check_same_thread": False})
    return create_engine(url, pool_size=pool_size, pool_pre_ping=True)


class MetricsStore:
    """Pooled access to the relational metrics database."""

    def __init__(self, url: str, pool_size: int = 5, engine: Optional[Engine] = None):
        self.url = url
        self.engine = engine if engine is not None else build_engine(url, pool_size)
        self._sessions = sessionmaker(bind=self.engine, expire_on_commit=False)

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        session = self._sessions()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def create_all(self) -> None:
        Base.metadata.create_all(self.engine)

    def dispose(self) -> None:
        logger.info("disposing sql pool")
        self.engine.dispose()
