# reliefledger/database.py
"""
SQLAlchemy database connection and session management.

This module provides:
- Engine construction for a configured URL (MS SQL Server, PostgreSQL, SQLite, ...)
- Session factory and a transactional session scope
- Connection utilities

Nothing here is created at import time; the ReliefContext owns the engine
and disposes it on close.

Usage:
     engine = create_db_engine("sqlite:///reliefledger.db")
     init_db(engine)
     factory = create_session_factory(engine)

     with session_scope(factory) as db:
          db.query(PaymentEvent).count()
"""
import logging
from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool

logger = logging.getLogger(__name__)


def create_db_engine(url: str, echo: bool = False) -> Engine:
     """
     Create an engine for the event store.

     In-memory SQLite gets a single shared connection so every session sees
     the same database; file SQLite uses the dialect defaults; servers get a
     bounded QueuePool.
     """
     parsed = make_url(url)
     if parsed.get_backend_name() == "sqlite":
          if parsed.database in (None, "", ":memory:"):
               return create_engine(
                    url,
                    poolclass=StaticPool,
                    connect_args={"check_same_thread": False},
                    echo=echo,
               )
          return create_engine(url, connect_args={"check_same_thread": False}, echo=echo)

     return create_engine(
          url,
          poolclass=QueuePool,
          pool_size=5,
          max_overflow=10,
          pool_timeout=30,
          pool_recycle=1800,  # Recycle connections after 30 minutes
          pool_pre_ping=True,
          echo=echo,
     )


def create_session_factory(engine: Engine) -> sessionmaker:
     return sessionmaker(
          bind=engine,
          autocommit=False,
          autoflush=False,
          expire_on_commit=False,
     )


@contextmanager
def session_scope(factory: sessionmaker) -> Generator[Session, None, None]:
     """
     Transactional scope around a series of operations.

     Usage:
          with session_scope(factory) as db:
               db.add(row)

     Yields:
          Session: committed on success, rolled back and re-raised on error
     """
     session = factory()
     try:
          yield session
          session.commit()
     except Exception:
          session.rollback()
          raise
     finally:
          session.close()


def init_db(engine: Engine) -> None:
     """
     Initialize database tables.

     Creates all tables defined in the models if they don't exist.
     For production, use Alembic migrations instead.
     """
     from .models import Base
     Base.metadata.create_all(bind=engine)


def check_connection(engine: Engine) -> bool:
     """
     Test database connectivity.

     Returns:
          bool: True if connection successful, False otherwise
     """
     try:
          with engine.connect() as conn:
               conn.execute(text("SELECT 1"))
          return True
     except Exception:
          logger.exception("Database connection failed")
          return False
