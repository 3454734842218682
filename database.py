"""
SQLAlchemy database connection and session management.

This module provides:
- Database engine configuration (MS SQL Server by default, any
  SQLAlchemy URL through DATABASE_URL)
- Session factory for dependency injection
- Connection utilities

Usage:
     from database import get_session, engine

     # In FastAPI routes:
     @router.get("/leases/{lease_id}")
     def get_lease(lease_id: str, db: Session = Depends(get_session)):
          return lease_service.get_lease(db, lease_id)
"""
import logging
from contextlib import contextmanager
from typing import Callable, Generator

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from config import get_settings

logger = logging.getLogger(__name__)


def build_engine(url: str, echo: bool = False) -> Engine:
     """
     Create the SQLAlchemy engine for a connection URL.

     Server databases get a bounded connection pool; SQLite (local
     development, tests) keeps SQLAlchemy's defaults.
     """
     if url.startswith("sqlite"):
          sqlite_engine = create_engine(url, echo=echo, connect_args={"check_same_thread": False})
          enable_sqlite_savepoints(sqlite_engine)
          return sqlite_engine

     return create_engine(
          url,
          pool_size=5,
          max_overflow=10,
          pool_timeout=30,
          pool_recycle=1800,  # Recycle connections after 30 minutes
          pool_pre_ping=True,
          echo=echo,
     )


def enable_sqlite_savepoints(sqlite_engine: Engine) -> None:
     """
     Let SQLAlchemy emit BEGIN itself so SAVEPOINT (Session.begin_nested)
     works with pysqlite.
     """

     @event.listens_for(sqlite_engine, "connect")
     def _disable_pysqlite_transactions(dbapi_connection, connection_record):
          dbapi_connection.isolation_level = None

     @event.listens_for(sqlite_engine, "begin")
     def _emit_begin(conn):
          conn.exec_driver_sql("BEGIN")


_settings = get_settings()

# Create SQLAlchemy engine
engine = build_engine(_settings.database.connection_url, echo=_settings.database.echo)

# Session factory
SessionLocal = sessionmaker(
     bind=engine,
     autocommit=False,
     autoflush=False,
     expire_on_commit=False,
)


def get_session() -> Generator[Session, None, None]:
     """
     FastAPI dependency that provides a database session.

     The whole request is one unit of work: commit on success,
     rollback when the handler raises.

     Yields:
          Session: SQLAlchemy database session
     """
     session = SessionLocal()
     try:
          yield session
          session.commit()
     except Exception:
          session.rollback()
          raise
     finally:
          session.close()


@contextmanager
def get_session_context(session_factory: Callable[[], Session] = None) -> Generator[Session, None, None]:
     """
     Context manager for database sessions (scheduled jobs, scripts).

     Usage:
          with get_session_context() as db:
               leases = db.query(LeaseAgreement).all()
     """
     session = (session_factory or SessionLocal)()
     try:
          yield session
          session.commit()
     except Exception:
          session.rollback()
          raise
     finally:
          session.close()


def init_db(bind: Engine = None) -> None:
     """
     Create all tables defined in the models if they don't exist.
     For production, use Alembic migrations instead.
     """
     from models import Base
     Base.metadata.create_all(bind=bind or engine)


def check_connection() -> bool:
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
