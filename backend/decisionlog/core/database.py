"""
Database configuration, session management and transaction scope
"""
import logging
import time
from contextlib import contextmanager
from typing import Generator, Iterator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from decisionlog.core.config import get_settings
from decisionlog.core.logging_config import LoggingConfig
from decisionlog.core.metrics import db_queries_total, db_query_duration_seconds

# Lazy initialization - don't create engine at module level
_engine: Optional[Engine] = None
_SessionLocal: Optional[sessionmaker] = None

# Base class for models (can be created immediately)
Base = declarative_base()


def _setup_db_events(engine: Engine):
    """Setup SQLAlchemy event listeners for query metrics and SQLite pragmas"""

    @event.listens_for(engine, "before_cursor_execute")
    def receive_before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        conn.info.setdefault('query_start_time', []).append(time.time())

    @event.listens_for(engine, "after_cursor_execute")
    def receive_after_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        if not conn.info.get('query_start_time'):
            return
        duration = time.time() - conn.info['query_start_time'].pop()
        words = statement.strip().split(None, 1)
        operation = words[0].lower() if words else "unknown"
        if operation not in ('select', 'insert', 'update', 'delete'):
            operation = "other"
        db_queries_total.labels(operation=operation).inc()
        db_query_duration_seconds.labels(operation=operation).observe(duration)

    if engine.dialect.name == "sqlite":
        @event.listens_for(engine, "connect")
        def enable_sqlite_foreign_keys(dbapi_conn, connection_record):
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()


def init_engine(database_url: Optional[str] = None) -> Engine:
    """Create (or replace) the engine and session factory"""
    global _engine, _SessionLocal
    settings = get_settings()
    LoggingConfig.configure()

    url = database_url or settings.database_url
    if url.startswith("sqlite"):
        engine_kwargs = {"connect_args": {"check_same_thread": False, "timeout": 5}}
    else:
        engine_kwargs = {
            "pool_size": settings.database_pool_size,
            "max_overflow": settings.database_max_overflow,
            "pool_pre_ping": True,
        }
        if url.startswith("postgresql"):
            engine_kwargs["connect_args"] = {
                "connect_timeout": 5,
                "options": "-c statement_timeout=5000",
            }

    if _engine is not None:
        _engine.dispose()

    _engine = create_engine(url, echo=settings.log_sqlalchemy, **engine_kwargs)

    sqlalchemy_logger = logging.getLogger("sqlalchemy.engine")
    if not settings.log_sqlalchemy:
        sqlalchemy_logger.setLevel(logging.WARNING)
        sqlalchemy_logger.propagate = False

    _setup_db_events(_engine)
    _SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=_engine)
    return _engine


def get_engine() -> Engine:
    """Get or create database engine (lazy initialization)"""
    if _engine is None:
        init_engine()
    return _engine


def get_session_local() -> sessionmaker:
    """Get or create session factory (lazy initialization)"""
    if _SessionLocal is None:
        init_engine()
    return _SessionLocal


def init_db():
    """Create all tables registered on Base"""
    import decisionlog.models  # noqa: F401
    Base.metadata.create_all(bind=get_engine())


def get_db() -> Generator[Session, None, None]:
    """
    Dependency for getting database session
    """
    SessionLocal = get_session_local()
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session) -> Iterator[Session]:
    """
    Unit of work: commit when the block finishes, roll back on any exception.

    Every multi-entity mutation goes through this scope so that partial
    state is never committed.
    """
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
