"""
Database configuration and session management
"""
import time
from typing import Generator, Optional

from sqlalchemy import JSON, create_engine, event
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from bloom.core.config import get_settings
from bloom.core.logging_config import LoggingConfig
from bloom.core.metrics import db_queries_total, db_query_duration_seconds

# Lazy initialization - don't create engine at module level
_engine: Optional[Engine] = None
_SessionLocal: Optional[sessionmaker] = None

Base = declarative_base()

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")


def _setup_db_metrics(engine: Engine):
    """Record query counts and durations per statement type"""

    @event.listens_for(engine, "before_cursor_execute")
    def receive_before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        conn.info.setdefault("query_start_time", []).append(time.time())

    @event.listens_for(engine, "after_cursor_execute")
    def receive_after_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        if not conn.info.get("query_start_time"):
            return
        duration = time.time() - conn.info["query_start_time"].pop()
        words = statement.strip().split(None, 1)
        operation = words[0].lower() if words else "unknown"
        db_queries_total.labels(operation=operation).inc()
        db_query_duration_seconds.labels(operation=operation).observe(duration)


def build_engine(url: str, **kwargs) -> Engine:
    """Create an engine with pool settings suited to the backend in use"""
    settings = get_settings()
    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
    else:
        kwargs.setdefault("pool_size", settings.database_pool_size)
        kwargs.setdefault("max_overflow", settings.database_max_overflow)
        kwargs.setdefault("pool_pre_ping", True)
        kwargs.setdefault("connect_args", {"connect_timeout": 5})

    engine = create_engine(url, echo=settings.log_sqlalchemy, **kwargs)
    _setup_db_metrics(engine)
    return engine


def get_engine() -> Engine:
    """Get or create database engine (lazy initialization)"""
    global _engine
    if _engine is None:
        LoggingConfig.configure()
        _engine = build_engine(get_settings().database_url)
    return _engine


def get_session_local() -> sessionmaker:
    """Get or create session factory (lazy initialization)"""
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=get_engine())
    return _SessionLocal


def configure_engine(engine: Engine):
    """Swap the process-wide engine, used by tests and scripts"""
    global _engine, _SessionLocal
    _engine = engine
    _SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


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
