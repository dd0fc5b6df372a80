"""Database engine management and the per-statement execer."""

import logging
import time
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.sql.expression import Executable

from sqllease.config import settings
from sqllease.observability.metrics import metrics

logger = logging.getLogger("sqllease.db")

_engine: Optional[AsyncEngine] = None


def _attach_query_metrics(target_engine: AsyncEngine) -> None:
    """Attach SQLAlchemy event listeners for query metrics."""
    sync_engine = target_engine.sync_engine
    if getattr(sync_engine, "_sqllease_metrics_attached", False):
        return

    @event.listens_for(sync_engine, "before_cursor_execute")
    def before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        conn.info["query_start_time"] = time.perf_counter()

    @event.listens_for(sync_engine, "after_cursor_execute")
    def after_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        start_time = conn.info.pop("query_start_time", None)
        if start_time is None:
            return
        metrics.inc_counter("db.query.count")
        metrics.observe("db.query.duration_ms", (time.perf_counter() - start_time) * 1000.0)

    sync_engine._sqllease_metrics_attached = True


def _use_immediate_transactions(target_engine: AsyncEngine) -> None:
    """Make SQLite take its write lock at BEGIN.

    With deferred transactions a writer that loses the race for the lock
    fails at once with "database is locked" instead of waiting out the
    busy timeout.
    """
    sync_engine = target_engine.sync_engine

    @event.listens_for(sync_engine, "connect")
    def do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(sync_engine, "begin")
    def do_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def create_engine(database_url: Optional[str] = None, **kwargs: Any) -> AsyncEngine:
    """Create an async engine with query metrics attached.

    Pool sizing from settings applies to server databases only; SQLite
    keeps SQLAlchemy's default pool.
    """
    url = database_url or settings.database_url
    options: dict[str, Any] = {"echo": settings.debug, "pool_pre_ping": True}
    if not url.startswith("sqlite"):
        options.update(pool_size=settings.pool_size, max_overflow=settings.max_overflow)
    options.update(kwargs)

    engine = create_async_engine(url, **options)
    if engine.dialect.name == "sqlite":
        _use_immediate_transactions(engine)
    _attach_query_metrics(engine)
    logger.debug(f"Created engine for {engine.url.render_as_string(hide_password=True)}")
    return engine


def get_engine() -> AsyncEngine:
    """Return the process-wide engine, creating it from settings on first use."""
    global _engine
    if _engine is None:
        _engine = create_engine()
    return _engine


async def close_db() -> None:
    """Dispose of the process-wide engine, if one was created."""
    global _engine
    if _engine is not None:
        await _engine.dispose()
        _engine = None


@dataclass(frozen=True)
class ExecResult:
    """Row count captured before the connection is returned to the pool."""

    rowcount: int


class EngineExecer:
    """Execer running each statement in its own committed transaction."""

    def __init__(self, engine: AsyncEngine):
        self.engine = engine

    async def execute(
        self,
        statement: Executable,
        parameters: Optional[Mapping[str, Any]] = None,
    ) -> ExecResult:
        async with self.engine.begin() as conn:
            result = await conn.execute(statement, parameters)
            return ExecResult(rowcount=result.rowcount)
