"""sqllease database layer."""

from sqllease.db.base import EngineExecer, close_db, create_engine, get_engine
from sqllease.db.types import DB, Execer, Queryer, RowCountResult, Transactor

__all__ = [
    "DB",
    "EngineExecer",
    "Execer",
    "Queryer",
    "RowCountResult",
    "Transactor",
    "close_db",
    "create_engine",
    "get_engine",
]
