"""
Pytest fixtures for sqllease tests.

Integration fixtures use SQLLEASE_TEST_DATABASE_URL when it is set and a
temporary SQLite database otherwise.
"""

import os
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import pytest
import sqlalchemy as sa

os.environ.setdefault("SQLLEASE_ENV", "development")

from sqllease.db.base import EngineExecer, create_engine
from sqllease.engine import Lessor
from sqllease.observability.metrics import metrics
from sqllease.utils.time import to_utc

T0 = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


def _ensure_test_database_url(database_url: str) -> None:
    if "test" not in database_url:
        raise RuntimeError(
            "Refusing to run sqllease tests against a non-test database. "
            "Set SQLLEASE_TEST_DATABASE_URL to a dedicated test database."
        )


def lease_table(
    metadata: sa.MetaData,
    table: str = "leases",
    name: str = "name",
    exp: str = "exp",
    key: str = "key",
) -> sa.Table:
    """The schema a Lessor expects; provisioning is the caller's job."""
    return sa.Table(
        table,
        metadata,
        sa.Column(name, sa.String(255), primary_key=True),
        sa.Column(exp, sa.DateTime(timezone=True), nullable=False, index=True),
        sa.Column(key, sa.String(32), nullable=False),
    )


class FakeClock:
    """Manually advanced clock for Lessor.now_provider."""

    def __init__(self, start: datetime = T0):
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, seconds: float) -> datetime:
        self.current += timedelta(seconds=seconds)
        return self.current

    def set(self, value: datetime) -> None:
        self.current = value


class FakeResult:
    def __init__(self, rowcount: int):
        self.rowcount = rowcount


class RecordingExecer:
    """Execer double that records statements instead of running them.

    ``outcomes`` is consumed one entry per call: an int is returned as the
    row count, an exception is raised. Calls beyond the list affect one row.
    """

    def __init__(self, *outcomes: Any):
        self.outcomes = list(outcomes)
        self.statements: list[Any] = []

    async def execute(self, statement, parameters: Optional[dict] = None):
        self.statements.append(statement)
        outcome = self.outcomes.pop(0) if self.outcomes else 1
        if isinstance(outcome, BaseException):
            raise outcome
        return FakeResult(outcome)

    def sql(self, index: int) -> str:
        return str(self.statements[index])

    def params(self, index: int) -> dict:
        return self.statements[index].compile().params


async def fetch_rows(engine, table: sa.Table) -> dict[str, tuple[datetime, str]]:
    """Map of name -> (exp, key) for every row in the lease table."""
    name, exp, key = table.c
    async with engine.connect() as conn:
        result = await conn.execute(sa.select(name, exp, key))
        return {row[0]: (to_utc(row[1]), row[2]) for row in result}


@pytest.fixture(autouse=True)
def reset_metrics():
    metrics.reset()
    yield


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def table():
    return lease_table(sa.MetaData())


@pytest.fixture
async def engine(tmp_path, table):
    """Engine over a freshly created lease table."""
    database_url = os.getenv("SQLLEASE_TEST_DATABASE_URL")
    if database_url:
        _ensure_test_database_url(database_url)
    else:
        database_url = f"sqlite+aiosqlite:///{tmp_path / 'sqllease_test.db'}"

    engine = create_engine(database_url)
    async with engine.begin() as conn:
        await conn.run_sync(table.metadata.drop_all)
        await conn.run_sync(table.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(table.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def lessor(engine, clock):
    return Lessor(EngineExecer(engine), now_provider=clock)
