"""Lessor - factory for leases on one lease table.

A Lessor binds a table layout to an :class:`~sqllease.db.types.Execer`.
The table must be provisioned by the caller:

========  ==========================================================
column    requirement
========  ==========================================================
name      string type, uniquely indexed (a suitable primary key)
exp       timezone-aware timestamp; a non-unique index speeds sweeps
key       string of at least 32 characters
========  ==========================================================

Mutual exclusion comes entirely from the unique index on ``name``: the
Lessor never locks, retries, or wraps its statements in a transaction.
"""

import logging
import secrets
from datetime import datetime
from typing import Callable, Optional

import sqlalchemy as sa
from sqlalchemy import Delete, Insert, Update

from sqllease.config import Settings, settings as default_settings
from sqllease.db.types import Execer
from sqllease.engine.errors import KeyGenerationError, LeaseStoreError
from sqllease.engine.lease import Lease
from sqllease.models.lease import LeaseRecord
from sqllease.observability.metrics import metrics
from sqllease.utils.time import to_utc, utc_now

logger = logging.getLogger("sqllease.lessor")

DEFAULT_TABLE = "leases"
DEFAULT_NAME = "name"
DEFAULT_EXP = "exp"
DEFAULT_KEY = "key"

KEY_BYTES = 16


class Lessor:
    """Provider of leases backed by one table.

    Identifier arguments left as ``None`` (or empty) fall back to the
    defaults when statements are built. The instance is read-only after
    construction and may be shared by any number of leases and tasks.
    """

    __slots__ = ("_db", "_table", "_schema", "_name", "_exp", "_key", "_now")

    def __init__(
        self,
        db: Execer,
        *,
        table: Optional[str] = None,
        schema: Optional[str] = None,
        name: Optional[str] = None,
        exp: Optional[str] = None,
        key: Optional[str] = None,
        now_provider: Optional[Callable[[], datetime]] = None,
    ):
        self._db = db
        self._table = table
        self._schema = schema
        self._name = name
        self._exp = exp
        self._key = key
        self._now = now_provider or utc_now

    @classmethod
    def from_settings(cls, db: Execer, settings: Optional[Settings] = None) -> "Lessor":
        """Build a Lessor from the ``SQLLEASE_LEASE_*`` settings."""
        settings = settings or default_settings
        return cls(
            db,
            table=settings.lease_table,
            schema=settings.lease_schema,
            name=settings.lease_name_column,
            exp=settings.lease_exp_column,
            key=settings.lease_key_column,
        )

    @property
    def db(self) -> Execer:
        return self._db

    @property
    def table_name(self) -> str:
        return self._table or DEFAULT_TABLE

    @property
    def schema(self) -> Optional[str]:
        return self._schema or None

    @property
    def name_column(self) -> str:
        return self._name or DEFAULT_NAME

    @property
    def exp_column(self) -> str:
        return self._exp or DEFAULT_EXP

    @property
    def key_column(self) -> str:
        return self._key or DEFAULT_KEY

    def now(self) -> datetime:
        """Current time as passed to the store in expiry comparisons."""
        return to_utc(self._now())

    def __repr__(self) -> str:
        qualified = f"{self.schema}.{self.table_name}" if self.schema else self.table_name
        return (
            f"Lessor(table={qualified!r}, name={self.name_column!r}, "
            f"exp={self.exp_column!r}, key={self.key_column!r})"
        )

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def _table_clause(self) -> sa.TableClause:
        return sa.table(
            self.table_name,
            sa.column(self.name_column, sa.String),
            sa.column(self.exp_column, sa.DateTime(timezone=True)),
            sa.column(self.key_column, sa.String),
            schema=self.schema,
        )

    def sweep_statement(self, now: datetime) -> Delete:
        t = self._table_clause()
        return sa.delete(t).where(t.c[self.exp_column] < now)

    def insert_statement(self, name: str, exp: datetime, key: str) -> Insert:
        t = self._table_clause()
        return sa.insert(t).values(
            {
                t.c[self.name_column]: name,
                t.c[self.exp_column]: exp,
                t.c[self.key_column]: key,
            }
        )

    def renew_statement(self, record: LeaseRecord, exp: datetime, now: datetime) -> Update:
        t = self._table_clause()
        return (
            sa.update(t)
            .where(
                t.c[self.name_column] == record.name,
                t.c[self.key_column] == record.key,
                t.c[self.exp_column] > now,
            )
            .values({t.c[self.exp_column]: exp})
        )

    def release_statement(self, record: LeaseRecord) -> Delete:
        t = self._table_clause()
        return sa.delete(t).where(
            t.c[self.name_column] == record.name,
            t.c[self.key_column] == record.key,
        )

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def sweep(self) -> int:
        """Delete every expired row in the table, for all names.

        Returns the number of rows deleted, or 0 if the driver cannot say.
        """
        try:
            result = await self._db.execute(self.sweep_statement(self.now()))
        except Exception as e:
            raise LeaseStoreError("deleting stale leases", e) from e

        deleted = result.rowcount if result.rowcount and result.rowcount > 0 else 0
        if deleted:
            metrics.inc_counter("lease.sweep.deleted", deleted)
            logger.info(f"Swept {deleted} stale leases from {self.table_name}")
        return deleted

    async def acquire(self, name: str, exp: datetime) -> Lease:
        """Acquire the lease called ``name``, expiring at ``exp``.

        Does not block: if the name is held by an unexpired lease, the
        insert violates the unique index and :class:`LeaseStoreError` is
        raised. Stale rows of every name are swept first, even when the
        insert then fails. ``exp`` is not checked against the clock.
        """
        if not name:
            raise ValueError("lease name must not be empty")
        exp = to_utc(exp)

        try:
            await self.sweep()
            key = self._new_key()
            try:
                await self._db.execute(self.insert_statement(name, exp, key))
            except Exception as e:
                raise LeaseStoreError("inserting into database", e) from e
        except (LeaseStoreError, KeyGenerationError) as e:
            metrics.inc_counter("lease.acquire.failed")
            logger.debug(f"Could not acquire lease {name!r}: {e}")
            raise

        metrics.inc_counter("lease.acquire.count")
        logger.debug(f"Acquired lease {name!r} until {exp.isoformat()}")
        return Lease(name=name, exp=exp, key=key, lessor=self)

    def attach(self, record: LeaseRecord) -> Lease:
        """Rebind a lease record received from another process to this Lessor."""
        return Lease(name=record.name, exp=record.exp, key=record.key, lessor=self)

    @staticmethod
    def _new_key() -> str:
        try:
            return secrets.token_hex(KEY_BYTES)
        except (OSError, NotImplementedError) as e:
            raise KeyGenerationError(e) from e


Lease.model_rebuild()
