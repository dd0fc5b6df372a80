"""Capability slices of a database handle.

The lease engine only ever needs :class:`Execer`; the row helpers in
:mod:`sqllease.query` only need :class:`Queryer`. SQLAlchemy's
``AsyncConnection`` and ``AsyncSession`` satisfy every protocol here, and
test doubles can implement just the slice under test.
"""

from typing import Any, AsyncContextManager, Mapping, Optional, Protocol, runtime_checkable

from sqlalchemy.sql.expression import Executable


@runtime_checkable
class RowCountResult(Protocol):
    """Outcome of a data-modifying statement."""

    @property
    def rowcount(self) -> int: ...


@runtime_checkable
class Execer(Protocol):
    """Can execute a statement and report the affected row count."""

    async def execute(
        self,
        statement: Executable,
        parameters: Optional[Mapping[str, Any]] = None,
    ) -> RowCountResult: ...


@runtime_checkable
class Queryer(Protocol):
    """Can stream the rows of a query."""

    async def stream(
        self,
        statement: Executable,
        parameters: Optional[Mapping[str, Any]] = None,
    ) -> Any: ...


@runtime_checkable
class Transactor(Protocol):
    """Can open a transaction."""

    def begin(self) -> AsyncContextManager[Any]: ...


@runtime_checkable
class DB(Execer, Queryer, Transactor, Protocol):
    """Full database handle."""
