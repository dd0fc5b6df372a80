"""Row helpers for queries that sit next to the lease table.

Neither helper is used by the lease engine itself, which only executes.
"""

import inspect
from typing import Any, Awaitable, Callable, Mapping, Optional, Union

from sqlalchemy import Row
from sqlalchemy.sql.expression import Executable

from sqllease.db.types import Queryer
from sqllease.engine.errors import MultipleRowsError, NoRowsError

RowCallback = Callable[..., Union[None, Awaitable[None]]]


async def for_query_rows(
    db: Queryer,
    statement: Executable,
    fn: RowCallback,
    parameters: Optional[Mapping[str, Any]] = None,
) -> int:
    """Call ``fn`` with the columns of each result row, in order.

    ``fn`` may be a plain function or a coroutine function. An exception
    raised by ``fn`` stops the iteration, closes the result and propagates.
    Returns the number of rows visited.

    Example::

        names = []
        await for_query_rows(conn, select(t.c.name, t.c.exp), lambda name, exp: names.append(name))
    """
    result = await db.stream(statement, parameters)
    count = 0
    try:
        async for row in result:
            outcome = fn(*row)
            if inspect.isawaitable(outcome):
                await outcome
            count += 1
    finally:
        await result.close()
    return count


async def query_row(
    db: Queryer,
    statement: Executable,
    parameters: Optional[Mapping[str, Any]] = None,
) -> Row:
    """Return the single row a query produces.

    Raises :class:`NoRowsError` for an empty result and
    :class:`MultipleRowsError` (carrying the first row) when there is more
    than one.
    """
    result = await db.stream(statement, parameters)
    try:
        first = await result.fetchone()
        if first is None:
            raise NoRowsError()
        if await result.fetchone() is not None:
            raise MultipleRowsError(first)
        return first
    finally:
        await result.close()
