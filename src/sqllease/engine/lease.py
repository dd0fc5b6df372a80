"""Lease - handle on one claimed lease row."""

import asyncio
import logging
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from pydantic import ConfigDict, Field

from sqllease.engine.errors import LeaseNotAttached, LeaseRenewRefused, LeaseStoreError
from sqllease.models.lease import LeaseRecord
from sqllease.observability.metrics import metrics
from sqllease.utils.time import to_utc, utc_now

if TYPE_CHECKING:
    from sqllease.engine.lessor import Lessor

logger = logging.getLogger("sqllease.lease")


class Lease(LeaseRecord):
    """A lease acquired from a :class:`Lessor`.

    The handle keeps no state about the row beyond name, expiration and
    key. It learns that the row expired or was taken over only when a
    renew is refused. ``lessor`` is never serialized; a process receiving
    a lease attaches its own.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    lessor: Optional["Lessor"] = Field(default=None, exclude=True, repr=False)

    def _require_lessor(self) -> "Lessor":
        if self.lessor is None:
            raise LeaseNotAttached(self.name)
        return self.lessor

    def record(self) -> LeaseRecord:
        """The transmissible part of this lease."""
        return LeaseRecord(name=self.name, exp=self.exp, key=self.key)

    async def renew(self, exp: datetime) -> None:
        """Move the expiration of a lease that is still held to ``exp``.

        Raises :class:`LeaseRenewRefused` when no row matched: the lease
        expired, was released, or now belongs to another holder. Any of
        those means the caller no longer owns the name.
        """
        lessor = self._require_lessor()
        exp = to_utc(exp)
        statement = lessor.renew_statement(self, exp, lessor.now())

        try:
            result = await lessor.db.execute(statement)
        except Exception as e:
            raise LeaseStoreError("updating database", e) from e

        affected = result.rowcount
        if affected is None or affected < 0:
            raise LeaseStoreError(
                "counting affected rows",
                RuntimeError(f"driver reported rowcount {affected!r}"),
            )
        if affected == 0:
            metrics.inc_counter("lease.renew.refused")
            logger.warning(f"Renewal refused for lease {self.name!r}")
            raise LeaseRenewRefused(self.name)

        self.exp = exp
        metrics.inc_counter("lease.renew.count")
        logger.debug(f"Renewed lease {self.name!r} until {exp.isoformat()}")

    async def release(self) -> None:
        """Delete the lease row.

        Releasing a lease that is already gone is not an error.
        """
        lessor = self._require_lessor()
        try:
            await lessor.db.execute(lessor.release_statement(self))
        except Exception as e:
            raise LeaseStoreError("deleting from database", e) from e

        metrics.inc_counter("lease.release.count")
        logger.debug(f"Released lease {self.name!r}")

    def context(self) -> asyncio.Timeout:
        """Timeout scope whose deadline is the lease's expiration.

        Must be entered from a running event loop::

            async with lease.context():
                await do_work()

        Work still running at ``exp`` is cancelled and ``TimeoutError`` is
        raised on exit. Leaving the block disarms the timer. The store is
        not consulted, so a renew after entering does not move the deadline;
        call ``reschedule()`` on the returned object for that. The time left
        is measured with the Lessor's clock when the lease is attached.
        """
        loop = asyncio.get_running_loop()
        now = self.lessor.now() if self.lessor is not None else utc_now()
        remaining = (self.exp - now).total_seconds()
        return asyncio.timeout_at(loop.time() + remaining)
