#!/usr/bin/env python3
"""Golden path demo for sqllease (acquire, renew, hand over, release).

Expects the lease table to exist in SQLLEASE_DATABASE_URL.
"""

from __future__ import annotations

import asyncio
import logging
import os
import sys
from datetime import timedelta

from sqllease import LeaseError, LeaseRecord, Lessor
from sqllease.config import configure_logging, settings
from sqllease.db import EngineExecer, close_db, get_engine
from sqllease.observability import metrics
from sqllease.utils.time import utc_now

logger = logging.getLogger("sqllease.golden_path")


def _env(name: str, default: str | None = None) -> str | None:
    value = os.environ.get(name)
    if value is None or value == "":
        return default
    return value


async def run() -> None:
    lease_name = _env("SQLLEASE_DEMO_NAME", "demo-job")
    ttl = timedelta(seconds=int(_env("SQLLEASE_DEMO_TTL_SECONDS", "10")))

    lessor = Lessor.from_settings(EngineExecer(get_engine()), settings)
    logger.info(f"Using {lessor!r}")

    lease = await lessor.acquire(lease_name, utc_now() + ttl)
    logger.info(f"Acquired {lease.name!r} until {lease.exp.isoformat()}")

    async with lease.context():
        await asyncio.sleep(0.1)
        await lease.renew(utc_now() + ttl)
        logger.info(f"Renewed until {lease.exp.isoformat()}")

    # Hand the lease to "another process": only the record travels.
    payload = lease.record().model_dump_json()
    received = lessor.attach(LeaseRecord.model_validate_json(payload))
    await received.release()
    logger.info(f"Released {received.name!r}")

    # Releasing twice is harmless.
    await lease.release()


async def main() -> int:
    configure_logging()
    try:
        await run()
    except LeaseError as exc:
        logger.error(f"Golden path failed: {exc}")
        return 1
    finally:
        await close_db()
    logger.info(f"Metrics: {metrics.snapshot()}")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
