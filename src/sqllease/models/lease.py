"""Lease record - the transmissible part of a lease."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from sqllease.utils.time import to_utc, utc_now


class LeaseRecord(BaseModel):
    """Name, expiration and key of one claimed lease row.

    This is all another process needs to take over a lease: send
    ``record.model_dump_json()``, then ``Lessor.attach()`` the parsed record
    on the receiving side.
    """

    name: str
    exp: datetime
    key: str = Field(repr=False, min_length=32, max_length=32, pattern=r"^[0-9a-f]{32}$")

    @field_validator("exp")
    @classmethod
    def normalize_exp(cls, v: datetime) -> datetime:
        return to_utc(v)

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """Check expiry against the local clock.

        Only a hint: the store decides at renew time.
        """
        if now is None:
            now = utc_now()
        return to_utc(now) >= self.exp
