"""sqllease - time-bounded named leases held in a shared SQL table."""

from sqllease.engine import (
    KeyGenerationError,
    Lease,
    LeaseError,
    LeaseNotAttached,
    LeaseRenewRefused,
    LeaseStoreError,
    Lessor,
    MultipleRowsError,
    NoRowsError,
)
from sqllease.models import LeaseRecord

__version__ = "0.1.0"

__all__ = [
    "KeyGenerationError",
    "Lease",
    "LeaseError",
    "LeaseNotAttached",
    "LeaseRecord",
    "LeaseRenewRefused",
    "LeaseStoreError",
    "Lessor",
    "MultipleRowsError",
    "NoRowsError",
]
