"""sqllease engine - lessor, lease handles and their errors."""

from sqllease.engine.errors import (
    KeyGenerationError,
    LeaseError,
    LeaseNotAttached,
    LeaseRenewRefused,
    LeaseStoreError,
    MultipleRowsError,
    NoRowsError,
)
from sqllease.engine.lease import Lease
from sqllease.engine.lessor import Lessor

__all__ = [
    "KeyGenerationError",
    "Lease",
    "LeaseError",
    "LeaseNotAttached",
    "LeaseRenewRefused",
    "LeaseStoreError",
    "Lessor",
    "MultipleRowsError",
    "NoRowsError",
]
