"""sqllease engine errors."""

from typing import Any


class LeaseError(Exception):
    """Base error for lease operations."""

    def __init__(self, message: str, code: str = "LEASE_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class LeaseStoreError(LeaseError):
    """A statement against the lease store failed.

    ``step`` names the operation that failed; the store's own exception is
    kept as ``cause`` and chained as ``__cause__``.
    """

    def __init__(self, step: str, cause: BaseException):
        super().__init__(f"{step}: {cause}", "LEASE_STORE_ERROR")
        self.step = step
        self.cause = cause


class KeyGenerationError(LeaseError):
    """No randomness was available for a lease key."""

    def __init__(self, cause: BaseException):
        super().__init__(f"computing key: {cause}", "KEY_GENERATION_FAILED")
        self.cause = cause


class LeaseRenewRefused(LeaseError):
    """The lease row was expired, released, or is held under another key."""

    def __init__(self, name: str = ""):
        super().__init__("could not renew", "LEASE_RENEW_REFUSED")
        self.name = name


class LeaseNotAttached(LeaseError):
    """Lease handle has no Lessor to run statements through."""

    def __init__(self, name: str = ""):
        super().__init__(
            f"Lease {name!r} is not attached to a Lessor",
            "LEASE_NOT_ATTACHED",
        )
        self.name = name


class NoRowsError(LeaseError):
    """Query produced no rows."""

    def __init__(self):
        super().__init__("no rows in result set", "NO_ROWS")


class MultipleRowsError(LeaseError):
    """Query produced more than one row; ``row`` holds the first."""

    def __init__(self, row: Any):
        super().__init__("multiple rows", "MULTIPLE_ROWS")
        self.row = row
