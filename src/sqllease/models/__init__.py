"""sqllease data models."""

from sqllease.models.lease import LeaseRecord

__all__ = ["LeaseRecord"]
