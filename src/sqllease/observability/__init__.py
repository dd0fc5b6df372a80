"""Observability helpers for sqllease."""

from sqllease.observability.metrics import metrics

__all__ = ["metrics"]
