"""Shared core models."""

from lineage_context.core.models.base import ErrorKind, Result

__all__ = [
    "ErrorKind",
    "Result",
]
