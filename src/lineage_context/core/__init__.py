"""Core module - configuration, logging, errors, and shared models."""

from lineage_context.core.config import Settings, get_settings
from lineage_context.core.errors import (
    EntityNotFoundError,
    EntityNotVisibleError,
    InvalidParameterError,
    LineageContextError,
    RepositoryUnavailableError,
    UserNotAuthorizedError,
)
from lineage_context.core.models.base import ErrorKind, Result

__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Errors
    "EntityNotFoundError",
    "EntityNotVisibleError",
    "InvalidParameterError",
    "LineageContextError",
    "RepositoryUnavailableError",
    "UserNotAuthorizedError",
    # Models
    "ErrorKind",
    "Result",
]
