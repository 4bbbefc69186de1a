"""Exception hierarchy shared by the repository contract and the assembler.

Every exception carries an ``ErrorKind`` so callers can fold it into a
``Result`` without inspecting the concrete class.
"""

from __future__ import annotations

from lineage_context.core.models.base import ErrorKind


class LineageContextError(Exception):
    """Base class for all lineage context errors."""

    kind: ErrorKind = ErrorKind.REPOSITORY_UNAVAILABLE

    def __init__(self, message: str, *, method: str | None = None):
        self.message = message
        self.method = method
        super().__init__(f"{method}: {message}" if method else message)


class InvalidParameterError(LineageContextError):
    """A GUID, type name or relationship name is missing or malformed."""

    kind = ErrorKind.INVALID_INPUT

    def __init__(self, parameter: str, message: str, *, method: str | None = None):
        self.parameter = parameter
        super().__init__(message, method=method)


class EntityNotVisibleError(InvalidParameterError):
    """The entity is not a member of any zone the caller may see."""

    def __init__(self, guid: str, zones: list[str], *, method: str | None = None):
        self.guid = guid
        self.zones = zones
        super().__init__("guid", f"Entity {guid} is not in a supported zone", method=method)


class UserNotAuthorizedError(LineageContextError):
    """The caller lacks permission for the repository call."""

    kind = ErrorKind.UNAUTHORIZED

    def __init__(self, user_id: str, message: str | None = None, *, method: str | None = None):
        self.user_id = user_id
        super().__init__(message or f"User {user_id} is not authorized", method=method)


class RepositoryUnavailableError(LineageContextError):
    """Communication or internal failure in the metadata repository."""

    kind = ErrorKind.REPOSITORY_UNAVAILABLE


class EntityNotFoundError(LineageContextError):
    """No entity exists with the requested GUID and type."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, guid: str, type_name: str | None = None, *, method: str | None = None):
        self.guid = guid
        self.type_name = type_name
        suffix = f" of type {type_name}" if type_name else ""
        super().__init__(f"Entity {guid}{suffix} not found", method=method)
