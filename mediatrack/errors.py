"""Error taxonomy for MediaTrack.

Every failure surfaced by the persistence layer is a MediaTrackError subclass
carrying the entity kind, identifier and field name where they apply.
Nothing is recovered locally; callers decide how to present each kind.
"""

from typing import Any


class MediaTrackError(Exception):
    """Base error for all persistence-layer failures."""

    def __init__(
        self,
        message: str,
        *,
        entity: str | None = None,
        identifier: Any = None,
        field: str | None = None,
    ):
        super().__init__(message)
        self.entity = entity
        self.identifier = identifier
        self.field = field


class NotFoundError(MediaTrackError):
    """No node matched the identifier on a get or update."""


class ValidationError(MediaTrackError):
    """Input rejected before anything was written (missing endpoint, bad field)."""


class ConstraintViolationError(MediaTrackError):
    """The store rejected a write because of a uniqueness constraint."""


class ConnectivityError(MediaTrackError):
    """The store could not be reached or refused the credentials."""


class DecodeError(MediaTrackError):
    """A stored value could not be coerced to its expected type."""


class SchemaError(MediaTrackError):
    """A constraint or index declaration failed."""

    def __init__(self, message: str, *, statement: str):
        super().__init__(message)
        self.statement = statement


__all__ = [
    "MediaTrackError",
    "NotFoundError",
    "ValidationError",
    "ConstraintViolationError",
    "ConnectivityError",
    "DecodeError",
    "SchemaError",
]
