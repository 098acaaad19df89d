"""Typed failures raised by the in-memory repositories.

Routers translate these into HTTP responses via the handlers registered in
``prism.main``; nothing in the store lets a bad input crash the caller.
"""


class StoreError(Exception):
    """Base class for repository failures."""

    status_code = 500


class ValidationError(StoreError):
    """Malformed or missing input. Reported to the caller, never retried."""

    status_code = 400


class NotFoundError(StoreError):
    """An operation referenced an identifier the store does not hold."""

    status_code = 404

    def __init__(self, kind: str, key: str) -> None:
        self.kind = kind
        self.key = key
        super().__init__(f"{kind} not found: {key}")


class DuplicateError(StoreError):
    """A record with the same unique key already exists.

    Ingestion treats this as "already have it" and skips the item.
    """

    status_code = 409

    def __init__(self, kind: str, field: str, value: str) -> None:
        self.kind = kind
        self.field = field
        self.value = value
        super().__init__(f"{kind} with {field} {value!r} already exists")
