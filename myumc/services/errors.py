"""
Domain exceptions raised by services.

The API layer maps these onto HTTP status codes in one place
(`myumc.api.main`), so services never import FastAPI.
"""


class ServiceError(Exception):
    """Base class for expected, user-facing service failures."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(ServiceError, LookupError):
    """A referenced entity does not exist (HTTP 404)."""


class InvalidOperationError(ServiceError, ValueError):
    """The request is well-formed but violates a business rule (HTTP 400)."""


class PermissionDeniedError(ServiceError):
    """The caller may not act on the entity (HTTP 403)."""


class ConflictError(ServiceError):
    """A uniqueness rule would be violated (HTTP 409)."""
