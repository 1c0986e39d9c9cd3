"""Service-level exceptions.

Services raise these instead of ``HTTPException`` so they stay usable from the
Celery worker. ``marketplace.main`` renders them as the failure envelope.
"""


class MarketplaceError(Exception):
    """Base exception for the marketplace backend."""

    status_code = 500

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message)
        self.message = message


class ValidationError(MarketplaceError):
    """Missing or invalid request field."""

    status_code = 400


class AuthenticationError(MarketplaceError):
    """Missing credentials or unknown session."""

    status_code = 401


class PermissionDeniedError(MarketplaceError):
    """Authenticated, but not allowed to act on the resource."""

    status_code = 403


class NotFoundError(MarketplaceError):
    status_code = 404


class ConflictError(MarketplaceError):
    status_code = 409
