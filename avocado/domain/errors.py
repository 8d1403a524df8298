"""Error taxonomy shared by services and the HTTP layer.

Every error carries a client-safe ``message`` and the HTTP status the API
answers with. Handlers in the presentation layer render them as
``{"error": message}``.
"""


class MarketplaceError(Exception):
    """Base class for failures that are reported to API clients."""

    status_code: int = 500
    retryable: bool = False

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(MarketplaceError):
    """Malformed or missing input."""

    status_code = 400


class AuthError(MarketplaceError):
    """Bad credentials, missing/invalid token or wrong shared secret."""

    status_code = 401


class ForbiddenError(MarketplaceError):
    """Valid identity without the state or ownership the action needs."""

    status_code = 403


class NotFoundError(MarketplaceError):
    status_code = 404


class ConflictError(MarketplaceError):
    """Uniqueness violation."""

    status_code = 409


class InternalError(MarketplaceError):
    """Store or other internal failure. The message is already redacted."""

    status_code = 500


class StoreUnavailableError(InternalError):
    """Transient store failure (lock timeout, unavailable file); safe to retry."""

    status_code = 503
    retryable = True
