"""Error taxonomy shared by stores, services and routers.

Every error carries a client-safe ``message`` and the HTTP ``status_code`` the
handlers in ``stargazers.api.exception_handlers`` respond with.
"""


class StargazersError(Exception):
    """Base class for errors surfaced to API clients as ``{"error": message}``."""

    status_code = 500

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)


class ValidationError(StargazersError):
    """Missing or malformed fields."""

    status_code = 400


class ConflictError(StargazersError):
    """Duplicate value for a unique field (email, username, event name)."""

    status_code = 400

    def __init__(self, message: str, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)


class AuthenticationError(StargazersError):
    """Missing session or bad credentials."""

    status_code = 401


class InvalidTokenError(AuthenticationError):
    """Session token failed verification (signature, structure, expiry or claims)."""

    status_code = 403

    def __init__(self, message: str = "Invalid or expired token") -> None:
        super().__init__(message)


class AuthorizationError(StargazersError):
    """Authenticated, but not allowed: wrong role or not the record owner."""

    status_code = 403

    def __init__(self, message: str = "Forbidden") -> None:
        super().__init__(message)


class NotFoundError(StargazersError):
    status_code = 404


class StoreError(StargazersError):
    """Record store read/write failure."""

    status_code = 500
