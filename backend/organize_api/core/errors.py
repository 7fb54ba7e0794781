"""
Error taxonomy shared by the store, the services and the GraphQL layer.

Every error the API is expected to surface derives from AppError. The
`extensions` dict is picked up by graphql-core when a resolver raises, so
clients receive a stable `code` next to the human-readable message.
"""


class AppError(Exception):
    """Base class for errors that are reported to API clients as-is."""

    code = "INTERNAL_SERVER_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
        self.extensions = {"code": self.code}


class NotFoundError(AppError):
    code = "NOT_FOUND"


class ConflictError(AppError):
    """A unique constraint (username or email) would be violated."""

    code = "CONFLICT"

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field
        if field:
            self.extensions["field"] = field


class ValidationError(AppError):
    code = "BAD_USER_INPUT"


class AuthenticationError(AppError):
    code = "UNAUTHENTICATED"


class FatalConfigError(RuntimeError):
    """Startup configuration is unusable; the process must not serve traffic."""
