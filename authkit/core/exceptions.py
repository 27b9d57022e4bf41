"""Package-wide exception base classes.

Domain errors (the authentication taxonomy) live in ``authkit.auth.exceptions``
and inherit from ``AppException`` so hosts can render them uniformly.
"""


class AppException(Exception):
    """Base exception for all authkit errors.

    Subclasses define their own status_code and error_type so that an HTTP
    host can turn them into consistent responses.
    """

    status_code: int = 500
    error_type: str = "internal_error"

    def __init__(self, message: str = "An unexpected error occurred"):
        self.message = message
        super().__init__(message)


class ConfigurationNotSetError(RuntimeError):
    """Raised when configuration is read before it has been set.

    This is a programming error in the host application, so it is not part
    of the authentication taxonomy.
    """

    def __init__(
        self,
        message: str = "authkit is not configured; call authkit.configure() first",
    ):
        super().__init__(message)


class BadRequestError(AppException):
    """Raised when a request to the callback surface cannot be used."""

    status_code = 400
    error_type = "bad_request"

    def __init__(self, message: str = "Bad request"):
        super().__init__(message)
