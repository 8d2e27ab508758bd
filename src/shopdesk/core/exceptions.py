"""Application-level exceptions."""


class AppError(Exception):
    """Base exception for application errors."""

    def __init__(self, message: str, code: str = "APP_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class ValidationError(AppError):
    """Raised when input validation fails."""

    def __init__(self, message: str, code: str = "VALIDATION_ERROR"):
        super().__init__(message, code=code)


class DuplicateSessionError(ValidationError):
    """Raised when a user already has a cash session for the current day."""

    def __init__(self, status: str, open_time: str):
        self.status = status
        self.open_time = open_time
        super().__init__(
            f"A cash session already exists for today (status: {status}, opened at {open_time})",
            code="DUPLICATE_SESSION",
        )


class NotFoundError(AppError):
    """Raised when a requested resource is not found."""

    def __init__(self, resource: str, identifier: str):
        super().__init__(f"{resource} not found: {identifier}", code="NOT_FOUND")


class AuthorizationError(AppError):
    """Raised when the acting user lacks ownership or permission."""

    def __init__(self, message: str):
        super().__init__(message, code="FORBIDDEN")


class RemoteDataError(AppError):
    """Raised when the remote data service rejects a request."""

    def __init__(self, message: str, code: str = "REMOTE_ERROR"):
        super().__init__(message, code=code)


class RemoteIntegrityError(RemoteDataError):
    """Raised when a write violates a storage constraint."""

    def __init__(self, message: str):
        super().__init__(message, code="INTEGRITY_ERROR")


class NetworkError(RemoteDataError):
    """Raised for transient transport failures (dropped connection, aborted request)."""

    def __init__(self, message: str = "NetworkError when attempting to fetch resource"):
        super().__init__(message, code="NETWORK_ERROR")


class RemoteTimeoutError(AppError):
    """Raised when a remote call does not complete within its allotted time."""

    def __init__(self, message: str):
        super().__init__(message, code="TIMEOUT")


class OperationCancelledError(AppError):
    """Raised when a caller explicitly aborts an operation. Never retried."""

    def __init__(self, message: str = "Operation cancelled"):
        super().__init__(message, code="CANCELLED")
