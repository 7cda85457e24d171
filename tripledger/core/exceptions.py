"""Custom exception classes"""
from typing import Any, Optional


class AppException(Exception):
    """Base exception for application errors"""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        error_type: str = "AppError",
        details: Optional[Any] = None
    ):
        self.message = message
        self.status_code = status_code
        self.error_type = error_type
        self.details = details
        super().__init__(self.message)


class ValidationError(AppException):
    """Domain rule violated by the request (bad split, wrong payer shape, ...)"""

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(
            message=message,
            status_code=400,
            error_type="ValidationError",
            details=details
        )


class NotFoundError(AppException):
    """Resource not found exception"""

    def __init__(self, message: str = "Resource not found", details: Optional[Any] = None):
        super().__init__(
            message=message,
            status_code=404,
            error_type="NotFoundError",
            details=details
        )


class AuthenticationError(AppException):
    """Missing or invalid credentials"""

    def __init__(self, message: str = "Could not validate credentials", details: Optional[Any] = None):
        super().__init__(
            message=message,
            status_code=401,
            error_type="AuthenticationError",
            details=details
        )


class AuthorizationError(AppException):
    """Caller is not a trip participant, or lacks the owner role"""

    def __init__(self, message: str = "Permission denied", details: Optional[Any] = None):
        super().__init__(
            message=message,
            status_code=403,
            error_type="AuthorizationError",
            details=details
        )



class ConflictError(AppException):
    """Resource conflict exception (e.g., duplicate guest)"""

    def __init__(self, message: str = "Resource already exists", details: Optional[Any] = None):
        super().__init__(
            message=message,
            status_code=409,
            error_type="ConflictError",
            details=details
        )
