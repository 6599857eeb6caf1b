"""Domain errors raised by services and translated to HTTP responses by routers."""
from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Error categories reported alongside failures."""

    ROUTE_CALCULATION_FAILED = "route_calculation_failed"
    GOOGLE_API_ERROR = "google_api_error"
    NETWORK_ERROR = "network_error"
    USER_INPUT_ERROR = "user_input_error"
    STORAGE_ERROR = "storage_error"
    UNKNOWN_ERROR = "unknown_error"


class DriveLessError(Exception):
    """Base class for application errors."""

    kind = ErrorKind.UNKNOWN_ERROR

    def __init__(self, message: str, kind: Optional[ErrorKind] = None):
        super().__init__(message)
        self.message = message
        if kind is not None:
            self.kind = kind

    def to_detail(self) -> dict:
        return {"code": self.kind.value, "message": self.message}


class RouteCalculationError(DriveLessError):
    """The directions provider could not produce a route."""

    kind = ErrorKind.ROUTE_CALCULATION_FAILED

    def __init__(self, message: str, status: Optional[str] = None, kind: Optional[ErrorKind] = None):
        super().__init__(message, kind)
        self.status = status

    @classmethod
    def api_error(cls, status: str) -> "RouteCalculationError":
        return cls(f"API Error: {status}", status=status, kind=ErrorKind.GOOGLE_API_ERROR)


class UsageLimitExceeded(DriveLessError):
    kind = ErrorKind.USER_INPUT_ERROR


class AddressNotFound(DriveLessError):
    kind = ErrorKind.USER_INPUT_ERROR


class RouteNotFound(DriveLessError):
    kind = ErrorKind.USER_INPUT_ERROR
