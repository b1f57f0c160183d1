"""Exceptions raised by the Logipad identity API client."""
from __future__ import annotations

from ..user_mapper import MappingError


class LogipadError(Exception):
    """Base exception for Logipad identity API operations."""
    pass


class LogipadAPIError(LogipadError):
    """The identity API request failed or returned a non-success status.
    
    Attributes:
        status_code: HTTP status code (0 when no response was received)
        message: Response body or transport error
        endpoint: URL that was requested
    """
    
    def __init__(self, status_code: int, message: str, endpoint: str):
        self.status_code = status_code
        self.message = message
        self.endpoint = endpoint
        super().__init__(f"[{status_code}] {endpoint}: {message}")


class UserListMappingError(LogipadError):
    """The user list response could not be mapped to user records.
    
    Attributes:
        cause: The underlying ShapeError or FieldTypeError
    """
    
    def __init__(self, cause: MappingError):
        self.cause = cause
        super().__init__(f"Unable to map user list: {cause}")
