"""
Exception classes for EdgeGrid Python SDK
"""

from typing import Optional, Dict, Any


class EdgeGridSDKError(Exception):
    """Base exception for all EdgeGrid SDK errors"""

    def __init__(self, message: str, error_code: str = "UNKNOWN_ERROR", details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} (code: {self.error_code}, details: {self.details})"
        return f"{self.message} (code: {self.error_code})"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(message='{self.message}', "
            f"error_code='{self.error_code}', details={self.details})"
        )


class ValidationError(EdgeGridSDKError):
    """Exception raised for validation failures"""
    pass


class InvalidArgumentError(ValidationError, ValueError):
    """Exception raised when a required argument is missing"""
    pass


class BodyStreamError(EdgeGridSDKError):
    """Exception raised when a request body stream cannot be read or rewound"""
    pass


class SigningError(EdgeGridSDKError):
    """Exception raised when signature computation fails"""
    pass
