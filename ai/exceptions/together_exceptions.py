"""Custom exceptions for the Together AI image tool"""
from typing import Any, List, Optional


class TogetherError(Exception):
    """Base exception for Together AI image errors"""
    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class MissingAPIKeyError(TogetherError):
    """Exception raised when TOGETHER_API_KEY is not configured"""
    pass


class APIError(TogetherError):
    """Exception for API-related errors"""
    pass


class InvalidResponseError(TogetherError):
    """Exception for responses that do not carry base64 image data"""
    pass


class InvalidArgumentsError(TogetherError):
    """Exception for tool arguments that fail validation"""
    def __init__(self, message: str, errors: Optional[List[Any]] = None):
        self.errors = errors or []
        super().__init__(message)
