"""
Core Exceptions Module
"""

from .base import (
    AppException,
    ConfigurationException,
    ExternalServiceException,
)
from .codes import ErrorCode

__all__ = [
    # Base Exceptions
    "AppException",
    "ConfigurationException",
    "ExternalServiceException",
    # Error Codes
    "ErrorCode",
]
