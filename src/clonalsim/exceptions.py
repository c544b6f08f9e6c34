"""
Custom exceptions for the clonalsim package.

This module provides specific exception types for parameter validation,
configuration loading and result export.
"""

from typing import Any, Optional


class ClonalSimError(Exception):
    """Base exception for clonalsim errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.details = details or {}


class InvalidParameterError(ClonalSimError, ValueError):
    """Raised when a simulation parameter is outside its valid range."""

    @classmethod
    def for_parameter(cls, parameter: str, value: Any, constraint: str) -> "InvalidParameterError":
        return cls(
            f"{parameter} {constraint} (got {value!r})",
            {"parameter": parameter, "value": value, "constraint": constraint},
        )


class ConfigurationError(ClonalSimError):
    """Raised when configuration is unreadable or malformed."""
    pass


class ExportError(ClonalSimError):
    """Raised when a result cannot be exported or plotted."""
    pass


class SkippedGroupWarning(UserWarning):
    """Emitted when a shared mutation group references missing clones."""
    pass
