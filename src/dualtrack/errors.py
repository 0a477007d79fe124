"""Application-level exception types for dualtrack."""

from __future__ import annotations


class DualtrackError(Exception):
    """Base exception for dualtrack."""


class ConfigurationError(DualtrackError):
    """Base exception for configuration and startup validation errors."""


class ModelNotConfiguredError(ConfigurationError):
    """Raised when model configuration is missing."""


class GraphError(DualtrackError):
    """Raised when the orchestration graph reaches an invalid node or state field."""
