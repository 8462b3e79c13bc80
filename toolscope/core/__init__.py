"""
Core utilities and configuration for toolscope.

This package provides core functionality including logging configuration,
settings and the exception hierarchy shared by all components.
"""

from toolscope.core.errors import (
    BundleNotFoundError,
    CapabilityNotFoundError,
    NotFoundError,
    SchemaError,
    ToolScopeError,
    TransactionError,
)
from toolscope.core.logging_config import get_logger, setup_logging

__all__ = [
    "get_logger",
    "setup_logging",
    "ToolScopeError",
    "NotFoundError",
    "BundleNotFoundError",
    "CapabilityNotFoundError",
    "TransactionError",
    "SchemaError",
]
