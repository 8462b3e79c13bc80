"""Error types for the toolscope package.

Defines a small hierarchy of exceptions raised by the store, the bundle
registry and the catalog to signal missing records and internal
transaction faults.

``NotFoundError`` is only raised where a caller requires presence (for
example resolving a bundle). Plain lookups return ``None`` and deletes are
idempotent.
"""

from __future__ import annotations


class ToolScopeError(Exception):
    """Base error for all toolscope exceptions."""


class NotFoundError(ToolScopeError):
    """Raised when a record required by the operation does not exist."""


class BundleNotFoundError(NotFoundError):
    """Raised when a bundle name cannot be resolved in the store."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"bundle not found: '{name}'")


class CapabilityNotFoundError(NotFoundError):
    """Raised when a capability is required but not registered."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"capability not found: '{name}'")


class TransactionError(ToolScopeError):
    """Raised for unexpected faults inside a store transaction.

    The store is purely in-memory, so there is no retry policy attached to
    this error: it signals a programming or schema mistake.
    """


class SchemaError(TransactionError):
    """Raised when a table schema is invalid."""
