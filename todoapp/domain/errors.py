from __future__ import annotations


class TodoValidationError(ValueError):
    """Raised by the use-case layer when a todo fails business validation."""


class StoreError(RuntimeError):
    """A durable read or write against the todo store failed."""
