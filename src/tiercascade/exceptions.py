# src/tiercascade/exceptions.py
"""
Custom exceptions for the tiercascade library.

This module defines a hierarchy of custom exception classes so that
applications can tell caller misconfiguration apart from store failures.

Backend I/O errors (connection refused, disk full, ...) are *not* wrapped:
they propagate unchanged through the whole cascade.
"""


class TierCascadeError(Exception):
    """Base class for all tiercascade specific errors."""
    def __init__(self, message: str = "An unspecified error occurred in tiercascade."):
        super().__init__(message)


class CascadeConfigError(TierCascadeError):
    """Raised for invalid settings or an invalid chain assembly (e.g. a cycle)."""
    def __init__(self, message: str = "Cascade configuration error."):
        super().__init__(message)


class InvalidOperationError(TierCascadeError):
    """Raised when an operation needs an adapter that was never configured."""
    def __init__(self, tier_name: str = "Unknown", message: str = "Invalid operation."):
        self.tier_name = tier_name
        super().__init__(f"Error in tier '{tier_name}': {message}")


class TierNotPreparedError(TierCascadeError, NotImplementedError):
    """
    Raised when a callback tier primitive is invoked before it was prepared.
    This is a programming error, not a runtime condition to recover from.
    """
    def __init__(self, tier_name: str = "Unknown", operation: str = "unknown"):
        self.tier_name = tier_name
        self.operation = operation
        super().__init__(
            f"Tier '{tier_name}' has no '{operation}' callback; call prepare_{operation}() first."
        )


class SerializationError(TierCascadeError):
    """Raised when an item cannot be encoded to or decoded from a backend payload."""
    def __init__(self, entity: str = "Unknown", message: str = "Serialization error."):
        self.entity = entity
        super().__init__(f"Error serializing entity '{entity}': {message}")
