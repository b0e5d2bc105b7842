"""Custom exceptions for intropath."""


class IntroPathError(Exception):
    """Base exception for introduction-path operations."""


class InvalidRecordError(IntroPathError):
    """Raised when a network record fails validation."""


class RecordNotFoundError(IntroPathError):
    """Raised when a write references a user, contact or team that does not exist."""


class StoreCorruptedError(IntroPathError):
    """Raised when a store's backing database cannot be opened."""
