"""
Exception types for the history engine.
"""


class RewindError(Exception):
    """Base class for all engine errors."""
    pass


class InvalidTransitionError(RewindError):
    """Raised in strict mode when a meta-action cannot be applied to the lifted state."""
    pass


class ImportValidationError(InvalidTransitionError):
    """Raised when an imported lifted state violates the log invariants."""
    pass


class StoreError(RewindError):
    """Raised when the plain store is misused (e.g. dispatch from a reducer)."""
    pass


class SnapshotError(RewindError):
    """Raised when wire data cannot be decoded."""
    pass
