"""
Exception types for the habit tracker.

Pure operations on cells and blocks raise the builtin ``IndexError`` and
``ValueError`` for precondition violations. The types below cover failures
at the collaborator boundaries (identity and persistence) and lookups of
blocks that the tracker does not define.
"""


class TrackerError(Exception):
    """Base class for habit tracker errors."""


class NotAuthenticatedError(TrackerError):
    """Raised when a change is attempted without a user identity."""


class IdentityUnavailableError(TrackerError):
    """Raised when the identity provider cannot create an anonymous session."""


class DocumentStoreError(TrackerError):
    """Raised when the document store rejects a read or a write."""


class UnknownBlockError(TrackerError, KeyError):
    """Raised when a block label is not part of the tracker."""

    def __init__(self, label: str):
        super().__init__(label)
        self.label = label

    def __str__(self) -> str:
        return f"Unknown block '{self.label}'"


class BlockNotLoadedError(DocumentStoreError):
    """Raised when a block is used before its stored state could be read."""
