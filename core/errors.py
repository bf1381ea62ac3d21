"""Error taxonomy for the triage pipeline.

`EmptyQueue` and `IndexOutOfRange` signal caller bugs and are never caught by
the pipeline. The remaining errors describe recoverable conditions that are
reported per item or surfaced to the user.
"""

from __future__ import annotations


class TriageError(Exception):
    """Base class for all triage pipeline errors."""


class EmptyQueue(TriageError, RuntimeError):
    """Cursor operation attempted on an empty queue."""


class IndexOutOfRange(TriageError, IndexError):
    """Removal index outside the queue."""


class ClassificationFailed(TriageError):
    """Classifier raised or returned no result."""


class FolderAccessDenied(TriageError):
    """Folder is unreadable even after acquiring scoped access."""

    def __init__(self, path: str, message: str) -> None:
        super().__init__(message)
        self.path = path
        self.message = message


class AssetCreationFailed(TriageError):
    """Asset source rejected the creation of a new asset."""


class AssetDeletionFailed(TriageError):
    """Asset source rejected the deletion of an asset."""


class PermissionDenied(TriageError):
    """Photo library access was refused."""
