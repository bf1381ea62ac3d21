"""Core service interfaces and shared data structures.

The pipeline talks to the photo library, the classifier, the file system and
the presentation layer only through the protocols defined here, so that the
core stays independent of Qt and of any concrete storage.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol

from core.models import Asset, Classification, ClassificationResult, PermissionState


@dataclass
class DeleteResult:
    """Outcome of a delete operation.

    Attributes:
        success_ids: Asset identifiers successfully deleted.
        failed: Tuples of (asset_id, reason) for failures.
    """

    success_ids: list[str] = field(default_factory=list)
    failed: list[tuple[str, str]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


class AssetSource(Protocol):
    """Photo library owning the assets under triage."""

    def fetch_all(self) -> list[Asset]:
        """Return all assets, newest first by creation time."""
        raise NotImplementedError

    def delete(self, asset_ids: Sequence[str]) -> DeleteResult:
        """Delete the given assets and report per-id results."""
        raise NotImplementedError

    def create(self, image_data: bytes) -> Asset:
        """Create an asset from encoded image data or raise `AssetCreationFailed`."""
        raise NotImplementedError

    def load_image(self, asset: Asset, width: int, height: int) -> bytes:
        """Return encoded image data for `asset` bounded by `width` x `height`."""
        raise NotImplementedError

    def permission_status(self) -> PermissionState:
        """Return the current access state."""
        raise NotImplementedError

    def request_permission(self, callback: Callable[[PermissionState], None]) -> None:
        """Ask for access; `callback` receives the resulting state."""
        raise NotImplementedError


class Classifier(Protocol):
    """Opaque labelling capability."""

    def classify(self, image_data: bytes, width: int, height: int) -> Classification | None:
        """Label the image or return None when no label could be produced."""
        raise NotImplementedError


class FolderSource(Protocol):
    """File-system access used by folder imports."""

    def enumerate(self, root: str) -> Iterator[str]:
        """Lazily yield regular, non-hidden file paths under `root`."""
        raise NotImplementedError

    def read_file(self, path: str) -> bytes:
        raise NotImplementedError

    def is_readable(self, path: str) -> bool:
        raise NotImplementedError

    def acquire_scoped_access(self, path: str) -> bool:
        """Try to obtain time-boxed read access to `path`."""
        raise NotImplementedError

    def release_scoped_access(self, path: str) -> None:
        raise NotImplementedError


class TaskRunner(Protocol):
    """Runs work off the owner thread and delivers completions back on it."""

    def submit(
        self, work: Callable[[], Any], done: Callable[[Any, BaseException | None], None]
    ) -> None:
        """Run `work` and call `done(result, error)` on the owner thread."""
        raise NotImplementedError


class TriageListener:
    """Receiver for user-facing notifications emitted by the pipeline.

    All methods are no-ops so presentation layers override only what they
    render.
    """

    def on_queue_exhausted(self) -> None:
        """The last asset of the queue was deleted."""

    def on_current_changed(self, asset: Asset | None) -> None:
        """The asset under review changed."""

    def on_classification_updated(self, result: ClassificationResult) -> None:
        """A classification entry for an asset was created or completed."""

    def on_permission_needed(self, message: str) -> None:
        """Photo library access is missing."""

    def on_folder_access_denied(self, message: str) -> None:
        """A folder import could not read its root."""

    def on_item_failed(self, item: str, reason: str) -> None:
        """A single file or asset failed inside a batch operation."""
