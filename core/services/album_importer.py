"""Photo library loading and album import behind the permission state."""

from __future__ import annotations

from collections.abc import Callable

from loguru import logger

from core.errors import PermissionDenied
from core.models import Asset, PermissionState
from core.services.asset_store import AssetStore
from core.services.classification_cache import ClassificationCache
from core.services.import_merger import ImportMerger
from core.services.interfaces import AssetSource, TriageListener

REQUEST_REFUSED_MESSAGE = "Photo library access is required to import photos."
DENIED_MESSAGE = "Allow photo library access in the settings to import photos."


class AlbumImporter:
    """Loads the library into the queue and merges later album imports.

    Both operations first resolve the source's permission state:
    granted or limited access proceeds, undetermined access is requested
    asynchronously, and denied access is surfaced through the listener.
    """

    def __init__(
        self,
        source: AssetSource,
        store: AssetStore,
        cache: ClassificationCache,
        merger: ImportMerger,
        listener: TriageListener | None = None,
    ) -> None:
        self._source = source
        self._store = store
        self._cache = cache
        self._merger = merger
        self._listener = listener or TriageListener()

    def load_library(self) -> None:
        """Replace the queue with the full library, newest first."""
        self._with_permission(self._load)

    def import_album(self) -> None:
        """Merge library assets that are not queued yet."""
        self._with_permission(self._merge)

    def _load(self) -> None:
        assets = self._source.fetch_all()
        self._store.load(assets)
        self._cache.clear()
        logger.info("Library loaded with {} assets", len(assets))
        current: Asset | None = self._store.current()
        self._listener.on_current_changed(current)
        if current is not None:
            self._cache.request(current)

    def _merge(self) -> None:
        self._merger.merge(self._source.fetch_all())

    def _with_permission(self, action: Callable[[], None]) -> None:
        status = self._source.permission_status()
        if status.is_granted:
            action()
            return
        if status is PermissionState.UNDETERMINED:

            def on_result(new_status: PermissionState) -> None:
                if new_status.is_granted:
                    action()
                else:
                    self._deny(new_status, REQUEST_REFUSED_MESSAGE)

            self._source.request_permission(on_result)
            return
        self._deny(status, DENIED_MESSAGE)

    def _deny(self, status: PermissionState, message: str) -> None:
        logger.warning("{}", PermissionDenied(f"photo library access is {status.value}"))
        self._listener.on_permission_needed(message)
