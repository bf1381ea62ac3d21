"""Deduplicating merge of newly fetched assets into the triage queue."""

from __future__ import annotations

from collections.abc import Iterable

from loguru import logger

from core.models import Asset
from core.services.asset_store import AssetStore
from core.services.classification_cache import ClassificationCache
from core.services.interfaces import TriageListener


class ImportMerger:
    """Appends only assets whose identifier is not already queued."""

    def __init__(
        self,
        store: AssetStore,
        cache: ClassificationCache,
        listener: TriageListener | None = None,
    ) -> None:
        self._store = store
        self._cache = cache
        self._listener = listener or TriageListener()

    def merge(self, incoming: Iterable[Asset]) -> list[Asset]:
        """Append unseen assets preserving `incoming` order and return them.

        Classification is requested once, for the current asset, only when
        the queue goes from empty to non-empty.
        """
        was_empty = self._store.is_empty
        seen = self._store.ids()
        appended: list[Asset] = []
        for asset in incoming:
            if asset.asset_id in seen:
                continue
            seen.add(asset.asset_id)
            appended.append(asset)

        if not appended:
            logger.debug("Merge added nothing ({} queued)", len(self._store))
            return appended

        self._store.append(appended)
        logger.info("Merged {} new assets ({} queued)", len(appended), len(self._store))

        if was_empty:
            current = self._store.current()
            assert current is not None
            self._listener.on_current_changed(current)
            self._cache.request(current)
        return appended
