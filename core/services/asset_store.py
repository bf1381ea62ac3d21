"""Ordered triage queue with a cursor on the asset under review."""

from __future__ import annotations

from collections.abc import Iterable

from core.errors import EmptyQueue, IndexOutOfRange
from core.models import Asset


class AssetStore:
    """Holds the ordered assets and the current index.

    Invariant: `0 <= current_index < len(self)` when non-empty and
    `current_index == 0` when empty. Deduplication is done by `ImportMerger`.
    """

    def __init__(self, assets: Iterable[Asset] | None = None) -> None:
        self._assets: list[Asset] = list(assets or [])
        self._current_index = 0

    def __len__(self) -> int:
        return len(self._assets)

    @property
    def current_index(self) -> int:
        return self._current_index

    @property
    def is_empty(self) -> bool:
        return not self._assets

    def assets(self) -> tuple[Asset, ...]:
        """Snapshot of the queue in order."""
        return tuple(self._assets)

    def ids(self) -> set[str]:
        return {a.asset_id for a in self._assets}

    def index_of(self, asset_id: str) -> int | None:
        for i, asset in enumerate(self._assets):
            if asset.asset_id == asset_id:
                return i
        return None

    def load(self, assets: Iterable[Asset]) -> None:
        """Replace the queue and reset the cursor; does not classify."""
        self._assets = list(assets)
        self._current_index = 0

    def remove(self, index: int) -> Asset:
        """Remove and return the asset at `index`, clamping the cursor."""
        if not 0 <= index < len(self._assets):
            raise IndexOutOfRange(f"index {index} outside queue of {len(self._assets)}")
        removed = self._assets.pop(index)
        if not self._assets:
            self._current_index = 0
        elif self._current_index >= len(self._assets):
            self._current_index = len(self._assets) - 1
        return removed

    def discard(self, asset_id: str) -> Asset | None:
        """Remove `asset_id` wherever it sits, keeping the cursor on the same asset.

        Removing the current asset behaves like `remove(current_index)`.
        Returns None when the asset is not queued.
        """
        index = self.index_of(asset_id)
        if index is None:
            return None
        if index < self._current_index:
            self._current_index -= 1
            return self._assets.pop(index)
        return self.remove(index)

    def advance(self) -> Asset:
        """Move the cursor forward, wrapping to the start, and return the new current."""
        if not self._assets:
            raise EmptyQueue("cannot advance an empty queue")
        self._current_index = (self._current_index + 1) % len(self._assets)
        return self._assets[self._current_index]

    def current(self) -> Asset | None:
        if not self._assets:
            return None
        return self._assets[self._current_index]

    def append(self, assets: Iterable[Asset]) -> None:
        """Append in order without deduplicating."""
        self._assets.extend(assets)
