"""Gesture-driven triage state machine.

The decision itself is the pure function `decide`; `TriageEngine` samples
gesture events into a `TriageSession` and applies the chosen transition to
the queue and the classification cache.
"""

from __future__ import annotations

from loguru import logger

from core.errors import AssetDeletionFailed
from core.models import Asset, GestureEvent, GesturePhase, Transition, TriageSession
from core.services.asset_store import AssetStore
from core.services.classification_cache import ClassificationCache
from core.services.interfaces import AssetSource, DeleteResult, TaskRunner, TriageListener
from core.services.runners import ImmediateRunner


def decide(offset: float, delete_threshold: float, advance_threshold: float) -> Transition:
    """Map a final drag offset to a transition; thresholds are inclusive."""
    if offset <= delete_threshold:
        return Transition.DELETE
    if offset >= advance_threshold:
        return Transition.ADVANCE
    return Transition.CANCEL


class TriageEngine:
    """Turns drag gestures into delete / advance / cancel decisions."""

    def __init__(
        self,
        store: AssetStore,
        cache: ClassificationCache,
        deleter: AssetSource | None = None,
        listener: TriageListener | None = None,
        delete_threshold: float = -100.0,
        advance_threshold: float = 100.0,
        runner: TaskRunner | None = None,
    ) -> None:
        """Create an engine.

        Args:
            store: Queue mutated by transitions.
            cache: Classification cache refreshed for the new current asset.
            deleter: Optional source whose `delete` is called before an asset
                leaves the queue. Without it, delete only drops the asset
                from the queue.
            listener: Receiver for queue and failure notifications.
            delete_threshold: Negative offset at or beyond which a drag deletes.
            advance_threshold: Positive offset at or beyond which a drag advances.
            runner: Runs `deleter.delete` off the caller; completions must arrive
                on the owner context. Defaults to running inline.
        """
        if delete_threshold >= 0:
            raise ValueError(f"delete_threshold must be negative, got {delete_threshold}")
        if advance_threshold <= 0:
            raise ValueError(f"advance_threshold must be positive, got {advance_threshold}")
        self._store = store
        self._cache = cache
        self._deleter = deleter
        self._listener = listener or TriageListener()
        self._runner = runner or ImmediateRunner()
        self._deleting: set[str] = set()
        self.session = TriageSession(
            delete_threshold=float(delete_threshold),
            advance_threshold=float(advance_threshold),
        )

    @property
    def offset(self) -> float:
        return self.session.offset

    def handle(self, event: GestureEvent) -> Transition | None:
        """Feed one gesture event; returns the transition when the gesture ends."""
        if event.phase is GesturePhase.CHANGED:
            self.gesture_changed(event.magnitude)
            return None
        return self.gesture_ended()

    def gesture_changed(self, magnitude: float) -> None:
        self.session.offset = float(magnitude)

    def gesture_ended(self) -> Transition:
        offset = self.session.offset
        self.session.offset = 0.0
        if self._store.is_empty:
            return Transition.CANCEL

        transition = decide(
            offset, self.session.delete_threshold, self.session.advance_threshold
        )
        if transition is Transition.DELETE:
            self._delete_current()
        elif transition is Transition.ADVANCE:
            self._advance()
        return transition

    def _advance(self) -> None:
        current = self._store.advance()
        self._listener.on_current_changed(current)
        self._cache.request(current)

    def _delete_current(self) -> None:
        target = self._store.current()
        assert target is not None

        if self._deleter is None:
            self._drop(target.asset_id)
            return
        if target.asset_id in self._deleting:
            logger.debug("Delete already in flight for {}", target.asset_id)
            return

        asset_id = target.asset_id
        deleter = self._deleter
        self._deleting.add(asset_id)
        self._runner.submit(
            lambda: deleter.delete([asset_id]),
            lambda result, error: self._on_deleted(asset_id, result, error),
        )

    def _on_deleted(
        self, asset_id: str, result: DeleteResult | None, error: BaseException | None
    ) -> None:
        self._deleting.discard(asset_id)
        if error is None and result is not None and result.ok:
            self._drop(asset_id)
            return

        if error is not None:
            reason = str(error) or type(error).__name__
        else:
            failed = result.failed if result is not None else []
            reason = "; ".join(r for _, r in failed) or "deletion rejected"
        logger.error("{}", AssetDeletionFailed(f"delete failed for {asset_id}: {reason}"))
        self._listener.on_item_failed(asset_id, reason)

    def _drop(self, asset_id: str) -> None:
        self._cache.evict(asset_id)
        before = self._store.current()
        if self._store.discard(asset_id) is None:
            logger.debug("Deleted asset {} already left the queue", asset_id)
            return
        logger.info("Deleted {} ({} remaining)", asset_id, len(self._store))

        current: Asset | None = self._store.current()
        if current is not None and current is before:
            return
        self._listener.on_current_changed(current)
        if current is None:
            self._listener.on_queue_exhausted()
            return
        self._cache.request(current)
