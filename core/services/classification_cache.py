"""Per-asset classification memoization with stale-result protection.

Every request for an asset gets a token from a single monotonically
increasing counter. Completions are applied only when their token is still
the latest one recorded for the asset, so a slow result for a superseded
request can never overwrite a newer one. Superseding is the only form of
cancellation.
"""

from __future__ import annotations

from itertools import count

from loguru import logger

from core.errors import ClassificationFailed
from core.models import (
    Asset,
    Classification,
    ClassificationResult,
    ClassificationState,
)
from core.services.interfaces import AssetSource, Classifier, TaskRunner, TriageListener

DEFAULT_TARGET_SIZE = (224, 224)


class ClassificationCache:
    """Caches classification results per asset id.

    All methods must be called on the owner thread; the task runner delivers
    completions there.
    """

    def __init__(
        self,
        source: AssetSource,
        classifier: Classifier,
        runner: TaskRunner,
        listener: TriageListener | None = None,
        target_size: tuple[int, int] = DEFAULT_TARGET_SIZE,
    ) -> None:
        self._source = source
        self._classifier = classifier
        self._runner = runner
        self._listener = listener or TriageListener()
        self._width, self._height = target_size
        self._tokens = count(1)
        self._entries: dict[str, ClassificationResult] = {}

    def request(self, asset: Asset, force: bool = False) -> ClassificationResult:
        """Return the cached entry for `asset` or issue a new classification.

        Pending and resolved entries are reused unless `force` is set; failed
        entries are always retried with a new token.
        """
        entry = self._entries.get(asset.asset_id)
        if (
            not force
            and entry is not None
            and entry.state in (ClassificationState.PENDING, ClassificationState.RESOLVED)
        ):
            return entry

        token = next(self._tokens)
        entry = ClassificationResult(asset_id=asset.asset_id, token=token)
        self._entries[asset.asset_id] = entry
        logger.debug("Classify {} (token {})", asset.asset_id, token)
        self._listener.on_classification_updated(entry)

        def work() -> Classification | None:
            data = self._source.load_image(asset, self._width, self._height)
            return self._classifier.classify(data, self._width, self._height)

        def done(result: Classification | None, error: BaseException | None) -> None:
            self._complete(asset.asset_id, token, result, error)

        self._runner.submit(work, done)
        # The runner may have completed inline
        return self._entries.get(asset.asset_id, entry)

    def peek(self, asset_id: str) -> ClassificationResult | None:
        return self._entries.get(asset_id)

    def latest_token(self, asset_id: str) -> int | None:
        entry = self._entries.get(asset_id)
        return entry.token if entry is not None else None

    def evict(self, asset_id: str) -> None:
        """Forget `asset_id`; in-flight results for it will be discarded."""
        self._entries.pop(asset_id, None)

    def clear(self) -> None:
        self._entries.clear()

    def _complete(
        self,
        asset_id: str,
        token: int,
        result: Classification | None,
        error: BaseException | None,
    ) -> None:
        if self.latest_token(asset_id) != token:
            logger.debug("Discard stale classification for {} (token {})", asset_id, token)
            return

        if error is None and result is None:
            error = ClassificationFailed("classifier returned no result")

        if error is not None:
            logger.warning("Classification failed for {}: {}", asset_id, error)
            entry = ClassificationResult(
                asset_id=asset_id,
                token=token,
                state=ClassificationState.FAILED,
                error=str(error) or type(error).__name__,
            )
        else:
            assert result is not None
            entry = ClassificationResult(
                asset_id=asset_id,
                token=token,
                state=ClassificationState.RESOLVED,
                label=result.label,
                confidence=min(1.0, max(0.0, float(result.confidence))),
            )
        self._entries[asset_id] = entry
        self._listener.on_classification_updated(entry)
