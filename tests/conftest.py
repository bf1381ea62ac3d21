"""Shared fakes for the triage pipeline tests.

The fakes stand in for the photo library, the classifier, the file system
and the task runner so that ordering and failure cases can be driven
explicitly without Qt.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Sequence
from datetime import datetime, timedelta
from typing import Any

import pytest

from core.errors import AssetCreationFailed
from core.models import Asset, Classification, ClassificationResult, PermissionState
from core.services.asset_store import AssetStore
from core.services.classification_cache import ClassificationCache
from core.services.interfaces import DeleteResult, TriageListener


def make_asset(asset_id: str, age_days: int = 0) -> Asset:
    return Asset(
        asset_id=asset_id,
        pixel_width=640,
        pixel_height=480,
        creation_date=datetime(2024, 1, 31) - timedelta(days=age_days),
    )


class ManualRunner:
    """Task runner that holds jobs until a test completes them."""

    def __init__(self) -> None:
        self.jobs: list[tuple[Callable[[], Any], Callable[[Any, BaseException | None], None]]] = []

    def submit(self, work, done) -> None:
        self.jobs.append((work, done))

    def run(self, index: int) -> None:
        work, done = self.jobs[index]
        try:
            result = work()
        except Exception as ex:
            done(None, ex)
            return
        done(result, None)

    def run_all(self) -> None:
        for i in range(len(self.jobs)):
            self.run(i)

    def resolve(self, index: int, result: Any, error: BaseException | None = None) -> None:
        """Deliver a completion without running the job's work."""
        _, done = self.jobs[index]
        done(result, error)


class FakeClassifier:
    def __init__(self) -> None:
        self.calls: list[bytes] = []
        self.error: Exception | None = None
        self.return_none = False

    def classify(self, image_data: bytes, width: int, height: int) -> Classification | None:
        self.calls.append(image_data)
        if self.error is not None:
            raise self.error
        if self.return_none:
            return None
        return Classification(label=f"label:{image_data.decode()}", confidence=0.9)


class FakeSource:
    """In-memory asset source."""

    def __init__(self, assets: Sequence[Asset] = ()) -> None:
        self.assets = list(assets)
        self.deleted: list[str] = []
        self.fail_delete: set[str] = set()
        self.status = PermissionState.GRANTED
        self.grant_on_request: PermissionState = PermissionState.GRANTED
        self.permission_requests = 0
        self.fetches = 0

    def fetch_all(self) -> list[Asset]:
        self.fetches += 1
        return list(self.assets)

    def delete(self, asset_ids: Sequence[str]) -> DeleteResult:
        result = DeleteResult()
        for asset_id in asset_ids:
            if asset_id in self.fail_delete:
                result.failed.append((asset_id, "locked by owner"))
            else:
                self.deleted.append(asset_id)
                result.success_ids.append(asset_id)
        return result

    def create(self, image_data: bytes) -> Asset:
        text = image_data.decode()
        if not text.startswith("asset:"):
            raise AssetCreationFailed(f"cannot decode {text}")
        return make_asset(text.split(":", 1)[1])

    def load_image(self, asset: Asset, width: int, height: int) -> bytes:
        return asset.asset_id.encode()

    def permission_status(self) -> PermissionState:
        return self.status

    def request_permission(self, callback: Callable[[PermissionState], None]) -> None:
        self.permission_requests += 1
        self.status = self.grant_on_request
        callback(self.status)


class FakeFolders:
    """Folder source over a fixed list of files with byte contents."""

    def __init__(self, files: dict[str, bytes | Exception]) -> None:
        self.files = files
        self.readable = True
        self.scope_grants = False
        self.acquired: list[str] = []
        self.released: list[str] = []
        self.reads: list[str] = []

    def enumerate(self, root: str) -> Iterator[str]:
        yield from self.files

    def read_file(self, path: str) -> bytes:
        self.reads.append(path)
        content = self.files[path]
        if isinstance(content, Exception):
            raise content
        return content

    def is_readable(self, path: str) -> bool:
        return self.readable

    def acquire_scoped_access(self, path: str) -> bool:
        self.acquired.append(path)
        if self.scope_grants:
            self.readable = True
        return self.scope_grants

    def release_scoped_access(self, path: str) -> None:
        self.released.append(path)


class RecordingListener(TriageListener):
    def __init__(self) -> None:
        self.events: list[tuple[Any, ...]] = []

    def on_queue_exhausted(self) -> None:
        self.events.append(("exhausted",))

    def on_current_changed(self, asset: Asset | None) -> None:
        self.events.append(("current", asset.asset_id if asset else None))

    def on_classification_updated(self, result: ClassificationResult) -> None:
        self.events.append(("classification", result.asset_id, result.state.value, result.label))

    def on_permission_needed(self, message: str) -> None:
        self.events.append(("permission", message))

    def on_folder_access_denied(self, message: str) -> None:
        self.events.append(("folder_denied", message))

    def on_item_failed(self, item: str, reason: str) -> None:
        self.events.append(("failed", item, reason))

    def of(self, kind: str) -> list[tuple[Any, ...]]:
        return [e for e in self.events if e[0] == kind]


@pytest.fixture
def runner() -> ManualRunner:
    return ManualRunner()


@pytest.fixture
def classifier() -> FakeClassifier:
    return FakeClassifier()


@pytest.fixture
def listener() -> RecordingListener:
    return RecordingListener()


@pytest.fixture
def source() -> FakeSource:
    return FakeSource()


@pytest.fixture
def cache(source, classifier, runner, listener) -> ClassificationCache:
    return ClassificationCache(source, classifier, runner, listener)


@pytest.fixture
def abc_store() -> AssetStore:
    return AssetStore([make_asset("A"), make_asset("B", 1), make_asset("C", 2)])
