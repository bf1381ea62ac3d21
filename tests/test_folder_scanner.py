"""Tests for folder imports: filtering, access policy and failure isolation."""

from __future__ import annotations

import pytest

from conftest import FakeFolders, make_asset
from core.errors import FolderAccessDenied
from core.services.asset_store import AssetStore
from core.services.folder_scanner import FolderScanner, has_image_extension
from core.services.import_merger import ImportMerger
from core.services.runners import ImmediateRunner


def _scanner(folders, source, cache, listener, runner=None, store=None):
    store = store if store is not None else AssetStore()
    merger = ImportMerger(store, cache, listener)
    scanner = FolderScanner(folders, source, merger, runner or ImmediateRunner(), listener)
    return scanner, store


def test_has_image_extension() -> None:
    assert has_image_extension("/x/IMG_0001.JPG")
    assert has_image_extension("/x/photo.heic")
    assert not has_image_extension("/x/notes.txt")
    assert not has_image_extension("/x/README")


def test_scan_yields_only_images_lazily(source, cache, listener) -> None:
    folders = FakeFolders(
        {"/r/a.jpg": b"asset:a", "/r/b.txt": b"text", "/r/sub/c.PNG": b"asset:c"}
    )
    scanner, _ = _scanner(folders, source, cache, listener)

    paths = scanner.scan("/r")

    assert next(paths) == "/r/a.jpg"
    assert list(paths) == ["/r/sub/c.PNG"]
    assert folders.reads == []


def test_import_folder_merges_each_created_asset(source, cache, listener) -> None:
    folders = FakeFolders({"/r/a.jpg": b"asset:a", "/r/b.png": b"asset:b", "/r/x.txt": b""})
    finished = []
    scanner, store = _scanner(folders, source, cache, listener)

    report = scanner.import_folder("/r", on_finished=finished.append)

    assert report.finished
    assert report.files_seen == 2
    assert report.imported_ids == ["a", "b"]
    assert report.failed == []
    assert [a.asset_id for a in store.assets()] == ["a", "b"]
    assert finished == [report]
    assert folders.acquired == []


def test_single_file_failures_do_not_abort_scan(source, cache, listener) -> None:
    folders = FakeFolders(
        {
            "/r/a.jpg": b"asset:a",
            "/r/broken.jpg": OSError("read error"),
            "/r/garbage.png": b"not an image",
            "/r/d.jpg": b"asset:d",
        }
    )
    scanner, store = _scanner(folders, source, cache, listener)

    report = scanner.import_folder("/r")

    assert report.imported_ids == ["a", "d"]
    assert [path for path, _ in report.failed] == ["/r/broken.jpg", "/r/garbage.png"]
    assert [e[1] for e in listener.of("failed")] == ["/r/broken.jpg", "/r/garbage.png"]
    assert [a.asset_id for a in store.assets()] == ["a", "d"]


def test_already_queued_asset_is_not_reported_as_imported(source, cache, listener) -> None:
    folders = FakeFolders({"/r/a.jpg": b"asset:a", "/r/b.jpg": b"asset:b"})
    store = AssetStore([make_asset("a")])
    scanner, _ = _scanner(folders, source, cache, listener, store=store)

    report = scanner.import_folder("/r")

    assert report.imported_ids == ["b"]
    assert [a.asset_id for a in store.assets()] == ["a", "b"]


def test_unreadable_root_without_scoped_access_is_denied(source, cache, listener) -> None:
    folders = FakeFolders({"/r/a.jpg": b"asset:a"})
    folders.readable = False
    scanner, store = _scanner(folders, source, cache, listener)

    with pytest.raises(FolderAccessDenied) as excinfo:
        scanner.import_folder("/r")

    assert excinfo.value.path == "/r"
    assert folders.acquired == ["/r"]
    assert folders.reads == []
    assert store.is_empty
    assert len(listener.of("folder_denied")) == 1


def test_scoped_access_is_acquired_and_released(source, cache, listener) -> None:
    folders = FakeFolders({"/r/a.jpg": b"asset:a"})
    folders.readable = False
    folders.scope_grants = True
    scanner, store = _scanner(folders, source, cache, listener)

    report = scanner.import_folder("/r")

    assert report.imported_ids == ["a"]
    assert folders.acquired == ["/r"]
    assert folders.released == ["/r"]


def test_background_import_finishes_after_last_file(source, cache, listener, runner) -> None:
    folders = FakeFolders({"/r/a.jpg": b"asset:a", "/r/b.jpg": b"asset:b"})
    folders.readable = False
    folders.scope_grants = True
    finished = []
    scanner, store = _scanner(folders, source, cache, listener, runner=runner)

    report = scanner.import_folder("/r", on_finished=finished.append)

    assert report.files_seen == 2
    assert not report.finished
    assert folders.released == []

    runner.run(1)
    assert [a.asset_id for a in store.assets()] == ["b"]
    assert not report.finished

    runner.run(0)
    assert report.finished
    assert finished == [report]
    assert folders.released == ["/r"]
    assert [a.asset_id for a in store.assets()] == ["b", "a"]


def test_first_import_into_empty_queue_classifies_once(source, cache, listener, runner) -> None:
    folders = FakeFolders({"/r/a.jpg": b"asset:a", "/r/b.jpg": b"asset:b"})
    scanner, _ = _scanner(folders, source, cache, listener)

    scanner.import_folder("/r")

    classification_requests = [e for e in listener.of("classification") if e[2] == "pending"]
    assert classification_requests == [("classification", "a", "pending", None)]
    assert len(runner.jobs) == 1
