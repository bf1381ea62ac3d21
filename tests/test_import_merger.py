"""Tests for deduplicating merges into the triage queue."""

from __future__ import annotations

from conftest import make_asset
from core.services.asset_store import AssetStore
from core.services.import_merger import ImportMerger


def _ids(store: AssetStore) -> list[str]:
    return [a.asset_id for a in store.assets()]


def test_merge_appends_only_unseen_assets_in_order(abc_store, cache, runner) -> None:
    """[A,B,C] merged with [D,A,E] appends D then E."""

    merger = ImportMerger(abc_store, cache)

    appended = merger.merge([make_asset("D"), make_asset("A"), make_asset("E")])

    assert [a.asset_id for a in appended] == ["D", "E"]
    assert _ids(abc_store) == ["A", "B", "C", "D", "E"]
    assert runner.jobs == []


def test_merge_is_idempotent(abc_store, cache) -> None:
    merger = ImportMerger(abc_store, cache)
    incoming = [make_asset("D"), make_asset("E")]

    merger.merge(incoming)
    before = _ids(abc_store)
    assert merger.merge(incoming) == []
    assert _ids(abc_store) == before


def test_merge_collapses_duplicates_within_incoming(cache) -> None:
    store = AssetStore()
    ImportMerger(store, cache).merge([make_asset("A"), make_asset("A"), make_asset("B")])
    assert _ids(store) == ["A", "B"]


def test_first_merge_into_empty_queue_classifies_current_once(cache, runner, listener) -> None:
    store = AssetStore()
    merger = ImportMerger(store, cache, listener)

    merger.merge([make_asset("A"), make_asset("B"), make_asset("C")])

    assert len(runner.jobs) == 1
    assert cache.peek("A") is not None
    assert cache.peek("B") is None
    assert listener.of("current") == [("current", "A")]


def test_merge_into_non_empty_queue_keeps_cursor(abc_store, cache, listener) -> None:
    abc_store.advance()
    ImportMerger(abc_store, cache, listener).merge([make_asset("D")])
    assert abc_store.current().asset_id == "B"
    assert listener.of("current") == []


def test_merge_of_nothing_new_does_not_classify(cache, runner) -> None:
    store = AssetStore()
    assert ImportMerger(store, cache).merge([]) == []
    assert runner.jobs == []
