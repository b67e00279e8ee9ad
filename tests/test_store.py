"""Tests for the in-memory and JSON file batch stores."""

from __future__ import annotations

from pathlib import Path

import pytest  # type: ignore

from conftest import CANDIDATE_A, CANDIDATE_B, TODAY, make_batch

from cvrank.errors import BatchNotFoundError, PersistenceError
from cvrank.rank.ranker import BatchRanker
from cvrank.rank.schema import Batch, BatchStatus
from cvrank.store import InMemoryBatchStore, JsonFileBatchStore


@pytest.fixture(params=["memory", "json"])
def store(request, tmp_path: Path):
    if request.param == "memory":
        return InMemoryBatchStore()
    return JsonFileBatchStore(tmp_path / "batches")


@pytest.fixture
def ranked_batch(ruleset, settings) -> Batch:
    batch = make_batch([CANDIDATE_A, CANDIDATE_B])
    return BatchRanker(ruleset, settings, today=TODAY).rank(batch)


def test_save_and_load_ranked_batch(store, ranked_batch) -> None:
    store.save_batch(ranked_batch)
    loaded = store.load_batch(ranked_batch.id)
    assert loaded.to_dict() == ranked_batch.to_dict()
    assert loaded.status is BatchStatus.COMPLETED
    assert loaded.candidates[0].document.text == CANDIDATE_A


def test_save_is_an_upsert(store) -> None:
    batch = make_batch([CANDIDATE_A])
    store.save_batch(batch)
    batch.name = "Renamed"
    store.save_batch(batch)
    assert store.load_batch(batch.id).name == "Renamed"
    assert len(store.list_batches()) == 1


def test_stored_batch_is_a_snapshot(store) -> None:
    batch = make_batch([CANDIDATE_A])
    store.save_batch(batch)
    batch.name = "Changed after save"
    assert store.load_batch(batch.id).name == "Test batch"


def test_missing_batch(store) -> None:
    with pytest.raises(BatchNotFoundError):
        store.load_batch("nope")
    with pytest.raises(KeyError):
        store.load_batch("nope")
    with pytest.raises(BatchNotFoundError):
        store.delete_batch("nope")


def test_list_and_delete(store) -> None:
    first = make_batch([CANDIDATE_A], batch_id="b1")
    second = make_batch([CANDIDATE_B], batch_id="b2")
    first.created_at = "2024-01-01T00:00:00+00:00"
    second.created_at = "2024-01-02T00:00:00+00:00"
    store.save_batch(second)
    store.save_batch(first)
    assert [b.id for b in store.list_batches()] == ["b1", "b2"]
    store.delete_batch("b1")
    assert [b.id for b in store.list_batches()] == ["b2"]


def test_json_store_writes_one_file_per_batch(tmp_path: Path) -> None:
    store = JsonFileBatchStore(tmp_path)
    store.save_batch(make_batch([CANDIDATE_A], batch_id="abc"))
    assert sorted(p.name for p in tmp_path.iterdir()) == ["abc.json"]


def test_json_store_corrupt_file(tmp_path: Path) -> None:
    (tmp_path / "broken.json").write_text("{not json", encoding="utf-8")
    with pytest.raises(PersistenceError):
        JsonFileBatchStore(tmp_path).load_batch("broken")


def test_json_store_write_failure(tmp_path: Path) -> None:
    blocker = tmp_path / "file"
    blocker.write_text("", encoding="utf-8")
    store = JsonFileBatchStore(blocker / "sub")
    with pytest.raises(PersistenceError):
        store.save_batch(make_batch([CANDIDATE_A]))


def test_json_store_rejects_path_like_ids(tmp_path: Path) -> None:
    store = JsonFileBatchStore(tmp_path)
    with pytest.raises(BatchNotFoundError):
        store.load_batch("../etc/passwd")
    with pytest.raises(PersistenceError):
        store.save_batch(make_batch([CANDIDATE_A], batch_id="../x"))
