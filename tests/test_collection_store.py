# -*- coding: utf-8 -*-
import json

import pytest

from mountdex.collection.storage import JsonFileStorage, MemoryStorage
from mountdex.collection.store import CollectionState, CollectionStore, percentage
from mountdex.config.loader import DEFAULT_STORAGE_KEY
from mountdex.errors import StorageError

from conftest import FIXED_NOW, CountingStorage, FailingStorage, make_mount


def test_toggle_is_its_own_inverse(store):
    assert store.toggle("a") is True
    assert store.toggle("a") is False
    assert not store.is_owned("a")


def test_every_mutation_persists_blob(store, storage):
    store.toggle("b")
    store.toggle("a")
    blob = json.loads(storage.get_item(DEFAULT_STORAGE_KEY))
    assert blob["ownedMountIds"] == ["a", "b"]
    assert blob["lastUpdated"] == FIXED_NOW
    assert storage.writes == 2


def test_set_bulk_single_write_and_stats(store, storage):
    mounts = [make_mount("a", "X"), make_mount("b", "Y"), make_mount("c", "X"), make_mount("d", "Y")]
    assert store.set_bulk(["a", "b", "c"], True) == 3
    assert storage.writes == 1
    stats = store.stats(mounts)
    assert stats["global"] == {"total": 4, "owned": 3, "percentage": 75}
    assert stats["byClassification"]["X"] == {"total": 2, "owned": 2, "percentage": 100}
    assert stats["byClassification"]["Y"] == {"total": 2, "owned": 1, "percentage": 50}


def test_set_bulk_without_change_skips_write(store, storage):
    store.set_bulk(["a"], True)
    assert store.set_bulk(["a"], True) == 0
    assert store.set_bulk(["z"], False) == 0
    assert storage.writes == 1


def test_stats_ignores_owned_ids_missing_from_dataset(store):
    store.set_bulk(["a", "ghost"], True)
    stats = store.stats([make_mount("a", "X"), make_mount("b", "X")])
    assert stats["global"]["owned"] == 1


def test_reconcile_drops_invalid_and_writes_once(store, storage):
    store.set_bulk(["a", "c"], True)
    assert storage.writes == 1
    assert store.reconcile(["a", "b"]) == ["c"]
    assert store.owned_ids() == ["a"]
    assert storage.writes == 2
    assert store.reconcile(["a", "b"]) == []
    assert store.owned_ids() == ["a"]
    assert storage.writes == 2


def test_reconcile_prunes_notes_and_clears_undo(store):
    store.set_bulk(["a", "c"], True)
    store.set_note("c", "farm weekly")
    assert store.can_undo()
    store.reconcile(["a"])
    assert store.note("c") is None
    assert not store.can_undo()


def test_percentage_rounds_half_up():
    assert percentage(0, 0) == 0
    assert percentage(1, 3) == 33
    assert percentage(2, 3) == 67
    assert percentage(1, 8) == 13
    assert percentage(5, 5) == 100


def test_legacy_array_blob_is_read():
    storage = MemoryStorage({DEFAULT_STORAGE_KEY: json.dumps(["a", "b", "a"])})
    store = CollectionStore(storage)
    assert store.owned_ids() == ["a", "b"]


def test_corrupt_blob_starts_empty():
    store = CollectionStore(MemoryStorage({DEFAULT_STORAGE_KEY: "{not json"}))
    assert store.owned_ids() == []


def test_custom_storage_key():
    storage = CountingStorage()
    store = CollectionStore(storage, key="other.key")
    store.toggle("a")
    assert storage.get_item("other.key") is not None
    assert storage.get_item(DEFAULT_STORAGE_KEY) is None


def test_storage_failure_is_not_fatal():
    store = CollectionStore(FailingStorage())
    assert store.toggle("a") is True
    assert store.is_owned("a")
    assert isinstance(store.last_storage_error, StorageError)


def test_storage_error_clears_after_successful_write(storage):
    store = CollectionStore(storage)
    store.last_storage_error = StorageError("earlier")
    store.toggle("a")
    assert store.last_storage_error is None


def test_undo_single_level(store):
    store.toggle("a")
    store.set_bulk(["b", "c"], True)
    assert store.undo() is True
    assert store.owned_ids() == ["a"]
    assert store.undo() is False


def test_notes_set_clear_and_persist(store, storage):
    store.set_note("a", "  from the vendor  ")
    assert store.note("a") == "from the vendor"
    blob = json.loads(storage.get_item(DEFAULT_STORAGE_KEY))
    assert blob["notes"] == {"a": "from the vendor"}
    store.set_note("a", "")
    assert store.note("a") is None


def test_state_survives_new_store_instance(storage):
    CollectionStore(storage).set_bulk(["x", "y"], True)
    assert CollectionStore(storage).owned_ids() == ["x", "y"]


def test_state_blob_roundtrip():
    state = CollectionState(owned_ids=frozenset({"b", "a"}), last_updated=FIXED_NOW, data_version=2, notes={"a": "n"})
    assert CollectionState.from_blob(state.to_blob()) == state


def test_json_file_storage(tmp_path):
    path = tmp_path / "nested" / "collection.json"
    fs = JsonFileStorage(path)
    assert fs.get_item("k") is None
    fs.set_item("k", "v")
    fs.set_item("k2", "w")
    assert fs.get_item("k") == "v"
    assert json.loads(path.read_text(encoding="utf-8")) == {"k": "v", "k2": "w"}


def test_json_file_storage_bad_file(tmp_path):
    path = tmp_path / "collection.json"
    path.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(StorageError):
        JsonFileStorage(path).get_item("k")


def test_corrupt_storage_file_is_replaced_on_next_save(tmp_path):
    path = tmp_path / "collection.json"
    path.write_text("{not json", encoding="utf-8")
    store = CollectionStore(JsonFileStorage(path), clock=lambda: FIXED_NOW)
    assert store.last_storage_error is not None
    assert store.owned_ids() == []

    store.toggle("a")
    store.toggle("b")
    assert store.last_storage_error is None
    assert (tmp_path / "collection.json.bak").read_text(encoding="utf-8") == "{not json"

    reopened = CollectionStore(JsonFileStorage(path))
    assert reopened.owned_ids() == ["a", "b"]
