# -*- coding: utf-8 -*-
import json

import pytest

from mountdex.collection.transfer import (
    DEFAULT_FILENAME,
    SCHEMA,
    export_collection,
    import_collection,
    parse_collection_file,
    read_collection_file,
    write_collection_file,
)
from mountdex.errors import FormatError, StorageError

VALID = ["a", "b", "c", "d"]


def _file(**overrides):
    doc = {
        "schema": SCHEMA,
        "schemaVersion": 1,
        "exportedAtUtc": "2026-10-01T00:00:00.000Z",
        "datasetDataVersion": 3,
        "owned": ["a"],
        "notes": {},
    }
    doc.update(overrides)
    return doc


def test_export_sorts_owned_ids(store):
    store.set_bulk(["c", "a", "b"], True)
    cfile = export_collection(store.state(), 7, exported_at="2026-10-01T00:00:00.000Z")
    doc = cfile.to_dict()
    assert list(doc) == ["schema", "schemaVersion", "exportedAtUtc", "datasetDataVersion", "owned", "notes"]
    assert doc["schema"] == "mop-mounts.user-collection"
    assert doc["schemaVersion"] == 1
    assert doc["datasetDataVersion"] == 7
    assert doc["owned"] == ["a", "b", "c"]


def test_export_import_roundtrip(store):
    store.set_bulk(["b", "a"], True)
    store.set_note("a", "first")
    text = export_collection(store.state(), 3).to_json()
    store.replace([])
    result = import_collection(store, text, VALID)
    assert list(result.accepted_ids) == ["a", "b"]
    assert result.dropped_ids == ()
    assert store.owned_ids() == ["a", "b"]
    assert store.note("a") == "first"


def test_import_replaces_instead_of_merging(store):
    store.set_bulk(["c", "d"], True)
    import_collection(store, _file(owned=["a"]), VALID)
    assert store.owned_ids() == ["a"]


def test_import_reports_unknown_ids_in_file_order(store):
    result = import_collection(store, _file(owned=["zz", "a", "yy", "a", "zz"]), VALID)
    assert result.accepted_ids == ("a",)
    assert result.dropped_ids == ("zz", "yy")
    assert result.to_dict() == {"acceptedIds": ["a"], "droppedIds": ["zz", "yy"]}


def test_import_drops_notes_for_unknown_ids(store):
    import_collection(store, _file(owned=["a"], notes={"a": "keep", "zz": "drop"}), VALID)
    assert store.note("a") == "keep"
    assert store.note("zz") is None


def test_import_keeps_notes_only_for_owned_ids(store):
    import_collection(store, _file(owned=["a"], notes={"a": "x", "b": "not owned"}), VALID)
    assert store.state().notes == {"a": "x"}
    doc = export_collection(store.state(), 3).to_dict()
    assert doc["notes"] == {"a": "x"}


def test_import_is_undoable(store):
    store.set_bulk(["c"], True)
    import_collection(store, _file(owned=["a"]), VALID)
    assert store.undo()
    assert store.owned_ids() == ["c"]


def test_unsupported_version_leaves_state_unchanged(store, storage):
    store.set_bulk(["c"], True)
    before = store.state()
    writes = storage.writes
    with pytest.raises(FormatError, match="Unsupported schema version 2. Expected version 1."):
        import_collection(store, _file(schemaVersion=2), VALID)
    assert store.state() is before
    assert storage.writes == writes


def test_wrong_schema_tag_is_rejected():
    with pytest.raises(FormatError, match="Invalid file format. Expected mop-mounts collection file."):
        parse_collection_file(_file(schema="something-else"))


def test_schema_tag_checked_before_version():
    with pytest.raises(FormatError, match="Invalid file format"):
        parse_collection_file({"schema": "nope", "schemaVersion": 2})


@pytest.mark.parametrize("version", [True, "1", None, 0])
def test_version_must_be_integer_one(version):
    with pytest.raises(FormatError, match="Unsupported schema version"):
        parse_collection_file(_file(schemaVersion=version))


@pytest.mark.parametrize(
    "raw",
    ["{not json", json.dumps([1, 2]), json.dumps(_file(owned="a")), json.dumps(_file(owned=[1])), json.dumps(_file(notes=[])), json.dumps(_file(notes=""))],
)
def test_malformed_files_are_rejected(raw):
    with pytest.raises(FormatError):
        parse_collection_file(raw)


def test_parse_accepts_bytes():
    cfile = parse_collection_file(json.dumps(_file()).encode("utf-8"))
    assert cfile.owned == ("a",)
    assert cfile.dataset_data_version == 3


def test_write_and_read_file(tmp_path, store):
    store.set_bulk(["b"], True)
    path = write_collection_file(tmp_path, export_collection(store.state(), 1))
    assert path.name == DEFAULT_FILENAME
    assert read_collection_file(path).owned == ("b",)


def test_read_missing_file_is_format_error(tmp_path):
    with pytest.raises(FormatError):
        read_collection_file(tmp_path / "missing.json")


def test_write_to_unwritable_path_is_storage_error(tmp_path, store):
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")
    with pytest.raises(StorageError, match="Failed to write collection file"):
        write_collection_file(blocker / "out.json", export_collection(store.state(), 1))
