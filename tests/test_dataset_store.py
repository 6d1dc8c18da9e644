# -*- coding: utf-8 -*-
import json
import os

import pytest

from mountdex.dataset import DatasetStore, parse_dataset
from mountdex.errors import LoadError

from conftest import SAMPLE_ROWS, write_dataset


def test_load_reads_meta(dataset_path):
    ds = DatasetStore(dataset_path)
    assert ds.load() is True
    snap = ds.snapshot()
    assert len(snap) == len(SAMPLE_ROWS)
    assert snap.data_version == 3
    assert snap.generated_at_utc == "2026-09-30T12:00:00.000Z"
    assert snap.source == str(dataset_path)


def test_load_is_cached_until_file_changes(dataset_path):
    ds = DatasetStore(dataset_path)
    assert ds.load() is True
    assert ds.load() is False
    assert ds.load(force=True) is True

    write_dataset(dataset_path.parent, SAMPLE_ROWS[:2])
    st = dataset_path.stat()
    os.utime(dataset_path, (st.st_atime, st.st_mtime + 5))
    assert ds.load() is True
    assert len(ds.snapshot()) == 2


def test_snapshot_loads_on_first_use(dataset_path):
    ds = DatasetStore(dataset_path)
    assert not ds.is_loaded()
    assert len(ds.snapshot()) == len(SAMPLE_ROWS)
    assert ds.is_loaded()


def test_missing_file_raises(tmp_path):
    with pytest.raises(LoadError, match="not found"):
        DatasetStore(tmp_path / "nope.json").load()


def test_failed_reload_keeps_previous_snapshot(dataset_path):
    ds = DatasetStore(dataset_path)
    ds.load()
    before = ds.snapshot()
    dataset_path.write_text("{broken", encoding="utf-8")
    with pytest.raises(LoadError):
        ds.load(force=True)
    assert ds.snapshot() is before


def test_bad_meta_raises(tmp_path):
    path = write_dataset(tmp_path, SAMPLE_ROWS)
    (tmp_path / "dataset.meta.json").write_text("[]", encoding="utf-8")
    with pytest.raises(LoadError):
        DatasetStore(path).load()


def test_object_form_and_version_fallbacks():
    snap = parse_dataset({"dataVersion": 5, "mounts": SAMPLE_ROWS[:1]})
    assert snap.data_version == 5
    snap = parse_dataset(SAMPLE_ROWS)
    assert snap.data_version == 3
    snap = parse_dataset(SAMPLE_ROWS, {"dataVersion": 9})
    assert snap.data_version == 9


def test_non_list_dataset_raises():
    with pytest.raises(LoadError):
        parse_dataset({"items": []})
    with pytest.raises(LoadError):
        parse_dataset(SAMPLE_ROWS, {"dataVersion": "abc"})


def test_invalid_record_fails_whole_load(tmp_path):
    rows = SAMPLE_ROWS[:2] + [{"id": "broken"}]
    path = write_dataset(tmp_path, rows)
    with pytest.raises(LoadError, match="broken"):
        DatasetStore(path).load()


def test_shipped_dataset_loads():
    from pathlib import Path

    root = Path(__file__).resolve().parents[1]
    ds = DatasetStore(root / "data" / "mounts.json")
    ds.load()
    snap = ds.snapshot()
    assert len(snap) == len(json.loads((root / "data" / "mounts.json").read_text(encoding="utf-8")))
    assert snap.data_version == 3
