# -*- coding: utf-8 -*-
import pytest

from mountdex.errors import LoadError
from mountdex.schemas.meta import build_meta, utc_now_iso
from mountdex.schemas.mount import ID_PATTERN, DatasetSnapshot, Mount

from conftest import SAMPLE_ROWS


def test_from_dict_maps_camel_case_keys():
    m = Mount.from_dict(SAMPLE_ROWS[3])
    assert m.id == "mekgineers-chopper"
    assert m.source_type == "Crafting"
    assert m.profession_req == "Engineering (450)"
    assert m.tags == ("crafted",)
    assert m.zone is None
    assert m.classification == "Wrath of the Lich King"


def test_optional_fields_are_explicit_nones():
    m = Mount.from_dict(SAMPLE_ROWS[5])
    assert m.zone is None
    assert m.wowhead_id is None
    assert m.cost is None
    assert m.is_limited_time is False


@pytest.mark.parametrize("missing", ["id", "name", "expansion", "category", "faction", "sourceType"])
def test_missing_required_key_raises(missing):
    row = dict(SAMPLE_ROWS[0])
    del row[missing]
    with pytest.raises(LoadError):
        Mount.from_dict(row)


def test_non_object_entry_raises():
    with pytest.raises(LoadError):
        Mount.from_dict(["not", "a", "mount"])  # type: ignore[arg-type]


def test_to_dict_omits_absent_optionals():
    out = Mount.from_dict(SAMPLE_ROWS[1]).to_dict()
    assert out["sourceType"] == "Drop"
    assert out["wowheadId"] == 13335
    assert "zone" in out
    assert "cost" not in out
    assert "isLimitedTime" not in out


def test_snapshot_keeps_order():
    snap = DatasetSnapshot.from_records([Mount.from_dict(r) for r in SAMPLE_ROWS], data_version=3)
    assert len(snap) == len(SAMPLE_ROWS)
    assert snap.ids() == [r["id"] for r in SAMPLE_ROWS]


def test_sample_ids_are_slugs():
    assert all(ID_PATTERN.match(r["id"]) for r in SAMPLE_ROWS)
    assert not ID_PATTERN.match("Bad Id")


def test_utc_now_iso_has_millis_and_z():
    stamp = utc_now_iso()
    assert stamp.endswith("Z")
    assert len(stamp.split(".")[-1]) == 4


def test_build_meta_includes_version():
    meta = build_meta(schema=1, tool="t", sources={"dataset": "x"}, extra={"k": 1})
    assert meta["schema"] == 1
    assert meta["tool"] == "t"
    assert meta["sources"] == {"dataset": "x"}
    assert meta["k"] == 1
    assert meta["project_version"]
