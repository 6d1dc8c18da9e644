# -*- coding: utf-8 -*-
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest

from mountdex.collection.storage import MemoryStorage
from mountdex.collection.store import CollectionStore
from mountdex.dataset import DatasetStore
from mountdex.errors import StorageError
from mountdex.indexers.mount_index import build_index
from mountdex.query import QueryEngine
from mountdex.schemas.mount import DatasetSnapshot, Mount
from mountdex.session import MountSession

FIXED_NOW = "2026-10-01T00:00:00.000Z"

SAMPLE_ROWS: List[Dict[str, Any]] = [
    {
        "id": "swift-zulian-tiger",
        "name": "Swift Zulian Tiger",
        "expansion": "Classic",
        "category": "Ground",
        "faction": "Neutral",
        "sourceType": "Drop",
        "sourceDetail": "High Priest Thekal, Zul'Gurub",
        "zone": "Stranglethorn Vale",
        "tags": ["rare", "raid"],
        "isLimitedTime": True,
        "dataVersion": 1,
    },
    {
        "id": "deathchargers-reins",
        "name": "Deathcharger's Reins",
        "expansion": "Classic",
        "category": "Ground",
        "faction": "Neutral",
        "sourceType": "Drop",
        "sourceDetail": "Lord Aurius Rivendare, Stratholme",
        "zone": "Eastern Plaguelands",
        "wowheadId": 13335,
        "dataVersion": 1,
    },
    {
        "id": "ashes-of-alar",
        "name": "Ashes of Al'ar",
        "expansion": "The Burning Crusade",
        "category": "Flying",
        "faction": "Neutral",
        "sourceType": "Drop",
        "sourceDetail": "Kael'thas Sunstrider, Tempest Keep",
        "zone": "Netherstorm",
        "dataVersion": 2,
    },
    {
        "id": "mekgineers-chopper",
        "name": "Mekgineer's Chopper",
        "expansion": "Wrath of the Lich King",
        "category": "Ground",
        "faction": "Alliance",
        "sourceType": "Crafting",
        "sourceDetail": "Engineering",
        "professionReq": "Engineering (450)",
        "tags": ["crafted"],
        "dataVersion": 2,
    },
    {
        "id": "mechano-hog",
        "name": "Mechano-Hog",
        "expansion": "Wrath of the Lich King",
        "category": "Ground",
        "faction": "Horde",
        "sourceType": "Crafting",
        "sourceDetail": "Engineering",
        "professionReq": "Engineering (450)",
        "tags": ["crafted"],
        "dataVersion": 2,
    },
    {
        "id": "reins-of-the-crimson-cloud-serpent",
        "name": "Reins of the Crimson Cloud Serpent",
        "expansion": "Mists of Pandaria",
        "category": "Flying",
        "faction": "Neutral",
        "sourceType": "Achievement",
        "sourceDetail": "Glory of the Pandaria Raider",
        "dataVersion": 3,
    },
    {
        "id": "grand-expedition-yak",
        "name": "Grand Expedition Yak",
        "expansion": "Mists of Pandaria",
        "category": "Ground",
        "faction": "Neutral",
        "sourceType": "Vendor",
        "sourceDetail": "Uncle Bigpocket",
        "zone": "Kun-Lai Summit",
        "cost": "120,000 gold",
        "dataVersion": 3,
    },
]

SAMPLE_META = {"dataVersion": 3, "generatedAtUtc": "2026-09-30T12:00:00.000Z"}


def make_mount(mount_id: str, expansion: str = "X", **kw: Any) -> Mount:
    defaults: Dict[str, Any] = {
        "name": mount_id.replace("-", " ").title(),
        "category": "Ground",
        "faction": "Neutral",
        "source_type": "Drop",
    }
    defaults.update(kw)
    return Mount(id=mount_id, expansion=expansion, **defaults)


def write_dataset(folder: Path, rows: List[Dict[str, Any]], meta: Optional[Dict[str, Any]] = None) -> Path:
    folder.mkdir(parents=True, exist_ok=True)
    path = folder / "mounts.json"
    path.write_text(json.dumps(rows), encoding="utf-8")
    if meta is not None:
        (folder / "dataset.meta.json").write_text(json.dumps(meta), encoding="utf-8")
    return path


class CountingStorage(MemoryStorage):
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        super().__init__(initial)
        self.writes = 0

    def set_item(self, key: str, value: str) -> None:
        self.writes += 1
        super().set_item(key, value)


class FailingStorage:
    """Reads fine (empty), every write fails."""

    def get_item(self, key: str) -> Optional[str]:
        return None

    def set_item(self, key: str, value: str) -> None:
        raise StorageError("quota exceeded")


@pytest.fixture
def sample_snapshot() -> DatasetSnapshot:
    return DatasetSnapshot.from_records([Mount.from_dict(r) for r in SAMPLE_ROWS], data_version=3)


@pytest.fixture
def engine(sample_snapshot) -> QueryEngine:
    return QueryEngine(build_index(sample_snapshot))


@pytest.fixture
def abc_snapshot() -> DatasetSnapshot:
    return DatasetSnapshot.from_records(
        [make_mount("a", "X"), make_mount("b", "Y"), make_mount("c", "X")],
        data_version=1,
    )


@pytest.fixture
def abc_engine(abc_snapshot) -> QueryEngine:
    return QueryEngine(build_index(abc_snapshot))


@pytest.fixture
def storage() -> CountingStorage:
    return CountingStorage()


@pytest.fixture
def store(storage) -> CollectionStore:
    return CollectionStore(storage, clock=lambda: FIXED_NOW)


@pytest.fixture
def dataset_path(tmp_path) -> Path:
    return write_dataset(tmp_path / "data", SAMPLE_ROWS, SAMPLE_META)


@pytest.fixture
def session(dataset_path, store) -> MountSession:
    s = MountSession(DatasetStore(dataset_path), store)
    s.load()
    return s
