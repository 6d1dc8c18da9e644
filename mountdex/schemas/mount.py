#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Mount dataset data model.

Notes
- Field names follow Python style; JSON keys stay camelCase (`sourceType`, ...).
- Closed enumerations are validated by the authoring tools, not here. The
  parser only checks that required keys are present and well typed.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

from mountdex.errors import LoadError

ID_PATTERN = re.compile(r"^[a-z0-9-]+$")

EXPANSIONS: Tuple[str, ...] = (
    "Classic",
    "The Burning Crusade",
    "Wrath of the Lich King",
    "Cataclysm",
    "Mists of Pandaria",
)
CATEGORIES: Tuple[str, ...] = ("Ground", "Flying", "Aquatic", "Multi")
FACTIONS: Tuple[str, ...] = ("Alliance", "Horde", "Neutral")
SOURCE_TYPES: Tuple[str, ...] = (
    "Drop",
    "Vendor",
    "Quest",
    "Achievement",
    "Crafting",
    "Promotion",
    "Other",
)

_REQUIRED_KEYS = ("id", "name", "expansion", "category", "faction", "sourceType")


def _opt_str(val: Any) -> Optional[str]:
    if val is None:
        return None
    s = str(val).strip()
    return s or None


def _opt_int(val: Any) -> Optional[int]:
    if val is None or isinstance(val, bool):
        return None
    try:
        return int(val)
    except (TypeError, ValueError):
        return None


def _as_tags(val: Any) -> Tuple[str, ...]:
    if isinstance(val, str):
        return (val,) if val.strip() else ()
    if isinstance(val, (list, tuple)):
        return tuple(str(x) for x in val if x)
    return ()


@dataclass(frozen=True)
class Mount:
    """One catalog entry. Immutable once loaded."""

    id: str
    name: str
    expansion: str
    category: str
    faction: str
    source_type: str
    source_detail: str = ""
    zone: Optional[str] = None
    tags: Tuple[str, ...] = ()
    wowhead_id: Optional[int] = None
    requires_riding: Optional[str] = None
    profession_req: Optional[str] = None
    reputation_req: Optional[str] = None
    cost: Optional[str] = None
    is_limited_time: bool = False
    notes: Optional[str] = None
    data_version: int = 0
    last_updated_utc: str = ""

    @property
    def classification(self) -> str:
        """Grouping dimension used by the bucket index."""
        return self.expansion

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Mount":
        if not isinstance(raw, dict):
            raise LoadError("Mount entry must be a JSON object")
        for key in _REQUIRED_KEYS:
            val = raw.get(key)
            if not isinstance(val, str) or not val.strip():
                ident = raw.get("id") or "?"
                raise LoadError(f"Mount {ident!r} missing key: {key}")

        return cls(
            id=str(raw["id"]).strip(),
            name=str(raw["name"]).strip(),
            expansion=str(raw["expansion"]).strip(),
            category=str(raw["category"]).strip(),
            faction=str(raw["faction"]).strip(),
            source_type=str(raw["sourceType"]).strip(),
            source_detail=str(raw.get("sourceDetail") or ""),
            zone=_opt_str(raw.get("zone")),
            tags=_as_tags(raw.get("tags")),
            wowhead_id=_opt_int(raw.get("wowheadId")),
            requires_riding=_opt_str(raw.get("requiresRiding")),
            profession_req=_opt_str(raw.get("professionReq")),
            reputation_req=_opt_str(raw.get("reputationReq")),
            cost=_opt_str(raw.get("cost")),
            is_limited_time=bool(raw.get("isLimitedTime") or False),
            notes=_opt_str(raw.get("notes")),
            data_version=_opt_int(raw.get("dataVersion")) or 0,
            last_updated_utc=str(raw.get("lastUpdatedUtc") or ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "expansion": self.expansion,
            "category": self.category,
            "faction": self.faction,
            "sourceType": self.source_type,
            "sourceDetail": self.source_detail,
        }
        optional = {
            "zone": self.zone,
            "wowheadId": self.wowhead_id,
            "requiresRiding": self.requires_riding,
            "professionReq": self.profession_req,
            "reputationReq": self.reputation_req,
            "cost": self.cost,
            "notes": self.notes,
        }
        for k, v in optional.items():
            if v is not None:
                out[k] = v
        if self.tags:
            out["tags"] = list(self.tags)
        if self.is_limited_time:
            out["isLimitedTime"] = True
        out["dataVersion"] = self.data_version
        out["lastUpdatedUtc"] = self.last_updated_utc
        return out


@dataclass(frozen=True)
class DatasetSnapshot:
    """Ordered, immutable set of mounts loaded for one session."""

    records: Tuple[Mount, ...]
    data_version: int = 0
    generated_at_utc: Optional[str] = None
    source: Optional[str] = field(default=None, compare=False)

    @classmethod
    def from_records(
        cls,
        records: Iterable[Mount],
        *,
        data_version: int = 0,
        generated_at_utc: Optional[str] = None,
        source: Optional[str] = None,
    ) -> "DatasetSnapshot":
        return cls(
            records=tuple(records),
            data_version=int(data_version or 0),
            generated_at_utc=generated_at_utc,
            source=source,
        )

    def __len__(self) -> int:
        return len(self.records)

    def ids(self) -> List[str]:
        return [m.id for m in self.records]
