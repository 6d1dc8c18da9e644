# -*- coding: utf-8 -*-
"""Query engine over a built SearchIndex.

All operations are pure reads against the index; absent results are `None`
or an empty list, never an exception.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Union

from mountdex.indexers.mount_index import SearchIndex
from mountdex.schemas.mount import DatasetSnapshot, Mount

ALL = "all"
OWNERSHIP_ALL = "all"
OWNERSHIP_OWNED = "owned"
OWNERSHIP_NOT_OWNED = "not-owned"
OWNERSHIP_MODES = (OWNERSHIP_ALL, OWNERSHIP_OWNED, OWNERSHIP_NOT_OWNED)

OwnedPredicate = Callable[[str], bool]


def _is_unset(value: Optional[str]) -> bool:
    return value is None or not str(value).strip() or str(value) == ALL


@dataclass(frozen=True)
class FacetFilters:
    """Equality filters; `None`, "" or "all" leave the facet unfiltered."""

    category: Optional[str] = None
    faction: Optional[str] = None
    source_type: Optional[str] = None

    def active(self) -> Dict[str, str]:
        out: Dict[str, str] = {}
        for attr in ("category", "faction", "source_type"):
            val = getattr(self, attr)
            if not _is_unset(val):
                out[attr] = str(val)
        return out


class QueryEngine:
    def __init__(self, index: SearchIndex):
        self._index = index

    @property
    def index(self) -> SearchIndex:
        return self._index

    @property
    def snapshot(self) -> DatasetSnapshot:
        return self._index.snapshot

    def all(self) -> List[Mount]:
        return list(self._index.records)

    def by_id(self, mount_id: str) -> Optional[Mount]:
        if not mount_id:
            return None
        return self._index.identity.get(str(mount_id))

    def by_classification(self, value: str) -> List[Mount]:
        if value == ALL:
            return self.all()
        records = self._index.records
        return [records[i] for i in self._index.buckets.get(str(value or ""), ())]

    def classifications(self) -> List[str]:
        return self._index.classifications()

    def search(self, text: str) -> List[Mount]:
        """Fuzzy search. Blank text means "no filtering": the full snapshot."""
        if not str(text or "").strip():
            return self.all()
        records = self._index.records
        return [records[i] for i in self._index.match(text)]

    def combined(
        self,
        text: str = "",
        classifications: Union[None, str, Iterable[str]] = None,
        facets: Optional[FacetFilters] = None,
        ownership: str = OWNERSHIP_ALL,
        owned: Optional[OwnedPredicate] = None,
    ) -> List[Mount]:
        """AND of all filters, applied cheapest first.

        Order: expansion buckets (OR within the selection) -> facet equality ->
        ownership predicate -> fuzzy text over whatever is left.
        """
        if ownership not in OWNERSHIP_MODES:
            raise ValueError(f"Unknown ownership filter: {ownership!r}")

        records = self._index.records
        ordinals: Sequence[int] = range(len(records))
        narrowed = False

        if isinstance(classifications, str):
            classifications = [classifications]
        selection = {str(c) for c in (classifications or ()) if not _is_unset(c)}
        if selection:
            hits = set()
            for value in selection:
                hits.update(self._index.buckets.get(value, ()))
            ordinals = sorted(hits)
            narrowed = True

        active = facets.active() if facets else {}
        if active:
            ordinals = [
                i for i in ordinals
                if all(getattr(records[i], attr) == val for attr, val in active.items())
            ]
            narrowed = True

        if ownership != OWNERSHIP_ALL:
            if owned is None:
                raise ValueError("Ownership filter requires an owned predicate")
            want = ownership == OWNERSHIP_OWNED
            ordinals = [i for i in ordinals if bool(owned(records[i].id)) == want]
            narrowed = True

        if str(text or "").strip():
            ordinals = self._index.match(text, ordinals if narrowed else None)

        return [records[i] for i in ordinals]

    def facet_counts(self, mounts: Optional[Iterable[Mount]] = None) -> Dict[str, Dict[str, int]]:
        """Value counts per facet (expansion, category, faction, source type)."""
        pool = self._index.records if mounts is None else mounts
        out: Dict[str, Dict[str, int]] = {
            "expansion": {},
            "category": {},
            "faction": {},
            "sourceType": {},
        }
        for m in pool:
            for key, val in (
                ("expansion", m.expansion),
                ("category", m.category),
                ("faction", m.faction),
                ("sourceType", m.source_type),
            ):
                bucket = out[key]
                bucket[val] = bucket.get(val, 0) + 1
        return out
