#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Mount index builder (core).

Derives three read-only indexes from a DatasetSnapshot:
  - text: weighted, normalized search fields per record (fuzzy matching)
  - buckets: expansion -> record ordinals (snapshot order)
  - identity: id -> record (last write wins on duplicate ids)

There is no incremental update. A new snapshot means a new index.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from mountdex.indexers.text import FuzzyMatcher, PreparedQuery, TextField
from mountdex.schemas.meta import build_meta
from mountdex.schemas.mount import DatasetSnapshot, Mount

NAME_WEIGHT = 1.0
DETAIL_WEIGHT = 0.7
ZONE_WEIGHT = 0.5
TAGS_WEIGHT = 0.3


@dataclass(frozen=True)
class TextEntry:
    ordinal: int
    fields: Tuple[TextField, ...]


@dataclass(frozen=True)
class SearchIndex:
    snapshot: DatasetSnapshot
    entries: Tuple[TextEntry, ...]
    buckets: Dict[str, Tuple[int, ...]]
    identity: Dict[str, Mount]
    matcher: FuzzyMatcher = field(compare=False)

    @property
    def records(self) -> Tuple[Mount, ...]:
        return self.snapshot.records

    def classifications(self) -> List[str]:
        """Bucket keys in first-seen snapshot order."""
        return list(self.buckets.keys())

    def match(self, text: str, ordinals: Optional[Sequence[int]] = None) -> List[int]:
        """Return ordinals whose text fields match `text`, best first.

        `ordinals` confines matching to an already narrowed candidate pool.
        Ties keep snapshot order.
        """
        query = PreparedQuery.build(text)
        if not query:
            pool = range(len(self.entries)) if ordinals is None else ordinals
            return list(pool)

        if ordinals is None:
            candidates = self.entries
        else:
            candidates = tuple(self.entries[i] for i in ordinals)

        scored: List[Tuple[float, int]] = []
        for entry in candidates:
            s = self.matcher.score(query, entry.fields)
            if s > 0.0:
                scored.append((s, entry.ordinal))
        scored.sort(key=lambda x: (-x[0], x[1]))
        return [ordinal for _, ordinal in scored]


def _text_fields(mount: Mount) -> Tuple[TextField, ...]:
    return (
        TextField.build(NAME_WEIGHT, [mount.name]),
        TextField.build(DETAIL_WEIGHT, [mount.source_detail]),
        TextField.build(ZONE_WEIGHT, [mount.zone]),
        TextField.build(TAGS_WEIGHT, mount.tags),
    )


def build_index(snapshot: DatasetSnapshot, *, fuzzy_threshold: float = 0.75) -> SearchIndex:
    entries: List[TextEntry] = []
    buckets: Dict[str, List[int]] = {}
    identity: Dict[str, Mount] = {}

    for ordinal, mount in enumerate(snapshot.records):
        entries.append(TextEntry(ordinal=ordinal, fields=_text_fields(mount)))
        buckets.setdefault(mount.classification, []).append(ordinal)
        identity[mount.id] = mount

    return SearchIndex(
        snapshot=snapshot,
        entries=tuple(entries),
        buckets={k: tuple(v) for k, v in buckets.items()},
        identity=identity,
        matcher=FuzzyMatcher(threshold=fuzzy_threshold),
    )


def build_index_document(index: SearchIndex) -> Dict[str, Any]:
    """Compact listing + bucket index, for offline inspection."""
    snap = index.snapshot
    items = [
        {
            "id": m.id,
            "name": m.name,
            "expansion": m.expansion,
            "category": m.category,
            "faction": m.faction,
            "sourceType": m.source_type,
        }
        for m in snap.records
    ]
    by_expansion = {k: [snap.records[i].id for i in v] for k, v in index.buckets.items()}

    meta = build_meta(
        schema=1,
        tool="build_mount_index",
        sources={"dataset": snap.source},
        extra={"dataset_data_version": snap.data_version},
    )
    return {
        "schema_version": 1,
        "meta": meta,
        "counts": {
            "records_total": len(snap.records),
            "unique_ids": len(index.identity),
            "expansions": len(index.buckets),
        },
        "items": items,
        "indexes": {"by_expansion": by_expansion},
    }


def render_index_summary(index_doc: Dict[str, Any]) -> str:
    meta = index_doc.get("meta") or {}
    counts = index_doc.get("counts") or {}
    by_exp = (index_doc.get("indexes") or {}).get("by_expansion") or {}
    lines = []
    lines.append("# Mountdex Index Summary")
    lines.append("")
    lines.append("## Meta")
    lines.append("```yaml")
    lines.append(f"schema_version: {index_doc.get('schema_version')}")
    lines.append(f"dataset_data_version: {meta.get('dataset_data_version')}")
    lines.append(f"generated: {meta.get('generated')}")
    lines.append("```")
    lines.append("")
    lines.append("## Counts")
    lines.append("```yaml")
    for k, v in counts.items():
        lines.append(f"{k}: {v}")
    lines.append("```")
    lines.append("")
    lines.append("## Expansions")
    for name, ids in by_exp.items():
        lines.append(f"- {name}: {len(ids)}")
    return "\n".join(lines) + "\n"
