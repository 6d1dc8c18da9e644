# -*- coding: utf-8 -*-
"""Portable collection files (export / import).

File format (schemaVersion 1):
    {
      "schema": "mop-mounts.user-collection",
      "schemaVersion": 1,
      "exportedAtUtc": "...",
      "datasetDataVersion": n,
      "owned": [ids sorted ascending],
      "notes": {id: text}
    }

Import restores a snapshot: the collection is replaced, never merged.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from mountdex.collection.store import CollectionState, CollectionStore
from mountdex.errors import FormatError, StorageError
from mountdex.schemas.meta import utc_now_iso

logger = logging.getLogger(__name__)

SCHEMA = "mop-mounts.user-collection"
SCHEMA_VERSION = 1
DEFAULT_FILENAME = "mop-mounts.collection.json"


def _dedup_preserve_order(items: Iterable[str]) -> List[str]:
    out: List[str] = []
    seen = set()
    for x in items:
        if not x:
            continue
        if x in seen:
            continue
        out.append(x)
        seen.add(x)
    return out


@dataclass(frozen=True)
class CollectionFile:
    exported_at_utc: str
    dataset_data_version: int
    owned: Tuple[str, ...]
    notes: Mapping[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "schema": SCHEMA,
            "schemaVersion": SCHEMA_VERSION,
            "exportedAtUtc": self.exported_at_utc,
            "datasetDataVersion": int(self.dataset_data_version),
            "owned": list(self.owned),
            "notes": {k: self.notes[k] for k in sorted(self.notes)},
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=2) + "\n"


@dataclass(frozen=True)
class ImportResult:
    accepted_ids: Tuple[str, ...]
    dropped_ids: Tuple[str, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {"acceptedIds": list(self.accepted_ids), "droppedIds": list(self.dropped_ids)}


def export_collection(
    state: CollectionState,
    dataset_version: int,
    *,
    exported_at: Optional[str] = None,
) -> CollectionFile:
    return CollectionFile(
        exported_at_utc=exported_at or utc_now_iso(),
        dataset_data_version=int(dataset_version or 0),
        owned=tuple(sorted(state.owned_ids)),
        notes={k: v for k, v in state.notes.items() if k in state.owned_ids},
    )


def parse_collection_file(raw: Union[str, bytes, Mapping[str, Any]]) -> CollectionFile:
    """Validate schema tag, then version, then payload shape."""
    if isinstance(raw, (str, bytes)):
        try:
            doc = json.loads(raw)
        except ValueError as exc:
            raise FormatError(f"Failed to parse collection file: {exc}") from exc
    else:
        doc = raw
    if not isinstance(doc, Mapping):
        raise FormatError("Invalid file format. Expected mop-mounts collection file.")

    if doc.get("schema") != SCHEMA:
        raise FormatError("Invalid file format. Expected mop-mounts collection file.")

    version = doc.get("schemaVersion")
    if isinstance(version, bool) or version != SCHEMA_VERSION:
        raise FormatError(
            f"Unsupported schema version {version}. Expected version {SCHEMA_VERSION}."
        )

    owned = doc.get("owned")
    if not isinstance(owned, list) or not all(isinstance(x, str) for x in owned):
        raise FormatError("Collection file field 'owned' must be a list of mount ids.")

    notes_raw = doc.get("notes")
    if notes_raw is None:
        notes_raw = {}
    if not isinstance(notes_raw, Mapping):
        raise FormatError("Collection file field 'notes' must be an object.")
    notes = {str(k): str(v) for k, v in notes_raw.items() if k and isinstance(v, str)}

    try:
        data_version = int(doc.get("datasetDataVersion") or 0)
    except (TypeError, ValueError) as exc:
        raise FormatError("Collection file field 'datasetDataVersion' must be an integer.") from exc

    return CollectionFile(
        exported_at_utc=str(doc.get("exportedAtUtc") or ""),
        dataset_data_version=data_version,
        owned=tuple(owned),
        notes=notes,
    )


def import_collection(
    store: CollectionStore,
    source: Union[CollectionFile, str, bytes, Mapping[str, Any]],
    valid_ids: Iterable[str],
) -> ImportResult:
    """Validate `source` and replace the store contents with its valid ids.

    Raises FormatError before touching the store when the file is rejected.
    Unknown ids are not an error: they are reported in `dropped_ids`.
    """
    cfile = source if isinstance(source, CollectionFile) else parse_collection_file(source)
    valid = {str(x) for x in valid_ids}

    ids = _dedup_preserve_order(cfile.owned)
    accepted = tuple(x for x in ids if x in valid)
    dropped = tuple(x for x in ids if x not in valid)
    kept = set(accepted)
    notes = {k: v for k, v in cfile.notes.items() if k in kept}

    store.replace(accepted, notes=notes)
    if dropped:
        logger.warning("Import dropped %d unknown mount ids", len(dropped))
    logger.info("Imported collection: %d owned", len(accepted))
    return ImportResult(accepted_ids=accepted, dropped_ids=dropped)


def write_collection_file(path: Path, cfile: CollectionFile) -> Path:
    p = Path(path)
    if p.is_dir():
        p = p / DEFAULT_FILENAME
    try:
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(cfile.to_json(), encoding="utf-8")
    except OSError as exc:
        raise StorageError(f"Failed to write collection file {p}: {exc}") from exc
    return p


def read_collection_file(path: Path) -> CollectionFile:
    p = Path(path)
    try:
        text = p.read_text(encoding="utf-8")
    except OSError as exc:
        raise FormatError(f"Failed to read collection file {p}: {exc}") from exc
    return parse_collection_file(text)
