# -*- coding: utf-8 -*-
"""Dataset store: load + cache the immutable mount snapshot.

Data source:
  - data/mounts.json          (JSON array, or {"dataVersion": n, "mounts": [...]})
  - data/dataset.meta.json    (optional: {"dataVersion": n, "generatedAtUtc": "..."})

A completed load is reused until the file changes or `load(force=True)` runs.
A failed load raises LoadError and keeps the previous snapshot.
"""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional

from mountdex.errors import LoadError
from mountdex.schemas.mount import DatasetSnapshot, Mount

logger = logging.getLogger(__name__)

META_FILENAME = "dataset.meta.json"


def parse_dataset(
    doc: Any,
    meta: Optional[Dict[str, Any]] = None,
    *,
    source: Optional[str] = None,
) -> DatasetSnapshot:
    if isinstance(doc, dict):
        rows = doc.get("mounts")
        doc_version = doc.get("dataVersion")
    else:
        rows = doc
        doc_version = None
    if not isinstance(rows, list):
        raise LoadError("Dataset must be a JSON array of mounts")

    records: List[Mount] = [Mount.from_dict(row) for row in rows]

    meta = meta or {}
    version = meta.get("dataVersion", doc_version)
    try:
        data_version = int(version) if version is not None else 0
    except (TypeError, ValueError) as exc:
        raise LoadError(f"Invalid dataVersion: {version!r}") from exc
    if not data_version and records:
        data_version = max(m.data_version for m in records)

    generated = meta.get("generatedAtUtc")
    return DatasetSnapshot.from_records(
        records,
        data_version=data_version,
        generated_at_utc=str(generated) if generated else None,
        source=source,
    )


def _read_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise LoadError(f"Dataset file not found: {path}") from exc
    except (OSError, ValueError) as exc:
        raise LoadError(f"Failed to read dataset file {path}: {exc}") from exc


class DatasetStore:
    """Load + cache the mount dataset (thread-safe)."""

    def __init__(self, dataset_path: Path, *, meta_path: Optional[Path] = None):
        self._path = Path(dataset_path)
        self._meta_path = Path(meta_path) if meta_path else self._path.parent / META_FILENAME
        self._lock = threading.RLock()
        self._mtime: float = -1.0
        self._snapshot: Optional[DatasetSnapshot] = None

    @property
    def path(self) -> Path:
        return self._path

    @property
    def meta_path(self) -> Path:
        return self._meta_path

    def mtime(self) -> float:
        with self._lock:
            return max(0.0, float(self._mtime))

    def is_loaded(self) -> bool:
        with self._lock:
            return self._snapshot is not None

    def load(self, force: bool = False) -> bool:
        """Load dataset if changed. Returns True if a (re)load occurred."""
        with self._lock:
            try:
                mtime = self._path.stat().st_mtime
            except FileNotFoundError as exc:
                raise LoadError(f"Dataset file not found: {self._path}") from exc
            except OSError as exc:
                raise LoadError(f"Cannot stat dataset file {self._path}: {exc}") from exc

            if (not force) and self._snapshot is not None and self._mtime == mtime:
                return False

            doc = _read_json(self._path)
            meta: Dict[str, Any] = {}
            if self._meta_path.exists():
                raw_meta = _read_json(self._meta_path)
                if not isinstance(raw_meta, dict):
                    raise LoadError(f"Dataset meta must be a JSON object: {self._meta_path}")
                meta = raw_meta

            snapshot = parse_dataset(doc, meta, source=str(self._path))
            self._snapshot = snapshot
            self._mtime = mtime
            logger.info(
                "Loaded %d mounts (dataVersion=%s) from %s",
                len(snapshot),
                snapshot.data_version,
                self._path,
            )
            return True

    def snapshot(self) -> DatasetSnapshot:
        """Current snapshot; loads on first use."""
        with self._lock:
            if self._snapshot is None:
                self.load(force=True)
            assert self._snapshot is not None
            return self._snapshot
