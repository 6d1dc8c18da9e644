# -*- coding: utf-8 -*-
"""Collection store: the user's owned mount ids, persisted after every mutation.

Storage blob (one key, default "mop-mounts.v2.owned"):
    {"ownedMountIds": [...], "lastUpdated": ISO8601, "dataVersion": n, "notes": {...}}
A bare JSON array of ids (legacy format) is accepted on read.

Persistence failures are logged and kept in `last_storage_error`; the
in-memory state stays authoritative for the rest of the session.
"""

from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, FrozenSet, Iterable, List, Mapping, Optional

from mountdex.collection.storage import KeyValueStorage
from mountdex.config.loader import DEFAULT_STORAGE_KEY
from mountdex.errors import StorageError
from mountdex.schemas.meta import utc_now_iso
from mountdex.schemas.mount import Mount

logger = logging.getLogger(__name__)


def percentage(owned: int, total: int) -> int:
    """Integer percent, half rounds up; 0 when total is 0."""
    if total <= 0:
        return 0
    return (owned * 200 + total) // (total * 2)


def _clean_ids(raw: Any) -> List[str]:
    if not isinstance(raw, list):
        return []
    return [str(x) for x in raw if isinstance(x, str) and x]


def _clean_notes(raw: Any) -> Dict[str, str]:
    if not isinstance(raw, dict):
        return {}
    return {str(k): str(v) for k, v in raw.items() if k and isinstance(v, str) and v}


@dataclass(frozen=True)
class CollectionState:
    owned_ids: FrozenSet[str] = frozenset()
    last_updated: Optional[str] = None
    data_version: int = 0
    notes: Mapping[str, str] = field(default_factory=dict)

    def to_blob(self) -> Dict[str, Any]:
        return {
            "ownedMountIds": sorted(self.owned_ids),
            "lastUpdated": self.last_updated,
            "dataVersion": int(self.data_version),
            "notes": {k: self.notes[k] for k in sorted(self.notes)},
        }

    @classmethod
    def from_blob(cls, raw: Any) -> "CollectionState":
        if isinstance(raw, list):
            return cls(owned_ids=frozenset(_clean_ids(raw)))
        if not isinstance(raw, dict):
            return cls()
        try:
            data_version = int(raw.get("dataVersion") or 0)
        except (TypeError, ValueError):
            data_version = 0
        last = raw.get("lastUpdated")
        return cls(
            owned_ids=frozenset(_clean_ids(raw.get("ownedMountIds"))),
            last_updated=str(last) if last else None,
            data_version=data_version,
            notes=_clean_notes(raw.get("notes")),
        )


class CollectionStore:
    """Owned-id set with persist-on-write semantics (thread-safe)."""

    def __init__(
        self,
        storage: KeyValueStorage,
        *,
        key: str = DEFAULT_STORAGE_KEY,
        clock: Callable[[], str] = utc_now_iso,
    ):
        self._storage = storage
        self._key = str(key)
        self._clock = clock
        self._lock = threading.RLock()
        self._undo: Optional[CollectionState] = None
        self.last_storage_error: Optional[StorageError] = None
        self._state = self._read()

    @property
    def key(self) -> str:
        return self._key

    # ----------------- persistence -----------------

    def _read(self) -> CollectionState:
        try:
            raw = self._storage.get_item(self._key)
        except StorageError as exc:
            logger.warning("Collection storage unreadable, starting empty: %s", exc)
            self.last_storage_error = exc
            return CollectionState()
        if not raw:
            return CollectionState()
        try:
            doc = json.loads(raw)
        except ValueError:
            logger.warning("Collection blob %r is not valid JSON, starting empty", self._key)
            return CollectionState()
        if isinstance(doc, list):
            logger.info("Read legacy collection format (%d ids)", len(doc))
        return CollectionState.from_blob(doc)

    def _write(self, state: CollectionState) -> bool:
        try:
            self._storage.set_item(self._key, json.dumps(state.to_blob(), ensure_ascii=False))
        except StorageError as exc:
            logger.error("Failed to persist collection: %s", exc)
            self.last_storage_error = exc
            return False
        self.last_storage_error = None
        return True

    def _commit(self, owned: FrozenSet[str], *, notes: Optional[Mapping[str, str]] = None,
                data_version: Optional[int] = None, undoable: bool = True) -> None:
        prev = self._state
        state = replace(
            prev,
            owned_ids=frozenset(owned),
            last_updated=self._clock(),
            notes=dict(prev.notes if notes is None else notes),
            data_version=prev.data_version if data_version is None else int(data_version),
        )
        if undoable:
            self._undo = prev
        self._state = state
        self._write(state)

    # ----------------- reads -----------------

    def state(self) -> CollectionState:
        with self._lock:
            return self._state

    def owned_ids(self) -> List[str]:
        with self._lock:
            return sorted(self._state.owned_ids)

    def is_owned(self, mount_id: str) -> bool:
        with self._lock:
            return str(mount_id) in self._state.owned_ids

    def note(self, mount_id: str) -> Optional[str]:
        with self._lock:
            return self._state.notes.get(str(mount_id))

    def can_undo(self) -> bool:
        with self._lock:
            return self._undo is not None

    # ----------------- mutations -----------------

    def toggle(self, mount_id: str) -> bool:
        """Flip ownership; returns the new membership state."""
        mid = str(mount_id)
        with self._lock:
            owned = set(self._state.owned_ids)
            if mid in owned:
                owned.discard(mid)
                now_owned = False
            else:
                owned.add(mid)
                now_owned = True
            self._commit(frozenset(owned))
            return now_owned

    def set_bulk(self, mount_ids: Iterable[str], owned: bool) -> int:
        """Set membership for every id in one write. Returns how many ids changed."""
        ids = {str(x) for x in mount_ids if x}
        with self._lock:
            current = self._state.owned_ids
            if owned:
                updated = current | ids
            else:
                updated = current - ids
            changed = len(updated ^ current)
            if changed:
                self._commit(frozenset(updated))
            return changed

    def replace(self, mount_ids: Iterable[str], notes: Optional[Mapping[str, str]] = None) -> None:
        """Replace the whole owned set (and notes, when given) in one write."""
        ids = frozenset(str(x) for x in mount_ids if x)
        with self._lock:
            self._commit(ids, notes=_clean_notes(dict(notes)) if notes is not None else None)

    def set_note(self, mount_id: str, text: Optional[str]) -> None:
        """Attach a note to a mount id; empty text clears it."""
        mid = str(mount_id)
        with self._lock:
            notes = dict(self._state.notes)
            body = (text or "").strip()
            if body:
                notes[mid] = body
            elif mid in notes:
                del notes[mid]
            else:
                return
            self._commit(self._state.owned_ids, notes=notes, undoable=False)

    def reconcile(self, valid_ids: Iterable[str], *, data_version: Optional[int] = None) -> List[str]:
        """Drop owned ids (and notes) that are not in `valid_ids`.

        Writes only when something was dropped. Returns the dropped ids, sorted.
        """
        valid = {str(x) for x in valid_ids}
        with self._lock:
            current = self._state.owned_ids
            kept = frozenset(x for x in current if x in valid)
            notes = {k: v for k, v in self._state.notes.items() if k in valid}
            dropped = sorted(current - kept)
            notes_dropped = len(notes) != len(self._state.notes)
            if dropped or notes_dropped:
                self._commit(kept, notes=notes, data_version=data_version, undoable=False)
                # an undo snapshot taken before reconciliation could resurrect retired ids
                self._undo = None
                logger.info("Reconciled collection: removed %d invalid ids", len(dropped))
            elif data_version is not None and data_version != self._state.data_version:
                self._state = replace(self._state, data_version=int(data_version))
            return dropped

    def undo(self) -> bool:
        """Restore the state captured before the last toggle/bulk/import. One level."""
        with self._lock:
            prev = self._undo
            if prev is None:
                return False
            self._commit(prev.owned_ids, notes=prev.notes, undoable=False)
            self._undo = None
            return True

    # ----------------- stats -----------------

    def stats(self, all_mounts: Iterable[Mount]) -> Dict[str, Any]:
        with self._lock:
            owned_ids = self._state.owned_ids

        total = 0
        owned = 0
        by_class: Dict[str, Dict[str, int]] = {}
        for m in all_mounts:
            total += 1
            bucket = by_class.setdefault(m.classification, {"total": 0, "owned": 0, "percentage": 0})
            bucket["total"] += 1
            if m.id in owned_ids:
                owned += 1
                bucket["owned"] += 1

        for bucket in by_class.values():
            bucket["percentage"] = percentage(bucket["owned"], bucket["total"])

        return {
            "global": {"total": total, "owned": owned, "percentage": percentage(owned, total)},
            "byClassification": by_class,
        }
