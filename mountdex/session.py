# -*- coding: utf-8 -*-
"""Session context: owns the loaded snapshot, its index and the query engine.

Each session is an explicit object (no module-level cache). A reload swaps
snapshot, index and engine together in one assignment, so readers see either
the old triple or the new one.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Union

from mountdex.collection.storage import JsonFileStorage
from mountdex.collection.store import CollectionStore
from mountdex.collection.transfer import (
    CollectionFile,
    ImportResult,
    export_collection,
    import_collection,
)
from mountdex.config.loader import MountdexConfig
from mountdex.dataset import DatasetStore
from mountdex.debounce import Debouncer
from mountdex.errors import IndexNotBuiltError
from mountdex.filters import FilterState
from mountdex.indexers.mount_index import SearchIndex, build_index
from mountdex.query import OWNERSHIP_ALL, FacetFilters, QueryEngine
from mountdex.schemas.mount import DatasetSnapshot, Mount

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Loaded:
    snapshot: DatasetSnapshot
    index: SearchIndex
    engine: QueryEngine


class MountSession:
    def __init__(
        self,
        dataset: DatasetStore,
        collection: CollectionStore,
        *,
        fuzzy_threshold: float = 0.75,
        debounce_ms: int = 150,
        reconcile_on_load: bool = True,
    ):
        self.dataset = dataset
        self.collection = collection
        self.fuzzy_threshold = float(fuzzy_threshold)
        self.debounce_ms = max(0, int(debounce_ms))
        self.reconcile_on_load = bool(reconcile_on_load)
        self._lock = threading.RLock()
        self._loaded: Optional[_Loaded] = None
        self.last_dropped_ids: List[str] = []

    @classmethod
    def from_config(cls, config: MountdexConfig) -> "MountSession":
        storage = JsonFileStorage(Path(config.collection_path))
        return cls(
            DatasetStore(Path(config.dataset_path)),
            CollectionStore(storage, key=config.storage_key),
            fuzzy_threshold=config.fuzzy_threshold,
            debounce_ms=config.debounce_ms,
        )

    # ----------------- load / reload -----------------

    def load(self, force: bool = False) -> bool:
        """Load (or reload) the dataset and rebuild indexes if it changed.

        Raises LoadError; the previous snapshot stays in place on failure.
        """
        with self._lock:
            changed = self.dataset.load(force=force)
            if not changed and self._loaded is not None:
                return False
            snapshot = self.dataset.snapshot()
            index = build_index(snapshot, fuzzy_threshold=self.fuzzy_threshold)
            self._loaded = _Loaded(snapshot=snapshot, index=index, engine=QueryEngine(index))
            if self.reconcile_on_load:
                self.last_dropped_ids = self.collection.reconcile(
                    snapshot.ids(), data_version=snapshot.data_version
                )
            return True

    def is_loaded(self) -> bool:
        return self._loaded is not None

    def _current(self) -> _Loaded:
        loaded = self._loaded
        if loaded is None:
            raise IndexNotBuiltError("Dataset not loaded; call MountSession.load() first")
        return loaded

    @property
    def snapshot(self) -> DatasetSnapshot:
        return self._current().snapshot

    @property
    def index(self) -> SearchIndex:
        return self._current().index

    @property
    def query(self) -> QueryEngine:
        return self._current().engine

    def valid_ids(self) -> List[str]:
        return self.snapshot.ids()

    # ----------------- queries -----------------

    def combined(
        self,
        text: str = "",
        classifications: Union[None, str, Iterable[str]] = None,
        facets: Optional[FacetFilters] = None,
        ownership: str = OWNERSHIP_ALL,
    ) -> List[Mount]:
        """QueryEngine.combined with this session's collection as ownership source."""
        return self.query.combined(
            text,
            classifications,
            facets,
            ownership,
            self.collection.is_owned,
        )

    def apply_filters(self, text: str, filters: FilterState) -> List[Mount]:
        return self.combined(text, filters.expansions, filters.facets(), filters.ownership)

    def live_search(
        self,
        on_results: Callable[[List[Mount]], Any],
        filters: Optional[FilterState] = None,
    ) -> Debouncer:
        """Search-as-you-type: call the returned Debouncer with each keystroke's text.

        Bursts collapse into one query after `debounce_ms` of quiet; `on_results`
        runs on the timer thread.
        """
        state = filters or FilterState()

        def _run(text: str) -> None:
            on_results(self.apply_filters(text, state))

        return Debouncer(_run, delay=self.debounce_ms / 1000.0)

    # ----------------- collection -----------------

    def stats(self) -> Dict[str, Any]:
        return self.collection.stats(self.snapshot.records)

    def export_collection(self, *, exported_at: Optional[str] = None) -> CollectionFile:
        return export_collection(
            self.collection.state(),
            self.snapshot.data_version,
            exported_at=exported_at,
        )

    def import_collection(
        self, source: Union[CollectionFile, str, bytes, Mapping[str, Any]]
    ) -> ImportResult:
        return import_collection(self.collection, source, self.valid_ids())
