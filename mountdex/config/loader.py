#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Project configuration (conf/settings.ini + MOUNTDEX_* environment overrides)."""

from __future__ import annotations

import configparser
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

PROJECT_ROOT = Path(__file__).resolve().parents[2]
DEFAULT_SETTINGS_PATH = PROJECT_ROOT / "conf" / "settings.ini"

DEFAULT_STORAGE_KEY = "mop-mounts.v2.owned"
DEFAULT_FUZZY_THRESHOLD = 0.75
DEFAULT_DEBOUNCE_MS = 150


@dataclass(frozen=True)
class MountdexConfig:
    """Resolved runtime configuration.

    Notes
    - dataset_path points to mounts.json; dataset.meta.json is looked up next to it.
    - collection_path is the durable local storage file (a keyed JSON blob store).
    """

    dataset_path: Path
    collection_path: Path
    storage_key: str = DEFAULT_STORAGE_KEY
    fuzzy_threshold: float = DEFAULT_FUZZY_THRESHOLD
    debounce_ms: int = DEFAULT_DEBOUNCE_MS


class ConfigLoader:
    def __init__(self, config_path: Optional[Path] = None):
        self.project_root = PROJECT_ROOT
        self.config_path = Path(config_path) if config_path else DEFAULT_SETTINGS_PATH
        self.config = configparser.ConfigParser()
        # settings.ini is optional; built-in defaults apply without it
        if self.config_path.exists():
            self.config.read(self.config_path, encoding="utf-8")

    def get(self, section: str, key: str) -> Optional[str]:
        """Read a value and expand a leading user path (~)."""
        val = self.config.get(section, key, fallback=None)
        if val and "~" in val:
            return os.path.expanduser(val)
        return val

    def _path(self, raw: Optional[str], default: Path) -> Path:
        if not raw:
            return default
        p = Path(os.path.expanduser(raw))
        return p if p.is_absolute() else (self.project_root / p)

    def resolve(self, environ: Optional[Mapping[str, str]] = None) -> MountdexConfig:
        env = os.environ if environ is None else environ

        dataset_raw = env.get("MOUNTDEX_DATASET") or self.get("PATHS", "DATASET")
        collection_raw = env.get("MOUNTDEX_COLLECTION") or self.get("PATHS", "COLLECTION")
        storage_key = env.get("MOUNTDEX_STORAGE_KEY") or self.get("COLLECTION", "STORAGE_KEY")
        threshold_raw = env.get("MOUNTDEX_FUZZY_THRESHOLD") or self.get("SEARCH", "FUZZY_THRESHOLD")
        debounce_raw = env.get("MOUNTDEX_DEBOUNCE_MS") or self.get("SEARCH", "DEBOUNCE_MS")

        try:
            threshold = float(threshold_raw) if threshold_raw else DEFAULT_FUZZY_THRESHOLD
        except ValueError:
            threshold = DEFAULT_FUZZY_THRESHOLD
        threshold = min(max(threshold, 0.0), 1.0)

        try:
            debounce_ms = int(debounce_raw) if debounce_raw else DEFAULT_DEBOUNCE_MS
        except ValueError:
            debounce_ms = DEFAULT_DEBOUNCE_MS

        return MountdexConfig(
            dataset_path=self._path(dataset_raw, self.project_root / "data" / "mounts.json"),
            collection_path=self._path(
                collection_raw,
                Path.home() / ".mountdex" / "collection.json",
            ),
            storage_key=str(storage_key or DEFAULT_STORAGE_KEY),
            fuzzy_threshold=threshold,
            debounce_ms=max(0, debounce_ms),
        )


def load_config(
    config_path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> MountdexConfig:
    return ConfigLoader(config_path).resolve(environ)
