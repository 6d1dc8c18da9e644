# -*- coding: utf-8 -*-
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional


@dataclass(frozen=True)
class MountWebSettings:
    """Runtime settings for the Mountdex web service.

    Notes
    - dataset_path points to mounts.json; dataset.meta.json is read from the same folder.
    - collection_path is the local storage file holding the owned-id blob.
    - root_path is for reverse-proxy mount (e.g. '/mounts')
    """

    dataset_path: Path
    collection_path: Optional[Path] = None
    root_path: str = ""
    cors_allow_origins: Optional[List[str]] = None
    gzip_minimum_size: int = 800
    auto_reload_dataset: bool = False

    @staticmethod
    def normalize_root_path(root_path: str) -> str:
        rp = (root_path or "").strip()
        if not rp:
            return ""
        if not rp.startswith("/"):
            rp = "/" + rp
        rp = rp.rstrip("/")
        return rp
