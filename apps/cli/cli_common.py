#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Shared helpers for CLI tools."""

from __future__ import annotations

import json
import os
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from rich.console import Console

from mountdex.config import MountdexConfig, load_config
from mountdex.errors import LoadError
from mountdex.session import MountSession

PROJECT_ROOT = Path(__file__).resolve().parents[2]
DATA_DIR = PROJECT_ROOT / "data"
INDEX_DIR = DATA_DIR / "index"
CONF_DIR = PROJECT_ROOT / "conf"


def read_json(path: Path) -> Optional[Dict[str, Any]]:
    if not path.exists():
        return None
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return None


def file_info(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {"exists": False, "size": 0, "mtime": None}
    st = path.stat()
    return {"exists": True, "size": int(st.st_size), "mtime": float(st.st_mtime)}


def human_size(num: int) -> str:
    if num <= 0:
        return "-"
    for unit in ("B", "KiB", "MiB", "GiB"):
        if num < 1024.0:
            return f"{num:.0f} {unit}" if unit == "B" else f"{num:.1f} {unit}"
        num /= 1024.0
    return f"{num:.1f} TiB"


def human_mtime(ts: Optional[float]) -> str:
    if not ts:
        return "-"
    return datetime.fromtimestamp(ts).strftime("%Y-%m-%d %H:%M")


def env_hint() -> Tuple[str, str]:
    env = os.environ.get("CONDA_DEFAULT_ENV", "").strip()
    if env:
        return env, "conda"
    venv = os.environ.get("VIRTUAL_ENV", "").strip()
    if venv:
        return venv, "venv"
    return "system", "system"


def resolve_config(dataset: Optional[str] = None, collection: Optional[str] = None) -> MountdexConfig:
    """settings.ini + env, with CLI flags taking precedence."""
    cfg = load_config()
    if not dataset and not collection:
        return cfg
    return MountdexConfig(
        dataset_path=Path(dataset).expanduser().resolve() if dataset else cfg.dataset_path,
        collection_path=Path(collection).expanduser().resolve() if collection else cfg.collection_path,
        storage_key=cfg.storage_key,
        fuzzy_threshold=cfg.fuzzy_threshold,
        debounce_ms=cfg.debounce_ms,
    )


def open_session(console: Console, config: MountdexConfig) -> MountSession:
    """Build and load a session, or exit(1) with a red error line."""
    session = MountSession.from_config(config)
    try:
        session.load()
    except LoadError as e:
        console.print(f"[red]Failed to load dataset: {e}[/red]")
        raise SystemExit(1)
    if session.last_dropped_ids:
        console.print(
            f"[yellow]Removed {len(session.last_dropped_ids)} owned id(s) missing from the dataset: "
            f"{', '.join(session.last_dropped_ids)}[/yellow]"
        )
    if session.collection.last_storage_error is not None:
        console.print(f"[yellow]Storage warning: {session.collection.last_storage_error}[/yellow]")
    return session
