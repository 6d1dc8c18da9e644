#!/usr/bin/env python3
# -*- coding: utf-8 -*-
from __future__ import annotations

import argparse
from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from apps.cli.cli_common import (
    CONF_DIR,
    PROJECT_ROOT,
    env_hint,
    file_info,
    human_mtime,
    human_size,
    resolve_config,
)
from mountdex.collection.storage import JsonFileStorage
from mountdex.collection.store import CollectionStore
from mountdex.dataset import DatasetStore
from mountdex.errors import LoadError, StorageError
from mountdex.schemas.mount import CATEGORIES, EXPANSIONS, FACTIONS, ID_PATTERN, SOURCE_TYPES

console = Console()
CONFIG_PATH = CONF_DIR / "settings.ini"


def _status(level: str) -> str:
    if level == "PASS":
        return "[green]PASS[/green]"
    if level == "WARN":
        return "[yellow]WARN[/yellow]"
    return "[red]FAIL[/red]"


def _check_path_exists(path: Path, kind: str, fix: str = ""):
    if kind == "file":
        ok = path.is_file()
    elif kind == "dir":
        ok = path.is_dir()
    else:
        ok = path.exists()
    level = "PASS" if ok else "WARN"
    return ok, level, str(path), fix


def main() -> int:
    p = argparse.ArgumentParser(description="Mountdex Doctor (config + dataset + storage health check)")
    p.add_argument("--enforce", action="store_true", help="exit non-zero on failures (CI)")
    p.add_argument("--strict", action="store_true", help="treat WARN as FAIL (only when --enforce)")
    p.add_argument("--dataset", default=None, help="Override dataset path (mounts.json)")
    p.add_argument("--collection", default=None, help="Override collection storage file")
    args = p.parse_args()

    env_name, env_kind = env_hint()
    console.print(Panel(f"[bold cyan]Mountdex Doctor[/bold cyan]\nEnv: {env_name} ({env_kind})", border_style="cyan"))

    table = Table(title="Health Checks", box=None, show_header=True, header_style="bold cyan")
    table.add_column("Check", style="bold")
    table.add_column("Status", justify="center")
    table.add_column("Details", style="dim")
    table.add_column("Fix Hint", style="green")

    fail = 0
    warn = 0

    # 1) config file (optional)
    ok, level, details, fix = _check_path_exists(CONFIG_PATH, "file", "Optional: copy conf/settings.ini to override paths")
    table.add_row("conf/settings.ini", _status(level), details, fix if not ok else "")
    if not ok:
        warn += 1

    cfg = resolve_config(args.dataset, args.collection)

    # 2) dataset
    info = file_info(cfg.dataset_path)
    store = DatasetStore(cfg.dataset_path)
    snapshot = None
    if not info["exists"]:
        table.add_row("dataset", _status("FAIL"), f"missing: {cfg.dataset_path}", "Set MOUNTDEX_DATASET or [PATHS] DATASET")
        fail += 1
    else:
        try:
            store.load()
            snapshot = store.snapshot()
            details = f"{len(snapshot)} mounts | v{snapshot.data_version} | {human_mtime(info['mtime'])} | {human_size(info['size'])}"
            table.add_row("dataset", _status("PASS"), details, "")
        except LoadError as e:
            table.add_row("dataset", _status("FAIL"), str(e), "Fix the dataset JSON")
            fail += 1

    meta_ok = store.meta_path.is_file()
    table.add_row(
        "dataset.meta.json",
        _status("PASS" if meta_ok else "WARN"),
        str(store.meta_path),
        "" if meta_ok else "Optional: dataVersion falls back to the records",
    )
    if not meta_ok:
        warn += 1

    # 3) dataset content
    if snapshot is not None:
        checks = [
            ("ids well formed", [m.id for m in snapshot.records if not ID_PATTERN.match(m.id)]),
            ("expansion values", [m.id for m in snapshot.records if m.expansion not in EXPANSIONS]),
            ("category values", [m.id for m in snapshot.records if m.category not in CATEGORIES]),
            ("faction values", [m.id for m in snapshot.records if m.faction not in FACTIONS]),
            ("source type values", [m.id for m in snapshot.records if m.source_type not in SOURCE_TYPES]),
        ]
        for label, bad in checks:
            level = "PASS" if not bad else "WARN"
            table.add_row(label, _status(level), ", ".join(bad[:5]) or "ok", "Check the authoring tools" if bad else "")
            if bad:
                warn += 1

    # 4) collection storage
    storage = JsonFileStorage(cfg.collection_path)
    try:
        raw = storage.get_item(cfg.storage_key)
        coll = CollectionStore(storage, key=cfg.storage_key)
        details = f"{len(coll.owned_ids())} owned | key={cfg.storage_key}" if raw else f"empty | {cfg.collection_path}"
        table.add_row("collection storage", _status("PASS"), details, "")
        if snapshot is not None:
            valid = set(snapshot.ids())
            stale = [x for x in coll.owned_ids() if x not in valid]
            level = "PASS" if not stale else "WARN"
            table.add_row("collection ids", _status(level), ", ".join(stale[:5]) or "ok", "mountdex collection reconcile" if stale else "")
            if stale:
                warn += 1
    except StorageError as e:
        table.add_row("collection storage", _status("FAIL"), str(e), "Fix or remove the storage file")
        fail += 1

    console.print(table)
    console.print(f"[dim]Root: {PROJECT_ROOT} | Summary: FAIL={fail}, WARN={warn}[/dim]")

    if not args.enforce:
        return 0
    if fail:
        return 2
    if args.strict and warn:
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
