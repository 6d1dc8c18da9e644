#!/usr/bin/env python3
# -*- coding: utf-8 -*-
from __future__ import annotations

from typing import Any, Dict, List, Tuple

from rich import box
from rich.align import Align
from rich.columns import Columns
from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from apps.cli.cli_common import (
    DATA_DIR,
    PROJECT_ROOT,
    env_hint,
    file_info,
    human_mtime,
    resolve_config,
)
from apps.cli.registry import get_tools
from mountdex.config import MountdexConfig
from mountdex.errors import LoadError
from mountdex.session import MountSession
from mountdex.version import project_version

console = Console()

PALETTE = {
    "accent": "cyan",
    "muted": "grey70",
    "good": "green",
    "warn": "yellow",
    "bad": "red",
    "info": "blue",
}


def _panel(title: str, body: Any, *, border: str = "cyan") -> Panel:
    return Panel(
        body,
        title=title,
        title_align="left",
        border_style=border,
        box=box.MINIMAL,
        padding=(1, 1),
    )


def _kv_table(rows: List[Tuple[str, Any]]) -> Table:
    table = Table.grid(padding=(0, 1))
    table.add_column(justify="right", style="bold", no_wrap=True)
    table.add_column(ratio=1)
    for key, value in rows:
        table.add_row(str(key), value if value is not None else "-")
    return table


def _badge(label: str, level: str) -> Text:
    color = PALETTE.get(level, "white")
    return Text(label, style=f"bold {color}")


def _bar(pct: int, width: int = 20) -> Text:
    filled = max(0, min(width, (pct * width) // 100))
    bar = Text("#" * filled, style=PALETTE["good"])
    bar.append("." * (width - filled), style=f"dim {PALETTE['muted']}")
    bar.append(f" {pct}%")
    return bar


def _panel_header(ver: str, data_ver: str, env_name: str, env_kind: str) -> Panel:
    title = Text("Mountdex Dashboard", style="bold white")
    meta = Text(f"version {ver} | dataset v{data_ver} | env {env_name} ({env_kind})", style="dim")
    content = Group(Align.center(title), Align.center(meta))
    return Panel(content, border_style=PALETTE["accent"], box=box.MINIMAL_DOUBLE_HEAD, padding=(1, 1))


def _panel_overview(session: MountSession, cfg: MountdexConfig) -> Panel:
    ds = session.dataset
    info = file_info(ds.path)
    snap = session.snapshot
    rows = [
        ("Dataset", str(ds.path)),
        ("Updated", human_mtime(info["mtime"])),
        ("Mounts", str(len(snap))),
        ("Generated", snap.generated_at_utc or "-"),
        ("Collection", str(cfg.collection_path)),
        ("Root", str(PROJECT_ROOT)),
    ]
    return _panel("Overview", _kv_table(rows), border=PALETTE["accent"])


def _panel_collection(stats: Dict[str, Any], storage_ok: bool) -> Panel:
    g = stats.get("global") or {}
    rows: List[Tuple[str, Any]] = [
        ("Storage", _badge("OK", "good") if storage_ok else _badge("WARN", "warn")),
        ("Owned", f"{g.get('owned', 0)}/{g.get('total', 0)}"),
        ("Overall", _bar(int(g.get("percentage", 0)))),
    ]
    for name, row in (stats.get("byClassification") or {}).items():
        rows.append((name, _bar(int(row.get("percentage", 0)))))
    return _panel("Collection", _kv_table(rows), border=PALETTE["good"])


def _render_tools() -> None:
    table = Table(title="Commands", box=box.MINIMAL, show_header=True, header_style="bold cyan")
    table.add_column("Type", style="bold", no_wrap=True)
    table.add_column("Command", style="bold", no_wrap=True)
    table.add_column("Details", ratio=1)

    last_type = None
    for tool in get_tools():
        kind = tool.get("type") or "Other"
        name = tool.get("alias") or tool.get("file") or "-"
        details = Text(tool.get("desc", "-"))
        usage = tool.get("usage") or ""
        if usage:
            details.append("\n")
            details.append(usage, style="dim")
        table.add_row(kind if kind != last_type else "", f"mountdex {name}", details)
        last_type = kind

    console.print(table)


def main() -> None:
    env_name, env_kind = env_hint()
    ver = project_version()
    cfg = resolve_config()
    session = MountSession.from_config(cfg)

    try:
        session.load()
    except LoadError as e:
        console.print(_panel_header(ver, "-", env_name, env_kind))
        console.print(_panel("Dataset", Text(str(e), style=PALETTE["bad"]), border=PALETTE["bad"]))
        console.print(f"[dim]Data dir: {DATA_DIR}[/dim]")
        _render_tools()
        return

    console.print(_panel_header(ver, str(session.snapshot.data_version), env_name, env_kind))
    console.print(
        Columns(
            [
                _panel_overview(session, cfg),
                _panel_collection(session.stats(), session.collection.last_storage_error is None),
            ],
            equal=True,
            expand=True,
        )
    )
    console.print("")
    _render_tools()
    console.print("\n[dim]Tips: mountdex mounts search <text> | mountdex collection stats | mountdex doctor[/dim]")


if __name__ == "__main__":
    main()
