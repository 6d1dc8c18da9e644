#!/usr/bin/env python3
# -*- coding: utf-8 -*-
from __future__ import annotations

import argparse
from pathlib import Path
from typing import List, Optional

from rich import box
from rich.console import Console
from rich.table import Table

from apps.cli.cli_common import open_session, resolve_config
from mountdex.collection.transfer import (
    DEFAULT_FILENAME,
    read_collection_file,
    write_collection_file,
)
from mountdex.errors import FormatError, StorageError
from mountdex.session import MountSession

console = Console()


def _check_ids(session: MountSession, ids: List[str]) -> bool:
    unknown = [x for x in ids if session.query.by_id(x) is None]
    if unknown:
        console.print(f"[red]Unknown mount id(s): {', '.join(unknown)}[/red]")
        return False
    return True


def _storage_note(session: MountSession) -> None:
    err = session.collection.last_storage_error
    if err is not None:
        console.print(f"[yellow]Not saved: {err}[/yellow]")


def _render_stats(session: MountSession) -> None:
    stats = session.stats()
    table = Table(title="Collection", box=box.MINIMAL, show_header=True, header_style="bold cyan")
    table.add_column("Expansion", style="bold")
    table.add_column("Owned", justify="right")
    table.add_column("Total", justify="right")
    table.add_column("%", justify="right")

    for name, row in stats["byClassification"].items():
        table.add_row(name, str(row["owned"]), str(row["total"]), f"{row['percentage']}%")
    g = stats["global"]
    table.add_row("[bold]All[/bold]", str(g["owned"]), str(g["total"]), f"[bold]{g['percentage']}%[/bold]")
    console.print(table)


def main(argv: Optional[List[str]] = None) -> int:
    p = argparse.ArgumentParser(prog="mountdex collection", description="Manage the owned-mount collection")
    p.add_argument("--dataset", default=None, help="Override dataset path (mounts.json)")
    p.add_argument("--collection", default=None, help="Override collection storage file")

    sub = p.add_subparsers(dest="action", required=True)
    p_own = sub.add_parser("own", help="Mark mounts as owned")
    p_own.add_argument("ids", nargs="+")
    p_unown = sub.add_parser("unown", help="Mark mounts as not owned")
    p_unown.add_argument("ids", nargs="+")
    p_toggle = sub.add_parser("toggle", help="Flip ownership of one mount")
    p_toggle.add_argument("id")
    sub.add_parser("stats", help="Per-expansion completion")
    sub.add_parser("list", help="List owned mounts")
    sub.add_parser("reconcile", help="Drop owned ids missing from the dataset")
    p_export = sub.add_parser("export", help="Write a portable collection file")
    p_export.add_argument("out", nargs="?", default=DEFAULT_FILENAME, help="File or directory")
    p_import = sub.add_parser("import", help="Replace the collection from a collection file")
    p_import.add_argument("file")
    p_note = sub.add_parser("note", help="Attach a note to a mount (empty text clears)")
    p_note.add_argument("id")
    p_note.add_argument("text", nargs="*")

    args = p.parse_args(argv)
    session = open_session(console, resolve_config(args.dataset, args.collection))
    store = session.collection

    if args.action in ("own", "unown"):
        if not _check_ids(session, args.ids):
            return 1
        changed = store.set_bulk(args.ids, args.action == "own")
        console.print(f"[green]{changed} mount(s) updated.[/green]")
        _storage_note(session)
        return 0

    if args.action == "toggle":
        if not _check_ids(session, [args.id]):
            return 1
        owned = store.toggle(args.id)
        state = "[green]owned[/green]" if owned else "not owned"
        console.print(f"{args.id}: {state}")
        _storage_note(session)
        return 0

    if args.action == "stats":
        _render_stats(session)
        return 0

    if args.action == "list":
        owned = store.owned_ids()
        if not owned:
            console.print("[dim]No owned mounts yet.[/dim]")
            return 0
        table = Table(box=box.MINIMAL, show_header=True, header_style="bold cyan")
        table.add_column("ID", style="dim")
        table.add_column("Name", style="bold")
        table.add_column("Note")
        for mid in owned:
            m = session.query.by_id(mid)
            table.add_row(mid, m.name if m else "-", store.note(mid) or "")
        console.print(table)
        return 0

    if args.action == "reconcile":
        # open_session already reconciled on load
        dropped = session.last_dropped_ids
        if dropped:
            console.print(f"[green]Removed {len(dropped)} id(s).[/green]")
        else:
            console.print("[green]Collection already consistent with the dataset.[/green]")
        return 0

    if args.action == "export":
        try:
            path = write_collection_file(Path(args.out), session.export_collection())
        except StorageError as e:
            console.print(f"[red]{e}[/red]")
            return 1
        console.print(f"[green]Exported {len(store.owned_ids())} owned mount(s) to {path}[/green]")
        return 0

    if args.action == "import":
        try:
            result = session.import_collection(read_collection_file(Path(args.file)))
        except FormatError as e:
            console.print(f"[red]{e}[/red]")
            return 1
        console.print(f"[green]Imported {len(result.accepted_ids)} owned mount(s).[/green]")
        if result.dropped_ids:
            console.print(f"[yellow]Skipped unknown id(s): {', '.join(result.dropped_ids)}[/yellow]")
        _storage_note(session)
        return 0

    if args.action == "note":
        if not _check_ids(session, [args.id]):
            return 1
        store.set_note(args.id, " ".join(args.text))
        console.print(f"{args.id}: {store.note(args.id) or '[dim](cleared)[/dim]'}")
        return 0

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
