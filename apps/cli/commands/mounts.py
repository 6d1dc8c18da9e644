#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""apps/cli/commands/mounts.py

Catalog browser: search, detail view, expansion listing and faceted filter.
Thin UI layer over mountdex.session.MountSession.
"""

from __future__ import annotations

import argparse
from typing import List, Optional

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from apps.cli.cli_common import open_session, resolve_config
from mountdex.filters import FilterState, active_filter_summary, filter_suggestions
from mountdex.query import OWNERSHIP_MODES
from mountdex.schemas.mount import Mount
from mountdex.session import MountSession

console = Console()


def _mount_table(title: str, mounts: List[Mount], session: MountSession, limit: int) -> Table:
    table = Table(title=title, box=box.MINIMAL, show_header=True, header_style="bold cyan")
    table.add_column("", justify="center", no_wrap=True)
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Name", style="bold")
    table.add_column("Expansion", no_wrap=True)
    table.add_column("Category", no_wrap=True)
    table.add_column("Faction", no_wrap=True)
    table.add_column("Source")

    shown = mounts[:limit] if limit > 0 else mounts
    for m in shown:
        owned = "[green]✔[/green]" if session.collection.is_owned(m.id) else "[dim]·[/dim]"
        source = m.source_type if not m.source_detail else f"{m.source_type}: {m.source_detail}"
        table.add_row(owned, m.id, m.name, m.expansion, m.category, m.faction, source)
    return table


def _print_results(title: str, mounts: List[Mount], session: MountSession, filters: FilterState, limit: int) -> int:
    if not mounts:
        console.print(f"[yellow]{title}: no mounts found.[/yellow]")
        for hint in filter_suggestions(filters):
            console.print(f"[dim]- {hint}[/dim]")
        return 1
    console.print(_mount_table(title, mounts, session, limit))
    active = active_filter_summary(filters)
    footer = f"{len(mounts)} result(s)"
    if limit > 0 and len(mounts) > limit:
        footer += f", showing first {limit}"
    if active:
        footer += " | filters: " + ", ".join(active)
    console.print(f"[dim]{footer}[/dim]")
    return 0


def _show(session: MountSession, mount_id: str) -> int:
    m = session.query.by_id(mount_id)
    if m is None:
        console.print(f"[red]Mount not found: {mount_id}[/red]")
        return 1

    grid = Table.grid(padding=(0, 1))
    grid.add_column(justify="right", style="bold", no_wrap=True)
    grid.add_column(ratio=1)
    rows = [
        ("ID", m.id),
        ("Expansion", m.expansion),
        ("Category", m.category),
        ("Faction", m.faction),
        ("Source", m.source_type),
        ("Detail", m.source_detail or "-"),
        ("Zone", m.zone or "-"),
        ("Tags", ", ".join(m.tags) or "-"),
        ("Riding", m.requires_riding or "-"),
        ("Profession", m.profession_req or "-"),
        ("Reputation", m.reputation_req or "-"),
        ("Cost", m.cost or "-"),
        ("Limited", "yes" if m.is_limited_time else "no"),
        ("Wowhead", f"https://www.wowhead.com/item={m.wowhead_id}" if m.wowhead_id else "-"),
        ("Owned", "[green]yes[/green]" if session.collection.is_owned(m.id) else "no"),
        ("Note", session.collection.note(m.id) or "-"),
    ]
    for k, v in rows:
        grid.add_row(k, str(v))
    if m.notes:
        grid.add_row("Info", m.notes)
    console.print(Panel(grid, title=f"[bold]{m.name}[/bold]", title_align="left", border_style="cyan"))
    return 0


def _add_filter_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--expansion", "-e", action="append", default=[], help="Expansion (repeatable)")
    p.add_argument("--category", default="all")
    p.add_argument("--faction", default="all")
    p.add_argument("--source-type", default="all")
    p.add_argument("--ownership", choices=list(OWNERSHIP_MODES), default="all")
    p.add_argument("--limit", type=int, default=50, help="Max rows to print (0 = all)")


def _filters_from(args: argparse.Namespace) -> FilterState:
    return FilterState(
        expansions=tuple(args.expansion or ()),
        category=args.category,
        faction=args.faction,
        source_type=args.source_type,
        ownership=args.ownership,
    )


def main(argv: Optional[List[str]] = None) -> int:
    p = argparse.ArgumentParser(prog="mountdex mounts", description="Browse the mount catalog")
    p.add_argument("--dataset", default=None, help="Override dataset path (mounts.json)")
    p.add_argument("--collection", default=None, help="Override collection storage file")

    sub = p.add_subparsers(dest="action", required=True)
    p_search = sub.add_parser("search", help="Fuzzy search by name, source, zone and tags")
    p_search.add_argument("text", nargs="+")
    _add_filter_args(p_search)

    p_show = sub.add_parser("show", help="Show one mount")
    p_show.add_argument("id")

    p_exp = sub.add_parser("expansion", help="List mounts of one expansion ('all' for every mount)")
    p_exp.add_argument("name")
    p_exp.add_argument("--limit", type=int, default=0)

    p_filter = sub.add_parser("filter", help="Faceted listing with optional text")
    p_filter.add_argument("--text", "-q", default="")
    _add_filter_args(p_filter)

    args = p.parse_args(argv)
    session = open_session(console, resolve_config(args.dataset, args.collection))

    if args.action == "show":
        return _show(session, args.id)

    if args.action == "expansion":
        mounts = session.query.by_classification(args.name)
        if not mounts:
            known = ", ".join(session.query.classifications())
            console.print(f"[yellow]No mounts for expansion {args.name!r}. Known: {known}[/yellow]")
            return 1
        console.print(_mount_table(args.name, mounts, session, args.limit))
        return 0

    filters = _filters_from(args)
    text = " ".join(args.text) if args.action == "search" else args.text
    title = f"Search: {text}" if text.strip() else "Mounts"
    return _print_results(title, session.apply_filters(text, filters), session, filters, args.limit)


if __name__ == "__main__":
    raise SystemExit(main())
