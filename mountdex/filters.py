# -*- coding: utf-8 -*-
"""Filter panel state + helper texts for empty result sets."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple

from mountdex.query import (
    ALL,
    OWNERSHIP_ALL,
    OWNERSHIP_MODES,
    OWNERSHIP_NOT_OWNED,
    OWNERSHIP_OWNED,
    FacetFilters,
)

MAX_SUGGESTIONS = 3


@dataclass(frozen=True)
class FilterState:
    expansions: Tuple[str, ...] = ()
    category: str = ALL
    faction: str = ALL
    source_type: str = ALL
    ownership: str = OWNERSHIP_ALL

    def __post_init__(self) -> None:
        if self.ownership not in OWNERSHIP_MODES:
            raise ValueError(f"Unknown ownership filter: {self.ownership!r}")

    def facets(self) -> FacetFilters:
        return FacetFilters(category=self.category, faction=self.faction, source_type=self.source_type)

    def toggle_expansion(self, expansion: str) -> "FilterState":
        if expansion in self.expansions:
            exps = tuple(e for e in self.expansions if e != expansion)
        else:
            exps = self.expansions + (expansion,)
        return FilterState(exps, self.category, self.faction, self.source_type, self.ownership)

    def active_count(self) -> int:
        return sum(
            [
                bool(self.expansions),
                self.category != ALL,
                self.faction != ALL,
                self.source_type != ALL,
                self.ownership != OWNERSHIP_ALL,
            ]
        )


def filter_suggestions(filters: FilterState) -> List[str]:
    """Hints shown when a query returns nothing (at most three)."""
    out: List[str] = []
    if len(filters.expansions) == 1:
        out.append("Try selecting more expansions")
    if filters.category != ALL:
        out.append("Try changing the category filter")
    if filters.faction != ALL:
        out.append("Try changing the faction filter")
    if filters.source_type != ALL:
        out.append("Try changing the source type filter")
    if filters.ownership != OWNERSHIP_ALL:
        out.append("Try showing all mounts (owned and unowned)")

    if filters.active_count() > 2:
        out.append("Try clearing some filters")

    if not out:
        out = [
            "Try adjusting your search terms",
            "Check if you have any active filters",
            "Browse all mounts by clearing filters",
        ]
    return out[:MAX_SUGGESTIONS]


def active_filter_summary(filters: FilterState) -> List[str]:
    labels: List[str] = []
    if len(filters.expansions) == 1:
        labels.append(filters.expansions[0])
    elif filters.expansions:
        labels.append(f"{len(filters.expansions)} expansions")
    if filters.category != ALL:
        labels.append(f"{filters.category} mounts")
    if filters.faction != ALL:
        labels.append(f"{filters.faction} faction")
    if filters.source_type != ALL:
        labels.append(f"{filters.source_type} source")
    if filters.ownership == OWNERSHIP_OWNED:
        labels.append("Owned only")
    elif filters.ownership == OWNERSHIP_NOT_OWNED:
        labels.append("Not owned only")
    return labels
