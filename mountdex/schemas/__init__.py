# -*- coding: utf-8 -*-
"""Data models for the mount dataset and artifact metadata."""

from mountdex.schemas.mount import (
    CATEGORIES,
    EXPANSIONS,
    FACTIONS,
    ID_PATTERN,
    SOURCE_TYPES,
    DatasetSnapshot,
    Mount,
)

__all__ = [
    "CATEGORIES",
    "EXPANSIONS",
    "FACTIONS",
    "ID_PATTERN",
    "SOURCE_TYPES",
    "DatasetSnapshot",
    "Mount",
]
