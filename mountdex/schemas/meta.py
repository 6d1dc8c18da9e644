#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Timestamps and metadata blocks for generated documents."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from mountdex.version import versions


def utc_now_iso() -> str:
    """UTC timestamp with millisecond precision and a trailing `Z`."""
    stamp = datetime.now(timezone.utc).isoformat(timespec="milliseconds")
    return stamp.replace("+00:00", "Z")


def build_meta(
    *,
    schema: int,
    tool: str,
    sources: Optional[Dict[str, Any]] = None,
    extra: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    meta: Dict[str, Any] = {
        "schema": int(schema),
        "generated": utc_now_iso(),
        "tool": str(tool),
    }
    meta.update(versions())
    if sources:
        meta["sources"] = sources
    if extra:
        meta.update(extra)
    return meta
