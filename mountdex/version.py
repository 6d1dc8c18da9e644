# -*- coding: utf-8 -*-
"""Project version helpers."""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Dict

from mountdex import __version__


def _project_root() -> Path:
    return Path(__file__).resolve().parents[1]


@lru_cache(maxsize=1)
def _load_version_file() -> Dict[str, str]:
    path = _project_root() / "conf" / "version.json"
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return {}
    if not isinstance(data, dict):
        return {}
    out: Dict[str, str] = {}
    for key in ("project_version",):
        val = data.get(key)
        if isinstance(val, (str, int)) and str(val).strip():
            out[key] = str(val).strip()
    return out


def project_version() -> str:
    return _load_version_file().get("project_version", __version__)


def versions() -> Dict[str, str]:
    return {"project_version": project_version()}
