# -*- coding: utf-8 -*-
"""Durable local storage backends (keyed string blobs, localStorage-like)."""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Dict, Optional, Protocol

from mountdex.errors import StorageError

logger = logging.getLogger(__name__)


class KeyValueStorage(Protocol):
    def get_item(self, key: str) -> Optional[str]:
        ...

    def set_item(self, key: str, value: str) -> None:
        ...


class MemoryStorage:
    """Process-local storage (tests, ephemeral sessions)."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})
        self._lock = threading.Lock()

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            self._items[key] = str(value)


class JsonFileStorage:
    """All keys live in one JSON object file; writes replace the file atomically."""

    def __init__(self, path: Path):
        self._path = Path(path)
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def _read_all(self, recover: bool = False) -> Dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            text = self._path.read_text(encoding="utf-8")
        except OSError as exc:
            raise StorageError(f"Failed to read storage file {self._path}: {exc}") from exc
        try:
            doc = json.loads(text)
        except ValueError as exc:
            if recover:
                return self._set_aside(str(exc))
            raise StorageError(f"Failed to read storage file {self._path}: {exc}") from exc
        if not isinstance(doc, dict):
            if recover:
                return self._set_aside("not a JSON object")
            raise StorageError(f"Storage file must hold a JSON object: {self._path}")
        return {str(k): v if isinstance(v, str) else json.dumps(v) for k, v in doc.items()}

    def _set_aside(self, reason: str) -> Dict[str, str]:
        """Move an unreadable file to `<name>.bak` so the next write can replace it."""
        backup = self._path.with_name(self._path.name + ".bak")
        logger.warning("Unreadable storage file %s (%s); moving it to %s", self._path, reason, backup)
        try:
            os.replace(self._path, backup)
        except OSError as exc:
            raise StorageError(f"Failed to move aside storage file {self._path}: {exc}") from exc
        return {}

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            return self._read_all().get(key)

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            items = self._read_all(recover=True)
            items[key] = str(value)
            payload = json.dumps(items, ensure_ascii=False, indent=2)
            try:
                self._path.parent.mkdir(parents=True, exist_ok=True)
                fd, tmp = tempfile.mkstemp(prefix=".collection-", dir=str(self._path.parent))
                try:
                    with os.fdopen(fd, "w", encoding="utf-8") as fh:
                        fh.write(payload)
                    os.replace(tmp, self._path)
                except BaseException:
                    if os.path.exists(tmp):
                        os.unlink(tmp)
                    raise
            except OSError as exc:
                raise StorageError(f"Failed to write storage file {self._path}: {exc}") from exc
