# -*- coding: utf-8 -*-
from pathlib import Path

from mountdex.config import load_config
from mountdex.config.loader import (
    DEFAULT_DEBOUNCE_MS,
    DEFAULT_FUZZY_THRESHOLD,
    DEFAULT_STORAGE_KEY,
    PROJECT_ROOT,
)


def _ini(tmp_path, body):
    path = tmp_path / "settings.ini"
    path.write_text(body, encoding="utf-8")
    return path


def test_defaults_without_settings_file(tmp_path):
    cfg = load_config(tmp_path / "missing.ini", environ={})
    assert cfg.dataset_path == PROJECT_ROOT / "data" / "mounts.json"
    assert cfg.collection_path == Path.home() / ".mountdex" / "collection.json"
    assert cfg.storage_key == DEFAULT_STORAGE_KEY
    assert cfg.fuzzy_threshold == DEFAULT_FUZZY_THRESHOLD
    assert cfg.debounce_ms == DEFAULT_DEBOUNCE_MS


def test_settings_file_values(tmp_path):
    path = _ini(
        tmp_path,
        "[PATHS]\nDATASET = fixtures/m.json\nCOLLECTION = /var/lib/mountdex/c.json\n"
        "[COLLECTION]\nSTORAGE_KEY = custom.key\n"
        "[SEARCH]\nFUZZY_THRESHOLD = 0.8\nDEBOUNCE_MS = 300\n",
    )
    cfg = load_config(path, environ={})
    assert cfg.dataset_path == PROJECT_ROOT / "fixtures" / "m.json"
    assert cfg.collection_path == Path("/var/lib/mountdex/c.json")
    assert cfg.storage_key == "custom.key"
    assert cfg.fuzzy_threshold == 0.8
    assert cfg.debounce_ms == 300


def test_environment_overrides_settings(tmp_path):
    path = _ini(tmp_path, "[SEARCH]\nFUZZY_THRESHOLD = 0.8\n")
    env = {
        "MOUNTDEX_DATASET": str(tmp_path / "d.json"),
        "MOUNTDEX_STORAGE_KEY": "env.key",
        "MOUNTDEX_FUZZY_THRESHOLD": "0.6",
    }
    cfg = load_config(path, environ=env)
    assert cfg.dataset_path == tmp_path / "d.json"
    assert cfg.storage_key == "env.key"
    assert cfg.fuzzy_threshold == 0.6


def test_invalid_numbers_fall_back(tmp_path):
    env = {"MOUNTDEX_FUZZY_THRESHOLD": "high", "MOUNTDEX_DEBOUNCE_MS": "soon"}
    cfg = load_config(tmp_path / "missing.ini", environ=env)
    assert cfg.fuzzy_threshold == DEFAULT_FUZZY_THRESHOLD
    assert cfg.debounce_ms == DEFAULT_DEBOUNCE_MS


def test_threshold_is_clamped(tmp_path):
    cfg = load_config(tmp_path / "missing.ini", environ={"MOUNTDEX_FUZZY_THRESHOLD": "3"})
    assert cfg.fuzzy_threshold == 1.0
