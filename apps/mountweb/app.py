# -*- coding: utf-8 -*-
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Sequence

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from mountdex.collection.storage import JsonFileStorage
from mountdex.collection.store import CollectionStore
from mountdex.config.loader import DEFAULT_FUZZY_THRESHOLD, DEFAULT_STORAGE_KEY
from mountdex.dataset import DatasetStore
from mountdex.errors import LoadError
from mountdex.session import MountSession
from mountdex.version import project_version

from .api import router as api_router
from .settings import MountWebSettings

logger = logging.getLogger(__name__)


def create_app(
    dataset_path: Optional[Path] = None,
    collection_path: Optional[Path] = None,
    *,
    root_path: str = "",
    cors_allow_origins: Optional[Sequence[str]] = None,
    gzip_minimum_size: int = 800,
    auto_reload_dataset: bool = False,
    storage_key: str = DEFAULT_STORAGE_KEY,
    fuzzy_threshold: float = DEFAULT_FUZZY_THRESHOLD,
    session: Optional[MountSession] = None,
) -> FastAPI:
    """FastAPI app factory.

    Pass `session` to serve an already constructed MountSession (tests);
    otherwise dataset_path and collection_path are required.
    """

    rp = MountWebSettings.normalize_root_path(root_path)

    if session is None:
        if dataset_path is None or collection_path is None:
            raise ValueError("dataset_path and collection_path are required without a session")
        session = MountSession(
            DatasetStore(Path(dataset_path)),
            CollectionStore(JsonFileStorage(Path(collection_path)), key=storage_key),
            fuzzy_threshold=fuzzy_threshold,
        )

    settings = MountWebSettings(
        dataset_path=Path(session.dataset.path),
        collection_path=Path(collection_path) if collection_path else None,
        root_path=rp,
        cors_allow_origins=list(cors_allow_origins) if cors_allow_origins else None,
        gzip_minimum_size=int(gzip_minimum_size),
        auto_reload_dataset=bool(auto_reload_dataset),
    )

    app = FastAPI(
        title="Mountdex API",
        version=project_version(),
        root_path=rp,
        docs_url="/docs",
        redoc_url=None,
    )

    # state
    app.state.settings = settings
    app.state.session = session
    app.state.auto_reload_dataset = settings.auto_reload_dataset

    if not session.is_loaded():
        try:
            session.load()
        except LoadError as exc:
            # served as 503 until /api/v1/reload succeeds
            logger.error("Initial dataset load failed: %s", exc)

    # middleware
    if settings.gzip_minimum_size and settings.gzip_minimum_size > 0:
        app.add_middleware(GZipMiddleware, minimum_size=int(settings.gzip_minimum_size))

    if settings.cors_allow_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(settings.cors_allow_origins),
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    # routes
    app.include_router(api_router)

    @app.get("/healthz")
    def healthz():
        return {"ok": True, "dataset_loaded": session.is_loaded()}

    return app
