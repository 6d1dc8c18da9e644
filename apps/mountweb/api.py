# -*- coding: utf-8 -*-
from __future__ import annotations

import hashlib
import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from mountdex.collection.transfer import DEFAULT_FILENAME
from mountdex.errors import FormatError, IndexNotBuiltError, LoadError
from mountdex.filters import FilterState, active_filter_summary, filter_suggestions
from mountdex.query import OWNERSHIP_MODES
from mountdex.schemas.mount import Mount
from mountdex.session import MountSession

logger = logging.getLogger(__name__)


def get_session(request: Request) -> MountSession:
    """Resolve the session from app state (with optional auto-reload)."""

    session: MountSession = request.app.state.session  # type: ignore[attr-defined]
    auto = bool(getattr(request.app.state, "auto_reload_dataset", False))
    if auto and session.is_loaded():
        try:
            session.load(force=False)
        except LoadError as exc:
            # keep serving the previous snapshot
            logger.warning("Dataset auto-reload failed: %s", exc)
    if not session.is_loaded():
        raise HTTPException(status_code=503, detail="Dataset not loaded")
    return session


def _cache_headers(request: Request, *, max_age: int, etag: Optional[str] = None) -> Dict[str, str]:
    if max_age <= 0:
        return {}
    if bool(getattr(request.app.state, "auto_reload_dataset", False)):
        return {}
    headers = {"Cache-Control": f"public, max-age={int(max_age)}"}
    if etag:
        headers["ETag"] = str(etag)
    return headers


def _json(data: Dict[str, Any], *, headers: Optional[Dict[str, str]] = None) -> JSONResponse:
    return JSONResponse(content=data, headers=headers or {})


def _mount_out(m: Mount, session: MountSession) -> Dict[str, Any]:
    out = m.to_dict()
    out["owned"] = session.collection.is_owned(m.id)
    note = session.collection.note(m.id)
    if note:
        out["userNote"] = note
    return out


router = APIRouter(prefix="/api/v1")


class ToggleRequest(BaseModel):
    id: str = Field(..., min_length=1)


class BulkRequest(BaseModel):
    ids: List[str] = Field(default_factory=list)
    owned: bool = True


class NoteRequest(BaseModel):
    text: str = ""


# ----------------- dataset -----------------


@router.get("/meta")
def meta(request: Request, session: MountSession = Depends(get_session)):
    snap = session.snapshot
    m = {
        "dataVersion": snap.data_version,
        "generatedAtUtc": snap.generated_at_utc,
        "count": len(snap),
        "expansions": session.query.classifications(),
        "facets": session.query.facet_counts(),
        "ownershipModes": list(OWNERSHIP_MODES),
        "searchDebounceMs": session.debounce_ms,
        "collection": {
            "owned": len(session.collection.owned_ids()),
            "canUndo": session.collection.can_undo(),
            "storageOk": session.collection.last_storage_error is None,
        },
    }
    etag = f'W/"meta-{snap.data_version}-{int(session.dataset.mtime())}"'
    headers = _cache_headers(request, max_age=60, etag=etag)
    return _json(m, headers=headers)


@router.get("/mounts")
def mounts(
    request: Request,
    session: MountSession = Depends(get_session),
    q: str = "",
    expansion: List[str] = Query(default=[]),
    category: str = "all",
    faction: str = "all",
    source_type: str = "all",
    ownership: str = "all",
    offset: int = Query(0, ge=0),
    limit: int = Query(200, ge=1, le=2000),
):
    if ownership not in OWNERSHIP_MODES:
        raise HTTPException(status_code=400, detail=f"Unknown ownership filter: {ownership}")
    filters = FilterState(
        expansions=tuple(expansion),
        category=category,
        faction=faction,
        source_type=source_type,
        ownership=ownership,
    )
    hits = session.apply_filters(q, filters)
    total = len(hits)
    page = hits[int(offset) : int(offset) + int(limit)]
    body: Dict[str, Any] = {
        "q": q,
        "items": [_mount_out(m, session) for m in page],
        "count": len(page),
        "total": total,
        "offset": int(offset),
        "limit": int(limit),
        "activeFilters": active_filter_summary(filters),
    }
    if not total:
        body["suggestions"] = filter_suggestions(filters)
    return _json(body)


@router.get("/mounts/{mount_id}")
def mount_detail(mount_id: str, session: MountSession = Depends(get_session)):
    m = session.query.by_id(mount_id)
    if m is None:
        raise HTTPException(status_code=404, detail=f"Mount not found: {mount_id}")
    return {"mount": _mount_out(m, session)}


@router.get("/expansions/{name}")
def expansion_mounts(name: str, request: Request, session: MountSession = Depends(get_session)):
    items = session.query.by_classification(name)
    sig = hashlib.sha1(name.encode("utf-8")).hexdigest()[:8]
    etag = f'W/"expansion-{session.snapshot.data_version}-{sig}-{len(items)}"'
    headers = _cache_headers(request, max_age=300, etag=etag)
    return _json(
        {"expansion": name, "items": [m.to_dict() for m in items], "count": len(items)},
        headers=headers,
    )


@router.post("/reload")
def reload_dataset(request: Request):
    session: MountSession = request.app.state.session  # type: ignore[attr-defined]
    try:
        changed = session.load(force=True)
    except LoadError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    return {
        "reloaded": changed,
        "dataVersion": session.snapshot.data_version,
        "droppedIds": list(session.last_dropped_ids),
    }


# ----------------- collection -----------------


def _collection_body(session: MountSession) -> Dict[str, Any]:
    state = session.collection.state()
    return {
        "owned": sorted(state.owned_ids),
        "notes": dict(state.notes),
        "lastUpdated": state.last_updated,
        "canUndo": session.collection.can_undo(),
        "storageError": str(session.collection.last_storage_error or "") or None,
    }


@router.get("/collection")
def collection(session: MountSession = Depends(get_session)):
    body = _collection_body(session)
    body["stats"] = session.stats()
    return body


@router.get("/collection/stats")
def collection_stats(session: MountSession = Depends(get_session)):
    return session.stats()


@router.post("/collection/toggle")
def collection_toggle(req: ToggleRequest, session: MountSession = Depends(get_session)):
    if session.query.by_id(req.id) is None:
        raise HTTPException(status_code=404, detail=f"Mount not found: {req.id}")
    owned = session.collection.toggle(req.id)
    return {"id": req.id, "owned": owned, "canUndo": session.collection.can_undo()}


@router.post("/collection/bulk")
def collection_bulk(req: BulkRequest, session: MountSession = Depends(get_session)):
    valid = set(session.valid_ids())
    unknown = [x for x in req.ids if x not in valid]
    if unknown:
        raise HTTPException(status_code=404, detail=f"Unknown mount ids: {', '.join(unknown)}")
    changed = session.collection.set_bulk(req.ids, bool(req.owned))
    body = _collection_body(session)
    body["changed"] = changed
    return body


@router.post("/collection/undo")
def collection_undo(session: MountSession = Depends(get_session)):
    undone = session.collection.undo()
    body = _collection_body(session)
    body["undone"] = undone
    return body


@router.put("/collection/notes/{mount_id}")
def collection_note(mount_id: str, req: NoteRequest, session: MountSession = Depends(get_session)):
    if session.query.by_id(mount_id) is None:
        raise HTTPException(status_code=404, detail=f"Mount not found: {mount_id}")
    session.collection.set_note(mount_id, req.text)
    return {"id": mount_id, "note": session.collection.note(mount_id)}


@router.get("/collection/export")
def collection_export(session: MountSession = Depends(get_session)):
    cfile = session.export_collection()
    headers = {"Content-Disposition": f'attachment; filename="{DEFAULT_FILENAME}"'}
    return _json(cfile.to_dict(), headers=headers)


@router.post("/collection/import")
async def collection_import(request: Request, session: MountSession = Depends(get_session)):
    raw = await request.body()
    try:
        result = session.import_collection(raw)
    except FormatError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except IndexNotBuiltError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    body = result.to_dict()
    body["owned"] = session.collection.owned_ids()
    return body
