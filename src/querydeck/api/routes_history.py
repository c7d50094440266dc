from __future__ import annotations

from typing import cast

from fastapi import APIRouter, HTTPException, Request

from querydeck.models.session import HistoryEntry, SessionSnapshot
from querydeck.session.manager import SessionManager
from querydeck.store.interface import OutOfRangeError

router = APIRouter(prefix="/api", tags=["history"])


def _get_manager(request: Request) -> SessionManager:
    return cast(SessionManager, request.app.state.manager)


def _get_entry(manager: SessionManager, index: int) -> HistoryEntry:
    try:
        return manager.get_history_entry(index)
    except OutOfRangeError as e:
        raise HTTPException(status_code=404, detail="history entry not found") from e


@router.get("/history", response_model=list[HistoryEntry])
def list_history(request: Request) -> list[HistoryEntry]:
    """List executed queries, oldest first."""
    return list(_get_manager(request).history)


@router.get("/history/{index}", response_model=HistoryEntry)
def get_history_entry(index: int, request: Request) -> HistoryEntry:
    return _get_entry(_get_manager(request), index)


@router.post("/history/{index}/rerun", response_model=SessionSnapshot)
async def rerun_history_entry(index: int, request: Request) -> SessionSnapshot:
    manager = _get_manager(request)
    entry = _get_entry(manager, index)
    await manager.rerun(entry)
    return manager.snapshot()
