from __future__ import annotations

from typing import cast

from fastapi import APIRouter, HTTPException, Request

from querydeck.models.session import (
    ConnectionCoordinates,
    SessionSnapshot,
    ToggleSettingRequest,
    UpdateConnectionRequest,
    UpdateQueryRequest,
)
from querydeck.session.manager import SessionManager, SessionStateError

router = APIRouter(prefix="/api", tags=["session"])


def _get_manager(request: Request) -> SessionManager:
    return cast(SessionManager, request.app.state.manager)


@router.get("/session", response_model=SessionSnapshot)
def get_session(request: Request) -> SessionSnapshot:
    return _get_manager(request).snapshot()


@router.put("/session/query", response_model=SessionSnapshot)
def update_query(body: UpdateQueryRequest, request: Request) -> SessionSnapshot:
    manager = _get_manager(request)
    manager.set_query(body.query)
    return manager.snapshot()


@router.post("/session/format", response_model=SessionSnapshot)
def format_query(request: Request) -> SessionSnapshot:
    manager = _get_manager(request)
    manager.format_query()
    return manager.snapshot()


@router.post("/session/execute", response_model=SessionSnapshot)
async def execute(request: Request) -> SessionSnapshot:
    """Request execution; returns with phase awaiting_confirmation when approval is needed."""
    manager = _get_manager(request)
    await manager.request_execute()
    return manager.snapshot()


@router.post("/session/confirm", response_model=SessionSnapshot)
async def confirm(request: Request) -> SessionSnapshot:
    manager = _get_manager(request)
    try:
        await manager.confirm()
    except SessionStateError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    return manager.snapshot()


@router.post("/session/cancel", response_model=SessionSnapshot)
def cancel(request: Request) -> SessionSnapshot:
    manager = _get_manager(request)
    try:
        manager.cancel()
    except SessionStateError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    return manager.snapshot()


@router.put("/session/connection", response_model=SessionSnapshot)
async def update_connection(body: UpdateConnectionRequest, request: Request) -> SessionSnapshot:
    manager = _get_manager(request)
    coords = ConnectionCoordinates(
        project_id=body.project_id.strip(),
        instance_id=body.instance_id.strip(),
        database_id=body.database_id.strip(),
    )
    await manager.set_connection_coordinates(coords)
    return manager.snapshot()


@router.post("/session/initialize", response_model=SessionSnapshot)
async def initialize(request: Request) -> SessionSnapshot:
    manager = _get_manager(request)
    await manager.initialize()
    return manager.snapshot()


@router.patch("/session/settings", response_model=SessionSnapshot)
def toggle_setting(body: ToggleSettingRequest, request: Request) -> SessionSnapshot:
    manager = _get_manager(request)
    try:
        manager.toggle_setting(body.name, body.value)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return manager.snapshot()
