from typing import Any

from fastapi import APIRouter, Body, HTTPException

from app.dependencies import SessionStoreDep
from app.schemas.responses import RenderEvent, RenderMessage, SessionResponse, TurnRequest
from app.services.sessions import PreviewSession, SessionStore

router = APIRouter(prefix="/sessions")


def _get_or_404(store: SessionStore, session_id: str) -> PreviewSession:
    session = store.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return session


@router.post("", response_model=SessionResponse, status_code=201)
async def create_session(store: SessionStoreDep) -> SessionResponse:
    return store.create().snapshot()


@router.get("/{session_id}", response_model=SessionResponse)
async def get_session(session_id: str, store: SessionStoreDep) -> SessionResponse:
    return _get_or_404(store, session_id).snapshot()


@router.post("/{session_id}/turns", response_model=SessionResponse)
async def post_turn(session_id: str, turn: TurnRequest, store: SessionStoreDep) -> SessionResponse:
    return await _get_or_404(store, session_id).handle_turn(turn.transcript)


@router.post("/{session_id}/data", response_model=SessionResponse)
async def merge_data(
    session_id: str,
    store: SessionStoreDep,
    partial: dict[str, Any] = Body(...),
) -> SessionResponse:
    return await _get_or_404(store, session_id).merge(partial)


@router.post("/{session_id}/events", response_model=RenderMessage | None)
async def post_event(session_id: str, event: RenderEvent, store: SessionStoreDep) -> RenderMessage | None:
    return _get_or_404(store, session_id).acknowledge(event)


@router.delete("/{session_id}/preview", response_model=SessionResponse)
async def reset_preview(session_id: str, store: SessionStoreDep) -> SessionResponse:
    return await _get_or_404(store, session_id).reset()
