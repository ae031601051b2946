from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

from app.mappers.fallback_extractor import extract_locally
from app.mappers.validation import INVALID_DATA, merge_business_data, validate_business_data
from app.schemas.business import BusinessRecord
from app.schemas.responses import (
    RenderEvent,
    RenderMessage,
    ResetMessage,
    SessionResponse,
    UpdateContentMessage,
)
from app.services.extraction import ExtractionService
from app.services.preview import PreviewService

logger = logging.getLogger(__name__)


class PreviewSession:
    """Holds the last valid record of one chat and renders it.

    Cycles (extract, merge, render) run one at a time; a turn that arrives
    while another is in flight waits for it. Render messages are held back
    until the render surface has reported READY.
    """

    def __init__(
        self,
        session_id: str,
        preview: PreviewService,
        extraction: ExtractionService | None = None,
    ) -> None:
        self.session_id = session_id
        self.created_at = datetime.now(timezone.utc)
        self.business_data: BusinessRecord | None = None
        self.preview_html: str | None = None
        self.error: str | None = None
        self._preview = preview
        self._extraction = extraction
        self._lock = asyncio.Lock()
        self._surface_ready = False
        self._pending: RenderMessage | None = None

    def snapshot(self, message: RenderMessage | None = None) -> SessionResponse:
        return SessionResponse(
            session_id=self.session_id,
            created_at=self.created_at,
            business_data=self.business_data,
            error=self.error,
            message=message,
        )

    async def handle_turn(self, transcript: str) -> SessionResponse:
        async with self._lock:
            if self._extraction is not None:
                result = await self._extraction.extract_business_data(transcript)
            else:
                result = extract_locally(transcript)

            if not result.success:
                self.error = result.error
                return self.snapshot()

            # null means "not mentioned", not "erase what we know"
            partial = {k: v for k, v in (result.data or {}).items() if v is not None}
            return await self._merge(partial)

    async def merge(self, partial: Mapping[str, Any]) -> SessionResponse:
        async with self._lock:
            return await self._merge(partial)

    async def update(self, data: Mapping[str, Any]) -> SessionResponse:
        async with self._lock:
            validation = validate_business_data(data)
            if not validation.ok:
                self.error = validation.error or INVALID_DATA
                return self.snapshot()
            return await self._render(validation.record)

    async def reset(self) -> SessionResponse:
        async with self._lock:
            self.business_data = None
            self.preview_html = None
            self.error = None
            return self._deliver(ResetMessage())

    def acknowledge(self, event: RenderEvent) -> RenderMessage | None:
        """Handle an event from the render surface; returns a message to send, if any."""
        if event.type == "READY":
            self._surface_ready = True
            pending, self._pending = self._pending, None
            return pending
        if event.type == "ERROR":
            logger.warning("Render surface error in session %s: %s", self.session_id, event.message)
        return None

    async def _merge(self, partial: Mapping[str, Any]) -> SessionResponse:
        record, error = merge_business_data(self.business_data, partial)
        if error is not None:
            self.error = error
            return self.snapshot()
        return await self._render(record)

    async def _render(self, record: BusinessRecord) -> SessionResponse:
        self.business_data = record
        result = await self._preview.render(record)
        if not result.success:
            # The surface keeps showing the last good render
            self.error = result.error
            return self.snapshot()
        self.preview_html = result.html
        self.error = None
        return self._deliver(UpdateContentMessage(html=result.html))

    def _deliver(self, message: RenderMessage) -> SessionResponse:
        if self._surface_ready:
            return self.snapshot(message)
        self._pending = message
        return self.snapshot()


class SessionStore:
    def __init__(
        self,
        preview: PreviewService,
        extraction: ExtractionService | None = None,
        max_sessions: int = 1000,
    ) -> None:
        self._sessions: dict[str, PreviewSession] = {}
        self._preview = preview
        self._extraction = extraction
        self._max_sessions = max_sessions

    def _evict(self) -> None:
        if len(self._sessions) <= self._max_sessions:
            return
        oldest = sorted(self._sessions.values(), key=lambda s: s.created_at)
        while len(self._sessions) > self._max_sessions and oldest:
            self._sessions.pop(oldest.pop(0).session_id, None)

    def create(self) -> PreviewSession:
        session = PreviewSession(uuid.uuid4().hex[:12], self._preview, self._extraction)
        self._sessions[session.session_id] = session
        self._evict()
        return session

    def get(self, session_id: str) -> PreviewSession | None:
        return self._sessions.get(session_id)
