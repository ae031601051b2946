from typing import Annotated

from fastapi import Depends, Request

from app.services.extraction import ExtractionService
from app.services.preview import PreviewService
from app.services.sessions import SessionStore


def get_extraction_service(request: Request) -> ExtractionService | None:
    return getattr(request.app.state, "extraction_service", None)


def get_preview_service(request: Request) -> PreviewService:
    return request.app.state.preview_service


def get_session_store(request: Request) -> SessionStore:
    return request.app.state.session_store


ExtractionDep = Annotated[ExtractionService | None, Depends(get_extraction_service)]
PreviewDep = Annotated[PreviewService, Depends(get_preview_service)]
SessionStoreDep = Annotated[SessionStore, Depends(get_session_store)]
