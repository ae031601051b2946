from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from app.schemas.business import BusinessRecord


class ExtractionPhase(StrEnum):
    building_prompt = "building_prompt"
    awaiting_service = "awaiting_service"
    parsing = "parsing"
    normalizing = "normalizing"
    validating = "validating"


class FailureKind(StrEnum):
    network_failure = "network_failure"
    rate_limited = "rate_limited"
    parse_failure = "parse_failure"
    schema_violation = "schema_violation"


class ExtractRequest(BaseModel):
    transcript: str | None = None


class ExtractionResult(BaseModel):
    success: bool
    data: dict[str, Any] | None = None  # camelCase record fields, possibly partial
    error: str | None = None
    failure: FailureKind | None = None
    phase: ExtractionPhase | None = None


class PreviewResult(BaseModel):
    success: bool
    html: str | None = None
    error: str | None = None


class UpdateContentMessage(BaseModel):
    type: Literal["UPDATE_CONTENT"] = "UPDATE_CONTENT"
    html: str


class ResetMessage(BaseModel):
    type: Literal["RESET"] = "RESET"


RenderMessage = UpdateContentMessage | ResetMessage


class RenderEvent(BaseModel):
    """Acknowledgement sent back by the render surface."""

    type: Literal["READY", "CONTENT_UPDATED", "ERROR"]
    message: str | None = None


class TurnRequest(BaseModel):
    transcript: str


class SessionResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    session_id: str
    created_at: datetime
    business_data: BusinessRecord | None = None
    error: str | None = None
    message: RenderMessage | None = None
