from typing import Any

from fastapi import APIRouter, Body

from app.dependencies import PreviewDep
from app.schemas.responses import PreviewResult

router = APIRouter(prefix="/preview")


@router.post("", response_model=PreviewResult)
async def generate_preview(
    service: PreviewDep,
    data: dict[str, Any] | None = Body(default=None),
) -> PreviewResult:
    return await service.generate_preview(data or {})


@router.delete("/cache", status_code=204)
async def clear_template_cache(service: PreviewDep) -> None:
    service.clear_cache()
