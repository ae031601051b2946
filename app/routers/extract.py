import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from app.dependencies import ExtractionDep
from app.schemas.responses import ExtractRequest

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/extract")
async def extract(
    service: ExtractionDep,
    request: ExtractRequest | None = None,
) -> JSONResponse:
    if service is None:
        logger.error("No completion service credentials configured")
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": "Server configuration error"},
        )

    transcript = request.transcript if request else None
    if not transcript or not transcript.strip():
        return JSONResponse(
            status_code=400,
            content={"success": False, "error": "Missing transcript"},
        )

    # Upstream and extraction failures are turned into responses by the app's exception handlers
    record = await service.extract(transcript)
    return JSONResponse(content={
        "success": True,
        "data": record.model_dump(by_alias=True, mode="json"),
    })
