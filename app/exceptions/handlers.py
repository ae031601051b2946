import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.schemas.responses import ExtractionPhase

from .custom import (
    CompletionServiceError,
    ExtractionError,
    RateLimitError,
    UpstreamTimeoutError,
)

logger = logging.getLogger(__name__)


async def completion_error_handler(_request: Request, exc: CompletionServiceError) -> JSONResponse:
    logger.error("Completion service error: %s (status=%s)", exc.message, exc.status_code)
    return JSONResponse(
        status_code=502,
        content={"success": False, "error": "LLM service error"},
    )


async def upstream_timeout_handler(_request: Request, exc: UpstreamTimeoutError) -> JSONResponse:
    logger.error("%s timed out after %ss", exc.service, exc.timeout)
    return JSONResponse(
        status_code=504,
        content={"success": False, "error": "Request timeout"},
    )


async def rate_limit_error_handler(_request: Request, exc: RateLimitError) -> JSONResponse:
    logger.warning("Rate limit hit for %s", exc.service)
    return JSONResponse(
        status_code=429,
        content={"success": False, "error": "Rate limited", "retryAfter": exc.retry_after_ms},
    )


async def extraction_error_handler(_request: Request, exc: ExtractionError) -> JSONResponse:
    logger.error("Extraction failed in %s: %s | raw=%r", exc.phase, exc.message, exc.raw_output)
    error = "Invalid LLM output" if exc.phase == ExtractionPhase.parsing else exc.message
    return JSONResponse(
        status_code=422,
        content={"success": False, "error": error},
    )


async def request_validation_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info("Rejected malformed request: %s", exc.errors())
    return JSONResponse(
        status_code=400,
        content={"success": False, "error": "Invalid request body"},
    )


async def unhandled_error_handler(_request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error: %s", exc)
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": "Internal server error"},
    )
