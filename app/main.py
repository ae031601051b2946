import logging
import sys
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError

from app.config import Settings
from app.exceptions.custom import (
    CompletionServiceError,
    ExtractionError,
    RateLimitError,
    UpstreamTimeoutError,
)
from app.exceptions.handlers import (
    completion_error_handler,
    extraction_error_handler,
    rate_limit_error_handler,
    request_validation_handler,
    unhandled_error_handler,
    upstream_timeout_handler,
)
from app.mappers.template_injector import InjectionPolicy
from app.routers.extract import router as extract_router
from app.routers.preview import router as preview_router
from app.routers.sessions import router as sessions_router
from app.schemas.business import SiteConfig
from app.services.completion import (
    AnthropicCompletionService,
    CompletionService,
    GroqCompletionService,
)
from app.services.extraction import ExtractionService
from app.services.preview import PreviewService
from app.services.sessions import SessionStore
from app.services.template_store import TemplateStore

logger = logging.getLogger(__name__)


def build_completion_service(
    settings: Settings, client: httpx.AsyncClient
) -> CompletionService | None:
    if settings.llm_provider == "anthropic" and settings.anthropic_api_key:
        return AnthropicCompletionService(
            settings.anthropic_api_key,
            model=settings.anthropic_model,
            timeout=settings.extraction_timeout,
        )
    if settings.llm_provider == "groq" and settings.groq_api_key:
        return GroqCompletionService(
            client,
            settings.groq_api_key,
            api_url=settings.groq_api_url,
            model=settings.groq_model,
            timeout=settings.extraction_timeout,
        )
    return None


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = Settings()

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stdout,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)

    async with httpx.AsyncClient(timeout=30.0) as client:
        completion = build_completion_service(settings, client)
        extraction: ExtractionService | None = None
        if completion is not None:
            extraction = ExtractionService(completion, retry_delay=settings.rate_limit_retry_delay)
        else:
            logger.warning("No %s credentials; /extract is disabled", settings.llm_provider)

        templates = TemplateStore(client, settings.template_source, timeout=settings.template_timeout)
        preview = PreviewService(
            templates,
            config=SiteConfig(
                template_id=settings.template_id,
                primary_color=settings.primary_color,
                secondary_color=settings.secondary_color,
                font_family=settings.font_family,
                rtl=settings.rtl,
            ),
            policy=InjectionPolicy.strict if settings.strict_template else InjectionPolicy.lenient,
        )

        app.state.extraction_service = extraction
        app.state.preview_service = preview
        app.state.session_store = SessionStore(preview, extraction)

        yield


app = FastAPI(title="InstaWeb Preview", lifespan=lifespan)

app.add_exception_handler(CompletionServiceError, completion_error_handler)
app.add_exception_handler(UpstreamTimeoutError, upstream_timeout_handler)
app.add_exception_handler(RateLimitError, rate_limit_error_handler)
app.add_exception_handler(ExtractionError, extraction_error_handler)
app.add_exception_handler(RequestValidationError, request_validation_handler)
app.add_exception_handler(Exception, unhandled_error_handler)

app.include_router(extract_router)
app.include_router(preview_router)
app.include_router(sessions_router)
