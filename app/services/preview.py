import logging
from collections.abc import Mapping
from typing import Any

from app.exceptions.custom import TemplateLoadError, TemplateMismatchError
from app.mappers.template_injector import InjectionPolicy, TemplateInjector
from app.mappers.validation import INVALID_DATA, validate_business_data
from app.schemas.business import BusinessRecord, SiteConfig
from app.schemas.responses import PreviewResult
from app.services.template_store import TemplateStore

logger = logging.getLogger(__name__)

TEMPLATE_LOAD_FAILED = "فشل في تحميل القالب"
PREVIEW_FAILED = "فشل في إنشاء المعاينة"


class PreviewService:
    def __init__(
        self,
        templates: TemplateStore,
        config: SiteConfig | None = None,
        policy: InjectionPolicy = InjectionPolicy.lenient,
    ):
        self._templates = templates
        self._config = config or SiteConfig()
        self._policy = policy

    @property
    def config(self) -> SiteConfig:
        return self._config

    def clear_cache(self) -> None:
        self._templates.invalidate()

    async def generate_preview(self, data: Mapping[str, Any] | BusinessRecord) -> PreviewResult:
        """Validate, then inject into the cached template. Never raises."""
        validation = validate_business_data(data)
        if not validation.ok:
            return PreviewResult(success=False, error=validation.error or INVALID_DATA)
        return await self.render(validation.record)

    async def render(self, record: BusinessRecord) -> PreviewResult:
        try:
            template_html = await self._templates.load()
        except TemplateLoadError as exc:
            logger.error("Template unavailable: %s", exc)
            return PreviewResult(success=False, error=TEMPLATE_LOAD_FAILED)

        try:
            injector = TemplateInjector(
                template_html,
                template_id=self._config.template_id,
                policy=self._policy,
            )
            html = injector.inject_business_data(record).apply_config(self._config).get_html()
        except TemplateMismatchError as exc:
            logger.error("Template %s is missing %s", exc.template_id, exc.selector)
            return PreviewResult(
                success=False,
                error=f"خطأ في القالب: {exc.selector} غير موجود",
            )
        except Exception:
            logger.exception("Template injection failed for %s", record.business_name)
            return PreviewResult(success=False, error=PREVIEW_FAILED)

        return PreviewResult(success=True, html=html)
