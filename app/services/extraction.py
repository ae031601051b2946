import asyncio
import json
import logging

from app.exceptions.custom import (
    CompletionServiceError,
    ExtractionError,
    RateLimitError,
    UpstreamTimeoutError,
)
from app.mappers.digits import normalize_digits
from app.mappers.validation import validate_business_data
from app.schemas.business import BusinessRecord
from app.schemas.responses import ExtractionPhase, ExtractionResult, FailureKind
from app.services.completion import CompletionService

logger = logging.getLogger(__name__)

RATE_LIMIT_RETRIES = 1
RATE_LIMIT_DELAY = 2.0

SERVER_SLOW = "الخادم بطيء، حاول مرة أخرى"
SERVER_BUSY = "الخادم مشغول، حاول لاحقاً"
CONNECTION_FAILED = "فشل الاتصال بالخادم"
UNREADABLE_OUTPUT = "تعذر قراءة رد النموذج"
UNEXPECTED_ERROR = "حدث خطأ غير متوقع، حاول مرة أخرى"

SYSTEM_PROMPT = """أنت مستخرج بيانات أعمال تجارية. استخرج المعلومات من المحادثة واعطني JSON فقط.

القواعد:
1. أجب بـ JSON صالح فقط، بدون أي نص أو شرح
2. رقم الهاتف المصري يبدأ بـ 01 ويتكون من 11 رقم
3. إذا لم تجد معلومة، اجعل القيمة null
4. نوع النشاط: restaurant, store, services, clinic, salon, other

الحقول المطلوبة:
{
  "businessName": "اسم النشاط التجاري",
  "tagline": "شعار أو وصف قصير",
  "phone": "01XXXXXXXXX",
  "whatsapp": "01XXXXXXXXX أو null",
  "email": "email@example.com أو null",
  "address": "العنوان أو null",
  "services": [{"title": "اسم الخدمة", "description": "وصف قصير"}],
  "businessType": "restaurant|store|services|clinic|salon|other"
}"""

FEW_SHOT_EXAMPLES = (
    (
        "اسمي أحمد وعندي مطعم اسمه مطعم النيل ورقمي 01012345678",
        {
            "businessName": "مطعم النيل",
            "tagline": None,
            "phone": "01012345678",
            "whatsapp": None,
            "email": None,
            "address": None,
            "services": [],
            "businessType": "restaurant",
        },
    ),
    (
        "صالون جمال الست فاطمة في المعادي، بنعمل شعر ومكياج، الموبايل ٠١٢٣٤٥٦٧٨٩٠",
        {
            "businessName": "صالون جمال الست فاطمة",
            "tagline": None,
            "phone": "01234567890",
            "whatsapp": None,
            "email": None,
            "address": "المعادي",
            "services": [
                {"title": "شعر", "description": "خدمات الشعر"},
                {"title": "مكياج", "description": "خدمات المكياج"},
            ],
            "businessType": "salon",
        },
    ),
)

_DECODER = json.JSONDecoder()


def build_user_prompt(transcript: str) -> str:
    examples = "\n\n".join(
        f'محادثة: "{sample}"\nJSON: {json.dumps(expected, ensure_ascii=False)}'
        for sample, expected in FEW_SHOT_EXAMPLES
    )
    return f'أمثلة:\n\n{examples}\n\n---\n\nالمحادثة الحالية:\n"{transcript}"\n\nJSON:'


def find_json_object(text: str) -> dict | None:
    """Decode the JSON object that starts at the first ``{`` in ``text``.

    Commentary before or after the object is ignored; anything that does not
    decode cleanly yields None.
    """
    start = text.find("{")
    if start == -1:
        return None
    try:
        obj, _ = _DECODER.raw_decode(text, start)
    except (json.JSONDecodeError, RecursionError):
        # RecursionError: nesting deeper than the decoder can follow
        return None
    return obj if isinstance(obj, dict) else None


class ExtractionService:
    def __init__(self, completion: CompletionService, retry_delay: float = RATE_LIMIT_DELAY):
        self._completion = completion
        self._retry_delay = retry_delay

    async def extract(self, transcript: str) -> BusinessRecord:
        """Single extraction attempt. Raises on any failure."""
        logger.debug("Extraction phase: %s", ExtractionPhase.building_prompt)
        user_prompt = build_user_prompt(transcript)

        logger.debug("Extraction phase: %s", ExtractionPhase.awaiting_service)
        raw_output = await self._completion.complete(SYSTEM_PROMPT, user_prompt)

        # Digits inside JSON values must be Latin before the phone rule sees them
        logger.debug("Extraction phase: %s", ExtractionPhase.normalizing)
        normalized = normalize_digits(raw_output)

        logger.debug("Extraction phase: %s", ExtractionPhase.parsing)
        parsed = find_json_object(normalized)
        if parsed is None:
            raise ExtractionError(
                "Invalid JSON from LLM", phase=ExtractionPhase.parsing, raw_output=raw_output
            )

        logger.debug("Extraction phase: %s", ExtractionPhase.validating)
        result = validate_business_data(parsed)
        if not result.ok:
            raise ExtractionError(
                result.error, phase=ExtractionPhase.validating, raw_output=raw_output
            )

        logger.info("Extracted record for %s", result.record.business_name)
        return result.record

    async def extract_business_data(self, transcript: str) -> ExtractionResult:
        """Extract with one retry on rate limiting; never raises."""
        retries = 0
        while True:
            try:
                record = await self.extract(transcript)
            except RateLimitError as exc:
                if retries < RATE_LIMIT_RETRIES:
                    retries += 1
                    logger.warning(
                        "Rate limited by %s, retrying in %ss (attempt %d/%d)",
                        exc.service, self._retry_delay, retries, RATE_LIMIT_RETRIES,
                    )
                    await asyncio.sleep(self._retry_delay)
                    continue
                return ExtractionResult(
                    success=False,
                    error=SERVER_BUSY,
                    failure=FailureKind.rate_limited,
                    phase=ExtractionPhase.awaiting_service,
                )
            except UpstreamTimeoutError:
                logger.error("Extraction timed out")
                return ExtractionResult(
                    success=False,
                    error=SERVER_SLOW,
                    failure=FailureKind.network_failure,
                    phase=ExtractionPhase.awaiting_service,
                )
            except CompletionServiceError as exc:
                logger.error("Completion service failed: %s (status=%s)", exc.message, exc.status_code)
                return ExtractionResult(
                    success=False,
                    error=CONNECTION_FAILED,
                    failure=FailureKind.network_failure,
                    phase=ExtractionPhase.awaiting_service,
                )
            except ExtractionError as exc:
                logger.error("Extraction failed in %s: %s | raw=%r", exc.phase, exc.message, exc.raw_output)
                if exc.phase == ExtractionPhase.parsing:
                    return ExtractionResult(
                        success=False,
                        error=f"خطأ في الاستخراج: {UNREADABLE_OUTPUT}",
                        failure=FailureKind.parse_failure,
                        phase=ExtractionPhase.parsing,
                    )
                return ExtractionResult(
                    success=False,
                    error=f"خطأ في الاستخراج: {exc.message}",
                    failure=FailureKind.schema_violation,
                    phase=ExtractionPhase.validating,
                )
            except Exception:
                logger.exception("Unexpected extraction failure")
                return ExtractionResult(
                    success=False,
                    error=UNEXPECTED_ERROR,
                    failure=FailureKind.network_failure,
                )

            return ExtractionResult(
                success=True,
                data=record.model_dump(by_alias=True, mode="json"),
            )
