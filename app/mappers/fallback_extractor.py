import logging
import re

from app.mappers.digits import normalize_digits
from app.schemas.business import BusinessType
from app.schemas.responses import ExtractionResult, FailureKind

logger = logging.getLogger(__name__)

NOT_ENOUGH_INFO = "لم يتم العثور على معلومات كافية"

_PHONE_RE = re.compile(r"01[0-9]{9}")

# Tried in order; the first match wins
_NAME_PATTERNS = (
    re.compile(r"اسم[ه]?\s*[:\s]+([^\n,،]+)"),
    re.compile(r"مطعم\s+([^\n,،]+)"),
    re.compile(r"صالون\s+([^\n,،]+)"),
    re.compile(r"محل\s+([^\n,،]+)"),
)

# Priority order matters: restaurant > salon > clinic > store
_TYPE_KEYWORDS = (
    (BusinessType.restaurant, re.compile(r"مطعم|اكل|طبخ")),
    (BusinessType.salon, re.compile(r"صالون|تجميل|شعر|مكياج")),
    (BusinessType.clinic, re.compile(r"عياد[ة]|دكتور|طبيب")),
    (BusinessType.store, re.compile(r"محل|متجر|بيع")),
)


def _find_name(text: str) -> str | None:
    for pattern in _NAME_PATTERNS:
        match = pattern.search(text)
        if match:
            name = match.group(1).strip()
            if name:
                return name
    return None


def classify_business_type(text: str) -> BusinessType:
    for business_type, pattern in _TYPE_KEYWORDS:
        if pattern.search(text):
            return business_type
    return BusinessType.other


def extract_locally(transcript: str) -> ExtractionResult:
    """Pattern-based extraction that needs no remote model.

    The result may be incomplete; it only fails when neither a name nor a
    phone number can be found.
    """
    normalized = normalize_digits(transcript)

    phone_match = _PHONE_RE.search(normalized)
    phone = phone_match.group(0) if phone_match else None
    business_name = _find_name(normalized)

    if not business_name and not phone:
        logger.info("Local extraction found neither name nor phone")
        return ExtractionResult(
            success=False,
            error=NOT_ENOUGH_INFO,
            failure=FailureKind.parse_failure,
        )

    data: dict = {"businessType": classify_business_type(normalized).value}
    if business_name:
        data["businessName"] = business_name
    if phone:
        data["phone"] = phone

    return ExtractionResult(success=True, data=data)
