from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ValidationError

from app.schemas.business import BusinessRecord

INVALID_DATA = "بيانات غير صالحة"

# Localized reasons for the rules users hit most often, keyed by (field, error type)
_LENGTH_NAME = "اسم النشاط يجب أن يكون بين 2 و 100 حرف"
_FIELD_MESSAGES = {
    ("phone", "string_pattern_mismatch"): "رقم الهاتف يجب أن يكون 11 رقم ويبدأ بـ 01",
    ("whatsapp", "string_pattern_mismatch"): "رقم الواتساب يجب أن يكون 11 رقم ويبدأ بـ 01",
    ("businessName", "string_too_short"): _LENGTH_NAME,
    ("businessName", "string_too_long"): _LENGTH_NAME,
    ("services", "too_long"): "الحد الأقصى 6 خدمات",
}

# Either spelling is accepted on input; merges work on the camelCase one
_ALIASES = {name: field.alias or name for name, field in BusinessRecord.model_fields.items()}


class ValidationResult(BaseModel):
    ok: bool
    record: BusinessRecord | None = None
    error: str | None = None


def _format_error(exc: ValidationError) -> str:
    first = exc.errors()[0]
    loc = [str(part) for part in first["loc"]]
    if not loc:
        return INVALID_DATA
    field = loc[0]
    path = ".".join(loc)
    message = _FIELD_MESSAGES.get((field, first["type"])) if len(loc) == 1 else None
    return f"{path}: {message or first['msg']}"


def validate_business_data(candidate: Any) -> ValidationResult:
    """Turn untrusted input into a BusinessRecord, reporting only the first error."""
    if isinstance(candidate, BusinessRecord):
        return ValidationResult(ok=True, record=candidate)
    if not isinstance(candidate, Mapping):
        return ValidationResult(ok=False, error=INVALID_DATA)

    try:
        record = BusinessRecord.model_validate(dict(candidate))
    except ValidationError as exc:
        return ValidationResult(ok=False, error=_format_error(exc))
    return ValidationResult(ok=True, record=record)


def merge_business_data(
    previous: BusinessRecord | None,
    partial: Mapping[str, Any],
) -> tuple[BusinessRecord | None, str | None]:
    """Overlay ``partial`` onto ``previous`` and re-validate the whole object.

    Returns (current_record, error). On failure the previous record comes back
    untouched alongside the error.
    """
    base = previous.model_dump(by_alias=True) if previous is not None else {}
    merged = {**base, **{_ALIASES.get(key, key): value for key, value in partial.items()}}

    result = validate_business_data(merged)
    if not result.ok:
        return previous, result.error
    return result.record, None
