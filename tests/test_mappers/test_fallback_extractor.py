from app.mappers.fallback_extractor import (
    NOT_ENOUGH_INFO,
    classify_business_type,
    extract_locally,
)
from app.schemas.business import BusinessType
from app.schemas.responses import FailureKind


def test_restaurant_with_phone():
    result = extract_locally("عندي مطعم اسمه مطعم النيل ورقمي 01012345678")

    assert result.success is True
    assert result.data["businessType"] == "restaurant"
    assert result.data["phone"] == "01012345678"


def test_messy_salon_transcript_with_arabic_digits():
    transcript = """
    مرحبا انا عندي صالون تجميل
    اسمه صالون الجمال
    الموبايل بتاعي ٠١٢٣٤٥٦٧٨٩٠
    بنعمل شعر ومكياج
    في المعادي
    """
    result = extract_locally(transcript)

    assert result.success is True
    assert result.data == {
        "businessType": "salon",
        "businessName": "صالون الجمال",
        "phone": "01234567890",
    }


def test_nothing_recognizable():
    result = extract_locally("مرحبا، كيف حالك؟")

    assert result.success is False
    assert result.error == NOT_ENOUGH_INFO
    assert result.failure == FailureKind.parse_failure
    assert result.data is None


def test_phone_only_is_partial_success():
    result = extract_locally("رقمي 01112345678")

    assert result.success is True
    assert result.data == {"businessType": "other", "phone": "01112345678"}


def test_name_only_is_partial_success():
    result = extract_locally("محل الأمانة للملابس")

    assert result.success is True
    assert result.data["businessName"] == "الأمانة للملابس"
    assert result.data["businessType"] == "store"
    assert "phone" not in result.data


def test_name_stops_at_arabic_comma():
    result = extract_locally("اسمه: كافيه السعادة، رقمي 01012345678")
    assert result.data["businessName"] == "كافيه السعادة"


def test_short_phone_not_extracted():
    result = extract_locally("رقمي 0101234567")
    assert result.success is False


def test_type_priority_order():
    assert classify_business_type("مطعم وصالون") == BusinessType.restaurant
    assert classify_business_type("صالون جنب عيادة") == BusinessType.salon
    assert classify_business_type("عيادة جنب محل") == BusinessType.clinic
    assert classify_business_type("متجر") == BusinessType.store
    assert classify_business_type("شركة برمجيات") == BusinessType.other
