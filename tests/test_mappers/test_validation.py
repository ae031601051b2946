from app.mappers.validation import INVALID_DATA, merge_business_data, validate_business_data
from app.schemas.business import BusinessRecord, BusinessType, SiteConfig


def _valid(**overrides):
    data = {"businessName": "مطعم النيل", "phone": "01012345678"}
    data.update(overrides)
    return data


def test_minimal_record_passes_with_defaults():
    result = validate_business_data(_valid())

    assert result.ok
    record = result.record
    assert record.business_name == "مطعم النيل"
    assert record.tagline is None
    assert record.address is None
    assert record.services == []
    assert record.business_type == BusinessType.other


def test_missing_phone_fails_naming_phone():
    result = validate_business_data({"businessName": "مطعم النيل"})

    assert not result.ok
    assert result.record is None
    assert result.error.startswith("phone")


def test_ten_digit_phone_fails():
    result = validate_business_data(_valid(phone="0101234567"))
    assert not result.ok
    assert "phone" in result.error
    assert "11" in result.error


def test_phone_with_wrong_prefix_fails():
    result = validate_business_data(_valid(phone="02012345678"))
    assert not result.ok


def test_arabic_indic_phone_fails_before_normalization():
    result = validate_business_data(_valid(phone="٠١٠١٢٣٤٥٦٧٨"))
    assert not result.ok
    assert "phone" in result.error


def test_numeric_phone_is_not_coerced():
    result = validate_business_data(_valid(phone=1012345678))
    assert not result.ok


def test_first_error_wins():
    result = validate_business_data({"businessName": "x", "phone": "123"})
    assert not result.ok
    assert result.error.startswith("businessName")
    assert "phone" not in result.error


def test_non_mapping_candidate():
    assert validate_business_data(["not", "a", "dict"]).error == INVALID_DATA
    assert validate_business_data(None).error == INVALID_DATA


def test_services_capped_at_six():
    services = [{"title": f"خدمة {i}", "description": "وصف"} for i in range(7)]
    result = validate_business_data(_valid(services=services))
    assert not result.ok
    assert result.error.startswith("services")


def test_six_services_allowed():
    services = [{"title": f"خدمة {i}", "description": "وصف"} for i in range(6)]
    result = validate_business_data(_valid(services=services))
    assert result.ok
    assert [s.title for s in result.record.services] == [s["title"] for s in services]


def test_service_title_too_short():
    result = validate_business_data(_valid(services=[{"title": "x", "description": ""}]))
    assert not result.ok
    assert result.error.startswith("services.0.title")


def test_invalid_email_and_url():
    assert not validate_business_data(_valid(email="not-an-email")).ok
    assert not validate_business_data(_valid(facebook="facebook.com/page")).ok
    assert validate_business_data(
        _valid(email="info@nile.com", facebook="https://facebook.com/nile")
    ).ok


def test_nullable_optionals_accept_null():
    result = validate_business_data(
        _valid(tagline=None, whatsapp=None, email=None, heroImage=None, logo=None)
    )
    assert result.ok


def test_unknown_business_type_rejected():
    result = validate_business_data(_valid(businessType="bakery"))
    assert not result.ok
    assert result.error.startswith("businessType")


def test_tagline_length_limit():
    assert not validate_business_data(_valid(tagline="x" * 201)).ok
    assert validate_business_data(_valid(tagline="x" * 200)).ok


def test_record_passes_through_unchanged():
    record = BusinessRecord(business_name="مطعم النيل", phone="01012345678")
    assert validate_business_data(record).record is record


def test_merge_onto_nothing():
    record, error = merge_business_data(None, _valid())
    assert error is None
    assert record.phone == "01012345678"


def test_merge_overlays_new_fields():
    previous, _ = merge_business_data(None, _valid(tagline="قديم"))
    record, error = merge_business_data(previous, {"tagline": "جديد", "city": "القاهرة"})

    assert error is None
    assert record is not previous
    assert record.tagline == "جديد"
    assert record.city == "القاهرة"
    assert record.business_name == previous.business_name
    assert previous.tagline == "قديم"


def test_failed_merge_keeps_previous_record():
    previous, _ = merge_business_data(None, _valid())
    record, error = merge_business_data(previous, {"phone": "123"})

    assert record is previous
    assert error is not None
    assert "phone" in error


def test_partial_without_required_fields_fails_on_empty_state():
    record, error = merge_business_data(None, {"tagline": "شعار"})
    assert record is None
    assert error is not None


def test_site_config_defaults():
    config = SiteConfig()
    assert config.template_id == "landwind-v1"
    assert config.primary_color == "#14b8a6"
    assert config.secondary_color == "#7e3af2"
    assert config.font_family == "Cairo"
    assert config.rtl is True


def test_null_services_is_not_reported_as_too_many():
    result = validate_business_data(_valid(services=None))
    assert not result.ok
    assert result.error.startswith("services")
    assert "6" not in result.error


def test_missing_business_name_is_not_reported_as_length():
    result = validate_business_data({"phone": "01012345678"})
    assert not result.ok
    assert result.error.startswith("businessName")
    assert "100" not in result.error


def test_business_name_length_message():
    result = validate_business_data(_valid(businessName="x" * 101))
    assert result.error == "businessName: اسم النشاط يجب أن يكون بين 2 و 100 حرف"


def test_merge_accepts_snake_case_keys():
    previous, _ = merge_business_data(None, _valid())
    record, error = merge_business_data(
        previous, {"business_name": "مطعم القاهرة", "hero_image": "https://example.com/h.jpg"}
    )

    assert error is None
    assert record.business_name == "مطعم القاهرة"
    assert record.hero_image == "https://example.com/h.jpg"
    assert record.phone == previous.phone
