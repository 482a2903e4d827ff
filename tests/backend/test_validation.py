import pytest

from backend.messages import translate
from backend.validation import validate_or_raise, validate_payload
from exceptions.exceptions import ValidationFailedError


def errors_by_field(result):
    return {error["field"]: error["message"] for error in result.errors}


def test_category_name_is_trimmed_and_empty_description_dropped():
    result = validate_payload("category", {"name": "  Fiction  ", "description": "   "})
    assert result.is_valid
    assert result.data == {"name": "Fiction", "description": None}


def test_category_name_required():
    for payload in ({}, {"name": ""}, {"name": "    "}, {"name": None}):
        result = validate_payload("category", payload)
        assert errors_by_field(result) == {"name": translate("category.name_required")}


def test_category_name_length_limit():
    assert validate_payload("category", {"name": "x" * 50}).is_valid
    result = validate_payload("category", {"name": "x" * 51})
    assert errors_by_field(result) == {"name": translate("category.name_too_long")}


def test_category_rejects_non_string_values():
    result = validate_payload("category", {"name": 42, "description": ["a"]})
    assert errors_by_field(result) == {
        "name": translate("category.name_not_string"),
        "description": translate("category.description_not_string"),
    }


def test_profile_payload_normalized():
    result = validate_payload(
        "profile",
        {"name": " Ana ", "phone": " +84912345678 ", "address": " 5 Elm ", "email": "new@x.io"},
    )
    assert result.is_valid
    # email is not part of the editable surface
    assert result.data == {"name": "Ana", "phone": "+84912345678", "address": "5 Elm"}


@pytest.mark.parametrize("phone", ["0912345678", "09123456789", "+84912345678"])
def test_profile_accepts_regional_phone_numbers(phone):
    result = validate_payload("profile", {"name": "Ana", "phone": phone, "address": "5 Elm"})
    assert result.is_valid


@pytest.mark.parametrize("phone", ["12345", "091234567", "+8491234567890", "84912345678", "09a2345678"])
def test_profile_rejects_bad_phone_numbers(phone):
    result = validate_payload("profile", {"name": "Ana", "phone": phone, "address": "5 Elm"})
    assert errors_by_field(result) == {"phone": translate("profile.phone_invalid")}


def test_profile_empty_phone_is_absent():
    result = validate_payload("profile", {"name": "Ana", "phone": "", "address": "5 Elm"})
    assert result.data["phone"] is None


def test_profile_reports_every_bad_field():
    result = validate_payload("profile", {"name": "n" * 51, "phone": "1", "address": ""})
    assert errors_by_field(result) == {
        "name": translate("profile.name_too_long"),
        "phone": translate("profile.phone_invalid"),
        "address": translate("profile.address_required"),
    }


def test_profile_address_length_limit():
    result = validate_payload("profile", {"name": "Ana", "address": "a" * 256})
    assert errors_by_field(result) == {"address": translate("profile.address_too_long")}


def test_password_change_valid():
    result = validate_payload(
        "password",
        {"currentPassword": "old-pass1", "newPassword": "new-pass1", "confirmPassword": "new-pass1"},
    )
    assert result.is_valid
    assert result.data["new_password"] == "new-pass1"


@pytest.mark.parametrize("new_password", ["short", "x" * 17])
def test_password_length_bounds(new_password):
    result = validate_payload(
        "password",
        {"currentPassword": "old", "newPassword": new_password, "confirmPassword": new_password},
    )
    assert errors_by_field(result) == {"newPassword": translate("password.length")}


def test_password_confirmation_must_match_exactly():
    result = validate_payload(
        "password",
        {"currentPassword": "old", "newPassword": "new-pass1", "confirmPassword": "new-pass1 "},
    )
    assert errors_by_field(result) == {"confirmPassword": translate("password.confirm_mismatch")}


def test_password_fields_required():
    result = validate_payload("password", {})
    assert errors_by_field(result) == {
        "currentPassword": translate("password.current_required"),
        "newPassword": translate("password.new_required"),
        "confirmPassword": translate("password.confirm_required"),
    }


def test_non_object_payload_rejected():
    result = validate_payload("category", ["Fiction"])
    assert not result.is_valid
    assert result.errors[0]["field"] is None


def test_validate_or_raise_carries_field_errors():
    with pytest.raises(ValidationFailedError) as exc_info:
        validate_or_raise("category", {"name": ""})
    assert exc_info.value.status_code == 400
    assert exc_info.value.errors == [
        {"field": "name", "message": translate("category.name_required")}
    ]


def test_vietnamese_catalog():
    assert translate("category.exists", locale="vi") == "Thể loại đã tồn tại"
    assert translate("category.has_books_count", locale="vi", count=3).endswith("3 cuốn sách")
