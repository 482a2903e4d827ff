"""Request payload validation.

Each named schema trims and checks a raw JSON payload and either returns the
normalized values or a list of ``{"field", "message"}`` violations, one per
offending field. Nothing here touches the database.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_core import PydanticCustomError

from backend.messages import translate
from exceptions.exceptions import ValidationFailedError

PHONE_PATTERN = re.compile(r"^(\+84|0)[0-9]{9,10}$")

CATEGORY_NAME_MAX = 50
PROFILE_NAME_MAX = 50
ADDRESS_MAX = 255
PASSWORD_MIN = 8
PASSWORD_MAX = 16


def _fail(key: str):
    message = translate(key)
    return PydanticCustomError(key.replace(".", "_"), message)


def _required_text(value: Any, required_key: str, not_string_key: str, max_length: int, too_long_key: str) -> str:
    if value is None:
        raise _fail(required_key)
    if not isinstance(value, str):
        raise _fail(not_string_key)
    value = value.strip()
    if not value:
        raise _fail(required_key)
    if len(value) > max_length:
        raise _fail(too_long_key)
    return value


def _optional_text(value: Any, not_string_key: str) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise _fail(not_string_key)
    return value.strip() or None


class _Payload(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class CategoryPayload(_Payload):
    name: Optional[str] = Field(default=None, validate_default=True)
    description: Optional[str] = Field(default=None, validate_default=True)

    @field_validator("name", mode="before")
    @classmethod
    def check_name(cls, value):
        return _required_text(
            value,
            "category.name_required",
            "category.name_not_string",
            CATEGORY_NAME_MAX,
            "category.name_too_long",
        )

    @field_validator("description", mode="before")
    @classmethod
    def check_description(cls, value):
        return _optional_text(value, "category.description_not_string")


class ProfileUpdatePayload(_Payload):
    name: Optional[str] = Field(default=None, validate_default=True)
    phone: Optional[str] = Field(default=None, validate_default=True)
    address: Optional[str] = Field(default=None, validate_default=True)

    @field_validator("name", mode="before")
    @classmethod
    def check_name(cls, value):
        return _required_text(
            value,
            "profile.name_required",
            "profile.field_not_string",
            PROFILE_NAME_MAX,
            "profile.name_too_long",
        )

    @field_validator("phone", mode="before")
    @classmethod
    def check_phone(cls, value):
        value = _optional_text(value, "profile.field_not_string")
        if value is not None and not PHONE_PATTERN.match(value):
            raise _fail("profile.phone_invalid")
        return value

    @field_validator("address", mode="before")
    @classmethod
    def check_address(cls, value):
        return _required_text(
            value,
            "profile.address_required",
            "profile.field_not_string",
            ADDRESS_MAX,
            "profile.address_too_long",
        )


class PasswordChangePayload(_Payload):
    current_password: Optional[str] = Field(
        default=None, alias="currentPassword", validate_default=True
    )
    new_password: Optional[str] = Field(
        default=None, alias="newPassword", validate_default=True
    )
    confirm_password: Optional[str] = Field(
        default=None, alias="confirmPassword", validate_default=True
    )

    @field_validator("current_password", mode="before")
    @classmethod
    def check_current(cls, value):
        if not isinstance(value, str) or not value:
            raise _fail("password.current_required")
        return value

    @field_validator("new_password", mode="before")
    @classmethod
    def check_new(cls, value):
        if value is None or value == "":
            raise _fail("password.new_required")
        if not isinstance(value, str) or not PASSWORD_MIN <= len(value) <= PASSWORD_MAX:
            raise _fail("password.length")
        return value

    @field_validator("confirm_password", mode="before")
    @classmethod
    def check_confirm(cls, value, info):
        if value is None or value == "":
            raise _fail("password.confirm_required")
        # only comparable once the new password itself passed its checks
        new_password = info.data.get("new_password")
        if new_password is not None and value != new_password:
            raise _fail("password.confirm_mismatch")
        return value


SCHEMAS = {
    "category": CategoryPayload,
    "profile": ProfileUpdatePayload,
    "password": PasswordChangePayload,
}


@dataclass
class ValidationResult:
    data: Optional[Dict[str, Any]] = None
    errors: List[dict] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


def validate_payload(schema_name: str, payload: Any) -> ValidationResult:
    schema = SCHEMAS[schema_name]
    if not isinstance(payload, dict):
        return ValidationResult(
            errors=[{"field": None, "message": translate("request.invalid")}]
        )
    try:
        model = schema.model_validate(payload)
    except ValidationError as e:
        # report JSON keys, whichever of name/alias pydantic put in loc
        aliases = {name: info.alias or name for name, info in schema.model_fields.items()}
        errors = []
        for error in e.errors():
            loc = str(error["loc"][0]) if error["loc"] else None
            errors.append({"field": aliases.get(loc, loc), "message": error["msg"]})
        return ValidationResult(errors=errors)
    return ValidationResult(data=model.model_dump())


def validate_or_raise(schema_name: str, payload: Any) -> Dict[str, Any]:
    result = validate_payload(schema_name, payload)
    if not result.is_valid:
        raise ValidationFailedError(result.errors)
    return result.data
