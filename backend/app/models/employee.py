"""Employee models and draft validation."""

from __future__ import annotations

import enum
from collections.abc import Mapping
from typing import Any

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

PHONE_PATTERN = r"^[+]?[1-9][0-9]{9,14}$"

EMPLOYEE_FIELDS: tuple[str, ...] = ("name", "age", "gender", "occupation", "phone", "mail")

_REQUIRED_MESSAGES: dict[str, str] = {
    "name": "Name is required",
    "age": "Age is required",
    "gender": "Gender is required",
    "occupation": "Occupation is required",
    "phone": "Phone is required",
    "mail": "Email is required",
}

# pydantic error type -> message, per field
_INVALID_MESSAGES: dict[str, dict[str, str]] = {
    "name": {"string_too_short": "Too Short!"},
    "age": {
        "int_parsing": "Age must be a number",
        "int_type": "Age must be a number",
        "finite_number": "Age must be a number",
        "int_from_float": "Age must be an integer",
        "greater_than": "Age must be a positive number",
    },
    "gender": {"enum": "Gender must be one of: male, female, other"},
    "occupation": {"string_too_short": "Occupation is required"},
    "phone": {"string_pattern_mismatch": "Invalid phone number"},
    "mail": {"value_error": "Invalid email"},
}


class Gender(str, enum.Enum):
    male = "male"
    female = "female"
    other = "other"


class EmployeeBase(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    name: str = Field(..., min_length=2)
    age: int = Field(..., gt=0)
    gender: Gender
    occupation: str = Field(..., min_length=1)
    phone: str = Field(..., pattern=PHONE_PATTERN)
    mail: str

    @field_validator("mail")
    @classmethod
    def _check_mail(cls, value: str) -> str:
        # Stored exactly as typed; the validator only checks syntax.
        if "<" in value or ">" in value:
            raise ValueError("display names are not allowed")
        try:
            validate_email(value, check_deliverability=False)
        except EmailNotValidError as e:
            raise ValueError(str(e)) from e
        return value

    @field_validator("age", mode="before")
    @classmethod
    def _parse_age_text(cls, value: Any) -> Any:
        # Form inputs arrive as text; "2.5" should report "not an integer", not "not a number".
        if not isinstance(value, str):
            return value
        text = value.strip()
        try:
            return int(text)
        except ValueError:
            pass
        try:
            return float(text)
        except ValueError:
            return value


class EmployeeCreate(EmployeeBase):
    """Payload for inserting a new employee; the store assigns ``id``."""


class EmployeeUpdate(EmployeeBase):
    """Full-record update of an existing employee."""


class Employee(EmployeeBase):
    """A persisted employee row."""

    id: str

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


def blank_draft() -> dict[str, Any]:
    return {field: "" for field in EMPLOYEE_FIELDS}


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def validate_employee(values: Mapping[str, Any]) -> dict[str, str]:
    """Validate a raw draft and return one message per failing field.

    Blank strings count as missing, matching what an empty form input sends.
    """
    cleaned = {
        field: values[field] for field in EMPLOYEE_FIELDS if field in values and not _is_blank(values[field])
    }

    try:
        EmployeeCreate.model_validate(cleaned)
    except ValidationError as e:
        errors: dict[str, str] = {}
        for err in e.errors():
            if not err["loc"]:
                continue
            field = str(err["loc"][0])
            if field in errors:
                continue
            if err["type"] == "missing":
                errors[field] = _REQUIRED_MESSAGES.get(field, err["msg"])
            else:
                errors[field] = _INVALID_MESSAGES.get(field, {}).get(err["type"], err["msg"])
        return errors

    return {}
