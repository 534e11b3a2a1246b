"""
Pydantic v2 schemas for billing settings.

The three step models (CompanyProfile, BillingAddress, PaymentMethod) carry
the field rules used both by the billing wizard's step gates and by
POST /billing, so a record the wizard accepts is a record the API accepts.
Every message here is user-facing text.
"""

from __future__ import annotations

import datetime
import re

from pydantic import Field, field_validator
from pydantic_core import PydanticCustomError

from workspace_manager.schemas.common import (
    EMAIL_PATTERN,
    CamelModel,
    require_pattern,
    require_text,
)

PHONE_PATTERN = re.compile(r"^[\d\s()+\-]+$")
POSTAL_CODE_PATTERN = re.compile(r"^[\d-]+$")

COUNTRIES: tuple[str, ...] = (
    "United States",
    "Canada",
    "United Kingdom",
    "Germany",
    "France",
    "Australia",
    "Japan",
    "Other",
)


class CompanyProfile(CamelModel):
    company_name: str = ""
    email: str = ""
    phone: str = ""

    @field_validator("company_name")
    @classmethod
    def _company_name(cls, value: str) -> str:
        return require_text(value, "Company name", min_length=2)

    @field_validator("email")
    @classmethod
    def _email(cls, value: str) -> str:
        require_text(value, "Email")
        return require_pattern(value.strip(), EMAIL_PATTERN, "Invalid email address")

    @field_validator("phone")
    @classmethod
    def _phone(cls, value: str) -> str:
        require_text(value, "Phone")
        return require_pattern(value, PHONE_PATTERN, "Invalid phone number")


class BillingAddress(CamelModel):
    country: str = ""
    city: str = ""
    address: str = ""
    postal_code: str = ""

    @field_validator("country")
    @classmethod
    def _country(cls, value: str) -> str:
        return require_text(value, "Country")

    @field_validator("city")
    @classmethod
    def _city(cls, value: str) -> str:
        return require_text(value, "City", min_length=2)

    @field_validator("address")
    @classmethod
    def _address(cls, value: str) -> str:
        return require_text(value, "Address", min_length=5)

    @field_validator("postal_code")
    @classmethod
    def _postal_code(cls, value: str) -> str:
        require_text(value, "Postal code")
        return require_pattern(
            value,
            POSTAL_CODE_PATTERN,
            "Postal code may contain only digits and hyphens",
        )


class PaymentMethod(CamelModel):
    """
    A saved card. Stored formatted, not tokenized.

    card_number keeps its display spacing; card_holder is uppercase;
    expiry_date is MM/YY (or empty).
    """

    id: str
    card_number: str
    card_holder: str
    expiry_date: str = ""
    cvv: str = ""
    is_default: bool = False

    @field_validator("card_number")
    @classmethod
    def _card_number(cls, value: str) -> str:
        return require_text(value, "Card number")

    @field_validator("card_holder")
    @classmethod
    def _card_holder(cls, value: str) -> str:
        return require_text(value, "Card holder")

    @field_validator("expiry_date")
    @classmethod
    def _expiry_date(cls, value: str) -> str:
        if not value:
            return value
        month = value[:2]
        if not month.isdigit() or not 1 <= int(month) <= 12:
            raise PydanticCustomError("expiry_month", "Invalid expiry month")
        return value


class BillingData(CamelModel):
    """Full wizard payload accepted by POST /billing."""

    company_profile: CompanyProfile
    billing_address: BillingAddress
    payment_methods: list[PaymentMethod] = Field(default_factory=list)


class BillingRecordOut(BillingData):
    # Legacy single-record payloads carry no id.
    id: str | None = None
    created_at: datetime.datetime | None = None


class BillingListResponse(CamelModel):
    data: list[BillingRecordOut]


class BillingSaveResponse(CamelModel):
    message: str = "Billing settings saved successfully"
    data: BillingRecordOut


class PaymentMethodDelete(CamelModel):
    id: str = Field(..., min_length=1)


class MessageResponse(CamelModel):
    message: str
