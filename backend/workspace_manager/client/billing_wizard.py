"""
Billing wizard — a three-step form state machine.

    Company Profile  →  Billing Address  →  Payment Methods

Moving forward is gated by validating only the current step's fields
(the pydantic step models in schemas.billing); moving back is always
allowed. The last step collects a list of payment methods and ends with
submit(), which hands the assembled BillingData to the submit collaborator.

Every outcome is local state (errors, notice, current_step): nothing a
user can do here raises.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, fields
from enum import IntEnum
from typing import Literal

from pydantic import BaseModel, ValidationError

from workspace_manager.client import formatters
from workspace_manager.schemas.billing import (
    COUNTRIES,
    BillingAddress,
    BillingData,
    CompanyProfile,
    PaymentMethod,
)
from workspace_manager.schemas.common import field_errors

logger = logging.getLogger(__name__)

SubmitBilling = Callable[[BillingData], Awaitable[object]]

SAVE_SUCCESS_MESSAGE = "Billing settings saved successfully!"
SAVE_FAILURE_MESSAGE = "Failed to save billing settings"
MISSING_PAYMENT_DETAILS = "Please fill in all payment details"
AFTER_SAVE_PATH = "/settings"


class WizardStep(IntEnum):
    COMPANY_PROFILE = 0
    BILLING_ADDRESS = 1
    PAYMENT_METHODS = 2

    @property
    def label(self) -> str:
        return _STEP_LABELS[self]


_STEP_LABELS = {
    WizardStep.COMPANY_PROFILE: "Company Profile",
    WizardStep.BILLING_ADDRESS: "Billing Address",
    WizardStep.PAYMENT_METHODS: "Payment Methods",
}

# Steps with a gate; the last step has none.
_STEP_MODELS: dict[WizardStep, type[BaseModel]] = {
    WizardStep.COMPANY_PROFILE: CompanyProfile,
    WizardStep.BILLING_ADDRESS: BillingAddress,
}

_FIELD_FORMATTERS: dict[str, Callable[[str], str]] = {
    "phone": formatters.format_phone_number,
    "postal_code": formatters.format_postal_code,
}

_PAYMENT_FORMATTERS: dict[str, Callable[[str], str]] = {
    "card_number": lambda raw: formatters.format_card_number(
        formatters.limit_card_digits(raw)
    ),
    "card_holder": formatters.format_card_holder,
    "expiry_date": formatters.format_expiry_date,
    "cvv": formatters.format_cvv,
}


@dataclass
class PaymentForm:
    """The pending "add payment method" inputs."""

    card_number: str = ""
    card_holder: str = ""
    expiry_date: str = ""
    cvv: str = ""
    is_default: bool = False


@dataclass(frozen=True, slots=True)
class StepIndicator:
    index: int
    label: str
    active: bool
    current: bool


@dataclass(frozen=True, slots=True)
class Notice:
    """A modal-style message for the user."""

    kind: Literal["success", "error"]
    title: str
    message: str


class BillingWizard:
    """
    State for one pass through the billing settings form.

    Args:
        submit: Async callable that persists BillingData; any exception it
                raises is reported as a failed save.
        clock:  Seconds-since-epoch source used for payment method ids.
    """

    steps = tuple(WizardStep)
    # Options for the country dropdown.
    countries = COUNTRIES

    def __init__(
        self,
        submit: SubmitBilling,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._submit = submit
        self._clock = clock
        self._last_id = 0

        self.current_step = WizardStep.COMPANY_PROFILE
        self.company_profile = {"company_name": "", "email": "", "phone": ""}
        self.billing_address = {
            "country": "",
            "city": "",
            "address": "",
            "postal_code": "",
        }
        self.payment_methods: list[PaymentMethod] = []
        self.payment_form = PaymentForm()
        self.errors: dict[str, str] = {}
        self.notice: Notice | None = None
        self.submitting = False

    # ── Navigation ──────────────────────────────────────────
    @property
    def is_first_step(self) -> bool:
        return self.current_step == WizardStep.COMPANY_PROFILE

    @property
    def is_last_step(self) -> bool:
        return self.current_step == self.steps[-1]

    def validate_step(self) -> bool:
        """Run the current step's gate. Errors are replaced, never accumulated."""
        model = _STEP_MODELS.get(self.current_step)
        if model is None:
            self.errors = {}
            return True

        section = (
            self.company_profile
            if self.current_step == WizardStep.COMPANY_PROFILE
            else self.billing_address
        )
        try:
            model(**section)
        except ValidationError as exc:
            self.errors = field_errors(exc, model)
            return False
        self.errors = {}
        return True

    def next(self) -> bool:
        """Advance one step if the current step validates."""
        if not self.validate_step():
            logger.debug("Step %s blocked: %s", self.current_step.name, sorted(self.errors))
            return False
        if not self.is_last_step:
            self.current_step = WizardStep(self.current_step + 1)
        return True

    def previous(self) -> bool:
        """Go back one step. No validation; no-op on the first step."""
        if self.is_first_step:
            return False
        self.current_step = WizardStep(self.current_step - 1)
        self.errors = {}
        return True

    def step_indicators(self) -> list[StepIndicator]:
        """Every step up to and including the current one is active."""
        return [
            StepIndicator(
                index=step.value,
                label=step.label,
                active=step <= self.current_step,
                current=step == self.current_step,
            )
            for step in self.steps
        ]

    # ── Field input ─────────────────────────────────────────
    def set_field(self, name: str, value: str) -> str:
        """Write a company profile or billing address field; returns the stored text."""
        formatted = _FIELD_FORMATTERS.get(name, str)(value)
        if name in self.company_profile:
            self.company_profile[name] = formatted
        elif name in self.billing_address:
            self.billing_address[name] = formatted
        else:
            raise ValueError(f"Unknown billing field: {name}")
        return formatted

    def set_payment_field(self, name: str, value: str | bool) -> str | bool:
        """Write a pending payment form field through its formatter."""
        if name not in {f.name for f in fields(PaymentForm)}:
            raise ValueError(f"Unknown payment field: {name}")
        if name == "is_default":
            formatted: str | bool = bool(value)
        else:
            formatted = _PAYMENT_FORMATTERS[name](str(value))
        setattr(self.payment_form, name, formatted)
        return formatted

    # ── Payment methods ─────────────────────────────────────
    def _next_id(self) -> str:
        # Millisecond timestamp, bumped when two adds land in the same ms.
        self._last_id = max(int(self._clock() * 1000), self._last_id + 1)
        return str(self._last_id)

    def add_payment_method(self) -> PaymentMethod | None:
        """
        Append the pending payment form as a new method.

        The first method in an empty list is forced to be the default; later
        ones keep the form's is_default as entered.
        """
        form = self.payment_form
        if not form.card_number or not form.card_holder:
            self.notice = Notice("error", "Error", MISSING_PAYMENT_DETAILS)
            return None

        try:
            method = PaymentMethod(
                id=self._next_id(),
                card_number=form.card_number,
                card_holder=form.card_holder,
                expiry_date=form.expiry_date,
                cvv=form.cvv,
                is_default=not self.payment_methods or form.is_default,
            )
        except ValidationError as exc:
            message = next(iter(field_errors(exc, PaymentMethod).values()))
            self.notice = Notice("error", "Error", message)
            return None

        self.payment_methods.append(method)
        self.payment_form = PaymentForm()
        return method

    def remove_payment_method(self, method_id: str) -> bool:
        """Drop a method by id. The default flag is not moved to another entry."""
        remaining = [m for m in self.payment_methods if m.id != method_id]
        removed = len(remaining) != len(self.payment_methods)
        self.payment_methods = remaining
        return removed

    @property
    def default_payment_method(self) -> PaymentMethod | None:
        return next((m for m in self.payment_methods if m.is_default), None)

    # ── Submission ──────────────────────────────────────────
    def build_payload(self) -> BillingData:
        """Assemble (and validate) the full BillingData."""
        return BillingData(
            company_profile=CompanyProfile(**self.company_profile),
            billing_address=BillingAddress(**self.billing_address),
            payment_methods=list(self.payment_methods),
        )

    async def submit(self) -> bool:
        """
        Save the billing settings. Only allowed from the last step.

        Success clears the pending payment form and raises a success notice;
        failure keeps everything entered and raises an error notice.
        """
        if not self.is_last_step:
            logger.warning("submit() called on step %s", self.current_step.name)
            return False

        self.submitting = True
        try:
            await self._submit(self.build_payload())
        except Exception:
            logger.exception("Failed to save billing settings")
            self.notice = Notice("error", "Error", SAVE_FAILURE_MESSAGE)
            return False
        finally:
            self.submitting = False

        self.payment_form = PaymentForm()
        self.notice = Notice("success", "Success", SAVE_SUCCESS_MESSAGE)
        return True

    def dismiss_notice(self) -> str | None:
        """Close the notice; after a successful save, return where to go next."""
        notice, self.notice = self.notice, None
        if notice is not None and notice.kind == "success":
            return AFTER_SAVE_PATH
        return None
