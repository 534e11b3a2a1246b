"""Tests for the three-step billing wizard."""

import pytest

from workspace_manager.client.billing_wizard import (
    AFTER_SAVE_PATH,
    BillingWizard,
    WizardStep,
)


class RecordingSubmit:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.payloads = []

    async def __call__(self, data):
        if self.fail:
            raise RuntimeError("boom")
        self.payloads.append(data)
        return data


class FrozenClock:
    """Returns the same instant every time, to force id collisions."""

    def __call__(self) -> float:
        return 1_700_000_000.0


def fill_company(wizard: BillingWizard) -> None:
    wizard.set_field("company_name", "Acme Corp")
    wizard.set_field("email", "billing@acme.com")
    wizard.set_field("phone", "5551234567")


def fill_address(wizard: BillingWizard) -> None:
    wizard.set_field("country", "United States")
    wizard.set_field("city", "Boston")
    wizard.set_field("address", "1 Main Street")
    wizard.set_field("postal_code", "02110")


def fill_card(wizard: BillingWizard, number="4242424242424242", holder="john doe", *, default=False):
    wizard.set_payment_field("card_number", number)
    wizard.set_payment_field("card_holder", holder)
    wizard.set_payment_field("expiry_date", "1227")
    wizard.set_payment_field("cvv", "123")
    wizard.set_payment_field("is_default", default)


def at_payment_step(submit=None) -> BillingWizard:
    wizard = BillingWizard(submit or RecordingSubmit())
    fill_company(wizard)
    assert wizard.next()
    fill_address(wizard)
    assert wizard.next()
    assert wizard.current_step == WizardStep.PAYMENT_METHODS
    return wizard


# ── Navigation ──────────────────────────────────────────────


def test_starts_on_company_profile():
    wizard = BillingWizard(RecordingSubmit())
    assert wizard.current_step == WizardStep.COMPANY_PROFILE
    assert wizard.is_first_step
    assert not wizard.is_last_step

    indicators = wizard.step_indicators()
    assert [i.label for i in indicators] == ["Company Profile", "Billing Address", "Payment Methods"]
    assert [i.active for i in indicators] == [True, False, False]
    assert [i.current for i in indicators] == [True, False, False]
    assert "United States" in wizard.countries


def test_empty_company_profile_reports_every_field():
    wizard = BillingWizard(RecordingSubmit())
    assert not wizard.next()
    assert wizard.current_step == WizardStep.COMPANY_PROFILE
    assert wizard.errors == {
        "company_name": "Company name is required",
        "email": "Email is required",
        "phone": "Phone is required",
    }


def test_company_field_rules():
    wizard = BillingWizard(RecordingSubmit())
    wizard.set_field("company_name", "A")
    wizard.set_field("email", "not-an-email")
    wizard.set_field("phone", "555")
    assert not wizard.next()
    assert wizard.errors["company_name"] == "Company name must be at least 2 characters"
    assert wizard.errors["email"] == "Invalid email address"
    assert "phone" not in wizard.errors


def test_errors_are_replaced_not_accumulated():
    wizard = BillingWizard(RecordingSubmit())
    wizard.next()
    assert len(wizard.errors) == 3

    wizard.set_field("company_name", "Acme")
    wizard.set_field("email", "a@b.co")
    wizard.next()
    assert wizard.errors == {"phone": "Phone is required"}


def test_set_field_formats_phone_and_postal_code():
    wizard = BillingWizard(RecordingSubmit())
    assert wizard.set_field("phone", "555-123-4567") == "(555) 123-4567"
    assert wizard.company_profile["phone"] == "(555) 123-4567"
    assert wizard.set_field("postal_code", "abc123xyz") == "123"
    assert wizard.billing_address["postal_code"] == "123"


def test_set_field_rejects_unknown_names():
    wizard = BillingWizard(RecordingSubmit())
    with pytest.raises(ValueError):
        wizard.set_field("vat_number", "123")


def test_valid_company_profile_advances():
    wizard = BillingWizard(RecordingSubmit())
    fill_company(wizard)
    assert wizard.next()
    assert wizard.current_step == WizardStep.BILLING_ADDRESS
    assert wizard.errors == {}
    assert [i.active for i in wizard.step_indicators()] == [True, True, False]


def test_billing_address_rules():
    wizard = BillingWizard(RecordingSubmit())
    fill_company(wizard)
    wizard.next()

    wizard.set_field("city", "B")
    wizard.set_field("address", "1 M")
    assert not wizard.next()
    assert wizard.errors == {
        "country": "Country is required",
        "city": "City must be at least 2 characters",
        "address": "Address must be at least 5 characters",
        "postal_code": "Postal code is required",
    }
    assert wizard.current_step == WizardStep.BILLING_ADDRESS


def test_previous_needs_no_validation_and_stops_at_first_step():
    wizard = BillingWizard(RecordingSubmit())
    fill_company(wizard)
    wizard.next()
    wizard.next()  # invalid address, sets errors
    assert wizard.errors

    assert wizard.previous()
    assert wizard.current_step == WizardStep.COMPANY_PROFILE
    assert wizard.errors == {}
    assert not wizard.previous()
    assert wizard.current_step == WizardStep.COMPANY_PROFILE


def test_entered_data_survives_navigation():
    wizard = at_payment_step()
    wizard.previous()
    wizard.previous()
    assert wizard.company_profile["company_name"] == "Acme Corp"
    assert wizard.billing_address["city"] == "Boston"


# ── Payment methods ─────────────────────────────────────────


def test_payment_fields_are_formatted():
    wizard = at_payment_step()
    assert wizard.set_payment_field("card_number", "4242 4242 4242 4242 9999") == "4242 4242 4242 4242"
    assert wizard.set_payment_field("card_holder", "jane roe") == "JANE ROE"
    assert wizard.set_payment_field("expiry_date", "1325") == "12/25"
    assert wizard.set_payment_field("cvv", "12ab345") == "1234"
    assert wizard.set_payment_field("is_default", 1) is True


def test_add_requires_card_number_and_holder():
    wizard = at_payment_step()
    wizard.set_payment_field("card_number", "4242")
    assert wizard.add_payment_method() is None
    assert wizard.notice is not None
    assert wizard.notice.kind == "error"
    assert wizard.notice.message == "Please fill in all payment details"
    assert wizard.payment_methods == []


def test_first_method_is_forced_default():
    wizard = at_payment_step()
    fill_card(wizard, default=False)
    method = wizard.add_payment_method()

    assert method is not None
    assert method.is_default
    assert method.card_number == "4242 4242 4242 4242"
    assert method.card_holder == "JOHN DOE"
    # form resets after a successful add
    assert wizard.payment_form.card_number == ""


def test_later_methods_keep_their_form_flag():
    wizard = at_payment_step()
    fill_card(wizard)
    first = wizard.add_payment_method()

    fill_card(wizard, number="5555555555554444", holder="jane roe", default=False)
    second = wizard.add_payment_method()
    assert not second.is_default
    assert wizard.default_payment_method.id == first.id

    fill_card(wizard, number="378282246310005", holder="sam lee", default=True)
    third = wizard.add_payment_method()
    assert third.is_default
    assert [m.is_default for m in wizard.payment_methods] == [True, False, True]
    assert wizard.default_payment_method.id == first.id


def test_invalid_expiry_month_is_reported():
    wizard = at_payment_step()
    fill_card(wizard)
    wizard.payment_form.expiry_date = "13/25"  # bypassing the formatter
    assert wizard.add_payment_method() is None
    assert wizard.notice.message == "Invalid expiry month"
    assert wizard.payment_methods == []


def test_ids_stay_unique_within_the_same_millisecond():
    wizard = BillingWizard(RecordingSubmit(), clock=FrozenClock())
    fill_company(wizard)
    wizard.next()
    fill_address(wizard)
    wizard.next()

    for _ in range(3):
        fill_card(wizard)
        wizard.add_payment_method()
    ids = [m.id for m in wizard.payment_methods]
    assert len(set(ids)) == 3
    assert ids[0] == "1700000000000"


def test_removing_default_leaves_no_default():
    wizard = at_payment_step()
    fill_card(wizard)
    first = wizard.add_payment_method()
    fill_card(wizard, number="5555555555554444")
    wizard.add_payment_method()

    assert wizard.remove_payment_method(first.id)
    assert len(wizard.payment_methods) == 1
    assert wizard.default_payment_method is None
    assert not wizard.remove_payment_method("missing")


# ── Submission ──────────────────────────────────────────────


@pytest.mark.asyncio
async def test_submit_only_from_last_step():
    submit = RecordingSubmit()
    wizard = BillingWizard(submit)
    fill_company(wizard)
    assert not await wizard.submit()
    assert submit.payloads == []


@pytest.mark.asyncio
async def test_successful_submit():
    submit = RecordingSubmit()
    wizard = at_payment_step(submit)
    fill_card(wizard)
    wizard.add_payment_method()
    wizard.set_payment_field("card_holder", "half typed")

    assert await wizard.submit()
    assert not wizard.submitting

    (payload,) = submit.payloads
    assert payload.company_profile.company_name == "Acme Corp"
    assert payload.billing_address.postal_code == "02110"
    assert len(payload.payment_methods) == 1
    assert payload.model_dump(by_alias=True)["companyProfile"]["companyName"] == "Acme Corp"

    assert wizard.payment_form.card_holder == ""
    assert wizard.notice.kind == "success"
    assert wizard.notice.message == "Billing settings saved successfully!"
    assert wizard.dismiss_notice() == AFTER_SAVE_PATH
    assert wizard.notice is None


@pytest.mark.asyncio
async def test_failed_submit_keeps_entered_data():
    wizard = at_payment_step(RecordingSubmit(fail=True))
    fill_card(wizard)
    wizard.add_payment_method()

    assert not await wizard.submit()
    assert wizard.notice.kind == "error"
    assert wizard.notice.message == "Failed to save billing settings"
    assert len(wizard.payment_methods) == 1
    assert wizard.current_step == WizardStep.PAYMENT_METHODS
    assert wizard.dismiss_notice() is None
