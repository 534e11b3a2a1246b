"""
Billing settings overview: saved records and payment method removal.

Removal goes to the server first; the list is re-fetched on success
rather than edited locally.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

from workspace_manager.client.formatters import mask_card_number
from workspace_manager.schemas.billing import BillingRecordOut, PaymentMethod

logger = logging.getLogger(__name__)

FetchBillingRecords = Callable[[], Awaitable[list[BillingRecordOut]]]
DeletePaymentMethod = Callable[[str], Awaitable[object]]


def describe_payment_method(method: PaymentMethod) -> str:
    """One-line summary: "•••• 4242 · JOHN DOE · 12/25 · Default"."""
    parts = [mask_card_number(method.card_number), method.card_holder]
    if method.expiry_date:
        parts.append(method.expiry_date)
    if method.is_default:
        parts.append("Default")
    return " · ".join(parts)


class BillingSettingsController:
    def __init__(
        self,
        *,
        fetch_records: FetchBillingRecords,
        delete_payment_method: DeletePaymentMethod,
    ) -> None:
        self._fetch_records = fetch_records
        self._delete_payment_method = delete_payment_method
        self.records: list[BillingRecordOut] = []
        self.loading = False
        self.error: str | None = None

    @property
    def is_empty(self) -> bool:
        return not self.records

    async def load(self) -> None:
        self.loading = True
        try:
            self.records = await self._fetch_records()
            self.error = None
        except Exception:
            logger.exception("Failed to fetch billing settings")
            self.error = "Failed to fetch billing settings"
        finally:
            self.loading = False

    async def remove_payment(self, method_id: str) -> bool:
        try:
            await self._delete_payment_method(method_id)
        except Exception:
            logger.exception("Failed to remove payment method %s", method_id)
            self.error = "Failed to remove payment method"
            return False
        await self.load()
        return True
