"""
Billing record service.

Records are stored whole; a payment method is removed by scanning every
record for its id. There is no locking — two concurrent writers follow
last-write-wins on the affected record.
"""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from workspace_manager.models.billing import BillingRecord
from workspace_manager.schemas.billing import BillingData

logger = logging.getLogger(__name__)


class PaymentMethodNotFound(Exception):
    """Raised when no billing record holds the given payment method id."""


async def list_records(session: AsyncSession) -> list[BillingRecord]:
    result = await session.execute(
        select(BillingRecord).order_by(BillingRecord.created_at, BillingRecord.id)
    )
    return list(result.scalars().all())


async def save_record(session: AsyncSession, data: BillingData) -> BillingRecord:
    """Append a new billing record built from a validated wizard payload."""
    record = BillingRecord(
        company_profile=data.company_profile.model_dump(by_alias=True),
        billing_address=data.billing_address.model_dump(by_alias=True),
        payment_methods=[m.model_dump(by_alias=True) for m in data.payment_methods],
    )
    session.add(record)
    await session.commit()
    await session.refresh(record)
    logger.info("Saved billing record %s", record.id)
    return record


async def remove_payment_method(session: AsyncSession, method_id: str) -> BillingRecord:
    """
    Remove a payment method from whichever record contains it.

    Returns the modified record. Raises PaymentMethodNotFound.
    """
    for record in await list_records(session):
        methods = record.payment_methods or []
        remaining = [m for m in methods if str(m.get("id")) != method_id]
        if len(remaining) == len(methods):
            continue
        # Reassign so the JSON column is flagged dirty.
        record.payment_methods = remaining
        await session.commit()
        logger.info("Removed payment method %s from record %s", method_id, record.id)
        return record

    raise PaymentMethodNotFound(method_id)
