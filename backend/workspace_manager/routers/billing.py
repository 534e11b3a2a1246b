"""
Billing router — saved billing settings.

GET    /billing  — every saved record
POST   /billing  — append a record from the wizard payload
DELETE /billing  — remove one payment method by id from whichever record holds it
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from workspace_manager.auth.dependencies import AuthContext, get_current_user
from workspace_manager.core.database import get_db_session
from workspace_manager.models.billing import BillingRecord
from workspace_manager.schemas.billing import (
    BillingData,
    BillingListResponse,
    BillingRecordOut,
    BillingSaveResponse,
    MessageResponse,
    PaymentMethodDelete,
)
from workspace_manager.services.billing import (
    PaymentMethodNotFound,
    list_records,
    remove_payment_method,
    save_record,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Billing"])

DbSession = Annotated[AsyncSession, Depends(get_db_session)]
Auth = Annotated[AuthContext, Depends(get_current_user)]


def _record_out(record: BillingRecord) -> BillingRecordOut:
    return BillingRecordOut.model_validate(
        {
            "id": record.id,
            "createdAt": record.created_at,
            "companyProfile": record.company_profile,
            "billingAddress": record.billing_address,
            "paymentMethods": record.payment_methods or [],
        }
    )


@router.get("", response_model=BillingListResponse, summary="List saved billing settings")
async def get_billing(session: DbSession, _auth: Auth) -> BillingListResponse:
    return BillingListResponse(data=[_record_out(r) for r in await list_records(session)])


@router.post(
    "",
    response_model=BillingSaveResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Save billing settings",
)
async def post_billing(
    payload: BillingData,
    session: DbSession,
    _auth: Auth,
) -> BillingSaveResponse:
    try:
        record = await save_record(session, payload)
    except Exception:
        await session.rollback()
        logger.exception("Failed to persist billing record")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to save billing settings",
        )

    return BillingSaveResponse(data=_record_out(record))


@router.delete(
    "",
    response_model=MessageResponse,
    summary="Remove a payment method",
)
async def delete_payment_method(
    payload: PaymentMethodDelete,
    session: DbSession,
    _auth: Auth,
) -> MessageResponse:
    try:
        await remove_payment_method(session, payload.id)
    except PaymentMethodNotFound:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Payment method not found",
        )

    return MessageResponse(message="Payment method removed")
