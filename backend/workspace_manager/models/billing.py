"""
Billing record model — one saved submission of the billing wizard.

Company profile, billing address and payment methods are stored as JSON
documents on the record, mirroring the wire shape. Payment methods are
matched by their id across all records when removed.
"""

import datetime
import uuid
from typing import Any

from sqlalchemy import JSON, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from workspace_manager.core.database import Base


class BillingRecord(Base):
    """Saved billing settings."""

    __tablename__ = "billing_records"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )
    company_profile: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    billing_address: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    payment_methods: Mapped[list[dict[str, Any]]] = mapped_column(
        JSON,
        nullable=False,
        default=list,
    )
    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.datetime.now(datetime.timezone.utc),
        server_default=func.now(),
    )

    def __repr__(self) -> str:
        return (
            f"<BillingRecord id={self.id!s:.8} "
            f"methods={len(self.payment_methods or [])}>"
        )
