"""DAO for payment records.

Writes only flush; the caller owns the transaction so the payment transition and the
enrollment upsert commit together.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from common.ids import PaymentId
from common.utils.utils import get_logger
from shared_db.models.payments import Payment, PaymentStatus
from shared_db.schemas.payments import PaymentCreate, PaymentRecord

logger = get_logger(__name__)


class PaymentDAO:
    async def create(self, db: AsyncSession, *, obj_in: PaymentCreate) -> PaymentRecord:
        payment = Payment(
            user_id=obj_in.user_id,
            course_id=obj_in.course_id,
            provider=obj_in.provider,
            provider_reference=obj_in.provider_reference,
            amount=obj_in.amount,
            currency=obj_in.currency,
            status=PaymentStatus.CREATED,
            payment_metadata=obj_in.metadata,
        )
        db.add(payment)
        await db.flush()
        await db.refresh(payment)
        return PaymentRecord.model_validate(payment)

    async def get(self, db: AsyncSession, id: PaymentId) -> PaymentRecord | None:
        result = await db.execute(select(Payment).where(Payment.id == id).execution_options(populate_existing=True))
        payment = result.scalar_one_or_none()
        return PaymentRecord.model_validate(payment) if payment else None

    async def get_by_reference(self, db: AsyncSession, provider_reference: str) -> PaymentRecord | None:
        result = await db.execute(
            select(Payment).where(Payment.provider_reference == provider_reference).execution_options(populate_existing=True)
        )
        payment = result.scalar_one_or_none()
        return PaymentRecord.model_validate(payment) if payment else None

    async def complete_if_pending(
        self,
        db: AsyncSession,
        id: PaymentId,
        *,
        provider_reference: str,
        metadata: dict[str, Any],
    ) -> bool:
        """Compare-and-set to ``completed``. Returns False when another reconciliation got there first."""
        result = await db.execute(
            update(Payment)
            .where(Payment.id == id, Payment.status != PaymentStatus.COMPLETED)
            .values(
                status=PaymentStatus.COMPLETED,
                provider_reference=provider_reference,
                payment_metadata=metadata,
            )
            .execution_options(synchronize_session=False)
        )
        changed = result.rowcount == 1  # pyright: ignore[reportAttributeAccessIssue]
        if not changed:
            logger.info("Payment already completed by a concurrent reconciliation", payment_id=id)
        return changed

    async def mark_failed_if_pending(self, db: AsyncSession, id: PaymentId, *, metadata: dict[str, Any]) -> bool:
        """``created`` -> ``failed``; completed and already failed records are left alone."""
        result = await db.execute(
            update(Payment)
            .where(Payment.id == id, Payment.status == PaymentStatus.CREATED)
            .values(status=PaymentStatus.FAILED, payment_metadata=metadata)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1  # pyright: ignore[reportAttributeAccessIssue]
