"""Checkout: provider order creation and the pending payment record behind it."""

from __future__ import annotations

from uuid import uuid4

from sqlalchemy.ext.asyncio import AsyncSession

from app.schemas.payments import IntentResult
from app.services.razorpay_gateway import RazorpayGateway
from common.core.app_error import Errors
from common.ids import CourseId, UserId
from common.utils.utils import get_logger
from shared_db.crud.course import CourseDAO
from shared_db.crud.payments import PaymentDAO
from shared_db.schemas.payments import PaymentCreate

logger = get_logger(__name__)


class PaymentIntentService:
    def __init__(self, course_dao: CourseDAO, payment_dao: PaymentDAO, gateway: RazorpayGateway) -> None:
        self.course_dao = course_dao
        self.payment_dao = payment_dao
        self.gateway = gateway

    async def create_intent(self, db: AsyncSession, *, user_id: UserId, course_id: CourseId) -> IntentResult:
        """Create a provider order for the course price and persist it as a ``created`` payment.

        Every call creates a new order; abandoned orders stay ``created``.
        """
        course = await self.course_dao.get(db, course_id)
        if course is None:
            raise Errors.Course.NOT_FOUND.create(details={"courseId": str(course_id)})
        if course.price_cents <= 0:
            raise Errors.Payment.NOT_PAYABLE.create(details={"courseId": str(course_id)})

        currency = self.gateway.currency
        order = await self.gateway.create_order(
            amount=course.price_cents,
            currency=currency,
            receipt=f"c_{course_id.hex[:16]}_{uuid4().hex[:8]}",
            notes={"user_id": user_id, "course_id": str(course_id)},
        )
        order_id = str(order["id"])

        payment = await self.payment_dao.create(
            db,
            obj_in=PaymentCreate(
                user_id=user_id,
                course_id=course_id,
                provider=self.gateway.provider,
                provider_reference=order_id,
                amount=course.price_cents,
                currency=currency,
                metadata={"order": order},
            ),
        )
        await db.commit()

        logger.info("Payment intent created", payment_id=payment.id, order_id=order_id, course_id=course_id, amount=course.price_cents)
        return IntentResult(
            order_id=order_id,
            amount=course.price_cents,
            currency=currency,
            key_id=self.gateway.key_id,
            course_id=course_id,
        )
