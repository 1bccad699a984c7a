"""Unit tests for PaymentIntentService.create_intent."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from app.services.payment_intent_service import PaymentIntentService
from common.core.app_error import AppException, Errors
from common.ids import CourseId, UserId
from shared_db.crud.course import CourseDAO
from shared_db.crud.payments import PaymentDAO
from shared_db.models.payments import PaymentStatus

STUDENT = UserId("student-1")


def _build_gateway(order_id: str = "order_abc") -> MagicMock:
    gateway = MagicMock()
    gateway.provider = "razorpay"
    gateway.currency = "INR"
    gateway.key_id = "rzp_test_key"
    gateway.create_order = AsyncMock(return_value={"id": order_id, "amount": 4999, "currency": "INR", "status": "created"})
    return gateway


@pytest.mark.asyncio
async def test_create_intent_persists_pending_payment(db_session: AsyncSession, make_course) -> None:
    course = await make_course(price_cents=4999)
    gateway = _build_gateway()
    service = PaymentIntentService(CourseDAO(), PaymentDAO(), gateway)

    intent = await service.create_intent(db_session, user_id=STUDENT, course_id=course.id)

    assert intent.order_id == "order_abc"
    assert intent.amount == 4999
    assert intent.currency == "INR"
    assert intent.key_id == "rzp_test_key"

    kwargs = gateway.create_order.await_args.kwargs
    assert kwargs["amount"] == 4999
    assert kwargs["notes"] == {"user_id": STUDENT, "course_id": str(course.id)}
    assert len(kwargs["receipt"]) <= 40

    payment = await PaymentDAO().get_by_reference(db_session, "order_abc")
    assert payment is not None
    assert payment.status == PaymentStatus.CREATED
    assert payment.user_id == STUDENT
    assert payment.course_id == course.id
    assert payment.amount == 4999
    assert payment.metadata["order"]["id"] == "order_abc"


@pytest.mark.asyncio
async def test_free_course_is_not_payable(db_session: AsyncSession, make_course) -> None:
    course = await make_course(price_cents=0)
    gateway = _build_gateway()
    service = PaymentIntentService(CourseDAO(), PaymentDAO(), gateway)

    with pytest.raises(AppException) as exc_info:
        await service.create_intent(db_session, user_id=STUDENT, course_id=course.id)

    assert Errors.Payment.NOT_PAYABLE.is_(exc_info.value)
    gateway.create_order.assert_not_awaited()


@pytest.mark.asyncio
async def test_unknown_course_is_not_found(db_session: AsyncSession) -> None:
    gateway = _build_gateway()
    service = PaymentIntentService(CourseDAO(), PaymentDAO(), gateway)

    with pytest.raises(AppException) as exc_info:
        await service.create_intent(db_session, user_id=STUDENT, course_id=CourseId(uuid4()))

    assert exc_info.value.http_status == 404
    gateway.create_order.assert_not_awaited()


@pytest.mark.asyncio
async def test_gateway_failure_leaves_no_payment(db_session: AsyncSession, make_course) -> None:
    course = await make_course(price_cents=4999)
    gateway = _build_gateway()
    gateway.create_order = AsyncMock(side_effect=Errors.Upstream.FAILED.create(message="razorpay failed"))
    service = PaymentIntentService(CourseDAO(), PaymentDAO(), gateway)

    with pytest.raises(AppException) as exc_info:
        await service.create_intent(db_session, user_id=STUDENT, course_id=course.id)

    assert exc_info.value.http_status == 502
    assert await PaymentDAO().get_by_reference(db_session, "order_abc") is None
