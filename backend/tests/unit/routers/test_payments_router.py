"""HTTP-level tests for the checkout routes."""

from __future__ import annotations

import json
from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.dependencies import get_db, get_reconciliation_service, require_authenticated
from app.main import app
from app.services.reconciliation_service import ReconciliationService
from app.services.signature_verifier import HmacSignatureVerifier, compute_signature
from common.ids import UserId
from shared_db.crud.enrollment import EnrollmentDAO
from shared_db.crud.payments import PaymentDAO
from shared_db.models.enrollment import Enrollment
from shared_db.models.payments import PaymentStatus
from shared_db.models.profile import UserRole
from shared_db.schemas.payments import PaymentCreate, PaymentRecord

KEY_SECRET = "key_secret"
WEBHOOK_SECRET = "webhook_secret"
STUDENT_ID = UserId("student-1")


@pytest_asyncio.fixture
async def client(db_session: AsyncSession, make_auth) -> AsyncGenerator[AsyncClient]:
    async def _get_db() -> AsyncGenerator[AsyncSession]:
        yield db_session
        await db_session.commit()

    reconciliation = ReconciliationService(
        PaymentDAO(),
        EnrollmentDAO(),
        checkout_verifier=HmacSignatureVerifier(KEY_SECRET, name="checkout"),
        webhook_verifier=HmacSignatureVerifier(WEBHOOK_SECRET, name="webhook"),
    )
    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_reconciliation_service] = lambda: reconciliation
    app.dependency_overrides[require_authenticated] = lambda: make_auth(STUDENT_ID, UserRole.STUDENT)
    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as http_client:
            yield http_client
    finally:
        app.dependency_overrides.clear()


async def _seed_pending_payment(db: AsyncSession, make_course) -> PaymentRecord:
    course = await make_course(price_cents=4999)
    payment = await PaymentDAO().create(
        db,
        obj_in=PaymentCreate(
            user_id=STUDENT_ID,
            course_id=course.id,
            provider="razorpay",
            provider_reference="ord_1",
            amount=4999,
            currency="INR",
        ),
    )
    await db.commit()
    return payment


def _captured_body(payment_id: str = "pay_1", order_id: str = "ord_1") -> bytes:
    entity = {"id": payment_id, "order_id": order_id, "amount": 4999, "currency": "INR", "status": "captured"}
    return json.dumps({"event": "payment.captured", "payload": {"payment": {"entity": entity}}}).encode()


async def _enrollment_count(db: AsyncSession) -> int:
    return (await db.execute(select(func.count()).select_from(Enrollment))).scalar_one()


@pytest.mark.asyncio
async def test_webhook_with_invalid_signature_is_rejected(client: AsyncClient, db_session: AsyncSession, make_course) -> None:
    payment = await _seed_pending_payment(db_session, make_course)
    body = _captured_body()

    response = await client.post(
        "/payment/webhook",
        content=body,
        headers={"Content-Type": "application/json", "X-Razorpay-Signature": compute_signature(body, b"forged")},
    )

    assert response.status_code == 400
    assert response.json()["code"] == "invalid_signature"
    stored = await PaymentDAO().get(db_session, payment.id)
    assert stored is not None and stored.status == PaymentStatus.CREATED
    assert await _enrollment_count(db_session) == 0


@pytest.mark.asyncio
async def test_webhook_without_signature_is_rejected(client: AsyncClient, db_session: AsyncSession, make_course) -> None:
    await _seed_pending_payment(db_session, make_course)

    response = await client.post("/payment/webhook", content=_captured_body(), headers={"Content-Type": "application/json"})

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_valid_webhook_enrolls_and_acknowledges(client: AsyncClient, db_session: AsyncSession, make_course) -> None:
    payment = await _seed_pending_payment(db_session, make_course)
    body = _captured_body()
    headers = {"Content-Type": "application/json", "X-Razorpay-Signature": compute_signature(body, WEBHOOK_SECRET.encode())}

    first = await client.post("/payment/webhook", content=body, headers=headers)
    second = await client.post("/payment/webhook", content=body, headers=headers)

    assert first.status_code == 200
    assert first.json() == {"received": True}
    assert second.json() == {"received": True}
    enrollment = await EnrollmentDAO().get_active(db_session, STUDENT_ID, payment.course_id)
    assert enrollment is not None and enrollment.is_paid
    assert await _enrollment_count(db_session) == 1


@pytest.mark.asyncio
async def test_webhook_for_unknown_reference_is_acknowledged(client: AsyncClient, db_session: AsyncSession) -> None:
    body = _captured_body(payment_id="pay_unknown", order_id="ord_unknown")

    response = await client.post(
        "/payment/webhook",
        content=body,
        headers={"Content-Type": "application/json", "X-Razorpay-Signature": compute_signature(body, WEBHOOK_SECRET.encode())},
    )

    assert response.status_code == 200
    assert response.json() == {"received": True}
    assert await _enrollment_count(db_session) == 0


@pytest.mark.asyncio
async def test_verify_accepts_provider_field_names(client: AsyncClient, db_session: AsyncSession, make_course) -> None:
    payment = await _seed_pending_payment(db_session, make_course)
    signature = compute_signature(b"ord_1|pay_1", KEY_SECRET.encode())

    response = await client.post(
        "/payment/verify",
        json={"razorpay_order_id": "ord_1", "razorpay_payment_id": "pay_1", "razorpay_signature": signature},
    )

    assert response.status_code == 200
    assert response.json() == {"ok": True}
    stored = await PaymentDAO().get(db_session, payment.id)
    assert stored is not None and stored.status == PaymentStatus.COMPLETED


@pytest.mark.asyncio
async def test_verify_with_unknown_reference_is_not_found(client: AsyncClient, db_session: AsyncSession) -> None:
    signature = compute_signature(b"ord_x|pay_x", KEY_SECRET.encode())

    response = await client.post("/payment/verify", json={"orderReference": "ord_x", "paymentReference": "pay_x", "signature": signature})

    assert response.status_code == 404
    assert response.json()["code"] == "unknown_reference"


@pytest.mark.asyncio
async def test_verify_with_bad_signature_is_rejected(client: AsyncClient, db_session: AsyncSession, make_course) -> None:
    await _seed_pending_payment(db_session, make_course)

    response = await client.post("/payment/verify", json={"orderReference": "ord_1", "paymentReference": "pay_1", "signature": "deadbeef"})

    assert response.status_code == 400
    assert await _enrollment_count(db_session) == 0


@pytest.mark.asyncio
async def test_verify_with_missing_signature_is_bad_request(client: AsyncClient, db_session: AsyncSession, make_course) -> None:
    await _seed_pending_payment(db_session, make_course)

    response = await client.post("/payment/verify", json={"orderReference": "ord_1", "paymentReference": "pay_1"})

    assert response.status_code == 400
    body = response.json()
    assert body["code"] == "invalid_input"
    assert "pay_1" not in json.dumps(body)
    assert await _enrollment_count(db_session) == 0
