"""Checkout routes: order creation, client verification and the provider webhook."""

from typing import Annotated

from fastapi import APIRouter, Depends, Header, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.dependencies import get_db, get_payment_intent_service, get_reconciliation_service, require_authenticated
from app.schemas.payments import CreateOrderRequest, IntentResult, OkResponse, VerifyPaymentRequest, WebhookAck
from app.services.payment_intent_service import PaymentIntentService
from app.services.reconciliation_service import ReconciliationService
from common.core.app_error import AppException, Errors
from common.utils.utils import get_logger
from shared_db.schemas.auth import AuthContext

payments_router = APIRouter(prefix="/payment", tags=["payments"])
logger = get_logger()


@payments_router.post("/create-order", response_model=IntentResult)
async def create_order(
    request: CreateOrderRequest,
    auth: Annotated[AuthContext, Depends(require_authenticated)],
    db: Annotated[AsyncSession, Depends(get_db)],
    intent_service: Annotated[PaymentIntentService, Depends(get_payment_intent_service)],
):
    return await intent_service.create_intent(db, user_id=auth.user_id, course_id=request.course_id)


@payments_router.post("/verify", response_model=OkResponse)
async def verify_payment(
    request: VerifyPaymentRequest,
    _auth: Annotated[AuthContext, Depends(require_authenticated)],
    db: Annotated[AsyncSession, Depends(get_db)],
    reconciliation: Annotated[ReconciliationService, Depends(get_reconciliation_service)],
):
    """Client-side confirmation. Unknown references are a 404; store failures a 500."""
    try:
        _ = await reconciliation.verify_client_payment(db, request)
    except SQLAlchemyError as e:
        logger.exception("Payment verification failed", order_reference=request.order_reference)
        raise Errors.Payment.RECONCILIATION_FAILED.create(cause=e) from e
    return OkResponse()


@payments_router.post("/webhook", response_model=WebhookAck)
async def payment_webhook(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
    reconciliation: Annotated[ReconciliationService, Depends(get_reconciliation_service)],
    x_razorpay_signature: Annotated[str | None, Header(alias="X-Razorpay-Signature")] = None,
):
    """Provider push. Only an invalid signature is reported back; once the body is authenticated,
    processing failures are logged and acknowledged so the provider does not keep redelivering.
    """
    raw_body = await request.body()
    event = reconciliation.authenticate_webhook(raw_body, x_razorpay_signature)
    if event is None:
        return WebhookAck()

    try:
        _ = await reconciliation.apply_webhook_event(db, event)
    except AppException as e:
        if Errors.Payment.UNKNOWN_REFERENCE.is_(e):
            logger.warning("Webhook for unknown payment reference", event_type=event.event, details=e.details.details)
        else:
            logger.exception("Webhook processing failed", event_type=event.event)
    except SQLAlchemyError:
        logger.exception("Webhook processing failed", event_type=event.event)

    return WebhookAck()
