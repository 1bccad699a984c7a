"""Payment-to-enrollment reconciliation.

Client confirmations and provider webhooks both end up in :meth:`ReconciliationService.reconcile`,
which moves a pending payment to ``completed`` with a compare-and-set and upserts the paid
enrollment in the same transaction. Duplicate or racing deliveries are no-ops.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from app.schemas.payments import PaymentFacts, ReconcileResult, VerifyPaymentRequest, WebhookEvent, WebhookEventType
from app.services.signature_verifier import HmacSignatureVerifier
from common.core.app_error import Errors
from common.db.db_utils import merge_metadata, use_session
from common.utils.msgspec import SerializationError, decode_json
from common.utils.utils import get_logger, get_now
from shared_db.crud.enrollment import EnrollmentDAO
from shared_db.crud.payments import PaymentDAO
from shared_db.schemas.payments import PaymentRecord

logger = get_logger(__name__)

CLIENT_VERIFY_EVENT = "client.verify"


class ReconciliationService:
    def __init__(
        self,
        payment_dao: PaymentDAO,
        enrollment_dao: EnrollmentDAO,
        checkout_verifier: HmacSignatureVerifier,
        webhook_verifier: HmacSignatureVerifier,
    ) -> None:
        self.payment_dao = payment_dao
        self.enrollment_dao = enrollment_dao
        self.checkout_verifier = checkout_verifier
        self.webhook_verifier = webhook_verifier

    async def verify_client_payment(self, db: AsyncSession, request: VerifyPaymentRequest) -> ReconcileResult:
        """Client confirmation after checkout. Errors surface to the caller."""
        if not self.checkout_verifier.verify_checkout(request.order_reference, request.payment_reference, request.signature):
            raise Errors.Payment.INVALID_SIGNATURE.create()

        facts = PaymentFacts(
            event_type=CLIENT_VERIFY_EVENT,
            payment_reference=request.payment_reference,
            order_reference=request.order_reference,
        )
        return await self.reconcile(db, facts)

    def authenticate_webhook(self, raw_body: bytes, signature: str | None) -> WebhookEvent | None:
        """Verify the webhook signature over the raw body, then decode it.

        Raises ``INVALID_SIGNATURE`` on mismatch. Returns None for an authenticated body that cannot be decoded.
        """
        if not self.webhook_verifier.verify(raw_body, signature):
            raise Errors.Payment.INVALID_SIGNATURE.create()

        try:
            return decode_json(raw_body, WebhookEvent)
        except SerializationError:
            logger.exception("Undecodable payment webhook", payload_size=len(raw_body))
            return None

    async def apply_webhook_event(self, db: AsyncSession, event: WebhookEvent) -> ReconcileResult | None:
        """Dispatch an authenticated webhook event. Unhandled event types are a no-op."""
        facts = event.facts()
        if event.event not in WebhookEventType or facts is None:
            logger.info("Ignoring payment webhook event", event_type=event.event, has_payment=facts is not None)
            return None

        if event.event == WebhookEventType.PAYMENT_FAILED:
            await self.mark_failed(db, facts)
            return None

        return await self.reconcile(db, facts)

    async def _find_payment(self, db: AsyncSession, facts: PaymentFacts) -> PaymentRecord:
        # The record is keyed by the order reference until a confirmation re-keys it to the payment reference
        payment: PaymentRecord | None = None
        if facts.order_reference:
            payment = await self.payment_dao.get_by_reference(db, facts.order_reference)
        if payment is None:
            payment = await self.payment_dao.get_by_reference(db, facts.payment_reference)
        if payment is None:
            raise Errors.Payment.UNKNOWN_REFERENCE.create(
                details={"orderReference": facts.order_reference, "paymentReference": facts.payment_reference}
            )
        return payment

    async def reconcile(self, db: AsyncSession, facts: PaymentFacts) -> ReconcileResult:
        """Complete the payment and activate the enrollment, exactly once per payment record."""
        async with use_session(db):
            payment = await self._find_payment(db, facts)
            already_completed = payment.is_completed

            if not already_completed:
                metadata = merge_metadata(payment.metadata, {"payment": facts.audit()})
                changed = await self.payment_dao.complete_if_pending(
                    db,
                    payment.id,
                    provider_reference=facts.payment_reference,
                    metadata=metadata,
                )
                if not changed:
                    already_completed = True
                    payment = await self.payment_dao.get(db, payment.id) or payment

            enrollment = await self.enrollment_dao.upsert_paid(
                db,
                user_id=payment.user_id,
                course_id=payment.course_id,
                payment_id=payment.id,
                purchased_at=get_now(),
            )

        logger.info(
            "Payment reconciled",
            payment_id=payment.id,
            enrollment_id=enrollment.id,
            user_id=payment.user_id,
            course_id=payment.course_id,
            event_type=facts.event_type,
            already_completed=already_completed,
        )
        return ReconcileResult(
            payment_id=payment.id,
            user_id=payment.user_id,
            course_id=payment.course_id,
            already_completed=already_completed,
        )

    async def mark_failed(self, db: AsyncSession, facts: PaymentFacts) -> bool:
        """``created`` -> ``failed``. Completed payments are never downgraded."""
        async with use_session(db):
            payment = await self._find_payment(db, facts)
            changed = await self.payment_dao.mark_failed_if_pending(
                db,
                payment.id,
                metadata=merge_metadata(payment.metadata, {"failure": facts.audit()}),
            )

        logger.info("Payment failure recorded", payment_id=payment.id, status_changed=changed)
        return changed
