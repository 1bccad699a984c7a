"""Checkout and reconciliation schemas (Razorpay order + verify + webhook flow)."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

import msgspec
from pydantic import AliasChoices, BaseModel, Field

from common.ids import CourseId, PaymentId, UserId
from common.utils.json_model import JsonModel, JsonSnakeCaseModel
from common.utils.msgspec import BaseStruct


class CreateOrderRequest(JsonModel):
    course_id: CourseId


class IntentResult(JsonSnakeCaseModel):
    """What the client needs to open the provider checkout."""

    order_id: str
    amount: int
    currency: str
    key_id: str
    course_id: CourseId


class VerifyPaymentRequest(BaseModel):
    """Client-side confirmation; accepts the provider's field names as returned by its checkout widget."""

    order_reference: str = Field(..., min_length=1, validation_alias=AliasChoices("orderReference", "razorpay_order_id", "order_reference"))
    payment_reference: str = Field(
        ..., min_length=1, validation_alias=AliasChoices("paymentReference", "razorpay_payment_id", "payment_reference")
    )
    signature: str = Field(..., min_length=1, validation_alias=AliasChoices("signature", "razorpay_signature"))


class OkResponse(JsonModel):
    ok: bool = True


class WebhookAck(JsonModel):
    received: bool = True


class ReconcileResult(JsonSnakeCaseModel):
    payment_id: PaymentId
    user_id: UserId
    course_id: CourseId
    already_completed: bool


class WebhookEventType(StrEnum):
    PAYMENT_CAPTURED = "payment.captured"
    ORDER_PAID = "order.paid"
    PAYMENT_FAILED = "payment.failed"


class PaymentEntity(BaseStruct, kw_only=True):
    id: str
    order_id: str | None = None
    amount: int | None = None
    currency: str | None = None
    status: str | None = None


class OrderEntity(BaseStruct, kw_only=True):
    id: str
    amount: int | None = None
    currency: str | None = None
    status: str | None = None


class PaymentEnvelope(BaseStruct):
    entity: PaymentEntity


class OrderEnvelope(BaseStruct):
    entity: OrderEntity


class WebhookPayload(BaseStruct, kw_only=True):
    payment: PaymentEnvelope | None = None
    order: OrderEnvelope | None = None


class WebhookEvent(BaseStruct, kw_only=True):
    """Provider webhook body; only the fields reconciliation reads are decoded."""

    event: str
    payload: WebhookPayload = msgspec.field(default_factory=WebhookPayload)

    def facts(self) -> PaymentFacts | None:
        """None when the event carries no payment entity."""
        if self.payload.payment is None:
            return None
        payment = self.payload.payment.entity
        order_reference = payment.order_id or (self.payload.order.entity.id if self.payload.order else None)
        return PaymentFacts(
            event_type=self.event,
            payment_reference=payment.id,
            order_reference=order_reference,
            amount=payment.amount,
            currency=payment.currency,
            status=payment.status,
        )


class PaymentFacts(JsonSnakeCaseModel):
    """Provider-reported facts about a payment, stored for audit only."""

    event_type: str
    payment_reference: str
    order_reference: str | None = None
    amount: int | None = None
    currency: str | None = None
    status: str | None = None

    def audit(self) -> dict[str, Any]:
        return self.to_dict(mode="json")
