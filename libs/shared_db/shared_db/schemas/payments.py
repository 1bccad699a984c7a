"""Pydantic schemas for payment records."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import ConfigDict, Field

from common.ids import CourseId, PaymentId, UserId
from common.utils.json_model import JsonSnakeCaseModel
from shared_db.models.payments import PaymentStatus


class PaymentCreate(JsonSnakeCaseModel):
    user_id: UserId
    course_id: CourseId
    provider: str
    provider_reference: str
    amount: int
    currency: str
    metadata: dict[str, Any] = Field(default_factory=dict)


class PaymentRecord(JsonSnakeCaseModel):
    id: PaymentId
    user_id: UserId
    course_id: CourseId
    provider: str
    provider_reference: str
    amount: int
    currency: str
    status: PaymentStatus
    metadata: dict[str, Any] = Field(default_factory=dict, validation_alias="payment_metadata")
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)

    @property
    def is_completed(self) -> bool:
        return self.status == PaymentStatus.COMPLETED
