"""Payment-related database models.
One row per provider order; ``provider_reference`` is re-keyed to the provider payment id once confirmed.
"""

from __future__ import annotations

import uuid
from enum import StrEnum
from typing import Any

from sqlalchemy import ForeignKey, Integer, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from common.db.db_utils import JsonB
from common.ids import CourseId, PaymentId, UserId
from shared_db.db import Base
from shared_db.models.enum_utils import str_enum_column


class PaymentStatus(StrEnum):
    CREATED = "created"
    COMPLETED = "completed"
    FAILED = "failed"


class Payment(Base):
    """Pending/settled payment keyed by the provider's opaque reference."""

    __tablename__ = "payments"
    __table_args__ = (UniqueConstraint("provider_reference", name="uq_payments_provider_reference"),)

    id: Mapped[PaymentId] = mapped_column(Uuid(), primary_key=True, default=uuid.uuid4)
    user_id: Mapped[UserId] = mapped_column(String(128), index=True, nullable=False)
    course_id: Mapped[CourseId] = mapped_column(Uuid(), ForeignKey("courses.id"), index=True, nullable=False)
    provider: Mapped[str] = mapped_column(String(32), nullable=False, default="razorpay")
    provider_reference: Mapped[str] = mapped_column(String(255), nullable=False)
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    currency: Mapped[str] = mapped_column(String(8), nullable=False)
    status: Mapped[PaymentStatus] = mapped_column(str_enum_column(PaymentStatus), nullable=False, default=PaymentStatus.CREATED)
    # "metadata" is reserved on declarative classes
    payment_metadata: Mapped[dict[str, Any]] = mapped_column("metadata", JsonB, nullable=False, default=dict)
