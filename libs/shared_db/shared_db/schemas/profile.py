"""Profile schemas for shared database operations."""

from datetime import datetime

from pydantic import ConfigDict

from common.ids import UserId
from common.utils.json_model import JsonSnakeCaseModel
from shared_db.models.profile import UserRole


class ProfileUpsert(JsonSnakeCaseModel):
    id: UserId
    email: str | None = None
    full_name: str | None = None
    role: UserRole = UserRole.STUDENT


class ProfileResponse(JsonSnakeCaseModel):
    """Profile row as returned to API callers."""

    id: UserId
    email: str | None = None
    full_name: str | None = None
    role: UserRole
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)
