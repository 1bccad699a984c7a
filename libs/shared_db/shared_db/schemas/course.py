"""Course schemas for shared database operations."""

from datetime import datetime
from typing import Any

from pydantic import ConfigDict, Field, field_validator

from common.ids import CourseId, UserId
from common.utils.json_model import JsonSnakeCaseModel


def coerce_price_cents(value: Any) -> int:
    """Coerce any numeric-ish input to a rounded, non-negative minor-unit integer; garbage becomes 0."""
    if isinstance(value, bool) or value is None:
        return 0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    if number != number or number in (float("inf"), float("-inf")):
        return 0
    return max(0, round(number))


class CourseCreate(JsonSnakeCaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str = ""
    price_cents: int = 0
    thumbnail_path: str | None = None

    @field_validator("price_cents", mode="before")
    @classmethod
    def _coerce_price(cls, value: Any) -> int:
        return coerce_price_cents(value)


class CoursePatch(JsonSnakeCaseModel):
    """Mutable course fields. Unknown keys are ignored; only explicitly sent fields are applied."""

    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    price_cents: int | None = None
    thumbnail_path: str | None = None
    is_published: bool | None = None

    @field_validator("price_cents", mode="before")
    @classmethod
    def _coerce_price(cls, value: Any) -> int:
        return coerce_price_cents(value)

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True, by_alias=False)


class CourseResponse(JsonSnakeCaseModel):
    id: CourseId
    title: str
    description: str
    price_cents: int
    instructor_id: UserId
    thumbnail_path: str | None = None
    is_published: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)

    @property
    def is_free(self) -> bool:
        return self.price_cents <= 0
