"""Utilities for working with SQLAlchemy enums backed by StrEnum values."""

from __future__ import annotations

from enum import Enum
from typing import Any, TypeVar

from sqlalchemy import Enum as SqlEnum

EnumT = TypeVar("EnumT", bound=Enum)


def enum_values(enum_cls: type[EnumT]) -> list[Any]:
    """Persist ``.value`` (lowercase strings) instead of member names."""
    return [member.value for member in enum_cls]


def str_enum_column(enum_cls: type[EnumT], length: int = 32) -> SqlEnum:
    """Non-native enum column (VARCHAR + CHECK) so sqlite and Postgres share one schema."""
    return SqlEnum(enum_cls, native_enum=False, values_callable=enum_values, length=length, validate_strings=True)
