from enum import StrEnum

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from common.ids import UserId
from shared_db.db import Base
from shared_db.models.enum_utils import str_enum_column


class UserRole(StrEnum):
    """User roles, lowest privilege first"""

    STUDENT = "student"
    INSTRUCTOR = "instructor"
    ADMIN = "admin"


class Profile(Base):
    """Role/profile row keyed by the identity provider subject.

    The role stored here is authoritative; the role carried in credential
    metadata is only a fallback when no row exists.
    """

    __tablename__ = "profiles"

    id: Mapped[UserId] = mapped_column(String(128), primary_key=True)
    email: Mapped[str | None] = mapped_column(String(320), index=True, nullable=True)
    full_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    role: Mapped[UserRole] = mapped_column(str_enum_column(UserRole), default=UserRole.STUDENT, nullable=False)
