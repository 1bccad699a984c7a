from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from common.db.db_utils import dialect_insert
from common.ids import UserId
from shared_db.models.profile import Profile, UserRole
from shared_db.schemas.profile import ProfileResponse, ProfileUpsert


class ProfileDAO:
    """Data Access Object for profile rows. Returns Pydantic objects instead of SQLAlchemy models."""

    async def get(self, db: AsyncSession, id: UserId) -> ProfileResponse | None:
        result = await db.execute(select(Profile).where(Profile.id == id))
        profile = result.scalar_one_or_none()
        return ProfileResponse.model_validate(profile) if profile else None

    async def upsert(self, db: AsyncSession, obj_in: ProfileUpsert) -> ProfileResponse:
        """Insert the profile or overwrite email, name and role of an existing one."""
        stmt = dialect_insert(db, Profile).values(
            id=obj_in.id,
            email=obj_in.email,
            full_name=obj_in.full_name,
            role=obj_in.role,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[Profile.id],
            set_={
                "email": stmt.excluded.email,
                "full_name": stmt.excluded.full_name,
                "role": stmt.excluded.role,
                "updated_at": func.current_timestamp(),
            },
        )
        _ = await db.execute(stmt)
        await db.flush()

        profile = await self.get_fresh(db, obj_in.id)
        assert profile is not None
        return profile

    async def update_role(self, db: AsyncSession, id: UserId, role: UserRole) -> ProfileResponse | None:
        """Returns None when no profile has this id."""
        result = await db.execute(update(Profile).where(Profile.id == id).values(role=role))
        if result.rowcount == 0:  # pyright: ignore[reportAttributeAccessIssue]
            return None
        return await self.get_fresh(db, id)

    async def get_fresh(self, db: AsyncSession, id: UserId) -> ProfileResponse | None:
        """Re-read bypassing the identity map after a Core-level write."""
        result = await db.execute(select(Profile).where(Profile.id == id).execution_options(populate_existing=True))
        profile = result.scalar_one_or_none()
        return ProfileResponse.model_validate(profile) if profile else None
