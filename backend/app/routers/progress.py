from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.dependencies import get_db, get_progress_service, require_authenticated
from app.schemas.payments import OkResponse
from app.services.progress_service import ProgressService
from common.ids import CourseId, UserId
from shared_db.schemas.auth import AuthContext
from shared_db.schemas.progress import ProgressResponse, ProgressUpdate

progress_router = APIRouter(prefix="/progress", tags=["progress"])


@progress_router.post("/update", response_model=OkResponse)
async def update_progress(
    update: ProgressUpdate,
    auth: Annotated[AuthContext, Depends(require_authenticated)],
    db: Annotated[AsyncSession, Depends(get_db)],
    progress_service: Annotated[ProgressService, Depends(get_progress_service)],
):
    await progress_service.update_progress(db, auth, update)
    return OkResponse()


@progress_router.get("/{user_id}/{course_id}", response_model=list[ProgressResponse])
async def get_progress(
    user_id: str,
    course_id: CourseId,
    auth: Annotated[AuthContext, Depends(require_authenticated)],
    db: Annotated[AsyncSession, Depends(get_db)],
    progress_service: Annotated[ProgressService, Depends(get_progress_service)],
):
    return await progress_service.get_progress(db, auth, UserId(user_id), course_id)
