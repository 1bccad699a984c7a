"""Course catalog routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.dependencies import get_course_service, get_db, require_instructor_or_admin
from app.schemas.courses import CourseDetail
from app.services.course_service import CourseService
from common.ids import CourseId
from shared_db.schemas.auth import AuthContext
from shared_db.schemas.course import CourseCreate, CoursePatch, CourseResponse

courses_router = APIRouter(prefix="/courses", tags=["courses"])


@courses_router.get("", response_model=list[CourseResponse])
async def list_courses(
    db: Annotated[AsyncSession, Depends(get_db)],
    course_service: Annotated[CourseService, Depends(get_course_service)],
    limit: Annotated[int, Query(ge=1, le=100)] = 20,
    offset: Annotated[int, Query(ge=0)] = 0,
    include_unpublished: Annotated[bool, Query(alias="all")] = False,
):
    """Published courses, newest first. ``all=true`` includes unpublished ones."""
    return await course_service.list_courses(db, limit=limit, offset=offset, include_unpublished=include_unpublished)


@courses_router.get("/{course_id}", response_model=CourseDetail)
async def get_course(
    course_id: CourseId,
    db: Annotated[AsyncSession, Depends(get_db)],
    course_service: Annotated[CourseService, Depends(get_course_service)],
):
    return await course_service.get_course(db, course_id)


@courses_router.post("", response_model=CourseResponse, status_code=status.HTTP_201_CREATED)
async def create_course(
    request: CourseCreate,
    auth: Annotated[AuthContext, Depends(require_instructor_or_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
    course_service: Annotated[CourseService, Depends(get_course_service)],
):
    return await course_service.create_course(db, auth, request)


@courses_router.patch("/{course_id}", response_model=CourseResponse)
async def update_course(
    course_id: CourseId,
    patch: CoursePatch,
    auth: Annotated[AuthContext, Depends(require_instructor_or_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
    course_service: Annotated[CourseService, Depends(get_course_service)],
):
    return await course_service.update_course(db, auth, course_id, patch)
