import uuid
from datetime import UTC, datetime, timedelta

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from resumehub.api.deps import get_db, get_file_storage, require_admin
from resumehub.core.config import get_settings
from resumehub.core.exceptions import BadRequestError, ConflictError, NotFoundError
from resumehub.models.user import User
from resumehub.schemas import PaginatedResponse
from resumehub.schemas.health import ResumeStats, SystemStats, UserStats
from resumehub.schemas.resume import (
    AdminResumeRead,
    OwnerInfo,
    ProcessingStatus,
    ResumeRead,
    ResumeSummary,
)
from resumehub.schemas.user import UserDetail, UserRead, UserRole, UserUpdate
from resumehub.services import resume_service, user_service
from resumehub.storage.base import FileStorage

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])

RECENT_WINDOW = timedelta(days=30)


@router.get("/resumes", response_model=PaginatedResponse[ResumeSummary])
async def list_all_resumes(
    skip: int = Query(0, ge=0),
    limit: int = Query(10, ge=1, le=100),
    user_id: uuid.UUID | None = Query(None),
    status_filter: ProcessingStatus | None = Query(None, alias="status"),
    search: str | None = Query(None, min_length=1),
    db: AsyncSession = Depends(get_db),
) -> PaginatedResponse[ResumeSummary]:
    items, total = await resume_service.list_resumes(
        db, user_id=user_id, status=status_filter, search=search, skip=skip, limit=limit
    )
    return PaginatedResponse(
        items=[ResumeSummary.from_resume(r) for r in items],
        total=total,
        skip=skip,
        limit=limit,
    )


@router.get("/resumes/{resume_id}", response_model=AdminResumeRead)
async def get_any_resume(
    resume_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
) -> AdminResumeRead:
    resume = await resume_service.get_resume(db, resume_id)
    if not resume:
        raise NotFoundError("Resume", str(resume_id))

    owner = await user_service.get_user(db, resume.user_id) if resume.user_id else None
    return AdminResumeRead(
        **ResumeRead.model_validate(resume).model_dump(),
        user=OwnerInfo(id=owner.id, name=owner.full_name, email=owner.email) if owner else None,
    )


@router.delete("/resumes/{resume_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_any_resume(
    resume_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    storage: FileStorage = Depends(get_file_storage),
) -> None:
    resume = await resume_service.get_resume(db, resume_id)
    if not resume:
        raise NotFoundError("Resume", str(resume_id))
    await storage.delete(resume.file_path)
    await resume_service.delete_resume(db, resume)


@router.get("/stats", response_model=SystemStats)
async def get_stats(db: AsyncSession = Depends(get_db)) -> SystemStats:
    since = datetime.now(UTC) - RECENT_WINDOW
    by_status = await resume_service.count_by_status(db)
    return SystemStats(
        users=UserStats(
            total=await user_service.count_users(db),
            active=await user_service.count_users(db, active_only=True),
            recent=await user_service.count_users(db, created_since=since),
        ),
        resumes=ResumeStats(
            total=sum(by_status.values()),
            uploaded=by_status[ProcessingStatus.UPLOADED],
            processing=by_status[ProcessingStatus.PROCESSING],
            completed=by_status[ProcessingStatus.COMPLETED],
            failed=by_status[ProcessingStatus.FAILED],
            recent=await resume_service.count_created_since(db, since),
            average_confidence=await resume_service.average_confidence(db),
        ),
        version=get_settings().app_version,
    )


@router.get("/users", response_model=PaginatedResponse[UserRead])
async def list_users(
    skip: int = Query(0, ge=0),
    limit: int = Query(10, ge=1, le=100),
    role: UserRole | None = Query(None),
    is_active: bool | None = Query(None),
    search: str | None = Query(None, min_length=1),
    db: AsyncSession = Depends(get_db),
) -> PaginatedResponse[UserRead]:
    items, total = await user_service.list_users(
        db, role=role, is_active=is_active, search=search, skip=skip, limit=limit
    )
    return PaginatedResponse(
        items=[UserRead.model_validate(u) for u in items],
        total=total,
        skip=skip,
        limit=limit,
    )


@router.get("/users/{user_id}", response_model=UserDetail)
async def get_user(
    user_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
) -> UserDetail:
    user = await user_service.get_user(db, user_id)
    if not user:
        raise NotFoundError("User", str(user_id))
    return UserDetail(
        **UserRead.model_validate(user).model_dump(),
        resume_count=await resume_service.count_for_user(db, user.id),
    )


@router.patch("/users/{user_id}", response_model=UserRead)
async def update_user(
    user_id: uuid.UUID,
    data: UserUpdate,
    db: AsyncSession = Depends(get_db),
) -> UserRead:
    user = await user_service.get_user(db, user_id)
    if not user:
        raise NotFoundError("User", str(user_id))
    if data.email and data.email.lower() != user.email.lower():
        existing = await user_service.get_user_by_email(db, data.email)
        if existing:
            raise ConflictError(f"A user with email '{data.email}' already exists")
    try:
        updated = await user_service.update_user(db, user, data)
    except IntegrityError as e:
        raise ConflictError(f"A user with email '{data.email}' already exists") from e
    return UserRead.model_validate(updated)


@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: uuid.UUID,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    storage: FileStorage = Depends(get_file_storage),
) -> None:
    if user_id == admin.id:
        raise BadRequestError("You cannot delete your own account")
    user = await user_service.get_user(db, user_id)
    if not user:
        raise NotFoundError("User", str(user_id))

    file_paths = await resume_service.file_paths_for_user(db, user.id)
    await user_service.delete_user(db, user)
    for path in file_paths:
        await storage.delete(path)
