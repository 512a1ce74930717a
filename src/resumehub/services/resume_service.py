import logging
import uuid
from datetime import datetime

from sqlalchemy import ColumnElement, String, cast, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from resumehub.core.exceptions import InvalidStatusTransitionError, PersistenceError
from resumehub.models.resume import Resume
from resumehub.schemas.resume import ALLOWED_TRANSITIONS, ProcessingStatus

logger = logging.getLogger(__name__)


async def _commit(db: AsyncSession, resume: Resume) -> Resume:
    try:
        await db.commit()
        await db.refresh(resume)
    except SQLAlchemyError as e:
        await db.rollback()
        raise PersistenceError(f"Could not save resume {resume.id}: {e}") from e
    return resume


async def create_resume(
    db: AsyncSession,
    user_id: uuid.UUID | None,
    original_filename: str,
    stored_filename: str,
    file_path: str,
    content_type: str,
    file_size_bytes: int,
) -> Resume:
    resume = Resume(
        user_id=user_id,
        original_filename=original_filename,
        stored_filename=stored_filename,
        file_path=file_path,
        content_type=content_type,
        file_size_bytes=file_size_bytes,
        extracted_text="",
        parsed_data={},
        processing_status=ProcessingStatus.UPLOADED,
    )
    db.add(resume)
    return await _commit(db, resume)


async def get_resume(db: AsyncSession, resume_id: uuid.UUID) -> Resume | None:
    try:
        result = await db.execute(select(Resume).where(Resume.id == resume_id))
    except SQLAlchemyError as e:
        raise PersistenceError(f"Could not load resume {resume_id}: {e}") from e
    return result.scalar_one_or_none()


def _search_clause(query: str) -> ColumnElement[bool]:
    return or_(
        Resume.original_filename.icontains(query, autoescape=True),
        Resume.parsed_data["full_name"].as_string().icontains(query, autoescape=True),
        Resume.parsed_data["email"].as_string().icontains(query, autoescape=True),
        cast(Resume.parsed_data["skills"], String).icontains(query, autoescape=True),
    )


async def list_resumes(
    db: AsyncSession,
    *,
    user_id: uuid.UUID | None = None,
    status: str | None = None,
    search: str | None = None,
    skip: int = 0,
    limit: int = 10,
) -> tuple[list[Resume], int]:
    query = select(Resume)
    count_query = select(func.count()).select_from(Resume)

    filters: list[ColumnElement[bool]] = []
    if user_id:
        filters.append(Resume.user_id == user_id)
    if status:
        filters.append(Resume.processing_status == status)
    if search:
        filters.append(_search_clause(search))
    if filters:
        query = query.where(*filters)
        count_query = count_query.where(*filters)

    try:
        total = (await db.execute(count_query)).scalar_one()
        results = await db.execute(
            query.order_by(Resume.created_at.desc()).offset(skip).limit(limit)
        )
    except SQLAlchemyError as e:
        raise PersistenceError(f"Could not list resumes: {e}") from e
    return list(results.scalars().all()), total


async def search_resumes(
    db: AsyncSession,
    query: str,
    *,
    user_id: uuid.UUID | None = None,
    skip: int = 0,
    limit: int = 10,
) -> tuple[list[Resume], int]:
    return await list_resumes(db, user_id=user_id, search=query, skip=skip, limit=limit)


async def transition_status(
    db: AsyncSession,
    resume: Resume,
    target: ProcessingStatus,
    *,
    error: str | None = None,
    raw_response: str | None = None,
    parsed_data: dict | None = None,
    ai_confidence: int | None = None,
) -> Resume:
    """Move a resume along the processing state machine and persist it."""
    current = ProcessingStatus(resume.processing_status)
    if target not in ALLOWED_TRANSITIONS[current]:
        raise InvalidStatusTransitionError(current, target)

    resume.processing_status = target
    if target is ProcessingStatus.FAILED:
        resume.processing_error = error or "Resume processing failed"
        resume.ai_raw_response = raw_response
    if target is ProcessingStatus.COMPLETED:
        resume.parsed_data = parsed_data if parsed_data is not None else {}
        resume.ai_confidence = ai_confidence
        resume.processing_error = None

    logger.info("Resume %s: %s -> %s", resume.id, current, target)
    return await _commit(db, resume)


async def save_extracted_text(db: AsyncSession, resume: Resume, text: str) -> Resume:
    resume.extracted_text = text
    return await _commit(db, resume)


async def delete_resume(db: AsyncSession, resume: Resume) -> None:
    try:
        await db.delete(resume)
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        raise PersistenceError(f"Could not delete resume {resume.id}: {e}") from e


async def count_by_status(db: AsyncSession) -> dict[str, int]:
    result = await db.execute(
        select(Resume.processing_status, func.count()).group_by(Resume.processing_status)
    )
    counts = {status.value: 0 for status in ProcessingStatus}
    counts.update({status: count for status, count in result.all()})
    return counts


async def count_created_since(db: AsyncSession, since: datetime) -> int:
    result = await db.execute(
        select(func.count()).select_from(Resume).where(Resume.created_at >= since)
    )
    return result.scalar_one()


async def average_confidence(db: AsyncSession) -> float | None:
    result = await db.execute(
        select(func.avg(Resume.ai_confidence)).where(Resume.ai_confidence.is_not(None))
    )
    value = result.scalar_one()
    return round(float(value), 1) if value is not None else None


async def count_for_user(db: AsyncSession, user_id: uuid.UUID) -> int:
    query = select(func.count()).select_from(Resume).where(Resume.user_id == user_id)
    return (await db.execute(query)).scalar_one()


async def file_paths_for_user(db: AsyncSession, user_id: uuid.UUID) -> list[str]:
    result = await db.execute(select(Resume.file_path).where(Resume.user_id == user_id))
    return list(result.scalars().all())
