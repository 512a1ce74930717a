import logging
import uuid
from datetime import datetime

from sqlalchemy import ColumnElement, delete, func, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from resumehub.core.exceptions import PersistenceError
from resumehub.models.resume import Resume
from resumehub.models.user import User
from resumehub.schemas.user import UserUpdate

logger = logging.getLogger(__name__)


async def create_user(
    db: AsyncSession,
    email: str,
    first_name: str,
    last_name: str,
    role: str = "user",
) -> User:
    user = User(email=email, first_name=first_name, last_name=last_name, role=role)
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


async def get_user(db: AsyncSession, user_id: uuid.UUID) -> User | None:
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    result = await db.execute(select(User).where(func.lower(User.email) == email.lower()))
    return result.scalar_one_or_none()


async def list_users(
    db: AsyncSession,
    *,
    role: str | None = None,
    is_active: bool | None = None,
    search: str | None = None,
    skip: int = 0,
    limit: int = 10,
) -> tuple[list[User], int]:
    """Page through users; ``search`` matches first name, last name or email."""
    query = select(User)
    count_query = select(func.count()).select_from(User)

    filters: list[ColumnElement[bool]] = []
    if role:
        filters.append(User.role == role)
    if is_active is not None:
        filters.append(User.is_active.is_(is_active))
    if search:
        filters.append(
            or_(
                User.first_name.icontains(search, autoescape=True),
                User.last_name.icontains(search, autoescape=True),
                User.email.icontains(search, autoescape=True),
            )
        )
    if filters:
        query = query.where(*filters)
        count_query = count_query.where(*filters)

    total = (await db.execute(count_query)).scalar_one()
    results = await db.execute(query.order_by(User.created_at.desc()).offset(skip).limit(limit))
    return list(results.scalars().all()), total


async def update_user(db: AsyncSession, user: User, data: UserUpdate) -> User:
    """Apply the fields set on ``data``. A duplicate email raises ``IntegrityError``."""
    update_data = data.model_dump(exclude_unset=True, exclude_none=True)
    if "email" in update_data:
        update_data["email"] = update_data["email"].lower()
    for field, value in update_data.items():
        setattr(user, field, value)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise
    await db.refresh(user)
    logger.info("User %s updated: %s", user.id, ", ".join(sorted(update_data)))
    return user


async def delete_user(db: AsyncSession, user: User) -> None:
    """Delete a user together with their resume records in one transaction.

    Stored files are left to the caller.
    """
    user_id = user.id
    try:
        await db.execute(delete(Resume).where(Resume.user_id == user_id))
        await db.delete(user)
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        raise PersistenceError(f"Could not delete user {user_id}: {e}") from e
    logger.info("User %s deleted with their resumes", user_id)


async def count_users(
    db: AsyncSession,
    *,
    active_only: bool = False,
    created_since: datetime | None = None,
) -> int:
    query = select(func.count()).select_from(User)
    if active_only:
        query = query.where(User.is_active.is_(True))
    if created_since is not None:
        query = query.where(User.created_at >= created_since)
    return (await db.execute(query)).scalar_one()
