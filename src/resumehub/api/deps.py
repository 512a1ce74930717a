import uuid

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from resumehub.core.config import get_settings
from resumehub.core.database import get_db
from resumehub.core.exceptions import ForbiddenError, UnauthorizedError
from resumehub.core.llm import build_resume_parser
from resumehub.models.user import User
from resumehub.services import user_service
from resumehub.services.resume_parser import ResumeParser
from resumehub.storage.base import FileStorage
from resumehub.storage.local import LocalFileStorage

__all__ = [
    "get_current_user",
    "get_db",
    "get_file_storage",
    "get_resume_parser",
    "require_admin",
]


def get_file_storage() -> FileStorage:
    settings = get_settings()
    return LocalFileStorage(settings.upload_dir)


def get_resume_parser(request: Request) -> ResumeParser:
    parser = getattr(request.app.state, "resume_parser", None)
    if parser is None:
        parser = build_resume_parser(get_settings())
        request.app.state.resume_parser = parser
    return parser


async def get_current_user(
    x_user_id: str | None = Header(None),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Resolve the caller from the identity header set by the auth layer."""
    if not x_user_id:
        raise UnauthorizedError()
    try:
        user_id = uuid.UUID(x_user_id)
    except ValueError as e:
        raise UnauthorizedError("Invalid user identity") from e

    user = await user_service.get_user(db, user_id)
    if not user:
        raise UnauthorizedError("Unknown user")
    if not user.is_active:
        raise ForbiddenError("Account is deactivated")
    return user


async def require_admin(user: User = Depends(get_current_user)) -> User:
    if not user.is_admin:
        raise ForbiddenError("Admin access required")
    return user
