from resumehub.models.base import Base
from resumehub.models.resume import Resume
from resumehub.models.user import User

__all__ = ["Base", "Resume", "User"]
