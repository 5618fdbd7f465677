from typing import Optional

from hrmaster.core.constants import PRIVILEGED_ROLES
from hrmaster.core.errors import NotAuthorized
from hrmaster.models.users import User


class PermissionService:
    """Role and ownership checks shared by every router."""

    @staticmethod
    def is_privileged(user: Optional[User]) -> bool:
        return bool(user and getattr(user, "role", None) in PRIVILEGED_ROLES)

    @staticmethod
    def ensure_privileged(user: Optional[User]) -> None:
        if not PermissionService.is_privileged(user):
            raise NotAuthorized()
