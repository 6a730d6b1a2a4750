"""Domain entity representing a user."""

from dataclasses import dataclass
from datetime import datetime

from .role import ROLE_ADMIN, Role


@dataclass
class User:
    """Administrator or tenant (member) of the boarding house."""

    id: int | None
    role: Role
    name: str
    email: str
    password: str
    phone: str | None
    created_at: datetime | None
    is_active: bool

    def has_role(self, alias: str) -> bool:
        """Return ``True`` when the user's role alias matches ``alias``."""

        return self.role.alias.lower() == alias.lower()

    def is_admin(self) -> bool:
        """Return ``True`` when the user is an administrator."""

        return self.has_role(ROLE_ADMIN)


__all__ = ["User"]
