"""Domain entity representing a user role."""

from dataclasses import dataclass

ROLE_ADMIN = "admin"
ROLE_MEMBER = "member"


@dataclass
class Role:
    """Role assigned to a console user (``admin`` or ``member``)."""

    id: int
    name: str
    alias: str


__all__ = ["Role", "ROLE_ADMIN", "ROLE_MEMBER"]
