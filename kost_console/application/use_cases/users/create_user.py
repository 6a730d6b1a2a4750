"""Use case for creating users."""

from sqlalchemy.orm import Session

from kost_console.domain.entities import ROLE_ADMIN, ROLE_MEMBER, User
from kost_console.infrastructure.repositories import RoleRepository, UserRepository
from kost_console.infrastructure.security import get_password_hash
from kost_console.utils import now_for_db

_ROLE_NAMES = {ROLE_ADMIN: "Administrator", ROLE_MEMBER: "Penghuni"}


def create_user(
    session: Session,
    *,
    name: str,
    email: str,
    password: str,
    role_alias: str = ROLE_MEMBER,
    phone: str | None = None,
) -> User:
    """Create a new user ensuring unique email addresses."""

    alias = role_alias.lower()
    if alias not in _ROLE_NAMES:
        raise ValueError("Peran tidak diizinkan")

    repository = UserRepository(session)
    if repository.get_by_email(email):
        raise ValueError("Email sudah terdaftar")

    role = RoleRepository(session).get_or_create(alias=alias, name=_ROLE_NAMES[alias])
    user = User(
        id=None,
        role=role,
        name=name,
        email=email,
        password=get_password_hash(password),
        phone=phone,
        created_at=now_for_db(),
        is_active=True,
    )
    return repository.create(user)
