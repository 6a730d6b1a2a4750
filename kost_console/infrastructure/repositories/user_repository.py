"""Persistence layer for user data."""

from __future__ import annotations

from sqlalchemy.orm import Session, joinedload

from kost_console.domain.entities import Role, User
from kost_console.infrastructure.models import RoleModel, UserModel


class UserRepository:
    """Provide the user lookups needed by the payment workflow."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, user_id: int) -> User | None:
        model = self._get_model(id=user_id)
        return self._to_entity(model) if model else None

    def get_by_email(self, email: str) -> User | None:
        model = self._get_model(email=email)
        return self._to_entity(model) if model else None

    def create(self, user: User) -> User:
        model = UserModel(
            role_id=user.role.id,
            name=user.name,
            email=user.email,
            password=user.password,
            phone=user.phone,
            is_active=user.is_active,
        )
        if user.created_at is not None:
            model.created_at = user.created_at
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def list_ids_by_role_alias(self, alias: str) -> list[int]:
        query = (
            self.session.query(UserModel.id)
            .join(RoleModel, UserModel.role_id == RoleModel.id)
            .filter(UserModel.is_active.is_(True))
            .filter(RoleModel.alias.ilike(alias))
        )
        return [user_id for (user_id,) in query.all()]

    def _get_model(self, **filters) -> UserModel | None:
        return (
            self.session.query(UserModel)
            .options(joinedload(UserModel.role))
            .filter_by(**filters)
            .first()
        )

    @staticmethod
    def _to_entity(model: UserModel) -> User:
        return User(
            id=model.id,
            role=Role(id=model.role.id, name=model.role.name, alias=model.role.alias),
            name=model.name,
            email=model.email,
            password=model.password,
            phone=model.phone,
            created_at=model.created_at,
            is_active=model.is_active,
        )


__all__ = ["UserRepository"]
