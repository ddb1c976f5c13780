"""
User Repository for Booksy

Account storage. The database unique constraints on ``email`` and
``username`` are the final authority on duplicates; ``find_conflict`` is
only a fast path for a friendlier error message.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy import or_, select

from .database import Database
from .models import UserModel, UserRole


@dataclass
class StoredUser:
    """Data class for user data transfer. Never carries the password hash."""

    id: str
    email: str
    username: str
    role: str = UserRole.USER.value
    is_active: bool = True
    created_at: Optional[datetime] = None

    @classmethod
    def from_model(cls, model: UserModel) -> "StoredUser":
        """Create from SQLAlchemy model."""
        return cls(
            id=model.id,
            email=model.email,
            username=model.username,
            role=model.role,
            is_active=model.is_active,
            created_at=model.created_at,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "email": self.email,
            "username": self.username,
            "role": self.role,
            "is_active": self.is_active,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


@dataclass
class Credentials:
    """A user together with the stored password hash, for login only."""

    user: StoredUser
    password_hash: str


class UserRepository:
    """Repository for user accounts."""

    def __init__(self, database: Database):
        self.database = database

    def find_conflict(self, email: str, username: str) -> Optional[str]:
        """
        Check whether an email or username is already registered.

        Returns:
            ``"email"`` or ``"username"`` naming the taken field, or None.
        """
        with self.database.session() as session:
            rows = session.execute(
                select(UserModel.email, UserModel.username).where(
                    or_(UserModel.email == email, UserModel.username == username)
                )
            ).all()

        for row_email, _ in rows:
            if row_email == email:
                return "email"
        return "username" if rows else None

    def create(
        self,
        email: str,
        username: str,
        password_hash: str,
        role: UserRole = UserRole.USER,
    ) -> StoredUser:
        """
        Insert a new active user.

        Raises:
            sqlalchemy.exc.IntegrityError: email or username already exists.
        """
        with self.database.session() as session:
            user = UserModel(
                id=str(uuid.uuid4()),
                email=email,
                username=username,
                password_hash=password_hash,
                role=role.value,
                is_active=True,
            )
            session.add(user)
            try:
                session.commit()
            except Exception:
                session.rollback()
                raise
            session.refresh(user)

            return StoredUser.from_model(user)

    def get(self, user_id: str) -> Optional[StoredUser]:
        with self.database.session() as session:
            user = session.get(UserModel, user_id)
            return StoredUser.from_model(user) if user else None

    def get_credentials(self, email: str) -> Optional[Credentials]:
        """Look up an active user by email, including the password hash."""
        with self.database.session() as session:
            user = session.execute(
                select(UserModel).where(
                    UserModel.email == email,
                    UserModel.is_active.is_(True),
                )
            ).scalar_one_or_none()

            if user is None:
                return None
            return Credentials(user=StoredUser.from_model(user), password_hash=user.password_hash)
