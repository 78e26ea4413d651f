"""
AccountHub Backend — User SQLAlchemy Model
============================================

What:  ORM model representing the `users` table.
Who:   Created by the registration form handler, persisted by SqlAlchemyUserManager.

Canonical columns:
    username_canonical / email_canonical hold the lower-cased values and carry
    the unique constraints, so "Alice" and "alice" cannot both register.

Password handling:
    `plain_password` is a transient attribute (not a column). The form binds
    the submitted password there; UserManager.update_user() hashes it into
    `password` and clears it before the row is written.
"""

from datetime import datetime, timezone
from typing import List, Optional, TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from accounthub.database import Base
from accounthub.models.group import user_groups

if TYPE_CHECKING:
    from accounthub.models.group import Group


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """
    A registered account.

    Lifecycle:
        1. Created by UserManager.create_user() when a registration starts
        2. Persisted enabled, or disabled with a confirmation token when
           e-mail confirmation is on
        3. Enabled by GET /register/confirm/{token}
    """

    __tablename__ = "users"

    # Set by the registration form, consumed by UserManager.update_user()
    plain_password = None

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    username: Mapped[str] = mapped_column(String(180), nullable=False)
    username_canonical: Mapped[str] = mapped_column(String(180), nullable=False, unique=True)

    email: Mapped[str] = mapped_column(String(180), nullable=False)
    email_canonical: Mapped[str] = mapped_column(String(180), nullable=False, unique=True)

    # "<salt hex>$<pbkdf2 hex>"
    password: Mapped[str] = mapped_column(String(255), nullable=False, default="")

    enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    confirmation_token: Mapped[Optional[str]] = mapped_column(
        String(180),
        nullable=True,
        unique=True,
        default=None,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
    )

    groups: Mapped[List["Group"]] = relationship(
        "Group",
        secondary=user_groups,
        back_populates="users",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}', enabled={self.enabled})>"
