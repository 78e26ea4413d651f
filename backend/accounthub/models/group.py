"""
AccountHub Backend — Group SQLAlchemy Model
=============================================

What:  ORM model representing the `groups` table plus the `user_groups`
       association table linking groups and users.
Who:   Used by SqlAlchemyGroupManager for CRUD operations and by Alembic.

Table Design Rationale:
    - Integer primary key: ids appear in URLs (/group/{id}) and messages
      ("Group (7) not found")
    - name: unique, so a group can be referenced by name in admin tooling
    - enabled: plain flag, filterable through GET /groups?enabled=1
    - roles: JSON list of role strings granted to every member
    - created_at / updated_at: UTC with timezone
"""

from datetime import datetime, timezone
from typing import List, TYPE_CHECKING

from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Integer, String, Table
from sqlalchemy.orm import Mapped, mapped_column, relationship

from accounthub.database import Base

if TYPE_CHECKING:
    from accounthub.models.user import User


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


user_groups = Table(
    "user_groups",
    Base.metadata,
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("group_id", Integer, ForeignKey("groups.id", ondelete="CASCADE"), primary_key=True),
)


class Group(Base):
    """
    A named set of users sharing roles.

    Lifecycle:
        1. Constructed empty (name="") by the write pipeline on POST /group
        2. Filled by the group form, then persisted by the manager
        3. Mutated in place on PUT /group/{id} (same id)
        4. Deleted on DELETE /group/{id}; memberships cascade
    """

    __tablename__ = "groups"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        comment="Human readable group name",
    )

    enabled: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )

    roles: Mapped[List[str]] = mapped_column(
        JSON,
        nullable=False,
        default=list,
        comment="Role names granted to every member",
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

    # Never serialized in group responses (see project_group)
    users: Mapped[List["User"]] = relationship(
        "User",
        secondary=user_groups,
        back_populates="groups",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Group(id={self.id}, name='{self.name}', enabled={self.enabled})>"
