"""
AccountHub Backend — Abstract Manager Interfaces
==================================================

What:  Narrow persistence contracts for groups and users, plus the Pager
       returned by paged queries.
Why:   Services depend on these interfaces only. The SQLAlchemy managers are
       the production implementations; tests inject in-memory ones.
How:   Concrete managers inherit from GroupManager / UserManager and implement
       every abstract method. Missing records are reported as None; turning
       that into a 404 is the caller's job.
"""

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from accounthub.models.group import Group
from accounthub.models.user import User

T = TypeVar("T")

SORT_ASC = "ASC"
SORT_DESC = "DESC"
SORT_DIRECTIONS = frozenset({SORT_ASC, SORT_DESC})


@dataclass
class Pager(Generic[T]):
    """A bounded slice of entities plus pagination metadata."""

    entries: List[T] = field(default_factory=list)
    page: int = 1
    per_page: int = 10
    total: int = 0

    @property
    def last_page(self) -> int:
        if self.total <= 0:
            return 1
        return max(1, math.ceil(self.total / self.per_page))

    @property
    def has_next(self) -> bool:
        return self.page < self.last_page


class GroupManager(ABC):
    """
    Persistence contract for groups.

    Contract:
        - get_pager() applies `criteria` as equality filters and `sort` as
          ordered (field, ASC|DESC) pairs
        - find_group_by() returns None when nothing matches
        - update_group() inserts new groups and writes changes to existing
          ones; after it returns the group has an id
        - delete_group() removes the group and its memberships
    """

    @abstractmethod
    def get_class(self) -> Type[Group]:
        """The entity class used to construct new, unsaved groups."""
        ...

    @abstractmethod
    async def get_pager(
        self,
        criteria: Dict[str, Any],
        page: int,
        limit: int = 10,
        sort: Optional[Dict[str, str]] = None,
    ) -> Pager[Group]:
        ...

    @abstractmethod
    async def find_group_by(self, **criteria: Any) -> Optional[Group]:
        ...

    @abstractmethod
    async def update_group(self, group: Group) -> None:
        ...

    @abstractmethod
    async def delete_group(self, group: Group) -> None:
        ...


class UserManager(ABC):
    """
    Persistence contract for users.

    update_user() is responsible for canonical fields and password hashing,
    so callers only ever set `username`, `email` and `plain_password`.
    """

    @abstractmethod
    def create_user(self) -> User:
        """A new, empty, unsaved user."""
        ...

    @abstractmethod
    async def find_user_by(self, **criteria: Any) -> Optional[User]:
        ...

    @abstractmethod
    async def find_user_by_confirmation_token(self, token: str) -> Optional[User]:
        ...

    @abstractmethod
    async def update_user(self, user: User) -> None:
        ...
