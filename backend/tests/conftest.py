"""
AccountHub Backend — Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures: in-memory managers, forms, and an API client.
How:   The app's manager dependencies are overridden with in-memory fakes,
       so endpoint tests run without a database.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── group_manager: InMemoryGroupManager (records every call)
    ├── user_manager: InMemoryUserManager
    ├── form_factory: FormFactory with a test CSRF manager
    ├── group_service: GroupService over group_manager
    └── test_client: HTTPX AsyncClient wired to a fresh app
"""

import os

# Override settings for testing BEFORE any accounthub imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["RATE_LIMIT_REQUESTS"] = "10000"
os.environ["SECRET_KEY"] = "test-secret-key"

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Type

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from accounthub.forms import CsrfTokenManager, FormFactory
from accounthub.managers.base import SORT_DESC, GroupManager, Pager, UserManager
from accounthub.managers.user_manager import update_canonical_fields, update_password
from accounthub.models.group import Group
from accounthub.models.user import User
from accounthub.services.group_service import GroupService


# ══════════════════════════════════════════════════════════════════════════
# In-Memory Managers
# ══════════════════════════════════════════════════════════════════════════

_EPOCH = datetime(2026, 1, 1, tzinfo=timezone.utc)


def _matches(entity: Any, criteria: Dict[str, Any]) -> bool:
    return all(getattr(entity, key) == value for key, value in criteria.items())


class InMemoryGroupManager(GroupManager):
    """GroupManager over a dict; every call is recorded in `calls`."""

    def __init__(self):
        self.groups: Dict[int, Group] = {}
        self.calls: List[tuple] = []
        self._next_id = 1

    def get_class(self) -> Type[Group]:
        return Group

    async def get_pager(self, criteria, page, limit=10, sort=None) -> Pager[Group]:
        self.calls.append(("get_pager", criteria, page, limit, sort))
        matched = [g for g in self.groups.values() if _matches(g, criteria)]
        matched.sort(key=lambda g: g.id)
        # Stable sorts applied last key first give multi-key ordering
        for field_name, direction in reversed(list((sort or {}).items())):
            matched.sort(key=lambda g: getattr(g, field_name), reverse=direction == SORT_DESC)
        start = (page - 1) * limit
        return Pager(entries=matched[start:start + limit], page=page, per_page=limit, total=len(matched))

    async def find_group_by(self, **criteria) -> Optional[Group]:
        self.calls.append(("find_group_by", criteria))
        for group in self.groups.values():
            if _matches(group, criteria):
                return group
        return None

    async def update_group(self, group: Group) -> None:
        self.calls.append(("update_group", group))
        if group.id is None:
            group.id = self._next_id
            group.created_at = _EPOCH + timedelta(minutes=self._next_id)
            self._next_id += 1
        group.updated_at = _EPOCH + timedelta(days=1)
        self.groups[group.id] = group

    async def delete_group(self, group: Group) -> None:
        self.calls.append(("delete_group", group))
        self.groups.pop(group.id, None)

    def add(self, name: str, enabled: bool = False, roles: Optional[List[str]] = None) -> Group:
        """Seed a stored group without recording a call."""
        group = Group(id=self._next_id, name=name, enabled=enabled, roles=roles or [])
        group.created_at = group.updated_at = _EPOCH + timedelta(minutes=self._next_id)
        self.groups[group.id] = group
        self._next_id += 1
        return group

    def calls_named(self, name: str) -> List[tuple]:
        return [call for call in self.calls if call[0] == name]


class InMemoryUserManager(UserManager):
    """UserManager over a dict, applying the same canonicalization and hashing."""

    def __init__(self):
        self.users: Dict[int, User] = {}
        self.saved: List[User] = []
        self._next_id = 1

    def create_user(self) -> User:
        return User(username="", email="", enabled=False)

    async def find_user_by(self, **criteria) -> Optional[User]:
        for user in self.users.values():
            if _matches(user, criteria):
                return user
        return None

    async def find_user_by_confirmation_token(self, token: str) -> Optional[User]:
        return await self.find_user_by(confirmation_token=token)

    async def update_user(self, user: User) -> None:
        update_canonical_fields(user)
        update_password(user)
        if user.id is None:
            user.id = self._next_id
            user.created_at = _EPOCH
            self._next_id += 1
        self.users[user.id] = user
        self.saved.append(user)


class RecordingMailer:
    """Collects users a confirmation mail was sent to."""

    def __init__(self):
        self.sent: List[User] = []

    async def send_confirmation_email_message(self, user: User) -> None:
        self.sent.append(user)


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures (created fresh for each test)
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def group_manager():
    return InMemoryGroupManager()


@pytest.fixture
def user_manager():
    return InMemoryUserManager()


@pytest.fixture
def mailer():
    return RecordingMailer()


@pytest.fixture
def csrf_manager():
    return CsrfTokenManager("test-secret-key", ttl=3600)


@pytest.fixture
def form_factory(csrf_manager):
    return FormFactory(csrf_manager)


@pytest.fixture
def group_service(group_manager, form_factory):
    return GroupService(group_manager, form_factory)


@pytest.fixture
def app(group_manager, user_manager, mailer):
    """
    A fresh application with persistence and mail replaced by fakes.

    Usage:
        async def test_get(test_client, group_manager):
            group_manager.add("admins")
            response = await test_client.get("/group/1")
    """
    from accounthub.dependencies import get_group_manager, get_mailer, get_user_manager
    from accounthub.main import create_app

    application = create_app()
    application.dependency_overrides[get_group_manager] = lambda: group_manager
    application.dependency_overrides[get_user_manager] = lambda: user_manager
    application.dependency_overrides[get_mailer] = lambda: mailer
    return application


@pytest_asyncio.fixture
async def test_client(app):
    """HTTPX AsyncClient routed straight into the ASGI app (no server)."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
