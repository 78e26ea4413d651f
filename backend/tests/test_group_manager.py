"""
AccountHub Backend — SQLAlchemy Manager Tests
===============================================

What:  Runs the SQLAlchemy group and user managers against an in-memory
       SQLite database (aiosqlite), schema created from Base.metadata.
"""

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import accounthub.models  # noqa: F401
from accounthub.database import Base
from accounthub.exceptions import DatabaseError
from accounthub.managers.group_manager import SqlAlchemyGroupManager
from accounthub.managers.user_manager import SqlAlchemyUserManager, verify_password
from accounthub.models.group import Group


@pytest_asyncio.fixture
async def session():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as db:
        yield db

    await engine.dispose()


async def _seed(manager, *rows):
    groups = []
    for name, enabled in rows:
        group = Group(name=name, enabled=enabled, roles=[])
        await manager.update_group(group)
        groups.append(group)
    return groups


class TestSqlAlchemyGroupManager:

    @pytest.mark.asyncio
    async def test_update_group_assigns_id_and_defaults(self, session):
        manager = SqlAlchemyGroupManager(session)
        group = manager.get_class()(name="admins")

        await manager.update_group(group)

        assert group.id is not None
        assert group.enabled is False
        assert group.roles == []
        assert group.created_at is not None

    @pytest.mark.asyncio
    async def test_find_group_by(self, session):
        manager = SqlAlchemyGroupManager(session)
        admins, _ = await _seed(manager, ("admins", True), ("staff", False))

        assert await manager.find_group_by(id=admins.id) is admins
        assert await manager.find_group_by(name="staff") is not None
        assert await manager.find_group_by(id=999) is None

    @pytest.mark.asyncio
    async def test_get_pager_filters_sorts_and_pages(self, session):
        manager = SqlAlchemyGroupManager(session)
        await _seed(
            manager,
            ("delta", True), ("alpha", True), ("charlie", False), ("bravo", True), ("echo", True),
        )

        pager = await manager.get_pager({"enabled": 1}, page=2, limit=3, sort={"name": "ASC"})

        assert pager.total == 4
        assert pager.last_page == 2
        assert [g.name for g in pager.entries] == ["echo"]

    @pytest.mark.asyncio
    async def test_get_pager_descending_without_criteria(self, session):
        manager = SqlAlchemyGroupManager(session)
        await _seed(manager, ("alpha", False), ("bravo", True))

        pager = await manager.get_pager({}, page=1, limit=10, sort={"name": "DESC"})

        assert [g.name for g in pager.entries] == ["bravo", "alpha"]
        assert not pager.has_next

    @pytest.mark.asyncio
    async def test_empty_pager(self, session):
        pager = await SqlAlchemyGroupManager(session).get_pager({}, page=1)

        assert pager.entries == []
        assert pager.total == 0
        assert pager.last_page == 1

    @pytest.mark.asyncio
    async def test_delete_group(self, session):
        manager = SqlAlchemyGroupManager(session)
        (admins,) = await _seed(manager, ("admins", True))

        await manager.delete_group(admins)

        assert await manager.find_group_by(name="admins") is None

    @pytest.mark.asyncio
    async def test_duplicate_name_raises_database_error(self, session):
        manager = SqlAlchemyGroupManager(session)
        await _seed(manager, ("admins", True))

        with pytest.raises(DatabaseError):
            await manager.update_group(Group(name="admins", enabled=False, roles=[]))


class TestSqlAlchemyUserManager:

    @pytest.mark.asyncio
    async def test_update_user_canonicalizes_and_hashes(self, session):
        manager = SqlAlchemyUserManager(session)
        user = manager.create_user()
        user.username = "Alice"
        user.email = "Alice@Example.com"
        user.plain_password = "s3cret-pass"

        await manager.update_user(user)

        assert user.id is not None
        assert user.username_canonical == "alice"
        assert user.email_canonical == "alice@example.com"
        assert user.plain_password is None
        assert user.password != "s3cret-pass"
        assert verify_password("s3cret-pass", user.password)
        assert not verify_password("wrong-pass", user.password)

    @pytest.mark.asyncio
    async def test_find_user_by_confirmation_token(self, session):
        manager = SqlAlchemyUserManager(session)
        user = manager.create_user()
        user.username = "bob"
        user.email = "bob@example.com"
        user.confirmation_token = "tok-123"
        await manager.update_user(user)

        assert await manager.find_user_by_confirmation_token("tok-123") is user
        assert await manager.find_user_by_confirmation_token("nope") is None
        assert await manager.find_user_by(username_canonical="bob") is user
