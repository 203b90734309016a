"""
Pytest fixtures for testing.

Provides:
- File-backed SQLite database (the decision engine opens several sessions
  at once, so an in-memory single-connection database is not enough)
- Test client with database and directory overrides
- Factory for roles, permissions and relation rows
- In-memory service and user directories
"""

from typing import AsyncGenerator, Sequence
from uuid import UUID, uuid4

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

from authz_service.main import app
from authz_service.models.base import Base
from authz_service.models.permission import Permission
from authz_service.models.relations import RolePermission, ServiceVisibleRole, UserRole
from authz_service.models.role import Role
from authz_service.api.dependencies.database import get_db, get_session_factory
from authz_service.api.dependencies.services import get_service_directory, get_user_directory
from authz_service.core.exceptions import DirectoryError
from authz_service.schemas.directory import Service, User


@pytest_asyncio.fixture(scope="function")
async def db_engine(tmp_path):
    """Create test database engine."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'authz.db'}")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def session_factory(db_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture(scope="function")
async def db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Session for arranging data and calling services directly."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def broken_session_factory(tmp_path) -> async_sessionmaker[AsyncSession]:
    """Sessions whose every query fails (the database file cannot be opened)."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'authz.db'}")
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


# ============ Directories ============


class FakeServiceDirectory:
    """In-memory portal service."""

    def __init__(self, services: Sequence[Service] = (), fail: bool = False):
        self.services = {s.id: s for s in services}
        self.fail = fail
        self.calls: list[tuple[str, object]] = []

    def add(self, service_id: UUID, name: str, **fields) -> Service:
        """Register a service; visible unless is_visible=False is passed."""
        fields.setdefault("is_visible", True)
        service = Service(id=str(service_id), name=name, **fields)
        self.services[service.id] = service
        return service

    def _check(self) -> None:
        if self.fail:
            raise DirectoryError("portal_service", "portal service unreachable")

    async def find_by_id(self, service_id: str) -> Service:
        self.calls.append(("find_by_id", service_id))
        self._check()
        if service_id not in self.services:
            raise DirectoryError("portal_service", f"service {service_id} not found")
        return self.services[service_id]

    async def find_by_ids(self, service_ids: Sequence[str]) -> list[Service]:
        self.calls.append(("find_by_ids", list(service_ids)))
        self._check()
        return [self.services[sid] for sid in service_ids if sid in self.services]

    async def find_all(self) -> list[Service]:
        self.calls.append(("find_all", None))
        self._check()
        return list(self.services.values())


class FakeUserDirectory:
    """In-memory auth service."""

    def __init__(self, users: Sequence[User] = (), fail: bool = False):
        self.users = {u.id: u for u in users}
        self.fail = fail
        self.calls: list[list[str]] = []

    def add(self, user_id: UUID, email: str) -> User:
        user = User(id=str(user_id), email=email, name=email.split("@")[0])
        self.users[user.id] = user
        return user

    async def find_by_ids(self, user_ids: Sequence[str]) -> list[User]:
        self.calls.append(list(user_ids))
        if self.fail:
            raise DirectoryError("auth_service", "auth service unreachable")
        return [self.users[uid] for uid in user_ids if uid in self.users]


@pytest.fixture
def service_directory() -> FakeServiceDirectory:
    return FakeServiceDirectory()


@pytest.fixture
def user_directory() -> FakeUserDirectory:
    return FakeUserDirectory()


# ============ Client ============


@pytest_asyncio.fixture(scope="function")
async def client(
    session_factory,
    service_directory: FakeServiceDirectory,
    user_directory: FakeUserDirectory,
) -> AsyncGenerator[AsyncClient, None]:
    """
    Test client with database and directory overrides.

    Each request gets its own committed session, as in production.
    """

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_service_directory] = lambda: service_directory
    app.dependency_overrides[get_user_directory] = lambda: user_directory

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client

    app.dependency_overrides.clear()


# ============ Factory Fixtures ============


class AuthzFactory:
    """Creates committed roles, permissions and relation rows."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def role(
        self,
        name: str | None = None,
        service_id: UUID | None = None,
        priority: int = 5,
        description: str | None = None,
    ) -> Role:
        role = Role(
            name=name or f"role-{uuid4().hex[:8]}",
            service_id=service_id or uuid4(),
            priority=priority,
            description=description,
        )
        self.db.add(role)
        await self.db.commit()
        await self.db.refresh(role)
        return role

    async def permission(
        self,
        action: str,
        service_id: UUID | None = None,
        description: str | None = None,
    ) -> Permission:
        permission = Permission(
            action=action,
            service_id=service_id or uuid4(),
            description=description,
        )
        self.db.add(permission)
        await self.db.commit()
        await self.db.refresh(permission)
        return permission

    async def give_role(self, user_id: UUID, *roles: Role) -> None:
        self.db.add_all([UserRole(user_id=user_id, role_id=role.id) for role in roles])
        await self.db.commit()

    async def grant(self, role: Role, *permissions: Permission) -> None:
        self.db.add_all([RolePermission(role_id=role.id, permission_id=p.id) for p in permissions])
        await self.db.commit()

    async def make_visible(self, service_id: UUID, *roles: Role) -> None:
        self.db.add_all([ServiceVisibleRole(service_id=service_id, role_id=role.id) for role in roles])
        await self.db.commit()


@pytest_asyncio.fixture
async def factory(db: AsyncSession) -> AuthzFactory:
    """Fixture that provides AuthzFactory."""
    return AuthzFactory(db)
