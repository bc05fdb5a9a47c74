"""HTTP-level fixtures: the real app with in-memory or SQLite-backed repositories."""

from datetime import date

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from fakes import FakeAgentRepo, FakeDimensionRepo, FakeProfileRepo, NullSession
from pastoral.adapters.persistence.database import get_session
from pastoral.domain.value_objects.enums import Permission
from pastoral.infrastructure.api import dependencies as deps
from pastoral.main import app

TODAY = date(2024, 6, 15)


@pytest.fixture
def null_session():
    return NullSession()


@pytest.fixture
def overrides(store, assignment_repo, null_session):
    store.profiles.update(
        {
            "u-admin": Permission.ADMIN,
            "u-editor": Permission.EDITOR,
            "u-viewer": Permission.VIEWER,
        }
    )
    app.dependency_overrides[get_session] = lambda: null_session
    app.dependency_overrides[deps.get_assignment_repo] = lambda: assignment_repo
    app.dependency_overrides[deps.get_agent_repo] = lambda: FakeAgentRepo(store)
    app.dependency_overrides[deps.get_dimension_repo] = lambda: FakeDimensionRepo(store)
    app.dependency_overrides[deps.get_profile_repo] = lambda: FakeProfileRepo(store)
    app.dependency_overrides[deps.get_today] = lambda: TODAY
    yield app.dependency_overrides
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(overrides):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def sql_overrides(session_factory):
    """Real SQL repositories over the SQLite test database."""

    async def sqlite_session():
        async with session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = sqlite_session
    app.dependency_overrides[deps.get_today] = lambda: TODAY
    yield app.dependency_overrides
    app.dependency_overrides.clear()
