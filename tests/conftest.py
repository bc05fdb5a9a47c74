"""Pytest configuration and shared fixtures."""

from dataclasses import dataclass

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from fakes import (
    FakeAgentRepo,
    FakeAssignmentRepo,
    FakeDimensionRepo,
    InMemoryStore,
)
from pastoral.adapters.persistence.database import Base
from pastoral.adapters.persistence.models import GroupModel, LocationModel, ProfileModel, RoleModel
from pastoral.application.use_cases.assignment_ledger import AssignmentLedger
from pastoral.domain.entities.dimension import DimensionItem
from pastoral.domain.value_objects.enums import Dimension


@dataclass
class Lookups:
    matriz: DimensionItem
    sao_jose: DimensionItem
    catequese: DimensionItem
    liturgia: DimensionItem
    coordenador: DimensionItem
    membro: DimensionItem


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def lookups(store):
    return Lookups(
        matriz=store.add_item(Dimension.LOCATION, "Matriz"),
        sao_jose=store.add_item(Dimension.LOCATION, "São José"),
        catequese=store.add_item(Dimension.GROUP, "Catequese"),
        liturgia=store.add_item(Dimension.GROUP, "Liturgia"),
        coordenador=store.add_item(Dimension.ROLE, "Coordenador"),
        membro=store.add_item(Dimension.ROLE, "Membro"),
    )


@pytest.fixture
def assignment_repo(store):
    return FakeAssignmentRepo(store)


@pytest.fixture
def ledger(store, assignment_repo):
    return AssignmentLedger(
        assignment_repo=assignment_repo,
        agent_repo=FakeAgentRepo(store),
        dimension_repo=FakeDimensionRepo(store),
    )


@pytest_asyncio.fixture
async def session_factory(tmp_path):
    """File-backed SQLite database with the schema and a few lookup rows."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'pastoral.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    factory = async_sessionmaker(engine, expire_on_commit=False)

    async with factory() as session:
        session.add_all(
            [
                LocationModel(id=1, name="Matriz"),
                LocationModel(id=2, name="São José"),
                GroupModel(id=1, name="Catequese"),
                GroupModel(id=2, name="Liturgia"),
                RoleModel(id=1, name="Membro"),
                ProfileModel(id="u-admin", role="admin"),
                ProfileModel(id="u-editor", role="cadastrador"),
                ProfileModel(id="u-odd", role="superuser"),
            ]
        )
        await session.commit()

    yield factory
    await engine.dispose()
