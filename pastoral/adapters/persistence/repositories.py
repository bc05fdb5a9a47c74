"""SQLAlchemy repository implementations."""

from __future__ import annotations

import asyncio
import logging
from datetime import date

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.ext.asyncio import AsyncSession

from pastoral.adapters.persistence.models import (
    ACTIVE_AGENT_INDEX,
    EXIT_AFTER_ENTRY_CHECK,
    AgentModel,
    AssignmentModel,
    GroupModel,
    LocationModel,
    ProfileModel,
    RoleModel,
)
from pastoral.application.ports.agent_repo import AgentRepository
from pastoral.application.ports.assignment_repo import AssignmentRepository
from pastoral.application.ports.dimension_repo import DimensionRepository
from pastoral.application.ports.profile_repo import ProfileRepository
from pastoral.config import settings
from pastoral.domain.entities.agent import Agent
from pastoral.domain.entities.assignment import ActiveAssignmentRow, Assignment
from pastoral.domain.entities.dimension import DimensionItem
from pastoral.domain.errors import ConflictError, TransientError, ValidationError
from pastoral.domain.value_objects.enums import Dimension, Permission

logger = logging.getLogger(__name__)

DIMENSION_MODELS = {
    Dimension.LOCATION: LocationModel,
    Dimension.GROUP: GroupModel,
    Dimension.ROLE: RoleModel,
}

# ─── Mappers ─────────────────────────────────────────────────────────


def _agent_to_domain(m: AgentModel) -> Agent:
    return Agent(
        id=m.id,
        name=m.name,
        birthdate=m.birthdate,
        address=m.address,
        contact=m.contact,
        email=m.email,
        notes=m.notes,
        created_at=m.created_at,
    )


def _assignment_to_domain(m: AssignmentModel) -> Assignment:
    return Assignment(
        id=m.id,
        agent_id=m.agent_id,
        location_id=m.location_id,
        group_id=m.group_id,
        role_id=m.role_id,
        entry_date=m.entry_date,
        exit_date=m.exit_date,
        notes=m.notes,
        created_at=m.created_at,
    )


def _item(item_id: int, name: str | None) -> DimensionItem | None:
    # Outer join: a missing name means the dimension row is gone
    if name is None:
        return None
    return DimensionItem(id=item_id, name=name)


def _is_active_agent_violation(exc: IntegrityError) -> bool:
    # PostgreSQL names the index; SQLite names the column
    message = str(exc.orig)
    return ACTIVE_AGENT_INDEX in message or "assignments.agent_id" in message


# ─── Base ────────────────────────────────────────────────────────────


async def bounded(awaitable, timeout: float | None = None):
    """Await a store call under the store timeout and map outages.

    Timeouts, pool exhaustion and dropped connections become TransientError;
    everything else propagates unchanged.
    """
    if timeout is None:
        timeout = settings.store_timeout_seconds
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout)
    except IntegrityError:
        raise
    except (asyncio.TimeoutError, PoolTimeoutError) as e:
        logger.warning("Record store call timed out after %.1fs", timeout)
        raise TransientError("Record store timed out, try again") from e
    except OperationalError as e:
        logger.warning("Record store unavailable: %s", e.orig)
        raise TransientError("Record store unavailable, try again") from e
    except DBAPIError as e:
        if e.connection_invalidated:
            logger.warning("Record store connection lost: %s", e.orig)
            raise TransientError("Record store connection lost, try again") from e
        raise


async def commit(session: AsyncSession, timeout: float | None = None) -> None:
    """Commit the request's writes; mutating handlers call this before responding."""
    await bounded(session.commit(), timeout)


class _SqlRepository:
    def __init__(self, session: AsyncSession, timeout: float | None = None):
        self._s = session
        self._timeout = timeout if timeout is not None else settings.store_timeout_seconds

    async def _bounded(self, awaitable):
        return await bounded(awaitable, self._timeout)

    async def _execute(self, stmt):
        return await self._bounded(self._s.execute(stmt))

    async def _flush(self) -> None:
        await self._bounded(self._s.flush())


# ─── Repositories ────────────────────────────────────────────────────


class SqlAssignmentRepository(_SqlRepository, AssignmentRepository):
    async def insert_open(self, assignment: Assignment) -> Assignment:
        m = AssignmentModel(
            agent_id=assignment.agent_id,
            location_id=assignment.location_id,
            group_id=assignment.group_id,
            role_id=assignment.role_id,
            entry_date=assignment.entry_date,
            exit_date=None,
            notes=assignment.notes,
        )
        self._s.add(m)
        try:
            await self._flush()
        except IntegrityError as e:
            await self._s.rollback()
            if _is_active_agent_violation(e):
                raise ConflictError(
                    "Agent already has an active assignment; close it before opening another",
                    agent_id=assignment.agent_id,
                ) from e
            raise ValidationError(
                "Assignment references an agent, location, group or role that does not exist"
            ) from e
        assignment.id = m.id
        return assignment

    async def get_by_id(self, assignment_id: int) -> Assignment | None:
        result = await self._execute(
            select(AssignmentModel).where(AssignmentModel.id == assignment_id)
        )
        m = result.scalar_one_or_none()
        return _assignment_to_domain(m) if m else None

    async def get_active_by_agent(self, agent_id: int) -> list[Assignment]:
        result = await self._execute(
            select(AssignmentModel)
            .where(
                AssignmentModel.agent_id == agent_id,
                AssignmentModel.exit_date.is_(None),
            )
            .order_by(AssignmentModel.id)
        )
        return [_assignment_to_domain(m) for m in result.scalars()]

    async def list_by_agent(self, agent_id: int) -> list[Assignment]:
        result = await self._execute(
            select(AssignmentModel)
            .where(AssignmentModel.agent_id == agent_id)
            .order_by(AssignmentModel.entry_date.desc(), AssignmentModel.id)
        )
        return [_assignment_to_domain(m) for m in result.scalars()]

    async def close_if_active(self, assignment_id: int, exit_date: date) -> bool:
        try:
            result = await self._execute(
                update(AssignmentModel)
                .where(
                    AssignmentModel.id == assignment_id,
                    AssignmentModel.exit_date.is_(None),
                )
                .values(exit_date=exit_date)
            )
        except IntegrityError as e:
            await self._s.rollback()
            if EXIT_AFTER_ENTRY_CHECK in str(e.orig) or "CHECK constraint" in str(e.orig):
                raise ValidationError(
                    "exit_date cannot be earlier than entry_date", field="exit_date"
                ) from e
            raise
        return result.rowcount == 1

    async def list_active_rows(
        self,
        period_cutoff: date | None = None,
        tenure_cutoff: date | None = None,
    ) -> list[ActiveAssignmentRow]:
        stmt = (
            select(
                AssignmentModel,
                AgentModel.name.label("agent_name"),
                LocationModel.name.label("location_name"),
                GroupModel.name.label("group_name"),
                RoleModel.name.label("role_name"),
            )
            .outerjoin(AgentModel, AssignmentModel.agent_id == AgentModel.id)
            .outerjoin(LocationModel, AssignmentModel.location_id == LocationModel.id)
            .outerjoin(GroupModel, AssignmentModel.group_id == GroupModel.id)
            .outerjoin(RoleModel, AssignmentModel.role_id == RoleModel.id)
            .where(AssignmentModel.exit_date.is_(None))
            .order_by(AssignmentModel.entry_date, AssignmentModel.id)
        )
        if period_cutoff is not None:
            stmt = stmt.where(AssignmentModel.entry_date >= period_cutoff)
        if tenure_cutoff is not None:
            stmt = stmt.where(AssignmentModel.entry_date <= tenure_cutoff)

        result = await self._execute(stmt)
        rows = []
        for m, agent_name, location_name, group_name, role_name in result.all():
            rows.append(
                ActiveAssignmentRow(
                    assignment_id=m.id,
                    agent_id=m.agent_id,
                    agent_name=agent_name,
                    location=_item(m.location_id, location_name),
                    group=_item(m.group_id, group_name),
                    role=_item(m.role_id, role_name),
                    entry_date=m.entry_date,
                    exit_date=m.exit_date,
                    notes=m.notes,
                )
            )
        return rows

    async def count_entries_between(self, start: date, end: date) -> int:
        result = await self._execute(
            select(func.count(AssignmentModel.id)).where(
                AssignmentModel.entry_date >= start,
                AssignmentModel.entry_date < end,
            )
        )
        return result.scalar() or 0

    async def count_exits_between(self, start: date, end: date) -> int:
        result = await self._execute(
            select(func.count(AssignmentModel.id)).where(
                AssignmentModel.exit_date >= start,
                AssignmentModel.exit_date < end,
            )
        )
        return result.scalar() or 0


class SqlAgentRepository(_SqlRepository, AgentRepository):
    async def save(self, agent: Agent) -> Agent:
        m = AgentModel(
            name=agent.name,
            birthdate=agent.birthdate,
            address=agent.address,
            contact=agent.contact,
            email=agent.email,
            notes=agent.notes,
        )
        self._s.add(m)
        await self._flush()
        agent.id = m.id
        return agent

    async def get_by_id(self, agent_id: int) -> Agent | None:
        result = await self._execute(select(AgentModel).where(AgentModel.id == agent_id))
        m = result.scalar_one_or_none()
        return _agent_to_domain(m) if m else None

    async def search(self, name_query: str | None = None) -> list[Agent]:
        stmt = select(AgentModel).order_by(AgentModel.name, AgentModel.id)
        if name_query:
            stmt = stmt.where(AgentModel.name.icontains(name_query, autoescape=True))
        result = await self._execute(stmt)
        return [_agent_to_domain(m) for m in result.scalars()]

    async def update(self, agent: Agent) -> Agent:
        await self._execute(
            update(AgentModel)
            .where(AgentModel.id == agent.id)
            .values(
                name=agent.name,
                birthdate=agent.birthdate,
                address=agent.address,
                contact=agent.contact,
                email=agent.email,
                notes=agent.notes,
            )
        )
        return agent

    async def delete(self, agent_id: int) -> bool:
        # Explicit child delete so the cascade holds even without FK enforcement
        await self._execute(delete(AssignmentModel).where(AssignmentModel.agent_id == agent_id))
        result = await self._execute(delete(AgentModel).where(AgentModel.id == agent_id))
        return result.rowcount == 1

    async def count(self) -> int:
        result = await self._execute(select(func.count(AgentModel.id)))
        return result.scalar() or 0


class SqlDimensionRepository(_SqlRepository, DimensionRepository):
    async def get_by_id(self, dimension: Dimension, item_id: int) -> DimensionItem | None:
        model = DIMENSION_MODELS[dimension]
        result = await self._execute(select(model).where(model.id == item_id))
        m = result.scalar_one_or_none()
        return DimensionItem(id=m.id, name=m.name) if m else None

    async def get_all(self, dimension: Dimension) -> list[DimensionItem]:
        model = DIMENSION_MODELS[dimension]
        result = await self._execute(select(model).order_by(model.name, model.id))
        return [DimensionItem(id=m.id, name=m.name) for m in result.scalars()]


class SqlProfileRepository(_SqlRepository, ProfileRepository):
    async def get_permission(self, user_id: str) -> Permission | None:
        result = await self._execute(
            select(ProfileModel.role).where(ProfileModel.id == user_id)
        )
        role = result.scalar_one_or_none()
        if role is None:
            return None
        try:
            return Permission(role)
        except ValueError:
            logger.warning("Profile %s has unknown role %r", user_id, role)
            return None
