"""AgentDirectory — agent listing, detail view and agent record maintenance."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date

from pastoral.application.ports.agent_repo import AgentRepository
from pastoral.application.ports.assignment_repo import AssignmentRepository
from pastoral.application.ports.dimension_repo import DimensionRepository
from pastoral.application.use_cases.assignment_ledger import AssignmentLedger
from pastoral.domain.entities.agent import Agent
from pastoral.domain.entities.assignment import ActiveAssignmentRow, Assignment
from pastoral.domain.entities.dimension import DimensionItem
from pastoral.domain.errors import DataIntegrityError, NotFoundError, ValidationError
from pastoral.domain.policies.tenure import age_at, format_elapsed, parse_date
from pastoral.domain.value_objects.enums import Dimension

logger = logging.getLogger(__name__)


@dataclass
class AgentListing:
    agent: Agent
    active: ActiveAssignmentRow | None = None
    tenure: str | None = None


@dataclass
class HistoryEntry:
    assignment: Assignment
    location: DimensionItem | None
    group: DimensionItem | None
    role: DimensionItem | None


@dataclass
class AgentDetail:
    agent: Agent
    age: int | None
    active: HistoryEntry | None
    history: list[HistoryEntry] = field(default_factory=list)


@dataclass
class AgentInput:
    """Editable agent fields as received from a form."""

    name: str | None
    birthdate: date | str | None = None
    address: str | None = None
    contact: str | None = None
    email: str | None = None
    notes: str | None = None


def _blank_to_none(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


class AgentDirectory:
    def __init__(
        self,
        agent_repo: AgentRepository,
        assignment_repo: AssignmentRepository,
        dimension_repo: DimensionRepository,
        ledger: AssignmentLedger,
    ):
        self._agents = agent_repo
        self._assignments = assignment_repo
        self._dimensions = dimension_repo
        self._ledger = ledger

    async def list_agents(
        self,
        today: date,
        name_query: str | None = None,
        only_active: bool = False,
        location_id: int | None = None,
        group_id: int | None = None,
    ) -> list[AgentListing]:
        """Agents by name with their current assignment and tenure.

        Filtering by location or group implies only agents whose active
        assignment matches.
        """
        active_rows = await self._assignments.list_active_rows()
        active_by_agent: dict[int, ActiveAssignmentRow] = {}
        for row in active_rows:
            if row.agent_id in active_by_agent:
                logger.error("Agent %s has more than one active assignment", row.agent_id)
                raise DataIntegrityError(
                    f"Agent {row.agent_id} has more than one active assignment"
                )
            active_by_agent[row.agent_id] = row

        restrict = only_active or location_id is not None or group_id is not None
        listings = []
        for agent in await self._agents.search(_blank_to_none(name_query)):
            row = active_by_agent.get(agent.id)
            if restrict:
                if row is None:
                    continue
                if location_id is not None and (row.location is None or row.location.id != location_id):
                    continue
                if group_id is not None and (row.group is None or row.group.id != group_id):
                    continue
            listings.append(
                AgentListing(
                    agent=agent,
                    active=row,
                    tenure=format_elapsed(row.entry_date, today) if row else None,
                )
            )
        return listings

    async def get_detail(self, agent_id: int, today: date) -> AgentDetail:
        agent = await self._agents.get_by_id(agent_id)
        if agent is None:
            raise NotFoundError(f"Agent {agent_id} not found")

        history = await self._ledger.list_history(agent_id)
        active = await self._ledger.active_for(agent_id)

        lookups = {}
        for dimension in Dimension:
            items = await self._dimensions.get_all(dimension)
            lookups[dimension] = {item.id: item for item in items}

        def resolve(a: Assignment) -> HistoryEntry:
            return HistoryEntry(
                assignment=a,
                location=lookups[Dimension.LOCATION].get(a.location_id),
                group=lookups[Dimension.GROUP].get(a.group_id),
                role=lookups[Dimension.ROLE].get(a.role_id),
            )

        return AgentDetail(
            agent=agent,
            age=age_at(agent.birthdate, today),
            active=resolve(active) if active else None,
            history=[resolve(a) for a in history],
        )

    async def create_agent(self, data: AgentInput) -> Agent:
        agent = Agent(id=None, **self._clean(data))
        await self._agents.save(agent)
        logger.info("Created agent %s (%s)", agent.id, agent.name)
        return agent

    async def update_agent(self, agent_id: int, data: AgentInput) -> Agent:
        existing = await self._agents.get_by_id(agent_id)
        if existing is None:
            raise NotFoundError(f"Agent {agent_id} not found")
        agent = Agent(id=agent_id, created_at=existing.created_at, **self._clean(data))
        await self._agents.update(agent)
        logger.info("Updated agent %s", agent_id)
        return agent

    async def delete_agent(self, agent_id: int) -> None:
        """Delete an agent; its assignments (active or closed) go with it."""
        if not await self._agents.delete(agent_id):
            raise NotFoundError(f"Agent {agent_id} not found")
        logger.info("Deleted agent %s and its assignments", agent_id)

    @staticmethod
    def _clean(data: AgentInput) -> dict:
        name = _blank_to_none(data.name)
        if name is None:
            raise ValidationError("name is required", field="name")
        birthdate = None
        if data.birthdate not in (None, ""):
            birthdate = parse_date(data.birthdate, field="birthdate")
        return {
            "name": name,
            "birthdate": birthdate,
            "address": _blank_to_none(data.address),
            "contact": _blank_to_none(data.contact),
            "email": _blank_to_none(data.email),
            "notes": _blank_to_none(data.notes),
        }
