"""In-memory implementations of the ports, shared by unit and API tests."""

from __future__ import annotations

import asyncio
from datetime import date

from pastoral.application.ports.agent_repo import AgentRepository
from pastoral.application.ports.assignment_repo import AssignmentRepository
from pastoral.application.ports.dimension_repo import DimensionRepository
from pastoral.application.ports.profile_repo import ProfileRepository
from pastoral.domain.entities.agent import Agent
from pastoral.domain.entities.assignment import ActiveAssignmentRow, Assignment
from pastoral.domain.entities.dimension import DimensionItem
from pastoral.domain.errors import ConflictError
from pastoral.domain.value_objects.enums import Dimension, Permission


class InMemoryStore:
    """Shared tables behind the fake repositories."""

    def __init__(self):
        self.agents: dict[int, Agent] = {}
        self.items: dict[Dimension, dict[int, DimensionItem]] = {d: {} for d in Dimension}
        self.assignments: dict[int, Assignment] = {}
        self.profiles: dict[str, Permission] = {}
        self._next_id = 0

    def next_id(self) -> int:
        self._next_id += 1
        return self._next_id

    def add_agent(self, name: str, birthdate: date | None = None) -> Agent:
        agent = Agent(id=self.next_id(), name=name, birthdate=birthdate)
        self.agents[agent.id] = agent
        return agent

    def add_item(self, dimension: Dimension, name: str) -> DimensionItem:
        item = DimensionItem(id=self.next_id(), name=name)
        self.items[dimension][item.id] = item
        return item

    def add_assignment(
        self,
        agent: Agent,
        location: DimensionItem,
        group: DimensionItem,
        role: DimensionItem,
        entry_date: date,
        exit_date: date | None = None,
    ) -> Assignment:
        """Insert directly, bypassing the one-active constraint."""
        assignment = Assignment(
            id=self.next_id(),
            agent_id=agent.id,
            location_id=location.id,
            group_id=group.id,
            role_id=role.id,
            entry_date=entry_date,
            exit_date=exit_date,
        )
        self.assignments[assignment.id] = assignment
        return assignment


class FakeAssignmentRepo(AssignmentRepository):
    """Enforces one active assignment per agent at insert time, like the
    partial unique index does.

    With ``race_window=True`` the active lookup yields to the event loop
    after reading, so concurrent callers can all observe "no active row".
    """

    def __init__(self, store: InMemoryStore, race_window: bool = False):
        self._store = store
        self._race_window = race_window
        self.constraint_rejections = 0

    async def insert_open(self, assignment):
        for existing in self._store.assignments.values():
            if existing.agent_id == assignment.agent_id and existing.exit_date is None:
                self.constraint_rejections += 1
                raise ConflictError("Agent already has an active assignment",
                                    agent_id=assignment.agent_id)
        assignment.id = self._store.next_id()
        self._store.assignments[assignment.id] = assignment
        return assignment

    async def get_by_id(self, assignment_id):
        found = self._store.assignments.get(assignment_id)
        if found is None:
            return None
        return Assignment(**vars(found))

    async def get_active_by_agent(self, agent_id):
        active = [
            Assignment(**vars(a)) for a in self._store.assignments.values()
            if a.agent_id == agent_id and a.exit_date is None
        ]
        if self._race_window:
            await asyncio.sleep(0)
        return active

    async def list_by_agent(self, agent_id):
        mine = [a for a in self._store.assignments.values() if a.agent_id == agent_id]
        mine.sort(key=lambda a: a.id)
        mine.sort(key=lambda a: a.entry_date, reverse=True)
        return mine

    async def close_if_active(self, assignment_id, exit_date):
        found = self._store.assignments.get(assignment_id)
        if found is None or found.exit_date is not None:
            return False
        found.exit_date = exit_date
        return True

    async def list_active_rows(self, period_cutoff=None, tenure_cutoff=None):
        rows = []
        for a in sorted(self._store.assignments.values(), key=lambda a: (a.entry_date, a.id)):
            if a.exit_date is not None:
                continue
            if period_cutoff is not None and a.entry_date < period_cutoff:
                continue
            if tenure_cutoff is not None and a.entry_date > tenure_cutoff:
                continue
            agent = self._store.agents.get(a.agent_id)
            rows.append(
                ActiveAssignmentRow(
                    assignment_id=a.id,
                    agent_id=a.agent_id,
                    agent_name=agent.name if agent else None,
                    location=self._store.items[Dimension.LOCATION].get(a.location_id),
                    group=self._store.items[Dimension.GROUP].get(a.group_id),
                    role=self._store.items[Dimension.ROLE].get(a.role_id),
                    entry_date=a.entry_date,
                    notes=a.notes,
                )
            )
        return rows

    async def count_entries_between(self, start, end):
        return sum(1 for a in self._store.assignments.values() if start <= a.entry_date < end)

    async def count_exits_between(self, start, end):
        return sum(
            1 for a in self._store.assignments.values()
            if a.exit_date is not None and start <= a.exit_date < end
        )


class FakeAgentRepo(AgentRepository):
    def __init__(self, store: InMemoryStore):
        self._store = store

    async def save(self, agent):
        agent.id = self._store.next_id()
        self._store.agents[agent.id] = agent
        return agent

    async def get_by_id(self, agent_id):
        return self._store.agents.get(agent_id)

    async def search(self, name_query=None):
        agents = list(self._store.agents.values())
        if name_query:
            agents = [a for a in agents if name_query.lower() in a.name.lower()]
        return sorted(agents, key=lambda a: (a.name, a.id))

    async def update(self, agent):
        self._store.agents[agent.id] = agent
        return agent

    async def delete(self, agent_id):
        if agent_id not in self._store.agents:
            return False
        del self._store.agents[agent_id]
        for key in [k for k, a in self._store.assignments.items() if a.agent_id == agent_id]:
            del self._store.assignments[key]
        return True

    async def count(self):
        return len(self._store.agents)


class FakeDimensionRepo(DimensionRepository):
    def __init__(self, store: InMemoryStore):
        self._store = store

    async def get_by_id(self, dimension, item_id):
        return self._store.items[dimension].get(item_id)

    async def get_all(self, dimension):
        return sorted(self._store.items[dimension].values(), key=lambda i: (i.name, i.id))


class FakeProfileRepo(ProfileRepository):
    def __init__(self, store: InMemoryStore):
        self._store = store

    async def get_permission(self, user_id):
        return self._store.profiles.get(user_id)


class NullSession:
    """Stands in for the request session when the repositories are fakes."""

    def __init__(self):
        self.commits = 0

    async def commit(self):
        self.commits += 1

    async def rollback(self):
        pass
