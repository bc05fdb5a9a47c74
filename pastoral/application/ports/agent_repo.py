"""Port interface for agent persistence."""

from abc import ABC, abstractmethod

from pastoral.domain.entities.agent import Agent


class AgentRepository(ABC):
    @abstractmethod
    async def save(self, agent: Agent) -> Agent:
        ...

    @abstractmethod
    async def get_by_id(self, agent_id: int) -> Agent | None:
        ...

    @abstractmethod
    async def search(self, name_query: str | None = None) -> list[Agent]:
        """Agents ordered by name, optionally filtered by a name substring."""
        ...

    @abstractmethod
    async def update(self, agent: Agent) -> Agent:
        ...

    @abstractmethod
    async def delete(self, agent_id: int) -> bool:
        """Delete the agent and, by cascade, its assignments."""
        ...

    @abstractmethod
    async def count(self) -> int:
        ...
