"""Port interface for assignment persistence."""

from abc import ABC, abstractmethod
from datetime import date

from pastoral.domain.entities.assignment import ActiveAssignmentRow, Assignment


class AssignmentRepository(ABC):
    @abstractmethod
    async def insert_open(self, assignment: Assignment) -> Assignment:
        """Insert a new active assignment.

        Must rely on the store's uniqueness guarantee for active rows and
        raise ConflictError when a concurrent insert already holds it.
        """
        ...

    @abstractmethod
    async def get_by_id(self, assignment_id: int) -> Assignment | None:
        ...

    @abstractmethod
    async def get_active_by_agent(self, agent_id: int) -> list[Assignment]:
        """Return every assignment of the agent with no exit date."""
        ...

    @abstractmethod
    async def list_by_agent(self, agent_id: int) -> list[Assignment]:
        """Most recent entry date first, ties in creation order."""
        ...

    @abstractmethod
    async def close_if_active(self, assignment_id: int, exit_date: date) -> bool:
        """Set the exit date only if the assignment is still active.

        Returns False when no active assignment matched.
        """
        ...

    @abstractmethod
    async def list_active_rows(
        self,
        period_cutoff: date | None = None,
        tenure_cutoff: date | None = None,
    ) -> list[ActiveAssignmentRow]:
        ...

    @abstractmethod
    async def count_entries_between(self, start: date, end: date) -> int:
        """Count assignments with start <= entry_date < end."""
        ...

    @abstractmethod
    async def count_exits_between(self, start: date, end: date) -> int:
        """Count assignments with start <= exit_date < end."""
        ...
