"""Assignment entity — a time-bounded link between an agent and a unit triple."""

from dataclasses import dataclass
from datetime import date, datetime

from pastoral.domain.entities.dimension import DimensionItem
from pastoral.domain.value_objects.enums import Dimension


@dataclass
class Assignment:
    id: int | None
    agent_id: int
    location_id: int
    group_id: int
    role_id: int
    entry_date: date
    exit_date: date | None = None
    notes: str | None = None
    created_at: datetime | None = None

    def is_active(self) -> bool:
        return self.exit_date is None


@dataclass(frozen=True)
class ActiveAssignmentRow:
    """Read-time projection of an assignment with resolved display names.

    Built by the record store join; the assignment itself only holds ids.
    """

    assignment_id: int
    agent_id: int
    agent_name: str | None
    location: DimensionItem | None
    group: DimensionItem | None
    role: DimensionItem | None
    entry_date: date
    exit_date: date | None = None
    notes: str | None = None

    def item(self, dimension: Dimension) -> DimensionItem | None:
        if dimension == Dimension.LOCATION:
            return self.location
        if dimension == Dimension.GROUP:
            return self.group
        return self.role
