"""AssignmentLedger — opens and closes assignments under the one-active rule."""

from __future__ import annotations

import logging
from datetime import date

from pastoral.application.ports.agent_repo import AgentRepository
from pastoral.application.ports.assignment_repo import AssignmentRepository
from pastoral.application.ports.dimension_repo import DimensionRepository
from pastoral.domain.entities.assignment import Assignment
from pastoral.domain.errors import (
    ConflictError,
    DataIntegrityError,
    NotFoundError,
    ValidationError,
)
from pastoral.domain.policies.tenure import parse_date
from pastoral.domain.value_objects.enums import Dimension

logger = logging.getLogger(__name__)

_DIMENSION_FIELDS = (
    ("location_id", Dimension.LOCATION),
    ("group_id", Dimension.GROUP),
    ("role_id", Dimension.ROLE),
)


class AssignmentLedger:
    """Owns the assignment lifecycle: open once, close once, never reopen.

    The active-assignment check done here only produces a friendly error;
    uniqueness itself is guaranteed by the repository's storage constraint,
    which raises ConflictError when a concurrent open wins the race.
    """

    def __init__(
        self,
        assignment_repo: AssignmentRepository,
        agent_repo: AgentRepository,
        dimension_repo: DimensionRepository,
    ):
        self._assignments = assignment_repo
        self._agents = agent_repo
        self._dimensions = dimension_repo

    async def open_assignment(
        self,
        agent_id: int | None,
        location_id: int | None,
        group_id: int | None,
        role_id: int | None,
        entry_date: date | str | None,
        notes: str | None = None,
    ) -> Assignment:
        ids = {
            "agent_id": agent_id,
            "location_id": location_id,
            "group_id": group_id,
            "role_id": role_id,
        }
        for field_name, value in ids.items():
            if value is None or value == "":
                raise ValidationError(f"{field_name} is required", field=field_name)
        entry = parse_date(entry_date, field="entry_date")

        agent = await self._agents.get_by_id(agent_id)
        if agent is None:
            raise NotFoundError(f"Agent {agent_id} not found")

        for field_name, dimension in _DIMENSION_FIELDS:
            item = await self._dimensions.get_by_id(dimension, ids[field_name])
            if item is None:
                raise ValidationError(
                    f"Unknown {dimension.value}: {ids[field_name]}", field=field_name
                )

        if await self.active_for(agent_id) is not None:
            logger.warning("Agent %s already has an active assignment", agent_id)
            raise ConflictError(
                "Agent already has an active assignment; close it before opening another",
                agent_id=agent_id,
            )

        assignment = Assignment(
            id=None,
            agent_id=agent_id,
            location_id=location_id,
            group_id=group_id,
            role_id=role_id,
            entry_date=entry,
            notes=(notes or "").strip() or None,
        )
        try:
            await self._assignments.insert_open(assignment)
        except ConflictError:
            logger.warning("Agent %s: concurrent open lost the race", agent_id)
            raise

        logger.info(
            "Opened assignment %s for agent %s (location=%s, group=%s, role=%s, entry=%s)",
            assignment.id, agent_id, location_id, group_id, role_id, entry.isoformat(),
        )
        return assignment

    async def close_assignment(
        self, assignment_id: int, exit_date: date | str | None
    ) -> Assignment:
        exit_on = parse_date(exit_date, field="exit_date")

        assignment = await self._assignments.get_by_id(assignment_id)
        if assignment is None or not assignment.is_active():
            raise NotFoundError(f"No active assignment with id {assignment_id}")

        if exit_on < assignment.entry_date:
            raise ValidationError(
                "exit_date cannot be earlier than entry_date "
                f"({assignment.entry_date.isoformat()})",
                field="exit_date",
            )

        if not await self._assignments.close_if_active(assignment_id, exit_on):
            # Closed by someone else between the read and the update
            raise NotFoundError(f"No active assignment with id {assignment_id}")

        assignment.exit_date = exit_on
        logger.info(
            "Closed assignment %s for agent %s (exit=%s)",
            assignment_id, assignment.agent_id, exit_on.isoformat(),
        )
        return assignment

    async def list_history(self, agent_id: int) -> list[Assignment]:
        return await self._assignments.list_by_agent(agent_id)

    async def active_for(self, agent_id: int) -> Assignment | None:
        active = await self._assignments.get_active_by_agent(agent_id)
        if len(active) > 1:
            logger.error(
                "Agent %s has %d active assignments: %s",
                agent_id, len(active), [a.id for a in active],
            )
            raise DataIntegrityError(
                f"Agent {agent_id} has {len(active)} active assignments"
            )
        return active[0] if active else None
