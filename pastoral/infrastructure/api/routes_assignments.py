"""Assignment endpoints — closing an active assignment."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from pastoral.adapters.persistence.database import get_session
from pastoral.adapters.persistence.repositories import commit
from pastoral.application.use_cases.assignment_ledger import AssignmentLedger
from pastoral.domain.value_objects.caller import Caller
from pastoral.infrastructure.api.dependencies import get_ledger, require_editor
from pastoral.infrastructure.api.routes_agents import serialize_assignment
from pastoral.infrastructure.api.schemas import CloseAssignmentPayload

router = APIRouter(prefix="/assignments", tags=["assignments"])


@router.post("/{assignment_id}/close")
async def close_assignment(
    assignment_id: int,
    payload: CloseAssignmentPayload,
    caller: Caller = Depends(require_editor),
    ledger: AssignmentLedger = Depends(get_ledger),
    session: AsyncSession = Depends(get_session),
):
    """Set the exit date of an active assignment (never before its entry date)."""
    assignment = await ledger.close_assignment(assignment_id, payload.exit_date)
    await commit(session)
    return serialize_assignment(assignment)
