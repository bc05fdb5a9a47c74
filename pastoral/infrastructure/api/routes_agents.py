"""Agent endpoints — list, detail, maintenance and opening assignments."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from pastoral.adapters.persistence.database import get_session
from pastoral.adapters.persistence.repositories import commit
from pastoral.application.use_cases.agent_directory import (
    AgentDetail,
    AgentDirectory,
    AgentInput,
    AgentListing,
    HistoryEntry,
)
from pastoral.application.use_cases.assignment_ledger import AssignmentLedger
from pastoral.domain.entities.agent import Agent
from pastoral.domain.entities.assignment import Assignment
from pastoral.domain.policies.tenure import format_elapsed
from pastoral.domain.value_objects.caller import Caller
from pastoral.infrastructure.api.dependencies import (
    get_agent_directory,
    get_caller,
    get_ledger,
    get_today,
    require_admin,
    require_editor,
)
from pastoral.infrastructure.api.routes_reports import serialize_active_row
from pastoral.infrastructure.api.schemas import AgentPayload, OpenAssignmentPayload

router = APIRouter(prefix="/agents", tags=["agents"])


@router.get("")
async def list_agents(
    q: str | None = None,
    only_active: bool = False,
    location_id: int | None = None,
    group_id: int | None = None,
    caller: Caller = Depends(get_caller),
    directory: AgentDirectory = Depends(get_agent_directory),
    today: date = Depends(get_today),
):
    """List agents by name with their current assignment, if any."""
    listings = await directory.list_agents(
        today,
        name_query=q,
        only_active=only_active,
        location_id=location_id,
        group_id=group_id,
    )
    return {
        "total": len(listings),
        "agents": [_serialize_listing(item, today) for item in listings],
    }


@router.get("/{agent_id}")
async def get_agent(
    agent_id: int,
    caller: Caller = Depends(get_caller),
    directory: AgentDirectory = Depends(get_agent_directory),
    today: date = Depends(get_today),
):
    """Agent detail with computed age, active assignment and full history."""
    detail = await directory.get_detail(agent_id, today)
    return _serialize_detail(detail, today, caller)


@router.post("", status_code=201)
async def create_agent(
    payload: AgentPayload,
    caller: Caller = Depends(require_editor),
    directory: AgentDirectory = Depends(get_agent_directory),
    session: AsyncSession = Depends(get_session),
):
    agent = await directory.create_agent(AgentInput(**payload.model_dump()))
    await commit(session)
    return serialize_agent(agent)


@router.put("/{agent_id}")
async def update_agent(
    agent_id: int,
    payload: AgentPayload,
    caller: Caller = Depends(require_editor),
    directory: AgentDirectory = Depends(get_agent_directory),
    session: AsyncSession = Depends(get_session),
):
    agent = await directory.update_agent(agent_id, AgentInput(**payload.model_dump()))
    await commit(session)
    return serialize_agent(agent)


@router.delete("/{agent_id}", status_code=204)
async def delete_agent(
    agent_id: int,
    caller: Caller = Depends(require_admin),
    directory: AgentDirectory = Depends(get_agent_directory),
    session: AsyncSession = Depends(get_session),
):
    """Delete an agent together with its assignment history."""
    await directory.delete_agent(agent_id)
    await commit(session)
    return Response(status_code=204)


@router.post("/{agent_id}/assignments", status_code=201)
async def open_assignment(
    agent_id: int,
    payload: OpenAssignmentPayload,
    caller: Caller = Depends(require_editor),
    ledger: AssignmentLedger = Depends(get_ledger),
    session: AsyncSession = Depends(get_session),
):
    """Start a new assignment; fails with 409 while another one is active."""
    assignment = await ledger.open_assignment(
        agent_id=agent_id,
        location_id=payload.location_id,
        group_id=payload.group_id,
        role_id=payload.role_id,
        entry_date=payload.entry_date,
        notes=payload.notes,
    )
    await commit(session)
    return serialize_assignment(assignment)


# ─── Serializers ─────────────────────────────────────────────────────


def serialize_agent(agent: Agent) -> dict:
    return {
        "id": agent.id,
        "name": agent.name,
        "birthdate": agent.birthdate.isoformat() if agent.birthdate else None,
        "address": agent.address,
        "contact": agent.contact,
        "email": agent.email,
        "notes": agent.notes,
        "created_at": agent.created_at.isoformat() if agent.created_at else None,
    }


def serialize_assignment(a: Assignment) -> dict:
    return {
        "id": a.id,
        "agent_id": a.agent_id,
        "location_id": a.location_id,
        "group_id": a.group_id,
        "role_id": a.role_id,
        "entry_date": a.entry_date.isoformat(),
        "exit_date": a.exit_date.isoformat() if a.exit_date else None,
        "notes": a.notes,
        "active": a.is_active(),
        "created_at": a.created_at.isoformat() if a.created_at else None,
    }


def _serialize_history(entry: HistoryEntry, today: date) -> dict:
    data = serialize_assignment(entry.assignment)
    data["location_name"] = entry.location.name if entry.location else None
    data["group_name"] = entry.group.name if entry.group else None
    data["role_name"] = entry.role.name if entry.role else None
    if entry.assignment.is_active():
        data["tenure"] = format_elapsed(entry.assignment.entry_date, today)
    return data


def _serialize_listing(item: AgentListing, today: date) -> dict:
    data = serialize_agent(item.agent)
    data["active"] = serialize_active_row(item.active, today) if item.active else None
    data["tenure"] = item.tenure
    return data


def _serialize_detail(detail: AgentDetail, today: date, caller: Caller) -> dict:
    data = serialize_agent(detail.agent)
    data["age"] = detail.age
    data["active"] = _serialize_history(detail.active, today) if detail.active else None
    data["history"] = [_serialize_history(h, today) for h in detail.history]
    data["permissions"] = {"can_edit": caller.can_edit, "is_admin": caller.is_admin}
    return data
