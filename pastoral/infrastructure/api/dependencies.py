"""FastAPI dependency injection — wires adapters into use cases."""

from __future__ import annotations

from datetime import date

from fastapi import Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from pastoral.adapters.persistence.database import get_session
from pastoral.adapters.persistence.repositories import (
    SqlAgentRepository,
    SqlAssignmentRepository,
    SqlDimensionRepository,
    SqlProfileRepository,
)
from pastoral.application.ports.agent_repo import AgentRepository
from pastoral.application.ports.assignment_repo import AssignmentRepository
from pastoral.application.ports.dimension_repo import DimensionRepository
from pastoral.application.ports.profile_repo import ProfileRepository
from pastoral.application.use_cases.agent_directory import AgentDirectory
from pastoral.application.use_cases.assignment_ledger import AssignmentLedger
from pastoral.application.use_cases.build_report import (
    BuildReportUseCase,
    ExportActiveAssignmentsUseCase,
)
from pastoral.config import settings
from pastoral.domain.value_objects.caller import Caller


def get_assignment_repo(session: AsyncSession = Depends(get_session)) -> AssignmentRepository:
    return SqlAssignmentRepository(session)


def get_agent_repo(session: AsyncSession = Depends(get_session)) -> AgentRepository:
    return SqlAgentRepository(session)


def get_dimension_repo(session: AsyncSession = Depends(get_session)) -> DimensionRepository:
    return SqlDimensionRepository(session)


def get_profile_repo(session: AsyncSession = Depends(get_session)) -> ProfileRepository:
    return SqlProfileRepository(session)


def get_today() -> date:
    return settings.today()


def get_ledger(
    assignment_repo: AssignmentRepository = Depends(get_assignment_repo),
    agent_repo: AgentRepository = Depends(get_agent_repo),
    dimension_repo: DimensionRepository = Depends(get_dimension_repo),
) -> AssignmentLedger:
    return AssignmentLedger(
        assignment_repo=assignment_repo,
        agent_repo=agent_repo,
        dimension_repo=dimension_repo,
    )


def get_agent_directory(
    assignment_repo: AssignmentRepository = Depends(get_assignment_repo),
    agent_repo: AgentRepository = Depends(get_agent_repo),
    dimension_repo: DimensionRepository = Depends(get_dimension_repo),
    ledger: AssignmentLedger = Depends(get_ledger),
) -> AgentDirectory:
    return AgentDirectory(
        agent_repo=agent_repo,
        assignment_repo=assignment_repo,
        dimension_repo=dimension_repo,
        ledger=ledger,
    )


def get_build_report_uc(
    assignment_repo: AssignmentRepository = Depends(get_assignment_repo),
    agent_repo: AgentRepository = Depends(get_agent_repo),
) -> BuildReportUseCase:
    return BuildReportUseCase(assignment_repo=assignment_repo, agent_repo=agent_repo)


def get_export_uc(
    assignment_repo: AssignmentRepository = Depends(get_assignment_repo),
) -> ExportActiveAssignmentsUseCase:
    return ExportActiveAssignmentsUseCase(assignment_repo=assignment_repo)


# ─── Caller identity ─────────────────────────────────────────────────


async def get_caller(
    request: Request,
    profiles: ProfileRepository = Depends(get_profile_repo),
) -> Caller:
    """Resolve the gateway-authenticated user into a Caller.

    Credential verification happens upstream; this only maps the forwarded
    user id to a permission level.
    """
    user_id = (request.headers.get(settings.auth_header) or "").strip()
    if not user_id:
        raise HTTPException(status_code=401, detail="Unauthorized")
    permission = await profiles.get_permission(user_id)
    if permission is None:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return Caller(user_id=user_id, permission=permission)


async def require_editor(caller: Caller = Depends(get_caller)) -> Caller:
    if not caller.can_edit:
        raise HTTPException(status_code=403, detail="Edit permission required")
    return caller


async def require_admin(caller: Caller = Depends(get_caller)) -> Caller:
    if not caller.is_admin:
        raise HTTPException(status_code=403, detail="Admin permission required")
    return caller
