"""BuildReportUseCase — dashboard figures derived from the active assignments."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date

from pastoral.application.ports.agent_repo import AgentRepository
from pastoral.application.ports.assignment_repo import AssignmentRepository
from pastoral.domain.entities.assignment import ActiveAssignmentRow
from pastoral.domain.errors import ValidationError
from pastoral.domain.policies.aggregation import (
    DimensionCount,
    count_by_dimension,
    filter_rows,
    long_tenure,
    top_by_tenure,
)
from pastoral.domain.policies.tenure import month_window, months_ago
from pastoral.domain.value_objects.enums import Dimension

logger = logging.getLogger(__name__)

MAX_FILTER_MONTHS = 600


@dataclass(frozen=True)
class ReportFilters:
    """Month-based filters and the cutoff dates they resolve to."""

    period_months: int | None = None
    min_tenure_months: int | None = None
    period_cutoff: date | None = None
    tenure_cutoff: date | None = None


def parse_months(raw: int | str | None, field_name: str) -> int | None:
    """Parse a month-count query value; absent, empty or 0 means no filter."""
    if raw is None:
        return None
    text = str(raw).strip()
    if not text:
        return None
    # Plain ASCII digits only; int() would also take "+6", "1_0" and other scripts
    if not (text.isascii() and text.isdigit()):
        raise ValidationError(f"{field_name} must be a whole number of months", field=field_name)
    months = int(text)
    if months > MAX_FILTER_MONTHS:
        raise ValidationError(
            f"{field_name} must be between 0 and {MAX_FILTER_MONTHS}", field=field_name
        )
    return months or None


def resolve_filters(
    period_months: int | str | None,
    min_tenure_months: int | str | None,
    today: date,
) -> ReportFilters:
    period = parse_months(period_months, "periodMonths")
    tenure = parse_months(min_tenure_months, "minTenureMonths")
    return ReportFilters(
        period_months=period,
        min_tenure_months=tenure,
        period_cutoff=months_ago(today, period) if period else None,
        tenure_cutoff=months_ago(today, tenure) if tenure else None,
    )


@dataclass(frozen=True)
class PeriodCounts:
    total_agents: int
    active: int
    inactive: int
    entries_this_month: int
    exits_this_month: int


@dataclass
class ActivityReport:
    today: date
    filters: ReportFilters
    counts: PeriodCounts
    by_location: list[DimensionCount] = field(default_factory=list)
    by_group: list[DimensionCount] = field(default_factory=list)
    by_role: list[DimensionCount] = field(default_factory=list)
    top_tenure: list[ActiveAssignmentRow] = field(default_factory=list)
    long_tenure: list[ActiveAssignmentRow] | None = None


class BuildReportUseCase:
    """Reads the active set once and derives every report section from it.

    The period cutoff narrows the active set for all sections; the tenure
    cutoff only applies to the long-tenure list, on top of the period cutoff.
    """

    def __init__(self, assignment_repo: AssignmentRepository, agent_repo: AgentRepository):
        self._assignments = assignment_repo
        self._agents = agent_repo

    async def counts_for_period(
        self, active_rows: list[ActiveAssignmentRow], today: date
    ) -> PeriodCounts:
        total = await self._agents.count()
        start, end = month_window(today)
        entries = await self._assignments.count_entries_between(start, end)
        exits = await self._assignments.count_exits_between(start, end)
        active = len(active_rows)
        return PeriodCounts(
            total_agents=total,
            active=active,
            inactive=max(0, total - active),
            entries_this_month=entries,
            exits_this_month=exits,
        )

    async def execute(self, filters: ReportFilters, today: date) -> ActivityReport:
        rows = await self._assignments.list_active_rows(period_cutoff=filters.period_cutoff)
        rows = filter_rows(rows, period_cutoff=filters.period_cutoff)

        counts = await self.counts_for_period(rows, today)
        report = ActivityReport(
            today=today,
            filters=filters,
            counts=counts,
            by_location=count_by_dimension(rows, Dimension.LOCATION),
            by_group=count_by_dimension(rows, Dimension.GROUP),
            by_role=count_by_dimension(rows, Dimension.ROLE),
            top_tenure=top_by_tenure(rows),
        )
        if filters.tenure_cutoff is not None:
            report.long_tenure = long_tenure(rows, filters.tenure_cutoff)

        logger.info(
            "Report built: active=%d total=%d period=%s tenure=%s",
            counts.active, counts.total_agents,
            filters.period_months, filters.min_tenure_months,
        )
        return report


class ExportActiveAssignmentsUseCase:
    """Active rows for the CSV export, with both cutoffs applied."""

    def __init__(self, assignment_repo: AssignmentRepository):
        self._assignments = assignment_repo

    async def execute(self, filters: ReportFilters) -> list[ActiveAssignmentRow]:
        rows = await self._assignments.list_active_rows(
            period_cutoff=filters.period_cutoff,
            tenure_cutoff=filters.tenure_cutoff,
        )
        rows = filter_rows(
            rows,
            period_cutoff=filters.period_cutoff,
            tenure_cutoff=filters.tenure_cutoff,
        )
        logger.info("Exporting %d active assignments", len(rows))
        return rows
