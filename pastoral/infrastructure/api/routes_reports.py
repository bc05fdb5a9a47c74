"""Report endpoints — dashboard summary + CSV export of active agents."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from pastoral.adapters.csv_export.writer import CSV_MEDIA_TYPE, EXPORT_FILENAME, to_csv
from pastoral.application.use_cases.build_report import (
    ActivityReport,
    BuildReportUseCase,
    ExportActiveAssignmentsUseCase,
    resolve_filters,
)
from pastoral.domain.entities.assignment import ActiveAssignmentRow
from pastoral.domain.entities.dimension import DimensionItem
from pastoral.domain.policies.aggregation import DimensionCount
from pastoral.domain.policies.tenure import format_elapsed
from pastoral.domain.value_objects.caller import Caller
from pastoral.infrastructure.api.dependencies import (
    get_build_report_uc,
    get_caller,
    get_export_uc,
    get_today,
)

router = APIRouter(prefix="/reports", tags=["reports"])


@router.get("/summary")
async def report_summary(
    period_months: str | None = Query(default=None, alias="periodMonths"),
    min_tenure_months: str | None = Query(default=None, alias="minTenureMonths"),
    caller: Caller = Depends(get_caller),
    uc: BuildReportUseCase = Depends(get_build_report_uc),
    today: date = Depends(get_today),
):
    """Active counts, per-dimension top 10s and tenure rankings."""
    filters = resolve_filters(period_months, min_tenure_months, today)
    report = await uc.execute(filters, today)
    return _serialize_report(report)


@router.get("/export")
async def export_active_csv(
    period_months: str | None = Query(default=None, alias="periodMonths"),
    min_tenure_months: str | None = Query(default=None, alias="minTenureMonths"),
    caller: Caller = Depends(get_caller),
    uc: ExportActiveAssignmentsUseCase = Depends(get_export_uc),
    today: date = Depends(get_today),
):
    """Download the filtered active assignments as a spreadsheet-friendly CSV."""
    filters = resolve_filters(period_months, min_tenure_months, today)
    rows = await uc.execute(filters)
    return Response(
        content=to_csv(rows),
        media_type=CSV_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{EXPORT_FILENAME}"'},
    )


def _item(item: DimensionItem | None) -> dict | None:
    return {"id": item.id, "name": item.name} if item else None


def _count(c: DimensionCount) -> dict:
    return {"id": c.id, "name": c.name, "count": c.count}


def serialize_active_row(row: ActiveAssignmentRow, today: date) -> dict:
    return {
        "assignment_id": row.assignment_id,
        "agent_id": row.agent_id,
        "agent_name": row.agent_name,
        "location": _item(row.location),
        "group": _item(row.group),
        "role": _item(row.role),
        "entry_date": row.entry_date.isoformat(),
        "tenure": format_elapsed(row.entry_date, today),
    }


def _serialize_report(report: ActivityReport) -> dict:
    f = report.filters
    return {
        "today": report.today.isoformat(),
        "filters": {
            "period_months": f.period_months,
            "min_tenure_months": f.min_tenure_months,
            "period_cutoff": f.period_cutoff.isoformat() if f.period_cutoff else None,
            "tenure_cutoff": f.tenure_cutoff.isoformat() if f.tenure_cutoff else None,
        },
        "counts": {
            "total": report.counts.total_agents,
            "active": report.counts.active,
            "inactive": report.counts.inactive,
            "entries_this_month": report.counts.entries_this_month,
            "exits_this_month": report.counts.exits_this_month,
        },
        "by_location": [_count(c) for c in report.by_location],
        "by_group": [_count(c) for c in report.by_group],
        "by_role": [_count(c) for c in report.by_role],
        "top_tenure": [serialize_active_row(r, report.today) for r in report.top_tenure],
        "long_tenure": (
            [serialize_active_row(r, report.today) for r in report.long_tenure]
            if report.long_tenure is not None
            else None
        ),
    }
