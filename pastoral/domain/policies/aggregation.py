"""AggregationPolicy — counts, rankings and tenure filters over active rows."""

from __future__ import annotations

import unicodedata
from dataclasses import dataclass
from datetime import date

from pastoral.domain.entities.assignment import ActiveAssignmentRow
from pastoral.domain.value_objects.enums import Dimension

TOP_GROUPS = 10
TOP_TENURE = 10
LONG_TENURE_LIMIT = 50


@dataclass(frozen=True)
class DimensionCount:
    id: int
    name: str
    count: int


def collation_key(name: str) -> tuple[str, str, str]:
    """Sort key approximating a locale-aware comparison.

    Primary level ignores accents and case ("Sé" sorts with "se"), the
    secondary level restores case, and the raw name breaks what remains.
    """
    decomposed = unicodedata.normalize("NFKD", name)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return base.casefold(), name.casefold(), name


def filter_rows(
    rows: list[ActiveAssignmentRow],
    period_cutoff: date | None = None,
    tenure_cutoff: date | None = None,
) -> list[ActiveAssignmentRow]:
    """Keep rows opened on/after period_cutoff and on/before tenure_cutoff."""
    result = rows
    if period_cutoff is not None:
        result = [r for r in result if r.entry_date >= period_cutoff]
    if tenure_cutoff is not None:
        result = [r for r in result if r.entry_date <= tenure_cutoff]
    return list(result)


def count_by_dimension(
    rows: list[ActiveAssignmentRow],
    dimension: Dimension,
    limit: int = TOP_GROUPS,
) -> list[DimensionCount]:
    """Group rows by a dimension and return the largest groups.

    Sorted by count descending, then by name; rows whose dimension value is
    unresolved are skipped.
    """
    counts: dict[int, DimensionCount] = {}
    for row in rows:
        item = row.item(dimension)
        if item is None:
            continue
        current = counts.get(item.id)
        if current is None:
            counts[item.id] = DimensionCount(id=item.id, name=item.name, count=1)
        else:
            counts[item.id] = DimensionCount(
                id=current.id, name=current.name, count=current.count + 1
            )

    ordered = sorted(
        counts.values(),
        key=lambda c: (-c.count, collation_key(c.name), c.id),
    )
    return ordered[:limit]


def top_by_tenure(
    rows: list[ActiveAssignmentRow], n: int = TOP_TENURE
) -> list[ActiveAssignmentRow]:
    # sorted() is stable, so equal entry dates keep their input order
    return sorted(rows, key=lambda r: r.entry_date)[:n]


def long_tenure(
    rows: list[ActiveAssignmentRow],
    tenure_cutoff: date,
    limit: int = LONG_TENURE_LIMIT,
) -> list[ActiveAssignmentRow]:
    eligible = [r for r in rows if r.entry_date <= tenure_cutoff]
    return sorted(eligible, key=lambda r: r.entry_date)[:limit]
