"""CSV writer for the active-agents export.

The document opens cleanly in spreadsheet tools: UTF-8 with a byte-order
marker, comma separated, RFC 4180 style quoting.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable

from pastoral.domain.entities.assignment import ActiveAssignmentRow

BOM = "\ufeff"
EXPORT_FILENAME = "agentes_ativos.csv"
CSV_MEDIA_TYPE = "text/csv; charset=utf-8"

_NEEDS_QUOTING = re.compile(r'[",\n\r]')


@dataclass(frozen=True)
class ExportColumn:
    header: str
    extract: Callable[[ActiveAssignmentRow], Any]


def _name(item) -> str | None:
    return item.name if item is not None else None


EXPORT_COLUMNS: tuple[ExportColumn, ...] = (
    ExportColumn("agent_id", lambda r: r.agent_id),
    ExportColumn("agente_nome", lambda r: r.agent_name),
    ExportColumn("paroquia", lambda r: _name(r.location)),
    ExportColumn("pastoral_grupo", lambda r: _name(r.group)),
    ExportColumn("funcao_cargo", lambda r: _name(r.role)),
    ExportColumn("data_entrada", lambda r: r.entry_date),
)


def csv_cell(value: Any) -> str:
    """Render one cell; quote only when the text contains , " or a line break."""
    if value is None:
        text = ""
    elif isinstance(value, date):
        text = value.isoformat()
    else:
        text = str(value)
    if _NEEDS_QUOTING.search(text):
        return '"' + text.replace('"', '""') + '"'
    return text


def to_csv(
    rows: list[ActiveAssignmentRow],
    columns: tuple[ExportColumn, ...] = EXPORT_COLUMNS,
) -> str:
    """Serialize rows in the given order; the caller decides the ordering."""
    lines = [",".join(csv_cell(col.header) for col in columns)]
    for row in rows:
        lines.append(",".join(csv_cell(col.extract(row)) for col in columns))
    return BOM + "\n".join(lines)
