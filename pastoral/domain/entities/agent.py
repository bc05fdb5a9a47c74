"""Agent entity — a volunteer tracked by the directory."""

from dataclasses import dataclass
from datetime import date, datetime


@dataclass
class Agent:
    id: int | None
    name: str
    birthdate: date | None = None
    address: str | None = None
    contact: str | None = None
    email: str | None = None
    notes: str | None = None
    created_at: datetime | None = None
