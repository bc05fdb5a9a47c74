"""Request bodies for the mutating endpoints.

Fields are optional here; presence and date format are validated by the
use cases.
"""

from __future__ import annotations

from pydantic import BaseModel


class AgentPayload(BaseModel):
    name: str | None = None
    birthdate: str | None = None
    address: str | None = None
    contact: str | None = None
    email: str | None = None
    notes: str | None = None


class OpenAssignmentPayload(BaseModel):
    location_id: int | None = None
    group_id: int | None = None
    role_id: int | None = None
    entry_date: str | None = None
    notes: str | None = None


class CloseAssignmentPayload(BaseModel):
    exit_date: str | None = None
