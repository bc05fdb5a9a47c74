"""Typed domain errors.

Every error carries a machine-readable ``code`` so the HTTP layer can map it
to a status without parsing messages:

    PastoralError
    +-- ValidationError      malformed or missing input (caller-fixable)
    +-- ConflictError        an active assignment already exists for the agent
    +-- NotFoundError        referenced agent / assignment does not exist
    +-- TransientError       storage timeout or unavailability, safe to retry
    +-- DataIntegrityError   an invariant was observed broken, fatal
"""

from __future__ import annotations


class PastoralError(Exception):
    code: str = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(PastoralError):
    code = "validation_error"

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field


class ConflictError(PastoralError):
    code = "conflict"

    def __init__(self, message: str, agent_id: int | None = None):
        super().__init__(message)
        self.agent_id = agent_id


class NotFoundError(PastoralError):
    code = "not_found"


class TransientError(PastoralError):
    code = "transient"
    retryable = True


class DataIntegrityError(PastoralError):
    code = "data_integrity"
