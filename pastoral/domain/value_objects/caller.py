"""Caller value object — the authenticated user and their permission level."""

from dataclasses import dataclass

from pastoral.domain.value_objects.enums import Permission


@dataclass(frozen=True)
class Caller:
    user_id: str
    permission: Permission

    @property
    def can_edit(self) -> bool:
        return self.permission.can_edit()

    @property
    def is_admin(self) -> bool:
        return self.permission.is_admin()
