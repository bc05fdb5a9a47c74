"""Domain enums — pure Python, no external dependencies."""

from enum import Enum


class Dimension(str, Enum):
    LOCATION = "location"
    GROUP = "group"
    ROLE = "role"


class Permission(str, Enum):
    ADMIN = "admin"
    EDITOR = "cadastrador"
    VIEWER = "consulta"

    def can_edit(self) -> bool:
        return self in (Permission.ADMIN, Permission.EDITOR)

    def is_admin(self) -> bool:
        return self == Permission.ADMIN
