"""Port interface for caller profiles (permission lookup)."""

from abc import ABC, abstractmethod

from pastoral.domain.value_objects.enums import Permission


class ProfileRepository(ABC):
    @abstractmethod
    async def get_permission(self, user_id: str) -> Permission | None:
        """Return the caller's permission level, or None if unknown."""
        ...
