"""Port interface for the read-only dimension sets (location, group, role)."""

from abc import ABC, abstractmethod

from pastoral.domain.entities.dimension import DimensionItem
from pastoral.domain.value_objects.enums import Dimension


class DimensionRepository(ABC):
    @abstractmethod
    async def get_by_id(self, dimension: Dimension, item_id: int) -> DimensionItem | None:
        ...

    @abstractmethod
    async def get_all(self, dimension: Dimension) -> list[DimensionItem]:
        ...
