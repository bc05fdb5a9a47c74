"""Dimension endpoints — read-only lists for pickers."""

from fastapi import APIRouter, Depends, HTTPException

from pastoral.application.ports.dimension_repo import DimensionRepository
from pastoral.domain.value_objects.caller import Caller
from pastoral.domain.value_objects.enums import Dimension
from pastoral.infrastructure.api.dependencies import get_caller, get_dimension_repo

router = APIRouter(prefix="/dimensions", tags=["dimensions"])

DIMENSION_PATHS = {
    "locations": Dimension.LOCATION,
    "groups": Dimension.GROUP,
    "roles": Dimension.ROLE,
}


@router.get("/{name}")
async def list_dimension(
    name: str,
    caller: Caller = Depends(get_caller),
    dimensions: DimensionRepository = Depends(get_dimension_repo),
):
    dimension = DIMENSION_PATHS.get(name)
    if dimension is None:
        raise HTTPException(status_code=404, detail=f"Unknown dimension: {name}")
    items = await dimensions.get_all(dimension)
    return {
        "dimension": dimension.value,
        "items": [{"id": i.id, "name": i.name} for i in items],
    }
