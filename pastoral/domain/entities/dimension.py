"""Dimension item — one value of a flat reference set (location, group, role)."""

from dataclasses import dataclass


@dataclass(frozen=True)
class DimensionItem:
    id: int
    name: str
