# src/dodge/game/geometry.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class Rect:
    """Immutable axis-aligned rectangle (top-left origin, y grows downward)."""
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def center(self) -> Tuple[float, float]:
        return (self.x + self.width / 2, self.y + self.height / 2)


def overlaps(a: Rect, b: Rect) -> bool:
    """Strict AABB intersection: rects that only share an edge do not overlap."""
    return (a.x < b.right and b.x < a.right and
            a.y < b.bottom and b.y < a.bottom)


@dataclass
class Viewport:
    """Playfield size, in the same units as entity coordinates."""
    width: int
    height: int

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"viewport dimensions must be positive, got {self.width}x{self.height}"
            )
