# src/dodge/game/entity.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Tuple

from .geometry import Rect


@dataclass
class Entity:
    """A moving rectangle. Position is the top-left corner."""
    x: float
    y: float
    width: float
    height: float

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"{type(self).__name__} size must be positive, got {self.width}x{self.height}"
            )

    def bounds(self) -> Rect:
        return Rect(self.x, self.y, self.width, self.height)

    @property
    def center(self) -> Tuple[float, float]:
        return self.bounds().center
