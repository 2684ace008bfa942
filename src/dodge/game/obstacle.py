# src/dodge/game/obstacle.py
from __future__ import annotations
from dataclasses import dataclass

from .entity import Entity


@dataclass
class Obstacle(Entity):
    """Falling square. Leaves the playfield through the bottom edge."""
    fall_speed: float

    @classmethod
    def spawn(cls, x: float, size: float, fall_speed: float) -> "Obstacle":
        """New obstacle sitting just above the top edge."""
        return cls(x=float(x), y=-float(size), width=float(size), height=float(size),
                   fall_speed=float(fall_speed))

    def update(self, dt: float, viewport_height: float) -> bool:
        """Fall for `dt` seconds. Returns True once the obstacle is past the bottom."""
        self.y += self.fall_speed * dt
        return self.y >= viewport_height
