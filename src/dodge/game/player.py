# src/dodge/game/player.py
from __future__ import annotations
from dataclasses import dataclass

from .config import (
    PLAYER_W, PLAYER_H, PLAYER_SPEED, PLAYER_BOTTOM_OFFSET, PLAYER_MARGIN
)
from .entity import Entity
from .geometry import Viewport


@dataclass
class Player(Entity):
    """
    Bottom-lane avatar. Only moves horizontally:
    - direction = -1 moves left
    - direction = +1 moves right
    """
    speed: float = PLAYER_SPEED

    @classmethod
    def start(cls, viewport: Viewport) -> "Player":
        """Centered on the bottom lane of `viewport`."""
        return cls(x=viewport.width / 2 - PLAYER_W / 2,
                   y=float(viewport.height - PLAYER_BOTTOM_OFFSET),
                   width=float(PLAYER_W), height=float(PLAYER_H))

    def move(self, direction: int, dt: float):
        if direction not in (-1, 0, 1):
            raise ValueError(f"direction must be -1, 0 or 1, got {direction!r}")
        self.x += direction * self.speed * dt

    def clamp(self, viewport: Viewport, margin: float = PLAYER_MARGIN):
        """Keep the player inside [margin, width - player width - margin]."""
        lo = margin
        hi = viewport.width - self.width - margin
        if hi < lo:
            # viewport narrower than the player plus margins: pin to the left margin
            hi = lo
        if self.x < lo: self.x = lo
        if self.x > hi: self.x = hi
