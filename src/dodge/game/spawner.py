# src/dodge/game/spawner.py
from __future__ import annotations
import logging
import random
from typing import Optional

from .config import (
    OBSTACLE_MIN_SIZE, OBSTACLE_MAX_SIZE, OBSTACLE_MARGIN, OBSTACLE_SPAWN_PAD,
    BASE_SPEED_MIN, BASE_SPEED_MAX, SPEED_PER_LEVEL, SPEED_PER_POINT,
    SPAWN_INTERVAL_MS, SPAWN_INTERVAL_MIN_MS, SPAWN_DECAY
)
from .geometry import Viewport
from .obstacle import Obstacle

logger = logging.getLogger(__name__)


def fall_speed_for(base_speed: float, level: int, score: float) -> float:
    """Difficulty curve: grows with both level and raw score, never capped."""
    return base_speed + (level - 1) * SPEED_PER_LEVEL + score * SPEED_PER_POINT


class Spawner:
    """
    Timed obstacle source.
    Every spawn shortens the interval by SPAWN_DECAY until it reaches the floor.
    """
    def __init__(self,
                 rng: Optional[random.Random] = None,
                 interval_ms: float = SPAWN_INTERVAL_MS,
                 min_interval_ms: float = SPAWN_INTERVAL_MIN_MS,
                 decay: float = SPAWN_DECAY):
        self.rng = rng if rng is not None else random.Random()
        self.interval_ms = float(interval_ms)
        self.min_interval_ms = float(min_interval_ms)
        self.decay = float(decay)
        self.timer_ms = 0.0

    def advance(self, elapsed_ms: float, viewport: Viewport,
                level: int, score: float) -> Optional[Obstacle]:
        """Add elapsed time; returns a new obstacle when one is due, else None."""
        self.timer_ms += elapsed_ms
        if self.timer_ms <= self.interval_ms:
            return None

        obstacle = self._make_obstacle(viewport, level, score)
        self.timer_ms = 0.0
        if self.interval_ms > self.min_interval_ms:
            # multiplicative decay, never below the floor
            self.interval_ms = max(self.min_interval_ms, self.interval_ms * self.decay)
        logger.debug("spawned obstacle x=%.1f size=%.1f speed=%.1f next_interval=%.1fms",
                     obstacle.x, obstacle.width, obstacle.fall_speed, self.interval_ms)
        return obstacle

    def _make_obstacle(self, viewport: Viewport, level: int, score: float) -> Obstacle:
        size = self.rng.uniform(OBSTACLE_MIN_SIZE, OBSTACLE_MAX_SIZE)
        span = max(0.0, viewport.width - size - OBSTACLE_SPAWN_PAD)
        x = max(float(OBSTACLE_MARGIN), self.rng.uniform(0.0, span))
        base = self.rng.uniform(BASE_SPEED_MIN, BASE_SPEED_MAX)
        return Obstacle.spawn(x, size, fall_speed_for(base, level, score))
