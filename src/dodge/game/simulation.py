# src/dodge/game/simulation.py
"""
Dodge simulation: one player, falling obstacles, score and high score.

The driver owns the frame loop. Each frame it sets `input`, calls
`update(dt)` and draws `snapshot()`. Nothing in here schedules itself,
draws, plays sounds or touches the window.
"""
from __future__ import annotations
import logging
import math
import random
from dataclasses import dataclass
from typing import List, Optional, Set, Tuple

from .config import (
    WIDTH, HEIGHT, MAX_DT, PLAYER_BOTTOM_OFFSET,
    CLEAR_POINTS, POINTS_PER_LEVEL, CLEAR_EVENT_OFFSET, HIGH_SCORE_KEY
)
from .events import (
    Event, EventBus, EventType,
    collision_event, cleared_event, new_high_score_event, level_changed_event
)
from .geometry import Rect, Viewport, overlaps
from .highscore import HighScoreStore, MemoryStorage, Storage
from .obstacle import Obstacle
from .player import Player
from .spawner import Spawner

logger = logging.getLogger(__name__)


@dataclass
class InputState:
    """Held directions, sampled by the driver once per tick."""
    left: bool = False
    right: bool = False

    @property
    def direction(self) -> int:
        return int(self.right) - int(self.left)


@dataclass(frozen=True)
class SimulationSnapshot:
    """Read-only view of one frame, for rendering and HUD."""
    width: int
    height: int
    player: Rect
    obstacles: Tuple[Rect, ...]
    obstacle_speeds: Tuple[float, ...]
    score: float
    level: int
    high_score: int
    game_over: bool
    new_high_score: bool


def level_for(score: float) -> int:
    return math.floor(score / POINTS_PER_LEVEL) + 1


class Simulation:
    """
    States: RUNNING until the first collision, then GAME_OVER until reset().
    - score: +CLEAR_POINTS per obstacle that leaves through the bottom
    - level: floor(score / POINTS_PER_LEVEL) + 1, never decreases
    """
    def __init__(self,
                 width: int = WIDTH,
                 height: int = HEIGHT,
                 storage: Optional[Storage] = None,
                 seed: Optional[int] = None,
                 events: Optional[EventBus] = None,
                 high_score_key: str = HIGH_SCORE_KEY):
        self.viewport = Viewport(width, height)
        if seed is None:
            seed = random.randrange(0, 2**32 - 1)
        self.seed = seed
        self.rng = random.Random(seed)
        self.events = events if events is not None else EventBus()
        self.high_scores = HighScoreStore(storage if storage is not None else MemoryStorage())
        self.high_score_key = high_score_key
        self.input = InputState()
        self.tick = 0
        self.reset()

    # -------------------- Lifecycle --------------------

    def reset(self, seed: Optional[int] = None):
        """
        Start a new run. Without `seed` the obstacle stream continues from the
        previous run; with one it restarts from that seed.
        """
        if seed is not None:
            self.seed = seed
            self.rng.seed(seed)
        self._player = Player.start(self.viewport)
        self._obstacles: List[Obstacle] = []
        self._spawner = Spawner(self.rng)
        self._score = 0.0
        self._level = 1
        self._game_over = False
        self._new_high_score = False
        self._high_score = self.high_scores.load(self.high_score_key, 0)
        self.tick = 0
        logger.info("run started seed=%s high_score=%d", self.seed, self._high_score)
        self._publish(Event(EventType.RESET, data={"high_score": self._high_score}))

    def set_input(self, left: bool, right: bool):
        self.input.left = bool(left)
        self.input.right = bool(right)

    def resize(self, width: int, height: int):
        """New viewport. x positions scale with the width, the player is re-clamped."""
        new_vp = Viewport(width, height)
        ratio = new_vp.width / self.viewport.width
        self.viewport = new_vp
        self._player.y = float(new_vp.height - PLAYER_BOTTOM_OFFSET)
        self._player.x *= ratio
        self._player.clamp(new_vp)
        for ob in self._obstacles:
            ob.x *= ratio
        logger.debug("resized to %dx%d", width, height)

    # -------------------- Core API --------------------

    def update(self, dt: float) -> List[Event]:
        """Advance one tick of `dt` seconds. Returns the events emitted this tick."""
        if self._game_over:
            return []

        dt = float(dt)
        if not math.isfinite(dt):
            dt = 0.0
        dt = min(max(dt, 0.0), MAX_DT)
        self.tick += 1
        emitted: List[Event] = []

        # 1) player
        self._player.move(self.input.direction, dt)
        self._player.clamp(self.viewport)

        # 2) spawning
        new_ob = self._spawner.advance(dt * 1000.0, self.viewport, self._level, self._score)
        if new_ob is not None:
            self._obstacles.append(new_ob)

        # 3) obstacles, newest first; removals are compacted after the walk
        player_rect = self._player.bounds()
        cleared: Set[int] = set()
        for i in range(len(self._obstacles) - 1, -1, -1):
            ob = self._obstacles[i]
            exited = ob.update(dt, self.viewport.height)

            if overlaps(ob.bounds(), player_rect):
                self._end_run(emitted)
                break

            if exited:
                cleared.add(i)
                self._score_clear(ob, emitted)

        if cleared:
            self._obstacles = [ob for i, ob in enumerate(self._obstacles) if i not in cleared]

        return emitted

    def snapshot(self) -> SimulationSnapshot:
        return SimulationSnapshot(
            width=self.viewport.width,
            height=self.viewport.height,
            player=self._player.bounds(),
            obstacles=self.obstacle_bounds,
            obstacle_speeds=tuple(ob.fall_speed for ob in self._obstacles),
            score=self._score,
            level=self._level,
            high_score=self._high_score,
            game_over=self._game_over,
            new_high_score=self._new_high_score,
        )

    # -------------------- Read-only state --------------------

    @property
    def player_bounds(self) -> Rect:
        return self._player.bounds()

    @property
    def obstacle_bounds(self) -> Tuple[Rect, ...]:
        """Obstacle rects in spawn order."""
        return tuple(ob.bounds() for ob in self._obstacles)

    @property
    def score(self) -> float:
        return self._score

    @property
    def level(self) -> int:
        return self._level

    @property
    def high_score(self) -> int:
        return self._high_score

    @property
    def game_over(self) -> bool:
        return self._game_over

    @property
    def new_high_score(self) -> bool:
        return self._new_high_score

    @property
    def spawn_interval_ms(self) -> float:
        return self._spawner.interval_ms

    # -------------------- Helpers --------------------

    def _end_run(self, emitted: List[Event]):
        self._game_over = True
        cx, cy = self._player.center
        self._emit(emitted, collision_event(cx, cy, self.tick))

        final = math.floor(self._score)
        if final > self._high_score:
            self._high_score = final
            self._new_high_score = True
            self.high_scores.save(self.high_score_key, self._high_score)
            self._emit(emitted, new_high_score_event(self._high_score, self.tick))
        logger.info("game over score=%d level=%d high_score=%d",
                    final, self._level, self._high_score)

    def _score_clear(self, ob: Obstacle, emitted: List[Event]):
        self._score += CLEAR_POINTS
        self._emit(emitted, cleared_event(ob.center[0],
                                          self.viewport.height - CLEAR_EVENT_OFFSET,
                                          self.tick))
        new_level = level_for(self._score)
        if new_level > self._level:
            self._level = new_level
            self._emit(emitted, level_changed_event(self._level, self.tick))

    def _emit(self, emitted: List[Event], event: Event):
        emitted.append(event)
        self._publish(event)

    def _publish(self, event: Event):
        logger.debug("event %s %s", event.type.name, event.data)
        self.events.emit(event)
