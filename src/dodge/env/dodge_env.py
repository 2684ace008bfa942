# src/dodge/env/dodge_env.py
from __future__ import annotations
from typing import Optional, Dict, Any
import numpy as np
import gymnasium as gym
import pygame

from dodge.game.config import WIDTH, HEIGHT
from dodge.game.events import EventType
from dodge.game.highscore import MemoryStorage
from dodge.game.simulation import Simulation
from dodge.env.observations import build_observation, observation_bounds

# action -> (left, right)
_ACTION_KEYS = {0: (False, False), 1: (True, False), 2: (False, True)}


class DodgeEnv(gym.Env):
    """
    Dodge Gymnasium environment (vector observations).
    - Simulation at 60 Hz (internal).
    - Agent acts every `frame_skip` frames (default 4) -> 15 decisions/sec.
    - Observation: shape (16,), float32, see build_observation.
    """
    metadata = {"render_modes": ["human", "rgb_array"], "render_fps": 60}

    def __init__(self,
                 render_mode: Optional[str] = None,
                 frame_skip: int = 4,
                 time_limit_seconds: Optional[float] = 60.0,
                 width: int = WIDTH,
                 height: int = HEIGHT):
        super().__init__()
        assert frame_skip >= 1, "frame_skip must be >= 1"
        assert render_mode is None or render_mode in self.metadata["render_modes"], \
            f"Unknown render_mode {render_mode!r}"
        self.render_mode = render_mode
        self.frame_skip = int(frame_skip)
        self.width = int(width)
        self.height = int(height)

        # Internal sim timing
        self.sim_fps = 60
        self.dt = 1.0 / self.sim_fps

        self.time_limit_decisions = None
        if time_limit_seconds is not None:
            self.time_limit_decisions = int(self.sim_fps * time_limit_seconds / self.frame_skip)

        # --- Gym spaces ---
        # Actions: 0 = STAY, 1 = LEFT, 2 = RIGHT
        self.action_space = gym.spaces.Discrete(3)
        low, high = observation_bounds()
        self.observation_space = gym.spaces.Box(low=low, high=high, dtype=np.float32)

        # --- Runtime state ---
        self.sim: Optional[Simulation] = None
        self.timestep: int = 0
        self.cleared: int = 0

        # Rendering
        self.screen = None
        self.clock = None

    # -------------------- Core API --------------------

    def reset(self, *, seed: Optional[int] = None, options: Optional[Dict[str, Any]] = None):
        super().reset(seed=seed)  # initializes self.np_random

        # Simulation seed always comes from np_random so reset(seed=s) is reproducible
        sim_seed = int(self.np_random.integers(0, 2**31 - 1))
        self.sim = Simulation(width=self.width, height=self.height,
                              storage=MemoryStorage(), seed=sim_seed)
        self.timestep = 0
        self.cleared = 0

        obs = self._get_obs()
        info = {"seed": sim_seed, "score": self.sim.score, "level": self.sim.level}
        if self.render_mode == "human":
            self.render()
        return obs, info

    def step(self, action):
        assert self.action_space.contains(action), f"Invalid action {action}"
        assert self.sim is not None, "Call reset() before step()"

        left, right = _ACTION_KEYS[int(action)]
        self.sim.set_input(left, right)

        for _ in range(self.frame_skip):
            events = self.sim.update(self.dt)
            self.cleared += sum(1 for e in events if e.type == EventType.CLEARED)
            if self.sim.game_over:
                break

        reward = -1.0 if self.sim.game_over else 1.0

        self.timestep += 1
        terminated = self.sim.game_over
        truncated = False
        if (self.time_limit_decisions is not None) and (self.timestep >= self.time_limit_decisions):
            truncated = True

        obs = self._get_obs()
        info = {
            "score": self.sim.score,
            "level": self.sim.level,
            "cleared": self.cleared,
            "timestep": self.timestep,
            "seed": self.sim.seed,
        }

        if self.render_mode == "human":
            self.render()

        return obs, reward, terminated, truncated, info

    # -------------------- Helpers --------------------

    def _get_obs(self) -> np.ndarray:
        assert self.sim is not None
        snap = self.sim.snapshot()
        return build_observation(snap.player, snap.obstacles, snap.obstacle_speeds,
                                 snap.width, snap.height)

    # -------------------- Rendering --------------------

    def render(self):
        if self.render_mode is None or self.sim is None:
            return None

        # imported here so the module loads without a display
        from dodge.game.game import draw_snapshot

        if self.screen is None:
            pygame.init()
            if self.render_mode == "human":
                self.screen = pygame.display.set_mode((self.width, self.height))
                pygame.display.set_caption("Dodge - Gym Env")
            else:
                self.screen = pygame.Surface((self.width, self.height))
            self.clock = pygame.time.Clock()

        draw_snapshot(self.screen, self.sim.snapshot())

        if self.render_mode == "human":
            pygame.event.pump()
            pygame.display.flip()
            self.clock.tick(self.metadata.get("render_fps", 60))
            return None

        # (H, W, 3) uint8 array
        arr = pygame.surfarray.array3d(self.screen)  # (W, H, 3)
        return np.transpose(arr, (1, 0, 2))

    def close(self):
        if self.screen is not None:
            if self.render_mode == "human":
                pygame.display.quit()
            pygame.quit()
            self.screen = None
            self.clock = None
