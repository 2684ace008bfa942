# src/dodge/env/observations.py
from __future__ import annotations
from typing import List, Sequence, Tuple
import numpy as np

from dodge.game.config import OBSTACLE_MAX_SIZE
from dodge.game.geometry import Rect

# Number of obstacles described, most imminent first
OBS_SLOTS: int = 3
# Per slot: [present, dx, bottom, size, speed]
SLOT_FEATURES: int = 5
OBS_SIZE: int = 1 + OBS_SLOTS * SLOT_FEATURES
# Fall speeds at or above this read as 1.0
SPEED_NORM_PX_S: float = 1200.0


def _clamp01(x: float) -> float:
    return 0.0 if x < 0.0 else (1.0 if x > 1.0 else x)

def _clamp11(x: float) -> float:
    return -1.0 if x < -1.0 else (1.0 if x > 1.0 else x)

def observation_bounds() -> Tuple[np.ndarray, np.ndarray]:
    """(low, high) arrays matching build_observation's layout."""
    low = np.array([0.0] + [0.0, -1.0, 0.0, 0.0, 0.0] * OBS_SLOTS, dtype=np.float32)
    high = np.array([1.0] + [1.0, 1.0, 1.0, 1.0, 1.0] * OBS_SLOTS, dtype=np.float32)
    return low, high

def _most_imminent(obstacles: Sequence[Rect], speeds: Sequence[float],
                   limit: int) -> List[Tuple[Rect, float]]:
    """(rect, speed) pairs sorted by how far down they are (largest bottom first)."""
    return sorted(zip(obstacles, speeds), key=lambda pair: pair[0].bottom, reverse=True)[:limit]

def build_observation(
    player: Rect,
    obstacles: Sequence[Rect],
    speeds: Sequence[float],
    width: float,
    height: float,
    slots: int = OBS_SLOTS
) -> np.ndarray:
    """
    Returns a fixed (1 + 5*slots,) float32 vector:
      [ player_cx_norm,
        present, dx, bottom, size, speed,   # most imminent obstacle
        ... ]
    - player_cx_norm in [0,1] across the viewport width
    - dx in [-1,1]: obstacle center minus player center, over the width
    - bottom in [0,1]: obstacle bottom edge over (height + OBSTACLE_MAX_SIZE)
    - size, speed in [0,1]
    Empty slots are all zeros.
    `speeds` holds the fall speed of each obstacle, same order.
    """
    pcx = player.center[0]
    feats: List[float] = [_clamp01(pcx / float(width))]

    chosen = _most_imminent(obstacles, speeds, slots)
    for ob, speed in chosen:
        ocx = ob.center[0]
        feats.extend([
            1.0,
            _clamp11((ocx - pcx) / float(width)),
            _clamp01(ob.bottom / float(height + OBSTACLE_MAX_SIZE)),
            _clamp01(ob.width / float(OBSTACLE_MAX_SIZE)),
            _clamp01(speed / SPEED_NORM_PX_S),
        ])
    for _ in range(slots - len(chosen)):
        feats.extend([0.0] * SLOT_FEATURES)

    return np.asarray(feats, dtype=np.float32)
