from .geometry import Rect, Viewport, overlaps
from .simulation import InputState, Simulation, SimulationSnapshot
