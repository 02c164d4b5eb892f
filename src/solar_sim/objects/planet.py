from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Deque, List

from solar_sim.core.frames import Vector2
from solar_sim.physics.orbit import OrbitalElements, compute_position, mean_anomaly_at


@dataclass
class BodyState:
    """
    Mutable per-body state owned by the simulation clock.
    Elements are shared and never mutated; everything else is refreshed each tick.
    """
    key: str
    elements: OrbitalElements
    max_trail_length: int = 100
    M_rad: float = 0.0
    r_au: Vector2 = (0.0, 0.0)
    v_km_s: Vector2 = (0.0, 0.0)
    speed_km_s: float = 0.0
    trail: Deque[Vector2] = field(init=False)

    def __post_init__(self):
        if self.max_trail_length < 0:
            raise ValueError("max_trail_length must be non-negative.")
        self.trail = deque(maxlen=self.max_trail_length)

    @classmethod
    def at_time(cls, key: str, elements: OrbitalElements, t_days: float, max_trail_length: int = 100) -> "BodyState":
        """
        Fresh state at t_days since the reference epoch. Non-positive time
        puts the body at perihelion.
        Raises ValueError for an unusable period.
        """
        M = mean_anomaly_at(elements.period_yr, max(t_days, 0.0))
        state = cls(key=key, elements=elements, max_trail_length=max_trail_length, M_rad=M)
        state.r_au = compute_position(elements, M).value
        return state

    def push_trail(self, r_au: Vector2) -> None:
        # deque(maxlen) drops the oldest point
        self.trail.append(r_au)

    def clear_trail(self) -> None:
        self.trail.clear()

    def trail_points(self) -> List[Vector2]:
        return list(self.trail)
