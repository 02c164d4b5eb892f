from __future__ import annotations

from dataclasses import dataclass

from solar_sim.simulation.clock import SimulationClock
from solar_sim.simulation.engine import SimulationLog


@dataclass
class StateRecorderSystem:
    name: str = "state_recorder"

    def on_step(self, clock: SimulationClock, log: SimulationLog) -> None:
        for key, state in clock.states.items():
            log.record_position(key, clock.t_days, state.r_au)
            log.record_speed(key, clock.t_days, state.speed_km_s)
