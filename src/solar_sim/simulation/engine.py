from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Protocol, Tuple

from solar_sim.core.frames import Vector2
from solar_sim.core.log import logger
from solar_sim.simulation.clock import SimulationClock, TickResult


class System(Protocol):
    """
    Plugin interface for simulation systems.
    Each system runs after every tick and can write to the log.
    """
    name: str

    def on_step(self, clock: SimulationClock, log: "SimulationLog") -> None:
        ...


@dataclass
class SimulationLog:
    """
    Stores outputs from a simulation run.
    Keep it simple and serializable.
    """
    # Positions: body key -> list of (t_days, r_au)
    body_positions_au: Dict[str, List[Tuple[float, Vector2]]] = field(default_factory=dict)

    # Speeds: body key -> list of (t_days, speed_km_s)
    body_speeds_km_s: Dict[str, List[Tuple[float, float]]] = field(default_factory=dict)

    # Fallbacks, errors, pauses
    events: List[Dict[str, Any]] = field(default_factory=list)

    def record_position(self, key: str, t_days: float, r_au: Vector2) -> None:
        self.body_positions_au.setdefault(key, []).append((t_days, r_au))

    def record_speed(self, key: str, t_days: float, speed_km_s: float) -> None:
        self.body_speeds_km_s.setdefault(key, []).append((t_days, speed_km_s))

    def record_event(self, kind: str, t_days: float, **details: Any) -> None:
        self.events.append({"type": kind, "t_days": t_days, **details})


@dataclass
class Engine:
    """
    Headless tick driver standing in for the frame scheduler.
    Deterministic replay: given same clock state + ticks => same output.
    """
    delta_days: float = 1.0
    systems: List[System] = field(default_factory=list)
    running: bool = field(init=False, default=False)

    def start(self) -> None:
        self.running = True

    def stop(self) -> None:
        self.running = False

    def run(self, clock: SimulationClock, n_ticks: int, log: SimulationLog | None = None) -> SimulationLog:
        if n_ticks < 0:
            raise ValueError("n_ticks must be non-negative.")

        log = log if log is not None else SimulationLog()
        self.start()

        for _ in range(n_ticks):
            if not self.running:
                break

            result = clock.advance(self.delta_days)
            self._record_result(result, clock, log)
            if result.error is not None:
                logger.error("Stopping engine: %s", result.error)
                self.stop()
                break

            # Run systems (each system decides what to record)
            for sys in self.systems:
                sys.on_step(clock, log)

        self.stop()
        return log

    @staticmethod
    def _record_result(result: TickResult, clock: SimulationClock, log: SimulationLog) -> None:
        t = clock.t_days
        for key in result.fallbacks:
            log.record_event("fallback", t, body=key)
        for key in result.approximated:
            log.record_event("approximated_speed", t, body=key)
        for key in result.skipped:
            log.record_event("skipped", t, body=key)
        if result.error is not None:
            log.record_event("error", t, message=result.error)
