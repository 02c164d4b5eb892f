"""
Simulation clock: owns simulated time and per-body state.

Running <-> Paused is the only state machine; time advances only while
running and the transition is always caller-triggered, except that an
unexpected failure inside a tick forces the clock into Paused.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

from solar_sim.core.config import TIME_SPEED_SLIDER_MULTIPLIER, SimulationConfig
from solar_sim.core.constants import SECONDS_PER_DAY
from solar_sim.core.frames import Vector2
from solar_sim.core.log import logger
from solar_sim.objects.planet import BodyState
from solar_sim.physics.orbit import compute_position, compute_speed, mean_anomaly_at, velocity_vector
from solar_sim.simulation.scenario import Scenario


class SimulationInitError(RuntimeError):
    """No body could be initialized; the simulation cannot start."""


@dataclass(frozen=True)
class BodySnapshot:
    key: str
    name: str
    r_au: Vector2
    v_km_s: Vector2
    speed_km_s: float
    M_rad: float
    trail: Tuple[Vector2, ...]


@dataclass(frozen=True)
class ClockSnapshot:
    """Read-only view for renderers."""
    t_days: float
    paused: bool
    selected: Optional[str]
    bodies: Dict[str, BodySnapshot]


@dataclass(frozen=True)
class TickResult:
    """
    advanced: simulated time moved this tick
    fallbacks: bodies whose position or speed came from a fallback value
    approximated: bodies whose speed used the |v^2| substitution
    skipped: bodies left unchanged (unusable period)
    error: message when the tick failed and the clock paused itself
    """
    advanced: bool
    fallbacks: Tuple[str, ...] = ()
    approximated: Tuple[str, ...] = ()
    skipped: Tuple[str, ...] = ()
    error: Optional[str] = None


@dataclass(frozen=True)
class BodyMotion:
    """New values for one body, stored only once the whole tick succeeded."""
    M_rad: float
    r_au: Vector2
    v_km_s: Vector2
    speed_km_s: float
    fallback_used: bool = False
    approximated: bool = False

    def apply(self, state: BodyState) -> None:
        state.M_rad = self.M_rad
        state.r_au = self.r_au
        state.v_km_s = self.v_km_s
        state.speed_km_s = self.speed_km_s


def days_since_epoch(now: datetime, epoch: datetime) -> float:
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    t_days = (now - epoch).total_seconds() / SECONDS_PER_DAY
    if not math.isfinite(t_days):
        raise SimulationInitError("Invalid time offset calculation")
    return t_days


@dataclass
class SimulationClock:
    scenario: Scenario
    config: SimulationConfig = field(default_factory=SimulationConfig)
    now: Optional[datetime] = None

    t_days: float = field(init=False, default=0.0)
    paused: bool = field(init=False, default=False)
    time_speed: float = field(init=False, default=0.0)
    show_trails: bool = field(init=False, default=False)
    selected: Optional[str] = field(init=False, default=None)
    last_error: Optional[str] = field(init=False, default=None)
    states: Dict[str, BodyState] = field(init=False, default_factory=dict)

    def __post_init__(self):
        self.time_speed = self.config.time_speed
        self.show_trails = self.config.show_trails
        self.reset_simulation(self.config.start_at_current_date, now=self.now)

    @classmethod
    def from_config(cls, config: SimulationConfig, now: Optional[datetime] = None) -> "SimulationClock":
        return cls(scenario=Scenario.from_config(config), config=config, now=now)

    # ----- Lifecycle -----

    def reset_simulation(self, to_current_date: bool, now: Optional[datetime] = None) -> None:
        """
        Rebuild every body from scratch at either t=0 or the current date.
        Bodies that fail to initialize are skipped; if none survive,
        SimulationInitError is raised and the previous state is kept.
        """
        if to_current_date:
            t_days = days_since_epoch(now or datetime.now(timezone.utc), self.config.reference_epoch)
        else:
            t_days = 0.0

        states: Dict[str, BodyState] = {}
        for key, elements in self.scenario.body_items():
            try:
                state = BodyState.at_time(key, elements, t_days, self.config.max_trail_length)
                self._compute_motion(state, state.M_rad).apply(state)
            except (AttributeError, TypeError, ValueError) as exc:
                logger.error("Error initializing body %s: %s", key, exc)
                continue
            states[key] = state

        if not states:
            raise SimulationInitError("No bodies were successfully initialized")

        self.t_days = t_days
        self.states = states
        self.last_error = None
        if self.selected not in states:
            self.selected = None
        logger.info("Simulation reset at t=%.3f days with %d bodies", t_days, len(states))

    # ----- Tick -----

    def advance(self, delta_days: float = 1.0) -> TickResult:
        """
        Move simulated time by delta_days * time_speed and refresh every body.
        No-op while paused or for a non-finite delta.

        New values are computed for every body before any is stored, so a
        failing tick leaves time and all bodies exactly as they were.
        """
        if self.paused:
            return TickResult(advanced=False)
        if not math.isfinite(delta_days):
            logger.warning("Invalid delta_days: %s", delta_days)
            return TickResult(advanced=False)

        skipped: List[str] = []
        try:
            t_days = self.t_days + delta_days * self.time_speed
            staged: List[Tuple[BodyState, BodyMotion]] = []
            for key, state in self.states.items():
                try:
                    M = mean_anomaly_at(state.elements.period_yr, t_days)
                except ValueError as exc:
                    logger.warning("Skipping body %s: %s", key, exc)
                    skipped.append(key)
                    continue
                staged.append((state, self._compute_motion(state, M)))
        except Exception as exc:
            logger.exception("Error updating simulation")
            self.paused = True
            self.last_error = f"Simulation error: {exc}"
            return TickResult(advanced=False, error=self.last_error)

        self.t_days = t_days
        for state, motion in staged:
            motion.apply(state)
            if self.show_trails:
                state.push_trail(state.r_au)
            else:
                state.clear_trail()

        return TickResult(
            advanced=True,
            fallbacks=tuple(state.key for state, motion in staged if motion.fallback_used),
            approximated=tuple(state.key for state, motion in staged if motion.approximated),
            skipped=tuple(skipped),
        )

    def _compute_motion(self, state: BodyState, M_rad: float) -> BodyMotion:
        position = compute_position(state.elements, M_rad)
        speed = compute_speed(state.elements, position.value, self.config.mu, self.config.au_m)
        return BodyMotion(
            M_rad=M_rad,
            r_au=position.value,
            v_km_s=velocity_vector(position.value, speed.value, previous=state.v_km_s),
            speed_km_s=speed.value,
            fallback_used=position.fallback_used or speed.fallback_used,
            approximated=speed.approximated,
        )

    # ----- Control surface -----

    def set_time_speed(self, value: float) -> bool:
        if not math.isfinite(value) or not (0.0 <= value <= self.config.max_time_speed):
            logger.warning("Time speed out of range: %s", value)
            return False
        self.time_speed = value
        return True

    def set_time_speed_from_slider(self, slider_value: float) -> bool:
        if not math.isfinite(slider_value):
            logger.warning("Invalid time speed value: %s", slider_value)
            return False
        return self.set_time_speed(slider_value * TIME_SPEED_SLIDER_MULTIPLIER)

    def set_paused(self, paused: bool) -> None:
        self.paused = bool(paused)

    def toggle_pause(self) -> bool:
        self.paused = not self.paused
        return self.paused

    def select_body(self, key: Optional[str]) -> bool:
        if key is not None and key not in self.states:
            logger.warning("Unknown body: %s", key)
            return False
        self.selected = key
        return True

    def set_show_trails(self, show: bool) -> None:
        self.show_trails = bool(show)
        if not self.show_trails:
            for state in self.states.values():
                state.clear_trail()

    # ----- Queries -----

    @property
    def is_paused(self) -> bool:
        return self.paused

    @property
    def simulation_time_days(self) -> float:
        return self.t_days

    def state(self, key: str) -> BodyState:
        return self.states[key]

    def snapshot(self) -> ClockSnapshot:
        bodies = {
            key: BodySnapshot(
                key=key,
                name=state.elements.name or key,
                r_au=state.r_au,
                v_km_s=state.v_km_s,
                speed_km_s=state.speed_km_s,
                M_rad=state.M_rad,
                trail=tuple(state.trail),
            )
            for key, state in self.states.items()
        }
        return ClockSnapshot(t_days=self.t_days, paused=self.paused, selected=self.selected, bodies=bodies)
