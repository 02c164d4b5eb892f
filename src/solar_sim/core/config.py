"""
Simulation configuration: physical constants, defaults, and the planet table.

Planet data are NASA planetary fact sheet values:
  - a_au: semi-major axis (AU)
  - e: orbital eccentricity (0 = circle, <1 = ellipse)
  - period_yr: orbital period (Earth years)
  - mass_kg: mass (kg)

JSON layout accepted by load_config_json / config_from_dict
(every key optional except that at least one usable body must remain):
{
  "gravitational_constant": 6.6743e-11,
  "au_m": 1.496e11,
  "solar_mass_kg": 1.989e30,
  "time_speed": 0.1,
  "max_trail_length": 100,
  "reference_epoch": "2000-01-01T12:00:00+00:00",
  "start_at_current_date": true,
  "show_trails": false,
  "bodies": {
    "earth": {"name": "Earth", "a_au": 1.0, "e": 0.017, "period_yr": 1.0, "mass_kg": 5.972e24}
  }
}
"""
from __future__ import annotations

import json
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict

from solar_sim.core.constants import AU_M, G_M3_KG_S2, J2000_EPOCH, SOLAR_MASS_KG
from solar_sim.core.log import logger
from solar_sim.physics.orbit import OrbitalElements


class ConfigError(ValueError):
    """Configuration cannot produce a runnable simulation."""


PLANETS: Dict[str, OrbitalElements] = {
    "mercury": OrbitalElements(name="Mercury", a_au=0.387, e=0.206, period_yr=0.241, mass_kg=3.285e23),
    "venus": OrbitalElements(name="Venus", a_au=0.723, e=0.007, period_yr=0.615, mass_kg=4.867e24),
    "earth": OrbitalElements(name="Earth", a_au=1.0, e=0.017, period_yr=1.0, mass_kg=5.972e24),
    "mars": OrbitalElements(name="Mars", a_au=1.524, e=0.093, period_yr=1.881, mass_kg=6.39e23),
    "jupiter": OrbitalElements(name="Jupiter", a_au=5.203, e=0.048, period_yr=11.86, mass_kg=1.898e27),
    "saturn": OrbitalElements(name="Saturn", a_au=9.537, e=0.056, period_yr=29.46, mass_kg=5.683e26),
    "uranus": OrbitalElements(name="Uranus", a_au=19.191, e=0.046, period_yr=84.01, mass_kg=8.681e25),
    "neptune": OrbitalElements(name="Neptune", a_au=30.069, e=0.010, period_yr=164.79, mass_kg=1.024e26),
}

# UI slider value -> actual days-per-tick multiplier
TIME_SPEED_SLIDER_MULTIPLIER: float = 0.1


@dataclass(frozen=True)
class SimulationConfig:
    gravitational_constant: float = G_M3_KG_S2
    au_m: float = AU_M
    solar_mass_kg: float = SOLAR_MASS_KG
    time_speed: float = 0.1
    max_time_speed: float = 100.0
    max_trail_length: int = 100
    reference_epoch: datetime = J2000_EPOCH
    start_at_current_date: bool = True
    show_trails: bool = False
    bodies: Dict[str, OrbitalElements] = field(default_factory=lambda: dict(PLANETS))

    def __post_init__(self):
        for label, value in (
            ("gravitational_constant", self.gravitational_constant),
            ("au_m", self.au_m),
            ("solar_mass_kg", self.solar_mass_kg),
        ):
            if not (math.isfinite(value) and value > 0):
                raise ConfigError(f"{label} must be positive and finite. Got: {value}")
        if not (math.isfinite(self.time_speed) and 0.0 <= self.time_speed <= self.max_time_speed):
            raise ConfigError(f"time_speed must be in range [0, {self.max_time_speed}]. Got: {self.time_speed}")
        if self.max_trail_length < 0:
            raise ConfigError(f"max_trail_length must be non-negative. Got: {self.max_trail_length}")
        if self.reference_epoch.tzinfo is None:
            raise ConfigError("reference_epoch must be timezone-aware.")

    @property
    def mu(self) -> float:
        return self.gravitational_constant * self.solar_mass_kg


def _elements_from_dict(key: str, data: Dict[str, Any]) -> OrbitalElements:
    return OrbitalElements.clamped(
        a_au=float(data["a_au"]),
        e=float(data.get("e", 0.0)),
        period_yr=float(data["period_yr"]),
        mass_kg=float(data.get("mass_kg", 0.0)),
        name=str(data.get("name", key.capitalize())),
    )


def _parse_epoch(value: Any) -> datetime:
    epoch = datetime.fromisoformat(str(value))
    if epoch.tzinfo is None:
        epoch = epoch.replace(tzinfo=timezone.utc)
    return epoch


def config_from_dict(data: Dict[str, Any]) -> SimulationConfig:
    """
    Build a SimulationConfig from a plain mapping.
    Bodies with unusable numbers are skipped; none left is a ConfigError.
    """
    bodies: Dict[str, OrbitalElements] = {}
    raw_bodies = data.get("bodies")
    if raw_bodies is None:
        bodies = dict(PLANETS)
    else:
        for key, body in raw_bodies.items():
            try:
                bodies[key] = _elements_from_dict(key, body)
            except (KeyError, TypeError, ValueError) as exc:
                logger.error("Skipping body %r: %s", key, exc)

    if not bodies:
        raise ConfigError("No usable bodies in configuration.")

    kwargs: Dict[str, Any] = {"bodies": bodies}
    for key in ("gravitational_constant", "au_m", "solar_mass_kg", "time_speed", "max_time_speed"):
        if key in data:
            kwargs[key] = float(data[key])
    if "max_trail_length" in data:
        kwargs["max_trail_length"] = int(data["max_trail_length"])
    for key in ("start_at_current_date", "show_trails"):
        if key in data:
            kwargs[key] = bool(data[key])
    if "reference_epoch" in data:
        kwargs["reference_epoch"] = _parse_epoch(data["reference_epoch"])

    return SimulationConfig(**kwargs)


def load_config_json(path: str | Path) -> SimulationConfig:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a JSON object in {path}.")
    return config_from_dict(data)
