# src/solar_sim/physics/orbit.py

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Generic, List, Optional, TypeVar

from solar_sim.core.constants import AU_M, DAYS_PER_YEAR, G_M3_KG_S2, SECONDS_PER_DAY, SOLAR_MASS_KG
from solar_sim.core.frames import Vector2, is_finite_vec, norm, tangential_unit
from solar_sim.core.log import logger
from solar_sim.physics.gravity import MAX_SOLVER_ECCENTRICITY, solve_keplers_equation, wrap_to_2pi

T = TypeVar("T")

MU_SUN_M3_S2: float = G_M3_KG_S2 * SOLAR_MASS_KG


@dataclass(frozen=True)
class OrbitalElements:
    """
    Heliocentric orbit of one body, in the orbital plane.

    Units:
        a_au: semi-major axis in AU
        e: eccentricity (0<=e<1)
        period_yr: orbital period in Earth years
        mass_kg: body mass in kg (informational; the Sun dominates)
        name: display name
    """
    a_au: float
    e: float
    period_yr: float
    mass_kg: float = 0.0
    name: str = ""

    def __post_init__(self):
        if not (math.isfinite(self.a_au) and self.a_au > 0):
            raise ValueError(f"Semi-major axis must be positive and finite. Got: {self.a_au}")
        if not (0.0 <= self.e < 1.0):
            raise ValueError(f"Only elliptic orbits are supported (0 <= e < 1). Got: {self.e}")
        if not (math.isfinite(self.period_yr) and self.period_yr > 0):
            raise ValueError(f"Orbital period must be positive and finite. Got: {self.period_yr}")
        if not (math.isfinite(self.mass_kg) and self.mass_kg >= 0):
            raise ValueError(f"Mass must be non-negative. Got: {self.mass_kg}")

    @classmethod
    def clamped(cls, a_au: float, e: float, period_yr: float, mass_kg: float = 0.0, name: str = "") -> "OrbitalElements":
        """Build elements, forcing an out-of-range eccentricity into [0, 0.99]."""
        if math.isnan(e):
            raise ValueError("Eccentricity must be a number.")
        if not (0.0 <= e < 1.0):
            logger.warning("Eccentricity %s for %r outside [0, 1), clamping", e, name)
            e = max(0.0, min(MAX_SOLVER_ECCENTRICITY, e))
        return cls(a_au=a_au, e=e, period_yr=period_yr, mass_kg=mass_kg, name=name)

    @property
    def period_days(self) -> float:
        return self.period_yr * DAYS_PER_YEAR

    @property
    def b_au(self) -> float:
        """Semi-minor axis."""
        return self.a_au * math.sqrt(1.0 - self.e * self.e)


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """
    Value plus whether a documented fallback replaced the real result.
    approximated marks results that are usable but not physically exact.
    """
    value: T
    fallback_used: bool = False
    approximated: bool = False


def mean_anomaly_at(period_yr: float, t_days: float) -> float:
    """
    M = 2π t / T, wrapped to [0, 2π).
    Raises ValueError for a non-positive or non-finite period.
    """
    period_days = period_yr * DAYS_PER_YEAR
    if not (math.isfinite(period_days) and period_days > 0):
        raise ValueError(f"Invalid period: {period_yr}")
    return wrap_to_2pi(2.0 * math.pi * t_days / period_days)


def _fallback_position(a_au: float) -> Vector2:
    if isinstance(a_au, (int, float)) and math.isfinite(a_au) and a_au > 0:
        return (float(a_au), 0.0)
    return (1.0, 0.0)


def compute_position_raw(a_au: float, e: float, M_rad: float) -> Outcome[Vector2]:
    """
    Position in the orbital plane (AU) with the Sun at the origin focus:
        x = a (cos E - e)
        y = a sqrt(1 - e^2) sin E

    Bad inputs give (a, 0), or (1, 0) when a itself is unusable.
    """
    if not (math.isfinite(a_au) and a_au > 0):
        logger.warning("Invalid semi-major axis: %s", a_au)
        return Outcome(_fallback_position(a_au), fallback_used=True)
    if not (0.0 <= e < 1.0):
        logger.warning("Invalid eccentricity: %s", e)
        return Outcome(_fallback_position(a_au), fallback_used=True)
    if not math.isfinite(M_rad):
        logger.warning("Invalid mean anomaly: %s", M_rad)
        return Outcome(_fallback_position(a_au), fallback_used=True)

    solution = solve_keplers_equation(M_rad, e)
    E = solution.E_rad

    x = a_au * (math.cos(E) - e)
    y = a_au * math.sqrt(1.0 - e * e) * math.sin(E)

    if not is_finite_vec((x, y)):
        logger.warning("Non-finite position for a=%s e=%s M=%s", a_au, e, M_rad)
        return Outcome(_fallback_position(a_au), fallback_used=True)

    # best-effort E from a non-converged or abandoned solve still yields a position
    return Outcome((x, y), fallback_used=solution.fallback_used)


def compute_position(elements: OrbitalElements, M_rad: float) -> Outcome[Vector2]:
    return compute_position_raw(elements.a_au, elements.e, M_rad)


def compute_speed_raw(a_au: float, r_vec_au: Vector2, mu_m3_s2: float = MU_SUN_M3_S2, au_m: float = AU_M) -> Outcome[float]:
    """
    Vis-viva: v^2 = mu (2/r - 1/a), returned in km/s.

    Non-positive or non-finite r or a give 0. A negative v^2 (only from
    rounding at the domain boundary) is replaced by |v^2| and flagged as
    approximated.
    """
    a = a_au * au_m
    r = norm(r_vec_au) * au_m

    if not (math.isfinite(r) and r > 0):
        logger.warning("Invalid distance: %s", r)
        return Outcome(0.0, fallback_used=True)
    if not (math.isfinite(a) and a > 0):
        logger.warning("Invalid semi-major axis: %s", a)
        return Outcome(0.0, fallback_used=True)

    v_squared = mu_m3_s2 * (2.0 / r - 1.0 / a)

    approximated = False
    if v_squared < 0:
        logger.warning("Negative value in vis-viva equation (%s), using absolute value", v_squared)
        approximated = True

    v = math.sqrt(abs(v_squared))
    if not math.isfinite(v):
        logger.warning("Non-finite speed for a=%s r=%s", a, r)
        return Outcome(0.0, fallback_used=True)

    return Outcome(v / 1000.0, approximated=approximated)


def compute_speed(elements: OrbitalElements, r_vec_au: Vector2, mu_m3_s2: float = MU_SUN_M3_S2, au_m: float = AU_M) -> Outcome[float]:
    return compute_speed_raw(elements.a_au, r_vec_au, mu_m3_s2, au_m)


def velocity_vector(r_vec_au: Vector2, speed_km_s: float, previous: Optional[Vector2] = None) -> Vector2:
    """
    Velocity (km/s) tangential to the radius vector, counterclockwise.
    At r = 0 the direction is undefined and the previous velocity is kept.
    """
    if norm(r_vec_au) == 0:
        return previous if previous is not None else (0.0, 0.0)
    ux, uy = tangential_unit(r_vec_au)
    return (ux * speed_km_s, uy * speed_km_s)


def kepler_third_law_period(elements: OrbitalElements, mu_m3_s2: float = MU_SUN_M3_S2, au_m: float = AU_M) -> float:
    """T = 2π sqrt(a^3 / mu), in years."""
    a = elements.a_au * au_m
    T_s = 2.0 * math.pi * math.sqrt(a ** 3 / mu_m3_s2)
    return T_s / (DAYS_PER_YEAR * SECONDS_PER_DAY)


def perihelion(elements: OrbitalElements) -> Vector2:
    return (elements.a_au * (1.0 - elements.e), 0.0)


def aphelion(elements: OrbitalElements) -> Vector2:
    return (-elements.a_au * (1.0 + elements.e), 0.0)


def orbit_ellipse(elements: OrbitalElements, n_points: int = 181) -> List[Vector2]:
    """
    Closed outline of the orbit: ellipse centred at (-a e, 0) so the Sun
    sits at a focus. First and last points coincide.
    """
    if n_points < 3:
        raise ValueError("n_points must be >= 3.")
    a = elements.a_au
    b = elements.b_au
    c = a * elements.e
    out: List[Vector2] = []
    for i in range(n_points):
        theta = 2.0 * math.pi * i / (n_points - 1)
        out.append((a * math.cos(theta) - c, b * math.sin(theta)))
    return out
