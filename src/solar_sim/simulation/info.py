"""
Info panel readouts: simulated date and the selected body's numbers.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from solar_sim.core.constants import DAYS_PER_YEAR
from solar_sim.core.frames import norm
from solar_sim.core.log import logger
from solar_sim.simulation.clock import SimulationClock


@dataclass(frozen=True)
class BodyInfo:
    name: str
    distance_au: float
    distance_million_km: float
    speed_km_s: float
    period_yr: float
    period_days: float
    eccentricity: float

    def lines(self) -> list[str]:
        return [
            self.name,
            f"{self.distance_au:.3f} AU ({self.distance_million_km:.2f} million km)",
            f"{self.speed_km_s:.2f} km/s",
            f"{self.period_yr:.2f} Earth years ({self.period_days:.0f} days)",
            f"{self.eccentricity:.3f}",
        ]


def format_sim_date(t_days: float, epoch: datetime, calendar: bool = True) -> str:
    """
    Calendar date (e.g. "October 16, 2026") when the run is anchored to the
    epoch, otherwise elapsed "Year N, Day D". Dates outside years 1..9999
    fall back to the elapsed form.
    """
    if calendar:
        try:
            date = epoch + timedelta(days=t_days)
        except (OverflowError, ValueError):
            logger.debug("Date out of range at t=%s days", t_days)
        else:
            return f"{date.strftime('%B')} {date.day}, {date.year}"
    if not math.isfinite(t_days):
        return "Year ?, Day ?"
    earth_years = t_days / DAYS_PER_YEAR
    years = math.floor(earth_years)
    days = math.floor((earth_years - years) * DAYS_PER_YEAR)
    return f"Year {years}, Day {days}"


def current_date_label(clock: SimulationClock) -> str:
    return format_sim_date(clock.t_days, clock.config.reference_epoch, calendar=clock.config.start_at_current_date)


def selected_body_info(clock: SimulationClock) -> Optional[BodyInfo]:
    if clock.selected is None:
        return None
    state = clock.state(clock.selected)
    elements = state.elements
    distance = norm(state.r_au)
    return BodyInfo(
        name=elements.name or state.key,
        distance_au=distance,
        distance_million_km=distance * clock.config.au_m / 1e9,
        speed_km_s=norm(state.v_km_s),
        period_yr=elements.period_yr,
        period_days=elements.period_days,
        eccentricity=elements.e,
    )
