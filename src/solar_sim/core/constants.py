from __future__ import annotations

from datetime import datetime, timezone

# Gravitational constant in m^3/(kg s^2)
G_M3_KG_S2: float = 6.67430e-11

# Astronomical Unit in meters (Earth-Sun distance)
AU_M: float = 1.496e11

# Mass of the Sun in kg
SOLAR_MASS_KG: float = 1.989e30

DAYS_PER_YEAR: float = 365.25
SECONDS_PER_DAY: float = 86400.0

# J2000.0 reference epoch for orbital calculations
J2000_EPOCH: datetime = datetime(2000, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
