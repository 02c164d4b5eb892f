# Two-body / Kepler's equation

from __future__ import annotations

import math
from dataclasses import dataclass

from solar_sim.core.log import logger

# Largest eccentricity the solver will work with after clamping
MAX_SOLVER_ECCENTRICITY: float = 0.99

# Below this |1 - e cos E| the Newton step is abandoned
MIN_DERIVATIVE: float = 1e-10


def wrap_to_2pi(angle_rad: float) -> float:
    """Wrap angle to [0, 2π)."""
    two_pi = 2.0 * math.pi
    return angle_rad % two_pi


@dataclass(frozen=True)
class KeplerSolution:
    """
    Outcome of one Kepler solve.

    E_rad: eccentric anomaly (rad), not wrapped
    iterations: Newton steps taken
    converged: last step was within tolerance
    early_exit: iteration stopped on a near-zero derivative
    clamped: eccentricity was forced into [0, 0.99]
    degenerate: NaN input, E_rad is the 0 fallback
    """
    E_rad: float
    iterations: int = 0
    converged: bool = True
    early_exit: bool = False
    clamped: bool = False
    degenerate: bool = False

    @property
    def fallback_used(self) -> bool:
        return self.degenerate or self.clamped or self.early_exit or not self.converged


def solve_keplers_equation(M_rad: float, e: float, tol: float = 1e-6, max_iter: int = 100) -> KeplerSolution:
    """
    Solve Kepler's equation for elliptic orbits:
        M = E - e sin(E)
    using Newton-Raphson with initial guess E0 = M.

    Never raises. NaN inputs or an infinite M give E = 0, out-of-range
    eccentricity is clamped into [0, 0.99], and running out of iterations
    returns the last iterate as a best effort.

    Args:
        M_rad: Mean anomaly (rad)
        e: eccentricity (0 <= e < 1)
        tol: convergence tolerance on |dE|
        max_iter: iteration cap

    Returns:
        KeplerSolution
    """
    if not math.isfinite(M_rad) or math.isnan(e):
        logger.warning("Invalid input to Kepler solver: M=%s e=%s", M_rad, e)
        return KeplerSolution(E_rad=0.0, converged=False, degenerate=True)

    clamped = False
    if not (0.0 <= e < 1.0):
        logger.warning("Eccentricity %s outside [0, 1), clamping", e)
        e = max(0.0, min(MAX_SOLVER_ECCENTRICITY, e))
        clamped = True

    E = M_rad
    if e == 0.0:
        return KeplerSolution(E_rad=E, clamped=clamped)

    # |E - M| = e|sin E| <= e, so the root is always inside [M - e, M + e].
    # Steps that would leave the bracket bisect instead; at high e a raw
    # Newton step from E0 = M can overshoot past pi and wander.
    lo = M_rad - e
    hi = M_rad + e

    for i in range(1, max_iter + 1):
        f = E - e * math.sin(E) - M_rad
        if f == 0.0:
            return KeplerSolution(E_rad=E, iterations=i - 1, clamped=clamped)

        fp = 1.0 - e * math.cos(E)
        if abs(fp) < MIN_DERIVATIVE:
            logger.warning("Near-zero derivative in Kepler solver (M=%s, e=%s)", M_rad, e)
            return KeplerSolution(E_rad=E, iterations=i - 1, converged=False, early_exit=True, clamped=clamped)

        if f > 0.0:
            hi = E
        else:
            lo = E

        E_next = E - f / fp
        if not (lo < E_next < hi):
            E_next = 0.5 * (lo + hi)

        dE = E - E_next
        E = E_next
        if abs(dE) <= tol:
            return KeplerSolution(E_rad=E, iterations=i, clamped=clamped)

    logger.warning("Kepler solver did not converge after %d iterations (M=%s, e=%s)", max_iter, M_rad, e)
    return KeplerSolution(E_rad=E, iterations=max_iter, converged=False, clamped=clamped)
