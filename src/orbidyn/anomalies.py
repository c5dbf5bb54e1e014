'''Conversions between true, eccentric and mean anomaly
for elliptical orbits (0 <= e < 1)'''

import numpy as np
from typing import Optional
from .config import config
from .utils import OrbitDomainError, KeplerConvergenceError


def _check_eccentricity(e):
    if not (0.0 <= e < 1.0):
        raise OrbitDomainError(
            f"Anomaly conversions require 0 <= e < 1, got e={e}")


def true_to_eccentric(theta, e):
    """Eccentric anomaly from true anomaly [rad]."""
    _check_eccentricity(e)
    return np.arctan2(np.sqrt(1 - e**2) * np.sin(theta), np.cos(theta) + e)


def eccentric_to_true(E, e):
    """True anomaly from eccentric anomaly [rad]."""
    _check_eccentricity(e)
    return np.arctan2(np.sqrt(1 - e**2) * np.sin(E), np.cos(E) - e)


def eccentric_to_mean(E, e):
    """Mean anomaly from eccentric anomaly (Kepler's equation) [rad]."""
    return E - e * np.sin(E)


def mean_to_eccentric(M: float, e: float, tol: Optional[float] = None,
                      max_iter: Optional[int] = None) -> float:
    """
    Solve Kepler's equation  M = E - e sin(E)  for E via Newton's method.

    Parameters
    ----------
    M : float
        Mean anomaly [rad]
    e : float
        Eccentricity, 0 <= e < 1
    tol : float, optional
        Residual tolerance |E - e sin E - M|, defaults to config.KEPLER_TOL
    max_iter : int, optional
        Maximum number of Newton updates, defaults to config.KEPLER_MAX_ITER

    Returns
    -------
    float
        Eccentric anomaly [rad]

    Raises
    ------
    OrbitDomainError
        If e is outside [0, 1)
    KeplerConvergenceError
        If the residual does not drop below tol within max_iter updates
    """
    _check_eccentricity(e)
    if tol is None:
        tol = config.KEPLER_TOL
    if max_iter is None:
        max_iter = config.KEPLER_MAX_ITER

    E = float(M)
    residual = E - e * np.sin(E) - M
    n_iter = 0
    while abs(residual) >= tol:
        if n_iter >= max_iter:
            raise KeplerConvergenceError(
                f"Kepler's equation did not converge in {max_iter} iterations "
                f"(M={M}, e={e}, residual={residual:.3e})"
            )
        E = E - residual / (1 - e * np.cos(E))
        if not np.isfinite(E):
            raise KeplerConvergenceError(
                f"Kepler's equation iterate became non-finite (M={M}, e={e})")
        residual = E - e * np.sin(E) - M
        n_iter += 1
    return E


def true_to_mean(theta, e):
    """Mean anomaly from true anomaly [rad]."""
    return eccentric_to_mean(true_to_eccentric(theta, e), e)


def mean_to_true(M, e):
    """True anomaly from mean anomaly [rad]."""
    return eccentric_to_true(mean_to_eccentric(M, e), e)
