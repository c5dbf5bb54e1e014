'''Fixed-step fourth-order Runge-Kutta integration'''

import logging
import math

import numpy as np

from .dynamics import Dynamics

logger = logging.getLogger(__name__)


def rk4_step(dynamics: Dynamics, state, params, t, h):
    """
    Advance one classical RK4 step from (state, t) to t + h.

    Parameters
    ----------
    dynamics : Dynamics
        dynamics(state, params, t) -> state derivative
    state : np.ndarray
        Current state
    params : PhysicalParameters
    t : float
        Current time [s]
    h : float
        Step size [s], may be negative

    Returns
    -------
    np.ndarray
        New state array
    """
    k1 = dynamics(state, params, t)
    k2 = dynamics(state + (h / 2) * k1, params, t + h / 2)
    k3 = dynamics(state + (h / 2) * k2, params, t + h / 2)
    k4 = dynamics(state + h * k3, params, t + h)
    return state + (h / 6) * (k1 + 2 * k2 + 2 * k3 + k4)


def integrate_rk4(dynamics: Dynamics, x0, params, t_start, t_end, h):
    """
    Integrate with a fixed RK4 step from t_start towards t_end.

    The number of samples is N = round((t_end - t_start) / h) + 1, with
    Python's round-half-to-even. The last sample time is
    t_start + h*(N-1), which differs from t_end when h does not divide the
    span. Exceptions raised by the dynamics propagate and abort the run.

    Parameters
    ----------
    dynamics : Dynamics
        dynamics(state, params, t) -> state derivative
    x0 : array_like
        Initial state, stored as states[0]
    params : PhysicalParameters
    t_start, t_end : float
        Time span [s]; t_end < t_start with h < 0 integrates backward
    h : float
        Step size [s], nonzero

    Returns
    -------
    states : np.ndarray, shape (N, 6)
        One state per row
    times : np.ndarray, shape (N,)
        times[i] = t_start + h*i
    """
    for name, value in (('t_start', t_start), ('t_end', t_end), ('h', h)):
        if not math.isfinite(value):
            raise ValueError(f"{name} must be finite, got {value}")
    if h == 0:
        raise ValueError("Step size h must be nonzero")
    x0 = np.array(x0, dtype=float)
    if not np.all(np.isfinite(x0)):
        raise ValueError("Initial state contains NaN or Inf")

    n_steps = round((t_end - t_start) / h)
    if n_steps < 0:
        raise ValueError(
            f"Step h={h} points away from t_end={t_end} (t_start={t_start}); "
            f"use a negative step to integrate backward")
    N = n_steps + 1
    logger.debug("RK4: %d samples over [%g, %g] s with h=%g s",
                 N, t_start, t_start + h * n_steps, h)

    times = t_start + h * np.arange(N)
    states = np.empty((N, x0.size))
    states[0] = x0
    for i in range(1, N):
        states[i] = rk4_step(dynamics, states[i - 1], params, times[i - 1], h)
    return states, times
