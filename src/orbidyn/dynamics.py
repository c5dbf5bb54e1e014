'''Equations of motion for the three propagated representations
Cartesian ECI, classical elements (Gauss variational equations) and
modified equinoctial elements. Every function maps
(state, params, t) -> d(state)/dt and is safe to call concurrently.'''

import numpy as np
from typing import Callable, Iterable, Optional, Protocol, Sequence, Union

from .config import config
from .parameters import PhysicalParameters
from .orbital_elements import StateType, parse_state_type
from .utils import SingularElementsError
from .perturbations import (
    gravity_acceleration,
    j2_perturbation_classical,
    j2_perturbation_equinoctial,
    drag_acceleration_cartesian,
    drag_perturbation_classical,
    drag_perturbation_equinoctial,
    rtn_to_cartesian,
)

ALL_PERTURBATIONS = ("J2", "drag")

ExtraPerturbation = Union[Sequence[float], Callable[[np.ndarray, PhysicalParameters, float], Sequence[float]]]


class Dynamics(Protocol):
    """Callable mapping (state, params, t) to the state time derivative."""
    def __call__(self, state: np.ndarray, params: PhysicalParameters,
                 t: float) -> np.ndarray: ...


def _check_perturbations(perturbations: Iterable[str]) -> frozenset:
    selected = frozenset(perturbations)
    unknown = selected - set(ALL_PERTURBATIONS)
    if unknown:
        raise ValueError(
            f"Unknown perturbation(s) {sorted(unknown)}. "
            f"Valid options: {list(ALL_PERTURBATIONS)}"
        )
    return selected


def _extra_rtn(extra, state, params, t):
    if extra is None:
        return np.zeros(3)
    u = extra(state, params, t) if callable(extra) else extra
    u = np.asarray(u, dtype=float)
    if u.shape != (3,):
        raise ValueError(f"Extra perturbation must be a 3-vector (u_R, u_T, u_N), got shape {u.shape}")
    return u


def cartesian_eom(state, params: PhysicalParameters, t,
                  perturbations=ALL_PERTURBATIONS,
                  extra: Optional[ExtraPerturbation] = None):
    """
    Equations of motion in Cartesian ECI coordinates.

    Parameters
    ----------
    state : array_like
        [x, y, z, vx, vy, vz] in m, m/s
    params : PhysicalParameters
    t : float
        Time [s], passed through to a callable extra perturbation
    perturbations : iterable of str, optional
        Subset of ("J2", "drag") to include
    extra : 3-vector or callable, optional
        Additional perturbing acceleration in RTN, rotated into ECI

    Returns
    -------
    np.ndarray
        [vx, vy, vz, ax, ay, az]
    """
    selected = _check_perturbations(perturbations)
    state = np.asarray(state, dtype=float)
    r = state[:3]
    v = state[3:]
    a = gravity_acceleration(r, params, include_j2="J2" in selected)
    if "drag" in selected:
        a = a + drag_acceleration_cartesian(v, params)
    if extra is not None:
        a = a + rtn_to_cartesian(r, v, _extra_rtn(extra, state, params, t))
    return np.concatenate([v, a])


def classical_eom(state, params: PhysicalParameters, t,
                  perturbations=ALL_PERTURBATIONS,
                  extra: Optional[ExtraPerturbation] = None):
    """
    Gauss variational equations for classical elements [a, e, i, omega, Omega, theta].

    Singular for circular (e = 0) and equatorial (sin i = 0) orbits; those
    states raise SingularElementsError, use the equinoctial representation
    instead. Reference: Schaub & Junkins, Analytical Mechanics of Space
    Systems, eq. 12.31.
    """
    selected = _check_perturbations(perturbations)
    state = np.asarray(state, dtype=float)
    a, e, i, omega, Omega, theta = state

    threshold = config.SINGULARITY_THRESHOLD
    if e <= threshold:
        raise SingularElementsError(
            f"Classical-element dynamics are singular for circular orbits "
            f"(e={e}); use the equinoctial representation")
    if abs(np.sin(i)) <= threshold:
        raise SingularElementsError(
            f"Classical-element dynamics are singular for equatorial orbits "
            f"(i={i}); use the equinoctial representation")

    mu = params.mu
    p = a * (1 - e**2)
    h = np.sqrt(mu * p)
    r = p / (1 + e*np.cos(theta))

    u = np.zeros(3)
    if "J2" in selected:
        u += j2_perturbation_classical(state, params)
    if "drag" in selected:
        u += drag_perturbation_classical(state, params)
    u += _extra_rtn(extra, state, params, t)
    u_R, u_T, u_N = u

    st, ct = np.sin(theta), np.cos(theta)
    s_arg, c_arg = np.sin(theta + omega), np.cos(theta + omega)

    a_dot = (2 * a**2 / h) * (e * st * u_R + (p / r) * u_T)
    e_dot = (1 / h) * (p * st * u_R + ((p + r) * ct + r * e) * u_T)
    i_dot = r * c_arg * u_N / h
    omega_dot = ((1 / (e * h)) * (-p * ct * u_R + (p + r) * st * u_T)
                 - r * s_arg * np.cos(i) * u_N / (h * np.sin(i)))
    Omega_dot = r * s_arg * u_N / (h * np.sin(i))
    theta_dot = h / r**2 + (1 / (e * h)) * (p * ct * u_R - (p + r) * st * u_T)
    return np.array([a_dot, e_dot, i_dot, omega_dot, Omega_dot, theta_dot])


def equinoctial_eom(state, params: PhysicalParameters, t,
                    perturbations=ALL_PERTURBATIONS,
                    extra: Optional[ExtraPerturbation] = None):
    """
    Equations of motion for modified equinoctial elements [p, f, g, h, k, L].

    Nonsingular for circular and equatorial orbits. Betts, Practical
    Methods for Optimal Control, eq. 6.35.
    """
    selected = _check_perturbations(perturbations)
    state = np.asarray(state, dtype=float)
    p, f, g, h, k, L = state

    mu = params.mu
    sL, cL = np.sin(L), np.cos(L)
    w = 1 + f*cL + g*sL
    s2 = 1 + h**2 + k**2
    q = h*sL - k*cL
    sigma = np.sqrt(p / mu)

    u = np.zeros(3)
    if "J2" in selected:
        u += j2_perturbation_equinoctial(state, params)
    if "drag" in selected:
        u += drag_perturbation_equinoctial(state, params)
    u += _extra_rtn(extra, state, params, t)
    u_R, u_T, u_N = u

    p_dot = 2 * p * sigma * u_T / w
    f_dot = sigma * (u_R * sL + ((w + 1) * cL + f) * u_T / w - g * q * u_N / w)
    g_dot = sigma * (-u_R * cL + ((w + 1) * sL + g) * u_T / w + f * q * u_N / w)
    h_dot = sigma * s2 * cL * u_N / (2 * w)
    k_dot = sigma * s2 * sL * u_N / (2 * w)
    L_dot = np.sqrt(mu * p) * (w / p)**2 + sigma * q * u_N / w
    return np.array([p_dot, f_dot, g_dot, h_dot, k_dot, L_dot])


DYNAMICS = {
    StateType.CARTESIAN: cartesian_eom,
    StateType.CLASSICAL: classical_eom,
    StateType.EQUINOCTIAL: equinoctial_eom,
}


def get_dynamics(state_type):
    """Equations of motion for a propagated representation"""
    state_type = parse_state_type(state_type)
    if state_type not in DYNAMICS:
        raise ValueError(
            f"No equations of motion for {state_type.name.lower()} states. "
            f"Propagate in one of: {[t.name.lower() for t in DYNAMICS]}")
    return DYNAMICS[state_type]


def specific_mechanical_energy(x_cart, params: PhysicalParameters, include_j2=True):
    """
    Specific mechanical energy of a Cartesian state [J/kg].

    E = v²/2 - mu/r - U_J2, with the J2 disturbing potential
    U_J2 = -(mu/r) J2 (R/r)² P2(z/r), P2(s) = (3s² - 1)/2.
    Conserved by the J2-only dynamics.
    """
    x_cart = np.asarray(x_cart, dtype=float)
    r_vec = x_cart[:3]
    v_vec = x_cart[3:]
    r = np.linalg.norm(r_vec)
    energy = 0.5 * np.dot(v_vec, v_vec) - params.mu / r
    if include_j2:
        s = r_vec[2] / r
        U_J2 = -(params.mu / r) * params.J2 * (params.R / r)**2 * 0.5 * (3 * s**2 - 1)
        energy -= U_J2
    return energy
