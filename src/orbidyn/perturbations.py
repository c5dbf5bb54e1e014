'''Perturbing accelerations for near-Earth orbits
J2 oblateness and quadratic atmospheric drag, expressed either as Cartesian
(ECI) accelerations or as radial/transverse/normal (RTN) components for the
element-based equations of motion. All values in m/s².'''

import numpy as np
from .parameters import PhysicalParameters


# ========== FRAME HELPERS ==========
def rtn_basis(r, v):
    """
    Radial, transverse and normal unit vectors of the orbit frame.

    Parameters
    ----------
    r : array_like, shape (3,)
        Position [m]
    v : array_like, shape (3,)
        Velocity [m/s]

    Returns
    -------
    np.ndarray, shape (3, 3)
        Rows are the R, T and N unit vectors expressed in ECI
    """
    r = np.asarray(r, dtype=float)
    v = np.asarray(v, dtype=float)
    r_hat = r / np.linalg.norm(r)
    h = np.cross(r, v)
    n_hat = h / np.linalg.norm(h)
    t_hat = np.cross(n_hat, r_hat)
    return np.vstack([r_hat, t_hat, n_hat])


def rtn_to_cartesian(r, v, u_rtn):
    """Rotate an RTN vector into ECI."""
    return rtn_basis(r, v).T @ np.asarray(u_rtn, dtype=float)


def cartesian_to_rtn(r, v, a):
    """Rotate an ECI vector into RTN."""
    return rtn_basis(r, v) @ np.asarray(a, dtype=float)


# ========== J2 ==========
def j2_acceleration_cartesian(r, params: PhysicalParameters):
    """
    J2 acceleration in ECI for position r.

    a = -(3/2) mu J2 R^2 / r^4 * [(1 - 5 z²/r²) x/r,
                                 (1 - 5 z²/r²) y/r,
                                 (3 - 5 z²/r²) z/r]
    """
    x, y, z = r
    r_mag = np.sqrt(x**2 + y**2 + z**2)
    c = params.mu * params.J2 * params.R**2 / r_mag**4
    zr2 = (z / r_mag)**2
    return -1.5 * c * np.array([
        (1 - 5*zr2) * x / r_mag,
        (1 - 5*zr2) * y / r_mag,
        (3 - 5*zr2) * z / r_mag,
    ])


def j2_perturbation_classical(x_cl, params: PhysicalParameters):
    """
    J2 perturbation in RTN from classical elements [a, e, i, omega, Omega, theta].

    Uses the argument of latitude u = omega + theta, so only the in-plane
    geometry and the inclination enter.
    """
    a, e, i, omega, Omega, theta = x_cl
    p = a * (1 - e**2)
    r = p / (1 + e*np.cos(theta))
    u = omega + theta
    c = params.mu * params.J2 * params.R**2 / r**4
    si, ci = np.sin(i), np.cos(i)
    su, cu = np.sin(u), np.cos(u)
    return np.array([
        -1.5 * c * (1 - 3 * si**2 * su**2),
        -3.0 * c * si**2 * su * cu,
        -3.0 * c * si * ci * su,
    ])


def j2_perturbation_equinoctial(x_eq, params: PhysicalParameters):
    """
    J2 perturbation in RTN from modified equinoctial elements [p, f, g, h, k, L].

    Betts, Practical Methods for Optimal Control, eq. 6.36-6.38.
    """
    p, f, g, h, k, L = x_eq
    w = 1 + f*np.cos(L) + g*np.sin(L)
    r = p / w
    c = params.mu * params.J2 * params.R**2 / r**4
    s4 = (1 + h**2 + k**2)**2
    q = h*np.sin(L) - k*np.cos(L)
    return np.array([
        -1.5 * c * (1 - 12 * q**2 / s4),
        -12.0 * c * q * (h*np.cos(L) + k*np.sin(L)) / s4,
        -6.0 * c * (1 - h**2 - k**2) * q / s4,
    ])


# ========== DRAG ==========
def _drag_factor(params):
    return 0.5 * params.rho * params.C_D * params.A / params.m


def drag_acceleration_cartesian(v, params: PhysicalParameters):
    """Quadratic drag opposing the inertial velocity, -(rho C_D A / 2m) |v| v."""
    v = np.asarray(v, dtype=float)
    return -_drag_factor(params) * np.linalg.norm(v) * v


def drag_perturbation_rtn(v_R, v_T, params: PhysicalParameters):
    """Drag in RTN given the radial and transverse velocity components."""
    k_d = _drag_factor(params)
    v_mag = np.sqrt(v_R**2 + v_T**2)
    return np.array([-k_d * v_mag * v_R, -k_d * v_mag * v_T, 0.0])


def drag_perturbation_classical(x_cl, params: PhysicalParameters):
    a, e, i, omega, Omega, theta = x_cl
    p = a * (1 - e**2)
    sqrt_mu_p = np.sqrt(params.mu / p)
    v_R = sqrt_mu_p * e * np.sin(theta)
    v_T = sqrt_mu_p * (1 + e*np.cos(theta))
    return drag_perturbation_rtn(v_R, v_T, params)


def drag_perturbation_equinoctial(x_eq, params: PhysicalParameters):
    p, f, g, h, k, L = x_eq
    sqrt_mu_p = np.sqrt(params.mu / p)
    v_R = sqrt_mu_p * (f*np.sin(L) - g*np.cos(L))
    v_T = sqrt_mu_p * (1 + f*np.cos(L) + g*np.sin(L))
    return drag_perturbation_rtn(v_R, v_T, params)


# ========== TOTAL GRAVITY ==========
def gravity_acceleration(r, params: PhysicalParameters, include_j2=True):
    """Point-mass plus (optionally) J2 gravitational acceleration in ECI."""
    r = np.asarray(r, dtype=float)
    r_mag = np.linalg.norm(r)
    a = -params.mu * r / r_mag**3
    if include_j2:
        a = a + j2_acceleration_cartesian(r, params)
    return a
