'''Pure transformations between orbit state representations
Cartesian [x;y;z;vx;vy;vz], classical [a;e;i;omega;Omega;theta],
modified equinoctial [p;f;g;h;k;L] and cylindrical [r;theta;h;r_dot;theta_dot;h_dot]
plus unit scaling helpers. All functions return new arrays.'''

import numpy as np
from .config import config
from .anomalies import true_to_eccentric
from .utils import OrbitDomainError

TWO_PI = 2.0 * np.pi


def wrap_to_positive_2pi(angle):
    """
    Wrap an angle (or array of angles) into [0, 2pi).

    Uses the positive remainder, so -0.1 maps to 2pi - 0.1 rather than
    staying negative. A remainder that rounds up to exactly 2pi folds to 0.
    """
    wrapped = np.mod(angle, TWO_PI)
    return np.where(wrapped >= TWO_PI, wrapped - TWO_PI, wrapped)[()]


# ========== DOMAIN CHECKS ==========
def _as_state(x, name="state"):
    x = np.array(x, dtype=float)
    if x.shape != (6,):
        raise ValueError(f"{name} must be a 6-element vector, got shape {x.shape}")
    return x


def _check_classical(a, e, i):
    if not (0.0 <= e < 1.0):
        raise OrbitDomainError(
            f"Bound elliptical orbit requires 0 <= e < 1, got e={e}")
    if a <= 0:
        raise OrbitDomainError(
            f"Elliptic orbit requires positive semi-major axis, got a={a}")
    if not (0.0 <= i <= np.pi):
        raise OrbitDomainError(f"Inclination must lie in [0, pi], got i={i}")


def _check_equinoctial(p, f, g):
    if p <= 0:
        raise OrbitDomainError(
            f"Semi-latus rectum must be positive, got p={p}")
    if f**2 + g**2 >= 1.0:
        raise OrbitDomainError(
            f"Bound elliptical orbit requires f^2 + g^2 < 1, "
            f"got {f**2 + g**2}")


def _is_approx(a, b, atol, rtol):
    # tolerance scales with the larger magnitude
    return abs(a - b) <= max(atol, rtol * max(abs(a), abs(b)))


# ========== CLASSICAL <-> EQUINOCTIAL ==========
def classical_to_equinoctial(x_cl):
    """
    Convert classical elements to modified equinoctial elements.

    Defined according to Walker et al, Celestial Mechanics, v.36, pp.409.
    True longitude L is returned unwrapped.
    """
    a, e, i, omega, Omega, theta = _as_state(x_cl, "classical elements")
    _check_classical(a, e, i)
    p = a*(1 - e**2)
    f = e*np.cos(omega + Omega)
    g = e*np.sin(omega + Omega)
    h = np.tan(i/2)*np.cos(Omega)
    k = np.tan(i/2)*np.sin(Omega)
    L = Omega + omega + theta
    return np.array([p, f, g, h, k, L])


def equinoctial_to_classical(x_eq):
    """
    Convert modified equinoctial elements to classical elements.
    Uses the prograde formulation (singularity at i = 180°).
    """
    p, f, g, h, k, L = _as_state(x_eq, "equinoctial elements")
    _check_equinoctial(p, f, g)
    a = p/(1 - f**2 - g**2)
    e = np.sqrt(f**2 + g**2)
    i = np.arctan2(2*np.sqrt(h**2 + k**2), 1 - h**2 - k**2)
    omega = np.arctan2(g*h - f*k, f*h + g*k)
    Omega = np.arctan2(k, h)
    theta = L - (Omega + omega)
    return np.array([a, e, i,
                     wrap_to_positive_2pi(omega),
                     wrap_to_positive_2pi(Omega),
                     wrap_to_positive_2pi(theta)])


# ========== ELEMENTS -> CARTESIAN ==========
def perifocal_to_inertial_matrix(omega, Omega, i):
    """3x2 matrix whose columns are the perifocal P and Q axes in the inertial frame."""
    cO, sO = np.cos(Omega), np.sin(Omega)
    cw, sw = np.cos(omega), np.sin(omega)
    ci, si = np.cos(i), np.sin(i)
    return np.array([
        [cO*cw - sO*sw*ci, -cO*sw - sO*cw*ci],
        [sO*cw + cO*sw*ci, -sO*sw + cO*cw*ci],
        [sw*si,             cw*si],
    ])


def classical_to_cartesian(x_cl, params):
    """
    Convert classical elements to a Cartesian state vector.

    Locates the satellite in the orbit plane through the eccentric anomaly
    and rotates the in-plane position and velocity into the inertial frame.
    Reference: Markley & Crassidis, Fundamentals of Spacecraft Attitude
    Determination and Control, pg 380.
    """
    a, e, i, omega, Omega, theta = _as_state(x_cl, "classical elements")
    _check_classical(a, e, i)
    A = perifocal_to_inertial_matrix(omega, Omega, i)

    n = np.sqrt(params.mu/a**3)
    E = true_to_eccentric(theta, e)
    r_mag = a*(1 - e*np.cos(E))
    # position and velocity in the perifocal frame
    r_peri = np.array([a*(np.cos(E) - e), a*np.sqrt(1 - e**2)*np.sin(E)])
    v_peri = (n*a**2/r_mag) * np.array([-np.sin(E), np.sqrt(1 - e**2)*np.cos(E)])
    return np.concatenate([A @ r_peri, A @ v_peri])


def equinoctial_to_cartesian(x_eq, params):
    """
    Convert modified equinoctial elements to a Cartesian state vector.
    Closed form, no anomaly solve required.
    """
    p, f, g, h, k, L = _as_state(x_eq, "equinoctial elements")
    _check_equinoctial(p, f, g)
    # define intermediate quantities
    asqr = h**2 - k**2
    ssqr = 1 + h**2 + k**2
    w = 1 + f*np.cos(L) + g*np.sin(L)
    r = p/w
    sqrt_mu_p = np.sqrt(params.mu/p)
    cL, sL = np.cos(L), np.sin(L)
    #map to Cartesian state
    r1 = (r/ssqr)*(cL + asqr*cL + 2*h*k*sL)
    r2 = (r/ssqr)*(sL - asqr*sL + 2*h*k*cL)
    r3 = ((2*r)/ssqr)*(h*sL - k*cL)
    v1 = -(1/ssqr)*sqrt_mu_p*(sL + asqr*sL - 2*h*k*cL + g - 2*f*h*k + asqr*g)
    v2 = -(1/ssqr)*sqrt_mu_p*(-cL + asqr*cL + 2*h*k*sL - f + 2*g*h*k + asqr*f)
    v3 = (2/ssqr)*sqrt_mu_p*(h*cL + k*sL + f*h + g*k)
    return np.array([r1, r2, r3, v1, v2, v3])


# ========== CARTESIAN -> ELEMENTS ==========
def cartesian_to_classical(x, params):
    """
    Convert a Cartesian state vector to classical elements.

    Every angle is recovered with a two-argument arctangent and wrapped into
    [0, 2pi). When the semi-major axis and semi-latus rectum agree to within
    config.NEAR_CIRCULAR_ATOL / NEAR_CIRCULAR_RTOL the latus rectum is set
    equal to the semi-major axis, so 1 - p/a cannot go slightly negative for
    near-circular orbits.
    """
    x = _as_state(x, "Cartesian state")
    rvec = x[:3]
    vvec = x[3:]
    r_mag = np.linalg.norm(rvec)
    if r_mag == 0:
        raise OrbitDomainError("Position vector must be nonzero")
    # angular momentum h = r × v
    hvec = np.cross(rvec, vvec)
    h_mag = np.linalg.norm(hvec)
    if h_mag == 0:
        raise OrbitDomainError(
            "Zero angular momentum (rectilinear motion) has no orbital elements")
    W = hvec/h_mag

    i = np.arctan2(np.sqrt(W[0]**2 + W[1]**2), W[2])
    Omega = np.arctan2(W[0], -W[1])

    p = h_mag**2/params.mu
    inv_a = 2.0/r_mag - np.dot(vvec, vvec)/params.mu
    if inv_a <= 0:
        raise OrbitDomainError(
            f"State is not a bound orbit (specific energy >= 0, 1/a={inv_a})")
    a = 1.0/inv_a

    # numerical stability for circular/near circular orbits
    if _is_approx(a, p, config.NEAR_CIRCULAR_ATOL, config.NEAR_CIRCULAR_RTOL):
        p = a
    if p > a:
        raise OrbitDomainError(
            f"Semi-latus rectum exceeds semi-major axis (p={p}, a={a})")

    n = np.sqrt(params.mu/a**3)
    e = np.sqrt(1 - p/a)
    E = np.arctan2(np.dot(rvec, vvec)/(n*a**2), 1 - r_mag/a)
    # argument of latitude measured from the line of nodes
    nhat = np.array([np.cos(Omega), np.sin(Omega), 0.0])
    u = np.arctan2(np.dot(rvec, np.cross(W, nhat)), np.dot(rvec, nhat))
    theta = np.arctan2(np.sqrt(1 - e**2)*np.sin(E), np.cos(E) - e)
    omega = u - theta

    return np.array([a, e, i,
                     wrap_to_positive_2pi(omega),
                     wrap_to_positive_2pi(Omega),
                     wrap_to_positive_2pi(theta)])


def cartesian_to_equinoctial(x, params):
    """
    Convert a Cartesian state vector to modified equinoctial elements.
    Routed through classical elements, so circular and equatorial states
    behave exactly as in cartesian_to_classical.
    """
    return classical_to_equinoctial(cartesian_to_classical(x, params))


# ========== CYLINDRICAL <-> CARTESIAN ==========
def position_cartesian_to_cylindrical(pos):
    x, y, z = pos
    r = np.sqrt(x**2 + y**2)
    theta = np.arctan2(y, x)
    return np.array([r, theta, z])


def velocity_cartesian_to_cylindrical(pos, vel):
    x, y, z = pos
    xd, yd, zd = vel
    rho_sq = x**2 + y**2
    rd = (x*xd + y*yd)/np.sqrt(rho_sq)
    thetad = (yd*x - xd*y)/rho_sq
    return np.array([rd, thetad, zd])


def acceleration_cartesian_to_cylindrical(pos, vel, acc):
    """Second derivatives of (r, theta, h) from Cartesian position, velocity, acceleration."""
    x, y, z = pos
    xd, yd, zd = vel
    xdd, ydd, zdd = acc
    rho_sq = x**2 + y**2
    rdot_num = x*xd + y*yd
    rdd = (xd**2 + x*xdd + yd**2 + y*ydd)/np.sqrt(rho_sq) - rdot_num**2/rho_sq**1.5
    thetadd = (ydd*x - xdd*y)/rho_sq - (yd*x - xd*y)*2*rdot_num/rho_sq**2
    return np.array([rdd, thetadd, zdd])


def position_cylindrical_to_cartesian(cyl):
    r, theta, h = cyl
    return np.array([r*np.cos(theta), r*np.sin(theta), h])


def velocity_cylindrical_to_cartesian(cyl, cyl_dot):
    r, theta, h = cyl
    rd, thetad, hd = cyl_dot
    xd = rd*np.cos(theta) - r*thetad*np.sin(theta)
    yd = rd*np.sin(theta) + r*thetad*np.cos(theta)
    return np.array([xd, yd, hd])


def acceleration_cylindrical_to_cartesian(cyl, cyl_dot, cyl_ddot):
    """Cartesian acceleration including the Coriolis and centripetal terms."""
    r, theta, h = cyl
    rd, thetad, hd = cyl_dot
    rdd, thetadd, hdd = cyl_ddot
    c, s = np.cos(theta), np.sin(theta)
    xdd = rdd*c - 2*rd*thetad*s - r*thetadd*s - r*thetad**2*c
    ydd = rdd*s + 2*rd*thetad*c + r*thetadd*c - r*thetad**2*s
    return np.array([xdd, ydd, hdd])


def cartesian_to_cylindrical(x):
    """[x;y;z;vx;vy;vz] -> [r;theta;h;r_dot;theta_dot;h_dot]"""
    x = _as_state(x, "Cartesian state")
    return np.concatenate([position_cartesian_to_cylindrical(x[:3]),
                           velocity_cartesian_to_cylindrical(x[:3], x[3:])])


def cylindrical_to_cartesian(w):
    """[r;theta;h;r_dot;theta_dot;h_dot] -> [x;y;z;vx;vy;vz]"""
    w = _as_state(w, "cylindrical state")
    return np.concatenate([position_cylindrical_to_cartesian(w[:3]),
                           velocity_cylindrical_to_cartesian(w[:3], w[3:])])


def state_dot_cartesian_to_cylindrical(x, x_dot):
    """Map a Cartesian state derivative [v;a] at state x to cylindrical rates."""
    x = _as_state(x, "Cartesian state")
    x_dot = _as_state(x_dot, "Cartesian state derivative")
    return np.concatenate([
        velocity_cartesian_to_cylindrical(x[:3], x_dot[:3]),
        acceleration_cartesian_to_cylindrical(x[:3], x_dot[:3], x_dot[3:]),
    ])


def state_dot_cylindrical_to_cartesian(w, w_dot):
    """Map a cylindrical state derivative at state w to Cartesian [v;a]."""
    w = _as_state(w, "cylindrical state")
    w_dot = _as_state(w_dot, "cylindrical state derivative")
    return np.concatenate([
        velocity_cylindrical_to_cartesian(w[:3], w_dot[:3]),
        acceleration_cylindrical_to_cartesian(w[:3], w_dot[:3], w_dot[3:]),
    ])


# ========== UNIT SCALING ==========
def _scales(params):
    if not params.has_scales:
        raise ValueError(
            "State scaling requires params.distance_scale and params.time_scale")
    return params.distance_scale, params.time_scale


def scale_state(x, params):
    """Convert ECI [r;v] from SI units to scaled units."""
    d, t = _scales(params)
    x_scaled = _as_state(x)
    x_scaled[:3] /= d
    x_scaled[3:] /= (d/t)
    return x_scaled


def unscale_state(x_scaled, params):
    """Convert ECI [r;v] from scaled units to SI units."""
    d, t = _scales(params)
    x = _as_state(x_scaled)
    x[:3] *= d
    x[3:] *= (d/t)
    return x


def scale_state_dot(x_dot, params):
    """Convert ECI [v;a] from SI units to scaled units."""
    d, t = _scales(params)
    x_dot_scaled = _as_state(x_dot)
    x_dot_scaled[:3] /= (d/t)
    x_dot_scaled[3:] /= (d/t**2)
    return x_dot_scaled


def unscale_state_dot(x_dot_scaled, params):
    """Convert ECI [v;a] from scaled units to SI units."""
    d, t = _scales(params)
    x_dot = _as_state(x_dot_scaled)
    x_dot[:3] *= (d/t)
    x_dot[3:] *= (d/t**2)
    return x_dot
