"""
Default Parameters, Orbits and Propagators
==========================================

Default PhysicalParameters sets, some predefined orbits and factory
functions for commonly-used propagation setups. The factories create
Propagator objects on demand.

Examples
--------
>>> from orbidyn.defaults import earth_j2, LEO_500KM
>>> prop = earth_j2('equinoctial')
>>> traj = prop.propagate(LEO_500KM, 0.0, 5400.0, step=10.0)
"""
import numpy as np
from .parameters import PhysicalParameters
from .orbital_elements import OrbitalElements
from .propagator import Propagator

"""
Predefined parameter sets
Earth constants as used throughout the package (WGS-84 radius and J2)
"""
EARTH_PARAMETERS = PhysicalParameters()

# point-mass Earth, J2 and drag switched off
UNPERTURBED_EARTH = PhysicalParameters(J2=0.0, rho=0.0)


def circular_orbit_initial_conditions(altitude, inclination,
                                      params: PhysicalParameters = EARTH_PARAMETERS):
    """
    Cartesian state of a circular orbit crossing the x axis at the ascending node.

    Parameters
    ----------
    altitude : float
        Height above the equatorial radius [m]
    inclination : float
        Inclination [rad]
    params : PhysicalParameters, optional

    Returns
    -------
    np.ndarray
        [R + altitude, 0, 0, 0, v cos(i), v sin(i)] with v = √(μ/r)
    """
    r = params.R + altitude
    if r <= 0:
        raise ValueError(f"Orbit radius must be positive, got {r}")
    v = np.sqrt(params.mu / r)
    return np.array([r, 0.0, 0.0, 0.0, v*np.cos(inclination), v*np.sin(inclination)])


"""
Predefined orbits for convenience
Semi-major axes in m, angles in rad
"""
_R = EARTH_PARAMETERS.R

LEO_500KM = OrbitalElements(
    circular_orbit_initial_conditions(500e3, np.radians(45.0)), 'cart',
    params=EARTH_PARAMETERS
)

ISS_ORBIT = OrbitalElements(
    a=6778.0e3, e=0.0001, i=np.radians(51.6),
    omega=0, Omega=0, theta=0, params=EARTH_PARAMETERS
)

SSO_ORBIT = OrbitalElements(
    a=_R + 500e3, e=0.001, i=np.radians(97.4016),
    omega=0, Omega=np.radians(140), theta=0, params=EARTH_PARAMETERS
)

MOLNIYA_ORBIT = OrbitalElements(
    a=26554.0e3, e=0.737, i=np.radians(63.4),
    omega=np.radians(270), Omega=np.radians(100), theta=0, params=EARTH_PARAMETERS
)


def earth_2body(representation='cartesian', step=None):
    """
    Create a point-mass Earth propagator.

    Parameters
    ----------
    representation : StateType or str, optional
        Propagated representation (default 'cartesian')
    step : float, optional
        Default RK4 step [s]

    Returns
    -------
    Propagator
    """
    return Propagator(representation, EARTH_PARAMETERS, perturbations=(), step=step)


def earth_j2(representation='cartesian', step=None):
    """
    Create an Earth propagator with J2 oblateness.

    Includes the dominant zonal harmonic (J2) which captures Earth's
    equatorial bulge.
    """
    return Propagator(representation, EARTH_PARAMETERS, perturbations=('J2',), step=step)


def earth_j2_drag(representation='cartesian', params=None, step=None):
    """
    Create an Earth propagator with J2 and constant-density drag.

    Notes
    -----
    Drag uses the satellite mass, C_D and area of params, with a density
    fixed at params.rho (1e-12 kg/m³ by default).
    """
    return Propagator(representation, params or EARTH_PARAMETERS,
                      perturbations=('J2', 'drag'), step=step)
