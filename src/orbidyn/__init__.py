"""
Orbidyn: Near-Earth Orbit Dynamics

A Python package for satellite orbit propagation under Earth gravity, J2
oblateness and atmospheric drag, in Cartesian, classical and modified
equinoctial elements, using fixed-step Runge-Kutta integration.
"""


# Core classes
from .parameters import PhysicalParameters, load_parameters
from .orbital_elements import OrbitalElements, OrbitalElements as OE, StateType
from .propagator import (Propagator, solve_orbit_dynamics_cartesian,
                         solve_orbit_dynamics_classical,
                         solve_orbit_dynamics_equinoctial)
from .trajectory import Trajectory, Trajectory as Traj

# Functional core
from .dynamics import (cartesian_eom, classical_eom, equinoctial_eom,
                       get_dynamics, specific_mechanical_energy)
from .integrator import rk4_step, integrate_rk4
from .anomalies import (true_to_eccentric, eccentric_to_true, eccentric_to_mean,
                        mean_to_eccentric, true_to_mean, mean_to_true)
from . import transforms, perturbations

# Commonly-used parameter sets
from .defaults import EARTH_PARAMETERS, UNPERTURBED_EARTH, circular_orbit_initial_conditions

# Configuration and errors
from .config import config, temp_config
from .utils import OrbitDomainError, SingularElementsError, KeplerConvergenceError


# Package metadata
__version__ = "0.1.0"

# Define what gets imported with "from orbidyn import *"
__all__ = [
    # Classes
    "PhysicalParameters",
    "OrbitalElements",
    "StateType",
    "Propagator",
    "Trajectory",
    # Abbreviations
    "OE",
    "Traj",
    # Functions
    "load_parameters",
    "solve_orbit_dynamics_cartesian",
    "solve_orbit_dynamics_classical",
    "solve_orbit_dynamics_equinoctial",
    "cartesian_eom",
    "classical_eom",
    "equinoctial_eom",
    "get_dynamics",
    "specific_mechanical_energy",
    "rk4_step",
    "integrate_rk4",
    "true_to_eccentric",
    "eccentric_to_true",
    "eccentric_to_mean",
    "mean_to_eccentric",
    "true_to_mean",
    "mean_to_true",
    "circular_orbit_initial_conditions",
    # Modules
    "transforms",
    "perturbations",
    # Constants
    "EARTH_PARAMETERS",
    "UNPERTURBED_EARTH",
    # Configuration and errors
    "config",
    "temp_config",
    "OrbitDomainError",
    "SingularElementsError",
    "KeplerConvergenceError",
]
