'''Orbit state value object
StateType enum and OrbitalElements class definition'''

import numpy as np
from enum import Enum
from typing import Optional

from .config import config
from .parameters import PhysicalParameters
from .utils import validation_error, OrbitDomainError
from . import transforms as tf
from .anomalies import true_to_mean


# define an enumerated list of state representations
class StateType(Enum):
    CARTESIAN = 'cart'      # [x;y;z;vx;vy;vz]
    CLASSICAL = 'kep'       # [a;e;i;omega;Omega;theta]
    EQUINOCTIAL = 'equi'    # [p;f;g;h;k;L]
    CYLINDRICAL = 'cyl'     # [r;theta;h;r_dot;theta_dot;h_dot]


# named component order for each representation
ELEMENT_NAMES = {
    StateType.CARTESIAN: ['x', 'y', 'z', 'vx', 'vy', 'vz'],
    StateType.CLASSICAL: ['a', 'e', 'i', 'omega', 'Omega', 'theta'],
    StateType.EQUINOCTIAL: ['p', 'f', 'g', 'h', 'k', 'L'],
    StateType.CYLINDRICAL: ['r', 'theta', 'h', 'r_dot', 'theta_dot', 'h_dot'],
}

_TYPE_MAP = {
    'cart': StateType.CARTESIAN,
    'cartesian': StateType.CARTESIAN,
    'kep': StateType.CLASSICAL,
    'keplerian': StateType.CLASSICAL,
    'classical': StateType.CLASSICAL,
    'eq': StateType.EQUINOCTIAL,
    'equi': StateType.EQUINOCTIAL,
    'equinoctial': StateType.EQUINOCTIAL,
    'cyl': StateType.CYLINDRICAL,
    'cylindrical': StateType.CYLINDRICAL,
}


def parse_state_type(state_type):
    """Convert string or enum to StateType enum"""
    if isinstance(state_type, StateType):
        return state_type
    elif isinstance(state_type, str):
        key = state_type.lower()
        if key in _TYPE_MAP:
            return _TYPE_MAP[key]
        raise ValueError(f"Unknown state type '{state_type}'. "
                         f"Use: {list(_TYPE_MAP.keys())}")
    else:
        raise TypeError(f"state_type must be StateType or str, "
                        f"got {type(state_type)}")


#define basic orbit state class
class OrbitalElements:
    """
    Represents an orbit state as six numbers in one of four representations.
    Cartesian states are expressed in the Earth-centered inertial frame.
    OrbitalElements is immutable, extract elements using numpy methods and create a
    new instance to change
    """

    # ========== CONSTRUCTION ==========
    def __init__(self, elements=None, element_type=None, validate=True,
                 params: Optional[PhysicalParameters] = None, **kwargs):
        """
        Create an orbit state.

        Can be called in two ways:

        1. Array-based (fast for propagation):
        OrbitalElements([7000e3, 0.01, 0.5, 0, 0, 0], 'kep')

        2. Named parameters (readable for setup):
        OrbitalElements(a=7000e3, e=0.01, i=0.5, omega=0, Omega=0, theta=0)
        OrbitalElements(x=6878e3, y=0, z=0, vx=0, vy=7612.6, vz=0, params=EARTH)

        Parameters
        ----------
        elements : array-like, optional
            6-element array
        element_type : StateType or str, optional
            Representation ('cart', 'kep', 'equi', 'cyl') - required if using
            elements array
        validate : bool, optional
            Whether to validate elements (default True)
        params : PhysicalParameters, optional
            Physical constants used by mu-dependent conversions,
            defaults to the standard Earth set
        **kwargs : dict
            Named components for exactly one representation
            Classical (a, e, i, omega, Omega, theta)
            Cartesian (x, y, z, vx, vy, vz)
            Equinoctial (p, f, g, h, k, L)
            Cylindrical (r, theta, h, r_dot, theta_dot, h_dot)
        """
        self._params = params if params is not None else PhysicalParameters()

        # Determine construction method
        if elements is not None:
            self.elements = np.array(elements, dtype=float)
            self.element_type = parse_state_type(element_type)
        elif kwargs:
            self.elements, self.element_type = self._from_named_params(kwargs)
        else:
            raise ValueError(
                "Must provide either:\n"
                "  - elements array and element_type, or named parameters: \n"
                "  - (a, e, i, omega, Omega, theta) for classical, or\n"
                "  - (x, y, z, vx, vy, vz) for Cartesian, or\n"
                "  - (p, f, g, h, k, L) for equinoctial, or\n"
                "  - (r, theta, h, r_dot, theta_dot, h_dot) for cylindrical"
            )
        if self.elements.shape != (6,):
            raise ValueError(
                f"Orbit state must be a 6-element vector, got shape {self.elements.shape}")
        # Ensure immutability of elements array
        self.elements.flags.writeable = False
        if validate:
            self._validate()

    # alternate constructors bypass validation for automated processes
    @classmethod
    def cartesian(cls, elements, params=None):
        """Cartesian state [x, y, z, vx, vy, vz] without validation"""
        return cls(elements, StateType.CARTESIAN, validate=False, params=params)

    @classmethod
    def classical(cls, elements, params=None):
        """Classical elements [a, e, i, omega, Omega, theta] without validation"""
        return cls(elements, StateType.CLASSICAL, validate=False, params=params)

    @classmethod
    def equinoctial(cls, elements, params=None):
        """Modified equinoctial elements [p, f, g, h, k, L] without validation"""
        return cls(elements, StateType.EQUINOCTIAL, validate=False, params=params)

    @classmethod
    def cylindrical(cls, elements, params=None):
        """Cylindrical state [r, theta, h, r_dot, theta_dot, h_dot] without validation"""
        return cls(elements, StateType.CYLINDRICAL, validate=False, params=params)

    # ========== VALIDATION ==========
    def _validate(self):
        """Check that the elements describe a bound orbit in their representation
        Failures raise or warn according to config.STRICT_VALIDATION
        """
        if not np.all(np.isfinite(self.elements)):
            validation_error("Elements contain NaN or Inf")
            return

        if self.element_type == StateType.CLASSICAL:
            a, e, i = self.elements[:3]
            if not (0 <= e < 1):
                validation_error(
                    f"Bound orbit requires 0 <= e < 1, got e={e}", OrbitDomainError)
            if a <= 0:
                validation_error(
                    f"Elliptic orbit requires positive semi-major axis, got a={a}",
                    OrbitDomainError)
            if i < 0 or i > np.pi:
                validation_error(
                    f"Inclination must lie in [0, pi], got i={i}", OrbitDomainError)
        elif self.element_type == StateType.EQUINOCTIAL:
            p, f, g = self.elements[:3]
            if p <= 0:
                validation_error(
                    f"Semi-latus rectum must be positive, got p={p}", OrbitDomainError)
            if f**2 + g**2 >= 1:
                validation_error(
                    f"Bound orbit requires f^2 + g^2 < 1, got {f**2 + g**2}",
                    OrbitDomainError)
        elif self.element_type == StateType.CARTESIAN:
            if np.linalg.norm(self.elements[:3]) == 0:
                validation_error("Position vector must be nonzero", OrbitDomainError)
        elif self.element_type == StateType.CYLINDRICAL:
            if self.elements[0] < 0:
                validation_error(
                    f"Cylindrical radius must be non-negative, got r={self.elements[0]}")

    # ========== FACTORY METHODS ==========
    @classmethod
    def from_numpy(cls, array, element_type, validate=True, params=None):
        """
        Create list of OrbitalElements from NumPy array.

        Parameters
        ----------
        array : np.ndarray
            Array of shape (n_states, 6)
        element_type : StateType or str
        validate : bool, optional, defaults to True
        params : PhysicalParameters, optional

        Returns
        -------
        list of OrbitalElements
        """
        array = np.asarray(array)
        if array.ndim != 2 or array.shape[1] != 6:
            raise ValueError(f"Array must have shape (n, 6), got {array.shape}")
        return [cls(row, element_type, validate=validate, params=params)
                for row in array]

    # ========== REPRESENTATION CONVERSIONS ==========
    def convert_to(self, target_type):
        """
        Convert the state to a different representation.

        Any pair of representations is supported; pairs without a direct
        transform are routed through Cartesian.

        Parameters
        ----------
        target_type : StateType or str
            The desired representation

        Returns
        -------
        OrbitalElements
            New OrbitalElements object in the target representation
        """
        target_type = parse_state_type(target_type)
        if target_type == self.element_type:
            return self.copy()
        converted = convert_state(self.elements, self.element_type,
                                  target_type, self._params)
        return OrbitalElements(converted, target_type, validate=False,
                               params=self._params)

    def to_cartesian(self):
        """Shortcut for convert_to('cart')"""
        return self.convert_to(StateType.CARTESIAN)

    def to_classical(self):
        """Shortcut for convert_to('kep')"""
        return self.convert_to(StateType.CLASSICAL)

    def to_equinoctial(self):
        """Shortcut for convert_to('equi')"""
        return self.convert_to(StateType.EQUINOCTIAL)

    def to_cylindrical(self):
        """Shortcut for convert_to('cyl')"""
        return self.convert_to(StateType.CYLINDRICAL)

    # ========== PROPERTY ACCESS ==========
    @property
    def params(self):
        """PhysicalParameters used for conversions"""
        return self._params

    @property
    def mu(self):
        """Gravitational parameter [m³/s²]"""
        return self._params.mu

    @property
    def position(self):
        """Position vector (only for Cartesian)"""
        if self.element_type != StateType.CARTESIAN:
            raise AttributeError(
                "Position only directly available for Cartesian states")
        return self.elements[:3]

    @property
    def velocity(self):
        """Velocity vector (only for Cartesian)"""
        if self.element_type != StateType.CARTESIAN:
            raise AttributeError(
                "Velocity only directly available for Cartesian states")
        return self.elements[3:]

    # ========== ORBITAL PROPERTIES ==========
    def _semi_major_axis_and_eccentricity(self):
        if self.element_type == StateType.CLASSICAL:
            return self.elements[0], self.elements[1]
        elif self.element_type == StateType.EQUINOCTIAL:
            p, f, g = self.elements[:3]
            e = np.sqrt(f**2 + g**2)
            return p / (1 - e**2), e
        else:
            cl = self.to_classical()
            return cl.elements[0], cl.elements[1]

    def orbital_period(self):
        """
        Calculate orbital period

        Returns period in seconds
        """
        a, e = self._semi_major_axis_and_eccentricity()
        if e >= 1:
            raise OrbitDomainError("Orbital period undefined for unbound orbits")
        return 2 * np.pi * np.sqrt(a**3 / self.mu)

    def mean_motion(self):
        """
        Calculate mean motion (n = √(μ/a³))

        Returns
        -------
        float
            Mean motion [rad/s]
        """
        a, e = self._semi_major_axis_and_eccentricity()
        if e >= 1:
            raise OrbitDomainError("Mean motion undefined for unbound orbits")
        return np.sqrt(self.mu / a**3)

    def mean_anomaly(self):
        """Mean anomaly [rad] of the current position"""
        a, e, i, omega, Omega, theta = self.to_classical().elements
        return true_to_mean(theta, e)

    def specific_energy(self):
        """Two-body specific orbital energy (energy per unit mass) [J/kg]"""
        if self.element_type == StateType.CLASSICAL:
            return -self.mu / (2 * self.elements[0])
        r, v = self._position_velocity()
        return np.dot(v, v) / 2 - self.mu / np.linalg.norm(r)

    def specific_angular_momentum(self):
        """
        Calculate specific angular momentum magnitude

        Returns h = |cross(position,velocity)|
        """
        if self.element_type == StateType.CLASSICAL:
            a, e = self.elements[:2]
            return np.sqrt(self.mu * a * (1 - e**2))
        elif self.element_type == StateType.EQUINOCTIAL:
            return np.sqrt(self.mu * self.elements[0])
        r, v = self._position_velocity()
        return np.linalg.norm(np.cross(r, v))

    def _position_velocity(self):
        cart = self.elements if self.element_type == StateType.CARTESIAN \
            else self.to_cartesian().elements
        return cart[:3], cart[3:]

    # ========== UTILITY METHODS ==========
    def copy(self):
        """Create a deep copy of the orbit state"""
        return OrbitalElements(self.elements.copy(), self.element_type,
                               validate=False, params=self._params)

    # ========== BATCH OPERATIONS ==========
    class Batch:
        """
        Batch operations on collections of OrbitalElements.

        All methods accept a list of OrbitalElements and return
        a list of OrbitalElements or computed values.
        """
        @staticmethod
        def convert_to(orbits, target_type):
            """Convert multiple states to target representation"""
            return [o.convert_to(target_type) for o in orbits]

        @staticmethod
        def orbital_period(orbits):
            """Get orbital periods for multiple states"""
            return np.array([o.orbital_period() for o in orbits])

        @staticmethod
        def specific_energy(orbits):
            """Get specific energy for multiple states"""
            return np.array([o.specific_energy() for o in orbits])

        @staticmethod
        def to_numpy(orbits):
            """
            Convert list of OrbitalElements to NumPy array.

            Parameters
            ----------
            orbits : list of OrbitalElements

            Returns
            -------
            np.ndarray
                Array of shape (n_states, 6)

            Notes
            -----
            All states must share one representation. The returned array
            contains the raw values without type information.
            """
            elem_type = orbits[0].element_type
            if not all(o.element_type == elem_type for o in orbits):
                raise ValueError("All orbits must have the same element type")
            return np.array([o.elements for o in orbits])

        @staticmethod
        def to_dataframe(orbits, index=None):
            """
            Convert list of OrbitalElements to pandas DataFrame.

            Parameters
            ----------
            orbits : list of OrbitalElements
                List of orbit states
            index : array-like, optional
                Index for the DataFrame (e.g., time values).
                If None, uses integer index.

            Returns
            -------
            pd.DataFrame
                DataFrame with columns named according to ELEMENT_NAMES

            Raises
            ------
            ValueError
                If orbits have different representations or if index length
                doesn't match number of orbits
            """
            import pandas as pd
            if not orbits:
                return pd.DataFrame()

            elem_type = orbits[0].element_type
            if not all(o.element_type == elem_type for o in orbits):
                raise ValueError("All orbits must have the same element type")
            if index is not None and len(index) != len(orbits):
                raise ValueError(
                    f"Index length ({len(index)}) must match "
                    f"number of orbits ({len(orbits)})"
                )
            data = np.array([o.elements for o in orbits])
            return pd.DataFrame(data, columns=ELEMENT_NAMES[elem_type], index=index)

    # ========== SPECIAL METHODS ==========
    def __len__(self):
        #Length of element vector (always 6)
        return 6

    def __getitem__(self, key):
        return self.elements[key]

    def __iter__(self):
        return iter(self.elements)

    def __repr__(self):
        return f"OrbitalElements({self.elements.tolist()}, {self.element_type})"

    def __str__(self):
        if self.element_type == StateType.CLASSICAL:
            a, e, i, omega, Omega, theta = self.elements
            return (f"Classical Elements:\n"
                    f"  a     = {a/1e3:12.4f} km\n"
                    f"  e     = {e:12.6f}\n"
                    f"  i     = {np.degrees(i):12.4f}°\n"
                    f"  ω     = {np.degrees(omega):12.4f}°\n"
                    f"  Ω     = {np.degrees(Omega):12.4f}°\n"
                    f"  θ     = {np.degrees(theta):12.4f}°")
        elif self.element_type == StateType.CARTESIAN:
            r = self.elements[:3] / 1e3
            v = self.elements[3:]
            return (f"Cartesian State:\n"
                    f"  r = [{r[0]:12.4f}, {r[1]:12.4f}, {r[2]:12.4f}] km\n"
                    f"  v = [{v[0]:12.4f}, {v[1]:12.4f}, {v[2]:12.4f}] m/s")
        elif self.element_type == StateType.EQUINOCTIAL:
            p, f, g, h, k, L = self.elements
            return (f"Modified Equinoctial Elements:\n"
                    f"  p = {p/1e3:12.4f} km\n"
                    f"  f = {f:12.6f}\n"
                    f"  g = {g:12.6f}\n"
                    f"  h = {h:12.6f}\n"
                    f"  k = {k:12.6f}\n"
                    f"  L = {np.degrees(L):12.4f}°")
        else:
            r, theta, h, r_dot, theta_dot, h_dot = self.elements
            return (f"Cylindrical State:\n"
                    f"  r = {r/1e3:12.4f} km, θ = {np.degrees(theta):10.4f}°, "
                    f"h = {h/1e3:12.4f} km\n"
                    f"  ṙ = {r_dot:12.4f} m/s, θ̇ = {theta_dot:.6e} rad/s, "
                    f"ḣ = {h_dot:12.4f} m/s")

    def __eq__(self, other):
        #Check equality with tolerance
        if not isinstance(other, OrbitalElements):
            return False
        return (self.element_type == other.element_type and
                np.allclose(self.elements, other.elements,
                            rtol=config.EQUALITY_RTOL,
                            atol=config.EQUALITY_ATOL))

    def __hash__(self):
        # equal within tolerance implies equal hash
        return hash(self.element_type)

    @staticmethod
    def _from_named_params(kwargs):
        """
        Convert named parameters to elements array and detect representation.

        Returns
        -------
        elements : np.ndarray
            6-element array
        element_type : StateType
            Detected representation
        """
        provided = set(kwargs)
        for state_type, names in ELEMENT_NAMES.items():
            if provided == set(names):
                return np.array([kwargs[k] for k in names], dtype=float), state_type

        raise ValueError(
            f"Could not determine element type from parameters: {sorted(provided)}\n"
            + "\n".join(f"{t.name.title()} requires: {names}"
                        for t, names in ELEMENT_NAMES.items())
        )


# ========== ARRAY-LEVEL DISPATCH ==========
_DIRECT = {
    (StateType.CLASSICAL, StateType.EQUINOCTIAL): lambda x, p: tf.classical_to_equinoctial(x),
    (StateType.EQUINOCTIAL, StateType.CLASSICAL): lambda x, p: tf.equinoctial_to_classical(x),
    (StateType.CLASSICAL, StateType.CARTESIAN): tf.classical_to_cartesian,
    (StateType.EQUINOCTIAL, StateType.CARTESIAN): tf.equinoctial_to_cartesian,
    (StateType.CARTESIAN, StateType.CLASSICAL): tf.cartesian_to_classical,
    (StateType.CARTESIAN, StateType.EQUINOCTIAL): tf.cartesian_to_equinoctial,
    (StateType.CARTESIAN, StateType.CYLINDRICAL): lambda x, p: tf.cartesian_to_cylindrical(x),
    (StateType.CYLINDRICAL, StateType.CARTESIAN): lambda w, p: tf.cylindrical_to_cartesian(w),
}


def convert_state(state, source, target, params):
    """
    Convert a raw 6-vector between representations.

    Parameters
    ----------
    state : array_like, shape (6,)
    source, target : StateType or str
    params : PhysicalParameters

    Returns
    -------
    np.ndarray, shape (6,)
    """
    source = parse_state_type(source)
    target = parse_state_type(target)
    if source == target:
        return np.array(state, dtype=float)
    if (source, target) in _DIRECT:
        return _DIRECT[(source, target)](state, params)
    cart = _DIRECT[(source, StateType.CARTESIAN)](state, params)
    return _DIRECT[(StateType.CARTESIAN, target)](cart, params)
