'''Physical parameter bundle shared by every orbit computation
PhysicalParameters dataclass definition and YAML loader'''

import logging
import math
from dataclasses import dataclass, fields, replace as dc_replace
from pathlib import Path
from typing import Any, Mapping, Optional, Union

import yaml

logger = logging.getLogger(__name__)

# collaborator option names -> dataclass field names
_OPTION_MAP = {
    'm_satellite': 'm',
    'rho': 'rho',
    'C_D': 'C_D',
    'A': 'A',
    'G_gravity': 'G',
    'M_earth': 'M',
    'J2': 'J2',
    'R_earth': 'R',
    'distance_scale': 'distance_scale',
    'time_scale': 'time_scale',
}


@dataclass(frozen=True)
class PhysicalParameters:
    """
    Immutable gravitational and physical constants for one simulation run.

    All quantities are SI. ``mu`` is derived from ``G`` and ``M`` and is
    therefore always consistent with them.

    Attributes
    ----------
    G : float
        Gravitational constant [m³/(kg·s²)]
    M : float
        Earth mass [kg]
    J2 : float
        J2 zonal harmonic coefficient [dimensionless]. Zero disables the
        oblateness perturbation.
    R : float
        Earth equatorial radius [m]
    m : float
        Satellite mass [kg]
    rho : float
        Atmospheric density [kg/m³], constant with altitude. Zero disables
        drag.
    C_D : float
        Drag coefficient [dimensionless]
    A : float
        Drag reference area [m²] (default is the side of a 3U cubesat)
    distance_scale : float, optional
        Length unit used by the state scaling helpers [m]
    time_scale : float, optional
        Time unit used by the state scaling helpers [s]
    """
    G: float = 6.674e-11
    M: float = 5.9722e24
    J2: float = 0.1082626925638815e-2
    R: float = 6378137.0
    m: float = 1.0
    rho: float = 1e-12
    C_D: float = 1.0
    A: float = 0.3 * 0.1
    distance_scale: Optional[float] = None
    time_scale: Optional[float] = None

    def __post_init__(self):
        #Validate parameters
        for name in ('G', 'M', 'R', 'm', 'C_D', 'A'):
            value = getattr(self, name)
            if not math.isfinite(value) or value <= 0:
                raise ValueError(f"{name} must be finite and positive, got {value}")
        for name in ('J2', 'rho'):
            value = getattr(self, name)
            if not math.isfinite(value) or value < 0:
                raise ValueError(
                    f"{name} must be finite and non-negative, got {value}")
        if self.J2 > 1:
            raise ValueError(f"J2 coefficient seems unrealistic: {self.J2}")
        for name in ('distance_scale', 'time_scale'):
            value = getattr(self, name)
            if value is not None and (not math.isfinite(value) or value == 0):
                raise ValueError(f"{name} must be finite and nonzero, got {value}")

    @property
    def mu(self) -> float:
        """Gravitational parameter G·M [m³/s²]"""
        return self.G * self.M

    @property
    def has_scales(self) -> bool:
        """True when both distance_scale and time_scale are set"""
        return self.distance_scale is not None and self.time_scale is not None

    def replace(self, **changes) -> "PhysicalParameters":
        """Return a new, validated instance with the given fields changed."""
        return dc_replace(self, **changes)

    @classmethod
    def from_options(cls, options: Mapping[str, Any]) -> "PhysicalParameters":
        """
        Build parameters from collaborator option names.

        Parameters
        ----------
        options : mapping
            Any of ``m_satellite, rho, C_D, A, G_gravity, M_earth, J2,
            R_earth, distance_scale, time_scale``. Omitted options keep
            their defaults.

        Raises
        ------
        ValueError
            If an unknown option name is given or a value is invalid
        """
        unknown = set(options) - set(_OPTION_MAP)
        if unknown:
            raise ValueError(
                f"Unknown parameter option(s) {sorted(unknown)}. "
                f"Valid options: {sorted(_OPTION_MAP)}"
            )
        kwargs = {}
        for option, value in options.items():
            field_name = _OPTION_MAP[option]
            kwargs[field_name] = None if value is None else float(value)
        return cls(**kwargs)

    def to_options(self) -> dict:
        """Inverse of :meth:`from_options`."""
        inverse = {v: k for k, v in _OPTION_MAP.items()}
        return {inverse[f.name]: getattr(self, f.name) for f in fields(self)}

    def __repr__(self):
        return (f"PhysicalParameters(mu={self.mu:.6e} m³/s², J2={self.J2:.6e}, "
                f"R={self.R:.1f} m, m={self.m} kg, rho={self.rho:.3e} kg/m³, "
                f"C_D={self.C_D}, A={self.A} m²)")


def load_parameters(path: Union[str, Path]) -> PhysicalParameters:
    """
    Load PhysicalParameters from a YAML file.

    The file holds option names understood by
    :meth:`PhysicalParameters.from_options`, either at the top level or
    nested under a ``parameters`` key::

        parameters:
          m_satellite: 4.0
          rho: 1.0e-12
          C_D: 2.2

    Parameters
    ----------
    path : str or Path
        YAML file location

    Returns
    -------
    PhysicalParameters
    """
    path = Path(path)
    logger.info("Loading physical parameters from: %s", path)
    with open(path, 'r') as f:
        content = yaml.safe_load(f)
    if content is None:
        content = {}
    if not isinstance(content, dict):
        raise ValueError(f"Parameter file {path} must contain a mapping")
    if 'parameters' in content:
        content = content['parameters'] or {}
    params = PhysicalParameters.from_options(content)
    logger.debug("Loaded %r", params)
    return params
