"""
Package-wide settings for Orbidyn.

All numerical tolerances that are not part of a function's own signature live
on the module-level ``config`` object and are read at call time, so changing
an attribute affects every later call.

>>> import orbidyn
>>> orbidyn.config.KEPLER_MAX_ITER = 200
>>> orbidyn.config.reset()

For a scoped change use :func:`temp_config`:

>>> with orbidyn.temp_config(STRICT_VALIDATION=False):
...     orbit = orbidyn.OE(a=7000e3, e=1.2, i=0.5, omega=0, Omega=0, theta=0)
"""

from dataclasses import dataclass, fields
from contextlib import contextmanager


@dataclass
class OrbidynConfig:
    """
    Mutable settings singleton.

    Attributes
    ----------
    EQUALITY_RTOL, EQUALITY_ATOL : float
        Tolerances used by ``OrbitalElements.__eq__`` (1e-12, 1e-14)
    NEAR_CIRCULAR_ATOL, NEAR_CIRCULAR_RTOL : float
        When recovering classical elements from a Cartesian state, the
        semi-latus rectum is replaced by the semi-major axis if the two agree
        within these tolerances (1e-9, 1e-8)
    KEPLER_TOL : float
        Residual |E - e sin E - M| accepted by the Kepler solve (1e-10)
    KEPLER_MAX_ITER : int
        Newton updates allowed before the Kepler solve gives up (100)
    SINGULARITY_THRESHOLD : float
        Smallest e and |sin i| accepted by the classical equations of
        motion (1e-12)
    STRICT_VALIDATION : bool
        Raise on failed input checks; warn instead when False
    DEFAULT_STEP : float
        RK4 step [s] for propagators created without one (1.0)
    GRID_TIME_ATOL : float
        Tolerance [s] for matching a query time to a trajectory sample (1e-9)
    DEFAULT_BODY_COLOR, DEFAULT_TRAJ_COLOR : str
    DEFAULT_BODY_OPACITY : float
        Plot styling
    """

    EQUALITY_RTOL: float = 1e-12
    EQUALITY_ATOL: float = 1e-14

    NEAR_CIRCULAR_ATOL: float = 1e-9
    NEAR_CIRCULAR_RTOL: float = 1e-8

    KEPLER_TOL: float = 1e-10
    KEPLER_MAX_ITER: int = 100

    SINGULARITY_THRESHOLD: float = 1e-12

    STRICT_VALIDATION: bool = True

    DEFAULT_STEP: float = 1.0
    GRID_TIME_ATOL: float = 1e-9

    DEFAULT_BODY_COLOR: str = 'lightblue'
    DEFAULT_TRAJ_COLOR: str = 'red'
    DEFAULT_BODY_OPACITY: float = 0.6

    def reset(self):
        """Restore every setting to its default."""
        for f in fields(self):
            setattr(self, f.name, f.default)

    def __repr__(self):
        groups = {
            "Equality": ("EQUALITY_RTOL", "EQUALITY_ATOL"),
            "Element recovery": ("NEAR_CIRCULAR_ATOL", "NEAR_CIRCULAR_RTOL"),
            "Kepler solve": ("KEPLER_TOL", "KEPLER_MAX_ITER"),
            "Dynamics": ("SINGULARITY_THRESHOLD", "DEFAULT_STEP", "GRID_TIME_ATOL"),
            "Validation": ("STRICT_VALIDATION",),
            "Plotting": ("DEFAULT_BODY_COLOR", "DEFAULT_TRAJ_COLOR",
                         "DEFAULT_BODY_OPACITY"),
        }
        lines = ["OrbidynConfig:"]
        for title, names in groups.items():
            lines.append(f"  {title}:")
            lines.extend(f"    {name} = {getattr(self, name)!r}" for name in names)
        return "\n".join(lines)


config = OrbidynConfig()


@contextmanager
def temp_config(**kwargs):
    """
    Override settings inside a ``with`` block.

    Previous values come back on exit, also when the block raises.
    Unknown names raise AttributeError before anything is changed.

    >>> with temp_config(KEPLER_MAX_ITER=5) as cfg:
    ...     cfg.KEPLER_MAX_ITER
    5
    """
    valid = [f.name for f in fields(config)]
    for key in kwargs:
        if key not in valid:
            raise AttributeError(
                f"OrbidynConfig has no attribute '{key}'. Valid attributes: {valid}")
    saved = {key: getattr(config, key) for key in kwargs}
    for key, value in kwargs.items():
        setattr(config, key, value)
    try:
        yield config
    finally:
        for key, value in saved.items():
            setattr(config, key, value)
