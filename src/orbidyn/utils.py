"""
Exceptions and small helpers shared across the Orbidyn package.
"""

import logging
from time import perf_counter
import warnings
from typing import Type, Optional
from .config import config

logger = logging.getLogger(__name__)


class OrbitDomainError(ValueError):
    """State or elements outside the domain of a bound elliptical orbit."""


class SingularElementsError(OrbitDomainError):
    """Classical elements at a configuration where their dynamics are singular."""


class KeplerConvergenceError(RuntimeError):
    """Newton iteration on Kepler's equation did not converge."""


class Timer:
    """
    Wall-clock timer used as a context manager.

    The elapsed time is logged at INFO level on exit unless ``verbose`` is
    False; it stays available afterwards as ``elapsed`` [s].

    >>> with Timer("RK4 run") as t:
    ...     traj = prop.propagate(x0, 0.0, 5400.0)
    >>> t.elapsed
    """
    def __init__(self, name: str = "Operation", verbose: bool = True):
        self.name = name
        self.verbose = verbose
        self.elapsed: Optional[float] = None
        self._start = None

    def __enter__(self):
        self._start = perf_counter()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.elapsed = perf_counter() - self._start
        if self.verbose:
            logger.info("%s: %.6f s", self.name, self.elapsed)
        return False


def validation_error(message: str, error_class: Type[Exception] = ValueError):
    """
    Report a failed input check.

    Raises ``error_class(message)`` when ``config.STRICT_VALIDATION`` is set,
    otherwise emits a ``UserWarning`` attributed to the caller.

    >>> validation_error("Eccentricity must be in [0, 1)", OrbitDomainError)
    """
    if not config.STRICT_VALIDATION:
        warnings.warn(message, UserWarning, stacklevel=2)
        return
    raise error_class(message)
