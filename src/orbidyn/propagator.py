'''Orbit propagation
Propagator class definition and fixed-step solver shortcuts'''

import logging
import numpy as np
from typing import Optional, Tuple, TYPE_CHECKING

from .config import config
from .parameters import PhysicalParameters
from .orbital_elements import OrbitalElements, StateType, parse_state_type
from .dynamics import get_dynamics, ALL_PERTURBATIONS, ExtraPerturbation
from .integrator import integrate_rk4

if TYPE_CHECKING:
    from .trajectory import Trajectory

logger = logging.getLogger(__name__)


class Propagator:
    """
    Immutable propagation setup: one state representation, one parameter
    bundle and one set of perturbations.

    Parameters
    ----------
    representation : StateType or str
        Propagated representation: "cartesian", "classical" or "equinoctial"
    params : PhysicalParameters, optional
        Physical constants, defaults to the standard Earth set
    perturbations : tuple of str, optional
        Perturbation models to include. Options: "J2", "drag"
        Default is both. Use () for point mass dynamics.
        Note: Use trailing comma for single perturbation: ('J2',)
    extra : 3-vector or callable, optional
        Additional perturbing acceleration in RTN, constant or
        extra(state, params, t)
    step : float, optional
        Default RK4 step [s], falls back to config.DEFAULT_STEP

    Notes
    -----
    - Propagator is immutable - create a new instance to change parameters
    - Classical elements cannot propagate circular or equatorial orbits
    """
    # currently implemented perturbations
    _VALID_PERTURBATIONS = frozenset(ALL_PERTURBATIONS)

    # ========== CONSTRUCTION ==========
    def __init__(
        self,
        representation,
        params: Optional[PhysicalParameters] = None,
        perturbations: tuple = ALL_PERTURBATIONS,
        extra: Optional[ExtraPerturbation] = None,
        step: Optional[float] = None,
    ):
        self._representation = parse_state_type(representation)
        # raises for representations without equations of motion
        self._dynamics = get_dynamics(self._representation)

        # Validate perturbations
        for pert in perturbations:
            if pert not in Propagator._VALID_PERTURBATIONS:
                raise ValueError(
                    f"Unknown perturbation '{pert}'. "
                    f"Valid options: {sorted(Propagator._VALID_PERTURBATIONS)}"
                )
        if len(perturbations) != len(set(perturbations)):
            raise ValueError(f"Duplicate perturbations found: {perturbations}")

        if step is not None and (not np.isfinite(step) or step == 0):
            raise ValueError(f"Step must be finite and nonzero, got {step}")

        if extra is not None and not callable(extra):
            extra = np.asarray(extra, dtype=float)
            if extra.shape != (3,):
                raise ValueError(
                    f"Extra perturbation must be a 3-vector (u_R, u_T, u_N), "
                    f"got shape {extra.shape}")
            extra.flags.writeable = False

        # Store parameters in private attributes for immutability
        self._params = params if params is not None else PhysicalParameters()
        self._perturbations = tuple(perturbations)
        self._extra = extra
        self._step = step

    # ========== DYNAMICS ==========
    def derivative(self, state, t: float = 0.0) -> np.ndarray:
        """Time derivative of a state in the propagated representation"""
        return self._dynamics(np.asarray(state, dtype=float), self._params, t,
                              self._perturbations, self._extra)

    def _rhs(self, state, params, t):
        # bind perturbation settings into the (state, params, t) signature
        return self._dynamics(state, params, t, self._perturbations, self._extra)

    # ========== PROPAGATION ==========
    def propagate(
        self,
        initial_state: "OrbitalElements | np.ndarray",
        t_start: float,
        t_end: float,
        step: Optional[float] = None,
    ) -> "Trajectory":
        """
        Propagate from t_start to t_end with a fixed RK4 step.

        Parameters
        ----------
        initial_state : OrbitalElements or array_like
            Initial state. OrbitalElements are converted to the propagated
            representation, raw arrays are assumed to already be in it.
        t_start : float
            Start time [s]
        t_end : float
            End time [s], earlier than t_start for backward propagation
        step : float, optional
            Step size [s]; overrides the propagator default. Its sign is
            matched to the direction of propagation.

        Returns
        -------
        Trajectory
            Trajectory holding every sampled state
        """
        t_start = float(t_start)
        t_end = float(t_end)

        if isinstance(initial_state, OrbitalElements):
            state_array = initial_state.convert_to(self._representation).elements
        else:
            state_array = np.asarray(initial_state, dtype=float)
            if state_array.shape != (6,):
                raise ValueError(
                    f"Initial state must be a 6-element vector, got shape {state_array.shape}")
        if not np.all(np.isfinite(state_array)):
            raise ValueError(
                f"Initial state contains NaN or Inf values: {state_array}"
            )

        h = self._resolve_step(step, t_start, t_end)
        logger.debug("Propagating %s state from t=%g to t=%g s (h=%g s)",
                     self._representation.name.lower(), t_start, t_end, h)
        states, times = integrate_rk4(self._rhs, state_array, self._params,
                                      t_start, t_end, h)

        # Check for integration failure
        if not np.all(np.isfinite(states)):
            bad = int(np.argmax(~np.all(np.isfinite(states), axis=1)))
            raise ValueError(
                f"Integration failed: state became invalid during propagation.\n"
                f"Initial state: {state_array}\n"
                f"First invalid sample: t={times[bad]}\n"
                f"Last valid state: {states[bad - 1]}\n"
                f"Likely causes:\n"
                f"  - Orbit decayed into the central body\n"
                f"  - Step size too large for the orbit\n"
                f"  - Elements left their valid domain (e.g. e >= 1)"
            )

        from .trajectory import Trajectory
        return Trajectory(self, times, states)

    def _resolve_step(self, step, t_start, t_end):
        h = step if step is not None else self._step
        if h is None:
            h = config.DEFAULT_STEP
        h = float(h)
        if h == 0 or not np.isfinite(h):
            raise ValueError(f"Step must be finite and nonzero, got {h}")
        if t_end < t_start:
            return -abs(h)
        return abs(h)

    # ========== PROPERTY ACCESS ==========
    @property
    def representation(self) -> StateType:
        """Propagated state representation."""
        return self._representation

    @property
    def params(self) -> PhysicalParameters:
        return self._params

    @property
    def perturbations(self) -> tuple:
        return self._perturbations

    @property
    def extra(self):
        return self._extra

    @property
    def step(self) -> Optional[float]:
        return self._step

    def summary(self):
        """Log detailed summary of propagation setup."""
        p = self._params
        lines = [f"Representation: {self._representation.name.lower()}",
                 f"Earth: μ = {p.mu:.6e} m³/s², R = {p.R:.1f} m"]
        if self._perturbations:
            lines.append(f"Perturbations: {', '.join(self._perturbations)}")
            if "J2" in self._perturbations:
                lines.append(f"  J₂ = {p.J2:.6e}")
            if "drag" in self._perturbations:
                lines.append(f"  Drag: ρ = {p.rho:.3e} kg/m³, C_D = {p.C_D}, "
                             f"A = {p.A} m², m = {p.m} kg")
        else:
            lines.append("Perturbations: None (point mass)")
        if self._extra is not None:
            lines.append("Extra RTN perturbation: "
                         + ("callable" if callable(self._extra) else str(self._extra.tolist())))
        lines.append(f"Step: {self._step if self._step is not None else config.DEFAULT_STEP} s")
        text = "\n".join(lines)
        logger.info("%s", text)
        return text

    # ========== SPECIAL METHODS ==========
    def __repr__(self):
        parts = [f"Propagator(representation='{self._representation.name.lower()}'",
                 f"mu={self._params.mu:.3e} m³/s²"]
        if self._perturbations:
            parts.append(f"perturbations={self._perturbations}")
        if self._step is not None:
            parts.append(f"step={self._step}")
        return ", ".join(parts) + ")"


# ========== SOLVER SHORTCUTS ==========
def _solve(representation, x0, params, t_end, h) -> Tuple[np.ndarray, np.ndarray]:
    prop = Propagator(representation, params=params)
    return integrate_rk4(prop._rhs, x0, prop.params, 0.0, t_end, h)


def solve_orbit_dynamics_cartesian(x0, params, t_end, h=0.1):
    """Propagate a Cartesian state with J2 and drag over [0, t_end]; returns (states, times)."""
    return _solve(StateType.CARTESIAN, x0, params, t_end, h)


def solve_orbit_dynamics_classical(x0, params, t_end, h=1.0):
    """Propagate classical elements with J2 and drag over [0, t_end]; returns (states, times)."""
    return _solve(StateType.CLASSICAL, x0, params, t_end, h)


def solve_orbit_dynamics_equinoctial(x0, params, t_end, h=1.0):
    """Propagate equinoctial elements with J2 and drag over [0, t_end]; returns (states, times)."""
    return _solve(StateType.EQUINOCTIAL, x0, params, t_end, h)
