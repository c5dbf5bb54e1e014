'''Sampled orbit history
Trajectory class definition'''

import numpy as np
import pandas as pd
from typing import Union, Optional, TYPE_CHECKING
import plotly.graph_objects as go

from .config import config
from .orbital_elements import (OrbitalElements, StateType, ELEMENT_NAMES,
                               convert_state, parse_state_type)
from .dynamics import specific_mechanical_energy

if TYPE_CHECKING:
    from .propagator import Propagator


class Trajectory:
    """
    A propagated trajectory stored as fixed-step samples.

    Attributes:
        propagator: Reference to the parent Propagator (immutable)
        times: Sample times, shape (N,)
        states: Sampled states, shape (N, 6), one row per time
        state_type: Representation of the rows of states
    """
    # ========== CONSTRUCTION ==========
    def __init__(self, propagator: Optional["Propagator"], times, states,
                 state_type: Union[StateType, str, None] = None, params=None):
        times = np.array(times, dtype=float)
        states = np.array(states, dtype=float)
        if times.ndim != 1 or times.size == 0:
            raise ValueError("times must be a non-empty 1-D array")
        if states.shape != (times.size, 6):
            raise ValueError(
                f"states must have shape ({times.size}, 6), got {states.shape}")
        times.flags.writeable = False
        states.flags.writeable = False

        self._propagator = propagator
        self._times = times
        self._states = states
        if state_type is None:
            if propagator is None:
                raise ValueError("state_type is required without a propagator")
            state_type = propagator.representation
        self._state_type = parse_state_type(state_type)
        if params is None:
            params = propagator.params if propagator is not None else None
        if params is None:
            raise ValueError("params is required without a propagator")
        self._params = params

    # ========== PROPERTY ACCESS ==========
    @property
    def propagator(self) -> Optional["Propagator"]:
        return self._propagator

    @property
    def params(self):
        return self._params

    @property
    def times(self) -> np.ndarray:
        return self._times

    @property
    def states(self) -> np.ndarray:
        return self._states

    @property
    def state_type(self) -> StateType:
        return self._state_type

    @property
    def t0(self):
        return float(self._times[0])

    @property
    def tf(self):
        return float(self._times[-1])

    @property
    def duration(self):
        """Trajectory duration."""
        return self.tf - self.t0

    @property
    def initial_state(self) -> OrbitalElements:
        return self[0]

    @property
    def final_state(self) -> OrbitalElements:
        return self[-1]

    # ========== UTILITY METHODS ==========
    def state_at(self, t: float,
                 element_type: Union[StateType, str, None] = None) -> OrbitalElements:
        """
        Get orbit state at one of the sample times.

        Parameters:
            t: Time to query, must match a sample time within config.GRID_TIME_ATOL
            element_type: Desired representation (defaults to the stored one)
        """
        idx = self._index_of(t)
        state = self[idx]
        if element_type is not None:
            state = state.convert_to(element_type)
        return state

    def _index_of(self, t):
        idx = int(np.argmin(np.abs(self._times - t)))
        if abs(self._times[idx] - t) > config.GRID_TIME_ATOL:
            raise ValueError(
                f"Time {t} is not a sample time of this trajectory "
                f"(t0={self.t0}, tf={self.tf}, {len(self)} samples)"
            )
        return idx

    def convert_to(self, target_type) -> "Trajectory":
        """
        Convert every sample to another representation.

        Returns:
            New Trajectory sharing times, propagator and params
        """
        target_type = parse_state_type(target_type)
        if target_type == self._state_type:
            return self
        converted = np.array([convert_state(row, self._state_type, target_type,
                                            self._params)
                              for row in self._states])
        return Trajectory(self._propagator, self._times, converted,
                          state_type=target_type, params=self._params)

    def specific_energy(self, include_j2: bool = True) -> np.ndarray:
        """Specific mechanical energy [J/kg] at every sample"""
        cart = self.convert_to(StateType.CARTESIAN).states
        return np.array([specific_mechanical_energy(row, self._params, include_j2)
                         for row in cart])

    def to_dataframe(self, element_type: Union[StateType, str, None] = None
                     ) -> pd.DataFrame:
        """
        Export trajectory to pandas DataFrame.

        Parameters:
            element_type: Representation of the exported columns
                          (defaults to the stored one)

        Returns:
            DataFrame with a time column and one column per state component
        """
        traj = self if element_type is None else self.convert_to(element_type)
        data = {'time': traj.times}
        for j, name in enumerate(ELEMENT_NAMES[traj.state_type]):
            data[name] = traj.states[:, j]
        return pd.DataFrame(data)

    def extend(self, new_tf: float, step: Optional[float] = None) -> 'Trajectory':
        """
        Extend trajectory by continuing propagation to a new final time.

        This creates a NEW Trajectory object that continues from the current
        end state. The original trajectory is unchanged.

        Parameters:
            new_tf: New final time (beyond the current tf in the direction
                    of propagation)
            step: Step size, defaults to the step of this trajectory

        Returns:
            New Trajectory object spanning [self.tf, new_tf]

        Raises:
            ValueError: If new_tf does not lie beyond self.tf
        """
        if self._propagator is None:
            raise ValueError("Cannot extend a trajectory without a propagator")
        forward = self.tf >= self.t0
        if (forward and new_tf <= self.tf) or (not forward and new_tf >= self.tf):
            raise ValueError(f"new_tf ({new_tf}) must lie beyond current tf ({self.tf})")
        if step is None and len(self) > 1:
            step = abs(self._times[1] - self._times[0])
        final = self._states[-1]
        if self._state_type != self._propagator.representation:
            final = convert_state(final, self._state_type,
                                  self._propagator.representation, self._params)
        return self._propagator.propagate(final, self.tf, float(new_tf), step=step)

    # ========== SPECIAL METHODS ==========
    def __len__(self):
        return self._times.size

    def __getitem__(self, idx) -> OrbitalElements:
        return OrbitalElements(self._states[idx], self._state_type,
                               validate=False, params=self._params)

    def __repr__(self):
        return (f"Trajectory(state_type='{self._state_type.name.lower()}', "
                f"t0={self.t0}, tf={self.tf}, samples={len(self)})")

    # ========== PLOTTING ==========
    def plot_3d(self, show_body: bool = True,
                body_color: Optional[str] = None, traj_color: Optional[str] = None,
                body_opacity: Optional[float] = None) -> go.Figure:
        """
        Create 3D plot of trajectory with optional Earth sphere.

        Parameters:
            show_body: Whether to show the Earth sphere (default: True)
            body_color: Color of Earth (default: config.DEFAULT_BODY_COLOR)
            traj_color: Color of trajectory line (default: config.DEFAULT_TRAJ_COLOR)
            body_opacity: Opacity of Earth (default: config.DEFAULT_BODY_OPACITY)

        Returns:
            Plotly Figure object
        """
        body_color = body_color or config.DEFAULT_BODY_COLOR
        traj_color = traj_color or config.DEFAULT_TRAJ_COLOR
        if body_opacity is None:
            body_opacity = config.DEFAULT_BODY_OPACITY

        positions = self.convert_to(StateType.CARTESIAN).states[:, 0:3] / 1e3

        fig = go.Figure()
        if show_body:
            self._add_sphere_to_plot(fig, center=(0, 0, 0),
                                     radius=self._params.R / 1e3,
                                     color=body_color, opacity=body_opacity,
                                     name="Earth")
        fig.add_trace(go.Scatter3d(
            x=positions[:, 0],
            y=positions[:, 1],
            z=positions[:, 2],
            mode='lines',
            line=dict(color=traj_color, width=3),
            name='Trajectory',
            hovertemplate='x: %{x:.1f}<br>y: %{y:.1f}<br>z: %{z:.1f}<extra></extra>'
        ))
        fig.update_layout(
            scene=dict(
                xaxis_title='X [km]',
                yaxis_title='Y [km]',
                zaxis_title='Z [km]',
                aspectmode='data'
            ),
            title='Orbital Trajectory',
            showlegend=True
        )
        return fig

    def _add_sphere_to_plot(self, fig, center, radius, color, opacity, name):
        """Helper to add a sphere to the plot at specified center."""
        u = np.linspace(0, 2 * np.pi, 30)
        v = np.linspace(0, np.pi, 20)

        x = center[0] + radius * np.outer(np.cos(u), np.sin(v))
        y = center[1] + radius * np.outer(np.sin(u), np.sin(v))
        z = center[2] + radius * np.outer(np.ones(np.size(u)), np.cos(v))

        fig.add_trace(go.Surface(
            x=x, y=y, z=z,
            colorscale=[[0, color], [1, color]],
            showscale=False,
            opacity=opacity,
            name=name,
            hoverinfo='name'
        ))
