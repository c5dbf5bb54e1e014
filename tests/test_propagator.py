"""
Test suite for the Propagator class and the solver shortcuts.

Tests include:
1. Construction and validation
2. Conservation and periodicity of the unperturbed problem
3. Agreement of the three representations under J2 and drag
4. The 500 km circular orbit scenario
"""

import logging

import numpy as np
import pytest

from orbidyn import (Propagator, Trajectory, OrbitalElements, StateType,
                     solve_orbit_dynamics_cartesian, solve_orbit_dynamics_classical,
                     solve_orbit_dynamics_equinoctial, specific_mechanical_energy,
                     SingularElementsError)
from orbidyn import transforms as tf
from orbidyn.defaults import (EARTH_PARAMETERS, UNPERTURBED_EARTH,
                              circular_orbit_initial_conditions)

P = EARTH_PARAMETERS


@pytest.fixture
def eccentric_orbit():
    return OrbitalElements(a=7000e3, e=0.01, i=0.5, omega=0.3, Omega=1.0, theta=0.2,
                           params=P)


# =============================================================================
# Construction
# =============================================================================

class TestConstruction:

    @pytest.mark.parametrize("rep, expected", [
        ('cartesian', StateType.CARTESIAN),
        ('kep', StateType.CLASSICAL),
        (StateType.EQUINOCTIAL, StateType.EQUINOCTIAL),
    ])
    def test_representation(self, rep, expected):
        assert Propagator(rep).representation == expected

    def test_defaults(self):
        prop = Propagator('cartesian')
        assert prop.perturbations == ('J2', 'drag')
        assert prop.params == P
        assert prop.step is None
        assert prop.extra is None

    def test_cylindrical_rejected(self):
        with pytest.raises(ValueError, match="No equations of motion"):
            Propagator('cylindrical')

    def test_unknown_perturbation(self):
        with pytest.raises(ValueError, match="Unknown perturbation"):
            Propagator('cartesian', perturbations=('SRP',))

    def test_duplicate_perturbation(self):
        with pytest.raises(ValueError, match="Duplicate"):
            Propagator('cartesian', perturbations=('J2', 'J2'))

    @pytest.mark.parametrize("step", [0.0, np.nan, np.inf])
    def test_bad_step(self, step):
        with pytest.raises(ValueError, match="finite and nonzero"):
            Propagator('cartesian', step=step)

    def test_bad_extra(self):
        with pytest.raises(ValueError, match="3-vector"):
            Propagator('cartesian', extra=[1.0, 2.0, 3.0, 4.0])

    def test_extra_is_read_only(self):
        prop = Propagator('cartesian', extra=[0.0, 1e-6, 0.0])
        with pytest.raises(ValueError):
            prop.extra[0] = 1.0

    def test_derivative_matches_eom(self):
        from orbidyn import equinoctial_eom
        prop = Propagator('equinoctial', perturbations=('J2',))
        x = tf.classical_to_equinoctial([7000e3, 0.01, 0.5, 0.3, 1.0, 0.2])
        np.testing.assert_array_equal(prop.derivative(x, 5.0),
                                      equinoctial_eom(x, P, 5.0, ('J2',)))

    def test_repr(self):
        text = repr(Propagator('classical', perturbations=('J2',), step=5.0))
        assert text.startswith("Propagator(representation='classical'")
        assert "step=5.0" in text

    def test_summary_logs(self, caplog):
        prop = Propagator('cartesian', extra=lambda s, p, t: np.zeros(3))
        with caplog.at_level(logging.INFO, logger="orbidyn.propagator"):
            text = prop.summary()
        assert "J₂" in text
        assert "Drag" in text
        assert "callable" in text
        assert text in caplog.text

    def test_summary_point_mass(self):
        assert "point mass" in Propagator('cartesian', perturbations=()).summary()


# =============================================================================
# Propagation
# =============================================================================

class TestPropagate:

    def test_returns_trajectory(self, eccentric_orbit):
        traj = Propagator('classical', step=10.0).propagate(eccentric_orbit, 0.0, 100.0)
        assert isinstance(traj, Trajectory)
        assert traj.state_type == StateType.CLASSICAL
        assert len(traj) == 11

    def test_initial_state_converted(self, eccentric_orbit):
        traj = Propagator('equinoctial', step=10.0).propagate(eccentric_orbit, 0.0, 10.0)
        np.testing.assert_allclose(traj.states[0],
                                   eccentric_orbit.to_equinoctial().elements)

    def test_raw_array_used_as_is(self):
        x0 = circular_orbit_initial_conditions(500e3, 0.3)
        traj = Propagator('cartesian', step=10.0).propagate(x0, 0.0, 10.0)
        np.testing.assert_array_equal(traj.states[0], x0)

    def test_step_override(self):
        x0 = circular_orbit_initial_conditions(500e3, 0.3)
        prop = Propagator('cartesian', step=10.0)
        assert len(prop.propagate(x0, 0.0, 100.0, step=5.0)) == 21

    def test_default_step_from_config(self):
        x0 = circular_orbit_initial_conditions(500e3, 0.3)
        assert len(Propagator('cartesian').propagate(x0, 0.0, 10.0)) == 11

    def test_backward_step_sign(self):
        x0 = circular_orbit_initial_conditions(500e3, 0.3)
        traj = Propagator('cartesian', step=10.0).propagate(x0, 100.0, 0.0)
        np.testing.assert_allclose(traj.times, np.linspace(100.0, 0.0, 11))

    def test_bad_initial_shape(self):
        with pytest.raises(ValueError, match="6-element"):
            Propagator('cartesian').propagate(np.zeros(5), 0.0, 10.0)

    def test_non_finite_initial_state(self):
        x0 = circular_orbit_initial_conditions(500e3, 0.3)
        x0[0] = np.nan
        with pytest.raises(ValueError, match="NaN or Inf"):
            Propagator('cartesian').propagate(x0, 0.0, 10.0)

    def test_integration_failure(self):
        x0 = circular_orbit_initial_conditions(500e3, 0.3)
        prop = Propagator('cartesian', extra=lambda s, p, t: np.array([np.nan, 0.0, 0.0]))
        with pytest.raises(ValueError, match="Integration failed"):
            prop.propagate(x0, 0.0, 10.0, step=1.0)

    def test_classical_circular_raises(self):
        x0 = OrbitalElements.classical([7000e3, 0.0, 0.5, 0.0, 0.0, 0.0], params=P)
        with pytest.raises(SingularElementsError):
            Propagator('classical').propagate(x0, 0.0, 10.0)


class TestUnperturbed:

    @pytest.mark.parametrize("rep", ['cartesian', 'classical', 'equinoctial'])
    def test_energy_conserved_and_orbit_closes(self, rep, eccentric_orbit):
        orbit = OrbitalElements(eccentric_orbit.elements, 'kep', params=UNPERTURBED_EARTH)
        period = orbit.orbital_period()
        prop = Propagator(rep, params=UNPERTURBED_EARTH, perturbations=())
        traj = prop.propagate(orbit, 0.0, period, step=period / 600)
        assert traj.tf == pytest.approx(period)

        energy = traj.specific_energy(include_j2=False)
        np.testing.assert_allclose(energy, energy[0], rtol=1e-6)

        cart = traj.convert_to('cartesian').states
        assert np.linalg.norm(cart[-1, :3] - cart[0, :3]) < 10.0
        assert np.linalg.norm(cart[-1, 3:] - cart[0, 3:]) < 1e-2

    def test_slow_elements_constant(self, eccentric_orbit):
        prop = Propagator('classical', params=UNPERTURBED_EARTH, perturbations=())
        traj = prop.propagate(eccentric_orbit, 0.0, 600.0, step=10.0)
        slow = traj.states[:, :5]
        np.testing.assert_allclose(slow, np.broadcast_to(slow[0], slow.shape))


class TestRepresentationsAgree:
    """Same initial orbit and forces give the same motion in every representation."""

    def test_j2_drag(self, eccentric_orbit):
        params = P.replace(rho=1e-10)
        t_end = 3000.0
        finals = []
        for rep in ('cartesian', 'classical', 'equinoctial'):
            traj = Propagator(rep, params=params).propagate(
                OrbitalElements(eccentric_orbit.elements, 'kep', params=params),
                0.0, t_end, step=10.0)
            finals.append(traj.final_state.to_cartesian().elements)
        for other in finals[1:]:
            assert np.linalg.norm(other[:3] - finals[0][:3]) < 10.0
            assert np.linalg.norm(other[3:] - finals[0][3:]) < 1e-2

    def test_j2_moves_node(self, eccentric_orbit):
        traj = Propagator('equinoctial', perturbations=('J2',)).propagate(
            eccentric_orbit, 0.0, 6000.0, step=20.0)
        final = traj.final_state.to_classical()
        assert final.elements[4] < eccentric_orbit.elements[4]


@pytest.fixture(scope="module")
def trajectory():
    """500 km, 45 deg circular orbit with J2 and drag over 90 minutes."""
    x0 = circular_orbit_initial_conditions(500e3, np.radians(45.0))
    return Propagator('cartesian', step=1.0).propagate(x0, 0.0, 5400.0)


class TestCircularScenario:

    def test_grid(self, trajectory):
        assert trajectory.states.shape == (5401, 6)
        assert trajectory.tf == 5400.0

    def test_altitude_bounded(self, trajectory):
        alt = np.linalg.norm(trajectory.states[:, :3], axis=1) - P.R
        assert np.all(alt > 480e3)
        assert np.all(alt < 520e3)

    def test_energy_decreases_under_drag(self, trajectory):
        energy = trajectory.specific_energy()
        assert energy[-1] < energy[0]
        # J2 conserves this energy; drag removes k v^3 per second on a circular orbit
        k_d = 0.5 * P.rho * P.C_D * P.A / P.m
        v = np.sqrt(P.mu / (P.R + 500e3))
        assert energy[0] - energy[-1] == pytest.approx(k_d * v**3 * 5400.0, rel=1e-2)


# =============================================================================
# Solver shortcuts
# =============================================================================

class TestShortcuts:

    def test_cartesian(self):
        x0 = circular_orbit_initial_conditions(500e3, 0.5)
        states, times = solve_orbit_dynamics_cartesian(x0, P, 1.0)
        assert states.shape == (11, 6)
        np.testing.assert_allclose(times, np.linspace(0.0, 1.0, 11))

    def test_classical(self):
        x0 = np.array([7000e3, 0.01, 0.5, 0.3, 1.0, 0.2])
        states, times = solve_orbit_dynamics_classical(x0, P, 10.0)
        assert states.shape == (11, 6)
        assert times[-1] == 10.0

    def test_equinoctial_matches_cartesian(self):
        x_cl = np.array([7000e3, 0.01, 0.5, 0.3, 1.0, 0.2])
        eq, _ = solve_orbit_dynamics_equinoctial(tf.classical_to_equinoctial(x_cl), P, 60.0)
        cart, _ = solve_orbit_dynamics_cartesian(tf.classical_to_cartesian(x_cl, P), P, 60.0,
                                                 h=1.0)
        np.testing.assert_allclose(tf.equinoctial_to_cartesian(eq[-1], P), cart[-1],
                                   rtol=1e-7, atol=1e-6)

    def test_energy_helper_on_states(self):
        x0 = circular_orbit_initial_conditions(500e3, 0.5)
        states, _ = solve_orbit_dynamics_cartesian(x0, UNPERTURBED_EARTH, 10.0)
        energies = [specific_mechanical_energy(s, UNPERTURBED_EARTH, False) for s in states]
        np.testing.assert_allclose(energies, energies[0], rtol=1e-10)
