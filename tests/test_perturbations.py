"""
Test suite for J2 and drag force models.

The RTN forms used by the element equations are checked against the
Cartesian forms rotated into the orbit frame at the same state.
"""

import numpy as np
import pytest

from orbidyn import perturbations as pert
from orbidyn import transforms as tf
from orbidyn import PhysicalParameters
from orbidyn.defaults import EARTH_PARAMETERS

P = EARTH_PARAMETERS

STATES = [
    np.array([7000e3, 0.01, 0.5, 0.3, 1.2, 2.0]),
    np.array([8000e3, 0.2, 1.2, 4.0, 0.4, 0.7]),
    np.array([26554e3, 0.737, 1.1, 4.7, 1.7, 0.5]),
    np.array([7500e3, 0.05, 2.6, 1.0, 3.0, 5.5]),
]


class TestFrame:

    def test_basis_orthonormal(self):
        x = tf.classical_to_cartesian(STATES[1], P)
        B = pert.rtn_basis(x[:3], x[3:])
        np.testing.assert_allclose(B @ B.T, np.eye(3), atol=1e-12)
        # right handed: R x T = N
        np.testing.assert_allclose(np.cross(B[0], B[1]), B[2], atol=1e-12)

    def test_radial_axis(self):
        x = tf.classical_to_cartesian(STATES[0], P)
        B = pert.rtn_basis(x[:3], x[3:])
        np.testing.assert_allclose(B[0], x[:3] / np.linalg.norm(x[:3]))

    def test_rotation_roundtrip(self):
        x = tf.classical_to_cartesian(STATES[2], P)
        u = np.array([1e-3, -2e-4, 5e-5])
        a = pert.rtn_to_cartesian(x[:3], x[3:], u)
        np.testing.assert_allclose(pert.cartesian_to_rtn(x[:3], x[3:], a), u, atol=1e-15)


class TestJ2:

    def test_equatorial_point(self):
        """On the equator J2 pulls inward with magnitude 3/2 c r."""
        r = np.array([7000e3, 0.0, 0.0])
        a = pert.j2_acceleration_cartesian(r, P)
        c = P.mu * P.J2 * P.R**2 / 7000e3**4
        np.testing.assert_allclose(a, [-1.5 * c, 0.0, 0.0])

    def test_polar_point(self):
        """Above the pole J2 pushes outward along z."""
        r = np.array([0.0, 0.0, 7000e3])
        a = pert.j2_acceleration_cartesian(r, P)
        c = P.mu * P.J2 * P.R**2 / 7000e3**4
        np.testing.assert_allclose(a, [0.0, 0.0, 3.0 * c])

    def test_zero_J2(self):
        params = PhysicalParameters(J2=0.0)
        np.testing.assert_array_equal(
            pert.j2_acceleration_cartesian(np.array([7000e3, 1e3, 2e3]), params), 0.0)

    @pytest.mark.parametrize("x_cl", STATES)
    def test_classical_matches_cartesian(self, x_cl):
        x = tf.classical_to_cartesian(x_cl, P)
        expected = pert.cartesian_to_rtn(x[:3], x[3:],
                                         pert.j2_acceleration_cartesian(x[:3], P))
        np.testing.assert_allclose(pert.j2_perturbation_classical(x_cl, P), expected,
                                   rtol=1e-8, atol=1e-14)

    @pytest.mark.parametrize("x_cl", STATES)
    def test_equinoctial_matches_cartesian(self, x_cl):
        x = tf.classical_to_cartesian(x_cl, P)
        expected = pert.cartesian_to_rtn(x[:3], x[3:],
                                         pert.j2_acceleration_cartesian(x[:3], P))
        x_eq = tf.classical_to_equinoctial(x_cl)
        np.testing.assert_allclose(pert.j2_perturbation_equinoctial(x_eq, P), expected,
                                   rtol=1e-8, atol=1e-14)

    def test_gravity_includes_j2(self):
        r = np.array([7000e3, 1000e3, 2000e3])
        point = -P.mu * r / np.linalg.norm(r)**3
        np.testing.assert_allclose(pert.gravity_acceleration(r, P, include_j2=False), point)
        np.testing.assert_allclose(pert.gravity_acceleration(r, P),
                                   point + pert.j2_acceleration_cartesian(r, P))


class TestDrag:

    @pytest.fixture
    def drag_params(self):
        return PhysicalParameters(rho=1e-11, C_D=2.2, A=0.05, m=4.0)

    def test_cartesian_opposes_velocity(self, drag_params):
        v = np.array([100.0, 7500.0, -300.0])
        a = pert.drag_acceleration_cartesian(v, drag_params)
        k = 0.5 * 1e-11 * 2.2 * 0.05 / 4.0
        np.testing.assert_allclose(a, -k * np.linalg.norm(v) * v)
        assert np.dot(a, v) < 0

    def test_divided_by_mass(self, drag_params):
        v = np.array([0.0, 7500.0, 0.0])
        heavy = drag_params.replace(m=8.0)
        np.testing.assert_allclose(pert.drag_acceleration_cartesian(v, heavy),
                                   0.5 * pert.drag_acceleration_cartesian(v, drag_params))

    def test_zero_density(self):
        params = PhysicalParameters(rho=0.0)
        np.testing.assert_array_equal(
            pert.drag_acceleration_cartesian(np.array([0.0, 7500.0, 0.0]), params), 0.0)

    def test_rtn_helper(self, drag_params):
        u = pert.drag_perturbation_rtn(3.0, 4.0, drag_params)
        k = 0.5 * 1e-11 * 2.2 * 0.05 / 4.0
        np.testing.assert_allclose(u, [-k * 5 * 3, -k * 5 * 4, 0.0])

    @pytest.mark.parametrize("x_cl", STATES)
    def test_classical_matches_cartesian(self, x_cl, drag_params):
        x = tf.classical_to_cartesian(x_cl, drag_params)
        expected = pert.cartesian_to_rtn(
            x[:3], x[3:], pert.drag_acceleration_cartesian(x[3:], drag_params))
        np.testing.assert_allclose(pert.drag_perturbation_classical(x_cl, drag_params),
                                   expected, rtol=1e-9, atol=1e-18)

    @pytest.mark.parametrize("x_cl", STATES)
    def test_equinoctial_matches_cartesian(self, x_cl, drag_params):
        x = tf.classical_to_cartesian(x_cl, drag_params)
        expected = pert.cartesian_to_rtn(
            x[:3], x[3:], pert.drag_acceleration_cartesian(x[3:], drag_params))
        x_eq = tf.classical_to_equinoctial(x_cl)
        np.testing.assert_allclose(pert.drag_perturbation_equinoctial(x_eq, drag_params),
                                   expected, rtol=1e-9, atol=1e-18)
