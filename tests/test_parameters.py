"""
Test suite for PhysicalParameters and the YAML parameter loader.
"""

import dataclasses
import math

import pytest

from orbidyn import PhysicalParameters, load_parameters


class TestDefaults:
    """Default values and derived quantities."""

    def test_default_values(self):
        p = PhysicalParameters()
        assert p.G == 6.674e-11
        assert p.M == 5.9722e24
        assert p.J2 == 0.1082626925638815e-2
        assert p.R == 6378137.0
        assert p.m == 1.0
        assert p.rho == 1e-12
        assert p.C_D == 1.0
        assert p.A == pytest.approx(0.03)
        assert p.distance_scale is None
        assert p.time_scale is None

    def test_mu_is_derived(self):
        """mu always equals G*M."""
        p = PhysicalParameters(G=1.0, M=2.0)
        assert p.mu == 2.0
        assert PhysicalParameters().mu == pytest.approx(3.9858e14, rel=1e-4)

    def test_frozen(self):
        p = PhysicalParameters()
        with pytest.raises(dataclasses.FrozenInstanceError):
            p.m = 5.0

    def test_replace_returns_new_instance(self):
        p = PhysicalParameters()
        q = p.replace(m=4.0)
        assert q.m == 4.0
        assert p.m == 1.0

    def test_has_scales(self):
        assert not PhysicalParameters().has_scales
        assert PhysicalParameters(distance_scale=1e6, time_scale=100.0).has_scales


class TestValidation:
    """__post_init__ rejects unphysical parameters."""

    @pytest.mark.parametrize("name", ['G', 'M', 'R', 'm', 'C_D', 'A'])
    @pytest.mark.parametrize("value", [0.0, -1.0, math.inf, math.nan])
    def test_positive_fields(self, name, value):
        with pytest.raises(ValueError):
            PhysicalParameters(**{name: value})

    @pytest.mark.parametrize("name", ['J2', 'rho'])
    def test_zero_allowed_for_perturbation_strengths(self, name):
        p = PhysicalParameters(**{name: 0.0})
        assert getattr(p, name) == 0.0

    @pytest.mark.parametrize("name", ['J2', 'rho'])
    def test_negative_perturbation_strength_rejected(self, name):
        with pytest.raises(ValueError):
            PhysicalParameters(**{name: -1e-3})

    def test_unrealistic_J2(self):
        with pytest.raises(ValueError, match="unrealistic"):
            PhysicalParameters(J2=2.0)

    def test_zero_scale_rejected(self):
        with pytest.raises(ValueError):
            PhysicalParameters(distance_scale=0.0)


class TestOptions:
    """Collaborator option names."""

    def test_from_options(self):
        p = PhysicalParameters.from_options(
            {'m_satellite': 4, 'R_earth': 6.4e6, 'G_gravity': 6.67e-11,
             'M_earth': 6e24, 'C_D': 2.2})
        assert p.m == 4.0
        assert p.R == 6.4e6
        assert p.G == 6.67e-11
        assert p.M == 6e24
        assert p.C_D == 2.2
        # untouched options keep defaults
        assert p.rho == 1e-12

    def test_unknown_option(self):
        with pytest.raises(ValueError, match="Unknown parameter option"):
            PhysicalParameters.from_options({'mass': 3.0})

    def test_to_options_inverse(self):
        p = PhysicalParameters(m=3.0, rho=2e-12)
        assert PhysicalParameters.from_options(p.to_options()) == p


class TestLoadParameters:
    """YAML loading."""

    def test_nested_under_parameters(self, tmp_path):
        path = tmp_path / "params.yaml"
        path.write_text("parameters:\n  m_satellite: 4.0\n  rho: 2.0e-12\n  C_D: 2.2\n")
        p = load_parameters(path)
        assert p.m == 4.0
        assert p.rho == 2e-12
        assert p.C_D == 2.2

    def test_top_level(self, tmp_path):
        path = tmp_path / "params.yaml"
        path.write_text("J2: 0.0\nA: 0.01\n")
        p = load_parameters(str(path))
        assert p.J2 == 0.0
        assert p.A == 0.01

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_parameters(path) == PhysicalParameters()

    def test_non_mapping_rejected(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n")
        with pytest.raises(ValueError, match="mapping"):
            load_parameters(path)

    def test_invalid_value_rejected(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("m_satellite: -1.0\n")
        with pytest.raises(ValueError):
            load_parameters(path)
