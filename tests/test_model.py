"""Tests for panel_ppc.model — PyMC model construction (no sampling)."""

import numpy as np
import pytest

from panel_ppc.data import build_panel_data
from panel_ppc.exceptions import ShapeMismatchError
from panel_ppc.model import add_interactions, build_linear_model, build_panel_ar1_model


def _make_panel(J: int = 4, T: int = 6) -> np.ndarray:
    return np.random.default_rng(0).normal(size=(J, T))


class TestPanelAR1Model:
    """Tests for build_panel_ar1_model."""

    def test_variables(self):
        model = build_panel_ar1_model(build_panel_data(_make_panel()))
        free = {rv.name for rv in model.free_RVs}
        assert free == {"gamma", "sigma_y", "sigma_beta", "z_beta"}
        assert "beta" in model.named_vars
        assert [rv.name for rv in model.observed_RVs] == ["obs_y"]

    def test_observed_excludes_initial_column(self):
        panel = _make_panel(J=4, T=6)
        model = build_panel_ar1_model(build_panel_data(panel))
        obs = model.rvs_to_values[model["obs_y"]].eval()
        np.testing.assert_array_equal(obs, panel[:, 1:])

    def test_logp_finite_at_initial_point(self):
        model = build_panel_ar1_model(build_panel_data(_make_panel()))
        logp = model.compile_logp()(model.initial_point())
        assert np.isfinite(logp)


class TestInteractions:
    """Tests for add_interactions."""

    def test_product_columns(self):
        X = np.array([[1.0, 2.0, 3.0], [4.0, 5.0, 6.0]])
        out, names = add_interactions(X, ["a", "b", "c"], [("a", "b"), ("b", "c")])
        assert names == ["a", "b", "c", "a:b", "b:c"]
        np.testing.assert_array_equal(out[:, 3], [2.0, 20.0])
        np.testing.assert_array_equal(out[:, 4], [6.0, 30.0])

    def test_no_pairs(self):
        X = np.ones((2, 2))
        out, names = add_interactions(X, ["a", "b"], [])
        assert out.shape == (2, 2)
        assert names == ["a", "b"]

    def test_unknown_name(self):
        with pytest.raises(KeyError):
            add_interactions(np.ones((2, 2)), ["a", "b"], [("a", "z")])

    def test_name_count(self):
        with pytest.raises(ShapeMismatchError):
            add_interactions(np.ones((2, 2)), ["a"], [])


class TestLinearModel:
    """Tests for build_linear_model."""

    def test_variables_and_coords(self):
        X = np.random.default_rng(1).normal(size=(30, 3))
        y = X @ np.array([1.0, 0.0, -1.0])
        model = build_linear_model(X, y, ["a", "b", "a:b"])
        assert {rv.name for rv in model.free_RVs} == {"coefs", "sigma"}
        assert list(model.coords["coef"]) == ["a", "b", "a:b"]
        assert np.isfinite(model.compile_logp()(model.initial_point()))

    def test_response_shape(self):
        with pytest.raises(ShapeMismatchError):
            build_linear_model(np.ones((5, 2)), np.ones(4))
