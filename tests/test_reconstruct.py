"""Tests for panel_ppc.reconstruct — replaying posterior draws."""

import numpy as np
import pytest

from panel_ppc.draws import ParameterSet, PosteriorDrawSet
from panel_ppc.exceptions import DomainWarning, EmptyDrawSetError, ShapeMismatchError
from panel_ppc.generator import simulate_panel
from panel_ppc.reconstruct import mean_paths, posterior_predictive, reconstruct


def _make_draws(M: int = 10, J: int = 4, seed: int = 0) -> PosteriorDrawSet:
    """Random but stationary draws."""
    rng = np.random.default_rng(seed)
    return PosteriorDrawSet(
        gamma=rng.uniform(-0.9, 0.9, M),
        sigma_y=rng.uniform(0.1, 1.0, M),
        beta=rng.normal(0.0, 0.5, (M, J)),
    )


class TestMeanPath:
    """Tests for mode='mean'."""

    def test_concrete_scenario(self):
        draws = [ParameterSet(gamma=0.5, sigma_y=0.0, beta=[1.0, 2.0])]
        out = mean_paths(draws, [0.0, 0.0], T=3)
        assert out.shape == (1, 2, 3)
        np.testing.assert_allclose(out[0], [[0.0, 1.0, 2.5], [0.0, 2.0, 5.0]])

    def test_each_draw_uses_its_own_parameters(self):
        draws = _make_draws(M=6, J=3)
        y0 = np.array([0.5, -1.0, 2.0])
        out = mean_paths(draws, y0, T=7)
        for m in range(len(draws)):
            p = draws[m]
            expected = simulate_panel(ParameterSet(p.gamma, 0.0, p.beta), y0, T=7)
            np.testing.assert_allclose(out[m], expected)

    def test_repeatable_without_randomness(self):
        draws = _make_draws()
        a = mean_paths(draws, np.zeros(4), T=8)
        b = mean_paths(draws, np.zeros(4), T=8)
        assert np.array_equal(a, b)

    def test_rng_ignored(self):
        draws = _make_draws()
        a = reconstruct(draws, np.zeros(4), 8, mode="mean", rng=1)
        b = reconstruct(draws, np.zeros(4), 8, mode="mean", rng=2)
        assert np.array_equal(a, b)

    def test_initial_column_preserved(self):
        y0 = np.array([1.1, -2.2, 3.3, 0.0])
        out = mean_paths(_make_draws(), y0, T=5)
        assert np.all(out[:, :, 0] == y0)


class TestPosteriorPredictive:
    """Tests for mode='predictive'."""

    def test_deterministic_under_fixed_seed(self):
        draws = _make_draws()
        a = posterior_predictive(draws, np.zeros(4), 10, np.random.default_rng(7))
        b = posterior_predictive(draws, np.zeros(4), 10, np.random.default_rng(7))
        assert np.array_equal(a, b)

    def test_int_seed_accepted(self):
        draws = _make_draws()
        a = posterior_predictive(draws, np.zeros(4), 10, 7)
        b = posterior_predictive(draws, np.zeros(4), 10, np.random.default_rng(7))
        assert np.array_equal(a, b)

    def test_noise_added(self):
        draws = _make_draws()
        pred = posterior_predictive(draws, np.zeros(4), 10, 3)
        mean = mean_paths(draws, np.zeros(4), 10)
        assert not np.allclose(pred[:, :, 1:], mean[:, :, 1:])
        np.testing.assert_array_equal(pred[:, :, 0], mean[:, :, 0])

    def test_zero_noise_draw_matches_mean_path(self):
        draws = PosteriorDrawSet(gamma=[0.3, 0.3], sigma_y=[0.0, 1.0], beta=[[1.0, -1.0]] * 2)
        pred = posterior_predictive(draws, np.zeros(2), 6, 0)
        mean = mean_paths(draws, np.zeros(2), 6)
        np.testing.assert_allclose(pred[0], mean[0])
        assert not np.allclose(pred[1], mean[1])

    def test_noise_scale(self):
        M = 4000
        draws = PosteriorDrawSet(
            gamma=np.full(M, 0.5), sigma_y=np.full(M, 2.0), beta=np.ones((M, 1))
        )
        out = posterior_predictive(draws, [0.0], 2, 123)
        eps = out[:, 0, 1] - 1.0
        assert eps.std() == pytest.approx(2.0, rel=0.05)
        assert abs(eps.mean()) < 0.15

    def test_rng_required(self):
        with pytest.raises(ValueError):
            reconstruct(_make_draws(), np.zeros(4), 5, mode="predictive")

    def test_unknown_mode(self):
        with pytest.raises(ValueError):
            reconstruct(_make_draws(), np.zeros(4), 5, mode="median")


class TestChunking:
    """Tests for chunked / threaded replay."""

    def test_mean_chunked_matches_single_block(self):
        draws = _make_draws(M=23)
        a = mean_paths(draws, np.zeros(4), 9)
        b = mean_paths(draws, np.zeros(4), 9, chunk_size=5, n_workers=3)
        np.testing.assert_allclose(a, b)

    def test_predictive_independent_of_worker_count(self):
        draws = _make_draws(M=23)
        a = posterior_predictive(draws, np.zeros(4), 9, 99, chunk_size=4, n_workers=1)
        b = posterior_predictive(draws, np.zeros(4), 9, 99, chunk_size=4, n_workers=6)
        assert np.array_equal(a, b)

    def test_bad_chunk_size(self):
        with pytest.raises(ValueError):
            mean_paths(_make_draws(), np.zeros(4), 5, chunk_size=0)


class TestValidation:
    """Tests for shape and draw-set validation."""

    def test_beta_length_mismatch(self):
        draws = _make_draws(M=3, J=7)
        with pytest.raises(ShapeMismatchError):
            mean_paths(draws, np.zeros(8), 5)
        with pytest.raises(ShapeMismatchError):
            mean_paths(draws, np.zeros(7), 5, J=8)

    def test_mixed_beta_lengths_in_sequence(self):
        draws = [
            ParameterSet(gamma=0.1, sigma_y=1.0, beta=np.zeros(8)),
            ParameterSet(gamma=0.1, sigma_y=1.0, beta=np.zeros(7)),
        ]
        with pytest.raises(ShapeMismatchError):
            mean_paths(draws, np.zeros(8), 5)

    def test_initial_length_mismatch(self):
        with pytest.raises(ShapeMismatchError):
            mean_paths(_make_draws(J=4), np.zeros(3), 5)

    def test_empty_draw_set(self):
        with pytest.raises(EmptyDrawSetError):
            mean_paths([], np.zeros(3), 5)

    def test_short_series(self):
        with pytest.raises(ShapeMismatchError):
            mean_paths(_make_draws(), np.zeros(4), 1)

    def test_nonstationary_draw_warns(self):
        draws = PosteriorDrawSet(gamma=[0.2, -1.3], sigma_y=[0.1, 0.1], beta=[[0.0], [0.0]])
        with pytest.warns(DomainWarning):
            out = mean_paths(draws, [1.0], 4)
        np.testing.assert_allclose(out[1, 0], [1.0, -1.3, 1.69, -2.197])

    def test_nan_gamma_draw_warns(self):
        draws = PosteriorDrawSet(gamma=[0.2, np.nan], sigma_y=[0.1, 0.1], beta=[[0.0], [0.0]])
        with pytest.warns(DomainWarning, match="non-finite"):
            out = mean_paths(draws, [1.0], 4)
        assert np.isnan(out[1, 0, 1:]).all()
        np.testing.assert_allclose(out[0, 0], [1.0, 0.2, 0.04, 0.008])
