# ---------------------------------------------------------------------------
# panel_ppc.model — PyMC model specifications
# ---------------------------------------------------------------------------
"""Hierarchical panel AR(1) model and standardised linear regression with
interaction terms."""

from __future__ import annotations

import numpy as np
import pymc as pm
import pytensor.tensor as pt

from .config import (
    COEF_PRIOR_SIGMA,
    GAMMA_BOUND,
    SIGMA_BETA_PRIOR,
    SIGMA_LINEAR_PRIOR,
    SIGMA_Y_PRIOR,
)
from .exceptions import ShapeMismatchError


def build_panel_ar1_model(
    data: dict,
    sigma_y_prior: float | None = None,
    sigma_beta_prior: float | None = None,
) -> pm.Model:
    """Build the hierarchical panel AR(1) model.

    Parameters
    ----------
    data : dict
        Output of :func:`panel_ppc.data.build_panel_data`.
    sigma_y_prior : float, optional
        HalfNormal scale on σ_y.  Defaults to config value.
    sigma_beta_prior : float, optional
        HalfNormal scale on σ_β.  Defaults to config value.

    Model
    -----
    ::

        γ    ~ Uniform(-1, 1)
        σ_y  ~ HalfNormal(sigma_y_prior)
        σ_β  ~ HalfNormal(sigma_beta_prior)
        β_j  = σ_β · z_j,  z_j ~ N(0, 1)
        y[j, t] ~ N(γ · y[j, t-1] + β_j · (t - 1), σ_y),   t = 2..T

    The first column is conditioned on, not modelled.
    """
    if sigma_y_prior is None:
        sigma_y_prior = SIGMA_Y_PRIOR
    if sigma_beta_prior is None:
        sigma_beta_prior = SIGMA_BETA_PRIOR

    y = data["y"]
    J, T = data["J"], data["T"]
    t_index = data["t_index"]

    coords = {"individual": np.arange(J), "step": np.arange(1, T)}

    with pm.Model(coords=coords) as model:
        gamma = pm.Uniform("gamma", lower=-GAMMA_BOUND, upper=GAMMA_BOUND)
        sigma_y = pm.HalfNormal("sigma_y", sigma=sigma_y_prior)
        sigma_beta = pm.HalfNormal("sigma_beta", sigma=sigma_beta_prior)

        # Non-centred random slopes
        z_beta = pm.Normal("z_beta", 0, 1, dims="individual")
        beta = pm.Deterministic("beta", sigma_beta * z_beta, dims="individual")

        mu = gamma * pt.as_tensor_variable(y[:, :-1]) + beta[:, None] * t_index[None, :]
        pm.Normal("obs_y", mu=mu, sigma=sigma_y, observed=y[:, 1:], dims=("individual", "step"))

    return model


def add_interactions(
    X: np.ndarray,
    names: list[str],
    pairs: list[tuple[str, str]],
) -> tuple[np.ndarray, list[str]]:
    """Append elementwise-product columns for each named pair.

    Interaction columns are named ``"a:b"``.  Build interactions on the
    original scale, then standardise the full design.
    """
    X = np.asarray(X, dtype=float)
    if X.ndim != 2 or X.shape[1] != len(names):
        raise ShapeMismatchError(f"X has shape {X.shape} but {len(names)} names")
    col = {n: k for k, n in enumerate(names)}

    extra, extra_names = [], []
    for a, b in pairs:
        if a not in col or b not in col:
            raise KeyError(f"Unknown column in interaction {a}:{b}; available: {names}")
        extra.append(X[:, col[a]] * X[:, col[b]])
        extra_names.append(f"{a}:{b}")

    if not extra:
        return X.copy(), list(names)
    return np.column_stack([X, *extra]), list(names) + extra_names


def build_linear_model(
    X_std: np.ndarray,
    y_std: np.ndarray,
    names: list[str] | None = None,
) -> pm.Model:
    """Linear regression through the origin on standardised data.

    Coefficients are on the standardised scale; map draws back with
    :func:`panel_ppc.scaling.rescale_coefficients`.
    """
    X_std = np.asarray(X_std, dtype=float)
    y_std = np.asarray(y_std, dtype=float)
    n, K = X_std.shape
    if y_std.shape != (n,):
        raise ShapeMismatchError(f"y has shape {y_std.shape}, expected ({n},)")
    if names is None:
        names = [f"x{k}" for k in range(K)]

    coords = {"coef": names, "obs_id": np.arange(n)}

    with pm.Model(coords=coords) as model:
        X_data = pm.Data("X", X_std, dims=("obs_id", "coef"))
        coefs = pm.Normal("coefs", 0, COEF_PRIOR_SIGMA, dims="coef")
        sigma = pm.HalfNormal("sigma", sigma=SIGMA_LINEAR_PRIOR)
        pm.Normal("obs", mu=pt.dot(X_data, coefs), sigma=sigma, observed=y_std, dims="obs_id")

    return model
