# ---------------------------------------------------------------------------
# panel_ppc.generator — Panel AR(1) forward simulation
# ---------------------------------------------------------------------------
"""Simulate *J* independent AR(1) trajectories with random linear trends.

    y[j, t] = γ · y[j, t-1] + β_j · (t - 1) + ε,   ε ~ N(0, σ_y²)

for t = 2..T (1-based; column 0 in array terms is the initial condition,
supplied by the caller and never overwritten).
"""

from __future__ import annotations

import logging
import warnings

import numpy as np

from .config import GAMMA_BOUND, PanelConfig
from .draws import ParameterSet
from .exceptions import DomainWarning, ShapeMismatchError

logger = logging.getLogger(__name__)


def ar1_step(
    y_prev: np.ndarray,
    gamma: np.ndarray | float,
    beta: np.ndarray,
    t: int,
    eps: np.ndarray | float = 0.0,
) -> np.ndarray:
    """One step of the recursion at 0-based column *t* (trend term ``β·t``).

    Broadcasts over any leading axes, so the same step serves a single
    panel ``(J,)`` and a stack of draws ``(M, J)``.
    """
    return gamma * y_prev + beta * t + eps


def check_initial(y0, J: int) -> np.ndarray:
    """Validate the initial column and return it as a float array."""
    y0 = np.asarray(y0, dtype=float)
    if y0.ndim != 1 or y0.shape[0] != J:
        raise ShapeMismatchError(f"Initial condition has shape {y0.shape}, expected ({J},)")
    return y0


def check_length(T: int) -> None:
    if T < 2:
        raise ShapeMismatchError(f"T must be >= 2, got {T}")


def warn_nonstationary(gamma: np.ndarray) -> None:
    """Emit a :class:`DomainWarning` for draws with ``|γ| >= 1`` or a non-finite γ."""
    gamma = np.atleast_1d(gamma)
    # negated so NaN compares as out of bounds
    bad = np.where(~(np.abs(gamma) < GAMMA_BOUND))[0]
    if len(bad) == 0:
        return
    msg = (
        f"{len(bad)} of {len(gamma)} draw(s) have gamma outside (-1, 1) or non-finite "
        f"(first indices: {bad[:5].tolist()}); trajectories may be explosive"
    )
    logger.warning(msg)
    warnings.warn(msg, DomainWarning, stacklevel=3)


def simulate_panel(
    params: ParameterSet,
    y0,
    T: int,
    rng: np.random.Generator | None = None,
) -> np.ndarray:
    """Simulate one panel from *params*.

    Parameters
    ----------
    params : ParameterSet
        γ, σ_y and the per-individual slopes β (length *J*).
    y0 : array-like
        Initial column, length *J*.  Copied verbatim into column 0.
    T : int
        Number of time points (>= 2).
    rng : np.random.Generator, optional
        Noise source.  Required when ``params.sigma_y > 0``; with
        ``sigma_y == 0`` (or ``rng=None`` and ``sigma_y == 0``) the path
        is deterministic.

    Returns
    -------
    np.ndarray
        Panel of shape ``(J, T)``.
    """
    check_length(T)
    J = params.J
    y0 = check_initial(y0, J)
    if rng is None and params.sigma_y > 0:
        raise ValueError("rng is required when sigma_y > 0")
    warn_nonstationary(np.array([params.gamma]))

    y = np.empty((J, T))
    y[:, 0] = y0
    for t in range(1, T):
        eps = params.sigma_y * rng.standard_normal(J) if rng is not None else 0.0
        y[:, t] = ar1_step(y[:, t - 1], params.gamma, params.beta, t, eps)
    return y


def simulate_from_config(cfg: PanelConfig, y0=None, beta=None) -> tuple[np.ndarray, ParameterSet]:
    """Simulate a panel from a :class:`PanelConfig`.

    Slopes come from *beta* when given, otherwise they are drawn from
    ``Normal(0, cfg.sigma_beta²)``.  *y0* defaults to all zeros.  Slopes
    and noise share the stream seeded by ``cfg.seed``.
    """
    rng = np.random.default_rng(cfg.seed)
    if beta is not None:
        params = ParameterSet(gamma=cfg.gamma, sigma_y=cfg.sigma_y, beta=beta)
        if params.J != cfg.J:
            raise ShapeMismatchError(f"beta has length {params.J}, config has J={cfg.J}")
    elif cfg.sigma_beta is not None:
        params = ParameterSet.with_random_slopes(
            cfg.gamma, cfg.sigma_y, cfg.J, cfg.sigma_beta, rng
        )
    else:
        raise ValueError("Either beta or cfg.sigma_beta must be provided")

    if y0 is None:
        y0 = np.zeros(cfg.J)
    panel = simulate_panel(params, y0, cfg.T, rng)
    logger.info(f"Simulated panel J={cfg.J}, T={cfg.T}, gamma={cfg.gamma}, sigma_y={cfg.sigma_y}")
    return panel, params
