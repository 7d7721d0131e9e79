# ---------------------------------------------------------------------------
# panel_ppc.reconstruct — Replay posterior draws through the AR(1) recursion
# ---------------------------------------------------------------------------
"""Posterior-predictive reconstruction of the panel AR(1) model.

Every draw ``m`` is replayed with its own ``(γ_m, σ_y,m, β_m)`` from the
shared initial column.  Two modes:

* ``"mean"`` — ε ≡ 0, the conditional-expectation path per draw.
* ``"predictive"`` — fresh ε ~ N(0, σ_y,m²) per (draw, individual, time),
  i.e. replicated data for posterior-predictive checks.

The time loop is sequential; all draws and individuals advance together
as one ``(M, J)`` slab per step.  With ``chunk_size`` set, the draw axis is
split into chunks that run on a thread pool, each with its own random
substream spawned from *rng*, so results depend on ``chunk_size`` but not
on ``n_workers``.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from typing import Literal

import numpy as np

from .draws import ParameterSet, PosteriorDrawSet
from .exceptions import ShapeMismatchError
from .generator import ar1_step, check_initial, check_length, warn_nonstationary

logger = logging.getLogger(__name__)

Mode = Literal["mean", "predictive"]


def _as_draw_set(draws: PosteriorDrawSet | Sequence[ParameterSet]) -> PosteriorDrawSet:
    if isinstance(draws, PosteriorDrawSet):
        return draws
    return PosteriorDrawSet.from_parameter_sets(list(draws))


def _replay(
    gamma: np.ndarray,
    sigma_y: np.ndarray,
    beta: np.ndarray,
    y0: np.ndarray,
    T: int,
    rng: np.random.Generator | None,
) -> np.ndarray:
    """Run the recursion for a block of draws; ``rng=None`` means no noise."""
    m, J = beta.shape
    g = gamma[:, None]
    s = sigma_y[:, None]

    y = np.empty((m, J, T))
    y[:, :, 0] = y0
    for t in range(1, T):
        eps = s * rng.standard_normal((m, J)) if rng is not None else 0.0
        y[:, :, t] = ar1_step(y[:, :, t - 1], g, beta, t, eps)
    return y


def reconstruct(
    draws: PosteriorDrawSet | Sequence[ParameterSet],
    y0,
    T: int,
    mode: Mode = "mean",
    rng: np.random.Generator | int | None = None,
    J: int | None = None,
    chunk_size: int | None = None,
    n_workers: int = 1,
) -> np.ndarray:
    """Reconstruct one panel per posterior draw.

    Parameters
    ----------
    draws : PosteriorDrawSet or sequence of ParameterSet
        *M* posterior draws.
    y0 : array-like
        Fixed initial column, length *J*.
    T : int
        Number of time points (>= 2).
    mode : ``'mean'`` | ``'predictive'``
        Mean-path (noise-free) or posterior-predictive (noisy) replay.
    rng : np.random.Generator or int, optional
        Noise source for ``mode='predictive'``; an int is used as a seed.
        Ignored in mean-path mode.
    J : int, optional
        Declared number of individuals; checked against the draws and *y0*.
    chunk_size : int, optional
        Split the draws into blocks of this size, each with an independent
        substream.
    n_workers : int
        Thread-pool size used when ``chunk_size`` is set.

    Returns
    -------
    np.ndarray
        Shape ``(M, J, T)``; ``out[m]`` is the panel for draw *m*.

    Raises
    ------
    EmptyDrawSetError
        If there are no draws.
    ShapeMismatchError
        If a draw's β, or *y0*, does not have length *J*.
    """
    ds = _as_draw_set(draws)
    check_length(T)
    if J is None:
        J = ds.J
    elif ds.J != J:
        raise ShapeMismatchError(f"Draws have beta of length {ds.J}, expected J={J}")
    y0 = check_initial(y0, J)

    if mode not in ("mean", "predictive"):
        raise ValueError(f"Unknown reconstruction mode: {mode!r}")
    if mode == "predictive":
        if rng is None:
            raise ValueError("rng is required for mode='predictive'")
        if not isinstance(rng, np.random.Generator):
            rng = np.random.default_rng(rng)
    else:
        rng = None

    warn_nonstationary(ds.gamma)

    M = len(ds)
    if chunk_size is None or chunk_size >= M:
        out = _replay(ds.gamma, ds.sigma_y, ds.beta, y0, T, rng)
        logger.debug(f"Reconstructed {M} draws ({mode}) in one block")
        return out

    if chunk_size < 1:
        raise ValueError(f"chunk_size must be >= 1, got {chunk_size}")
    starts = list(range(0, M, chunk_size))
    streams = rng.spawn(len(starts)) if rng is not None else [None] * len(starts)

    out = np.empty((M, J, T))

    def _run(i: int) -> None:
        sl = slice(starts[i], starts[i] + chunk_size)
        out[sl] = _replay(ds.gamma[sl], ds.sigma_y[sl], ds.beta[sl], y0, T, streams[i])

    with ThreadPoolExecutor(max_workers=max(1, n_workers)) as pool:
        list(pool.map(_run, range(len(starts))))

    logger.debug(f"Reconstructed {M} draws ({mode}) in {len(starts)} chunks, {n_workers} worker(s)")
    return out


def mean_paths(draws, y0, T: int, **kwargs) -> np.ndarray:
    """Noise-free reconstruction; see :func:`reconstruct`."""
    return reconstruct(draws, y0, T, mode="mean", **kwargs)


def posterior_predictive(draws, y0, T: int, rng, **kwargs) -> np.ndarray:
    """Replicated panels with fresh observation noise; see :func:`reconstruct`."""
    return reconstruct(draws, y0, T, mode="predictive", rng=rng, **kwargs)
