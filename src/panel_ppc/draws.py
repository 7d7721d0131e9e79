# ---------------------------------------------------------------------------
# panel_ppc.draws — Parameter sets and posterior draw collections
# ---------------------------------------------------------------------------
"""Containers for AR(1) panel parameters.

A :class:`ParameterSet` holds one (γ, σ_y, β) combination.  A
:class:`PosteriorDrawSet` stacks *M* of them as arrays so that the
reconstructor can advance every draw in lock-step.  The sampler output is
read only through :meth:`PosteriorDrawSet.from_inference_data`, which
flattens ``(chain, draw)`` into a single draw axis.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import arviz as az
import numpy as np

from .exceptions import EmptyDrawSetError, ShapeMismatchError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class ParameterSet:
    """One AR(1) panel parameter combination.

    Parameters
    ----------
    gamma : float
        Autoregressive coefficient, nominally in (-1, 1).
    sigma_y : float
        Observation noise scale (>= 0; zero gives a noiseless path).
    beta : np.ndarray
        Per-individual slopes, shape ``(J,)``.
    """

    gamma: float
    sigma_y: float
    beta: np.ndarray

    def __post_init__(self) -> None:
        beta = np.array(self.beta, dtype=float)
        if beta.ndim != 1:
            raise ShapeMismatchError(f"beta must be 1-D, got shape {beta.shape}")
        if self.sigma_y < 0:
            raise ValueError(f"sigma_y must be non-negative, got {self.sigma_y}")
        beta.setflags(write=False)
        object.__setattr__(self, "beta", beta)
        object.__setattr__(self, "gamma", float(self.gamma))
        object.__setattr__(self, "sigma_y", float(self.sigma_y))

    @property
    def J(self) -> int:
        return self.beta.shape[0]

    @classmethod
    def with_random_slopes(
        cls,
        gamma: float,
        sigma_y: float,
        J: int,
        sigma_beta: float,
        rng: np.random.Generator,
    ) -> ParameterSet:
        """Draw ``β_j ~ Normal(0, sigma_beta²)`` i.i.d. for *J* individuals."""
        if J < 1:
            raise ShapeMismatchError(f"J must be >= 1, got {J}")
        if sigma_beta < 0:
            raise ValueError(f"sigma_beta must be non-negative, got {sigma_beta}")
        beta = rng.normal(0.0, sigma_beta, size=J)
        return cls(gamma=gamma, sigma_y=sigma_y, beta=beta)


@dataclass(frozen=True, eq=False)
class PosteriorDrawSet:
    """*M* posterior draws stacked along the leading axis.

    Attributes
    ----------
    gamma : np.ndarray
        Shape ``(M,)``.
    sigma_y : np.ndarray
        Shape ``(M,)``.
    beta : np.ndarray
        Shape ``(M, J)``.
    """

    gamma: np.ndarray
    sigma_y: np.ndarray
    beta: np.ndarray

    def __post_init__(self) -> None:
        gamma = np.array(self.gamma, dtype=float).reshape(-1)
        sigma_y = np.array(self.sigma_y, dtype=float).reshape(-1)
        beta = np.array(self.beta, dtype=float)

        M = gamma.shape[0]
        if M == 0:
            raise EmptyDrawSetError("Posterior draw set contains no draws")
        if beta.ndim == 1 and M == 1:
            beta = beta[None, :]
        if beta.ndim != 2:
            raise ShapeMismatchError(f"beta must have shape (M, J), got {beta.shape}")
        if sigma_y.shape[0] != M or beta.shape[0] != M:
            raise ShapeMismatchError(
                f"Inconsistent draw counts: gamma={M}, sigma_y={sigma_y.shape[0]}, "
                f"beta={beta.shape[0]}"
            )
        if np.any(sigma_y < 0):
            raise ValueError(f"{int(np.sum(sigma_y < 0))} draws have negative sigma_y")

        for arr in (gamma, sigma_y, beta):
            arr.setflags(write=False)
        object.__setattr__(self, "gamma", gamma)
        object.__setattr__(self, "sigma_y", sigma_y)
        object.__setattr__(self, "beta", beta)

    def __len__(self) -> int:
        return self.gamma.shape[0]

    def __getitem__(self, m: int) -> ParameterSet:
        return ParameterSet(gamma=self.gamma[m], sigma_y=self.sigma_y[m], beta=self.beta[m])

    def __iter__(self):
        for m in range(len(self)):
            yield self[m]

    @property
    def J(self) -> int:
        return self.beta.shape[1]

    def subset(self, index: np.ndarray | slice) -> PosteriorDrawSet:
        """Return the draws selected by *index* (integer array or slice)."""
        return PosteriorDrawSet(
            gamma=self.gamma[index], sigma_y=self.sigma_y[index], beta=self.beta[index]
        )

    def thin(self, n: int, rng: np.random.Generator) -> PosteriorDrawSet:
        """Subsample *n* draws without replacement, keeping their order."""
        M = len(self)
        if n >= M:
            return self
        idx = np.sort(rng.choice(M, size=n, replace=False))
        return self.subset(idx)

    @classmethod
    def from_parameter_sets(cls, params: list[ParameterSet]) -> PosteriorDrawSet:
        """Stack individual parameter sets; all must share the same *J*."""
        if len(params) == 0:
            raise EmptyDrawSetError("Posterior draw set contains no draws")
        lengths = {p.J for p in params}
        if len(lengths) > 1:
            raise ShapeMismatchError(f"Parameter sets disagree on J: {sorted(lengths)}")
        return cls(
            gamma=np.array([p.gamma for p in params]),
            sigma_y=np.array([p.sigma_y for p in params]),
            beta=np.stack([p.beta for p in params]),
        )

    @classmethod
    def from_inference_data(
        cls,
        idata: az.InferenceData,
        gamma_var: str = "gamma",
        sigma_y_var: str = "sigma_y",
        beta_var: str = "beta",
    ) -> PosteriorDrawSet:
        """Flatten ``(chain, draw)`` posterior samples into a draw set.

        Parameters
        ----------
        idata : az.InferenceData
            Sampler output with a ``posterior`` group.
        gamma_var, sigma_y_var, beta_var : str
            Variable names inside ``idata.posterior``.
        """
        post = idata.posterior
        gamma = post[gamma_var].values
        sigma_y = post[sigma_y_var].values
        beta = post[beta_var].values

        n_chains, n_draws = gamma.shape[:2]
        draws = cls(
            gamma=gamma.reshape(n_chains * n_draws),
            sigma_y=sigma_y.reshape(n_chains * n_draws),
            beta=beta.reshape(n_chains * n_draws, -1),
        )
        logger.info(f"Extracted {len(draws)} draws ({n_chains} chains x {n_draws}), J={draws.J}")
        return draws
