# ---------------------------------------------------------------------------
# panel_ppc.scaling — Design-matrix standardisation and coefficient rescaling
# ---------------------------------------------------------------------------
"""Standardise ``(X, y)`` to zero mean / unit variance and map regression
coefficients fitted on the standardised scale back to original units.

For a model fitted through the origin on standardised data,

    β_orig[k] = β_std[k] · sd(y) / sd(x_k)

The multiplier is fixed by the :class:`ScalingSpec` and does not vary
across posterior draws, so a whole ``(M, K)`` stack of draws rescales in
one broadcast.  No intercept is recovered.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .config import DDOF
from .exceptions import DegenerateColumnError, ShapeMismatchError


@dataclass(frozen=True, eq=False)
class ScalingSpec:
    """Column-wise location/scale of a design matrix and its response.

    Attributes
    ----------
    x_mean, x_sd : np.ndarray
        Shape ``(K,)``.
    y_mean, y_sd : float
    """

    x_mean: np.ndarray
    x_sd: np.ndarray
    y_mean: float
    y_sd: float

    @property
    def K(self) -> int:
        return self.x_mean.shape[0]

    @property
    def multiplier(self) -> np.ndarray:
        """Per-coefficient factor ``sd(y) / sd(x_k)``, shape ``(K,)``."""
        return self.y_sd / self.x_sd


def _as_design(X) -> np.ndarray:
    X = np.asarray(X, dtype=float)
    if X.ndim == 1:
        X = X[:, None]
    if X.ndim != 2:
        raise ShapeMismatchError(f"X must be 1-D or 2-D, got shape {X.shape}")
    return X


def _as_response(y, n: int) -> np.ndarray:
    y = np.asarray(y, dtype=float).reshape(-1)
    if y.shape[0] != n:
        raise ShapeMismatchError(f"y has {y.shape[0]} rows, X has {n}")
    return y


def fit(X, y) -> ScalingSpec:
    """Compute the column-wise mean and standard deviation of *X* and *y*.

    Parameters
    ----------
    X : array-like
        Design matrix, shape ``(n, K)`` (a 1-D array is one column).
    y : array-like
        Response, shape ``(n,)``.

    Raises
    ------
    DegenerateColumnError
        If any column of *X*, or *y* itself, has zero standard deviation.
    """
    X = _as_design(X)
    y = _as_response(y, X.shape[0])
    if X.shape[0] <= DDOF:
        raise ShapeMismatchError(f"Need at least {DDOF + 1} rows to scale, got {X.shape[0]}")

    x_mean = X.mean(axis=0)
    x_sd = X.std(axis=0, ddof=DDOF)
    y_mean = float(y.mean())
    y_sd = float(y.std(ddof=DDOF))

    # ptp is exact for constant columns; the sd can round to ~1e-17
    constant = np.where(np.ptp(X, axis=0) == 0)[0]
    if len(constant) > 0:
        raise DegenerateColumnError(constant.tolist())
    if np.ptp(y) == 0:
        raise DegenerateColumnError(["y"], "Response has zero standard deviation")

    for arr in (x_mean, x_sd):
        arr.setflags(write=False)
    return ScalingSpec(x_mean=x_mean, x_sd=x_sd, y_mean=y_mean, y_sd=y_sd)


def _check_columns(X: np.ndarray, spec: ScalingSpec) -> None:
    if X.shape[1] != spec.K:
        raise ShapeMismatchError(f"X has {X.shape[1]} columns, scaling spec has {spec.K}")


def standardize(X, y, spec: ScalingSpec) -> tuple[np.ndarray, np.ndarray]:
    """Apply ``(v - mean) / sd`` per column of *X* and to *y*."""
    X = _as_design(X)
    y = _as_response(y, X.shape[0])
    _check_columns(X, spec)
    return (X - spec.x_mean) / spec.x_sd, (y - spec.y_mean) / spec.y_sd


def unstandardize(X_std, y_std, spec: ScalingSpec) -> tuple[np.ndarray, np.ndarray]:
    """Inverse of :func:`standardize`."""
    X_std = _as_design(X_std)
    y_std = _as_response(y_std, X_std.shape[0])
    _check_columns(X_std, spec)
    return X_std * spec.x_sd + spec.x_mean, y_std * spec.y_sd + spec.y_mean


def rescale_coefficients(beta_std, spec: ScalingSpec) -> np.ndarray:
    """Map standardised-scale coefficients to original units.

    Parameters
    ----------
    beta_std : array-like
        Shape ``(K,)`` or ``(M, K)`` (a stack of posterior draws).
    spec : ScalingSpec
        The spec used to standardise both *X* and *y* before fitting.
    """
    beta_std = np.atleast_1d(np.asarray(beta_std, dtype=float))
    if beta_std.shape[-1] != spec.K:
        raise ShapeMismatchError(
            f"Coefficient vector has {beta_std.shape[-1]} entries, scaling spec has {spec.K}"
        )
    return beta_std * spec.multiplier


def least_squares(X, y, fit_intercept: bool = False) -> np.ndarray:
    """Deterministic least-squares slopes of *y* on *X*.

    With ``fit_intercept=True`` a constant column is appended for the solve
    and its coefficient dropped from the result.
    """
    X = _as_design(X)
    y = _as_response(y, X.shape[0])
    if fit_intercept:
        X = np.column_stack([X, np.ones(X.shape[0])])
    coefs, *_ = np.linalg.lstsq(X, y, rcond=None)
    return coefs[:-1] if fit_intercept else coefs
