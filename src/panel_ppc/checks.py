# ---------------------------------------------------------------------------
# panel_ppc.checks — Posterior predictive summaries
# ---------------------------------------------------------------------------
"""Compare replicated panels against the observed panel.

Each of the *M* replicated panels is one posterior draw of the full
dataset; every statistic is computed per draw and compared with its value
on the observed data.  Outputs are plain arrays / Polars frames for
downstream plotting.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

import numpy as np
import polars as pl
from scipy import stats as sp_stats

from .config import N_DENSITY_BINS
from .draws import PosteriorDrawSet
from .exceptions import ShapeMismatchError
from .reconstruct import posterior_predictive

logger = logging.getLogger(__name__)


# =========================================================================
# Result containers
# =========================================================================


@dataclass
class PPCTestStat:
    """A scalar test statistic on observed vs replicated data."""

    name: str
    observed: float
    replicated: np.ndarray  # (M,)

    @property
    def p_value(self) -> float:
        """Two-sided tail probability ``min(p, 1 - p)``, ``p = P(T_rep >= T_obs)``."""
        p = float(np.mean(self.replicated >= self.observed))
        return min(p, 1 - p)

    def to_dict(self) -> dict:
        return {
            "statistic": self.name,
            "observed": self.observed,
            "rep_mean": float(self.replicated.mean()),
            "rep_q05": float(np.percentile(self.replicated, 5)),
            "rep_q95": float(np.percentile(self.replicated, 95)),
            "p_value": self.p_value,
        }


@dataclass
class DensityOverlay:
    """Shared-bin histograms of observed and replicated values."""

    edges: np.ndarray  # (n_bins + 1,)
    observed: np.ndarray  # (n_bins,)
    replicated: np.ndarray  # (M, n_bins)

    @property
    def centers(self) -> np.ndarray:
        return 0.5 * (self.edges[:-1] + self.edges[1:])


@dataclass
class PPCResult:
    n_draws: int
    test_stats: list[PPCTestStat] = field(default_factory=list)
    density: DensityOverlay | None = None
    group_means: pl.DataFrame | None = None

    def summary(self) -> pl.DataFrame:
        return pl.DataFrame([s.to_dict() for s in self.test_stats])


# =========================================================================
# Statistics
# =========================================================================


def _check_replicated(replicated: np.ndarray, observed: np.ndarray) -> None:
    if replicated.ndim != 3 or replicated.shape[1:] != observed.shape:
        raise ShapeMismatchError(
            f"Replicated panels {replicated.shape} do not match observed {observed.shape}"
        )


def _lag1_acf(panel: np.ndarray) -> float:
    """Mean over individuals of the lag-1 autocorrelation of each row."""
    if panel.shape[1] < 3:
        return 0.0
    xc = panel - panel.mean(axis=1, keepdims=True)
    c0 = np.sum(xc * xc, axis=1)
    c1 = np.sum(xc[:, :-1] * xc[:, 1:], axis=1)
    acf = np.divide(c1, c0, out=np.zeros_like(c1), where=c0 > 0)
    return float(acf.mean())


def _skewness(panel: np.ndarray) -> float:
    return float(sp_stats.skew(panel.reshape(-1)))


STAT_FNS: dict[str, Callable[[np.ndarray], float]] = {
    "Mean": lambda x: float(np.mean(x)),
    "SD": lambda x: float(np.std(x)),
    "Skewness": _skewness,
    "Lag-1 ACF": _lag1_acf,
}


def replicate_statistic(replicated: np.ndarray, fn: Callable[[np.ndarray], float]) -> np.ndarray:
    """Apply *fn* to each of the *M* replicated panels."""
    return np.array([fn(replicated[m]) for m in range(replicated.shape[0])])


def statistic_check(
    replicated: np.ndarray,
    observed: np.ndarray,
    name: str,
    fn: Callable[[np.ndarray], float] | None = None,
) -> PPCTestStat:
    """Evaluate a statistic (by *name* from ``STAT_FNS`` or an explicit *fn*)."""
    observed = np.asarray(observed, dtype=float)
    _check_replicated(replicated, observed)
    if fn is None:
        fn = STAT_FNS[name]
    return PPCTestStat(name=name, observed=fn(observed), replicated=replicate_statistic(replicated, fn))


def overall_mean_check(replicated: np.ndarray, observed: np.ndarray) -> PPCTestStat:
    return statistic_check(replicated, observed, "Mean")


def group_mean_check(replicated: np.ndarray, observed: np.ndarray, groups) -> pl.DataFrame:
    """Per-group means of observed vs replicated panels.

    Parameters
    ----------
    replicated : np.ndarray
        ``(M, J, T)`` replicated panels.
    observed : np.ndarray
        ``(J, T)`` observed panel.
    groups : array-like
        Categorical covariate, one label per individual.

    Returns
    -------
    pl.DataFrame
        One row per group: ``group``, ``n_individuals``, ``observed_mean``,
        ``rep_mean``, ``rep_q05``, ``rep_q95``, ``p_value``.
    """
    observed = np.asarray(observed, dtype=float)
    _check_replicated(replicated, observed)
    M, J, _ = replicated.shape
    groups = [str(g) for g in np.asarray(groups).reshape(-1)]
    if len(groups) != J:
        raise ShapeMismatchError(f"{len(groups)} group labels for {J} individuals")

    # Equal T per individual, so the cell mean is the mean of row means
    rep_rows = replicated.mean(axis=2)  # (M, J)
    rep = pl.DataFrame(
        {
            "draw": np.repeat(np.arange(M), J),
            "group": groups * M,
            "value": rep_rows.reshape(-1),
        }
    )
    rep_by_draw = rep.group_by(["draw", "group"]).agg(pl.col("value").mean())

    obs = (
        pl.DataFrame({"group": groups, "value": observed.mean(axis=1)})
        .group_by("group")
        .agg(
            pl.len().alias("n_individuals"),
            pl.col("value").mean().alias("observed_mean"),
        )
    )

    summary = rep_by_draw.join(obs, on="group").group_by("group").agg(
        pl.col("n_individuals").first(),
        pl.col("observed_mean").first(),
        pl.col("value").mean().alias("rep_mean"),
        pl.col("value").quantile(0.05).alias("rep_q05"),
        pl.col("value").quantile(0.95).alias("rep_q95"),
        (pl.col("value") >= pl.col("observed_mean")).mean().alias("_p"),
    )
    return (
        summary.with_columns(
            pl.min_horizontal(pl.col("_p"), 1 - pl.col("_p")).alias("p_value")
        )
        .drop("_p")
        .sort("group")
    )


def density_overlay(
    replicated: np.ndarray,
    observed: np.ndarray,
    n_bins: int = N_DENSITY_BINS,
) -> DensityOverlay:
    """Histogram densities of all cells except the fixed initial column."""
    observed = np.asarray(observed, dtype=float)
    _check_replicated(replicated, observed)

    obs_vals = observed[:, 1:].reshape(-1)
    pad = 0.5 * np.ptp(obs_vals) if np.ptp(obs_vals) > 0 else 1.0
    edges = np.linspace(obs_vals.min() - pad, obs_vals.max() + pad, n_bins + 1)

    obs_dens, _ = np.histogram(obs_vals, bins=edges, density=True)
    rep_dens = np.stack(
        [
            np.histogram(replicated[m, :, 1:].reshape(-1), bins=edges, density=True)[0]
            for m in range(replicated.shape[0])
        ]
    )
    return DensityOverlay(edges=edges, observed=obs_dens, replicated=rep_dens)


def mean_path_bands(paths: np.ndarray, probs=(0.1, 0.5, 0.9)) -> np.ndarray:
    """Quantiles over draws of mean-path reconstructions.

    Returns
    -------
    np.ndarray
        Shape ``(len(probs), J, T)``.
    """
    if paths.ndim != 3:
        raise ShapeMismatchError(f"Expected (M, J, T) paths, got shape {paths.shape}")
    return np.quantile(paths, probs, axis=0)


# =========================================================================
# Posterior predictive checks
# =========================================================================


def run_posterior_predictive_checks(
    draws: PosteriorDrawSet,
    observed: np.ndarray,
    rng: np.random.Generator | int,
    groups=None,
    n_subsample: int | None = None,
    **reconstruct_kwargs,
) -> PPCResult:
    """Replicate the observed panel from posterior draws and summarise.

    The observed first column is used as the shared initial condition.

    Parameters
    ----------
    draws : PosteriorDrawSet
        Posterior draws from the external sampler.
    observed : np.ndarray
        Observed ``(J, T)`` panel.
    rng : np.random.Generator or int
        Noise source (an int is used as a seed).
    groups : array-like, optional
        Categorical covariate per individual for grouped means.
    n_subsample : int, optional
        Thin the draw set to this many draws first.
    """
    observed = np.asarray(observed, dtype=float)
    if observed.ndim != 2:
        raise ShapeMismatchError(f"Observed panel must be 2-D, got shape {observed.shape}")
    if not isinstance(rng, np.random.Generator):
        rng = np.random.default_rng(rng)
    if n_subsample is not None:
        draws = draws.thin(n_subsample, rng)

    J, T = observed.shape
    logger.info(f"Posterior predictive replication: {len(draws)} draws, J={J}, T={T}")
    replicated = posterior_predictive(draws, observed[:, 0], T, rng, J=J, **reconstruct_kwargs)

    result = PPCResult(n_draws=len(draws))
    result.test_stats = [statistic_check(replicated, observed, name) for name in STAT_FNS]
    result.density = density_overlay(replicated, observed)
    if groups is not None:
        result.group_means = group_mean_check(replicated, observed, groups)

    for stat in result.test_stats:
        if stat.p_value < 0.05:
            logger.warning(f"PPC {stat.name}: observed value in the tail (p={stat.p_value:.3f})")
    return result


def print_ppc_summary(result: PPCResult) -> None:
    """Print test statistics and grouped means."""
    print("=" * 72)
    print(f"POSTERIOR PREDICTIVE CHECKS ({result.n_draws} draws)")
    print("=" * 72)
    print(f"{'Statistic':>12}  {'Observed':>10} {'Rep mean':>10} {'Rep 90% interval':>22} {'p':>7}")
    print("-" * 72)
    for stat in result.test_stats:
        d = stat.to_dict()
        print(
            f"{d['statistic']:>12}  {d['observed']:10.4f} {d['rep_mean']:10.4f} "
            f"[{d['rep_q05']:9.4f}, {d['rep_q95']:9.4f}] {d['p_value']:7.3f}"
        )

    if result.group_means is not None:
        print("\nGroup means (observed vs replicated):")
        for row in result.group_means.iter_rows(named=True):
            print(
                f"  {row['group']:>10}  n={row['n_individuals']:<4} "
                f"obs {row['observed_mean']:+.4f}  rep {row['rep_mean']:+.4f} "
                f"[{row['rep_q05']:+.4f}, {row['rep_q95']:+.4f}]  p={row['p_value']:.3f}"
            )
