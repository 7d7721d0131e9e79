# ---------------------------------------------------------------------------
# panel_ppc.config — Simulation configuration and project constants
# ---------------------------------------------------------------------------
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------

BASE_DIR = Path(__file__).resolve().parents[2]  # repo root
OUTPUT_DIR = BASE_DIR / "output"

# ---------------------------------------------------------------------------
# Model constants
# ---------------------------------------------------------------------------

# Stationarity bound on the AR(1) coefficient: |γ| < 1
GAMMA_BOUND = 1.0

# Prior scales for the hierarchical panel AR(1) model
SIGMA_Y_PRIOR = 1.0  # HalfNormal scale on observation noise
SIGMA_BETA_PRIOR = 1.0  # HalfNormal scale on the random-slope spread

# Prior scale on standardized regression coefficients
COEF_PRIOR_SIGMA = 1.0
SIGMA_LINEAR_PRIOR = 1.0

# Degrees-of-freedom correction for standard deviations (sample sd)
DDOF = 1

DEFAULT_SEED = 42

# Histogram bins for density overlays
N_DENSITY_BINS = 40


# ---------------------------------------------------------------------------
# Panel simulation specification
# ---------------------------------------------------------------------------


@dataclass
class PanelConfig:
    """Specification for a simulated AR(1) panel.

    Parameters
    ----------
    J : int
        Number of individuals (rows).
    T : int
        Number of time points (columns), including the initial column.
    gamma : float
        Autoregressive coefficient.
    sigma_y : float
        Observation noise scale.
    sigma_beta : float, optional
        When set, per-individual slopes are drawn i.i.d. from
        ``Normal(0, sigma_beta**2)``.  When ``None`` the slopes must be
        supplied explicitly.
    seed : int
        Seed for the random stream used by the simulation.
    """

    J: int
    T: int
    gamma: float = 0.5
    sigma_y: float = 1.0
    sigma_beta: float | None = 0.5
    seed: int = DEFAULT_SEED

    def __post_init__(self) -> None:
        if self.J < 1:
            raise ValueError(f"J must be >= 1, got {self.J}")
        if self.T < 2:
            raise ValueError(f"T must be >= 2, got {self.T}")
        if self.sigma_y < 0:
            raise ValueError(f"sigma_y must be non-negative, got {self.sigma_y}")
        if self.sigma_beta is not None and self.sigma_beta < 0:
            raise ValueError(f"sigma_beta must be non-negative, got {self.sigma_beta}")
