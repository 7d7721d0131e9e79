# ---------------------------------------------------------------------------
# panel_ppc — Hierarchical panel AR(1) posterior-predictive engine
# ---------------------------------------------------------------------------
"""Forward simulation and posterior-predictive reconstruction for a
hierarchical panel AR(1) model, plus the standardise / rescale round trip
for linear-regression coefficients."""

from .checks import (
    PPCResult,
    PPCTestStat,
    group_mean_check,
    mean_path_bands,
    overall_mean_check,
    run_posterior_predictive_checks,
)
from .config import OUTPUT_DIR, PanelConfig
from .data import build_panel_data, frame_to_panel, panel_to_frame
from .draws import ParameterSet, PosteriorDrawSet
from .exceptions import (
    DegenerateColumnError,
    DomainWarning,
    EmptyDrawSetError,
    PanelPPCError,
    ShapeMismatchError,
)
from .generator import simulate_from_config, simulate_panel
from .model import add_interactions, build_linear_model, build_panel_ar1_model
from .reconstruct import mean_paths, posterior_predictive, reconstruct
from .sampling import DEFAULT_SAMPLER_KWARGS, LIGHT_SAMPLER_KWARGS, sample_model, sample_panel_draws
from .scaling import (
    ScalingSpec,
    fit,
    least_squares,
    rescale_coefficients,
    standardize,
    unstandardize,
)

__version__ = "0.1.0"

__all__ = [
    "OUTPUT_DIR",
    "PanelConfig",
    # Errors
    "PanelPPCError",
    "DegenerateColumnError",
    "ShapeMismatchError",
    "EmptyDrawSetError",
    "DomainWarning",
    # Scaling
    "ScalingSpec",
    "fit",
    "standardize",
    "unstandardize",
    "rescale_coefficients",
    "least_squares",
    # Simulation / reconstruction
    "ParameterSet",
    "PosteriorDrawSet",
    "simulate_panel",
    "simulate_from_config",
    "reconstruct",
    "mean_paths",
    "posterior_predictive",
    # Models & sampling
    "build_panel_ar1_model",
    "build_linear_model",
    "add_interactions",
    "sample_model",
    "sample_panel_draws",
    "DEFAULT_SAMPLER_KWARGS",
    "LIGHT_SAMPLER_KWARGS",
    # Data & checks
    "build_panel_data",
    "panel_to_frame",
    "frame_to_panel",
    "run_posterior_predictive_checks",
    "overall_mean_check",
    "group_mean_check",
    "mean_path_bands",
    "PPCResult",
    "PPCTestStat",
]
