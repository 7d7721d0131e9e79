# ---------------------------------------------------------------------------
# panel_ppc.sampling — Posterior sampling (external inference engine boundary)
# ---------------------------------------------------------------------------
"""The only place the package talks to an MCMC engine.

:func:`sample_model` returns the engine's ``InferenceData`` untouched;
:func:`sample_panel_draws` goes one step further and hands back the
:class:`~panel_ppc.draws.PosteriorDrawSet` that the reconstructor consumes,
so callers of the panel model never index ``idata.posterior`` themselves.
The random seed is always passed through explicitly.
"""

from __future__ import annotations

import logging

import arviz as az
import pymc as pm

from .config import DEFAULT_SEED
from .draws import PosteriorDrawSet

logger = logging.getLogger(__name__)

# Full run: the panel posterior has J + 3 free parameters
DEFAULT_SAMPLER_KWARGS: dict = dict(
    draws=1000,
    tune=1000,
    chains=4,
    target_accept=0.9,
)

# Quick checks and the demo pipeline
LIGHT_SAMPLER_KWARGS: dict = dict(
    draws=500,
    tune=500,
    chains=2,
    target_accept=0.9,
)

# Free variables the reconstructor reads back out of the panel model
PANEL_VAR_NAMES = ("gamma", "sigma_y", "beta")


def _resolve_kwargs(sampler_kwargs: dict | None, random_seed: int | None) -> dict:
    """Layer *sampler_kwargs* over the defaults and pin the seed."""
    kwargs = {**DEFAULT_SAMPLER_KWARGS, **(sampler_kwargs or {})}
    kwargs["random_seed"] = random_seed
    kwargs["return_inferencedata"] = True
    return kwargs


def sample_model(
    model: pm.Model,
    sampler_kwargs: dict | None = None,
    random_seed: int | None = DEFAULT_SEED,
) -> az.InferenceData:
    """Sample *model* with nutpie when installed, PyMC NUTS otherwise.

    Parameters
    ----------
    model : pm.Model
        Model built by :mod:`panel_ppc.model`.
    sampler_kwargs : dict, optional
        Keys overriding ``DEFAULT_SAMPLER_KWARGS``; pass
        ``LIGHT_SAMPLER_KWARGS`` for a short run.
    random_seed : int or None
        Forwarded to ``pm.sample``.  ``None`` leaves the engine unseeded.
    """
    kwargs = _resolve_kwargs(sampler_kwargs, random_seed)
    logger.info(
        f"Sampling {kwargs['chains']} chain(s) x {kwargs['draws']} draws "
        f"(tune={kwargs['tune']}, seed={random_seed})"
    )

    with model:
        try:
            idata = pm.sample(nuts_sampler="nutpie", **kwargs)
            sampler_used = "nutpie"
        except Exception as e:
            logger.warning(f"nutpie unavailable ({e}), falling back to PyMC NUTS")
            idata = pm.sample(**kwargs)
            sampler_used = "pymc"

    logger.info(f"Sampling complete ({sampler_used})")
    return idata


def sample_panel_draws(
    model: pm.Model,
    sampler_kwargs: dict | None = None,
    random_seed: int | None = DEFAULT_SEED,
) -> tuple[PosteriorDrawSet, az.InferenceData]:
    """Sample the panel AR(1) model and flatten its draws.

    Only the variables in ``PANEL_VAR_NAMES`` are kept in the trace.

    Returns
    -------
    draws : PosteriorDrawSet
        ``chains * draws`` parameter sets, ready for
        :func:`panel_ppc.reconstruct.reconstruct`.
    idata : az.InferenceData
        The raw sampler output, for saving or diagnostics.
    """
    missing = [name for name in PANEL_VAR_NAMES if name not in model.named_vars]
    if missing:
        raise ValueError(f"Model is not a panel AR(1) model; missing variables {missing}")

    kwargs = {**(sampler_kwargs or {}), "var_names": list(PANEL_VAR_NAMES)}
    idata = sample_model(model, sampler_kwargs=kwargs, random_seed=random_seed)
    return PosteriorDrawSet.from_inference_data(idata), idata
