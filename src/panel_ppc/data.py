# ---------------------------------------------------------------------------
# panel_ppc.data — In-memory panel reshaping and model input dicts
# ---------------------------------------------------------------------------
from __future__ import annotations

import numpy as np
import polars as pl

from .exceptions import ShapeMismatchError

# Long-format panel schema: one row per (individual, time) observation
PANEL_SCHEMA: dict[str, pl.DataType] = {
    "individual": pl.Utf8,
    "time": pl.Int32,
    "y": pl.Float64,
}


def panel_to_frame(panel: np.ndarray, ids: list[str] | None = None) -> pl.DataFrame:
    """Melt a ``(J, T)`` panel into long format with 1-based ``time``."""
    panel = np.asarray(panel, dtype=float)
    if panel.ndim != 2:
        raise ShapeMismatchError(f"Panel must be 2-D (J, T), got shape {panel.shape}")
    J, T = panel.shape
    if ids is None:
        ids = [str(j) for j in range(J)]
    if len(ids) != J:
        raise ShapeMismatchError(f"{len(ids)} ids for {J} individuals")

    return pl.DataFrame(
        {
            "individual": [str(i) for i in ids for _ in range(T)],
            "time": np.tile(np.arange(1, T + 1, dtype=np.int32), J),
            "y": panel.reshape(-1),
        },
        schema=PANEL_SCHEMA,
    )


def frame_to_panel(
    df: pl.DataFrame,
    id_col: str = "individual",
    time_col: str = "time",
    value_col: str = "y",
) -> tuple[np.ndarray, list[str]]:
    """Pivot a long frame back into a ``(J, T)`` array.

    Individuals keep their first-appearance order; time is sorted
    ascending.  Every individual must be observed at every time point.

    Returns
    -------
    tuple[np.ndarray, list[str]]
        The panel and the individual ids in row order.
    """
    missing = {id_col, time_col, value_col} - set(df.columns)
    if missing:
        raise ValueError(f"Missing required columns: {sorted(missing)}")

    ids = df[id_col].cast(pl.Utf8).unique(maintain_order=True).to_list()
    times = df[time_col].unique().sort().to_list()
    J, T = len(ids), len(times)

    counts = df.group_by(id_col).len()
    if len(df) != J * T or counts["len"].min() != T or counts["len"].max() != T:
        raise ShapeMismatchError(
            f"Ragged panel: {len(df)} rows for {J} individuals x {T} time points"
        )

    row_of = {i: r for r, i in enumerate(ids)}
    col_of = {t: c for c, t in enumerate(times)}
    rows = [row_of[i] for i in df[id_col].cast(pl.Utf8).to_list()]
    cols = [col_of[t] for t in df[time_col].to_list()]

    panel = np.full((J, T), np.nan)
    panel[rows, cols] = df[value_col].cast(pl.Float64).to_numpy()
    if np.isnan(panel).any():
        raise ShapeMismatchError("Duplicate rows or missing values leave gaps in the panel")
    return panel, ids


def build_panel_data(panel: np.ndarray, groups=None) -> dict:
    """Bundle an observed panel into the dict consumed by the model builder.

    Parameters
    ----------
    panel : np.ndarray
        Observed ``(J, T)`` panel; column 0 is the initial condition.
    groups : array-like, optional
        Categorical covariate per individual (length *J*), used by grouped
        posterior-predictive summaries.
    """
    panel = np.asarray(panel, dtype=float)
    if panel.ndim != 2:
        raise ShapeMismatchError(f"Panel must be 2-D (J, T), got shape {panel.shape}")
    J, T = panel.shape
    if T < 2:
        raise ShapeMismatchError(f"T must be >= 2, got {T}")
    if not np.all(np.isfinite(panel)):
        raise ValueError(f"{int(np.sum(~np.isfinite(panel)))} non-finite values in panel")
    if groups is not None:
        groups = np.asarray(groups)
        if groups.shape != (J,):
            raise ShapeMismatchError(f"groups has shape {groups.shape}, expected ({J},)")

    return {
        "y": panel,
        "J": J,
        "T": T,
        "y0": panel[:, 0].copy(),
        "t_index": np.arange(1, T, dtype=float),  # trend term (t - 1) for t = 2..T
        "groups": groups,
    }
