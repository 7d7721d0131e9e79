"""Tests for panel_ppc.data — panel reshaping and model inputs."""

import numpy as np
import polars as pl
import pytest

from panel_ppc.data import PANEL_SCHEMA, build_panel_data, frame_to_panel, panel_to_frame
from panel_ppc.exceptions import ShapeMismatchError


def _make_panel(J: int = 3, T: int = 4) -> np.ndarray:
    return np.arange(J * T, dtype=float).reshape(J, T)


class TestPanelToFrame:
    """Tests for panel_to_frame."""

    def test_long_format(self):
        df = panel_to_frame(_make_panel(), ids=["a", "b", "c"])
        assert dict(df.schema) == PANEL_SCHEMA
        assert len(df) == 12
        first = df.row(0, named=True)
        assert first == {"individual": "a", "time": 1, "y": 0.0}
        last = df.row(11, named=True)
        assert last == {"individual": "c", "time": 4, "y": 11.0}

    def test_default_ids(self):
        df = panel_to_frame(_make_panel(J=2, T=2))
        assert df["individual"].unique(maintain_order=True).to_list() == ["0", "1"]

    def test_id_count_mismatch(self):
        with pytest.raises(ShapeMismatchError):
            panel_to_frame(_make_panel(), ids=["a"])


class TestFrameToPanel:
    """Tests for frame_to_panel."""

    def test_inverse_of_panel_to_frame(self):
        panel = _make_panel()
        back, ids = frame_to_panel(panel_to_frame(panel, ids=["x", "y", "z"]))
        np.testing.assert_array_equal(back, panel)
        assert ids == ["x", "y", "z"]

    def test_unsorted_rows(self):
        panel = _make_panel()
        df = panel_to_frame(panel).sample(fraction=1.0, shuffle=True, seed=1)
        back, ids = frame_to_panel(df)
        order = [int(i) for i in ids]
        np.testing.assert_array_equal(back, panel[order])

    def test_ragged_panel(self):
        df = panel_to_frame(_make_panel()).slice(0, 11)
        with pytest.raises(ShapeMismatchError):
            frame_to_panel(df)

    def test_missing_column(self):
        with pytest.raises(ValueError):
            frame_to_panel(pl.DataFrame({"individual": ["a"], "time": [1]}))


class TestBuildPanelData:
    """Tests for build_panel_data."""

    def test_fields(self):
        panel = _make_panel(J=3, T=5)
        data = build_panel_data(panel, groups=["g1", "g2", "g1"])
        assert data["J"] == 3
        assert data["T"] == 5
        np.testing.assert_array_equal(data["y0"], panel[:, 0])
        np.testing.assert_array_equal(data["t_index"], [1.0, 2.0, 3.0, 4.0])
        assert list(data["groups"]) == ["g1", "g2", "g1"]

    def test_y0_is_a_copy(self):
        panel = _make_panel()
        data = build_panel_data(panel)
        data["y0"][0] = -1.0
        assert panel[0, 0] == 0.0

    def test_short_panel(self):
        with pytest.raises(ShapeMismatchError):
            build_panel_data(np.zeros((3, 1)))

    def test_non_finite(self):
        panel = _make_panel()
        panel[1, 2] = np.nan
        with pytest.raises(ValueError):
            build_panel_data(panel)

    def test_group_length(self):
        with pytest.raises(ShapeMismatchError):
            build_panel_data(_make_panel(), groups=["a", "b"])
