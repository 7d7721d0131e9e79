# ---------------------------------------------------------------------------
# panel_ppc.exceptions — Error taxonomy
# ---------------------------------------------------------------------------
"""Errors raised by the scaling, simulation, and reconstruction code.

All errors stem from malformed or degenerate inputs and are raised
synchronously; none are retried.
"""

from __future__ import annotations


class PanelPPCError(ValueError):
    """Base class for input errors raised by panel_ppc."""


class DegenerateColumnError(PanelPPCError):
    """A design-matrix column (or the response) has zero variance."""

    def __init__(self, columns: list[int] | list[str], message: str | None = None):
        self.columns = list(columns)
        super().__init__(
            message or f"Zero standard deviation in column(s) {self.columns}; scaling is undefined"
        )


class ShapeMismatchError(PanelPPCError):
    """Parameter or initial-condition dimensions disagree with J/T."""


class EmptyDrawSetError(PanelPPCError):
    """A posterior draw set contains no draws."""


class DomainWarning(RuntimeWarning):
    """γ outside (-1, 1): the trajectory is non-stationary or explosive."""
