"""Bounded hidden-state history shared by the recurrent layers."""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from .types import Array


@dataclass
class StateCache:
    """Ring of the most recent ``capacity`` hidden states.

    States are stored as columns of a ``(dim, capacity)`` matrix. ``t`` counts
    every state ever pushed and is never clamped; once ``t >= capacity`` each
    push shifts the oldest column out before writing the newest into the last
    column.

    Attributes
    ----------
    dim:
        Dimensionality of a single state.
    capacity:
        Number of states retained (at least one).
    t:
        Number of states written since construction or the last reset.
    """

    dim: int
    capacity: int
    t: int = field(default=0, init=False)
    columns: Array = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if self.dim < 1:
            raise ValueError(f"State dimension must be positive, got {self.dim}")
        if self.capacity < 1:
            raise ValueError(f"Cache capacity must be positive, got {self.capacity}")
        self.columns = np.zeros((self.dim, self.capacity), dtype=np.float64)

    def filled(self) -> int:
        """Number of columns currently holding a state."""

        return min(self.t, self.capacity)

    def write_index(self) -> int:
        """Column the next :meth:`push` writes to."""

        return min(self.t, self.capacity - 1)

    def current(self) -> Array:
        """Most recently pushed state, or zeros before the first push."""

        filled = self.filled()
        if filled == 0:
            return np.zeros(self.dim, dtype=np.float64)
        return self.columns[:, filled - 1].copy()

    def previous(self) -> Array:
        """State pushed just before :meth:`current`, or zeros if not retained."""

        filled = self.filled()
        if filled < 2:
            return np.zeros(self.dim, dtype=np.float64)
        return self.columns[:, filled - 2].copy()

    def push(self, state: Array) -> None:
        state = np.asarray(state, dtype=np.float64)
        if state.shape != (self.dim,):
            raise ValueError(
                f"Expected a state of shape ({self.dim},), got {state.shape}"
            )
        if self.t >= self.capacity:
            self.columns[:, :-1] = self.columns[:, 1:]
        self.columns[:, self.write_index()] = state
        self.t += 1

    def history(self) -> Array:
        """Retained states, oldest first, as a ``(dim, filled)`` copy."""

        return self.columns[:, : self.filled()].copy()

    def reset(self) -> None:
        self.columns.fill(0.0)
        self.t = 0


__all__ = ["StateCache"]
