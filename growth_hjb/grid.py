"""Uniform state grids for the finite-difference HJB engine.

A :class:`StateGrid` is one state dimension (capital, or the exogenous
productivity level). A :class:`TensorGrid` composes a capital grid with an
optional exogenous grid into the flattened index space the generator acts on.

Two-dimensional arrays are laid out with shape ``(J, I)``: row ``j`` holds the
capital slice at exogenous node ``j``. Row-major flattening therefore puts a
capital neighbour at offset 1 and an exogenous neighbour at offset ``I``.
"""

from dataclasses import dataclass, field
import logging
import math
from typing import Optional, Tuple

import numpy as np

from .exceptions import InvalidGridError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StateGrid:
    """Uniformly spaced grid for one state dimension."""

    name: str
    min_value: float
    max_value: float
    num_points: int
    nodes: np.ndarray = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        """Validate bounds and build the read-only node array."""
        if not (math.isfinite(self.min_value) and math.isfinite(self.max_value)):
            raise InvalidGridError(f"Grid bounds must be finite for {self.name}")
        if self.min_value >= self.max_value:
            raise InvalidGridError(f"min_value must be less than max_value for {self.name}")
        if self.num_points < 2:
            raise InvalidGridError(f"Need at least 2 grid points for {self.name}")

        nodes = np.linspace(self.min_value, self.max_value, self.num_points)
        nodes.setflags(write=False)
        object.__setattr__(self, "nodes", nodes)

    @property
    def step(self) -> float:
        """Constant spacing ``(max - min) / (count - 1)``."""
        return (self.max_value - self.min_value) / (self.num_points - 1)

    def __len__(self) -> int:
        return self.num_points


def build_grid(name: str, min_value: float, max_value: float, num_points: int) -> StateGrid:
    """Build a uniform grid, failing fast on malformed input.

    Args:
        name: Label of the state dimension (used in error messages).
        min_value: Lowest node.
        max_value: Highest node.
        num_points: Number of nodes, at least 2.

    Returns:
        Immutable StateGrid.

    Raises:
        InvalidGridError: If ``min_value >= max_value`` or ``num_points < 2``.
    """
    grid = StateGrid(name, float(min_value), float(max_value), int(num_points))
    logger.debug(
        f"Built {name} grid on [{grid.min_value:.6g}, {grid.max_value:.6g}] "
        f"with {grid.num_points} points (step={grid.step:.3e})"
    )
    return grid


@dataclass(frozen=True)
class TensorGrid:
    """Capital grid, optionally crossed with an exogenous state grid."""

    capital: StateGrid
    exogenous: Optional[StateGrid] = None

    @property
    def ndim(self) -> int:
        return 1 if self.exogenous is None else 2

    @property
    def shape(self) -> Tuple[int, ...]:
        """Array shape of values on this grid: ``(I,)`` or ``(J, I)``."""
        if self.exogenous is None:
            return (self.capital.num_points,)
        return (self.exogenous.num_points, self.capital.num_points)

    @property
    def size(self) -> int:
        return int(np.prod(self.shape))

    @property
    def capital_mesh(self) -> np.ndarray:
        """Capital nodes broadcast across the exogenous dimension."""
        if self.exogenous is None:
            return np.array(self.capital.nodes)
        return np.broadcast_to(self.capital.nodes, self.shape).copy()

    @property
    def exogenous_mesh(self) -> np.ndarray:
        """Exogenous nodes broadcast across the capital dimension (ones if 1D)."""
        if self.exogenous is None:
            return np.ones(self.shape)
        return np.broadcast_to(self.exogenous.nodes[:, np.newaxis], self.shape).copy()

    def flat_index(self, capital_index: int, exogenous_index: int = 0) -> int:
        """Position of node ``(i, j)`` in the flattened state vector."""
        return exogenous_index * self.capital.num_points + capital_index
