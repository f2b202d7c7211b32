"""Sparse generator of the controlled state process.

The generator ``A`` is the finite-difference analogue of the infinitesimal
generator: row ``n`` holds the transition rates out of node ``n``. Off the
diagonal every entry is a non-negative rate; the diagonal is minus the row's
off-diagonal sum, so each row sums to zero.

The capital block is rebuilt every iteration from the upwind policy. The
exogenous block depends only on the productivity process and the grid, so a
model builds it once and reuses it for every iteration of a solve.

With values laid out as ``(J, I)`` and flattened row-major, capital
neighbours sit at offsets ±1 and productivity neighbours at offsets ±I.
Rates that would leave the grid are zeroed before the bands are placed, so
no entry aliases across a capital edge into the adjacent productivity row.
"""

import logging
from typing import TYPE_CHECKING, Optional, Tuple

import numpy as np
from scipy import sparse

from .grid import TensorGrid
from .processes import LogOrnsteinUhlenbeck
from .upwind import UpwindPolicy

if TYPE_CHECKING:
    from .models import GrowthModel

logger = logging.getLogger(__name__)


def capital_coefficients(
    policy: UpwindPolicy, step: float, capital_variance: Optional[np.ndarray] = None
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Capital transition rates ``(X, Y, Z)`` for one iterate.

    ``X = -min(drift_b, 0)/dk`` is the rate to the lower neighbour and
    ``Z = max(drift_f, 0)/dk`` the rate to the upper neighbour. Capital
    diffusion adds ``Σ_k/(2dk²)`` to both. Rates out of the grid are zeroed,
    then ``Y = -(X + Z)``.

    Args:
        policy: Upwind policy of the current iterate.
        step: Capital grid spacing.
        capital_variance: Itô variance of capital per node, or None.

    Returns:
        Tuple ``(X, Y, Z)`` shaped like the value function.
    """
    lower = -policy.drift_backward / step
    upper = policy.drift_forward / step
    if capital_variance is not None:
        diffusion = capital_variance / (2.0 * step**2)
        lower = lower + diffusion
        upper = upper + diffusion

    lower[..., 0] = 0.0
    upper[..., -1] = 0.0
    centre = -(lower + upper)
    return lower, centre, upper


def capital_block(
    policy: UpwindPolicy, grid: TensorGrid, capital_variance: Optional[np.ndarray] = None
) -> sparse.csr_matrix:
    """Tridiagonal capital block over the flattened state space."""
    lower, centre, upper = capital_coefficients(policy, grid.capital.step, capital_variance)

    size = grid.size
    bands = np.zeros((3, size))
    bands[0] = lower.ravel()
    bands[1] = centre.ravel()
    bands[2] = upper.ravel()

    return sparse.diags(
        [bands[0, 1:], bands[1], bands[2, :-1]],
        offsets=[-1, 0, 1],
        shape=(size, size),
        format="csr",
    )


def exogenous_coefficients(
    process: LogOrnsteinUhlenbeck, grid: TensorGrid
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Productivity transition rates ``(down, centre, up)`` per productivity node.

    The drift is upwinded by its sign and the variance ``Σ(z)/(2dz²)`` is
    split evenly between both neighbours. At the productivity edges the rate
    out of the grid is dropped (reflection), keeping each row conservative.
    """
    if grid.exogenous is None:
        raise ValueError("Grid has no exogenous dimension")

    z = grid.exogenous.nodes
    step = grid.exogenous.step
    drift = process.drift(z)
    diffusion = process.variance(z) / (2.0 * step**2)

    up = np.maximum(drift, 0.0) / step + diffusion
    down = -np.minimum(drift, 0.0) / step + diffusion
    down[0] = 0.0
    up[-1] = 0.0
    centre = -(up + down)
    return down, centre, up


def exogenous_block(process: LogOrnsteinUhlenbeck, grid: TensorGrid) -> sparse.csr_matrix:
    """Productivity block over the flattened state space (offsets ±I).

    Args:
        process: Log productivity process.
        grid: Two-dimensional grid.

    Returns:
        Sparse ``(I·J, I·J)`` matrix.
    """
    down, centre, up = exogenous_coefficients(process, grid)

    width = grid.capital.num_points
    size = grid.size
    bands = np.zeros((3, size))
    bands[0] = np.repeat(down, width)
    bands[1] = np.repeat(centre, width)
    bands[2] = np.repeat(up, width)

    block = sparse.diags(
        [bands[0, width:], bands[1], bands[2, :-width]],
        offsets=[-width, 0, width],
        shape=(size, size),
        format="csr",
    )
    logger.debug(f"Built exogenous block with {block.nnz} non-zeros for {grid.shape} grid")
    return block


def assemble_generator(policy: UpwindPolicy, model: "GrowthModel") -> sparse.csr_matrix:
    """Full generator for one iterate: capital block plus exogenous block.

    Args:
        policy: Upwind policy of the current iterate.
        model: Growth model whose grid and processes define the rates.

    Returns:
        Sparse CSR matrix of size ``model.grid.size``.
    """
    generator = capital_block(policy, model.grid, model.capital_variance())
    switching = model.exogenous_block()
    if switching is not None:
        generator = (generator + switching).tocsr()
    return generator
