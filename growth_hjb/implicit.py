"""One implicit Euler step of the discretised HJB equation.

    ((ρ + 1/Δ)·I - A) · V_next = u(c) + V / Δ

``Δ`` is a relaxation step, not model time: large values approach a policy
iteration step. The system is solved directly with a sparse LU factorisation,
which for the (block-)tridiagonal generator costs little more than a banded
solve.
"""

import logging

import numpy as np
from scipy import sparse
from scipy.sparse.linalg import splu

from .exceptions import SingularSystemError

logger = logging.getLogger(__name__)


def implicit_step(
    generator: sparse.spmatrix,
    utility_flow: np.ndarray,
    value: np.ndarray,
    discount_rate: float,
    relaxation_step: float,
) -> np.ndarray:
    """Advance the value function by one implicit step.

    Args:
        generator: Sparse generator of the current policy.
        utility_flow: Period utility at the current policy, shaped like ``value``.
        value: Current value function.
        discount_rate: Discount rate ρ.
        relaxation_step: Relaxation step Δ.

    Returns:
        Next value function with the shape of ``value``.

    Raises:
        SingularSystemError: If the system matrix is singular or the solution
            is not finite.
    """
    size = generator.shape[0]
    system = (discount_rate + 1.0 / relaxation_step) * sparse.eye(size, format="csc") - generator
    rhs = np.ravel(utility_flow) + np.ravel(value) / relaxation_step

    try:
        lu = splu(sparse.csc_matrix(system))
    except RuntimeError as exc:
        raise SingularSystemError(f"Implicit system of size {size} is singular: {exc}") from exc

    solution = lu.solve(rhs)
    if not np.all(np.isfinite(solution)):
        raise SingularSystemError(
            f"Implicit solve produced {int(np.sum(~np.isfinite(solution)))} non-finite values"
        )
    return solution.reshape(np.shape(value))
