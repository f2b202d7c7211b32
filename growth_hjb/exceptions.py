"""Exceptions raised by the finite-difference HJB engine.

Grid errors are raised before any solve. Numerical errors abort the current
value iteration; the belief loop decides whether to abort the whole run or
skip the period (see :class:`growth_hjb.belief.BeliefUpdateLoop`).
"""


class GrowthHJBError(Exception):
    """Base class for all growth_hjb errors."""


class InvalidGridError(GrowthHJBError, ValueError):
    """Raised when grid bounds or point counts are malformed."""


class SingularSystemError(GrowthHJBError, RuntimeError):
    """Raised when the implicit linear system cannot be solved.

    Either the sparse LU factorisation reports an exactly singular factor or
    the solution contains NaN/Inf values.
    """


class DomainError(GrowthHJBError, ArithmeticError):
    """Raised when consumption or marginal utility leaves its domain.

    The CRRA inverse marginal utility ``c = V_k^(-1/γ)`` needs a strictly
    positive derivative, and utility needs strictly positive consumption.
    Guarding here keeps NaN values out of the value function.
    """
