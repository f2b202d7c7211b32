"""Custom warning classes for the growth_hjb package.

These warning classes allow users to programmatically filter, suppress,
or capture warnings using Python's standard ``warnings`` module.

Example:
    Silence exhausted iteration budgets during a long belief run::

        import warnings
        from growth_hjb._warnings import NonConvergenceWarning

        warnings.filterwarnings("ignore", category=NonConvergenceWarning)

    Count them instead::

        with warnings.catch_warnings(record=True) as w:
            warnings.simplefilter("always", NonConvergenceWarning)
            # ... run the belief loop ...
            misses = [x for x in w if issubclass(x.category, NonConvergenceWarning)]
"""


class GrowthHJBWarning(UserWarning):
    """Base class for all growth_hjb warnings."""


class NonConvergenceWarning(GrowthHJBWarning):
    """The value iteration exhausted its budget without meeting tolerance.

    Non-fatal: the last iterate is returned with ``converged=False``.
    """


class ConfigurationWarning(GrowthHJBWarning):
    """Unusual or potentially incorrect configuration parameters.

    Raised during config validation when values are legal but fall outside
    the range the solver is normally run with (e.g. a learning rate above 1
    or a relaxation step below 1).
    """
