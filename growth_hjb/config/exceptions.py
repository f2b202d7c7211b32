"""Errors raised while checking a configuration."""

from typing import List


class ConfigurationError(Exception):
    """A configuration that cannot be solved as written.

    Raised by :meth:`Config.validate_solvability`, which collects every
    problem before raising: for instance an upper capital bound past the
    level where drift-free consumption vanishes, or a believed volatility
    with no steady state.

    Attributes:
        issues: One message per problem, prefixed by the model it concerns
            (``"true model"`` or ``"initial belief model"``).
    """

    def __init__(self, issues: List[str]) -> None:
        self.issues = issues
        noun = "issue" if len(issues) == 1 else "issues"
        details = "\n".join(f"  - {issue}" for issue in issues)
        super().__init__(f"Configuration is not solvable ({len(issues)} {noun}):\n{details}")
