"""Adaptive-belief experiment configuration.

The agent starts from a misspecified diffusion parameter and, each period
with a fixed probability, nudges it a fixed fraction of the way toward the
true value.
"""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class BeliefConfig(BaseModel):
    """Parameters of the belief-update loop.

    Attributes:
        true_sigma: Diffusion parameter of the data-generating process.
        initial_sigma: Misspecified diffusion parameter held in period 1.
        update_probability: Success probability p of the per-period Bernoulli draw.
        learning_rate: Fraction λ of the gap closed on a successful draw.
        horizon: Number of periods T.
        seed: Seed of the random generator (None draws fresh entropy).
        on_failure: ``"raise"`` aborts the run when a period's solve fails,
            ``"skip"`` records the failure and continues.
        record_every: Keep full value/policy arrays every N-th period; the
            first and last periods are always kept.

    Examples:
        Short deterministic run::

            belief = BeliefConfig(horizon=50, update_probability=1.0, seed=7)
    """

    model_config = ConfigDict(frozen=True)

    true_sigma: float = Field(default=0.5, ge=0, le=2, description="True diffusion parameter")
    initial_sigma: float = Field(
        default=0.02, ge=0, le=2, description="Initial misspecified diffusion parameter"
    )
    update_probability: float = Field(
        default=0.45, ge=0, le=1, description="Bernoulli success probability"
    )
    learning_rate: float = Field(default=0.001, gt=0, le=2, description="Learning rate λ")
    horizon: int = Field(default=10_000, ge=1, description="Number of periods T")
    seed: Optional[int] = Field(default=None, ge=0, description="Random seed")
    on_failure: Literal["raise", "skip"] = Field(
        default="raise", description="Policy for periods whose solve fails"
    )
    record_every: int = Field(default=1, ge=1, description="Keep arrays every N-th period")
