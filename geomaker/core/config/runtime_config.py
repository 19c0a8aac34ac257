"""
Runtime & Simulation Policy Schema.

Operational knobs that are not exposed as training hyperparameters: the
scheduler cadence, archive sampling bounds, the size of the placeholder
class set, the volume of synthetic evaluation data and the RNG seed.
"""

# =========================================================================== #
#                                Standard Imports                             #
# =========================================================================== #
import argparse
from typing import Optional

# =========================================================================== #
#                                Third-Party Imports                          #
# =========================================================================== #
from pydantic import BaseModel, ConfigDict, Field, model_validator

# =========================================================================== #
#                                Internal Imports                             #
# =========================================================================== #
from .session_config import DEFAULT_NUM_CLASSES
from .types import ClassCount, PositiveInt, SampleLimit, TickInterval


class RuntimeConfig(BaseModel):
    """
    Scheduler cadence, ingestion bounds and synthetic-result volumes.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    # ==================== Scheduler ====================
    tick_interval: TickInterval = Field(
        default=0.7, description="Seconds between simulated epochs"
    )

    # ==================== Ingestion ====================
    max_samples_per_class: SampleLimit = Field(
        default=3, description="Sample images kept per class"
    )
    max_total_samples: SampleLimit = Field(
        default=10, description="Sample images kept overall"
    )
    default_num_classes: ClassCount = Field(
        default=DEFAULT_NUM_CLASSES, description="Placeholder class set size"
    )

    # ==================== Synthesis ====================
    eval_samples_min: PositiveInt = Field(
        default=20, description="Minimum simulated evaluation items per class"
    )
    eval_samples_max: PositiveInt = Field(
        default=60, description="Maximum simulated evaluation items per class"
    )
    embedding_dim: PositiveInt = Field(
        default=16, description="Dimensionality of simulated embeddings"
    )
    cluster_points_per_class: PositiveInt = Field(
        default=30, description="Points per class in the cluster projection"
    )
    augmented_points: PositiveInt = Field(
        default=50, description="Original points in the augmentation projection"
    )
    augmentations_per_point: PositiveInt = Field(
        default=3, description="Augmented variants per original point"
    )
    max_error_samples: SampleLimit = Field(
        default=5, description="Misclassified items reported"
    )

    # ==================== Reproducibility ====================
    seed: Optional[int] = Field(
        default=None, description="Seed for synthetic results (None = entropy)"
    )

    @model_validator(mode="after")
    def validate_sampling(self) -> "RuntimeConfig":
        if self.eval_samples_min > self.eval_samples_max:
            raise ValueError(
                f"eval_samples_min ({self.eval_samples_min}) exceeds "
                f"eval_samples_max ({self.eval_samples_max})."
            )
        return self

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> "RuntimeConfig":
        """Factory from CLI arguments, keeping defaults for missing values."""
        args_dict = vars(args)
        params = {
            k: v for k, v in args_dict.items() if k in cls.model_fields and v is not None
        }
        return cls(**params)
