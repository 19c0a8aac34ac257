"""
Session Training Configuration Schema.

Declarative schema for the user-facing training parameters of one session:
model identity, class count, loop length, optimization and regularization
knobs, validation strategy and the explainability method used by the image
inspector.

Key Features:
    * Loop control: epochs and early-stopping patience consumed by the scheduler
    * Optimization landscape: learning rate, batch size, optimizer and LR scheduler names
    * Data partitioning: train/validation split ratios with a joint upper bound
    * Presentation flags: weighted loss, uncertainty display and CAM method

The configured class count is only a fallback: the effective class identity
is resolved against the loaded archive manifest at run time.
"""

# =========================================================================== #
#                                Standard Imports                             #
# =========================================================================== #
import argparse
from typing import Any, Dict

# =========================================================================== #
#                                Third-Party Imports                          #
# =========================================================================== #
from pydantic import BaseModel, ConfigDict, Field, model_validator

# =========================================================================== #
#                                Internal Imports                             #
# =========================================================================== #
from .types import (
    BatchSize,
    ClassCount,
    LearningRate,
    Patience,
    PositiveInt,
    SplitRatio,
    WeightDecay,
)

# Placeholder class count used when neither the user nor an archive defines one
DEFAULT_NUM_CLASSES = 5

# Human-readable labels, in presentation order, for persisted and summarized configs
PARAMETER_LABELS: Dict[str, str] = {
    "model_name": "Model",
    "fine_tune": "Fine-Tuning",
    "num_classes": "Number of Classes",
    "epochs": "Epochs",
    "learning_rate": "Learning Rate",
    "batch_size": "Batch Size",
    "train_split": "Train Split",
    "valid_split": "Validation Split",
    "validation_strategy": "Validation Strategy",
    "l2_lambda": "L2 Regularization",
    "patience": "Early Stopping Patience",
    "use_weighted_loss": "Weighted Loss",
    "show_uncertainty": "Show Uncertainty",
    "optimizer_name": "Optimizer",
    "lr_scheduler_name": "LR Scheduler",
    "augmentation_method": "Augmentation Method",
    "cam_method": "Explainability Method",
}


# SESSION CONFIGURATION
class SessionConfig(BaseModel):
    """
    User-selected parameters for a simulated training run.

    Immutable: updates go through ``with_updates`` so every change is
    re-validated as a whole.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    # ==================== Model ====================
    model_name: str = Field(default="resnet50", description="Backbone architecture")
    fine_tune: bool = Field(
        default=True, description="Full fine-tuning; class identity comes from the archive"
    )
    num_classes: ClassCount = Field(
        default=DEFAULT_NUM_CLASSES, description="Configured class count"
    )

    # ==================== Training Loop ====================
    epochs: PositiveInt = Field(default=10, description="Maximum epochs")
    patience: Patience = Field(default=3, description="Early stopping patience")
    batch_size: BatchSize = Field(default=32, description="Samples per batch")

    # ==================== Optimization ====================
    learning_rate: LearningRate = Field(default=0.001, description="Initial learning rate")
    l2_lambda: WeightDecay = Field(default=0.0001, description="L2 regularization")
    optimizer_name: str = Field(default="adam", description="Optimizer")
    lr_scheduler_name: str = Field(default="cosine", description="LR scheduler")
    use_weighted_loss: bool = Field(default=False, description="Class-frequency weighting")

    # ==================== Data ====================
    train_split: SplitRatio = Field(default=0.7, description="Training split ratio")
    valid_split: SplitRatio = Field(default=0.2, description="Validation split ratio")
    validation_strategy: str = Field(default="holdout", description="Validation strategy")
    augmentation_method: str = Field(default="standard", description="Data augmentation")

    # ==================== Explainability ====================
    show_uncertainty: bool = Field(
        default=False, description="Report an uncertainty score on inspection"
    )
    cam_method: str = Field(default="grad_cam", description="CAM method for inspection")

    @model_validator(mode="after")
    def validate_splits(self) -> "SessionConfig":
        total = self.train_split + self.valid_split
        if total > 1.0 + 1e-9:
            raise ValueError(
                f"train_split + valid_split = {total:.3f} exceeds 1.0."
            )
        return self

    def with_updates(self, **changes: Any) -> "SessionConfig":
        """Return a re-validated copy with the given fields replaced."""
        return type(self).model_validate({**self.model_dump(), **changes})

    # ==================== Factory Method ====================
    @classmethod
    def from_args(cls, args: argparse.Namespace) -> "SessionConfig":
        """
        Factory from CLI arguments.

        Only overrides schema fields present in args and not None.

        Args:
            args: Parsed command-line arguments

        Returns:
            SessionConfig with CLI-overridden values
        """
        args_dict = vars(args)
        valid_fields = cls.model_fields.keys()
        params = {k: v for k, v in args_dict.items() if k in valid_fields and v is not None}
        return cls(**params)
