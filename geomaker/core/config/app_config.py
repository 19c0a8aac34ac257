"""
Application Configuration Manifest.

Hierarchical aggregate of the specialized sub-configurations (session
training parameters, runtime policy, assistant connection and telemetry)
into a single immutable object. Two factory entry points exist: a YAML
recipe or parsed CLI arguments.

Cross-domain validation lives here: checks that span more than one
sub-configuration (e.g. patience vs. epochs) are enforced once the whole
manifest is assembled.
"""

# =========================================================================== #
#                                Standard Imports                             #
# =========================================================================== #
import argparse
import warnings
from pathlib import Path
from typing import Any, Dict

# =========================================================================== #
#                                Third-Party Imports                          #
# =========================================================================== #
from pydantic import BaseModel, ConfigDict, Field, model_validator

# =========================================================================== #
#                                Internal Imports                             #
# =========================================================================== #
from ..io import load_config_from_yaml
from .assistant_config import AssistantConfig
from .runtime_config import RuntimeConfig
from .session_config import SessionConfig
from .telemetry_config import TelemetryConfig


class AppConfig(BaseModel):
    """
    Main manifest aggregating the session's sub-configurations.

    Attributes:
        session: User-facing training parameters
        runtime: Scheduler cadence, ingestion bounds, synthesis volumes
        assistant: Conversational collaborator connection
        telemetry: Logging and export locations

    Example:
        >>> cfg = AppConfig.from_yaml(Path("recipes/session.yaml"))
        >>> cfg.session.epochs
        10
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    session: SessionConfig = Field(default_factory=SessionConfig)
    runtime: RuntimeConfig = Field(default_factory=RuntimeConfig)
    assistant: AssistantConfig = Field(default_factory=AssistantConfig)
    telemetry: TelemetryConfig = Field(default_factory=TelemetryConfig)

    @model_validator(mode="before")
    @classmethod
    def drop_empty_sections(cls, data: Any) -> Any:
        """Treats ``section:`` with no values in YAML as an absent section."""
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data

    @model_validator(mode="after")
    def validate_logic(self) -> "AppConfig":
        """
        Cross-domain validation enforcing consistency across sub-configs.

        Patience larger than the epoch budget is legal but means early
        stopping can never trigger, so it is reported as a warning.
        """
        if self.session.patience >= self.session.epochs:
            warnings.warn(
                f"patience ({self.session.patience}) >= epochs ({self.session.epochs}): "
                "early stopping will never trigger.",
                UserWarning,
                stacklevel=2,
            )
        if self.runtime.max_samples_per_class > self.runtime.max_total_samples:
            warnings.warn(
                "max_samples_per_class exceeds max_total_samples; "
                "the total bound will dominate.",
                UserWarning,
                stacklevel=2,
            )
        return self

    def dump_serialized(self) -> Dict[str, Any]:
        """Converts config to JSON-compatible dict for YAML serialization."""
        return self.model_dump(mode="json")

    @classmethod
    def from_yaml(cls, yaml_path: Path) -> "AppConfig":
        """
        Factory from a YAML recipe.

        Args:
            yaml_path: Path to config YAML

        Returns:
            Validated AppConfig instance
        """
        raw_data = load_config_from_yaml(yaml_path) or {}
        return cls.model_validate(raw_data)

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> "AppConfig":
        """
        Factory from CLI arguments.

        **PRECEDENCE ORDER:**
        1. If --config provided → YAML values take precedence (CLI ignored)
        2. If no --config → CLI arguments used
        3. Fallback → Pydantic field defaults

        Args:
            args: Parsed argparse namespace

        Returns:
            Configured instance
        """
        if getattr(args, "config", None):
            return cls.from_yaml(Path(args.config))

        return cls(
            session=SessionConfig.from_args(args),
            runtime=RuntimeConfig.from_args(args),
            telemetry=TelemetryConfig.from_args(args),
        )
