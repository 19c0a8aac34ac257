"""
Telemetry & Filesystem Manifest.

Declarative schema for logging policy and artifact locations. Relative paths
are anchored to PROJECT_ROOT so exported files land in a predictable place
regardless of the working directory.
"""

# =========================================================================== #
#                                Standard Imports                             #
# =========================================================================== #
import argparse
from pathlib import Path
from typing import Optional

# =========================================================================== #
#                                Third-Party Imports                          #
# =========================================================================== #
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# =========================================================================== #
#                                Internal Imports                             #
# =========================================================================== #
from ..paths import EXPORTS_ROOT, PROJECT_ROOT
from .types import LogLevel, ValidatedPath


class TelemetryConfig(BaseModel):
    """
    Logging verbosity and output directory strategy.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    export_dir: ValidatedPath = Field(default=EXPORTS_ROOT)
    log_dir: Optional[ValidatedPath] = Field(default=None)
    log_level: LogLevel = Field(default="INFO")

    @model_validator(mode="before")
    @classmethod
    def handle_empty_config(cls, data):
        """
        Handles an empty YAML section (``telemetry:``) by returning a default dict.
        """
        if data is None:
            return {}
        return data

    @field_validator("export_dir", "log_dir", mode="before")
    @classmethod
    def resolve_relative_paths(cls, v):
        """
        Anchors relative paths to PROJECT_ROOT, preserves absolute paths.
        """
        if v is None:
            return None
        path = Path(v)
        if not path.is_absolute():
            return (PROJECT_ROOT / path).resolve()
        return path.resolve()

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> "TelemetryConfig":
        """
        Factory from CLI arguments.

        Args:
            args: Parsed argparse namespace

        Returns:
            Configured TelemetryConfig instance
        """
        schema_fields = cls.model_fields.keys()
        params = {
            k: getattr(args, k)
            for k in schema_fields
            if hasattr(args, k) and getattr(args, k) is not None
        }
        return cls(**params)
