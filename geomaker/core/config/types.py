"""
Semantic Type Definitions & Validation Primitives.

Foundational type-system for the configuration engine. Leverages Pydantic's
Annotated types to enforce domain constraints (split ratios, learning-rate
bounds, timer cadence, sampling limits) before they reach the orchestration
logic, so an invalid session configuration is rejected at the edge.
"""

from pathlib import Path
from typing import Annotated, Literal

from pydantic import AfterValidator, Field, PlainSerializer


def _sanitize_path(v: Path) -> Path:
    """Resolve path to absolute form without disk side-effects."""
    return v.expanduser().resolve()


# 1. GENERIC PRIMITIVES
PositiveInt = Annotated[int, Field(gt=0)]
NonNegativeInt = Annotated[int, Field(ge=0)]
PositiveFloat = Annotated[float, Field(gt=0)]
NonNegativeFloat = Annotated[float, Field(ge=0.0)]
Probability = Annotated[float, Field(ge=0.0, le=1.0)]

# 2. FILESYSTEM
ValidatedPath = Annotated[
    Path,
    AfterValidator(_sanitize_path),
    PlainSerializer(lambda v: str(v), when_used="json", return_type=str),
]

# 3. TRAINING
MAX_NUM_CLASSES = 100
ClassCount = Annotated[int, Field(ge=0, le=MAX_NUM_CLASSES)]
BatchSize = Annotated[int, Field(ge=1, le=2048)]
LearningRate = Annotated[float, Field(gt=1e-8, lt=1.0)]
WeightDecay = Annotated[float, Field(ge=0.0, le=1.0)]
SplitRatio = Annotated[float, Field(gt=0.0, lt=1.0)]
Patience = Annotated[int, Field(ge=1, le=1000)]

# 4. SCHEDULING & SAMPLING
TickInterval = Annotated[float, Field(ge=0.0, le=60.0)]
SampleLimit = Annotated[int, Field(ge=0, le=1000)]

# 5. SYSTEM & METADATA
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
