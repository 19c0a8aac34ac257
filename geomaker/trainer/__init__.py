"""
Trainer Package.

Simulated training loop: per-epoch metric synthesis, early stopping, tick
timers and the scheduler state machine tying them together.
"""

from .early_stopping import EarlyStoppingTracker
from .simulator import EpochMetrics, MetricsGeneratorProtocol, SyntheticMetricsGenerator
from .timers import ManualTickTimer, ThreadingTickTimer, TickTimerProtocol
from .scheduler import RunStatus, TrainingScheduler

__all__ = [
    "EarlyStoppingTracker",
    "EpochMetrics",
    "MetricsGeneratorProtocol",
    "SyntheticMetricsGenerator",
    "ManualTickTimer",
    "ThreadingTickTimer",
    "TickTimerProtocol",
    "RunStatus",
    "TrainingScheduler",
]
