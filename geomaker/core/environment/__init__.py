"""
Environment Abstraction Layer.

Seeding and timing helpers shared by the scheduler, the synthesizer and
the headless runner.
"""

from .reproducibility import make_rng, set_seed
from .timing import TimeTracker, TimeTrackerProtocol

__all__ = [
    "set_seed",
    "make_rng",
    "TimeTracker",
    "TimeTrackerProtocol",
]
