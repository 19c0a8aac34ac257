"""
Synthetic Epoch Metrics.

Produces one ``EpochMetrics`` record per simulated epoch. Losses decay
with a logarithmic schedule plus bounded uniform noise; accuracies grow
logarithmically and are clipped below 1.0.
"""

# =========================================================================== #
#                                Standard Imports                             #
# =========================================================================== #
import math
from dataclasses import asdict, dataclass
from typing import Dict, Protocol

# =========================================================================== #
#                                Third-Party Imports                          #
# =========================================================================== #
import numpy as np

TRAIN_ACC_CEILING = 0.95
VALID_ACC_CEILING = 0.90
LOSS_NOISE = 0.2
ACC_NOISE = 0.1
VALID_LOSS_OFFSET = 0.1


@dataclass(frozen=True)
class EpochMetrics:
    """One row of the training metrics series."""

    epoch: int
    train_loss: float
    valid_loss: float
    train_acc: float
    valid_acc: float

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


class MetricsGeneratorProtocol(Protocol):
    """Source of per-epoch metrics consumed by the scheduler."""

    def generate(self, epoch: int) -> EpochMetrics: ...  # pragma: no cover


class SyntheticMetricsGenerator:
    """
    Default metrics source.

    Args:
        rng: NumPy generator supplying the noise terms.
    """

    def __init__(self, rng: np.random.Generator):
        self._rng = rng

    def generate(self, epoch: int) -> EpochMetrics:
        if epoch < 1:
            raise ValueError(f"epoch must be >= 1, got {epoch}")

        decay = 1.0 / math.log10(epoch + 1)
        growth = math.log(epoch) * 0.1

        train_loss = decay + self._rng.uniform(0.0, LOSS_NOISE)
        valid_loss = decay + VALID_LOSS_OFFSET + self._rng.uniform(0.0, LOSS_NOISE)
        train_acc = min(TRAIN_ACC_CEILING, 0.5 + growth + self._rng.uniform(0.0, ACC_NOISE))
        valid_acc = min(VALID_ACC_CEILING, 0.45 + growth + self._rng.uniform(0.0, ACC_NOISE))

        return EpochMetrics(
            epoch=epoch,
            train_loss=float(train_loss),
            valid_loss=float(valid_loss),
            train_acc=float(train_acc),
            valid_acc=float(valid_acc),
        )
