"""
Early Stopping Tracker.

Tracks the best validation loss of the active run and the number of
consecutive epochs without improvement on it.
"""

from typing import Optional


class EarlyStoppingTracker:
    """
    Patience counter over validation loss.

    Any strictly lower validation loss counts as an improvement and resets
    the counter; anything else increments it.
    """

    def __init__(self, patience: int = 1):
        if patience < 1:
            raise ValueError(f"patience must be >= 1, got {patience}")
        self.patience = patience
        self.best_valid_loss: Optional[float] = None
        self.epochs_without_improvement = 0

    def reset(self, patience: Optional[int] = None) -> None:
        if patience is not None:
            if patience < 1:
                raise ValueError(f"patience must be >= 1, got {patience}")
            self.patience = patience
        self.best_valid_loss = None
        self.epochs_without_improvement = 0

    def update(self, valid_loss: float) -> bool:
        """
        Records one epoch's validation loss.

        Returns:
            True if the loss improved on the best recorded value.
        """
        if self.best_valid_loss is None or valid_loss < self.best_valid_loss:
            self.best_valid_loss = valid_loss
            self.epochs_without_improvement = 0
            return True

        self.epochs_without_improvement += 1
        return False

    @property
    def patience_exhausted(self) -> bool:
        return self.epochs_without_improvement >= self.patience

    @property
    def remaining_patience(self) -> int:
        return max(0, self.patience - self.epochs_without_improvement)

    def __repr__(self) -> str:
        return (
            f"EarlyStoppingTracker(patience={self.patience}, "
            f"best_valid_loss={self.best_valid_loss}, "
            f"epochs_without_improvement={self.epochs_without_improvement})"
        )
