"""
Training Metrics Aggregation.

Append-only per-epoch series of the active run, with full and most-recent
views plus a pandas projection used by the CSV and Excel exporters.
"""

import copy
from typing import Dict, Iterator, List, Optional

import pandas as pd

from geomaker.trainer.simulator import EpochMetrics

METRIC_COLUMNS: List[str] = ["epoch", "train_loss", "valid_loss", "train_acc", "valid_acc"]


class MetricsHistory:
    """
    Ordered, append-only sequence of ``EpochMetrics``.

    Epochs must be strictly increasing; the series is emptied with
    ``clear()`` when a new run starts.
    """

    def __init__(self) -> None:
        self._records: List[EpochMetrics] = []

    def append(self, record: EpochMetrics) -> None:
        last = self.last
        if last is not None and record.epoch <= last.epoch:
            raise ValueError(
                f"Epoch {record.epoch} does not follow recorded epoch {last.epoch}."
            )
        self._records.append(record)

    def clear(self) -> None:
        self._records = []

    @property
    def records(self) -> List[EpochMetrics]:
        return list(self._records)

    @property
    def last(self) -> Optional[EpochMetrics]:
        return self._records[-1] if self._records else None

    def latest(self, n: int) -> List[EpochMetrics]:
        """The ``n`` most recent records, oldest first."""
        if n <= 0:
            return []
        return list(self._records[-n:])

    @property
    def epochs(self) -> List[int]:
        return [r.epoch for r in self._records]

    def columns(self) -> Dict[str, List[float]]:
        """Column-oriented view keyed by METRIC_COLUMNS."""
        return {col: [getattr(r, col) for r in self._records] for col in METRIC_COLUMNS}

    def to_dataframe(self) -> pd.DataFrame:
        return pd.DataFrame(self.columns(), columns=METRIC_COLUMNS)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[EpochMetrics]:
        return iter(list(self._records))

    def __deepcopy__(self, memo) -> "MetricsHistory":
        clone = MetricsHistory()
        clone._records = copy.copy(self._records)
        return clone
