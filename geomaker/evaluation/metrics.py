"""
Classification Metrics Module.

Per-class and aggregate classification statistics computed with
scikit-learn from a labeled prediction set. Class indices always refer to
positions in the class-name list the caller passes in, so report rows and
confusion-matrix rows can be joined by name.
"""

# =========================================================================== #
#                                Standard Imports                             #
# =========================================================================== #
import logging
from dataclasses import dataclass
from typing import List, Sequence, Tuple

# =========================================================================== #
#                                Third-Party Imports                          #
# =========================================================================== #
import numpy as np
from sklearn.metrics import (
    average_precision_score,
    confusion_matrix,
    precision_recall_fscore_support,
)

# =========================================================================== #
#                                Internal Imports                             #
# =========================================================================== #
from geomaker.core.paths import LOGGER_NAME

logger = logging.getLogger(LOGGER_NAME)


# DATA CONTAINERS
@dataclass(frozen=True)
class ClassMetrics:
    class_name: str
    precision: float
    recall: float
    specificity: float
    f1_score: float
    support: int


@dataclass(frozen=True)
class AggregateMetrics:
    precision: float
    recall: float
    specificity: float
    f1_score: float
    support: int


@dataclass(frozen=True)
class ClassificationReport:
    """Per-class rows in class-list order plus macro/weighted aggregates."""

    class_names: Tuple[str, ...]
    per_class: Tuple[ClassMetrics, ...]
    macro_avg: AggregateMetrics
    weighted_avg: AggregateMetrics
    accuracy: float
    auc_pr: float


@dataclass(frozen=True)
class ConfusionMatrix:
    """
    Square matrix, rows = true class, columns = predicted class.

    ``matrix`` is row-normalized; ``counts`` keeps the raw tallies.
    """

    labels: Tuple[str, ...]
    matrix: Tuple[Tuple[float, ...], ...]
    counts: Tuple[Tuple[int, ...], ...]


# METRIC LOGIC
def one_hot(y_true: np.ndarray, num_classes: int) -> np.ndarray:
    """Indicator matrix of shape (n_samples, num_classes)."""
    return np.eye(num_classes, dtype=int)[np.asarray(y_true, dtype=int)]


def compute_confusion_matrix(
    y_true: np.ndarray, y_pred: np.ndarray, class_names: Sequence[str]
) -> ConfusionMatrix:
    labels = list(range(len(class_names)))
    counts = confusion_matrix(y_true, y_pred, labels=labels)

    row_sums = counts.sum(axis=1, keepdims=True)
    normalized = np.divide(
        counts, row_sums, out=np.zeros(counts.shape, dtype=float), where=row_sums > 0
    )

    return ConfusionMatrix(
        labels=tuple(class_names),
        matrix=tuple(tuple(round(float(v), 6) for v in row) for row in normalized),
        counts=tuple(tuple(int(v) for v in row) for row in counts),
    )


def specificity_per_class(counts: np.ndarray) -> np.ndarray:
    """TN / (TN + FP) for each class of a raw-count confusion matrix."""
    counts = np.asarray(counts, dtype=float)
    total = counts.sum()
    tp = np.diag(counts)
    fp = counts.sum(axis=0) - tp
    fn = counts.sum(axis=1) - tp
    tn = total - tp - fp - fn
    denom = tn + fp
    return np.divide(tn, denom, out=np.ones_like(tn), where=denom > 0)


def compute_classification_report(
    y_true: np.ndarray,
    y_pred: np.ndarray,
    y_score: np.ndarray,
    class_names: Sequence[str],
) -> ClassificationReport:
    """
    Builds the full classification report.

    Args:
        y_true: Ground-truth class indices.
        y_pred: Predicted class indices.
        y_score: Per-class probability matrix (n_samples, n_classes).
        class_names: Ordered class names, index-aligned with the labels.

    Returns:
        ClassificationReport keyed on ``class_names``.
    """
    labels = list(range(len(class_names)))
    precision, recall, f1, support = precision_recall_fscore_support(
        y_true, y_pred, labels=labels, zero_division=0
    )
    counts = confusion_matrix(y_true, y_pred, labels=labels)
    specificity = specificity_per_class(counts)

    per_class: List[ClassMetrics] = [
        ClassMetrics(
            class_name=name,
            precision=float(precision[i]),
            recall=float(recall[i]),
            specificity=float(specificity[i]),
            f1_score=float(f1[i]),
            support=int(support[i]),
        )
        for i, name in enumerate(class_names)
    ]

    total_support = int(support.sum())
    weights = support / total_support if total_support else np.zeros_like(precision)

    macro = AggregateMetrics(
        precision=float(np.mean(precision)),
        recall=float(np.mean(recall)),
        specificity=float(np.mean(specificity)),
        f1_score=float(np.mean(f1)),
        support=total_support,
    )
    weighted = AggregateMetrics(
        precision=float(np.sum(precision * weights)),
        recall=float(np.sum(recall * weights)),
        specificity=float(np.sum(specificity * weights)),
        f1_score=float(np.sum(f1 * weights)),
        support=total_support,
    )

    accuracy = float(np.mean(np.asarray(y_true) == np.asarray(y_pred))) if total_support else 0.0

    return ClassificationReport(
        class_names=tuple(class_names),
        per_class=tuple(per_class),
        macro_avg=macro,
        weighted_avg=weighted,
        accuracy=accuracy,
        auc_pr=_macro_average_precision(y_true, y_score, len(class_names)),
    )


def _macro_average_precision(y_true: np.ndarray, y_score: np.ndarray, num_classes: int) -> float:
    indicator = one_hot(y_true, num_classes)
    present = indicator.sum(axis=0) > 0
    if not present.any():
        logger.warning("AUC-PR undefined: no positive samples. Defaulting to 0.0")
        return 0.0

    # Classes without positives have no defined precision-recall curve
    return float(
        average_precision_score(indicator[:, present], np.asarray(y_score)[:, present], average="macro")
    )
