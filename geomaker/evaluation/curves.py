"""
ROC and Precision-Recall Curves.

Micro-averaged one-vs-rest curves over every (sample, class) pair of a
labeled prediction set.
"""

# =========================================================================== #
#                                Standard Imports                             #
# =========================================================================== #
import logging
import math
from dataclasses import dataclass
from typing import Optional, Tuple

# =========================================================================== #
#                                Third-Party Imports                          #
# =========================================================================== #
import numpy as np
from sklearn.metrics import auc, precision_recall_curve, roc_curve

# =========================================================================== #
#                                Internal Imports                             #
# =========================================================================== #
from geomaker.core.paths import LOGGER_NAME

from .metrics import one_hot

logger = logging.getLogger(LOGGER_NAME)


@dataclass(frozen=True)
class CurvePoint:
    x: float
    y: float
    threshold: Optional[float] = None


@dataclass(frozen=True)
class CurveData:
    """Ordered point sequence (ascending x) plus the area under it."""

    kind: str
    x_label: str
    y_label: str
    points: Tuple[CurvePoint, ...]
    auc: float


def _finite(value: float) -> Optional[float]:
    value = float(value)
    return value if math.isfinite(value) else None


def _flatten(y_true: np.ndarray, y_score: np.ndarray, num_classes: int):
    return one_hot(y_true, num_classes).ravel(), np.asarray(y_score, dtype=float).ravel()


def compute_roc_curve(y_true: np.ndarray, y_score: np.ndarray, num_classes: int) -> CurveData:
    """Micro-averaged ROC curve (x = FPR, y = TPR)."""
    truth, scores = _flatten(y_true, y_score, num_classes)

    if truth.min() == truth.max():
        logger.warning("ROC curve undefined for a single-valued target. Using diagonal.")
        points = (CurvePoint(0.0, 0.0), CurvePoint(1.0, 1.0))
        return CurveData("roc", "False Positive Rate", "True Positive Rate", points, 0.5)

    fpr, tpr, thresholds = roc_curve(truth, scores)
    points = tuple(
        CurvePoint(float(x), float(y), _finite(t)) for x, y, t in zip(fpr, tpr, thresholds)
    )
    return CurveData(
        kind="roc",
        x_label="False Positive Rate",
        y_label="True Positive Rate",
        points=points,
        auc=float(auc(fpr, tpr)),
    )


def compute_pr_curve(y_true: np.ndarray, y_score: np.ndarray, num_classes: int) -> CurveData:
    """Micro-averaged precision-recall curve (x = recall, y = precision)."""
    truth, scores = _flatten(y_true, y_score, num_classes)

    if truth.max() == 0:
        logger.warning("PR curve undefined without positive samples.")
        return CurveData("pr", "Recall", "Precision", (CurvePoint(0.0, 1.0),), 0.0)

    precision, recall, thresholds = precision_recall_curve(truth, scores)

    # sklearn orders by decreasing recall; the final point carries no threshold
    padded = list(thresholds) + [float("nan")]
    points = tuple(
        CurvePoint(float(r), float(p), _finite(t))
        for r, p, t in reversed(list(zip(recall, precision, padded)))
    )
    xs = [pt.x for pt in points]
    ys = [pt.y for pt in points]

    return CurveData(
        kind="pr",
        x_label="Recall",
        y_label="Precision",
        points=points,
        auc=float(auc(xs, ys)),
    )
