"""
Result Synthesis Pipeline.

Runs once when a simulated training run terminates. A single labeled
evaluation set is simulated, with a per-class hit rate that tracks the
final validation accuracy. Every artifact in the bundle is derived from
that set, so report rows, confusion-matrix rows, curve points, cluster
labels and error samples all agree on one class list and its order.
"""

# =========================================================================== #
#                                Standard Imports                             #
# =========================================================================== #
import logging
from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Sequence, Tuple

# =========================================================================== #
#                                Third-Party Imports                          #
# =========================================================================== #
import numpy as np

# =========================================================================== #
#                                Internal Imports                             #
# =========================================================================== #
from geomaker.core.config.runtime_config import RuntimeConfig
from geomaker.core.paths import LOGGER_NAME
from geomaker.data_handler.archive import SampleImage

from .clustering import (
    AugmentedPoint,
    ClusterProjection,
    augment_embeddings,
    cluster_embeddings,
    simulate_embeddings,
)
from .curves import CurveData, compute_pr_curve, compute_roc_curve
from .inspection import IndividualInspection
from .metrics import (
    ClassificationReport,
    ConfusionMatrix,
    compute_classification_report,
    compute_confusion_matrix,
)

logger = logging.getLogger(LOGGER_NAME)


# DATA CONTAINERS
@dataclass(frozen=True)
class ErrorSample:
    """A misclassified evaluation item, linked to an archive sample when one exists."""

    sample_id: int
    true_class: str
    predicted_class: str
    confidence: float
    file_name: Optional[str]
    image_data: Optional[str]

    @property
    def is_placeholder(self) -> bool:
        return self.image_data is None


@dataclass(frozen=True)
class ResultsBundle:
    class_names: Tuple[str, ...]
    classification_report: ClassificationReport
    confusion_matrix: ConfusionMatrix
    roc_curve: CurveData
    pr_curve: CurveData
    cluster_projections: Tuple[ClusterProjection, ...]
    augmented_embeddings: Tuple[AugmentedPoint, ...]
    error_samples: Tuple[ErrorSample, ...]
    individual_inspection: Optional[IndividualInspection] = None

    def with_inspection(self, inspection: Optional[IndividualInspection]) -> "ResultsBundle":
        return replace(self, individual_inspection=inspection)

    def projection(self, method: str) -> Optional[ClusterProjection]:
        for proj in self.cluster_projections:
            if proj.method == method:
                return proj
        return None


@dataclass(frozen=True)
class EvaluationSet:
    """Simulated ground truth, predictions and per-class scores."""

    y_true: np.ndarray
    y_pred: np.ndarray
    y_score: np.ndarray


# SIMULATION
def simulate_evaluation_set(
    num_classes: int,
    accuracy: float,
    runtime: RuntimeConfig,
    rng: np.random.Generator,
) -> EvaluationSet:
    """
    Draws a labeled prediction set whose hit rate tracks ``accuracy``.

    Scores are softmax-normalized logits in which the predicted class always
    holds the largest logit, so argmax(y_score) == y_pred.
    """
    per_class = rng.integers(
        runtime.eval_samples_min, runtime.eval_samples_max + 1, size=num_classes
    )
    y_true = np.repeat(np.arange(num_classes), per_class)

    hit_rate = np.clip(accuracy + rng.uniform(-0.05, 0.05, size=num_classes), 0.05, 0.99)
    hits = rng.random(len(y_true)) < hit_rate[y_true]

    y_pred = y_true.copy()
    if num_classes > 1:
        offsets = rng.integers(1, num_classes, size=len(y_true))
        y_pred[~hits] = (y_true[~hits] + offsets[~hits]) % num_classes

    logits = rng.normal(0.0, 1.0, size=(len(y_true), num_classes))
    rows = np.arange(len(y_true))
    logits[rows, y_pred] = logits.max(axis=1) + rng.uniform(0.5, 3.0, size=len(y_true))

    exp = np.exp(logits - logits.max(axis=1, keepdims=True))
    y_score = exp / exp.sum(axis=1, keepdims=True)

    return EvaluationSet(y_true=y_true, y_pred=y_pred, y_score=y_score)


def select_error_samples(
    evaluation: EvaluationSet,
    class_names: Sequence[str],
    samples: Sequence[SampleImage],
    limit: int,
    rng: np.random.Generator,
) -> Tuple[ErrorSample, ...]:
    """
    Picks up to ``limit`` misclassified items in evaluation order.

    Each error borrows the preview of an archive sample of its true class,
    cycling through that class's samples; classes without samples get a
    placeholder reference.
    """
    wrong = np.flatnonzero(evaluation.y_true != evaluation.y_pred)
    if limit <= 0 or len(wrong) == 0:
        return ()

    chosen = np.sort(rng.choice(wrong, size=min(limit, len(wrong)), replace=False))

    by_class: Dict[str, List[SampleImage]] = {}
    for sample in samples:
        by_class.setdefault(sample.class_name, []).append(sample)
    used: Dict[str, int] = {}

    errors: List[ErrorSample] = []
    for idx in chosen:
        true_name = class_names[int(evaluation.y_true[idx])]
        pred_idx = int(evaluation.y_pred[idx])
        candidates = by_class.get(true_name, [])

        match: Optional[SampleImage] = None
        if candidates:
            match = candidates[used.get(true_name, 0) % len(candidates)]
            used[true_name] = used.get(true_name, 0) + 1

        errors.append(
            ErrorSample(
                sample_id=int(idx),
                true_class=true_name,
                predicted_class=class_names[pred_idx],
                confidence=float(evaluation.y_score[idx, pred_idx]),
                file_name=match.file_name if match else None,
                image_data=match.image_data if match else None,
            )
        )
    return tuple(errors)


# PIPELINE
def synthesize_results(
    class_names: Sequence[str],
    final_valid_acc: float,
    samples: Sequence[SampleImage],
    inspection: Optional[IndividualInspection],
    runtime: RuntimeConfig,
    rng: np.random.Generator,
) -> ResultsBundle:
    """
    Builds the complete ResultsBundle for one terminated run.

    Args:
        class_names: Effective class list of the run.
        final_valid_acc: Validation accuracy of the last epoch.
        samples: Archive sample previews for error cross-referencing.
        inspection: Current single-image inspection, mirrored into the bundle.
        runtime: Volumes of simulated data.
        rng: Generator for every random draw.

    Returns:
        ResultsBundle keyed on ``class_names``.
    """
    names = tuple(class_names)
    if not names:
        raise ValueError("Cannot synthesize results without at least one class.")

    k = len(names)
    seed = int(rng.integers(0, 2**31 - 1))

    evaluation = simulate_evaluation_set(k, final_valid_acc, runtime, rng)

    report = compute_classification_report(
        evaluation.y_true, evaluation.y_pred, evaluation.y_score, names
    )
    cm = compute_confusion_matrix(evaluation.y_true, evaluation.y_pred, names)
    roc = compute_roc_curve(evaluation.y_true, evaluation.y_score, k)
    pr = compute_pr_curve(evaluation.y_true, evaluation.y_score, k)

    cluster_labels = np.repeat(np.arange(k), runtime.cluster_points_per_class)
    embeddings = simulate_embeddings(cluster_labels, k, runtime.embedding_dim, rng)
    projections = cluster_embeddings(embeddings, cluster_labels, names, seed)

    aug_labels = np.arange(runtime.augmented_points) % k
    aug_embeddings = simulate_embeddings(aug_labels, k, runtime.embedding_dim, rng)
    augmented = augment_embeddings(
        aug_embeddings, aug_labels, names, runtime.augmentations_per_point, rng, seed
    )

    errors = select_error_samples(evaluation, names, samples, runtime.max_error_samples, rng)

    logger.info(
        f"Results synthesized: {k} classes, accuracy {report.accuracy:.3f}, "
        f"ROC AUC {roc.auc:.3f}, {len(errors)} error samples"
    )

    return ResultsBundle(
        class_names=names,
        classification_report=report,
        confusion_matrix=cm,
        roc_curve=roc,
        pr_curve=pr,
        cluster_projections=projections,
        augmented_embeddings=augmented,
        error_samples=errors,
        individual_inspection=inspection,
    )
