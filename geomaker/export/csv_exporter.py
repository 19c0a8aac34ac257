"""
CSV Exporters.

Two artifacts, both rendered with pandas:

    * training metrics only: header ``epoch,train_loss,valid_loss,train_acc,valid_acc``
    * full results: titled sections (report, confusion matrix, metrics,
      curves, error samples, cluster metrics) separated by blank lines
"""

# =========================================================================== #
#                                Standard Imports                             #
# =========================================================================== #
import io
import logging
from pathlib import Path
from typing import List, Optional

# =========================================================================== #
#                                Third-Party Imports                          #
# =========================================================================== #
import pandas as pd

# =========================================================================== #
#                                Internal Imports                             #
# =========================================================================== #
from geomaker.core.exceptions import ResultsUnavailableError
from geomaker.core.io import write_text_atomic
from geomaker.core.paths import LOGGER_NAME
from geomaker.evaluation.history import MetricsHistory
from geomaker.evaluation.synthesizer import ResultsBundle

logger = logging.getLogger(LOGGER_NAME)

FLOAT_FORMAT = "%.4f"


def _frame_to_csv(df: pd.DataFrame, index: bool = False) -> str:
    buffer = io.StringIO()
    df.to_csv(buffer, index=index, float_format=FLOAT_FORMAT, lineterminator="\n")
    return buffer.getvalue()


# ==================== Frames ====================


def report_frame(results: ResultsBundle) -> pd.DataFrame:
    """Per-class rows, then macro/weighted aggregates, accuracy and AUC-PR."""
    report = results.classification_report
    rows = [
        {
            "class": r.class_name,
            "precision": r.precision,
            "recall": r.recall,
            "specificity": r.specificity,
            "f1_score": r.f1_score,
            "support": r.support,
        }
        for r in report.per_class
    ]
    for name, agg in (("macro avg", report.macro_avg), ("weighted avg", report.weighted_avg)):
        rows.append(
            {
                "class": name,
                "precision": agg.precision,
                "recall": agg.recall,
                "specificity": agg.specificity,
                "f1_score": agg.f1_score,
                "support": agg.support,
            }
        )
    rows.append({"class": "accuracy", "f1_score": report.accuracy, "support": report.macro_avg.support})
    rows.append({"class": "auc_pr", "f1_score": report.auc_pr})

    df = pd.DataFrame(rows, columns=["class", "precision", "recall", "specificity", "f1_score", "support"])
    df["support"] = df["support"].astype("Int64")
    return df


def confusion_frame(results: ResultsBundle) -> pd.DataFrame:
    cm = results.confusion_matrix
    df = pd.DataFrame(list(cm.matrix), index=list(cm.labels), columns=list(cm.labels))
    df.index.name = "true\\predicted"
    return df


def curve_frame(results: ResultsBundle, kind: str) -> pd.DataFrame:
    curve = results.roc_curve if kind == "roc" else results.pr_curve
    columns = ["fpr", "tpr"] if kind == "roc" else ["recall", "precision"]
    return pd.DataFrame(
        [(p.x, p.y, p.threshold) for p in curve.points], columns=columns + ["threshold"]
    )


def error_frame(results: ResultsBundle) -> pd.DataFrame:
    return pd.DataFrame(
        [
            (e.sample_id, e.true_class, e.predicted_class, e.confidence, e.file_name or "placeholder")
            for e in results.error_samples
        ],
        columns=["sample_id", "true_class", "predicted_class", "confidence", "file_name"],
    )


def cluster_metrics_frame(results: ResultsBundle) -> pd.DataFrame:
    return pd.DataFrame(
        [(p.method, p.ari, p.nmi) for p in results.cluster_projections],
        columns=["method", "ari", "nmi"],
    )


# ==================== Renderers ====================


def render_metrics_csv(metrics: MetricsHistory) -> str:
    return _frame_to_csv(metrics.to_dataframe())


def render_results_csv(results: ResultsBundle, metrics: Optional[MetricsHistory] = None) -> str:
    sections: List[str] = [
        "# Classification Report\n" + _frame_to_csv(report_frame(results)),
        "# Confusion Matrix (row-normalized)\n" + _frame_to_csv(confusion_frame(results), index=True),
    ]
    if metrics is not None and len(metrics):
        sections.append("# Training Metrics\n" + render_metrics_csv(metrics))
    sections.extend(
        [
            f"# ROC Curve (AUC={results.roc_curve.auc:.4f})\n" + _frame_to_csv(curve_frame(results, "roc")),
            f"# PR Curve (AUC={results.pr_curve.auc:.4f})\n" + _frame_to_csv(curve_frame(results, "pr")),
            "# Error Samples\n" + _frame_to_csv(error_frame(results)),
            "# Cluster Metrics\n" + _frame_to_csv(cluster_metrics_frame(results)),
        ]
    )
    return "\n".join(sections)


# ==================== Writers ====================


def export_metrics_csv(metrics: MetricsHistory, path: Path) -> Path:
    if not len(metrics):
        raise ResultsUnavailableError("No training metrics recorded yet.")
    write_text_atomic(render_metrics_csv(metrics), Path(path))
    logger.info(f"Training metrics exported to {Path(path).name}")
    return Path(path)


def export_results_csv(
    results: Optional[ResultsBundle], metrics: Optional[MetricsHistory], path: Path
) -> Path:
    if results is None:
        raise ResultsUnavailableError("No completed run: train a model before exporting results.")
    write_text_atomic(render_results_csv(results, metrics), Path(path))
    logger.info(f"Results exported to {Path(path).name}")
    return Path(path)
