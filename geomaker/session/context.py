"""
Session Context Serializer.

Projects configuration, manifest, metrics and results into two views of
the same snapshot:

    * ``structured``: nested plain dict (JSON-compatible)
    * ``text``: markdown summary with a JSON block and CSV-like tables,
      handed unmodified to the conversational assistant as grounding

Every section is always present; anything missing is rendered as the
``NOT_AVAILABLE`` marker. The projection is a pure function of its inputs:
no clocks, no randomness, so identical input yields byte-identical output.
"""

# =========================================================================== #
#                                Standard Imports                             #
# =========================================================================== #
import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

# =========================================================================== #
#                                Internal Imports                             #
# =========================================================================== #
from geomaker.core.config.session_config import DEFAULT_NUM_CLASSES, PARAMETER_LABELS, SessionConfig
from geomaker.data_handler.archive import ArchiveManifest
from geomaker.data_handler.identity import resolve_class_identity
from geomaker.evaluation.history import METRIC_COLUMNS, MetricsHistory
from geomaker.evaluation.inspection import IndividualInspection
from geomaker.evaluation.serialization import (
    augmented_to_list,
    confusion_to_dict,
    curve_to_dict,
    errors_to_list,
    inspection_to_dict,
    projections_to_dict,
    report_to_dict,
)
from geomaker.evaluation.synthesizer import ResultsBundle
from geomaker.export.config_exporter import format_parameter_value

from .state import SessionState

NOT_AVAILABLE = "not available"
CURVE_PREVIEW = 5
POINT_PREVIEW = 3

RESULT_SECTIONS: Dict[str, str] = {
    "training_metrics": "training metrics",
    "classification_report": "classification report",
    "confusion_matrix": "confusion matrix",
    "roc_curve": "ROC curve",
    "pr_curve": "precision-recall curve",
    "error_samples": "error samples",
    "cluster_projections": "cluster projections",
    "augmented_embeddings": "augmented embeddings",
    "individual_inspection": "individual inspection",
}


@dataclass(frozen=True)
class SessionContext:
    structured: Dict[str, Any]
    text: str

    @property
    def available_sections(self) -> List[str]:
        """Readable names of the result sections that carry data."""
        return [
            label
            for key, label in RESULT_SECTIONS.items()
            if self.structured.get(key) != NOT_AVAILABLE
        ]

    @property
    def has_results(self) -> bool:
        return self.structured.get("classification_report") != NOT_AVAILABLE


# ==================== Public API ====================


def build_session_context(
    config: SessionConfig,
    manifest: Optional[ArchiveManifest],
    metrics: Optional[MetricsHistory],
    results: Optional[ResultsBundle],
    domain_hint: Optional[str] = None,
    inspection: Optional[IndividualInspection] = None,
    default_num_classes: int = DEFAULT_NUM_CLASSES,
    placeholder_classes: Sequence[str] = (),
) -> SessionContext:
    """
    Builds the structured and textual session snapshot.

    Args:
        config: Active session configuration
        manifest: Loaded archive manifest, if any
        metrics: Metrics series of the current or last run
        results: Results bundle of the last completed run
        domain_hint: User-declared description of the classification task
        inspection: Latest single-image inspection (falls back to the one
            mirrored in ``results``)
        default_num_classes: Placeholder class set size
        placeholder_classes: Names installed after a failed upload

    Returns:
        SessionContext with both projections
    """
    identity = resolve_class_identity(config, manifest, default_num_classes, placeholder_classes)
    if inspection is None and results is not None:
        inspection = results.individual_inspection

    structured = _build_structured(config, identity, manifest, metrics, results, domain_hint, inspection)
    text = _render_text(config, identity.names, structured, results, inspection)
    return SessionContext(structured=structured, text=text)


def context_from_state(state: SessionState) -> SessionContext:
    """Convenience wrapper over a (snapshotted) SessionState."""
    return build_session_context(
        config=state.config,
        manifest=state.manifest,
        metrics=state.metrics,
        results=state.results,
        domain_hint=state.domain_hint,
        inspection=state.inspection,
        default_num_classes=state.runtime.default_num_classes,
        placeholder_classes=state.placeholder_classes,
    )


# ==================== Structured Projection ====================


def _or_na(value: Any) -> Any:
    return NOT_AVAILABLE if value is None else value


def _build_structured(config, identity, manifest, metrics, results, domain_hint, inspection) -> Dict[str, Any]:
    records = metrics.records if metrics is not None else []

    configuration = config.model_dump(mode="json")
    configuration["effective_num_classes"] = identity.count
    configuration["effective_class_names"] = list(identity.names)
    configuration["class_source"] = identity.source

    if manifest is not None:
        dataset: Any = {
            "archive_file_name": manifest.archive_name,
            "num_classes": manifest.num_classes,
            "class_names": manifest.class_names,
            "images_per_class": {name: manifest.image_count(name) for name in manifest.class_names},
            "sample_images": [
                {"class_name": s.class_name, "file_name": s.file_name, "width": s.width, "height": s.height}
                for s in manifest.samples
            ],
        }
    else:
        dataset = NOT_AVAILABLE

    if records:
        last = records[-1]
        training: Any = {
            "epochs_run": len(records),
            "records": [r.to_dict() for r in records],
            "last": last.to_dict(),
        }
    else:
        training = NOT_AVAILABLE

    structured: Dict[str, Any] = {
        "session": {
            "archive_file_name": manifest.archive_name if manifest else NOT_AVAILABLE,
            "domain_hint": _or_na(domain_hint),
        },
        "configuration": configuration,
        "dataset": dataset,
        "training_metrics": training,
    }

    if results is not None:
        structured.update(
            {
                "classification_report": report_to_dict(results.classification_report),
                "confusion_matrix": confusion_to_dict(results.confusion_matrix),
                "roc_curve": curve_to_dict(results.roc_curve),
                "pr_curve": curve_to_dict(results.pr_curve),
                "error_samples": errors_to_list(results.error_samples, include_images=False),
                "cluster_projections": projections_to_dict(results.cluster_projections, results.class_names),
                "augmented_embeddings": augmented_to_list(results.augmented_embeddings),
            }
        )
    else:
        for key in (
            "classification_report",
            "confusion_matrix",
            "roc_curve",
            "pr_curve",
            "error_samples",
            "cluster_projections",
            "augmented_embeddings",
        ):
            structured[key] = NOT_AVAILABLE

    structured["individual_inspection"] = _or_na(inspection_to_dict(inspection, include_image=False))
    return structured


# ==================== Text Rendering ====================


def _fmt(value: Optional[float], digits: int) -> str:
    return "N/A" if value is None else f"{value:.{digits}f}"


def _summary_block(config: SessionConfig, class_names: Sequence[str], structured: Dict[str, Any]) -> Dict[str, Any]:
    training = structured["training_metrics"]
    report = structured["classification_report"]
    clusters = structured["cluster_projections"]

    summary: Dict[str, Any] = {
        "model_configuration": {
            "model_name": config.model_name,
            "fine_tune": config.fine_tune,
            "effective_num_classes": len(class_names),
            "effective_class_names": list(class_names),
            "epochs_configured": config.epochs,
            "epochs_run": training["epochs_run"] if training != NOT_AVAILABLE else 0,
            "learning_rate": config.learning_rate,
            "batch_size": config.batch_size,
            "optimizer": config.optimizer_name,
            "xai_method": config.cam_method,
            "validation_strategy": config.validation_strategy,
        },
        "overall_performance": NOT_AVAILABLE,
        "clustering_metrics": NOT_AVAILABLE,
        "user_context": structured["session"],
        "training_summary": NOT_AVAILABLE,
    }
    if report != NOT_AVAILABLE:
        summary["overall_performance"] = {
            "accuracy": _fmt(report["accuracy"], 4),
            "macro_avg_f1": _fmt(report["macro_avg"]["f1_score"], 4),
            "weighted_avg_f1": _fmt(report["weighted_avg"]["f1_score"], 4),
            "auc_pr": _fmt(report["auc_pr"], 4),
        }
    if clusters != NOT_AVAILABLE:
        summary["clustering_metrics"] = {
            f"{method}_{metric}": _fmt(values[metric], 3)
            for method, values in clusters["methods"].items()
            for metric in ("ari", "nmi")
        }
    if training != NOT_AVAILABLE:
        last = training["last"]
        summary["training_summary"] = {
            "last_epoch": last["epoch"],
            **{f"last_{col}": _fmt(last[col], 4) for col in METRIC_COLUMNS[1:]},
        }
    return summary


def _render_text(
    config: SessionConfig,
    class_names: Sequence[str],
    structured: Dict[str, Any],
    results: Optional[ResultsBundle],
    inspection: Optional[IndividualInspection],
) -> str:
    lines: List[str] = ["## Session Results Context ##", ""]

    lines.append("### Structured Summary")
    lines.append("```json")
    lines.append(json.dumps(_summary_block(config, class_names, structured), indent=2, ensure_ascii=False))
    lines.append("```")
    lines.append("")

    values = config.model_dump()
    values["num_classes"] = len(class_names)
    lines.append("### Model Configuration")
    for field, label in PARAMETER_LABELS.items():
        lines.append(f"- {label}: {format_parameter_value(values[field])}")
    lines.append(f"- Class Names: {', '.join(class_names)}")
    session = structured["session"]
    lines.append(f"- Archive: {session['archive_file_name']}")
    lines.append(f"- Domain: {session['domain_hint']}")
    lines.append("")

    _render_dataset(lines, structured["dataset"])
    _render_training(lines, structured["training_metrics"])

    if results is None:
        for key in list(RESULT_SECTIONS)[1:-1]:
            label = RESULT_SECTIONS[key]
            lines.append(f"### {label[0].upper()}{label[1:]}")
            lines.append(NOT_AVAILABLE)
            lines.append("")
    else:
        _render_report(lines, results)
        _render_confusion(lines, results)
        _render_curve(lines, "ROC curve", "fpr,tpr,threshold", structured["roc_curve"])
        _render_curve(lines, "Precision-recall curve", "recall,precision,threshold", structured["pr_curve"])
        _render_errors(lines, results)
        _render_clusters(lines, results)
        _render_augmented(lines, results)

    _render_inspection(lines, inspection)
    lines.append("## End of Session Results Context ##")
    return "\n".join(lines) + "\n"


def _render_dataset(lines: List[str], dataset: Any) -> None:
    lines.append("### Dataset")
    if dataset == NOT_AVAILABLE:
        lines.append(NOT_AVAILABLE)
    else:
        lines.append("class,images")
        for name, count in dataset["images_per_class"].items():
            lines.append(f"{name},{count}")
        lines.append(f"Sample images: {len(dataset['sample_images'])}")
    lines.append("")


def _render_training(lines: List[str], training: Any) -> None:
    lines.append("### Training metrics")
    if training == NOT_AVAILABLE:
        lines.append(NOT_AVAILABLE)
    else:
        lines.append(",".join(METRIC_COLUMNS))
        for rec in training["records"]:
            lines.append(
                f"{rec['epoch']},"
                + ",".join(_fmt(rec[col], 4) for col in METRIC_COLUMNS[1:])
            )
    lines.append("")


def _render_report(lines: List[str], results: ResultsBundle) -> None:
    report = results.classification_report
    lines.append("### Classification report")
    lines.append("class,precision,recall,specificity,f1_score,support")
    for row in report.per_class:
        lines.append(
            f"{row.class_name},{row.precision:.3f},{row.recall:.3f},"
            f"{row.specificity:.3f},{row.f1_score:.3f},{row.support}"
        )
    for name, agg in (("macro avg", report.macro_avg), ("weighted avg", report.weighted_avg)):
        lines.append(
            f"{name},{agg.precision:.3f},{agg.recall:.3f},"
            f"{agg.specificity:.3f},{agg.f1_score:.3f},{agg.support}"
        )
    lines.append(f"accuracy,,,,{report.accuracy:.4f},")
    lines.append(f"auc_pr (macro),,,,{report.auc_pr:.3f},")
    lines.append("")


def _render_confusion(lines: List[str], results: ResultsBundle) -> None:
    cm = results.confusion_matrix
    lines.append("### Confusion matrix (row-normalized)")
    lines.append("true\\predicted," + ",".join(cm.labels))
    for label, row in zip(cm.labels, cm.matrix):
        lines.append(label + "," + ",".join(f"{v:.2f}" for v in row))
    lines.append("")


def _render_curve(lines: List[str], title: str, header: str, curve: Dict[str, Any]) -> None:
    points = curve["points"]
    lines.append(f"### {title} (AUC: {curve['auc']:.3f})")
    lines.append(header)
    for p in points[:CURVE_PREVIEW]:
        lines.append(f"{p['x']:.3f},{p['y']:.3f},{_fmt(p['threshold'], 2)}")
    if len(points) > CURVE_PREVIEW:
        lines.append(f"...({len(points) - CURVE_PREVIEW} more points)")
    lines.append("")


def _render_errors(lines: List[str], results: ResultsBundle) -> None:
    lines.append("### Error samples")
    if not results.error_samples:
        lines.append("No misclassified samples.")
    for i, err in enumerate(results.error_samples, start=1):
        source = (
            f"archive sample '{err.file_name}'" if not err.is_placeholder else "placeholder image"
        )
        lines.append(
            f"- Error {i}: true={err.true_class}, predicted={err.predicted_class}, "
            f"confidence={err.confidence:.3f} ({source})"
        )
    lines.append("")


def _render_clusters(lines: List[str], results: ResultsBundle) -> None:
    lines.append("### Cluster projections")
    for proj in results.cluster_projections:
        lines.append(f"- {proj.method}: ARI={proj.ari:.3f}, NMI={proj.nmi:.3f}")
    if results.cluster_projections:
        first = results.cluster_projections[0]
        lines.append(f"Sample points ({first.method}, PCA):")
        for i, p in enumerate(first.points[:POINT_PREVIEW], start=1):
            lines.append(f"- Point {i}: x={p.x:.2f}, y={p.y:.2f}, cluster={p.cluster}, label={p.label}")
        if len(first.points) > POINT_PREVIEW:
            lines.append(f"...({len(first.points) - POINT_PREVIEW} more points)")
    lines.append("")


def _render_augmented(lines: List[str], results: ResultsBundle) -> None:
    points = results.augmented_embeddings
    lines.append("### Augmented embeddings (PCA)")
    for i, p in enumerate(points[:POINT_PREVIEW], start=1):
        kind = "augmented" if p.is_augmented else "original"
        lines.append(f"- Point {i}: x={p.x:.2f}, y={p.y:.2f}, label={p.label} ({kind})")
    if len(points) > POINT_PREVIEW:
        lines.append(f"...({len(points) - POINT_PREVIEW} more points)")
    lines.append("")


def _render_inspection(lines: List[str], inspection: Optional[IndividualInspection]) -> None:
    lines.append("### Individual inspection")
    if inspection is None:
        lines.append(NOT_AVAILABLE)
    else:
        lines.append(f"- Image: {inspection.file_name}")
        lines.append(f"- Predicted class: {inspection.predicted_class}")
        lines.append(f"- Confidence: {inspection.confidence * 100:.2f}%")
        lines.append(f"- Uncertainty score: {_fmt(inspection.uncertainty_score, 3)}")
        cam_state = "generated" if inspection.cam_image else NOT_AVAILABLE
        lines.append(f"- CAM ({inspection.cam_method}): {cam_state}")
    lines.append("")
