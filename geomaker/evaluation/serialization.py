"""
Result Bundle Serialization.

Plain ``dict``/``list`` projections of the evaluation artifacts, shared by
the session summary and the JSON exporter. Embedded image data is only
included on request since it dwarfs every other field.
"""

from typing import Any, Dict, List, Optional, Sequence

from .clustering import AugmentedPoint, ClusterProjection
from .curves import CurveData
from .inspection import IndividualInspection
from .metrics import AggregateMetrics, ClassificationReport, ConfusionMatrix
from .synthesizer import ErrorSample


def _aggregate_to_dict(agg: AggregateMetrics) -> Dict[str, Any]:
    return {
        "precision": agg.precision,
        "recall": agg.recall,
        "specificity": agg.specificity,
        "f1_score": agg.f1_score,
        "support": agg.support,
    }


def report_to_dict(report: ClassificationReport) -> Dict[str, Any]:
    return {
        "class_names": list(report.class_names),
        "per_class": [
            {
                "class_name": row.class_name,
                "precision": row.precision,
                "recall": row.recall,
                "specificity": row.specificity,
                "f1_score": row.f1_score,
                "support": row.support,
            }
            for row in report.per_class
        ],
        "macro_avg": _aggregate_to_dict(report.macro_avg),
        "weighted_avg": _aggregate_to_dict(report.weighted_avg),
        "accuracy": report.accuracy,
        "auc_pr": report.auc_pr,
    }


def confusion_to_dict(cm: ConfusionMatrix) -> Dict[str, Any]:
    return {
        "labels": list(cm.labels),
        "matrix": [list(row) for row in cm.matrix],
        "counts": [list(row) for row in cm.counts],
    }


def curve_to_dict(curve: CurveData) -> Dict[str, Any]:
    return {
        "x_label": curve.x_label,
        "y_label": curve.y_label,
        "auc": curve.auc,
        "points": [{"x": p.x, "y": p.y, "threshold": p.threshold} for p in curve.points],
    }


def projections_to_dict(
    projections: Sequence[ClusterProjection], class_names: Sequence[str]
) -> Dict[str, Any]:
    return {
        "class_names": list(class_names),
        "methods": {
            proj.method: {
                "ari": proj.ari,
                "nmi": proj.nmi,
                "points": [
                    {"x": p.x, "y": p.y, "cluster": p.cluster, "label": p.label}
                    for p in proj.points
                ],
            }
            for proj in projections
        },
    }


def augmented_to_list(points: Sequence[AugmentedPoint]) -> List[Dict[str, Any]]:
    return [
        {
            "x": p.x,
            "y": p.y,
            "label": p.label,
            "is_augmented": p.is_augmented,
            "source_index": p.source_index,
        }
        for p in points
    ]


def errors_to_list(errors: Sequence[ErrorSample], include_images: bool) -> List[Dict[str, Any]]:
    rows = []
    for err in errors:
        row: Dict[str, Any] = {
            "sample_id": err.sample_id,
            "true_class": err.true_class,
            "predicted_class": err.predicted_class,
            "confidence": err.confidence,
            "file_name": err.file_name,
            "image_source": "placeholder" if err.is_placeholder else "archive_sample",
        }
        if include_images:
            row["image_data"] = err.image_data
        rows.append(row)
    return rows


def inspection_to_dict(
    inspection: Optional[IndividualInspection], include_image: bool
) -> Optional[Dict[str, Any]]:
    if inspection is None:
        return None
    data: Dict[str, Any] = {
        "file_name": inspection.file_name,
        "predicted_class": inspection.predicted_class,
        "confidence": inspection.confidence,
        "uncertainty_score": inspection.uncertainty_score,
        "cam_method": inspection.cam_method,
        "cam_available": inspection.cam_image is not None,
    }
    if include_image:
        data["cam_image"] = inspection.cam_image
    return data
