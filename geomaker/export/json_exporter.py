"""
JSON Session Export.

Full snapshot of one session in a single document: configuration with the
effective class list, metrics series, every result artifact (embedded
images included) and export metadata.
"""

# =========================================================================== #
#                                Standard Imports                             #
# =========================================================================== #
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Optional

# =========================================================================== #
#                                Internal Imports                             #
# =========================================================================== #
from geomaker.core.io import dump_json, write_text_atomic
from geomaker.core.paths import LOGGER_NAME
from geomaker.evaluation.serialization import (
    augmented_to_list,
    confusion_to_dict,
    curve_to_dict,
    errors_to_list,
    inspection_to_dict,
    projections_to_dict,
    report_to_dict,
)

if TYPE_CHECKING:  # pragma: no cover
    from geomaker.session.state import SessionState

logger = logging.getLogger(LOGGER_NAME)


def build_export_document(state: "SessionState", exported_at: datetime) -> Dict[str, Any]:
    """
    Assembles the export document from a session snapshot.

    Sections without data are ``None``; ``exported_at`` is the only
    time-dependent field.
    """
    identity = state.class_identity()
    results = state.results

    configuration = state.config.model_dump(mode="json")
    configuration["effective_num_classes"] = identity.count
    configuration["effective_class_names"] = list(identity.names)

    document: Dict[str, Any] = {
        "configuration": configuration,
        "training_metrics": state.metrics.columns() if len(state.metrics) else None,
        "evaluation_report": None,
        "confusion_matrix": None,
        "roc_curve": None,
        "pr_curve": None,
        "error_analysis": None,
        "cluster_data": None,
        "augmented_embeddings": None,
        "individual_inspection": inspection_to_dict(state.inspection, include_image=True),
        "metadata": {
            "exported_at": exported_at.isoformat(),
            "archive_file_name": state.manifest.archive_name if state.manifest else None,
            "domain_hint": state.domain_hint,
            "run_status": state.status.value,
        },
    }

    if results is not None:
        document.update(
            {
                "evaluation_report": report_to_dict(results.classification_report),
                "confusion_matrix": confusion_to_dict(results.confusion_matrix),
                "roc_curve": curve_to_dict(results.roc_curve),
                "pr_curve": curve_to_dict(results.pr_curve),
                "error_analysis": errors_to_list(results.error_samples, include_images=True),
                "cluster_data": projections_to_dict(results.cluster_projections, results.class_names),
                "augmented_embeddings": augmented_to_list(results.augmented_embeddings),
            }
        )
    return document


def export_json(state: "SessionState", path: Path, now: Optional[datetime] = None) -> Path:
    """Writes the session export document to ``path``."""
    exported_at = now or datetime.now(timezone.utc)
    write_text_atomic(dump_json(build_export_document(state, exported_at)), Path(path))
    logger.info(f"Session exported to {Path(path).name}")
    return Path(path)
