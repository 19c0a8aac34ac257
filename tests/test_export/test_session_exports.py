"""
Test Suite for Session Exporters.

Tests the metrics CSV header and row order, the titled results CSV, the
JSON export document, labelled configuration persistence and the Excel
workbook, plus the missing-results guard shared by every exporter.
"""

# Standard Imports
import json
from datetime import date, datetime, timezone

# Third-Party Imports
import pytest
from openpyxl import load_workbook

# Internal Imports
from geomaker.core.config import SessionConfig
from geomaker.core.exceptions import ResultsUnavailableError
from geomaker.evaluation import MetricsHistory
from geomaker.export import (
    build_export_document,
    config_file_name,
    export_config,
    export_excel,
    export_metrics_csv,
    export_results_csv,
    parameter_entries,
    render_metrics_csv,
    render_results_csv,
)
from geomaker.trainer import EpochMetrics


@pytest.fixture
def finished(controller, pets_zip, png_bytes):
    """Controller with one completed run and an inspection."""
    controller.upload_archive(pets_zip, "pets.zip")
    controller.run_training_sync()
    controller.inspect_image(png_bytes, "query.png")
    return controller


# METRICS CSV
@pytest.mark.unit
def test_metrics_csv_header_and_rows():
    history = MetricsHistory()
    history.append(EpochMetrics(1, 0.91234, 1.0, 0.5, 0.45))
    history.append(EpochMetrics(2, 0.8, 0.9, 0.6, 0.55))

    lines = render_metrics_csv(history).splitlines()

    assert lines[0] == "epoch,train_loss,valid_loss,train_acc,valid_acc"
    assert lines[1] == "1,0.9123,1.0000,0.5000,0.4500"
    assert len(lines) == 3


@pytest.mark.unit
def test_metrics_csv_requires_records(tmp_path):
    with pytest.raises(ResultsUnavailableError):
        export_metrics_csv(MetricsHistory(), tmp_path / "m.csv")


# RESULTS CSV
@pytest.mark.integration
def test_results_csv_sections(finished):
    snap = finished.snapshot()

    rendered = render_results_csv(snap.results, snap.metrics)

    for title in (
        "# Classification Report",
        "# Confusion Matrix (row-normalized)",
        "# Training Metrics",
        "# ROC Curve",
        "# PR Curve",
        "# Error Samples",
        "# Cluster Metrics",
    ):
        assert title in rendered
    assert "macro avg" in rendered and "weighted avg" in rendered
    assert "\ncats," in rendered and "\ndogs," in rendered
    assert "epoch,train_loss,valid_loss,train_acc,valid_acc" in rendered


@pytest.mark.unit
def test_results_csv_requires_results(tmp_path):
    with pytest.raises(ResultsUnavailableError):
        export_results_csv(None, MetricsHistory(), tmp_path / "r.csv")


# JSON
@pytest.mark.integration
def test_json_document_sections(finished):
    snap = finished.snapshot()
    exported_at = datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc)

    document = build_export_document(snap, exported_at)

    assert document["configuration"]["effective_class_names"] == ["cats", "dogs"]
    assert document["evaluation_report"]["class_names"] == ["cats", "dogs"]
    assert document["confusion_matrix"]["labels"] == ["cats", "dogs"]
    assert len(document["training_metrics"]["epoch"]) == len(snap.metrics)
    assert document["individual_inspection"]["file_name"] == "query.png"
    assert document["individual_inspection"]["cam_image"].startswith("data:image/png")
    assert document["metadata"] == {
        "exported_at": "2026-01-02T03:04:05+00:00",
        "archive_file_name": "pets.zip",
        "domain_hint": None,
        "run_status": snap.status.value,
    }
    for err in document["error_analysis"]:
        assert "image_data" in err


@pytest.mark.unit
def test_json_document_before_any_run(controller):
    document = build_export_document(controller.snapshot(), datetime(2026, 1, 1))

    assert document["evaluation_report"] is None
    assert document["training_metrics"] is None
    assert document["metadata"]["run_status"] == "idle"


@pytest.mark.integration
def test_json_export_is_stable_apart_from_timestamp(finished, tmp_path):
    moment = datetime(2026, 5, 6, tzinfo=timezone.utc)

    first = finished.export_json(tmp_path / "a", now=moment).read_text(encoding="utf-8")
    second = finished.export_json(tmp_path / "b", now=moment).read_text(encoding="utf-8")

    assert first == second
    assert json.loads(first)["metadata"]["exported_at"] == moment.isoformat()


# CONFIG
@pytest.mark.unit
def test_parameter_entries_use_labels_and_yes_no():
    entries = parameter_entries(SessionConfig(fine_tune=True, use_weighted_loss=False), 3)
    by_label = {e["parameter"]: e["value"] for e in entries}

    assert entries[0] == {"parameter": "Model", "value": "resnet50"}
    assert by_label["Fine-Tuning"] == "Yes"
    assert by_label["Weighted Loss"] == "No"
    assert by_label["Number of Classes"] == "3"
    assert all(isinstance(e["value"], str) for e in entries)


@pytest.mark.unit
def test_export_config_file(tmp_path):
    path = export_config(SessionConfig(model_name="vit_b16"), tmp_path, 4, on=date(2026, 3, 1))

    assert path.name == "config_vit_b16_run_2026-03-01.json"
    assert path.name == config_file_name(SessionConfig(model_name="vit_b16"), date(2026, 3, 1))
    entries = json.loads(path.read_text(encoding="utf-8"))
    assert {"parameter": "Number of Classes", "value": "4"} in entries


# EXCEL
@pytest.mark.integration
def test_excel_report_sheets(finished, tmp_path):
    snap = finished.snapshot()

    path = export_excel(snap.results, snap.metrics, tmp_path / "report.xlsx")

    workbook = load_workbook(path)
    assert workbook.sheetnames == ["Report", "Confusion Matrix", "Training Metrics"]
    header = [c.value for c in workbook["Report"][1]]
    assert header == ["class", "precision", "recall", "specificity", "f1_score", "support"]
    assert workbook["Report"]["A1"].fill.start_color.rgb.endswith("D7E4BC")


@pytest.mark.unit
def test_excel_requires_results(tmp_path):
    with pytest.raises(ResultsUnavailableError):
        export_excel(None, None, tmp_path / "report.xlsx")


# CONTROLLER EXPORTS
@pytest.mark.integration
def test_controller_writes_every_artifact(finished, tmp_path):
    paths = [
        finished.export_results_csv(tmp_path),
        finished.export_metrics_csv(tmp_path),
        finished.export_json(tmp_path),
        finished.export_config(tmp_path),
        finished.export_excel(tmp_path),
    ]

    assert all(p.exists() and p.parent == tmp_path for p in paths)
    assert paths[0].name.startswith("results_resnet50_")
    assert paths[1].name.startswith("training_metrics_resnet50_")
    assert paths[2].name.startswith("all_results_resnet50_")


@pytest.mark.unit
def test_controller_export_before_run_raises(controller, tmp_path):
    with pytest.raises(ResultsUnavailableError):
        controller.export_results_csv(tmp_path)


@pytest.mark.unit
def test_controller_export_name_follows_exported_snapshot(finished, tmp_path, monkeypatch):
    """File name and content come from the same snapshot even if the live config moves on."""
    snap = finished.snapshot()
    snap.config = snap.config.with_updates(model_name="vit_b16")
    monkeypatch.setattr(finished, "snapshot", lambda: snap)

    path = finished.export_json(tmp_path)

    assert path.name == f"all_results_vit_b16_{date.today().isoformat()}.json"
    assert finished._state.config.model_name == "resnet50"
