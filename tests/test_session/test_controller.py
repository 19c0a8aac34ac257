"""
Test Suite for the SessionController.

Tests archive upload side effects, class-count adjustment, configuration
validation with fine-tune correction, run lifecycle, inspection and
snapshot isolation.
"""

# Standard Imports
from unittest.mock import MagicMock

# Third-Party Imports
import pytest
from pydantic import ValidationError

# Internal Imports
from geomaker.core.config import MAX_NUM_CLASSES, AppConfig, RuntimeConfig, SessionConfig
from geomaker.core.exceptions import ImageReadError, InvalidConfigurationError
from geomaker.session import SessionController
from geomaker.trainer import RunStatus


# UPLOAD
@pytest.mark.integration
def test_upload_installs_manifest(controller, pets_zip):
    outcome = controller.upload_archive(pets_zip, "pets.zip")

    assert outcome.success
    assert outcome.class_names == ["cats", "dogs"]
    assert outcome.num_classes == 2
    snap = controller.snapshot()
    assert snap.manifest.class_names == ["cats", "dogs"]
    assert snap.config.num_classes == 2
    assert snap.class_identity().names == ("cats", "dogs")


@pytest.mark.unit
def test_upload_keeps_custom_count_without_fine_tune(controller, pets_zip):
    controller.update_config(fine_tune=False, num_classes=7)

    controller.upload_archive(pets_zip)

    assert controller.snapshot().config.num_classes == 7


@pytest.mark.unit
def test_upload_overwrites_default_count_without_fine_tune(controller, flowers_zip):
    controller.update_config(fine_tune=False)

    controller.upload_archive(flowers_zip)

    assert controller.snapshot().config.num_classes == 3


@pytest.mark.unit
def test_failed_upload_installs_default_placeholders(controller, pets_zip):
    controller.upload_archive(pets_zip)

    outcome = controller.upload_archive(b"not a zip", "broken.zip")

    assert not outcome.success
    assert "broken.zip" in outcome.message
    snap = controller.snapshot()
    assert snap.manifest is None
    assert snap.config.num_classes == 5
    assert snap.class_identity().names == tuple(f"Default Class {c}" for c in "ABCDE")


@pytest.mark.unit
def test_too_many_class_folders_fails_without_partial_commit(controller, pets_zip, make_zip, make_image):
    conversation = MagicMock()
    controller.attach_assistant(conversation)
    controller.upload_archive(pets_zip)
    image = make_image("PNG")
    wide = make_zip({f"class_{i:03d}/img.png": image for i in range(MAX_NUM_CLASSES + 1)})

    outcome = controller.upload_archive(wide, "wide.zip")

    assert not outcome.success
    assert "wide.zip" in outcome.message
    assert outcome.num_classes == 5
    snap = controller.snapshot()
    assert snap.manifest is None
    assert snap.config.num_classes == 5
    assert snap.class_identity().names == tuple(f"Default Class {c}" for c in "ABCDE")
    assert conversation.reset.call_count == 2


@pytest.mark.unit
def test_upload_with_encrypted_entry_succeeds(controller, make_zip, make_image, patch_entry):
    raw = make_zip({"cats/a.png": make_image("PNG"), "dogs/b.png": make_image("PNG")})
    raw = patch_entry(raw, "dogs/b.png", flag_bits=0x1)

    outcome = controller.upload_archive(raw, "locked.zip")

    assert outcome.success
    assert outcome.class_names == ["cats", "dogs"]
    snap = controller.snapshot()
    assert snap.manifest.image_count("dogs") == 1
    assert snap.manifest.samples_for("dogs") == []


@pytest.mark.unit
def test_upload_resets_run_and_conversation(controller, pets_zip, manual_timer, scripted):
    conversation = MagicMock()
    controller.attach_assistant(conversation)
    controller.upload_archive(pets_zip)
    controller.set_domain_hint("Pets")
    controller.start_training()
    manual_timer.fire()

    controller.upload_archive(pets_zip)

    snap = controller.snapshot()
    assert snap.status is RunStatus.IDLE
    assert len(snap.metrics) == 0
    assert snap.domain_hint is None
    assert not manual_timer.pending
    assert conversation.reset.call_count == 2


# CONFIGURATION
@pytest.mark.unit
def test_invalid_update_is_rejected_and_state_kept(controller):
    with pytest.raises(ValidationError):
        controller.update_config(epochs=0)

    assert controller.snapshot().config.epochs == 5


@pytest.mark.unit
def test_fine_tune_pins_class_count_to_archive(controller, pets_zip):
    controller.upload_archive(pets_zip)

    snap = controller.update_config(num_classes=9)

    assert snap.config.num_classes == 2


@pytest.mark.unit
def test_feature_extraction_accepts_any_count(controller, pets_zip):
    controller.upload_archive(pets_zip)

    snap = controller.update_config(fine_tune=False, num_classes=4)

    assert snap.config.num_classes == 4
    assert snap.class_identity().names == ("Class A", "Class B", "Class C", "Class D")


# TRAINING
@pytest.mark.unit
def test_start_without_archive_raises(controller):
    with pytest.raises(InvalidConfigurationError):
        controller.start_training()

    assert controller.snapshot().status is RunStatus.IDLE


@pytest.mark.integration
def test_timer_driven_run_to_completion(app_config, manual_timer, scripted, pets_zip):
    on_complete = MagicMock()
    controller = SessionController(
        app_config,
        timer=manual_timer,
        metrics_factory=scripted([1.0, 0.9, 0.8, 0.85, 0.86]),
        on_complete=on_complete,
    )
    controller.upload_archive(pets_zip)

    controller.start_training()
    while manual_timer.fire():
        pass

    snap = controller.snapshot()
    assert snap.status is RunStatus.COMPLETED
    assert snap.results_available
    assert snap.results.class_names == ("cats", "dogs")
    on_complete.assert_called_once_with(RunStatus.COMPLETED)


@pytest.mark.integration
def test_sync_run_and_cancel_noop(controller, pets_zip):
    controller.upload_archive(pets_zip)

    status = controller.run_training_sync()

    assert status.is_terminal
    assert controller.cancel_training() is False
    assert controller.snapshot().results is not None


@pytest.mark.unit
def test_cancel_mid_run(controller, pets_zip, manual_timer):
    controller.upload_archive(pets_zip)
    controller.start_training()
    manual_timer.fire()

    assert controller.cancel_training() is True
    snap = controller.snapshot()
    assert snap.status is RunStatus.IDLE
    assert snap.progress.status_message == "Training cancelled."


@pytest.mark.unit
def test_context_manager_cancels_active_run(app_config, manual_timer, pets_zip):
    with SessionController(app_config, timer=manual_timer) as controller:
        controller.upload_archive(pets_zip)
        controller.start_training()

    assert controller.snapshot().status is RunStatus.IDLE
    assert not manual_timer.pending


# SNAPSHOTS
@pytest.mark.unit
def test_snapshot_is_isolated_from_live_state(controller, pets_zip, manual_timer):
    controller.upload_archive(pets_zip)
    controller.start_training()
    manual_timer.fire()
    snap = controller.snapshot()

    manual_timer.fire()

    assert len(snap.metrics) == 1
    assert len(controller.snapshot().metrics) == 2


# INSPECTION
@pytest.mark.integration
def test_inspection_uses_effective_classes_and_mirrors_into_results(controller, pets_zip, png_bytes):
    controller.upload_archive(pets_zip)
    controller.run_training_sync()

    inspection = controller.inspect_image(png_bytes, "query.png")

    snap = controller.snapshot()
    assert inspection.predicted_class in ("cats", "dogs")
    assert snap.inspection == inspection
    assert snap.results.individual_inspection == inspection


@pytest.mark.unit
def test_inspection_from_path(controller, tmp_path, png_bytes):
    image_path = tmp_path / "query.png"
    image_path.write_bytes(png_bytes)

    inspection = controller.inspect_image(image_path)

    assert inspection.file_name == "query.png"
    assert inspection.predicted_class.startswith("Class ")


@pytest.mark.unit
def test_inspection_of_missing_path_raises_typed_error(controller, tmp_path):
    with pytest.raises(ImageReadError, match="missing.png"):
        controller.inspect_image(tmp_path / "missing.png")

    assert controller.snapshot().inspection is None


@pytest.mark.unit
def test_show_uncertainty_flag_propagates(pets_zip, png_bytes):
    cfg = AppConfig(
        session=SessionConfig(show_uncertainty=True),
        runtime=RuntimeConfig(seed=0),
    )
    controller = SessionController(cfg)

    assert controller.inspect_image(png_bytes, "q.png").uncertainty_score is not None
