"""
Test Suite for the Simulated Training Scheduler.

Drives runs tick by tick through a ManualTickTimer and scripted
validation losses to verify completion vs. early stopping, cancellation,
stale-tick rejection and single-shot result synthesis.
"""

# Standard Imports
from unittest.mock import MagicMock

# Third-Party Imports
import pytest

# Internal Imports
from geomaker.core.config import RuntimeConfig, SessionConfig
from geomaker.core.exceptions import InvalidConfigurationError
from geomaker.data_handler import ArchiveManifest
from geomaker.evaluation import synthesize_results
from geomaker.session.state import SessionState
from geomaker.trainer import ManualTickTimer, RunStatus, TrainingScheduler


def _state(epochs: int, patience: int, **session) -> SessionState:
    return SessionState(
        config=SessionConfig(epochs=epochs, patience=patience, **session),
        runtime=RuntimeConfig(tick_interval=0.0, seed=1),
        manifest=ArchiveManifest(
            archive_name="pets.zip",
            entries={"cats": ("cats/a.png",), "dogs": ("dogs/b.png",)},
        ),
    )


def _drain(timer: ManualTickTimer, limit: int = 100) -> int:
    fired = 0
    while fired < limit and timer.fire():
        fired += 1
    return fired


@pytest.fixture
def synthesizer():
    return MagicMock(side_effect=synthesize_results)


# TERMINATION
@pytest.mark.integration
def test_run_completes_when_patience_runs_out_on_last_epoch(manual_timer, scripted, synthesizer):
    """Three improving epochs, two flat ones, budget of five: completion wins."""
    state = _state(epochs=5, patience=2)
    scheduler = TrainingScheduler(
        timer=manual_timer,
        metrics_factory=scripted([1.0, 0.9, 0.8, 0.85, 0.86]),
        synthesizer=synthesizer,
    )

    scheduler.start(state)
    _drain(manual_timer)

    assert state.status is RunStatus.COMPLETED
    assert state.progress.current_epoch == 5
    assert state.metrics.epochs == [1, 2, 3, 4, 5]
    assert state.results is not None
    synthesizer.assert_called_once()


@pytest.mark.integration
def test_run_stops_early_after_patience_exhausted(manual_timer, scripted, synthesizer):
    state = _state(epochs=20, patience=2)
    scheduler = TrainingScheduler(
        timer=manual_timer,
        metrics_factory=scripted([1.0, 1.1, 1.2, 0.5]),
        synthesizer=synthesizer,
    )

    scheduler.start(state)
    _drain(manual_timer)

    assert state.status is RunStatus.EARLY_STOPPED
    assert state.progress.current_epoch == 3
    assert len(state.metrics) == 3
    assert "Early stopping at epoch 3" in state.progress.status_message
    assert not manual_timer.pending
    synthesizer.assert_called_once()


@pytest.mark.unit
def test_equal_loss_is_not_an_improvement(manual_timer, scripted):
    state = _state(epochs=10, patience=1)
    scheduler = TrainingScheduler(timer=manual_timer, metrics_factory=scripted([0.7, 0.7]))

    scheduler.start(state)
    _drain(manual_timer)

    assert state.status is RunStatus.EARLY_STOPPED
    assert state.progress.current_epoch == 2


@pytest.mark.integration
def test_run_to_completion_without_timer(scripted):
    state = _state(epochs=4, patience=10)
    scheduler = TrainingScheduler(metrics_factory=scripted([1.0, 0.9, 0.8, 0.7]))

    assert scheduler.run_to_completion(state) is RunStatus.COMPLETED
    assert state.metrics.epochs == [1, 2, 3, 4]
    assert state.results.class_names == ("cats", "dogs")


@pytest.mark.unit
def test_one_tick_pending_at_a_time(manual_timer, scripted):
    state = _state(epochs=5, patience=5)
    scheduler = TrainingScheduler(timer=manual_timer, metrics_factory=scripted([1.0, 0.9, 0.8, 0.7, 0.6]))

    scheduler.start(state)
    assert manual_timer.scheduled_count == 1
    assert state.progress.current_epoch == 0

    manual_timer.fire()
    assert manual_timer.scheduled_count == 2
    assert state.progress.current_epoch == 1
    assert state.status is RunStatus.RUNNING
    assert manual_timer.last_delay == 0.0


@pytest.mark.unit
def test_completion_callback_receives_terminal_status(manual_timer, scripted):
    state = _state(epochs=2, patience=5)
    on_complete = MagicMock()
    scheduler = TrainingScheduler(
        timer=manual_timer, metrics_factory=scripted([1.0, 0.9]), on_complete=on_complete
    )

    scheduler.start(state)
    _drain(manual_timer)

    on_complete.assert_called_once_with(RunStatus.COMPLETED)


# CANCELLATION & STALE TICKS
@pytest.mark.unit
def test_cancel_resets_run_state(manual_timer, scripted, synthesizer):
    state = _state(epochs=10, patience=5)
    scheduler = TrainingScheduler(timer=manual_timer, metrics_factory=scripted([1.0] * 10), synthesizer=synthesizer)

    scheduler.start(state)
    manual_timer.fire()
    manual_timer.fire()

    assert scheduler.cancel(state) is True
    assert state.status is RunStatus.IDLE
    assert len(state.metrics) == 0
    assert state.early_stopping.best_valid_loss is None
    assert state.results is None
    assert not manual_timer.pending
    synthesizer.assert_not_called()


@pytest.mark.unit
def test_cancel_when_idle_is_noop(manual_timer):
    state = _state(epochs=3, patience=1)

    assert TrainingScheduler(timer=manual_timer).cancel(state) is False


@pytest.mark.unit
def test_stale_tick_from_cancelled_run_is_dropped(manual_timer, scripted):
    state = _state(epochs=10, patience=5)
    scheduler = TrainingScheduler(timer=manual_timer, metrics_factory=scripted([1.0, 0.9, 0.8]))

    scheduler.start(state)
    stale = manual_timer.take()
    scheduler.cancel(state)
    scheduler.start(state)

    stale()

    assert state.progress.current_epoch == 0
    assert len(state.metrics) == 0
    assert manual_timer.pending


@pytest.mark.unit
def test_restart_begins_a_fresh_run(manual_timer, scripted):
    state = _state(epochs=2, patience=5)
    scheduler = TrainingScheduler(timer=manual_timer, metrics_factory=scripted([1.0, 0.9]))

    scheduler.start(state)
    _drain(manual_timer)
    first_generation = scheduler.generation

    scheduler.start(state)
    assert scheduler.generation > first_generation
    assert state.status is RunStatus.RUNNING
    assert state.results is None
    assert len(state.metrics) == 0


# PRECONDITIONS
@pytest.mark.unit
def test_start_without_archive_fails(manual_timer):
    state = _state(epochs=3, patience=1)
    state.manifest = None

    with pytest.raises(InvalidConfigurationError, match="archive"):
        TrainingScheduler(timer=manual_timer).start(state)
    assert state.status is RunStatus.IDLE
    assert not manual_timer.pending


@pytest.mark.unit
def test_start_with_zero_classes_fails(manual_timer):
    state = _state(epochs=3, patience=1, fine_tune=False, num_classes=0)
    state.runtime = RuntimeConfig(default_num_classes=0)

    with pytest.raises(InvalidConfigurationError, match="zero"):
        TrainingScheduler(timer=manual_timer).start(state)


@pytest.mark.integration
def test_run_classes_follow_identity_rule(manual_timer, scripted):
    """Feature extraction keys the results on the configured placeholder classes."""
    state = _state(epochs=1, patience=1, fine_tune=False, num_classes=3)
    scheduler = TrainingScheduler(timer=manual_timer, metrics_factory=scripted([1.0]))

    scheduler.start(state)
    _drain(manual_timer)

    expected = ("Class A", "Class B", "Class C")
    assert state.run_classes == expected
    assert state.results.class_names == expected
    assert state.results.confusion_matrix.labels == expected
    assert [m.class_name for m in state.results.classification_report.per_class] == list(expected)
