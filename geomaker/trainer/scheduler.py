"""
Simulated Training Scheduler.

Discrete-tick state machine driving one simulated run at a time:

    IDLE → RUNNING → {COMPLETED | EARLY_STOPPED} → (next start) RUNNING

Every tick runs under the session lock, receives the session state
explicitly and either schedules exactly one follow-up tick or terminates
the run. Termination cancels the timer, synthesizes the results bundle
once and marks results available. Ticks belonging to a cancelled or
superseded run are recognized by their generation number and dropped.
"""

# =========================================================================== #
#                                Standard Imports                             #
# =========================================================================== #
import logging
import threading
from enum import Enum
from functools import partial
from typing import TYPE_CHECKING, Callable, Optional, Tuple

# =========================================================================== #
#                                Third-Party Imports                          #
# =========================================================================== #
import numpy as np

# =========================================================================== #
#                                Internal Imports                             #
# =========================================================================== #
from geomaker.core.environment import make_rng
from geomaker.core.exceptions import InvalidConfigurationError
from geomaker.core.logger import Reporter, ReporterProtocol
from geomaker.core.paths import LOGGER_NAME
from geomaker.evaluation.synthesizer import synthesize_results

from .simulator import MetricsGeneratorProtocol, SyntheticMetricsGenerator
from .timers import ThreadingTickTimer, TickTimerProtocol

if TYPE_CHECKING:  # pragma: no cover
    from geomaker.session.state import SessionState

logger = logging.getLogger(LOGGER_NAME)

MetricsFactory = Callable[[np.random.Generator], MetricsGeneratorProtocol]
CompletionCallback = Callable[["RunStatus"], None]


class RunStatus(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    EARLY_STOPPED = "early_stopped"

    @property
    def is_terminal(self) -> bool:
        return self in (RunStatus.COMPLETED, RunStatus.EARLY_STOPPED)


class TrainingScheduler:
    """
    Owns the tick timer and the run generation counter of one session.

    Args:
        lock: Re-entrant lock shared with every other session mutation.
        timer: Tick timer (defaults to a ``threading.Timer`` implementation).
        metrics_factory: Builds the per-run metrics source from the run's RNG.
        synthesizer: Result synthesis entry point.
        reporter: Formats run header and summary log blocks.
        on_complete: Called with the terminal status after the lock is released.
    """

    def __init__(
        self,
        lock: Optional[threading.RLock] = None,
        timer: Optional[TickTimerProtocol] = None,
        metrics_factory: Optional[MetricsFactory] = None,
        synthesizer: Callable = synthesize_results,
        reporter: Optional[ReporterProtocol] = None,
        on_complete: Optional[CompletionCallback] = None,
    ):
        self._lock = lock if lock is not None else threading.RLock()
        self._timer = timer if timer is not None else ThreadingTickTimer()
        self._metrics_factory = metrics_factory or SyntheticMetricsGenerator
        self._synthesizer = synthesizer
        self._reporter = reporter or Reporter()
        self.on_complete = on_complete

        self._generation = 0
        self._rng: Optional[np.random.Generator] = None
        self._generator: Optional[MetricsGeneratorProtocol] = None

    @property
    def generation(self) -> int:
        return self._generation

    # ==================== Public Transitions ====================

    def start(self, state: "SessionState") -> None:
        """
        Starts a timer-driven run.

        Raises:
            InvalidConfigurationError: No archive loaded or no effective class.
        """
        with self._lock:
            class_names = self._validate(state)
            self._prepare(state, class_names)
            self._schedule_next(state, self._generation)

    def run_to_completion(self, state: "SessionState") -> RunStatus:
        """Runs every tick synchronously, without the timer, and returns the final status."""
        with self._lock:
            class_names = self._validate(state)
            self._prepare(state, class_names)
            generation = self._generation

        while True:
            with self._lock:
                if generation != self._generation:
                    return state.status
                status = self._advance(state)
                if status is RunStatus.RUNNING:
                    continue
                self._finish(state, status)
            self._notify(status)
            return status

    def cancel(self, state: "SessionState") -> bool:
        """
        Stops the active run and clears its metrics, tracker and results.

        Returns:
            True if a running run was cancelled.
        """
        with self._lock:
            self._invalidate_pending()
            if not state.is_running:
                return False
            state.clear_run("Training cancelled.")
            logger.info("Training run cancelled.")
            return True

    # ==================== Tick Handling ====================

    def _on_tick(self, state: "SessionState", generation: int) -> None:
        with self._lock:
            if generation != self._generation or not state.is_running:
                logger.debug(f"Discarding stale tick of run generation {generation}.")
                return

            status = self._advance(state)
            if status is RunStatus.RUNNING:
                self._schedule_next(state, generation)
                return
            self._finish(state, status)

        self._notify(status)

    def _advance(self, state: "SessionState") -> RunStatus:
        epoch = state.progress.current_epoch + 1
        total = state.progress.total_epochs

        record = self._generator.generate(epoch)
        state.record_epoch(record)

        logger.info(
            f"Epoch {epoch:02d}/{total} | "
            f"Loss: [T: {record.train_loss:.4f} | V: {record.valid_loss:.4f}] | "
            f"Acc: [T: {record.train_acc:.4f} | V: {record.valid_acc:.4f}] | "
            f"Patience: {state.early_stopping.remaining_patience}"
        )

        # Reaching the epoch budget on the same tick patience runs out is a completion
        if epoch >= total:
            return RunStatus.COMPLETED
        if state.early_stopping.patience_exhausted:
            logger.warning(f"Early stopping triggered at epoch {epoch}.")
            return RunStatus.EARLY_STOPPED
        return RunStatus.RUNNING

    def _finish(self, state: "SessionState", status: RunStatus) -> None:
        self._timer.cancel()

        last = state.metrics.last
        samples = state.manifest.samples if state.manifest is not None else ()
        results = self._synthesizer(
            class_names=state.run_classes,
            final_valid_acc=last.valid_acc if last else 0.0,
            samples=samples,
            inspection=state.inspection,
            runtime=state.runtime,
            rng=self._rng,
        )

        epoch = state.progress.current_epoch
        if status is RunStatus.EARLY_STOPPED:
            message = (
                f"Early stopping at epoch {epoch}: validation loss did not improve "
                f"for {state.early_stopping.epochs_without_improvement} epochs."
            )
        else:
            message = f"Training completed after {epoch} epochs."

        state.finish_run(status, results, message)
        self._reporter.log_run_summary(
            logger,
            status.value,
            epoch,
            state.early_stopping.best_valid_loss,
            last.valid_acc if last else None,
        )

    # ==================== Internals ====================

    def _validate(self, state: "SessionState") -> Tuple[str, ...]:
        if state.manifest is None:
            raise InvalidConfigurationError(
                "No dataset archive loaded: upload an archive before starting training."
            )
        identity = state.class_identity()
        if identity.count <= 0:
            raise InvalidConfigurationError(
                "The effective number of classes is zero: configure at least one class."
            )
        return identity.names

    def _prepare(self, state: "SessionState", class_names: Tuple[str, ...]) -> None:
        # Invalidate the previous run before any of its state is reset
        self._invalidate_pending()
        state.begin_run(class_names)

        self._rng = make_rng(state.runtime.seed)
        self._generator = self._metrics_factory(self._rng)

        archive_name = state.manifest.archive_name if state.manifest else None
        self._reporter.log_run_header(logger, state.config, class_names, archive_name)

    def _invalidate_pending(self) -> None:
        self._generation += 1
        self._timer.cancel()

    def _schedule_next(self, state: "SessionState", generation: int) -> None:
        self._timer.schedule(
            state.runtime.tick_interval, partial(self._on_tick, state, generation)
        )

    def _notify(self, status: RunStatus) -> None:
        if self.on_complete is not None:
            self.on_complete(status)
