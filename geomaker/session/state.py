"""
Session State.

The single mutable object holding everything one user session knows:
configuration, loaded manifest, run status and progress, metrics, early
stopping tracker, synthesized results, the latest single-image inspection
and the user-declared domain hint.

Transitions are methods on the state; callers (scheduler and controller)
invoke them while holding the session lock. Readers receive deep copies
through ``snapshot()``.
"""

# =========================================================================== #
#                                Standard Imports                             #
# =========================================================================== #
import copy
from dataclasses import dataclass, field
from typing import Optional, Tuple

# =========================================================================== #
#                                Internal Imports                             #
# =========================================================================== #
from geomaker.core.config import RuntimeConfig, SessionConfig
from geomaker.data_handler.archive import ArchiveManifest
from geomaker.data_handler.identity import ClassIdentity, resolve_class_identity
from geomaker.evaluation.history import MetricsHistory
from geomaker.evaluation.inspection import IndividualInspection
from geomaker.evaluation.synthesizer import ResultsBundle
from geomaker.trainer.early_stopping import EarlyStoppingTracker
from geomaker.trainer.scheduler import RunStatus
from geomaker.trainer.simulator import EpochMetrics

IDLE_MESSAGE = "Waiting for training to start."


@dataclass
class TrainingProgress:
    current_epoch: int = 0
    total_epochs: int = 0
    status_message: str = IDLE_MESSAGE


@dataclass
class SessionState:
    config: SessionConfig = field(default_factory=SessionConfig)
    runtime: RuntimeConfig = field(default_factory=RuntimeConfig)
    manifest: Optional[ArchiveManifest] = None
    placeholder_classes: Tuple[str, ...] = ()
    status: RunStatus = RunStatus.IDLE
    progress: TrainingProgress = field(default_factory=TrainingProgress)
    metrics: MetricsHistory = field(default_factory=MetricsHistory)
    early_stopping: EarlyStoppingTracker = field(default_factory=EarlyStoppingTracker)
    results: Optional[ResultsBundle] = None
    run_classes: Tuple[str, ...] = ()
    inspection: Optional[IndividualInspection] = None
    domain_hint: Optional[str] = None

    # ==================== Derived Views ====================

    def class_identity(self) -> ClassIdentity:
        return resolve_class_identity(
            self.config,
            self.manifest,
            self.runtime.default_num_classes,
            self.placeholder_classes,
        )

    @property
    def results_available(self) -> bool:
        return self.results is not None

    @property
    def is_running(self) -> bool:
        return self.status is RunStatus.RUNNING

    def snapshot(self) -> "SessionState":
        return copy.deepcopy(self)

    # ==================== Run Transitions ====================

    def begin_run(self, class_names: Tuple[str, ...]) -> None:
        self.metrics.clear()
        self.early_stopping.reset(self.config.patience)
        self.results = None
        self.run_classes = tuple(class_names)
        self.progress = TrainingProgress(
            current_epoch=0,
            total_epochs=self.config.epochs,
            status_message="Starting training...",
        )
        self.status = RunStatus.RUNNING

    def record_epoch(self, record: EpochMetrics) -> bool:
        """Appends one epoch and updates tracker and progress; returns whether it improved."""
        if record.epoch <= self.progress.current_epoch:
            raise ValueError(
                f"Epoch {record.epoch} does not advance past {self.progress.current_epoch}."
            )
        self.metrics.append(record)
        improved = self.early_stopping.update(record.valid_loss)
        self.progress = TrainingProgress(
            current_epoch=record.epoch,
            total_epochs=self.progress.total_epochs,
            status_message=f"Epoch {record.epoch}/{self.progress.total_epochs}: training...",
        )
        return improved

    def finish_run(self, status: RunStatus, results: ResultsBundle, message: str) -> None:
        self.results = results
        self.status = status
        self.progress = TrainingProgress(
            current_epoch=self.progress.current_epoch,
            total_epochs=self.progress.total_epochs,
            status_message=message,
        )

    def clear_run(self, message: str = IDLE_MESSAGE) -> None:
        self.status = RunStatus.IDLE
        self.metrics.clear()
        self.early_stopping.reset()
        self.results = None
        self.run_classes = ()
        self.progress = TrainingProgress(status_message=message)

    # ==================== Inspection ====================

    def set_inspection(self, inspection: Optional[IndividualInspection]) -> None:
        self.inspection = inspection
        if self.results is not None:
            self.results = self.results.with_inspection(inspection)
