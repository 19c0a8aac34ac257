"""
Session Lifecycle Controller.

SessionController is the single owner of a SessionState. Every mutation
(archive upload, configuration change, run start/cancel, image
inspection) happens here or in the scheduler, always under one shared
re-entrant lock. Readers get deep-copied snapshots, so exports and the
session summary always observe one consistent state.

Typical Usage:
    >>> with SessionController(AppConfig()) as session:
    ...     outcome = session.upload_archive(Path("flowers.zip"))
    ...     session.run_training_sync()
    ...     session.export_json(Path("./exports"))
"""

# =========================================================================== #
#                                Standard Imports                             #
# =========================================================================== #
import logging
import threading
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, List, Optional, TypeVar, Union

# =========================================================================== #
#                                Internal Imports                             #
# =========================================================================== #
from geomaker.core.config import AppConfig
from geomaker.core.config.types import MAX_NUM_CLASSES
from geomaker.core.environment import make_rng
from geomaker.core.exceptions import ArchiveError, ImageReadError
from geomaker.core.logger import Reporter, ReporterProtocol
from geomaker.core.paths import LOGGER_NAME
from geomaker.data_handler.archive import ArchiveManifest, ingest_archive
from geomaker.data_handler.identity import SOURCE_ARCHIVE, placeholder_names
from geomaker.evaluation.inspection import IndividualInspection, simulate_inspection
from geomaker.evaluation.synthesizer import synthesize_results
from geomaker.export import (
    export_config as _export_config,
    export_excel as _export_excel,
    export_json as _export_json,
    export_metrics_csv as _export_metrics_csv,
    export_results_csv as _export_results_csv,
)
from geomaker.trainer.scheduler import CompletionCallback, MetricsFactory, RunStatus, TrainingScheduler
from geomaker.trainer.timers import TickTimerProtocol

from .context import SessionContext, context_from_state
from .state import SessionState

if TYPE_CHECKING:  # pragma: no cover
    from geomaker.assistant.conversation import AssistantConversation, ChatMessage

logger = logging.getLogger(LOGGER_NAME)

T = TypeVar("T")

# Configured class counts that an upload is allowed to overwrite without fine-tuning
_ADJUSTABLE_CLASS_COUNTS = (0, 2)


def _resolve(value: Optional[T], default_factory: Callable[[], T]) -> T:
    return value if value is not None else default_factory()


@dataclass(frozen=True)
class UploadOutcome:
    """User-facing result of one archive upload."""

    success: bool
    message: str
    class_names: List[str] = field(default_factory=list)
    num_classes: int = 0
    sample_count: int = 0
    configured_num_classes: int = 0


class SessionController:
    """
    Owns one session and exposes its transitions.

    Args:
        app_config: Aggregated configuration (defaults to AppConfig()).
        timer: Tick timer for timer-driven runs.
        metrics_factory: Per-run metrics source factory.
        reporter: Log block formatter.
        synthesizer: Result synthesis entry point.
        on_complete: Called with the terminal status of every run.
    """

    def __init__(
        self,
        app_config: Optional[AppConfig] = None,
        timer: Optional[TickTimerProtocol] = None,
        metrics_factory: Optional[MetricsFactory] = None,
        reporter: Optional[ReporterProtocol] = None,
        synthesizer: Optional[Callable] = None,
        on_complete: Optional[CompletionCallback] = None,
    ):
        self.app_config = _resolve(app_config, AppConfig)
        self.reporter = _resolve(reporter, Reporter)

        self._lock = threading.RLock()
        self._state = SessionState(
            config=self.app_config.session,
            runtime=self.app_config.runtime,
        )
        self.scheduler = TrainingScheduler(
            lock=self._lock,
            timer=timer,
            metrics_factory=metrics_factory,
            synthesizer=_resolve(synthesizer, lambda: synthesize_results),
            reporter=self.reporter,
            on_complete=on_complete,
        )
        self._inspection_rng = make_rng(self.app_config.runtime.seed)
        self.conversation: Optional["AssistantConversation"] = None

    # ==================== Context Manager ====================

    def __enter__(self) -> "SessionController":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.cancel_training()
        return False

    # ==================== Read Access ====================

    def snapshot(self) -> SessionState:
        with self._lock:
            return self._state.snapshot()

    def build_context(self) -> SessionContext:
        return context_from_state(self.snapshot())

    # ==================== Archive ====================

    def upload_archive(
        self, data: Union[bytes, Path, str], file_name: Optional[str] = None
    ) -> UploadOutcome:
        """
        Ingests an archive and installs it as the session dataset.

        Failures never raise: they install the default placeholder class set
        and are reported through the returned outcome.
        """
        runtime = self.app_config.runtime
        try:
            manifest: Optional[ArchiveManifest] = ingest_archive(
                data,
                file_name,
                max_per_class=runtime.max_samples_per_class,
                max_total=runtime.max_total_samples,
                max_classes=MAX_NUM_CLASSES,
            )
            error: Optional[ArchiveError] = None
        except ArchiveError as e:
            logger.warning(f"Archive upload failed: {e}")
            manifest, error = None, e

        with self._lock:
            state = self._state
            default_n = runtime.default_num_classes
            if error is not None:
                new_config = state.config.with_updates(num_classes=default_n)
            else:
                new_config = self._adjust_class_count(state.config, manifest.num_classes)

            self.scheduler.cancel(state)
            state.clear_run()
            state.domain_hint = None
            state.manifest = manifest
            state.config = new_config

            if error is not None:
                state.placeholder_classes = tuple(placeholder_names(default_n, "Default Class"))
                outcome = UploadOutcome(
                    success=False,
                    message=str(error),
                    class_names=list(state.placeholder_classes),
                    num_classes=default_n,
                    configured_num_classes=default_n,
                )
            else:
                state.placeholder_classes = ()
                self.reporter.log_ingestion(
                    logger,
                    manifest.archive_name,
                    [(name, manifest.image_count(name)) for name in manifest.class_names],
                    len(manifest.samples),
                )
                outcome = UploadOutcome(
                    success=True,
                    message=(
                        f"Loaded {manifest.num_classes} classes from '{manifest.archive_name}'."
                    ),
                    class_names=manifest.class_names,
                    num_classes=manifest.num_classes,
                    sample_count=len(manifest.samples),
                    configured_num_classes=state.config.num_classes,
                )

        if self.conversation is not None:
            self.conversation.reset()
        return outcome

    def _adjust_class_count(self, config, detected: int):
        default_n = self.app_config.runtime.default_num_classes
        if config.fine_tune or config.num_classes in (default_n, *_ADJUSTABLE_CLASS_COUNTS):
            return config.with_updates(num_classes=detected)
        return config

    # ==================== Configuration ====================

    def update_config(self, **changes: Any) -> SessionState:
        """
        Applies validated configuration changes.

        With fine-tuning active and an archive loaded, the class count is
        pinned to the archive's and a mismatching request is corrected.

        Raises:
            pydantic.ValidationError: The merged configuration is invalid.
        """
        with self._lock:
            state = self._state
            new_config = state.config.with_updates(**changes)

            manifest = state.manifest
            if new_config.fine_tune and manifest is not None:
                if new_config.num_classes != manifest.num_classes:
                    logger.warning(
                        f"Fine-tuning is active: class count {new_config.num_classes} "
                        f"corrected to the archive's {manifest.num_classes} classes."
                    )
                    new_config = new_config.with_updates(num_classes=manifest.num_classes)

            state.config = new_config
            return state.snapshot()

    # ==================== Training ====================

    def start_training(self) -> None:
        """Starts a timer-driven run (raises InvalidConfigurationError on bad preconditions)."""
        with self._lock:
            self._warn_if_overridden()
            self.scheduler.start(self._state)

    def run_training_sync(self) -> RunStatus:
        """Runs a full simulation in the calling thread."""
        with self._lock:
            self._warn_if_overridden()
        return self.scheduler.run_to_completion(self._state)

    def cancel_training(self) -> bool:
        return self.scheduler.cancel(self._state)

    def _warn_if_overridden(self) -> None:
        state = self._state
        identity = state.class_identity()
        if identity.source == SOURCE_ARCHIVE and state.config.num_classes != identity.count:
            logger.warning(
                f"Fine-tuning is active: using the archive's {identity.count} classes "
                f"instead of the configured {state.config.num_classes}."
            )

    # ==================== Inspection ====================

    def inspect_image(self, data: Union[bytes, Path, str], file_name: Optional[str] = None) -> IndividualInspection:
        """
        Simulates a prediction for one image over the effective classes.

        Raises:
            ImageReadError: A path was given and the file could not be read.
        """
        if isinstance(data, (bytes, bytearray)):
            raw, name = bytes(data), file_name or "image"
        else:
            path = Path(data)
            try:
                raw = path.read_bytes()
            except OSError as e:
                raise ImageReadError(f"Could not read image at {path}: {e}") from e
            name = file_name or path.name

        with self._lock:
            state = self._state
            inspection = simulate_inspection(
                raw,
                name,
                state.class_identity().names,
                state.config.cam_method,
                state.config.show_uncertainty,
                self._inspection_rng,
            )
            state.set_inspection(inspection)
        logger.info(
            f"Inspected '{name}': {inspection.predicted_class} ({inspection.confidence:.1%})"
        )
        return inspection

    # ==================== Assistant ====================

    def attach_assistant(self, conversation: "AssistantConversation") -> None:
        conversation.on_domain_hint = self.set_domain_hint
        with self._lock:
            if self._state.domain_hint and not conversation.domain_hint:
                conversation.domain_hint = self._state.domain_hint
        self.conversation = conversation

    def set_domain_hint(self, hint: Optional[str]) -> None:
        with self._lock:
            self._state.domain_hint = hint

    def refresh_assistant(self, force_refresh: bool = True) -> None:
        """Reopens the assistant session on the latest context."""
        if self.conversation is None:
            raise RuntimeError("No assistant attached to this session.")
        self.conversation.initialize(self.build_context(), force_refresh=force_refresh)

    def chat(self, text: str) -> "ChatMessage":
        """Sends a user message to the attached assistant, grounded on the current context."""
        if self.conversation is None:
            raise RuntimeError("No assistant attached to this session.")
        return self.conversation.send(text, self.build_context)

    # ==================== Exports ====================

    @staticmethod
    def _export_name(snap: SessionState, stem: str, suffix: str) -> str:
        return f"{stem}_{snap.config.model_name}_{date.today().isoformat()}.{suffix}"

    def _export_dir(self, output_dir: Optional[Path]) -> Path:
        return Path(output_dir) if output_dir is not None else self.app_config.telemetry.export_dir

    def export_results_csv(self, output_dir: Optional[Path] = None) -> Path:
        snap = self.snapshot()
        path = self._export_dir(output_dir) / self._export_name(snap, "results", "csv")
        return _export_results_csv(snap.results, snap.metrics, path)

    def export_metrics_csv(self, output_dir: Optional[Path] = None) -> Path:
        snap = self.snapshot()
        path = self._export_dir(output_dir) / self._export_name(snap, "training_metrics", "csv")
        return _export_metrics_csv(snap.metrics, path)

    def export_json(self, output_dir: Optional[Path] = None, now: Optional[datetime] = None) -> Path:
        snap = self.snapshot()
        path = self._export_dir(output_dir) / self._export_name(snap, "all_results", "json")
        return _export_json(snap, path, now or datetime.now(timezone.utc))

    def export_config(self, output_dir: Optional[Path] = None) -> Path:
        snap = self.snapshot()
        return _export_config(snap.config, self._export_dir(output_dir), snap.class_identity().count)

    def export_excel(self, output_dir: Optional[Path] = None) -> Path:
        snap = self.snapshot()
        path = self._export_dir(output_dir) / self._export_name(snap, "report", "xlsx")
        return _export_excel(snap.results, snap.metrics, path)
