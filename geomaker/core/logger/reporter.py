"""
Session Reporting Engine.

Formatted log blocks for the session lifecycle: the configuration applied
when a run starts, archive ingestion results and the run summary once the
scheduler reaches a terminal state.
"""

# =========================================================================== #
#                                Standard Imports                             #
# =========================================================================== #
import logging
from typing import TYPE_CHECKING, Optional, Protocol, Sequence

# =========================================================================== #
#                                Third-Party Imports                          #
# =========================================================================== #
from pydantic import BaseModel, ConfigDict

# =========================================================================== #
#                                Internal Imports                             #
# =========================================================================== #
from ..paths import LOGGER_NAME
from .styles import LogStyle

if TYPE_CHECKING:  # pragma: no cover
    from ..config import SessionConfig

logger = logging.getLogger(LOGGER_NAME)


class ReporterProtocol(Protocol):
    """Reporting surface consumed by the scheduler and the controller."""

    def log_run_header(
        self,
        logger_instance: logging.Logger,
        cfg: "SessionConfig",
        class_names: Sequence[str],
        archive_name: Optional[str],
    ) -> None: ...  # pragma: no cover

    def log_run_summary(
        self,
        logger_instance: logging.Logger,
        status: str,
        epoch: int,
        best_valid_loss: Optional[float],
        final_valid_acc: Optional[float],
    ) -> None: ...  # pragma: no cover


class Reporter(BaseModel):
    """
    Turns session configuration and run outcomes into readable log blocks.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    def log_run_header(
        self,
        logger_instance: logging.Logger,
        cfg: "SessionConfig",
        class_names: Sequence[str],
        archive_name: Optional[str],
    ) -> None:
        """
        Logs the configuration a run is about to start with.

        Args:
            logger_instance: Active session logger
            cfg: Validated session configuration
            class_names: Effective class list the run is keyed on
            archive_name: File name of the loaded archive, if any
        """
        i, a = LogStyle.INDENT, LogStyle.ARROW

        logger_instance.info("")
        logger_instance.info(LogStyle.HEAVY)
        logger_instance.info(f"{'TRAINING RUN':^80}")
        logger_instance.info(LogStyle.HEAVY)

        logger_instance.info("[DATASET]")
        logger_instance.info(f"{i}{a} {'Archive':<18}: {archive_name or 'none'}")
        logger_instance.info(f"{i}{a} {'Classes':<18}: {len(class_names)} categories")
        logger_instance.info(f"{i}{a} {'Labels':<18}: {', '.join(class_names)}")
        logger_instance.info("")

        logger_instance.info("[STRATEGY]")
        logger_instance.info(f"{i}{a} {'Architecture':<18}: {cfg.model_name}")
        logger_instance.info(
            f"{i}{a} {'Mode':<18}: {'Fine-tuning' if cfg.fine_tune else 'Feature extraction'}"
        )
        logger_instance.info(f"{i}{a} {'Validation':<18}: {cfg.validation_strategy}")
        logger_instance.info(f"{i}{a} {'Augmentation':<18}: {cfg.augmentation_method}")
        logger_instance.info("")

        logger_instance.info("[HYPERPARAMETERS]")
        logger_instance.info(f"{i}{a} {'Epochs':<18}: {cfg.epochs}")
        logger_instance.info(f"{i}{a} {'Patience':<18}: {cfg.patience}")
        logger_instance.info(f"{i}{a} {'Batch Size':<18}: {cfg.batch_size}")
        logger_instance.info(f"{i}{a} {'Initial LR':<18}: {cfg.learning_rate:.2e}")
        logger_instance.info(f"{i}{a} {'L2 Lambda':<18}: {cfg.l2_lambda:.2e}")
        logger_instance.info(
            f"{i}{a} {'Optimizer':<18}: {cfg.optimizer_name} / {cfg.lr_scheduler_name}"
        )
        logger_instance.info(LogStyle.HEAVY)

    def log_run_summary(
        self,
        logger_instance: logging.Logger,
        status: str,
        epoch: int,
        best_valid_loss: Optional[float],
        final_valid_acc: Optional[float],
    ) -> None:
        """Logs the terminal state of a run."""
        i, a = LogStyle.INDENT, LogStyle.ARROW
        loss_str = f"{best_valid_loss:.4f}" if best_valid_loss is not None else "n/a"
        acc_str = f"{final_valid_acc:.2%}" if final_valid_acc is not None else "n/a"

        logger_instance.info(LogStyle.DOUBLE)
        logger_instance.info(f"{LogStyle.SUCCESS} Run finished: {status}")
        logger_instance.info(f"{i}{a} {'Last Epoch':<18}: {epoch}")
        logger_instance.info(f"{i}{a} {'Best Valid Loss':<18}: {loss_str}")
        logger_instance.info(f"{i}{a} {'Final Valid Acc':<18}: {acc_str}")
        logger_instance.info(LogStyle.DOUBLE)

    def log_ingestion(
        self,
        logger_instance: logging.Logger,
        archive_name: str,
        class_counts: Sequence[tuple],
        sample_count: int,
    ) -> None:
        """Logs the class manifest derived from an uploaded archive."""
        logger_instance.info(f"[ARCHIVE] {archive_name}")
        for name, count in class_counts:
            logger_instance.info(f"{LogStyle.INDENT}{LogStyle.BULLET} {name:<24}: {count} images")
        logger_instance.info(
            f"{LogStyle.INDENT}{LogStyle.ARROW} {'Samples kept':<22}: {sample_count}"
        )
