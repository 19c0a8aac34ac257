"""
Argument Parsing Module.

Command-line interface of the headless session runner. Bridges terminal
inputs with the hierarchical Pydantic configuration: every flag defaults to
None so that only explicitly provided values override schema defaults.
"""

import argparse
from typing import Optional, Sequence

from .config.session_config import SessionConfig


# ARGUMENT PARSING
def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """
    Configure and parse command-line arguments for the session runner.

    Args:
        argv: Argument list (defaults to ``sys.argv[1:]``)

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        description="Simulated image-classification training session.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    session_def = SessionConfig()

    # ===== Global Strategy =====
    strat_group = parser.add_argument_group("Global Strategy")
    strat_group.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to YAML config file (overrides all other flags)",
    )
    strat_group.add_argument(
        "--archive", type=str, default=None, help="ZIP archive, one folder per class"
    )
    strat_group.add_argument(
        "--domain_hint", type=str, default=None, help="Free-text description of the dataset"
    )
    strat_group.add_argument(
        "--inspect", type=str, default=None, help="Image to run the simulated inspector on"
    )
    strat_group.add_argument(
        "--ask", type=str, default=None, help="Question for the assistant after the run"
    )

    # ===== Model =====
    model_group = parser.add_argument_group("Model")
    model_group.add_argument(
        "--model_name", type=str, default=None, help=f"Backbone (default: {session_def.model_name})"
    )
    model_group.add_argument(
        "--feature_extraction",
        action="store_false",
        dest="fine_tune",
        default=None,
        help="Disable fine-tuning; class identity then comes from --num_classes",
    )
    model_group.add_argument("--num_classes", type=int, default=None)

    # ===== Training Hyperparameters =====
    train_group = parser.add_argument_group("Training Hyperparameters")
    train_group.add_argument("--epochs", type=int, default=None)
    train_group.add_argument("--patience", type=int, default=None)
    train_group.add_argument("--batch_size", type=int, default=None)
    train_group.add_argument("--lr", "--learning_rate", dest="learning_rate", type=float, default=None)
    train_group.add_argument("--l2_lambda", type=float, default=None)
    train_group.add_argument("--optimizer_name", type=str, default=None)
    train_group.add_argument("--lr_scheduler_name", type=str, default=None)
    train_group.add_argument(
        "--weighted_loss", action="store_true", dest="use_weighted_loss", default=None
    )

    # ===== Data =====
    data_group = parser.add_argument_group("Data")
    data_group.add_argument("--train_split", type=float, default=None)
    data_group.add_argument("--valid_split", type=float, default=None)
    data_group.add_argument("--validation_strategy", type=str, default=None)
    data_group.add_argument("--augmentation_method", type=str, default=None)

    # ===== Explainability =====
    xai_group = parser.add_argument_group("Explainability")
    xai_group.add_argument("--cam_method", type=str, default=None)
    xai_group.add_argument("--show_uncertainty", action="store_true", default=None)

    # ===== Runtime =====
    runtime_group = parser.add_argument_group("Runtime")
    runtime_group.add_argument(
        "--tick_interval", type=float, default=None, help="Seconds between simulated epochs"
    )
    runtime_group.add_argument("--seed", type=int, default=None)

    # ===== Paths & Logging =====
    path_group = parser.add_argument_group("Paths & Logging")
    path_group.add_argument("--export_dir", type=str, default=None)
    path_group.add_argument("--log_dir", type=str, default=None)
    path_group.add_argument(
        "--log_level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
    )
    path_group.add_argument(
        "--formats",
        nargs="+",
        default=["csv", "json", "config"],
        choices=["csv", "metrics_csv", "json", "config", "excel"],
        help="Export formats written after the run",
    )

    return parser.parse_args(argv)
