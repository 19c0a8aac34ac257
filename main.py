"""
Geomaker: Headless Session Runner.

Drives one complete session from the terminal:
    1. Archive ingestion (class manifest + preview samples)
    2. Simulated training run with early stopping
    3. Optional single-image inspection and assistant question
    4. Export of the requested artifacts

Usage:
    # Default configuration on an archive
    python main.py --archive flowers.zip

    # YAML recipe, fixed seed, every export format
    python main.py --config recipes/session.yaml --seed 7 --formats csv metrics_csv json config excel
"""

# =========================================================================== #
#                                Standard Imports                             #
# =========================================================================== #
from pathlib import Path

# =========================================================================== #
#                                Internal Imports                             #
# =========================================================================== #
from geomaker.assistant import AssistantConversation
from geomaker.core import (
    LOGGER_NAME,
    AppConfig,
    GeomakerError,
    Logger,
    LogStyle,
    TimeTracker,
    parse_args,
    set_seed,
)
from geomaker.session import SessionController

EXPORTERS = {
    "csv": "export_results_csv",
    "metrics_csv": "export_metrics_csv",
    "json": "export_json",
    "config": "export_config",
    "excel": "export_excel",
}


def main() -> None:
    """
    Runs ingestion, training, inspection and exports for one session.
    """
    args = parse_args()
    cfg = AppConfig.from_args(args)

    run_logger = Logger.setup(
        LOGGER_NAME,
        log_dir=cfg.telemetry.log_dir,
        level=cfg.telemetry.log_level,
    )
    if cfg.runtime.seed is not None:
        set_seed(cfg.runtime.seed)

    tracker = TimeTracker()
    tracker.start()

    with SessionController(cfg) as session:
        try:
            if args.archive:
                outcome = session.upload_archive(Path(args.archive))
                if not outcome.success:
                    run_logger.warning(f"{LogStyle.WARNING} {outcome.message}")
            if args.domain_hint:
                session.set_domain_hint(args.domain_hint)

            status = session.run_training_sync()

            if args.inspect:
                session.inspect_image(Path(args.inspect))

            if args.ask:
                conversation = AssistantConversation(config=cfg.assistant)
                session.attach_assistant(conversation)
                session.refresh_assistant()
                reply = session.chat(args.ask)
                run_logger.info(f"[{reply.role.upper()}] {reply.text}")

            written = [getattr(session, EXPORTERS[fmt])() for fmt in args.formats]

            tracker.stop()
            run_logger.info(LogStyle.HEAVY)
            run_logger.info(f"{LogStyle.INDENT}{LogStyle.SUCCESS} Session finished: {status.value}")
            for path in written:
                run_logger.info(f"{LogStyle.INDENT}{LogStyle.ARROW} {path}")
            run_logger.info(f"{LogStyle.INDENT}{LogStyle.ARROW} Duration: {tracker.elapsed_formatted}")
            run_logger.info(LogStyle.HEAVY)

        except KeyboardInterrupt:
            run_logger.warning(f"{LogStyle.WARNING} Interrupted by user.")
            raise SystemExit(1)

        except GeomakerError as e:
            run_logger.error(f"{LogStyle.WARNING} Session failed: {e}")
            raise SystemExit(2)


if __name__ == "__main__":
    main()
