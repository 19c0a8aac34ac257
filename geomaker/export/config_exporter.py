"""
Configuration Persistence.

Writes the active session configuration as a JSON list of
``{"parameter": <label>, "value": <string>}`` entries, with the class
count replaced by the effective one.
"""

import logging
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional

from geomaker.core.config.session_config import PARAMETER_LABELS, SessionConfig
from geomaker.core.io import dump_json, write_text_atomic
from geomaker.core.paths import LOGGER_NAME

logger = logging.getLogger(LOGGER_NAME)


def format_parameter_value(value: Any) -> str:
    if isinstance(value, bool):
        return "Yes" if value else "No"
    return str(value)


def parameter_entries(
    config: SessionConfig, effective_num_classes: Optional[int] = None
) -> List[Dict[str, str]]:
    """Labelled string entries in presentation order."""
    values = config.model_dump()
    if effective_num_classes is not None:
        values["num_classes"] = effective_num_classes
    return [
        {"parameter": label, "value": format_parameter_value(values[field])}
        for field, label in PARAMETER_LABELS.items()
    ]


def config_file_name(config: SessionConfig, on: Optional[date] = None) -> str:
    """``config_<model>_run_<YYYY-MM-DD>.json``"""
    day = (on or date.today()).isoformat()
    return f"config_{config.model_name}_run_{day}.json"


def export_config(
    config: SessionConfig,
    output_dir: Path,
    effective_num_classes: Optional[int] = None,
    on: Optional[date] = None,
) -> Path:
    """
    Persists the configuration entries to ``output_dir``.

    Returns:
        Path of the written file.
    """
    path = Path(output_dir) / config_file_name(config, on)
    write_text_atomic(dump_json(parameter_entries(config, effective_num_classes)), path)
    logger.info(f"Configuration saved to {path.name}")
    return path
