"""
Configuration Serialization & Persistence Utilities.

Converts Pydantic models and Path objects into YAML or JSON and persists
text artifacts to disk with directory creation and an fsync before the
file is considered written.
"""

# =========================================================================== #
#                                Standard Imports                             #
# =========================================================================== #
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict

# =========================================================================== #
#                                Third-Party Imports                          #
# =========================================================================== #
import yaml

# =========================================================================== #
#                                Internal Imports                             #
# =========================================================================== #
from ..paths import LOGGER_NAME

logger = logging.getLogger(LOGGER_NAME)


# YAML ORCHESTRATION
def save_config_as_yaml(data: Any, yaml_path: Path) -> Path:
    """
    Saves a configuration object as a YAML file.

    Args:
        data: The configuration data (Pydantic model or dict).
        yaml_path: The target filesystem path for the YAML file.

    Returns:
        The confirmed path where the configuration was stored.
    """
    if hasattr(data, "model_dump"):
        raw_dict = data.model_dump(mode="json")
    else:
        raw_dict = data

    final_data = _sanitize_for_yaml(raw_dict)

    try:
        _persist_yaml_atomic(final_data, yaml_path)
    except OSError as e:
        logger.error(f"Failed to save configuration YAML: {e}")
        raise

    logger.info(f"Configuration frozen successfully at → {yaml_path.name}")
    return yaml_path


def load_config_from_yaml(yaml_path: Path) -> Dict[str, Any]:
    """
    Loads a raw configuration dictionary from a YAML file.

    Raises:
        FileNotFoundError: If the specified path does not exist.
    """
    if not yaml_path.exists():
        raise FileNotFoundError(f"YAML configuration file not found at: {yaml_path}")

    with open(yaml_path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f)


# TEXT ARTIFACTS
def write_text_atomic(content: str, path: Path) -> Path:
    """Write a UTF-8 text artifact, creating parent folders as needed."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(content)
        f.flush()
        os.fsync(f.fileno())
    return path


def dump_json(data: Any) -> str:
    """Render a JSON document with the indentation used by every export."""
    return json.dumps(_sanitize_for_yaml(data), indent=2, ensure_ascii=False)


# INTERNAL HELPERS
def _sanitize_for_yaml(obj: Any) -> Any:
    """
    Recursively converts non-serializable types into plain formats.

    Path objects become strings, tuples become lists.
    """
    if isinstance(obj, dict):
        return {k: _sanitize_for_yaml(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_sanitize_for_yaml(i) for i in obj]
    if isinstance(obj, Path):
        return str(obj)
    return obj


def _persist_yaml_atomic(data: Any, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(
            data,
            f,
            default_flow_style=False,
            sort_keys=False,
            indent=4,
            allow_unicode=True,
        )
        f.flush()
        os.fsync(f.fileno())
