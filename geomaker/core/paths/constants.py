"""
Project-wide Path Constants.

Single source of truth for the filesystem layout used by the session
orchestrator: project root discovery, the default export folder and the
logger identity shared by every module.
"""

import os
from pathlib import Path
from typing import Final

# GLOBAL CONSTANTS
# Global logger identity used by all modules to ensure log synchronization
LOGGER_NAME: Final[str] = "geomaker"


# PATH CALCULATIONS
def get_project_root() -> Path:
    """
    Dynamically locates the project root by searching for anchor files.

    Starts from the current file's directory and traverses upwards until
    it finds a marker (e.g., '.git', 'pyproject.toml'). Falls back to the
    parent of the package directory if no markers are found.
    """
    # Environment override for containerized deployments
    env_root = os.getenv("GEOMAKER_ROOT")
    if env_root:
        return Path(env_root).expanduser().resolve()

    current_path = Path(__file__).resolve().parent

    root_markers = {".git", "pyproject.toml", "README.md"}

    for parent in [current_path] + list(current_path.parents):
        if any((parent / marker).exists() for marker in root_markers):
            return parent

    return current_path.parents[2]


# Central Filesystem Authority
PROJECT_ROOT: Final[Path] = get_project_root().resolve()

# DEFAULT OUTPUT
# Output: default root for exported artifacts (CSV, JSON, XLSX)
EXPORTS_ROOT: Final[Path] = (PROJECT_ROOT / "exports").resolve()
