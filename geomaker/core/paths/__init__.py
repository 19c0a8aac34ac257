"""
Filesystem Authority and Path Constants Package.

Centralizes the project root, the default export directory and the shared
logger identity.
"""

from .constants import EXPORTS_ROOT, LOGGER_NAME, PROJECT_ROOT, get_project_root

__all__ = [
    "PROJECT_ROOT",
    "EXPORTS_ROOT",
    "LOGGER_NAME",
    "get_project_root",
]
