"""
Configuration Package Initialization.

Provides a unified, flat public API for configuration components while
deferring the import of each schema module until it is first used.

Architecture:
    - Lazy Import Pattern (PEP 562): Uses __getattr__ for on-demand loading
    - Flat API: All configs accessible from geomaker.core.config namespace
    - Caching: Loaded attributes cached in globals() for performance

Example:
    >>> from geomaker.core.config import AppConfig, SessionConfig
    >>> cfg = AppConfig.from_args(args)
"""

from __future__ import annotations

from importlib import import_module
from typing import Any

__all__ = [
    "AppConfig",
    "SessionConfig",
    "RuntimeConfig",
    "AssistantConfig",
    "TelemetryConfig",
    "ValidatedPath",
    "DEFAULT_NUM_CLASSES",
    "MAX_NUM_CLASSES",
]

# LAZY IMPORTS MAPPING
_LAZY_IMPORTS: dict[str, str] = {
    "AppConfig": "geomaker.core.config.app_config",
    "SessionConfig": "geomaker.core.config.session_config",
    "RuntimeConfig": "geomaker.core.config.runtime_config",
    "AssistantConfig": "geomaker.core.config.assistant_config",
    "TelemetryConfig": "geomaker.core.config.telemetry_config",
    "ValidatedPath": "geomaker.core.config.types",
    "DEFAULT_NUM_CLASSES": "geomaker.core.config.session_config",
    "MAX_NUM_CLASSES": "geomaker.core.config.types",
}


# LAZY LOADER FUNCTION
def __getattr__(name: str) -> Any:
    """
    Lazily import configuration components on first access.
    """
    if name not in _LAZY_IMPORTS:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

    module = import_module(_LAZY_IMPORTS[name])
    attr = getattr(module, name)

    globals()[name] = attr
    return attr


# DIR SUPPORT
def __dir__() -> list[str]:
    """
    Support for dir() and IDE auto-completion.

    Returns:
        Sorted list of public configuration names
    """
    return sorted(__all__)
