"""
Input/Output & Persistence Utilities.

Handles configuration serialization (YAML) and the on-disk persistence of
exported text artifacts.
"""

from .serialization import (
    dump_json,
    load_config_from_yaml,
    save_config_as_yaml,
    write_text_atomic,
)

__all__ = [
    "save_config_as_yaml",
    "load_config_from_yaml",
    "write_text_atomic",
    "dump_json",
]
