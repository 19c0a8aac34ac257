"""
Effective Class Identity Resolution.

One precedence rule decides which class names a run, its results, the
session summary and every export are keyed on:

    1. fine-tuning active AND an archive manifest loaded → manifest classes
    2. otherwise the configured class count (default size when 0), named
       by ``fallback_names`` when they match that count, else ``Class A``,
       ``Class B``, ...
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from geomaker.core.config.session_config import SessionConfig

from .archive import ArchiveManifest

SOURCE_ARCHIVE = "archive"
SOURCE_CONFIGURED = "configured"
SOURCE_DEFAULT = "default"


@dataclass(frozen=True)
class ClassIdentity:
    """Resolved class list and where it came from."""

    names: Tuple[str, ...]
    source: str

    @property
    def count(self) -> int:
        return len(self.names)


def class_letter(index: int) -> str:
    """Spreadsheet-style label for a zero-based index: 0→A, 25→Z, 26→AA."""
    if index < 0:
        raise ValueError(f"index must be non-negative, got {index}")
    label = ""
    n = index + 1
    while n:
        n, rem = divmod(n - 1, 26)
        label = chr(65 + rem) + label
    return label


def placeholder_names(count: int, prefix: str = "Class") -> List[str]:
    """``["Class A", "Class B", ...]`` of the given length."""
    return [f"{prefix} {class_letter(i)}" for i in range(count)]


def resolve_class_identity(
    config: SessionConfig,
    manifest: Optional[ArchiveManifest],
    default_num_classes: int,
    fallback_names: Sequence[str] = (),
) -> ClassIdentity:
    """
    Applies the class-identity precedence rule.

    Args:
        config: Active session configuration
        manifest: Loaded archive manifest, if any
        default_num_classes: Size of the placeholder set when the configured count is 0
        fallback_names: Names installed after a failed upload

    Returns:
        ClassIdentity with the ordered class names
    """
    if config.fine_tune and manifest is not None:
        return ClassIdentity(names=tuple(manifest.class_names), source=SOURCE_ARCHIVE)

    if config.num_classes > 0:
        count, source = config.num_classes, SOURCE_CONFIGURED
    else:
        count, source = default_num_classes, SOURCE_DEFAULT

    if fallback_names and len(fallback_names) == count:
        return ClassIdentity(names=tuple(fallback_names), source=SOURCE_DEFAULT)

    return ClassIdentity(names=tuple(placeholder_names(count)), source=source)
