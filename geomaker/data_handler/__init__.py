"""
Data Handler Package.

Archive ingestion into a class manifest with bounded sample previews, and
the precedence rule resolving the effective class list of a session.
"""

from .archive import (
    IMAGE_EXTENSIONS,
    ArchiveManifest,
    SampleImage,
    ingest_archive,
    is_image_entry,
)
from .identity import ClassIdentity, class_letter, placeholder_names, resolve_class_identity

__all__ = [
    "IMAGE_EXTENSIONS",
    "ArchiveManifest",
    "SampleImage",
    "ingest_archive",
    "is_image_entry",
    "ClassIdentity",
    "class_letter",
    "placeholder_names",
    "resolve_class_identity",
]
