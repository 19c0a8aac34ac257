"""
Archive Ingestion Module.

Turns an uploaded ZIP archive into an immutable class manifest plus a
bounded set of decoded sample images.

Layout convention: one top-level folder per class, image files nested
anywhere below it. Entries under the ``__MACOSX`` metadata prefix are
ignored, as is anything that is not a recognized image extension.
"""

# =========================================================================== #
#                                Standard Imports                             #
# =========================================================================== #
import base64
import io
import logging
import zipfile
import zlib
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Dict, List, Mapping, Optional, Tuple, Union

# =========================================================================== #
#                                Third-Party Imports                          #
# =========================================================================== #
from PIL import Image, UnidentifiedImageError

# =========================================================================== #
#                                Internal Imports                             #
# =========================================================================== #
from geomaker.core.exceptions import ArchiveReadError, EmptyDatasetError, TooManyClassesError
from geomaker.core.paths import LOGGER_NAME

logger = logging.getLogger(LOGGER_NAME)

IMAGE_EXTENSIONS: Tuple[str, ...] = (".jpg", ".jpeg", ".png", ".gif", ".bmp")
METADATA_PREFIX = "__MACOSX"

_MIME_TYPES: Dict[str, str] = {
    "JPEG": "image/jpeg",
    "PNG": "image/png",
    "GIF": "image/gif",
    "BMP": "image/bmp",
}

ArchiveSource = Union[bytes, bytearray, Path, str]


# DATA CONTAINERS
@dataclass(frozen=True)
class SampleImage:
    """
    Decoded preview of one archive image.

    ``image_data`` is a base64 data URL so it can be embedded directly in
    JSON exports and error-sample cross references.
    """

    class_name: str
    image_data: str
    file_name: str
    width: int = 0
    height: int = 0


@dataclass(frozen=True)
class ArchiveManifest:
    """
    Immutable class → image-entry mapping derived from one archive.

    Every class listed carries at least one qualifying image entry; class
    order is first-discovery order inside the archive.
    """

    archive_name: str
    entries: Mapping[str, Tuple[str, ...]]
    samples: Tuple[SampleImage, ...] = field(default_factory=tuple)

    @property
    def class_names(self) -> List[str]:
        return list(self.entries.keys())

    @property
    def num_classes(self) -> int:
        return len(self.entries)

    def image_count(self, class_name: str) -> int:
        return len(self.entries.get(class_name, ()))

    def samples_for(self, class_name: str) -> List[SampleImage]:
        return [s for s in self.samples if s.class_name == class_name]


# INGESTION
def ingest_archive(
    source: ArchiveSource,
    file_name: Optional[str] = None,
    max_per_class: int = 3,
    max_total: int = 10,
    max_classes: Optional[int] = None,
) -> ArchiveManifest:
    """
    Parses a ZIP archive into an ArchiveManifest.

    Args:
        source: Raw archive bytes or a path to the archive on disk.
        file_name: Display name recorded in the manifest (defaults to the
            path's name, or ``"archive.zip"`` for raw bytes).
        max_per_class: Sample images attempted per class.
        max_total: Upper bound on sample images across all classes.
        max_classes: Largest accepted number of class folders (None = unbounded).

    Returns:
        ArchiveManifest: the resolved classes and samples.

    Raises:
        ArchiveReadError: The input is not a readable ZIP archive.
        EmptyDatasetError: No top-level folder holds a qualifying image.
        TooManyClassesError: More class folders than ``max_classes``.
    """
    raw, display_name = _read_source(source, file_name)

    try:
        with zipfile.ZipFile(io.BytesIO(raw)) as zf:
            grouped = _group_entries(zf)

            if not grouped:
                raise EmptyDatasetError(
                    f"No class folder with valid images found in '{display_name}'. "
                    "Expected one top-level folder per class containing "
                    f"{', '.join(IMAGE_EXTENSIONS)} files."
                )
            if max_classes is not None and len(grouped) > max_classes:
                raise TooManyClassesError(
                    f"'{display_name}' has {len(grouped)} class folders; "
                    f"at most {max_classes} are supported."
                )

            samples = _extract_samples(zf, grouped, max_per_class, max_total)
    except (zipfile.BadZipFile, zipfile.LargeZipFile, zlib.error, EOFError) as e:
        raise ArchiveReadError(f"Could not read '{display_name}' as a ZIP archive: {e}") from e

    manifest = ArchiveManifest(
        archive_name=display_name,
        entries={name: tuple(paths) for name, paths in grouped.items()},
        samples=tuple(samples),
    )
    logger.info(
        f"Archive '{display_name}' ingested: {manifest.num_classes} classes, "
        f"{len(manifest.samples)} samples"
    )
    return manifest


def is_image_entry(entry_name: str) -> bool:
    """Case-insensitive check against the recognized image extensions."""
    return entry_name.lower().endswith(IMAGE_EXTENSIONS)


# INTERNAL HELPERS
def _read_source(source: ArchiveSource, file_name: Optional[str]) -> Tuple[bytes, str]:
    if isinstance(source, (bytes, bytearray)):
        return bytes(source), file_name or "archive.zip"

    path = Path(source)
    try:
        raw = path.read_bytes()
    except OSError as e:
        raise ArchiveReadError(f"Could not open archive at {path}: {e}") from e
    return raw, file_name or path.name


def _group_entries(zf: zipfile.ZipFile) -> Dict[str, List[str]]:
    """
    Groups qualifying image entries by top-level folder.

    Dicts preserve insertion order, which yields first-discovery order of
    classes. Folders with no qualifying image never get a key.
    """
    grouped: Dict[str, List[str]] = {}

    for info in zf.infolist():
        name = info.filename
        if info.is_dir() or name.startswith(METADATA_PREFIX):
            continue

        parts = name.split("/")
        if len(parts) < 2 or not parts[0] or not parts[-1]:
            continue

        if not is_image_entry(parts[-1]):
            continue

        grouped.setdefault(parts[0], []).append(name)

    return grouped


def _extract_samples(
    zf: zipfile.ZipFile,
    grouped: Mapping[str, List[str]],
    max_per_class: int,
    max_total: int,
) -> List[SampleImage]:
    samples: List[SampleImage] = []

    for class_name, entry_names in grouped.items():
        if len(samples) >= max_total:
            break

        for entry_name in entry_names[:max_per_class]:
            if len(samples) >= max_total:
                break
            try:
                samples.append(_decode_sample(zf, class_name, entry_name))
            except (
                OSError,
                ValueError,
                RuntimeError,
                NotImplementedError,
                zipfile.BadZipFile,
                zlib.error,
                Image.DecompressionBombError,
            ) as e:
                # RuntimeError: encrypted entry; NotImplementedError: unsupported compression
                logger.warning(f"Skipping sample '{entry_name}' of class '{class_name}': {e}")

    return samples


def _decode_sample(zf: zipfile.ZipFile, class_name: str, entry_name: str) -> SampleImage:
    raw = zf.read(entry_name)

    with Image.open(io.BytesIO(raw)) as img:
        img.load()
        width, height = img.size
        fmt = img.format or ""

    if not fmt:
        raise UnidentifiedImageError(f"unknown image format for '{entry_name}'")

    mime = _MIME_TYPES.get(fmt.upper(), f"image/{fmt.lower()}")
    encoded = base64.b64encode(raw).decode("ascii")

    return SampleImage(
        class_name=class_name,
        image_data=f"data:{mime};base64,{encoded}",
        file_name=PurePosixPath(entry_name).name,
        width=width,
        height=height,
    )
