"""
Test Suite for Archive Ingestion and Class Identity Resolution.

Tests manifest construction from in-memory ZIP archives, sampling bounds,
error classification and the fine-tune/archive precedence rule.
"""

# Standard Imports
import base64

# Third-Party Imports
import pytest

# Internal Imports
from geomaker.core.config import SessionConfig
from geomaker.core.exceptions import ArchiveReadError, EmptyDatasetError, TooManyClassesError
from geomaker.data_handler import (
    ArchiveManifest,
    class_letter,
    ingest_archive,
    is_image_entry,
    placeholder_names,
    resolve_class_identity,
)
from geomaker.data_handler.identity import SOURCE_ARCHIVE, SOURCE_CONFIGURED, SOURCE_DEFAULT


# INGESTION: MANIFEST
@pytest.mark.unit
def test_two_class_archive_manifest(pets_zip):
    """Top-level folders become classes; metadata and non-images are ignored."""
    manifest = ingest_archive(pets_zip, "pets.zip")

    assert manifest.class_names == ["cats", "dogs"]
    assert manifest.num_classes == 2
    assert manifest.archive_name == "pets.zip"
    assert manifest.image_count("cats") == 2
    assert manifest.image_count("dogs") == 1
    assert len(manifest.samples_for("cats")) <= 3
    assert len(manifest.samples_for("dogs")) <= 1


@pytest.mark.unit
def test_samples_are_data_urls_with_dimensions(pets_zip):
    manifest = ingest_archive(pets_zip)

    sample = manifest.samples_for("cats")[1]
    assert sample.file_name == "b.png"
    assert sample.image_data.startswith("data:image/png;base64,")
    base64.b64decode(sample.image_data.split(",", 1)[1])
    assert (sample.width, sample.height) == (8, 6)
    assert manifest.samples_for("cats")[0].image_data.startswith("data:image/jpeg;base64,")


@pytest.mark.unit
def test_sampling_respects_per_class_and_total_bounds(flowers_zip):
    manifest = ingest_archive(flowers_zip, max_per_class=3, max_total=4)

    assert manifest.class_names == ["roses", "tulips", "daisies"]
    assert manifest.image_count("roses") == 4
    assert len(manifest.samples_for("roses")) == 3
    assert len(manifest.samples_for("tulips")) == 1
    assert manifest.samples_for("daisies") == []
    assert len(manifest.samples) == 4


@pytest.mark.unit
def test_nested_images_belong_to_top_level_folder(make_zip, make_image):
    raw = make_zip({"birds/juvenile/owl.PNG": make_image("PNG"), "birds/hawk.gif": make_image("GIF")})

    manifest = ingest_archive(raw)

    assert manifest.class_names == ["birds"]
    assert manifest.image_count("birds") == 2


@pytest.mark.unit
def test_undecodable_image_is_skipped_but_class_kept(make_zip, make_image):
    raw = make_zip({"rocks/broken.jpg": b"not really a jpeg", "rocks/ok.png": make_image("PNG")})

    manifest = ingest_archive(raw)

    assert manifest.class_names == ["rocks"]
    assert manifest.image_count("rocks") == 2
    assert [s.file_name for s in manifest.samples] == ["ok.png"]


@pytest.mark.unit
@pytest.mark.parametrize(
    "header",
    [{"flag_bits": 0x1}, {"compress_type": 9}],
    ids=["encrypted", "deflate64"],
)
def test_unreadable_entry_is_skipped_but_class_kept(make_zip, make_image, patch_entry, header):
    raw = make_zip({"rocks/locked.png": make_image("PNG"), "rocks/ok.png": make_image("PNG")})
    raw = patch_entry(raw, "rocks/locked.png", **header)

    manifest = ingest_archive(raw)

    assert manifest.class_names == ["rocks"]
    assert manifest.image_count("rocks") == 2
    assert [s.file_name for s in manifest.samples] == ["ok.png"]


@pytest.mark.unit
def test_archive_from_path(tmp_path, pets_zip):
    path = tmp_path / "pets_upload.zip"
    path.write_bytes(pets_zip)

    manifest = ingest_archive(path)

    assert manifest.archive_name == "pets_upload.zip"
    assert manifest.num_classes == 2


# INGESTION: FAILURES
@pytest.mark.unit
def test_corrupt_archive_raises_read_error():
    with pytest.raises(ArchiveReadError):
        ingest_archive(b"definitely not a zip file", "broken.zip")


@pytest.mark.unit
def test_missing_file_raises_read_error(tmp_path):
    with pytest.raises(ArchiveReadError):
        ingest_archive(tmp_path / "missing.zip")


@pytest.mark.unit
def test_archive_without_class_folders_raises_empty(make_zip, make_image):
    raw = make_zip(
        {
            "loose.png": make_image("PNG"),
            "docs/readme.txt": b"text",
            "__MACOSX/cats/._a.png": make_image("PNG"),
        }
    )

    with pytest.raises(EmptyDatasetError):
        ingest_archive(raw)


@pytest.mark.unit
def test_too_many_class_folders_raises(make_zip, make_image):
    image = make_image("PNG")
    raw = make_zip({f"class_{i:02d}/img.png": image for i in range(4)})

    with pytest.raises(TooManyClassesError, match="4 class folders"):
        ingest_archive(raw, "wide.zip", max_classes=3)

    assert ingest_archive(raw, max_classes=4).num_classes == 4


@pytest.mark.unit
@pytest.mark.parametrize(
    "name, expected",
    [("a.JPG", True), ("b.jpeg", True), ("c.bmp", True), ("d.tiff", False), ("e.png.txt", False)],
)
def test_is_image_entry(name, expected):
    assert is_image_entry(name) is expected


# CLASS IDENTITY
@pytest.mark.unit
@pytest.mark.parametrize("index, label", [(0, "A"), (25, "Z"), (26, "AA"), (27, "AB"), (701, "ZZ")])
def test_class_letter(index, label):
    assert class_letter(index) == label


@pytest.mark.unit
def test_placeholder_names():
    assert placeholder_names(3) == ["Class A", "Class B", "Class C"]
    assert placeholder_names(2, "Default Class") == ["Default Class A", "Default Class B"]


@pytest.fixture
def manifest() -> ArchiveManifest:
    return ArchiveManifest(archive_name="x.zip", entries={"cats": ("cats/a.png",), "dogs": ("dogs/b.png",)})


@pytest.mark.unit
def test_fine_tune_with_manifest_uses_archive_classes(manifest):
    identity = resolve_class_identity(SessionConfig(fine_tune=True, num_classes=7), manifest, 5)

    assert identity.names == ("cats", "dogs")
    assert identity.source == SOURCE_ARCHIVE


@pytest.mark.unit
def test_feature_extraction_uses_configured_count(manifest):
    identity = resolve_class_identity(SessionConfig(fine_tune=False, num_classes=3), manifest, 5)

    assert identity.names == ("Class A", "Class B", "Class C")
    assert identity.source == SOURCE_CONFIGURED


@pytest.mark.unit
def test_zero_configured_classes_fall_back_to_default():
    identity = resolve_class_identity(SessionConfig(num_classes=0), None, 4)

    assert identity.count == 4
    assert identity.source == SOURCE_DEFAULT


@pytest.mark.unit
def test_fallback_names_used_when_count_matches():
    names = placeholder_names(5, "Default Class")

    matching = resolve_class_identity(SessionConfig(num_classes=5), None, 5, names)
    mismatched = resolve_class_identity(SessionConfig(num_classes=2), None, 5, names)

    assert matching.names == tuple(names)
    assert mismatched.names == ("Class A", "Class B")
