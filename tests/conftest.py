"""
Pytest Configuration and Shared Fixtures for the Geomaker Test Suite.

This module provides reusable fixtures for session testing, including:
- In-memory ZIP archives built from real PNG/JPEG images
- Scripted metrics sources that make run outcomes deterministic
- Seeded configurations and controllers driven by a manual tick timer

Fixtures are automatically discovered by pytest across all test modules.
"""

# Standard Imports
import io
import struct
import zipfile
from typing import Dict, List, Sequence

# Third-Party Imports
import pytest
from PIL import Image

# Internal Imports
from geomaker.core.config import AppConfig, RuntimeConfig, SessionConfig
from geomaker.session import SessionController
from geomaker.trainer import EpochMetrics, ManualTickTimer


# IMAGE & ARCHIVE HELPERS
def encode_image(fmt: str = "PNG", size=(8, 6), color=(200, 30, 30)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format=fmt)
    return buffer.getvalue()


def build_zip(entries: Dict[str, bytes]) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        for name, payload in entries.items():
            zf.writestr(name, payload)
    return buffer.getvalue()


def patch_central_entry(raw: bytes, entry_name: str, flag_bits=None, compress_type=None) -> bytes:
    """Rewrites one entry's central-directory header (general flags and compression method)."""
    data = bytearray(raw)
    end = data.rfind(b"PK\x05\x06")
    count = struct.unpack_from("<H", data, end + 10)[0]
    offset = struct.unpack_from("<I", data, end + 16)[0]
    for _ in range(count):
        name_len, extra_len, comment_len = struct.unpack_from("<3H", data, offset + 28)
        if bytes(data[offset + 46 : offset + 46 + name_len]) == entry_name.encode():
            if flag_bits is not None:
                struct.pack_into("<H", data, offset + 8, flag_bits)
            if compress_type is not None:
                struct.pack_into("<H", data, offset + 10, compress_type)
            return bytes(data)
        offset += 46 + name_len + extra_len + comment_len
    raise KeyError(entry_name)


class ScriptedMetrics:
    """Metrics source replaying a fixed validation-loss script."""

    def __init__(self, valid_losses: Sequence[float]):
        self.valid_losses = list(valid_losses)

    def generate(self, epoch: int) -> EpochMetrics:
        loss = self.valid_losses[min(epoch, len(self.valid_losses)) - 1]
        return EpochMetrics(
            epoch=epoch,
            train_loss=loss - 0.1,
            valid_loss=loss,
            train_acc=0.6,
            valid_acc=0.55 + 0.01 * epoch,
        )


def scripted_factory(valid_losses: Sequence[float]):
    return lambda rng: ScriptedMetrics(valid_losses)


# HELPER FIXTURES
@pytest.fixture
def make_image():
    return encode_image


@pytest.fixture
def make_zip():
    return build_zip


@pytest.fixture
def patch_entry():
    """Header patcher: ``patch_entry(raw, "cats/a.png", flag_bits=0x1)``."""
    return patch_central_entry


@pytest.fixture
def scripted():
    """Factory of metrics factories: ``scripted([1.0, 0.9])``."""
    return scripted_factory


# ARCHIVE FIXTURES
@pytest.fixture
def png_bytes() -> bytes:
    return encode_image("PNG")


@pytest.fixture
def pets_zip() -> bytes:
    """Two classes: cats (jpg + png) and dogs (jpg), plus ignorable entries."""
    return build_zip(
        {
            "cats/a.jpg": encode_image("JPEG"),
            "cats/b.png": encode_image("PNG"),
            "dogs/c.jpg": encode_image("JPEG", color=(10, 10, 200)),
            "__MACOSX/cats/._a.jpg": b"resource fork",
            "dogs/notes.txt": b"not an image",
            "README.md": b"top level file",
        }
    )


@pytest.fixture
def flowers_zip() -> bytes:
    """Three classes with 4, 2 and 1 images."""
    entries: Dict[str, bytes] = {}
    layout: Dict[str, List[str]] = {
        "roses": ["r1.png", "r2.png", "r3.png", "r4.png"],
        "tulips": ["t1.png", "t2.png"],
        "daisies": ["d1.png"],
    }
    for folder, files in layout.items():
        for file_name in files:
            entries[f"{folder}/{file_name}"] = encode_image("PNG")
    return build_zip(entries)


# CONFIGURATION FIXTURES
@pytest.fixture
def app_config() -> AppConfig:
    return AppConfig(
        session=SessionConfig(epochs=5, patience=2),
        runtime=RuntimeConfig(tick_interval=0.0, seed=7),
    )


@pytest.fixture
def manual_timer() -> ManualTickTimer:
    return ManualTickTimer()


@pytest.fixture
def controller(app_config, manual_timer) -> SessionController:
    return SessionController(app_config, timer=manual_timer)
