"""
Single-Image Inspection.

Simulated prediction for one uploaded image: a class drawn from the
effective class list, a confidence in [0.5, 1.0), an optional uncertainty
score and a class-activation heatmap blended over the decoded image.
"""

# =========================================================================== #
#                                Standard Imports                             #
# =========================================================================== #
import base64
import io
import logging
from dataclasses import dataclass
from typing import Optional, Sequence

# =========================================================================== #
#                                Third-Party Imports                          #
# =========================================================================== #
import numpy as np
from PIL import Image

# =========================================================================== #
#                                Internal Imports                             #
# =========================================================================== #
from geomaker.core.paths import LOGGER_NAME

logger = logging.getLogger(LOGGER_NAME)

CAM_MAX_SIDE = 512
CAM_ALPHA = 0.45


@dataclass(frozen=True)
class IndividualInspection:
    file_name: str
    predicted_class: str
    confidence: float
    uncertainty_score: Optional[float]
    cam_method: str
    cam_image: Optional[str]


def simulate_inspection(
    image_bytes: bytes,
    file_name: str,
    class_names: Sequence[str],
    cam_method: str,
    show_uncertainty: bool,
    rng: np.random.Generator,
) -> IndividualInspection:
    """
    Simulates a prediction for one image.

    Args:
        image_bytes: Raw encoded image.
        file_name: Original file name.
        class_names: Effective class list to predict from.
        cam_method: Explainability method label recorded on the result.
        show_uncertainty: Attach an uncertainty score when True.
        rng: Generator for every random draw.

    Returns:
        IndividualInspection; ``cam_image`` is None if the image cannot be decoded.
    """
    if not class_names:
        raise ValueError("Cannot inspect an image without at least one class.")

    predicted = class_names[int(rng.integers(0, len(class_names)))]
    confidence = float(rng.uniform(0.5, 1.0))

    uncertainty: Optional[float] = None
    if show_uncertainty:
        uncertainty = float(np.clip(1.0 - confidence + rng.uniform(0.0, 0.1), 0.0, 1.0))

    try:
        cam_image = render_cam_overlay(image_bytes, rng)
    except (OSError, ValueError, Image.DecompressionBombError) as e:
        logger.warning(f"Could not render {cam_method} overlay for '{file_name}': {e}")
        cam_image = None

    return IndividualInspection(
        file_name=file_name,
        predicted_class=predicted,
        confidence=confidence,
        uncertainty_score=uncertainty,
        cam_method=cam_method,
        cam_image=cam_image,
    )


def render_cam_overlay(image_bytes: bytes, rng: np.random.Generator) -> str:
    """
    Blends a synthetic activation heatmap over the image.

    The heatmap is a Gaussian hot-spot at a random location, colored from
    blue (cold) to red (hot).

    Returns:
        PNG data URL of the overlay.
    """
    with Image.open(io.BytesIO(image_bytes)) as img:
        base = img.convert("RGB")
    base.thumbnail((CAM_MAX_SIDE, CAM_MAX_SIDE))

    width, height = base.size
    heat = _gaussian_heat(width, height, rng)

    colored = np.stack(
        [heat, 1.0 - np.abs(2.0 * heat - 1.0), 1.0 - heat], axis=-1
    )
    heat_img = Image.fromarray((colored * 255).astype(np.uint8))

    overlay = Image.blend(base, heat_img, CAM_ALPHA)
    buffer = io.BytesIO()
    overlay.save(buffer, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buffer.getvalue()).decode("ascii")


def _gaussian_heat(width: int, height: int, rng: np.random.Generator) -> np.ndarray:
    cx = rng.uniform(0.25, 0.75) * width
    cy = rng.uniform(0.25, 0.75) * height
    sigma = max(1.0, rng.uniform(0.15, 0.3) * max(width, height))

    ys, xs = np.mgrid[0:height, 0:width]
    heat = np.exp(-((xs - cx) ** 2 + (ys - cy) ** 2) / (2.0 * sigma**2))
    return heat / heat.max()
