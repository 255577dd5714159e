"""Image export utilities for rendered images.

Rendered images are float arrays of shape (H, W, 3), already gamma
encoded, with values in [0, 1]. Export quantizes them to 8 bits and writes
them with Pillow; the file format follows the extension (.png, .ppm, ...).

Example:
    >>> from raygun.preview.export import save_image
    >>> image = renderer.render()
    >>> save_image(image, "spheres.png")
"""

from pathlib import Path
from typing import Union

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage


def _check_rgb_image(image: npt.NDArray[np.floating]) -> npt.NDArray[np.floating]:
    image = np.asarray(image)
    if image.ndim != 3 or image.shape[2] != 3 or image.shape[0] == 0 or image.shape[1] == 0:
        raise ValueError(f"Expected an image of shape (H, W, 3), got {image.shape}")
    return image


def image_to_uint8(image: npt.NDArray[np.floating]) -> npt.NDArray[np.uint8]:
    """Quantize a [0, 1] float image to 8 bits.

    Each channel becomes round(255 * clip(x, 0, 1)).

    Args:
        image: Image array of shape (H, W, 3).

    Returns:
        8-bit image array of shape (H, W, 3) with dtype uint8.

    Raises:
        ValueError: If the array is not shaped (H, W, 3).
    """
    image = _check_rgb_image(image)
    clipped = np.clip(image.astype(np.float64), 0.0, 1.0)
    return np.rint(clipped * 255.0).astype(np.uint8)


def save_image(image: npt.NDArray[np.floating], filepath: Union[str, Path]) -> None:
    """Save a [0, 1] float image to a file.

    Args:
        image: Gamma-encoded image array of shape (H, W, 3).
        filepath: Output path; the extension selects the format.

    Raises:
        ValueError: If the array is not shaped (H, W, 3).
    """
    image_uint8 = image_to_uint8(image)
    pil_image = PILImage.fromarray(image_uint8)
    pil_image.save(filepath)


def compute_rmse(
    image_a: npt.NDArray[np.floating],
    image_b: npt.NDArray[np.floating],
) -> float:
    """Compute root mean squared error between two images.

    Args:
        image_a: First image array.
        image_b: Second image array (must have same shape as image_a).

    Returns:
        RMSE value (lower is more similar).

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(f"Image shapes must match: {image_a.shape} vs {image_b.shape}")

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
