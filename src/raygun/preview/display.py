"""Matplotlib-based preview display for rendered images.

Example:
    >>> from raygun.preview.display import show_preview
    >>> image = renderer.render()
    >>> show_preview(image, title="Spheres")
"""

from typing import Optional

import numpy as np
import numpy.typing as npt

from raygun.preview.export import compute_rmse


def process_image_for_display(image: npt.NDArray[np.floating]) -> npt.NDArray[np.float64]:
    """Clamp a gamma-encoded image to [0, 1] for imshow.

    Raises:
        ValueError: If the array is not shaped (H, W, 3).
    """
    image = np.asarray(image, dtype=np.float64)
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected an image of shape (H, W, 3), got {image.shape}")
    return np.clip(image, 0.0, 1.0)


def show_preview(
    image: npt.NDArray[np.floating],
    *,
    title: Optional[str] = None,
    figsize: tuple[float, float] = (8, 4.5),
    block: bool = True,
) -> None:
    """Display a rendered image as a Matplotlib figure.

    Args:
        image: Gamma-encoded image array of shape (H, W, 3).
        title: Custom title (default shows the resolution).
        figsize: Figure size in inches (width, height).
        block: Whether to block execution until figure is closed.
    """
    import matplotlib.pyplot as plt

    display_image = process_image_for_display(image)

    fig, ax = plt.subplots(1, 1, figsize=figsize)
    ax.imshow(display_image)
    ax.axis("off")

    if title is None:
        height, width = display_image.shape[:2]
        title = f"Render Preview - {width}x{height}"
    ax.set_title(title)

    plt.tight_layout()
    plt.show(block=block)


def show_comparison(
    image_a: npt.NDArray[np.floating],
    image_b: npt.NDArray[np.floating],
    *,
    labels: tuple[str, str] = ("A", "B"),
    diff_scale: float = 10.0,
    figsize: tuple[float, float] = (16, 4),
    block: bool = True,
) -> float:
    """Display side-by-side comparison of two images with difference view.

    Useful for comparing renders of the same scene made with different
    seeds or sample counts.

    Args:
        image_a: First image array (H, W, 3).
        image_b: Second image array (H, W, 3).
        labels: Labels for the two images.
        diff_scale: Scale factor for difference amplification.
        figsize: Figure size in inches.
        block: Whether to block execution until figure is closed.

    Returns:
        RMSE (root mean squared error) between the two images.
    """
    import matplotlib.pyplot as plt

    display_a = process_image_for_display(image_a)
    display_b = process_image_for_display(image_b)
    rmse = compute_rmse(display_a, display_b)

    diff_amplified = np.clip(np.abs(display_a - display_b) * diff_scale, 0.0, 1.0)

    fig, axes = plt.subplots(1, 3, figsize=figsize)

    axes[0].imshow(display_a)
    axes[0].set_title(labels[0])
    axes[0].axis("off")

    axes[1].imshow(display_b)
    axes[1].set_title(labels[1])
    axes[1].axis("off")

    axes[2].imshow(diff_amplified)
    axes[2].set_title(f"Difference ({diff_scale}x) - RMSE: {rmse:.6f}")
    axes[2].axis("off")

    plt.tight_layout()
    plt.show(block=block)

    return rmse
