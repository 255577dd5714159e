"""Preview module for output and visualization.

Components:
    display: Matplotlib-based preview display
    export: 8-bit image export via Pillow

Rendered images are (H, W, 3) float arrays, gamma encoded and in [0, 1];
neither module applies further tone mapping.

Example:
    >>> from raygun.preview import save_image, show_preview
    >>> image = renderer.render()
    >>> show_preview(image)
    >>> save_image(image, "output.png")
"""

from raygun.preview.display import (
    process_image_for_display,
    show_comparison,
    show_preview,
)
from raygun.preview.export import (
    compute_rmse,
    image_to_uint8,
    save_image,
)

__all__ = [
    # Display functions
    "show_preview",
    "show_comparison",
    "process_image_for_display",
    # Export functions
    "save_image",
    "image_to_uint8",
    "compute_rmse",
]
