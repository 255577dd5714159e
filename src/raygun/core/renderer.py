"""Render driver: image settings, row-band scheduling and progress reporting.

The Renderer turns RenderSettings into calls of the render_rows kernel. The
image is split into bands of ``rows_per_batch`` rows; each band is a
parallel kernel launch over disjoint pixels with independent random
streams, and the unit after which progress is reported. Because every
pixel's stream depends only on the seed and the pixel index, the image is
identical for every band size.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from raygun.core.renderer import Renderer, RenderSettings
    >>> from raygun.scene.default_scene import create_default_scene
    >>>
    >>> scene, camera = create_default_scene()
    >>> renderer = Renderer(RenderSettings(width=400, samples_per_pixel=10), camera)
    >>> image = renderer.render()
    >>> image.shape
    (225, 400, 3)
"""

import math
import time
from collections.abc import Callable, Generator
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Optional, Union

import numpy as np
import numpy.typing as npt
from loguru import logger

from raygun.camera.pinhole import PinholeCamera, setup_camera
from raygun.core.integrator import render_rows
from raygun.core.rng import check_seed

# Callback receives (rows_done, total_rows)
ProgressCallback = Callable[[int, int], None]


@dataclass
class RenderSettings:
    """Image and sampling configuration.

    Attributes:
        width: Image width in pixels.
        aspect_ratio: Width divided by height; the height is derived from it.
        samples_per_pixel: Number of jittered samples averaged per pixel.
        max_depth: Maximum number of scene intersections per path.
        seed: Seed of the per-pixel random streams, in [0, 2**32 - 1].
        rows_per_batch: Rows rendered per kernel launch and progress step.
        metal_absorbs_below_surface: Absorb fuzzy metal reflections that
            end up pointing into the surface instead of following them.
    """

    width: int = 400
    aspect_ratio: float = 16.0 / 9.0
    samples_per_pixel: int = 100
    max_depth: int = 50
    seed: int = 0
    rows_per_batch: int = 16
    metal_absorbs_below_surface: bool = False

    def __post_init__(self) -> None:
        for name in ("width", "samples_per_pixel", "max_depth", "rows_per_batch"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise ValueError(f"{name} must be a positive integer, got {value!r}")

        self.aspect_ratio = float(self.aspect_ratio)
        if not math.isfinite(self.aspect_ratio) or self.aspect_ratio <= 0.0:
            raise ValueError(f"aspect_ratio must be a finite positive number, got {self.aspect_ratio}")

        self.seed = check_seed(self.seed)
        self.metal_absorbs_below_surface = bool(self.metal_absorbs_below_surface)

    @property
    def height(self) -> int:
        """Image height in pixels, at least 1."""
        return max(1, round(self.width / self.aspect_ratio))

    def to_dict(self) -> dict[str, Any]:
        """Export the settings to a dictionary (e.g. for JSON)."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RenderSettings":
        """Create settings from a dictionary; missing keys take defaults.

        Raises:
            ValueError: If the dictionary has unknown keys or invalid values.
        """
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown render settings: {sorted(unknown)}")
        return cls(**data)


class Renderer:
    """Renders the current scene with a pinhole camera.

    The scene is whatever is loaded in device storage (see SceneManager);
    the renderer owns the camera setup and the output buffers.

    Attributes:
        settings: The render settings.
        camera: The camera used for primary rays.
    """

    def __init__(
        self,
        settings: Optional[RenderSettings] = None,
        camera: Optional[PinholeCamera] = None,
    ) -> None:
        self.settings = settings if settings is not None else RenderSettings()
        self.camera = (
            camera if camera is not None else PinholeCamera(aspect_ratio=self.settings.aspect_ratio)
        )
        self._pixels: Optional[npt.NDArray[np.float64]] = None
        self._linear: Optional[npt.NDArray[np.float64]] = None

    @property
    def width(self) -> int:
        return self.settings.width

    @property
    def height(self) -> int:
        return self.settings.height

    @property
    def image(self) -> Optional[npt.NDArray[np.float64]]:
        """Gamma-2 encoded image in [0, 1] from the last render, shape (H, W, 3)."""
        return self._pixels

    @property
    def linear_image(self) -> Optional[npt.NDArray[np.float64]]:
        """Averaged linear radiance from the last render, shape (H, W, 3)."""
        return self._linear

    def render_progressive(self) -> Generator[tuple[int, int], None, None]:
        """Render the image band by band, yielding progress after each band.

        Yields:
            Tuple of (rows_done, total_rows).
        """
        settings = self.settings
        width, height = self.width, self.height

        setup_camera(self.camera)
        pixels = np.zeros((height, width, 3), dtype=np.float64)
        linear = np.zeros((height, width, 3), dtype=np.float64)
        self._pixels = pixels
        self._linear = linear

        logger.info(
            f"Rendering {width}x{height}, {settings.samples_per_pixel} spp, "
            f"max depth {settings.max_depth}, seed {settings.seed}"
        )
        start_time = time.perf_counter()

        for row_start in range(0, height, settings.rows_per_batch):
            row_end = min(row_start + settings.rows_per_batch, height)
            render_rows(
                pixels,
                linear,
                row_start,
                row_end,
                width,
                height,
                settings.samples_per_pixel,
                settings.max_depth,
                settings.seed,
                int(settings.metal_absorbs_below_surface),
            )
            logger.debug(f"Rows {row_start}-{row_end - 1} done")
            yield (row_end, height)

        elapsed_time = time.perf_counter() - start_time
        logger.info(f"Rendering time: {elapsed_time:.2f}s")

    def render(self, callback: Optional[ProgressCallback] = None) -> npt.NDArray[np.float64]:
        """Render the full image.

        Args:
            callback: Optional function called after each row band with
                (rows_done, total_rows).

        Returns:
            The gamma-2 encoded image, shape (height, width, 3), in [0, 1].
        """
        for rows_done, total_rows in self.render_progressive():
            if callback is not None:
                callback(rows_done, total_rows)
        return self._pixels

    def save_image(self, filepath: Union[str, Path]) -> None:
        """Save the last rendered image; the format follows the extension.

        Raises:
            RuntimeError: If nothing has been rendered yet.
        """
        from raygun.preview.export import save_image

        if self._pixels is None:
            raise RuntimeError("No image rendered yet. Call render() first.")
        save_image(self._pixels, filepath)

    def __repr__(self) -> str:
        return (
            f"Renderer(width={self.width}, height={self.height}, "
            f"samples_per_pixel={self.settings.samples_per_pixel})"
        )
