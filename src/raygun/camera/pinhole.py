"""Pinhole camera model for primary ray generation.

The camera sits at the world origin looking down -z. Its image plane is a
viewport of height ``viewport_height`` and width
``viewport_height * aspect_ratio`` placed ``focal_length`` in front of the
origin:

    horizontal = (viewport_width, 0, 0)
    vertical = (0, viewport_height, 0)
    lower_left_corner = origin - horizontal/2 - vertical/2 - (0, 0, focal_length)

Normalized image coordinates (u, v) in [0, 1]^2 select a point on the
viewport, with (0, 0) at the lower-left and (1, 1) at the upper-right.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from raygun.camera.pinhole import PinholeCamera, setup_camera, get_ray
    >>> camera = PinholeCamera(aspect_ratio=16.0 / 9.0)
    >>> setup_camera(camera)
    >>> @ti.kernel
    ... def render():
    ...     ray = get_ray(0.5, 0.5)  # Ray through image center, direction (0, 0, -1)
"""

import math
from dataclasses import dataclass

import taichi as ti

from raygun.core.ray import Ray, make_ray, real

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass
class PinholeCamera:
    """Configuration for a pinhole (perspective) camera.

    Attributes:
        aspect_ratio: Width divided by height of the output image.
        viewport_height: Height of the image plane in world units.
        focal_length: Distance from the origin to the image plane.
    """

    aspect_ratio: float = 16.0 / 9.0
    viewport_height: float = 2.0
    focal_length: float = 1.0

    def __post_init__(self) -> None:
        for name in ("aspect_ratio", "viewport_height", "focal_length"):
            value = float(getattr(self, name))
            if not math.isfinite(value) or value <= 0.0:
                raise ValueError(f"{name} must be a finite positive number, got {value}")
            setattr(self, name, value)

    @property
    def viewport_width(self) -> float:
        return self.viewport_height * self.aspect_ratio


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_origin = ti.Vector.field(3, dtype=real, shape=())
_viewport_horizontal = ti.Vector.field(3, dtype=real, shape=())  # Full width
_viewport_vertical = ti.Vector.field(3, dtype=real, shape=())  # Full height
_lower_left_corner = ti.Vector.field(3, dtype=real, shape=())


# =============================================================================
# Camera Setup (Python-side, called once per camera configuration)
# =============================================================================


def setup_camera(camera: PinholeCamera) -> None:
    """Initialize camera state from configuration.

    Must be called before rendering; writes to Taichi fields and so must be
    called from Python, not from within a kernel.

    Args:
        camera: Camera configuration.
    """
    origin = (0.0, 0.0, 0.0)
    horizontal = (camera.viewport_width, 0.0, 0.0)
    vertical = (0.0, camera.viewport_height, 0.0)
    lower_left = (
        origin[0] - horizontal[0] / 2.0,
        origin[1] - vertical[1] / 2.0,
        origin[2] - camera.focal_length,
    )

    _camera_origin[None] = origin
    _viewport_horizontal[None] = horizontal
    _viewport_vertical[None] = vertical
    _lower_left_corner[None] = lower_left


# =============================================================================
# Ray Generation
# =============================================================================


@ti.func
def get_ray(u: real, v: real) -> Ray:
    """Generate a ray through normalized image coordinates (u, v).

    - u = 0: left edge, u = 1: right edge
    - v = 0: bottom edge, v = 1: top edge

    Args:
        u: Horizontal coordinate in [0, 1].
        v: Vertical coordinate in [0, 1].

    Returns:
        A Ray from the camera origin toward the viewport point. The
        direction is not normalized.
    """
    origin = _camera_origin[None]
    point_on_viewport = (
        _lower_left_corner[None] + u * _viewport_horizontal[None] + v * _viewport_vertical[None]
    )
    return make_ray(origin, point_on_viewport - origin)


# =============================================================================
# Utility Functions
# =============================================================================


def get_camera_info() -> dict[str, tuple[float, float, float]]:
    """Get current camera state for debugging.

    Returns:
        Dictionary with origin, horizontal, vertical, lower_left.
    """
    origin_vec = _camera_origin[None]
    h_vec = _viewport_horizontal[None]
    vert_vec = _viewport_vertical[None]
    ll_vec = _lower_left_corner[None]

    return {
        "origin": (float(origin_vec[0]), float(origin_vec[1]), float(origin_vec[2])),
        "horizontal": (float(h_vec[0]), float(h_vec[1]), float(h_vec[2])),
        "vertical": (float(vert_vec[0]), float(vert_vec[1]), float(vert_vec[2])),
        "lower_left": (float(ll_vec[0]), float(ll_vec[1]), float(ll_vec[2])),
    }
