"""Camera module for primary ray generation.

Components:
    pinhole: Fixed viewport camera at the origin looking down -z

Ray generation uses normalized image coordinates:
    u in [0, 1]: left to right across image
    v in [0, 1]: bottom to top across image
"""

from .pinhole import (
    PinholeCamera,
    get_camera_info,
    get_ray,
    setup_camera,
)

__all__ = [
    "PinholeCamera",
    "setup_camera",
    "get_ray",
    "get_camera_info",
]
