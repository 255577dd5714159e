"""Default demo world: three spheres resting on a large ground sphere.

The world consists of:
- Center: a reddish diffuse sphere
- Ground: a radius-100 yellowish diffuse sphere below the scene
- Left: a silver metal sphere with slight fuzz
- Right: a gold metal sphere with strong fuzz

All spheres sit at z = -1 in front of the default camera.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from raygun.scene.default_scene import create_default_scene
    >>> from raygun.camera.pinhole import setup_camera
    >>>
    >>> scene, camera = create_default_scene()
    >>> setup_camera(camera)
    >>> # Now render using the scene and camera
"""

from raygun.camera.pinhole import PinholeCamera
from raygun.geometry.hittable_list import HittableList
from raygun.geometry.sphere import Sphere
from raygun.materials.lambertian import Lambertian
from raygun.materials.metal import Metal
from raygun.scene.manager import SceneManager

# =============================================================================
# Default World Constants
# =============================================================================

GROUND_ALBEDO = (0.8, 0.8, 0.0)
CENTER_ALBEDO = (0.7, 0.3, 0.3)

SILVER_ALBEDO = (0.8, 0.8, 0.8)
SILVER_FUZZ = 0.3

GOLD_ALBEDO = (0.8, 0.6, 0.2)
GOLD_FUZZ = 0.8


# =============================================================================
# Default World Factory
# =============================================================================


def create_default_world() -> HittableList:
    """Build the demo world as a host-side HittableList.

    Returns:
        A list of four spheres in test order: center, ground, left, right.
    """
    ground = Lambertian(GROUND_ALBEDO)
    center = Lambertian(CENTER_ALBEDO)
    left = Metal(SILVER_ALBEDO, SILVER_FUZZ)
    right = Metal(GOLD_ALBEDO, GOLD_FUZZ)

    return HittableList(
        [
            Sphere((0.0, 0.0, -1.0), 0.5, center),
            Sphere((0.0, -100.5, -1.0), 100.0, ground),
            Sphere((-1.0, 0.0, -1.0), 0.5, left),
            Sphere((1.0, 0.0, -1.0), 0.5, right),
        ]
    )


def create_default_scene(
    aspect_ratio: float = 16.0 / 9.0,
) -> tuple[SceneManager, PinholeCamera]:
    """Upload the demo world and create a matching camera.

    Args:
        aspect_ratio: Image aspect ratio for the camera.

    Returns:
        Tuple of (scene, camera). The camera is not set up yet; call
        setup_camera() or hand it to a Renderer.
    """
    scene = SceneManager()
    scene.load_world(create_default_world())
    camera = PinholeCamera(aspect_ratio=aspect_ratio)
    return scene, camera
