"""Scene-level sphere storage and closest-hit queries.

Spheres are stored in Taichi fields (structure of arrays) in the order in
which they were added. intersect_scene() scans them linearly and keeps the
hit with the strictly smallest t, so when two spheres report the same t the
earlier one wins.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from raygun.scene.intersection import add_sphere, clear_scene, intersect
    >>> clear_scene()
    >>> add_sphere((0.0, 0.0, -1.0), 0.5, material_id=0)
    >>> intersect((0.0, 0.0, 0.0), (0.0, 0.0, -1.0)).t
    0.5
"""

import math
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Optional

import numpy as np
import taichi as ti

from raygun.core.ray import Ray, check_direction, check_vector, real, vec3
from raygun.geometry.sphere import (
    HitRecord,
    SphereGeometry,
    check_radius,
    hit_sphere,
    make_miss_record,
)

# Ray parameter bounds used by the integrator. T_MIN keeps a scattered ray
# from re-hitting the surface it leaves because of floating-point error.
T_MIN = 0.001
T_MAX = math.inf

# Maximum number of spheres supported in the scene
MAX_SPHERES = 1024

sphere_centers = ti.Vector.field(3, dtype=real, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=real, shape=MAX_SPHERES)
sphere_material_ids = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Remove all spheres from the scene.

    Resets the sphere count to zero. Stale field data is overwritten when
    new spheres are added.
    """
    num_spheres[None] = 0


def add_sphere(center: Sequence[float], radius: float, material_id: int = 0) -> int:
    """Add a sphere to the scene.

    Args:
        center: The center point of the sphere.
        radius: The radius of the sphere.
        material_id: The unified material ID to associate with this sphere.

    Returns:
        The index of the added sphere.

    Raises:
        ValueError: If the radius is not positive or the center is malformed.
        RuntimeError: If the maximum number of spheres is exceeded.
    """
    center = check_vector(center, "center")
    radius = check_radius(radius)

    idx = num_spheres[None]
    if idx >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
    sphere_centers[idx] = center
    sphere_radii[idx] = radius
    sphere_material_ids[idx] = material_id
    num_spheres[None] = idx + 1
    return idx


def get_sphere_count() -> int:
    """Get the number of spheres in the scene."""
    return int(num_spheres[None])


@ti.func
def _with_material(rec: HitRecord, material_id: ti.i32) -> HitRecord:
    """Copy a HitRecord, attaching the material of the primitive that was hit."""
    return HitRecord(
        hit=rec.hit,
        t=rec.t,
        point=rec.point,
        normal=rec.normal,
        front_face=rec.front_face,
        material_id=material_id,
    )


@ti.func
def intersect_scene(ray: Ray, t_min: real, t_max: real) -> HitRecord:
    """Find the closest sphere hit along a ray.

    The upper bound handed to each sphere test shrinks to the best t found
    so far; a candidate only replaces the current best if its t is strictly
    smaller.

    Args:
        ray: The ray to test.
        t_min: Minimum t value to consider a valid hit.
        t_max: Maximum t value to consider a valid hit.

    Returns:
        The HitRecord of the closest hit with its material_id filled in, or
        a miss record.
    """
    closest_t = t_max
    result = make_miss_record()

    for i in range(num_spheres[None]):
        sphere = SphereGeometry(center=sphere_centers[i], radius=sphere_radii[i])
        rec = hit_sphere(ray, sphere, t_min, closest_t)
        if rec.hit == 1 and (result.hit == 0 or rec.t < closest_t):
            closest_t = rec.t
            result = _with_material(rec, sphere_material_ids[i])

    return result


# =============================================================================
# Host-side queries
# =============================================================================


@dataclass(frozen=True)
class HitInfo:
    """Host-side copy of a successful intersection.

    Attributes:
        t: The ray parameter of the hit.
        point: The hit point.
        normal: The unit normal, oriented against the ray.
        front_face: Whether the outward-facing side was struck.
        material_id: Unified material ID of the sphere that was hit.
    """

    t: float
    point: tuple[float, float, float]
    normal: tuple[float, float, float]
    front_face: bool
    material_id: int


@ti.kernel
def _intersect_kernel(
    origin: vec3,
    direction: vec3,
    t_min: real,
    t_max: real,
    out: ti.types.ndarray(),
):
    rec = intersect_scene(Ray(origin=origin, direction=direction), t_min, t_max)
    out[0] = ti.cast(rec.hit, real)
    out[1] = rec.t
    for k in ti.static(range(3)):
        out[2 + k] = rec.point[k]
        out[5 + k] = rec.normal[k]
    out[8] = ti.cast(rec.front_face, real)
    out[9] = ti.cast(rec.material_id, real)


def intersect(
    origin: Sequence[float],
    direction: Sequence[float],
    t_min: float = T_MIN,
    t_max: float = T_MAX,
) -> Optional[HitInfo]:
    """Intersect a single ray with the scene from Python.

    Args:
        origin: The ray origin.
        direction: The ray direction; must not be the zero vector.
        t_min: Minimum accepted t.
        t_max: Maximum accepted t.

    Returns:
        The closest hit, or None if the ray hits nothing in [t_min, t_max].

    Raises:
        ValueError: If the direction is the zero vector or t_min > t_max.
    """
    origin = check_vector(origin, "origin")
    direction = check_direction(direction)
    if t_min > t_max:
        raise ValueError(f"t_min ({t_min}) must not exceed t_max ({t_max})")

    out = np.zeros(10, dtype=np.float64)
    _intersect_kernel(vec3(*origin), vec3(*direction), float(t_min), float(t_max), out)
    if out[0] == 0.0:
        return None
    return HitInfo(
        t=float(out[1]),
        point=(float(out[2]), float(out[3]), float(out[4])),
        normal=(float(out[5]), float(out[6]), float(out[7])),
        front_face=bool(out[8]),
        material_id=int(out[9]),
    )
