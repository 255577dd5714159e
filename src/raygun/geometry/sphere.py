"""Sphere primitive with ray-sphere intersection.

The ray-sphere intersection solves

    |origin + t * direction - center|^2 = radius^2

which, with oc = origin - center, is the quadratic

    a*t^2 + 2*h*t + c = 0,   a = |direction|^2, h = dot(oc, direction),
                             c = |oc|^2 - radius^2

The smaller root (-h - sqrt(h^2 - a*c)) / a is tried first and the larger
root only if the smaller one lies outside [t_min, t_max].

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from raygun.geometry.sphere import Sphere
    >>> from raygun.materials.lambertian import Lambertian
    >>> ball = Sphere((0.0, 0.0, -1.0), 0.5, Lambertian((0.7, 0.3, 0.3)))
    >>> # Within a Taichi kernel use hit_sphere(ray, SphereGeometry(...), t_min, t_max)
"""

import math
from collections.abc import Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING

import taichi as ti
import taichi.math as tm

from raygun.core.ray import Ray, check_vector, ray_at, real, vec3

if TYPE_CHECKING:
    from raygun.materials import Material


def check_radius(radius: float) -> float:
    """Validate a sphere radius.

    Raises:
        ValueError: If the radius is not a finite positive number.
    """
    radius = float(radius)
    if not math.isfinite(radius) or radius <= 0.0:
        raise ValueError(f"Sphere radius must be a finite positive number, got {radius}")
    return radius


@dataclass(frozen=True)
class Sphere:
    """Sphere descriptor for scene construction.

    Attributes:
        center: The center point (x, y, z).
        radius: The radius; must be positive.
        material: The material of the surface. A material may be shared by
            several spheres.
    """

    center: tuple[float, float, float]
    radius: float
    material: "Material"

    def __post_init__(self) -> None:
        object.__setattr__(self, "center", check_vector(self.center, "center"))
        object.__setattr__(self, "radius", check_radius(self.radius))

    def flatten(self) -> Iterator["Sphere"]:
        """Yield this sphere; lets a lone sphere be used as a world."""
        yield self


@ti.dataclass
class SphereGeometry:
    """Device-side sphere geometry.

    Attributes:
        center: The center point of the sphere.
        radius: The radius of the sphere (positive).
    """

    center: vec3
    radius: real


@ti.dataclass
class HitRecord:
    """Record of a ray-primitive intersection.

    A record with hit == 0 means "no hit"; the other fields are then
    meaningless.

    Attributes:
        hit: 1 if the ray intersected the primitive, 0 otherwise.
        t: The ray parameter of the intersection, within [t_min, t_max].
        point: The intersection point.
        normal: The unit surface normal, oriented against the incoming ray.
        front_face: 1 if the ray struck the outward-facing side.
        material_id: Unified material ID of the primitive, -1 if unknown.
    """

    hit: ti.i32
    t: real
    point: vec3
    normal: vec3
    front_face: ti.i32
    material_id: ti.i32


@ti.func
def make_miss_record() -> HitRecord:
    """Create a HitRecord indicating no intersection."""
    return HitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        front_face=0,
        material_id=-1,
    )


@ti.func
def hit_sphere(ray: Ray, sphere: SphereGeometry, t_min: real, t_max: real) -> HitRecord:
    """Test for ray-sphere intersection.

    Args:
        ray: The ray to test; its direction need not be normalized.
        sphere: The sphere to test against.
        t_min: Minimum accepted ray parameter (inclusive).
        t_max: Maximum accepted ray parameter (inclusive).

    Returns:
        A HitRecord for the nearest accepted root. The material_id is left
        at -1; scene-level queries fill it in.
    """
    oc = ray.origin - sphere.center
    a = tm.dot(ray.direction, ray.direction)
    half_b = tm.dot(oc, ray.direction)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius
    discriminant = half_b * half_b - a * c

    result = make_miss_record()

    if discriminant >= 0.0:
        sqrt_d = ti.sqrt(discriminant)

        root = (-half_b - sqrt_d) / a
        valid = root >= t_min and root <= t_max
        if not valid:
            root = (-half_b + sqrt_d) / a
            valid = root >= t_min and root <= t_max

        if valid:
            point = ray_at(ray, root)
            outward_normal = (point - sphere.center) / sphere.radius

            front_face = 1
            normal = outward_normal
            if tm.dot(ray.direction, outward_normal) >= 0.0:
                front_face = 0
                normal = -outward_normal

            result = HitRecord(
                hit=1,
                t=root,
                point=point,
                normal=normal,
                front_face=front_face,
                material_id=-1,
            )

    return result
