"""Ray data structure and vector utilities.

This module provides the Ray dataclass and the vector helpers used by the
intersection, scattering and integration code. Everything runs in double
precision: ``real`` is ``ti.f64`` and ``vec3`` is a 3-vector of reals.

Vectors are used both as positions and as directions; no distinction is
enforced between the two.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from raygun.core.ray import Ray, ray_at, vec3
    >>> @ti.kernel
    ... def probe() -> vec3:
    ...     ray = Ray(origin=vec3(0.0, 0.0, 0.0), direction=vec3(0.0, 0.0, -1.0))
    ...     return ray_at(ray, 5.0)  # (0, 0, -5)
"""

import math
from collections.abc import Sequence

import taichi as ti
import taichi.math as tm

from raygun.core.rng import random_normal, random_normal_pair

real = ti.f64
vec3 = ti.types.vector(3, real)


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray.
        direction: The direction of the ray. It is not required to be unit
            length, but must not be the zero vector.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: real) -> vec3:
    """Compute the point along the ray at parameter t.

    Returns:
        The point ray.origin + t * ray.direction.
    """
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction."""
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def dot(a: vec3, b: vec3) -> real:
    """Compute the dot product of two vectors."""
    return tm.dot(a, b)


@ti.func
def length_squared(v: vec3) -> real:
    """Compute the squared length of a vector."""
    return tm.dot(v, v)


@ti.func
def normalize(v: vec3) -> vec3:
    """Normalize a vector to unit length.

    The caller must guarantee that v is not the zero vector; host entry
    points reject zero directions with check_direction().
    """
    return v / ti.sqrt(length_squared(v))


@ti.func
def reflect(v: vec3, n: vec3) -> vec3:
    """Reflect v about the unit normal n.

    Returns:
        v - 2 * dot(v, n) * n
    """
    return v - 2.0 * tm.dot(v, n) * n


@ti.func
def near_zero(v: vec3) -> ti.i32:
    """Return 1 if all components of v are within 1e-8 of zero."""
    s = 1e-8
    return ti.abs(v.x) < s and ti.abs(v.y) < s and ti.abs(v.z) < s


# =============================================================================
# Random Sampling
# =============================================================================


@ti.func
def random_unit_vector(state: ti.u32):
    """Draw a direction uniformly distributed on the unit sphere.

    Three independent standard normal samples form a spherically symmetric
    vector; normalizing it gives a uniform direction.

    Args:
        state: The current random stream state.

    Returns:
        A tuple (state, direction).
    """
    drawn, x, y = random_normal_pair(state)
    drawn, z = random_normal(drawn)
    return drawn, normalize(vec3(x, y, z))


# =============================================================================
# Host-side validation
# =============================================================================


def check_vector(value: Sequence[float], name: str) -> tuple[float, float, float]:
    """Convert a host-side 3-sequence to a tuple of finite floats.

    Args:
        value: The sequence to convert.
        name: Name used in error messages.

    Returns:
        The components as a tuple of floats.

    Raises:
        ValueError: If value does not have three finite components.
    """
    try:
        components = tuple(float(c) for c in value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"{name} must be a sequence of 3 numbers, got {value!r}") from e
    if len(components) != 3:
        raise ValueError(f"{name} must have 3 components, got {len(components)}")
    if not all(math.isfinite(c) for c in components):
        raise ValueError(f"{name} must be finite, got {components}")
    return components  # type: ignore[return-value]


def check_direction(direction: Sequence[float]) -> tuple[float, float, float]:
    """Validate a ray direction before it reaches a kernel.

    Raises:
        ValueError: If the direction is malformed or the zero vector, which
            has no defined normalization.
    """
    components = check_vector(direction, "direction")
    if sum(c * c for c in components) == 0.0:
        raise ValueError("Invalid geometry: ray direction is the zero vector")
    return components
