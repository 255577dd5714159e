"""Lambertian (ideal diffuse) material implementation.

A diffuse surface scatters the incoming ray towards ``normal + r`` where
``r`` is a uniformly distributed unit vector. Adding a unit-sphere sample to
the normal yields a cosine-weighted distribution of outgoing directions, so
the attenuation of every bounce is simply the albedo and no absorption is
modeled.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from raygun.materials.lambertian import Lambertian, scatter_lambertian
    >>> red = Lambertian((0.7, 0.3, 0.3))
    >>> # Within a Taichi kernel:
    >>> # state, direction, attenuation, did_scatter = scatter_lambertian(
    >>> #     state, albedo, normal
    >>> # )
"""

from collections.abc import Sequence
from dataclasses import dataclass

import taichi as ti

from raygun.core.ray import near_zero, random_unit_vector, real, vec3


def check_albedo(albedo: Sequence[float]) -> tuple[float, float, float]:
    """Validate an RGB albedo.

    Args:
        albedo: The reflectance as (R, G, B).

    Returns:
        The albedo as a tuple of floats.

    Raises:
        ValueError: If there are not three components or any component is
            outside [0, 1].
    """
    try:
        components = tuple(float(c) for c in albedo)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Albedo must be a sequence of 3 numbers, got {albedo!r}") from e
    if len(components) != 3:
        raise ValueError(f"Albedo must have 3 components, got {len(components)}")
    for i, component in enumerate(components):
        if not 0.0 <= component <= 1.0:
            raise ValueError(
                f"Albedo component {i} = {component} is outside [0, 1]. "
                "This would violate energy conservation."
            )
    return components  # type: ignore[return-value]


@dataclass(frozen=True)
class Lambertian:
    """Diffuse material descriptor.

    Attributes:
        albedo: The diffuse reflectance color (R, G, B), each in [0, 1].
    """

    albedo: tuple[float, float, float]

    def __post_init__(self) -> None:
        object.__setattr__(self, "albedo", check_albedo(self.albedo))


@ti.func
def scatter_lambertian(state: ti.u32, albedo: vec3, normal: vec3):
    """Sample a scattered direction for a Lambertian surface.

    The scattered ray starts at the hit point and travels along
    ``normal + random_unit_vector()``. When the sample almost cancels the
    normal the direction falls back to the normal itself, keeping the next
    ray's direction non-zero.

    Args:
        state: The current random stream state.
        albedo: The diffuse reflectance color.
        normal: The unit surface normal, facing the incoming ray.

    Returns:
        A tuple (state, scattered_direction, attenuation, did_scatter);
        attenuation is exactly the albedo and did_scatter is always 1.
    """
    drawn, offset = random_unit_vector(state)
    scattered_direction = normal + offset

    if near_zero(scattered_direction):
        scattered_direction = normal

    did_scatter = 1
    return drawn, scattered_direction, albedo, did_scatter


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of Lambertian materials in the scene
MAX_LAMBERTIAN_MATERIALS = 256

lambertian_albedos = ti.Vector.field(3, dtype=real, shape=MAX_LAMBERTIAN_MATERIALS)
num_lambertian_materials = ti.field(dtype=ti.i32, shape=())


def clear_lambertian_materials() -> None:
    """Clear all Lambertian materials."""
    num_lambertian_materials[None] = 0


def add_lambertian_material(albedo: Sequence[float]) -> int:
    """Add a Lambertian material to the material registry.

    Args:
        albedo: The diffuse reflectance color as (R, G, B).

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If any albedo component is outside [0, 1].
    """
    albedo = check_albedo(albedo)

    idx = num_lambertian_materials[None]
    if idx >= MAX_LAMBERTIAN_MATERIALS:
        raise RuntimeError(
            f"Maximum number of Lambertian materials ({MAX_LAMBERTIAN_MATERIALS}) exceeded"
        )

    lambertian_albedos[idx] = albedo
    num_lambertian_materials[None] = idx + 1
    return idx


def get_lambertian_material_count() -> int:
    """Get the number of Lambertian materials in the registry."""
    return int(num_lambertian_materials[None])


@ti.func
def get_lambertian_albedo(material_idx: ti.i32) -> vec3:
    """Get the albedo for a Lambertian material by index."""
    return lambertian_albedos[material_idx]
