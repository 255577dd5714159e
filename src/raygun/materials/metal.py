"""Metal (fuzzy specular) material implementation.

Metals reflect the incoming direction about the surface normal:

    R = I - 2(I . N)N

and perturb the reflection by ``fuzz`` times a random unit vector to model
microfacet roughness. A fuzz of 0 gives a perfect mirror.

With a large fuzz the perturbed direction can end up below the surface.
By default such rays are still followed, as in the classic formulation;
callers can instead treat them as absorbed by passing ``absorb_below=1``.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from raygun.materials.metal import Metal, scatter_metal
    >>> gold = Metal((0.8, 0.6, 0.2), fuzz=0.8)
    >>> # Within a Taichi kernel:
    >>> # state, direction, attenuation, did_scatter = scatter_metal(
    >>> #     state, albedo, fuzz, incident, normal, 0
    >>> # )
"""

from collections.abc import Sequence
from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

from raygun.core.ray import near_zero, normalize, random_unit_vector, real, reflect, vec3
from raygun.materials.lambertian import check_albedo


def check_fuzz(fuzz: float) -> float:
    """Validate a metal fuzz value.

    Raises:
        ValueError: If fuzz is outside [0, 1].
    """
    fuzz = float(fuzz)
    if not 0.0 <= fuzz <= 1.0:
        raise ValueError(
            f"Fuzz = {fuzz} is outside [0, 1]. "
            "Fuzz must be between 0 (perfect mirror) and 1 (maximum fuzz)."
        )
    return fuzz


@dataclass(frozen=True)
class Metal:
    """Reflective material descriptor.

    Attributes:
        albedo: The reflective color (R, G, B), each in [0, 1].
        fuzz: Perturbation magnitude of the reflected direction, in [0, 1].
    """

    albedo: tuple[float, float, float]
    fuzz: float = 0.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "albedo", check_albedo(self.albedo))
        object.__setattr__(self, "fuzz", check_fuzz(self.fuzz))


@ti.func
def scatter_metal(
    state: ti.u32,
    albedo: vec3,
    fuzz: real,
    incident_direction: vec3,
    normal: vec3,
    absorb_below: ti.i32,
):
    """Compute the scattered direction for a metal surface.

    Args:
        state: The current random stream state.
        albedo: The reflective color.
        fuzz: The perturbation magnitude in [0, 1].
        incident_direction: The incoming ray direction (any non-zero length).
        normal: The unit surface normal, facing the incoming ray.
        absorb_below: If 1, a scattered direction with
            dot(direction, normal) <= 0 is absorbed instead of followed.

    Returns:
        A tuple (state, scattered_direction, attenuation, did_scatter);
        attenuation equals the albedo.
    """
    reflected = reflect(normalize(incident_direction), normal)

    drawn, offset = random_unit_vector(state)
    scattered_direction = reflected + fuzz * offset

    if near_zero(scattered_direction):
        scattered_direction = reflected

    did_scatter = 1
    if absorb_below == 1 and tm.dot(scattered_direction, normal) <= 0.0:
        did_scatter = 0

    return drawn, scattered_direction, albedo, did_scatter


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of metal materials in the scene
MAX_METAL_MATERIALS = 256

metal_albedos = ti.Vector.field(3, dtype=real, shape=MAX_METAL_MATERIALS)
metal_fuzzes = ti.field(dtype=real, shape=MAX_METAL_MATERIALS)
num_metal_materials = ti.field(dtype=ti.i32, shape=())


def clear_metal_materials() -> None:
    """Clear all metal materials."""
    num_metal_materials[None] = 0


def add_metal_material(albedo: Sequence[float], fuzz: float = 0.0) -> int:
    """Add a metal material to the material registry.

    Args:
        albedo: The reflective color as (R, G, B).
        fuzz: The perturbation magnitude in [0, 1]. Default is a perfect mirror.

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If any albedo component or the fuzz is outside [0, 1].
    """
    albedo = check_albedo(albedo)
    fuzz = check_fuzz(fuzz)

    idx = num_metal_materials[None]
    if idx >= MAX_METAL_MATERIALS:
        raise RuntimeError(f"Maximum number of metal materials ({MAX_METAL_MATERIALS}) exceeded")

    metal_albedos[idx] = albedo
    metal_fuzzes[idx] = fuzz
    num_metal_materials[None] = idx + 1
    return idx


def get_metal_material_count() -> int:
    """Get the number of metal materials in the registry."""
    return int(num_metal_materials[None])


@ti.func
def get_metal_albedo(material_idx: ti.i32) -> vec3:
    """Get the albedo for a metal material by index."""
    return metal_albedos[material_idx]


@ti.func
def get_metal_fuzz(material_idx: ti.i32) -> real:
    """Get the fuzz for a metal material by index."""
    return metal_fuzzes[material_idx]
