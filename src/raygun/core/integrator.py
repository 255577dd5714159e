"""Path tracing integrator for Monte Carlo light transport.

Radiance along a camera ray is estimated by following a single path: at
every hit the surface material scatters the ray, the path throughput is
multiplied by the material's attenuation, and the walk continues until the
ray escapes into the sky, is absorbed, or runs out of bounces. Escaped rays
pick up the sky gradient; absorbed and exhausted paths contribute black.
There are no light sources: all illumination comes from the sky.

The walk is an iterative loop with an explicit throughput, so path length
is bounded by ``max_depth`` without recursion.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from raygun.core.integrator import trace_ray
    >>> from raygun.scene.manager import SceneManager
    >>> scene = SceneManager()  # Empty scene, every ray sees the sky
    >>> trace_ray((0.0, 0.0, 0.0), (0.0, 1.0, 0.0))
    (0.5, 0.7, 1.0)
"""

from collections.abc import Sequence

import taichi as ti
import taichi.math as tm

from raygun.camera.pinhole import get_ray
from raygun.core.ray import Ray, check_direction, check_vector, make_ray, normalize, real, vec3
from raygun.core.rng import check_seed, random_real, seed_stream
from raygun.materials.lambertian import get_lambertian_albedo, scatter_lambertian
from raygun.materials.metal import get_metal_albedo, get_metal_fuzz, scatter_metal
from raygun.scene.intersection import T_MAX, T_MIN, intersect_scene
from raygun.scene.manager import (
    MaterialType,
    get_material_type,
    get_material_type_index,
)

# =============================================================================
# Rendering Constants
# =============================================================================

# Default maximum number of ray-scene intersections per path
MAX_DEPTH = 50

# Sky gradient end points, blended by the ray's elevation
SKY_HORIZON_COLOR = (1.0, 1.0, 1.0)
SKY_ZENITH_COLOR = (0.5, 0.7, 1.0)


# =============================================================================
# Background
# =============================================================================


@ti.func
def background(direction: vec3) -> vec3:
    """Sky color seen along a direction that escapes the scene.

    Linear blend from white to light blue with t = 0.5 * (unit.y + 1), so
    straight down is white, the horizon is halfway and straight up is
    (0.5, 0.7, 1.0).
    """
    unit = normalize(direction)
    t = 0.5 * (unit.y + 1.0)
    horizon = vec3(SKY_HORIZON_COLOR[0], SKY_HORIZON_COLOR[1], SKY_HORIZON_COLOR[2])
    zenith = vec3(SKY_ZENITH_COLOR[0], SKY_ZENITH_COLOR[1], SKY_ZENITH_COLOR[2])
    return (1.0 - t) * horizon + t * zenith


# =============================================================================
# Material Dispatch
# =============================================================================


@ti.func
def _scatter_material(
    state: ti.u32,
    material_id: ti.i32,
    incident_direction: vec3,
    normal: vec3,
    absorb_below: ti.i32,
):
    """Dispatch to the appropriate material scattering function.

    Args:
        state: The current random stream state.
        material_id: The unified material ID.
        incident_direction: The incoming ray direction.
        normal: The unit surface normal, facing the incoming ray.
        absorb_below: 1 to absorb metal reflections that point below the
            surface, 0 to keep following them.

    Returns:
        A tuple of (state, scattered_direction, attenuation, did_scatter).
        Unknown material IDs absorb the ray.
    """
    mat_type = get_material_type(material_id)
    type_index = get_material_type_index(material_id)

    drawn = state
    scattered_direction = vec3(0.0, 0.0, 0.0)
    attenuation = vec3(0.0, 0.0, 0.0)
    did_scatter = 0

    if mat_type == int(MaterialType.LAMBERTIAN):
        albedo = get_lambertian_albedo(type_index)
        drawn, scattered_direction, attenuation, did_scatter = scatter_lambertian(
            state, albedo, normal
        )

    elif mat_type == int(MaterialType.METAL):
        albedo = get_metal_albedo(type_index)
        fuzz = get_metal_fuzz(type_index)
        drawn, scattered_direction, attenuation, did_scatter = scatter_metal(
            state, albedo, fuzz, incident_direction, normal, absorb_below
        )

    return drawn, scattered_direction, attenuation, did_scatter


# =============================================================================
# Path Tracing Core
# =============================================================================


@ti.func
def ray_color(state: ti.u32, ray: Ray, max_depth: ti.i32, absorb_below: ti.i32):
    """Estimate the radiance arriving along a ray.

    Args:
        state: The current random stream state.
        ray: The ray to follow.
        max_depth: Maximum number of scene intersections; 0 or less
            returns black without touching the scene.
        absorb_below: Forwarded to metal scattering.

    Returns:
        A tuple (state, color).
    """
    rng = state
    origin = ray.origin
    direction = ray.direction

    color = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)

    # Active flag instead of break; the path is done once it escapes or dies
    active = 1

    for _ in range(max_depth):
        if active == 1:
            rec = intersect_scene(make_ray(origin, direction), T_MIN, T_MAX)

            if rec.hit == 0:
                color = throughput * background(direction)
                active = 0
            else:
                rng, scattered_direction, attenuation, did_scatter = _scatter_material(
                    rng, rec.material_id, direction, rec.normal, absorb_below
                )
                if did_scatter == 0:
                    active = 0
                else:
                    throughput *= attenuation
                    origin = rec.point
                    direction = scattered_direction

    # A path still active here exhausted its bounces: color stays black
    return rng, color


@ti.kernel
def _trace_kernel(
    origin: vec3,
    direction: vec3,
    max_depth: ti.i32,
    seed: ti.u32,
    absorb_below: ti.i32,
) -> vec3:
    state = seed_stream(seed, ti.u32(0))
    _, color = ray_color(state, make_ray(origin, direction), max_depth, absorb_below)
    return color


def trace_ray(
    origin: Sequence[float],
    direction: Sequence[float],
    max_depth: int = MAX_DEPTH,
    seed: int = 0,
    absorb_below: bool = False,
) -> tuple[float, float, float]:
    """Estimate the radiance along one ray from Python.

    Uses stream 0 of the given seed, so the result is reproducible. For
    whole images use render_rows(), which evaluates all pixels in parallel.

    Args:
        origin: The ray origin.
        direction: The ray direction; must not be the zero vector.
        max_depth: Maximum number of scene intersections.
        seed: Seed of the random stream.
        absorb_below: Absorb metal reflections that point below the surface.

    Returns:
        Tuple of (R, G, B) linear radiance.

    Raises:
        ValueError: If the direction is the zero vector or the seed is invalid.
    """
    origin = check_vector(origin, "origin")
    direction = check_direction(direction)
    seed = check_seed(seed)

    color = _trace_kernel(
        vec3(*origin), vec3(*direction), int(max_depth), seed, int(bool(absorb_below))
    )
    return (float(color[0]), float(color[1]), float(color[2]))


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def render_rows(
    pixels: ti.types.ndarray(),
    linear: ti.types.ndarray(),
    row_start: ti.i32,
    row_end: ti.i32,
    width: ti.i32,
    height: ti.i32,
    samples_per_pixel: ti.i32,
    max_depth: ti.i32,
    seed: ti.u32,
    absorb_below: ti.i32,
):
    """Render the image rows [row_start, row_end).

    Rows are numbered from the top of the image. Each pixel draws from its
    own stream, ``seed_stream(seed, row * width + col)``, so the result does
    not depend on how the image is split into row bands.

    Args:
        pixels: Output (height, width, 3) float64 array, gamma-2 encoded
            and clamped to [0, 1].
        linear: Output (height, width, 3) float64 array of averaged linear
            radiance.
        row_start: First row to render.
        row_end: One past the last row to render.
        width: Image width in pixels.
        height: Image height in pixels.
        samples_per_pixel: Number of jittered samples averaged per pixel.
        max_depth: Maximum number of scene intersections per path.
        seed: Render seed.
        absorb_below: Forwarded to metal scattering.
    """
    for j, i in ti.ndrange((row_start, row_end), width):
        rng = seed_stream(seed, ti.cast(j * width + i, ti.u32))
        total = vec3(0.0, 0.0, 0.0)

        for _ in range(samples_per_pixel):
            rng, du = random_real(rng)
            rng, dv = random_real(rng)
            u = (ti.cast(i, real) + du) / ti.cast(width, real)
            v = (ti.cast(height - 1 - j, real) + dv) / ti.cast(height, real)
            rng, color = ray_color(rng, get_ray(u, v), max_depth, absorb_below)
            total += color

        average = total / ti.cast(samples_per_pixel, real)

        for c in ti.static(range(3)):
            linear[j, i, c] = average[c]
            pixels[j, i, c] = tm.clamp(ti.sqrt(average[c]), 0.0, 1.0)
