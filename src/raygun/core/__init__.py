"""Core rendering module.

This module contains the fundamental building blocks for path tracing:

Components:
    ray: Ray data structure, vector utilities and host-side validation
    rng: Explicit per-work-item random streams (PCG hash)
    integrator: Radiance integration and the per-pixel render kernels
    renderer: Render settings and the band-by-band render driver

Rays are followed through the scene by an iterative loop that carries the
running attenuation product, bounded by a fixed bounce budget. Stochastic
functions never touch global random state; the stream state is passed in
and returned explicitly.
"""

from .ray import (
    Ray,
    check_direction,
    check_vector,
    dot,
    length_squared,
    make_ray,
    near_zero,
    normalize,
    random_unit_vector,
    ray_at,
    real,
    reflect,
    vec3,
)
from .rng import (
    MAX_SEED,
    check_seed,
    pcg_hash,
    random_normal,
    random_normal_pair,
    random_real,
    seed_stream,
)

# Note: integrator and renderer are NOT imported here; they declare Taichi
# fields and must be imported after ti.init().
#
#   from raygun.core.renderer import Renderer, RenderSettings

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "real",
    "vec3",
    "dot",
    "length_squared",
    "normalize",
    "reflect",
    "near_zero",
    "random_unit_vector",
    "check_vector",
    "check_direction",
    "MAX_SEED",
    "check_seed",
    "pcg_hash",
    "seed_stream",
    "random_real",
    "random_normal",
    "random_normal_pair",
]
