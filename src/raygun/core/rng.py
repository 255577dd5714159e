"""Explicit random number streams for Taichi kernels.

Every stochastic device function in raygun takes the current stream state
as an argument and returns the advanced state together with its sample, so
there is no process-wide generator. A stream is a single 32-bit word that
is advanced with the PCG output permutation hash.

The render kernels open one stream per pixel with ``seed_stream(seed,
pixel_index)``. Pixels therefore draw from independent sequences, and an
image depends only on the seed, not on the order in which Taichi schedules
the pixel loop.

Example:
    >>> @ti.kernel
    ... def draw(seed: ti.u32) -> real:
    ...     state = seed_stream(seed, ti.u32(0))
    ...     state, u = random_real(state)
    ...     return u
"""

import math

import taichi as ti

real = ti.f64

# PCG-RXS-M-XS constants (Jarzynski & Olano, "Hash Functions for GPU Rendering")
_PCG_MULTIPLIER = 747796405
_PCG_INCREMENT = 2891336453
_PCG_OUTPUT_MULTIPLIER = 277803737

# Golden-ratio constant used to spread seeds across the hash input space
_SEED_MIX = 0x9E3779B9

_INV_TWO_POW_32 = 1.0 / 4294967296.0

MAX_SEED = 2**32 - 1


def check_seed(seed: int) -> int:
    """Validate a host-side seed value.

    Args:
        seed: The seed to validate.

    Returns:
        The seed as a plain int.

    Raises:
        ValueError: If the seed is not an integer in [0, 2**32 - 1].
    """
    if isinstance(seed, bool) or not isinstance(seed, int):
        raise ValueError(f"Seed must be an integer, got {seed!r}")
    if seed < 0 or seed > MAX_SEED:
        raise ValueError(f"Seed {seed} is outside [0, {MAX_SEED}]")
    return int(seed)


@ti.func
def pcg_hash(value: ti.u32) -> ti.u32:
    """Hash a 32-bit word with the PCG output permutation.

    Args:
        value: The input word.

    Returns:
        The hashed word.
    """
    state = value * ti.u32(_PCG_MULTIPLIER) + ti.u32(_PCG_INCREMENT)
    word = ((state >> ((state >> ti.u32(28)) + ti.u32(4))) ^ state) * ti.u32(
        _PCG_OUTPUT_MULTIPLIER
    )
    return (word >> ti.u32(22)) ^ word


@ti.func
def seed_stream(seed: ti.u32, stream_id: ti.u32) -> ti.u32:
    """Open an independent stream for one work item.

    Args:
        seed: The render seed.
        stream_id: Identifier of the work item (e.g. the pixel index).

    Returns:
        The initial stream state.
    """
    return pcg_hash(stream_id ^ (seed * ti.u32(_SEED_MIX)))


@ti.func
def random_real(state: ti.u32):
    """Draw a uniform sample in [0, 1).

    Returns:
        A tuple (state, u) with the advanced state and the sample.
    """
    next_state = pcg_hash(state)
    u = ti.cast(next_state, real) * _INV_TWO_POW_32
    return next_state, u


@ti.func
def random_normal_pair(state: ti.u32):
    """Draw two independent standard normal samples (Box-Muller).

    Returns:
        A tuple (state, z0, z1).
    """
    drawn, u1 = random_real(state)
    drawn, u2 = random_real(drawn)
    # 1 - u1 lies in (0, 1], keeping the logarithm finite
    radius = ti.sqrt(-2.0 * ti.log(1.0 - u1))
    angle = 2.0 * math.pi * u2
    return drawn, radius * ti.cos(angle), radius * ti.sin(angle)


@ti.func
def random_normal(state: ti.u32):
    """Draw one standard normal sample.

    Returns:
        A tuple (state, z).
    """
    drawn, z0, _ = random_normal_pair(state)
    return drawn, z0
