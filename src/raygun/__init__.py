"""Raygun: Monte Carlo path tracing of sphere scenes with Taichi.

This package renders a static scene of spheres into an RGB buffer using
recursive path tracing, with support for:
- Diffuse (Lambertian) and fuzzy reflective (metal) materials
- A pinhole viewport camera
- Per-pixel random streams, so renders are reproducible from a seed
- Parallel rendering of row bands into a caller-visible NumPy buffer

Subpackages:
    core: Ray and vector utilities, random streams, integrator, render driver
    geometry: Sphere primitive, aggregate list and ray-sphere intersection
    materials: Lambertian and metal scattering
    scene: Device-side primitive storage and the scene manager
    camera: Pinhole camera ray generation
    preview: Image export and Matplotlib preview

Taichi must be initialised before importing the modules that declare
fields (scene, materials, camera, integrator):

    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from raygun.core.renderer import Renderer, RenderSettings
"""

__version__ = "0.1.0"
