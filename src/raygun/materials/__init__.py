"""Materials module for ray scattering.

Components:
    lambertian: Ideal diffuse reflection, attenuation equal to the albedo
    metal: Mirror reflection perturbed by a fuzz factor

Each material provides:
    - A frozen host-side descriptor (Lambertian, Metal) validated on creation
    - A Taichi scatter function returning (state, direction, attenuation,
      did_scatter) with an explicit random stream state
    - A device-side registry (add_*_material, clear_*_materials, get_*)

The set of material kinds is closed; dispatch by MaterialType happens in
the integrator.
"""

from typing import Union

from .lambertian import (
    MAX_LAMBERTIAN_MATERIALS,
    Lambertian,
    add_lambertian_material,
    check_albedo,
    clear_lambertian_materials,
    get_lambertian_albedo,
    get_lambertian_material_count,
    scatter_lambertian,
)
from .metal import (
    MAX_METAL_MATERIALS,
    Metal,
    add_metal_material,
    check_fuzz,
    clear_metal_materials,
    get_metal_albedo,
    get_metal_fuzz,
    get_metal_material_count,
    scatter_metal,
)

Material = Union[Lambertian, Metal]

__all__ = [
    "Material",
    # Lambertian
    "Lambertian",
    "scatter_lambertian",
    "add_lambertian_material",
    "clear_lambertian_materials",
    "get_lambertian_material_count",
    "get_lambertian_albedo",
    "check_albedo",
    "MAX_LAMBERTIAN_MATERIALS",
    # Metal
    "Metal",
    "scatter_metal",
    "add_metal_material",
    "clear_metal_materials",
    "get_metal_material_count",
    "get_metal_albedo",
    "get_metal_fuzz",
    "check_fuzz",
    "MAX_METAL_MATERIALS",
]
