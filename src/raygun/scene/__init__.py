"""Scene module for sphere storage, material tracking and demo worlds.

Components:
    intersection: Sphere storage in Taichi fields and closest-hit queries
    manager: Unified scene manager coordinating spheres and materials
    default_scene: The three-spheres-on-a-ground-plane demo world

Scene data is organized for kernel access as structure-of-arrays fields;
spheres are tested in the order they were uploaded.
"""

from .default_scene import create_default_scene, create_default_world
from .intersection import (
    MAX_SPHERES,
    T_MAX,
    T_MIN,
    HitInfo,
    add_sphere,
    clear_scene,
    get_sphere_count,
    intersect,
    intersect_scene,
)
from .manager import (
    MAX_MATERIALS,
    MaterialInfo,
    MaterialType,
    SceneConfig,
    SceneManager,
    SphereInfo,
    get_material_type,
    get_material_type_index,
)

__all__ = [
    # Intersection module
    "HitInfo",
    "add_sphere",
    "clear_scene",
    "get_sphere_count",
    "intersect",
    "intersect_scene",
    "MAX_SPHERES",
    "T_MIN",
    "T_MAX",
    # Manager module
    "SceneManager",
    "MaterialType",
    "MaterialInfo",
    "SphereInfo",
    "SceneConfig",
    "MAX_MATERIALS",
    "get_material_type",
    "get_material_type_index",
    # Default scene
    "create_default_world",
    "create_default_scene",
]
