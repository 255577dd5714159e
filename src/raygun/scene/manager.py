"""Unified scene manager for coordinating spheres and materials.

This module provides a high-level scene management API that coordinates
sphere storage with material assignment. It tracks which material type
(Lambertian, Metal) each material ID corresponds to, enabling material
dispatch in the path tracer.

The SceneManager maintains:
- A unified material_id space across both material types
- Mapping from material_id to (material_type, type_local_index)
- Loading of Sphere / HittableList worlds into device storage
- Scene serialization to and from plain dictionaries

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from raygun.scene.manager import SceneManager
    >>> scene = SceneManager()
    >>> mat_id = scene.add_lambertian_material(albedo=(0.7, 0.3, 0.3))
    >>> scene.add_sphere(center=(0, 0, -1), radius=0.5, material_id=mat_id)
    0
    >>> # Use get_material_type(mat_id) in kernels for dispatch
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Optional, Union

import taichi as ti
from loguru import logger

from raygun.core.ray import check_vector
from raygun.geometry.hittable_list import HittableList
from raygun.geometry.sphere import Sphere, check_radius
from raygun.materials.lambertian import (
    MAX_LAMBERTIAN_MATERIALS,
    Lambertian,
    add_lambertian_material,
    clear_lambertian_materials,
)
from raygun.materials.metal import (
    MAX_METAL_MATERIALS,
    Metal,
    add_metal_material,
    clear_metal_materials,
)
from raygun.scene.intersection import (
    MAX_SPHERES,
    add_sphere,
    clear_scene,
    get_sphere_count,
)


class MaterialType(IntEnum):
    """Enumeration of supported material types.

    Used for material dispatch in the path tracer to determine which
    scattering function to call.
    """

    LAMBERTIAN = 0
    METAL = 1


# Maximum number of materials across all types
MAX_MATERIALS = 512  # 256 per type * 2 types

# material_types[i] stores the MaterialType for material_id i
material_types = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
# material_type_indices[i] stores the type-local index for material_id i
# (e.g., if material_id 5 is the 2nd metal material, material_type_indices[5] = 1)
material_type_indices = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def _clear_material_tracking() -> None:
    """Clear the material tracking fields."""
    num_materials[None] = 0


@ti.func
def get_material_type(material_id: ti.i32) -> ti.i32:
    """Get the material type for a given material ID.

    This is a Taichi function for use in kernels.

    Args:
        material_id: The unified material ID.

    Returns:
        The material type as an integer (see MaterialType enum).
        Returns -1 for invalid material IDs.
    """
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_types[material_id]
    return result


@ti.func
def get_material_type_index(material_id: ti.i32) -> ti.i32:
    """Get the type-local index for a given material ID.

    This is used to look up material properties in the type-specific
    material arrays (e.g., lambertian_albedos[type_index]).

    Args:
        material_id: The unified material ID.

    Returns:
        The index into the type-specific material array.
        Returns -1 for invalid material IDs.
    """
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_type_indices[material_id]
    return result


@dataclass
class MaterialInfo:
    """Information about a registered material.

    Attributes:
        material_id: The unified material ID.
        material_type: The type of material (Lambertian, Metal).
        type_index: The index within the type-specific material array.
        params: The validated material parameters.
    """

    material_id: int
    material_type: MaterialType
    type_index: int
    params: dict[str, Any]


@dataclass
class SphereInfo:
    """Information about a sphere in the scene.

    Attributes:
        sphere_index: The index in the sphere storage arrays.
        center: The center of the sphere.
        radius: The radius of the sphere.
        material_id: The material ID assigned to the sphere.
    """

    sphere_index: int
    center: tuple[float, float, float]
    radius: float
    material_id: int


@dataclass
class SceneConfig:
    """Configuration for scene serialization.

    Attributes:
        materials: List of material configurations.
        spheres: List of sphere configurations.
    """

    materials: list[dict[str, Any]] = field(default_factory=list)
    spheres: list[dict[str, Any]] = field(default_factory=list)


class SceneManager:
    """Unified scene manager coordinating spheres and materials.

    Only one scene lives on the device at a time: creating a SceneManager or
    calling clear() resets the shared sphere and material storage.

    Attributes:
        materials: List of MaterialInfo for all registered materials.
        spheres: List of SphereInfo for all spheres in the scene.

    Example:
        >>> scene = SceneManager()
        >>> red = scene.add_lambertian_material(albedo=(0.7, 0.3, 0.3))
        >>> gold = scene.add_metal_material(albedo=(0.8, 0.6, 0.2), fuzz=0.8)
        >>> scene.add_sphere((0, 0, -1), 0.5, red)
        0
        >>> scene.add_sphere((1, 0, -1), 0.5, gold)
        1
    """

    def __init__(self) -> None:
        """Initialize an empty scene."""
        self.materials: list[MaterialInfo] = []
        self.spheres: list[SphereInfo] = []
        self._material_ids: dict[Union[Lambertian, Metal], int] = {}
        self._clear_all()

    def _clear_all(self) -> None:
        """Clear all scene data including Taichi fields."""
        clear_scene()
        clear_lambertian_materials()
        clear_metal_materials()
        _clear_material_tracking()
        self.materials.clear()
        self.spheres.clear()
        self._material_ids.clear()

    def clear(self) -> None:
        """Clear the entire scene (spheres and materials).

        Resets all Taichi fields and internal tracking structures.
        """
        self._clear_all()

    # =========================================================================
    # Material Management
    # =========================================================================

    def _register_material(
        self,
        material_type: MaterialType,
        type_index: int,
        params: dict[str, Any],
    ) -> int:
        material_id = num_materials[None]
        if material_id >= MAX_MATERIALS:
            raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

        material_types[material_id] = int(material_type)
        material_type_indices[material_id] = type_index
        num_materials[None] = material_id + 1

        self.materials.append(
            MaterialInfo(
                material_id=material_id,
                material_type=material_type,
                type_index=type_index,
                params=params,
            )
        )
        return material_id

    def add_lambertian_material(self, albedo: tuple[float, float, float]) -> int:
        """Add a Lambertian (diffuse) material to the scene.

        Args:
            albedo: The diffuse reflectance color as (R, G, B) tuple.
                Each component must be in [0, 1].

        Returns:
            The unified material ID for this material.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If any albedo component is outside [0, 1].
        """
        material = Lambertian(albedo)
        type_index = add_lambertian_material(material.albedo)
        return self._register_material(
            MaterialType.LAMBERTIAN, type_index, {"albedo": material.albedo}
        )

    def add_metal_material(
        self,
        albedo: tuple[float, float, float],
        fuzz: float = 0.0,
    ) -> int:
        """Add a metal (specular reflective) material to the scene.

        Args:
            albedo: The reflective color as (R, G, B) tuple.
                Each component must be in [0, 1].
            fuzz: Reflection perturbation in [0, 1]. Default is 0 (perfect mirror).

        Returns:
            The unified material ID for this material.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If any albedo component or fuzz is outside [0, 1].
        """
        material = Metal(albedo, fuzz)
        type_index = add_metal_material(material.albedo, material.fuzz)
        return self._register_material(
            MaterialType.METAL,
            type_index,
            {"albedo": material.albedo, "fuzz": material.fuzz},
        )

    def add_material(self, material: Union[Lambertian, Metal]) -> int:
        """Register a material descriptor, reusing the ID of an equal one.

        Spheres that share a material share its ID, so loading a world
        uploads each distinct material once.

        Raises:
            TypeError: If material is not a Lambertian or Metal.
        """
        if material in self._material_ids:
            return self._material_ids[material]

        if isinstance(material, Lambertian):
            material_id = self.add_lambertian_material(material.albedo)
        elif isinstance(material, Metal):
            material_id = self.add_metal_material(material.albedo, material.fuzz)
        else:
            raise TypeError(f"Unsupported material: {type(material).__name__}")

        self._material_ids[material] = material_id
        return material_id

    def get_material_count(self) -> int:
        """Get the total number of materials in the scene."""
        return int(num_materials[None])

    def get_material_info(self, material_id: int) -> Optional[MaterialInfo]:
        """Get information about a material by ID.

        Returns:
            MaterialInfo for the material, or None if not found.
        """
        if 0 <= material_id < len(self.materials):
            return self.materials[material_id]
        return None

    def get_material_type_python(self, material_id: int) -> Optional[MaterialType]:
        """Get the material type for a given material ID (Python side).

        For kernel-side lookup, use the get_material_type() Taichi function.
        """
        if 0 <= material_id < len(self.materials):
            return self.materials[material_id].material_type
        return None

    # =========================================================================
    # Sphere Management
    # =========================================================================

    def add_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        material_id: int,
    ) -> int:
        """Add a sphere to the scene.

        Args:
            center: The center point of the sphere as (x, y, z).
            radius: The radius of the sphere; must be positive.
            material_id: The unified material ID to assign to the sphere.

        Returns:
            The index of the added sphere.

        Raises:
            RuntimeError: If the maximum number of spheres is exceeded.
            ValueError: If material_id is invalid or the geometry is malformed.
        """
        if material_id < 0 or material_id >= num_materials[None]:
            raise ValueError(f"Invalid material_id: {material_id}")

        center = check_vector(center, "center")
        radius = check_radius(radius)
        sphere_index = add_sphere(center, radius, material_id)

        self.spheres.append(
            SphereInfo(
                sphere_index=sphere_index,
                center=center,
                radius=radius,
                material_id=material_id,
            )
        )
        return sphere_index

    def add_object(self, sphere: Sphere) -> int:
        """Add a Sphere descriptor together with its material."""
        material_id = self.add_material(sphere.material)
        return self.add_sphere(sphere.center, sphere.radius, material_id)

    def load_world(self, world: Union[Sphere, HittableList]) -> None:
        """Replace the scene with the spheres of a world.

        Nested lists are flattened depth-first, which fixes the order in
        which spheres are tested for the closest hit. The world is checked
        in full before anything is uploaded; on error the current scene is
        left untouched.

        Raises:
            RuntimeError: If the world does not fit into device storage.
            TypeError: If world is neither a Sphere nor a HittableList, or
                a sphere carries an unsupported material.
        """
        if not isinstance(world, (Sphere, HittableList)):
            raise TypeError(f"Expected Sphere or HittableList, got {type(world).__name__}")

        spheres = list(world.flatten())
        for sphere in spheres:
            if not isinstance(sphere.material, (Lambertian, Metal)):
                raise TypeError(f"Unsupported material: {type(sphere.material).__name__}")

        # Shared descriptors are uploaded once
        materials = {sphere.material for sphere in spheres}
        self._check_capacity(
            len(spheres),
            sum(isinstance(material, Lambertian) for material in materials),
            sum(isinstance(material, Metal) for material in materials),
        )

        self.clear()
        for sphere in spheres:
            self.add_object(sphere)
        logger.info(
            f"Loaded world: {self.get_sphere_count()} spheres, "
            f"{self.get_material_count()} materials"
        )

    # =========================================================================
    # Scene Queries
    # =========================================================================

    def get_sphere_count(self) -> int:
        """Get the number of spheres in the scene."""
        return get_sphere_count()

    @staticmethod
    def get_max_spheres() -> int:
        """Get the sphere capacity of the device storage."""
        return MAX_SPHERES

    @staticmethod
    def get_max_materials() -> int:
        """Get the capacity of the unified material ID space."""
        return MAX_MATERIALS

    @staticmethod
    def _check_capacity(num_spheres: int, num_lambertian: int, num_metal: int) -> None:
        """Raise RuntimeError unless a scene of this size fits into device storage."""
        if num_spheres > MAX_SPHERES:
            raise RuntimeError(f"Scene has {num_spheres} spheres, maximum is {MAX_SPHERES}")
        if num_lambertian > MAX_LAMBERTIAN_MATERIALS:
            raise RuntimeError(
                f"Scene has {num_lambertian} Lambertian materials, "
                f"maximum is {MAX_LAMBERTIAN_MATERIALS}"
            )
        if num_metal > MAX_METAL_MATERIALS:
            raise RuntimeError(
                f"Scene has {num_metal} metal materials, maximum is {MAX_METAL_MATERIALS}"
            )

    # =========================================================================
    # Scene Serialization
    # =========================================================================

    def to_config(self) -> SceneConfig:
        """Export the scene to a configuration object."""
        config = SceneConfig()

        for mat in self.materials:
            mat_config: dict[str, Any] = {"type": mat.material_type.name.lower()}
            for key, value in mat.params.items():
                mat_config[key] = list(value) if isinstance(value, tuple) else value
            config.materials.append(mat_config)

        for sphere in self.spheres:
            config.spheres.append(
                {
                    "center": list(sphere.center),
                    "radius": sphere.radius,
                    "material_id": sphere.material_id,
                }
            )

        return config

    def from_config(self, config: SceneConfig) -> None:
        """Load a scene from a configuration object.

        The whole configuration is validated first; only then is the
        current scene cleared and replaced. On error the current scene is
        left untouched.

        Raises:
            RuntimeError: If the configuration does not fit into device storage.
            ValueError: If the configuration contains invalid data.
        """
        materials: list[Union[Lambertian, Metal]] = []
        for mat_config in config.materials:
            mat_type = str(mat_config.get("type", "")).lower()
            if mat_type == "lambertian":
                materials.append(Lambertian(mat_config.get("albedo", [0.5, 0.5, 0.5])))
            elif mat_type == "metal":
                materials.append(
                    Metal(
                        mat_config.get("albedo", [0.8, 0.8, 0.8]),
                        mat_config.get("fuzz", 0.0),
                    )
                )
            else:
                raise ValueError(f"Unknown material type: {mat_type}")

        spheres: list[tuple[tuple[float, float, float], float, int]] = []
        for sphere_config in config.spheres:
            material_id = sphere_config.get("material_id", 0)
            if (
                isinstance(material_id, bool)
                or not isinstance(material_id, int)
                or not 0 <= material_id < len(materials)
            ):
                raise ValueError(f"Invalid material_id: {material_id!r}")
            center = check_vector(sphere_config.get("center", [0.0, 0.0, 0.0]), "center")
            radius = check_radius(sphere_config.get("radius", 1.0))
            spheres.append((center, radius, material_id))

        self._check_capacity(
            len(spheres),
            sum(isinstance(material, Lambertian) for material in materials),
            sum(isinstance(material, Metal) for material in materials),
        )

        self.clear()

        # Materials first, spheres refer to them by ID
        for material in materials:
            if isinstance(material, Lambertian):
                self.add_lambertian_material(material.albedo)
            else:
                self.add_metal_material(material.albedo, material.fuzz)

        for center, radius, material_id in spheres:
            self.add_sphere(center, radius, material_id)

        logger.debug(
            f"Scene loaded from config: {len(config.spheres)} spheres, "
            f"{len(config.materials)} materials"
        )

    def to_dict(self) -> dict[str, Any]:
        """Export the scene to a dictionary (e.g. for JSON)."""
        config = self.to_config()
        return {"materials": config.materials, "spheres": config.spheres}

    def from_dict(self, data: dict[str, Any]) -> None:
        """Load a scene from a dictionary produced by to_dict()."""
        config = SceneConfig(
            materials=data.get("materials", []),
            spheres=data.get("spheres", []),
        )
        self.from_config(config)
