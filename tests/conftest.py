"""Pytest configuration for raygun tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts. Rendering runs in
    double precision, so default_fp must be f64.
    """
    ti.init(arch=ti.cpu, default_fp=ti.f64, random_seed=42)
    yield
    # Note: We don't call ti.reset() here as it can cause issues
    # with subsequent tests if any cleanup happens after


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear scene data before and after each test.

    This ensures tests are isolated from each other.
    """
    # Import here so the modules declare their fields after ti.init()
    from raygun.materials.lambertian import clear_lambertian_materials
    from raygun.materials.metal import clear_metal_materials
    from raygun.scene.intersection import clear_scene
    from raygun.scene.manager import _clear_material_tracking

    def _clear_all():
        clear_scene()
        clear_lambertian_materials()
        clear_metal_materials()
        _clear_material_tracking()

    _clear_all()

    yield

    _clear_all()

