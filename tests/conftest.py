"""Pytest configuration for eyetrace tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.

Test modules import eyetrace inside the test functions: the package declares
Taichi fields at import time, and those must be created after ti.init().
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls, which would
    invalidate every field declared so far.
    """
    ti.init(arch=ti.cpu)
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear scene, material, render target and stream state around each test.

    This ensures tests are isolated from each other.
    """
    # Import here so Taichi is initialized first
    from eyetrace.core.renderer import reset_render_target
    from eyetrace.core.rng import seed_streams
    from eyetrace.materials.lambertian import clear_lambertian_materials
    from eyetrace.materials.metal import clear_metal_materials
    from eyetrace.scene.intersection import clear_scene
    from eyetrace.scene.manager import _clear_material_tracking

    def _clear_all():
        clear_scene()
        clear_lambertian_materials()
        clear_metal_materials()
        _clear_material_tracking()
        reset_render_target()
        seed_streams(seed=42)

    _clear_all()

    yield

    _clear_all()
