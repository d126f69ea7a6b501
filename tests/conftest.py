"""Pytest configuration for fastray tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts.
    """
    ti.init(arch=ti.cpu, random_seed=42)
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear scene, material, camera and render target state around each test."""
    # Import here so that Taichi is initialized before any field is declared
    from fastray.camera.rays import clear_camera
    from fastray.core.integrator import reset_render_target
    from fastray.materials.dielectric import clear_dielectric_materials
    from fastray.materials.lambertian import clear_lambertian_materials
    from fastray.materials.metal import clear_metal_materials
    from fastray.scene.manager import _clear_material_tracking
    from fastray.scene.world import clear_world

    def _clear_all():
        clear_world()
        clear_lambertian_materials()
        clear_metal_materials()
        clear_dielectric_materials()
        _clear_material_tracking()
        clear_camera()
        reset_render_target()

    _clear_all()
    yield
    _clear_all()


@pytest.fixture
def fresh_scene():
    """Create a fresh SceneManager for a test."""
    from fastray.scene.manager import SceneManager

    scene = SceneManager()
    yield scene
    scene.clear()
