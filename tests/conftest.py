"""Pytest configuration for scene-graph ray tracer tests.

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


@pytest.fixture
def renderer():
    """A fresh headless renderer with a large quad, a unit sphere and a unit box."""
    from src.sgraph.geometry import Box, Quad, Sphere
    from src.sgraph.materials.texture import WHITE
    from src.sgraph.renderer.headless import HeadlessRenderer

    headless = HeadlessRenderer()
    # 20x20 quad in the z=0 plane facing +z
    headless.add_mesh("big-quad", Quad(corner=(-10.0, -10.0, 0.0), edge_u=(20.0, 0.0, 0.0), edge_v=(0.0, 20.0, 0.0)))
    headless.add_mesh("quad", Quad())
    headless.add_mesh("sphere", Sphere())
    headless.add_mesh("box", Box())
    headless.add_texture("white", WHITE)
    yield headless
    headless.dispose()
