"""Integration tests for the end-to-end ray tracing pipeline.

This module tests the complete pipeline from scene graph construction through
final image output. It verifies that all components work together correctly
and that the output meets basic quality criteria.

Tests are designed to be fast (low resolution) while still exercising the
full pipeline.

Note: Imports are done inside test methods to avoid Taichi initialization issues.
The conftest.py fixture initializes Taichi before tests run.
"""

from __future__ import annotations

import numpy as np
from PIL import Image as PILImage


class TestCornellBoxIntegration:
    """Integration tests for Cornell box rendering."""

    def test_cornell_box_end_to_end_writes_png(self, tmp_path) -> None:
        """Test that the complete pipeline writes a readable PNG."""
        from src.sgraph.preview import ImageSequenceWriter
        from src.sgraph.scene.cornell_box import create_cornell_box_scene

        graph, camera = create_cornell_box_scene()
        writer = ImageSequenceWriter(tmp_path)
        path = graph.ray_trace_to_file(24, 16, camera.view_stack(), camera.vfov, writer)

        assert path == tmp_path / "image001.png"
        loaded = np.array(PILImage.open(path))
        assert loaded.shape == (16, 24, 3)
        assert loaded.dtype == np.uint8
        assert loaded.max() > 0, "Image is completely black"

    def test_cornell_box_output_is_finite_and_clamped(self) -> None:
        """Test that the traced buffer has no NaN/Inf and stays in [0, 1]."""
        from src.sgraph.scene.cornell_box import create_cornell_box_scene

        graph, camera = create_cornell_box_scene()
        image = graph.ray_trace(24, 24, camera.view_stack(), camera.vfov)

        assert np.all(np.isfinite(image.pixels)), "Image contains NaN or Inf values"
        assert np.all(image.pixels >= 0.0), "Image contains negative values"
        assert np.all(image.pixels <= 1.0), "Image contains values above 1"

    def test_spotlight_brightens_sphere_top(self) -> None:
        """Test that the spotlight adds light where its cone meets the sphere."""
        from src.sgraph.scene.cornell_box import CornellBoxParams, create_cornell_box_scene

        lit_graph, camera = create_cornell_box_scene()
        dark_graph, _ = create_cornell_box_scene(params=CornellBoxParams(spotlight=False))

        lit = lit_graph.ray_trace(32, 32, camera.view_stack(), camera.vfov).pixels
        dark = dark_graph.ray_trace(32, 32, camera.view_stack(), camera.vfov).pixels

        assert np.all(lit >= dark - 1e-6)
        assert lit.sum() > dark.sum()

    def test_sequence_of_frames_with_animation(self, tmp_path) -> None:
        """Test rendering two frames while moving a node between them."""
        from src.sgraph.core.transform import translate
        from src.sgraph.preview import ImageSequenceWriter
        from src.sgraph.scene.cornell_box import create_cornell_box_scene

        graph, camera = create_cornell_box_scene()
        writer = ImageSequenceWriter(tmp_path)

        first = graph.ray_trace_to_file(16, 16, camera.view_stack(), camera.vfov, writer)
        graph.get_nodes()["sphere"].set_animation_transform(translate(0.0, 150.0, 0.0))
        second = graph.ray_trace_to_file(16, 16, camera.view_stack(), camera.vfov, writer)

        assert [first.name, second.name] == ["image001.png", "image002.png"]
        assert not np.array_equal(np.array(PILImage.open(first)), np.array(PILImage.open(second)))
