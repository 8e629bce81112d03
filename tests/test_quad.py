"""Unit tests for quad intersection.

Tests cover:
- Ray hitting quad center (front and back)
- Ray hitting quad at a corner
- Ray missing quad (outside bounds)
- Ray parallel to quad plane (no intersection)
- Degenerate quads
"""

import numpy as np
import pytest


class TestQuadBasics:
    """Tests for Quad properties."""

    def test_normal_follows_right_hand_rule(self):
        """Test that the normal is normalize(cross(u, v))."""
        from src.sgraph.geometry import Quad

        quad = Quad(corner=(0.0, 0.0, 0.0), edge_u=(0.0, 2.0, 0.0), edge_v=(0.0, 0.0, 2.0))
        assert np.allclose(quad.normal, [1.0, 0.0, 0.0])

    def test_area(self):
        """Test parallelogram area."""
        from src.sgraph.geometry import Quad

        assert abs(Quad(edge_u=(2.0, 0.0, 0.0), edge_v=(0.0, 3.0, 0.0)).area - 6.0) < 1e-12


class TestQuadIntersection:
    """Tests for Quad.intersect."""

    def test_center_hit(self):
        """Test ray hitting the quad center."""
        from src.sgraph.core.ray import Ray
        from src.sgraph.geometry import Quad

        hits = Quad().intersect(Ray(origin=[0.0, 0.0, 5.0], direction=[0.0, 0.0, -1.0]))
        assert len(hits) == 1
        hit = hits[0]
        assert abs(hit.t - 5.0) < 1e-12
        assert np.allclose(hit.point, [0.0, 0.0, 0.0])
        assert np.allclose(hit.normal, [0.0, 0.0, 1.0])
        assert np.allclose(hit.texture_coordinate, [0.5, 0.5])

    def test_back_side_hit_keeps_normal(self):
        """Test that hitting from behind reports the same geometric normal."""
        from src.sgraph.core.ray import Ray
        from src.sgraph.geometry import Quad

        hits = Quad().intersect(Ray(origin=[0.0, 0.0, -5.0], direction=[0.0, 0.0, 1.0]))
        assert len(hits) == 1
        assert np.allclose(hits[0].normal, [0.0, 0.0, 1.0])

    def test_corner_is_inclusive(self):
        """Test ray hitting exactly at the corner Q."""
        from src.sgraph.core.ray import Ray
        from src.sgraph.geometry import Quad

        hits = Quad().intersect(Ray(origin=[-0.5, -0.5, 1.0], direction=[0.0, 0.0, -1.0]))
        assert len(hits) == 1
        assert np.allclose(hits[0].texture_coordinate, [0.0, 0.0])

    def test_miss_outside_bounds(self):
        """Test ray hitting the plane outside the quad."""
        from src.sgraph.core.ray import Ray
        from src.sgraph.geometry import Quad

        assert Quad().intersect(Ray(origin=[2.0, 0.0, 5.0], direction=[0.0, 0.0, -1.0])) == []

    def test_parallel_ray(self):
        """Test ray parallel to the quad plane."""
        from src.sgraph.core.ray import Ray
        from src.sgraph.geometry import Quad

        assert Quad().intersect(Ray(origin=[0.0, 0.0, 1.0], direction=[1.0, 0.0, 0.0])) == []

    def test_quad_behind_ray(self):
        """Test ray pointing away from the quad."""
        from src.sgraph.core.ray import Ray
        from src.sgraph.geometry import Quad

        assert Quad().intersect(Ray(origin=[0.0, 0.0, 5.0], direction=[0.0, 0.0, 1.0])) == []

    def test_degenerate_quad_raises(self):
        """Test that parallel edges raise IntersectionError."""
        from src.sgraph.core.errors import IntersectionError
        from src.sgraph.core.ray import Ray
        from src.sgraph.geometry import Quad

        quad = Quad(edge_u=(1.0, 0.0, 0.0), edge_v=(2.0, 0.0, 0.0))
        with pytest.raises(IntersectionError):
            quad.intersect(Ray(origin=[0.0, 0.0, 5.0], direction=[0.0, 0.0, -1.0]))
