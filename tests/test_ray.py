"""Unit tests for rays and vector utilities.

Tests cover:
- Vector construction and homogeneous promotion
- Normalization (including the zero vector)
- Reflection about a normal
- Ray evaluation and transformation by affine matrices
"""

import numpy as np
import pytest


class TestVectorUtilities:
    """Tests for vec3, as_vec3, point4, vector4, normalize and reflect."""

    def test_vec3_dtype(self):
        """Test vec3 builds float64 vectors."""
        from src.sgraph.core.ray import vec3

        v = vec3(1, 2, 3)
        assert v.dtype == np.float64
        assert v.tolist() == [1.0, 2.0, 3.0]

    def test_as_vec3_drops_w(self):
        """Test that a homogeneous vector is reduced to its xyz part."""
        from src.sgraph.core.ray import as_vec3

        assert as_vec3([1.0, 2.0, 3.0, 1.0]).tolist() == [1.0, 2.0, 3.0]

    def test_as_vec3_rejects_wrong_size(self):
        """Test that 2-component input is rejected."""
        from src.sgraph.core.ray import as_vec3

        with pytest.raises(ValueError):
            as_vec3([1.0, 2.0])

    def test_point_and_vector_promotion(self):
        """Test w=1 for points and w=0 for vectors."""
        from src.sgraph.core.ray import point4, vector4

        assert point4((1.0, 2.0, 3.0))[3] == 1.0
        assert vector4((1.0, 2.0, 3.0))[3] == 0.0

    def test_normalize_unit_length(self):
        """Test normalize produces a unit vector."""
        from src.sgraph.core.ray import length, normalize, vec3

        n = normalize(vec3(3.0, 4.0, 0.0))
        assert abs(length(n) - 1.0) < 1e-12
        assert abs(n[0] - 0.6) < 1e-12
        assert abs(n[1] - 0.8) < 1e-12

    def test_normalize_zero_vector(self):
        """Test normalize returns zeros instead of NaN for the zero vector."""
        from src.sgraph.core.ray import normalize

        n = normalize(np.zeros(3))
        assert not np.any(np.isnan(n))
        assert n.tolist() == [0.0, 0.0, 0.0]

    def test_reflect(self):
        """Test reflection of a 45-degree incident vector about +y."""
        from src.sgraph.core.ray import reflect, vec3

        r = reflect(vec3(1.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0))
        assert np.allclose(r, [1.0, 1.0, 0.0])


class TestRay:
    """Tests for the Ray dataclass."""

    def test_at(self):
        """Test evaluation of origin + t * direction."""
        from src.sgraph.core.ray import Ray

        ray = Ray(origin=[1.0, 0.0, 0.0], direction=[0.0, 0.0, -2.0])
        assert np.allclose(ray.at(2.5), [1.0, 0.0, -5.0])

    def test_direction_not_normalized(self):
        """Test that the direction keeps its length."""
        from src.sgraph.core.ray import Ray

        ray = Ray(origin=[0.0, 0.0, 0.0], direction=[0.0, 0.0, 10.0])
        assert ray.direction[2] == 10.0

    def test_transformed_translation_moves_origin_only(self):
        """Test that a translation affects the origin but not the direction."""
        from src.sgraph.core.ray import Ray
        from src.sgraph.core.transform import translate

        ray = Ray(origin=[0.0, 0.0, 0.0], direction=[0.0, 0.0, -1.0])
        moved = ray.transformed(translate(1.0, 2.0, 3.0))
        assert np.allclose(moved.origin, [1.0, 2.0, 3.0])
        assert np.allclose(moved.direction, [0.0, 0.0, -1.0])

    def test_transformed_preserves_parameter(self):
        """Test that a point at t maps to the transformed ray's point at t."""
        from src.sgraph.core.ray import Ray, point4
        from src.sgraph.core.transform import rotate, scale, translate

        m = translate(1.0, -2.0, 0.5) @ rotate(30.0, (0, 1, 1)) @ scale(2.0, 1.0, 3.0)
        ray = Ray(origin=[0.3, 0.1, -0.2], direction=[0.5, -1.0, 2.0])
        moved = ray.transformed(m)
        expected = (m @ point4(ray.at(1.7)))[:3]
        assert np.allclose(moved.at(1.7), expected)
