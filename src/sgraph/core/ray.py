"""Ray data structure and vector utilities for scene-graph ray tracing.

Scene-graph traversal is recursive and polymorphic, so rays are traced on the
Python side with NumPy rather than inside Taichi kernels. Vectors are
``float64`` arrays; points and directions that pass through 4x4 transforms are
promoted to homogeneous coordinates (w=1 for points, w=0 for vectors).

Example:
    >>> import numpy as np
    >>> from src.sgraph.core.ray import Ray
    >>> ray = Ray(origin=np.zeros(3), direction=np.array([0.0, 0.0, -1.0]))
    >>> ray.at(5.0)
    array([ 0.,  0., -5.])
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
import numpy.typing as npt

Vec = npt.NDArray[np.float64]


def vec3(x: float, y: float, z: float) -> Vec:
    """Create a 3-component float64 vector."""
    return np.array([x, y, z], dtype=np.float64)


def as_vec3(value: npt.ArrayLike) -> Vec:
    """Coerce a sequence or homogeneous vector to a 3-component vector.

    Raises:
        ValueError: If ``value`` has neither 3 nor 4 components.
    """
    arr = np.asarray(value, dtype=np.float64).reshape(-1)
    if arr.shape[0] not in (3, 4):
        raise ValueError(f"Expected 3 or 4 components, got {arr.shape[0]}")
    return arr[:3].copy()


def point4(value: npt.ArrayLike) -> Vec:
    """Promote a 3D point to homogeneous coordinates (w=1)."""
    return np.append(as_vec3(value), 1.0)


def vector4(value: npt.ArrayLike) -> Vec:
    """Promote a 3D direction to homogeneous coordinates (w=0)."""
    return np.append(as_vec3(value), 0.0)


def length(v: Vec) -> float:
    """Euclidean length of a vector."""
    return float(np.linalg.norm(v))


def normalize(v: Vec) -> Vec:
    """Normalize a vector to unit length.

    Returns:
        A unit vector in the same direction as v. A zero-length vector is
        returned unchanged (as zeros) rather than producing NaNs.
    """
    n = np.linalg.norm(v)
    if n < 1e-12:
        return np.zeros_like(v, dtype=np.float64)
    return v / n


def reflect(incident: Vec, normal: Vec) -> Vec:
    """Reflect an incident vector about a (unit) normal."""
    return incident - 2.0 * float(np.dot(incident, normal)) * normal


@dataclass(frozen=True, eq=False)
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (3,).
        direction: The direction vector of the ray (3,). Not normalized:
            shadow rays rely on t=1 landing exactly on the light.
    """

    origin: Vec
    direction: Vec

    def __post_init__(self) -> None:
        object.__setattr__(self, "origin", as_vec3(self.origin))
        object.__setattr__(self, "direction", as_vec3(self.direction))

    def at(self, t: float) -> Vec:
        """Compute the point origin + t * direction."""
        return self.origin + t * self.direction

    def transformed(self, matrix: npt.NDArray[np.float64]) -> Ray:
        """Map the ray through a 4x4 affine transform.

        The origin is transformed as a point and the direction as a vector.
        Affine maps preserve the ray parameter, so a hit at t in the
        transformed space is at the same t on this ray.
        """
        origin = matrix @ point4(self.origin)
        direction = matrix @ vector4(self.direction)
        return Ray(origin=origin[:3], direction=direction[:3])
