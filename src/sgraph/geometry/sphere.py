"""Sphere primitive with robust ray-sphere intersection.

Uses the robust quadratic formula from Ray Tracing Gems to avoid catastrophic
cancellation when b^2 is nearly equal to 4ac.

Example:
    >>> from src.sgraph.core.ray import Ray, vec3
    >>> from src.sgraph.geometry.sphere import Sphere
    >>> sphere = Sphere()
    >>> hits = sphere.intersect(Ray(vec3(0, 0, 5), vec3(0, 0, -1)))
    >>> sorted(round(h.t, 6) for h in hits)
    [4.0, 6.0]
"""

from __future__ import annotations

import math

import numpy as np

from src.sgraph.core.errors import IntersectionError
from src.sgraph.core.ray import Ray, Vec, vec3
from src.sgraph.geometry.mesh import T_MIN, LocalHit, Mesh


def _solve_quadratic_robust(h: float, a: float, c: float, sqrt_d: float) -> tuple[float, float]:
    """Solve a*t^2 + 2*h*t + c = 0 with the numerically stable formula.

    Returns:
        Tuple of (t0, t1) where t0 <= t1.
    """
    # q = -(h + sign(h) * sqrt(discriminant))
    sign_h = -1.0 if h < 0.0 else 1.0
    q = -(h + sign_h * sqrt_d)

    # Tangent ray: fall back to the standard formula
    if abs(q) < 1e-12:
        t0 = (-h - sqrt_d) / a
        t1 = (-h + sqrt_d) / a
    else:
        t0 = q / a
        t1 = c / q

    if t0 > t1:
        t0, t1 = t1, t0
    return t0, t1


def _sphere_uv(normal: Vec) -> Vec:
    """Spherical texture coordinate for a unit outward normal."""
    theta = math.acos(max(-1.0, min(1.0, -normal[1])))
    phi = math.atan2(-normal[2], normal[0]) + math.pi
    return np.array([phi / (2.0 * math.pi), theta / math.pi])


class Sphere(Mesh):
    """A sphere defined by center point and radius in object space.

    Attributes:
        center: The center point of the sphere (3,).
        radius: The radius of the sphere (positive).
    """

    def __init__(self, center: tuple[float, float, float] = (0.0, 0.0, 0.0), radius: float = 1.0) -> None:
        self.center = vec3(*center)
        self.radius = float(radius)

    def validate(self) -> None:
        if not self.radius > 0.0:
            raise IntersectionError(f"Sphere radius must be positive, got {self.radius}")

    def intersect(self, ray: Ray) -> list[LocalHit]:
        """Return both intersections of the ray with the sphere.

        Solves |origin + t * direction - center|^2 = radius^2 using the
        half-b form a*t^2 + 2*h*t + c = 0.

        Raises:
            IntersectionError: If the sphere is degenerate.
        """
        self.validate()
        oc = ray.origin - self.center
        a = float(np.dot(ray.direction, ray.direction))
        if a == 0.0:
            return []
        h = float(np.dot(ray.direction, oc))
        c = float(np.dot(oc, oc)) - self.radius * self.radius

        discriminant = h * h - a * c
        if discriminant < 0.0:
            return []

        t0, t1 = _solve_quadratic_robust(h, a, c, math.sqrt(discriminant))
        hits = []
        for t in (t0, t1):
            if t > T_MIN:
                point = ray.at(t)
                normal = (point - self.center) / self.radius
                hits.append(
                    LocalHit(t=t, point=point, normal=normal, texture_coordinate=_sphere_uv(normal))
                )
        return hits

    def __repr__(self) -> str:
        return f"Sphere(center={tuple(self.center)}, radius={self.radius})"
