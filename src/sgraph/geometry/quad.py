"""Quad primitive with ray-quad intersection.

A quad is defined by:
- Q: A corner point of the quad
- u: Edge vector from Q to adjacent corner
- v: Edge vector from Q to other adjacent corner

The quad spans the parallelogram from Q to Q+u+v. The normal is
normalize(cross(u, v)) (right-hand rule). The texture coordinate of a hit is
its parametric position (alpha, beta) within the quad.

Example:
    >>> from src.sgraph.core.ray import Ray, vec3
    >>> from src.sgraph.geometry.quad import Quad
    >>> quad = Quad(corner=(-1, -1, 0), edge_u=(2, 0, 0), edge_v=(0, 2, 0))
    >>> [h.t for h in quad.intersect(Ray(vec3(0, 0, 5), vec3(0, 0, -1)))]
    [5.0]
"""

from __future__ import annotations

import numpy as np

from src.sgraph.core.errors import IntersectionError
from src.sgraph.core.ray import Ray, vec3
from src.sgraph.geometry.mesh import T_MIN, LocalHit, Mesh


class Quad(Mesh):
    """A quad (parallelogram) defined by a corner point and two edge vectors.

    Attributes:
        corner: The corner point Q (3,).
        edge_u: Edge vector from Q to adjacent corner (3,).
        edge_v: Edge vector from Q to other adjacent corner (3,).
    """

    def __init__(
        self,
        corner: tuple[float, float, float] = (-0.5, -0.5, 0.0),
        edge_u: tuple[float, float, float] = (1.0, 0.0, 0.0),
        edge_v: tuple[float, float, float] = (0.0, 1.0, 0.0),
    ) -> None:
        self.corner = vec3(*corner)
        self.edge_u = vec3(*edge_u)
        self.edge_v = vec3(*edge_v)

    @property
    def normal(self):
        """Unit normal, normalize(cross(u, v))."""
        n = np.cross(self.edge_u, self.edge_v)
        return n / np.linalg.norm(n)

    @property
    def area(self) -> float:
        return float(np.linalg.norm(np.cross(self.edge_u, self.edge_v)))

    def validate(self) -> None:
        n = np.cross(self.edge_u, self.edge_v)
        if float(np.dot(n, n)) < 1e-20:
            raise IntersectionError("Quad edges are parallel; the quad is degenerate")

    def intersect(self, ray: Ray) -> list[LocalHit]:
        """Test for ray-quad intersection.

        1. Compute where the ray hits the plane containing the quad
        2. Express the hit point in the quad's local coordinates (alpha, beta)
        3. Accept if 0 <= alpha <= 1 and 0 <= beta <= 1

        Raises:
            IntersectionError: If the quad is degenerate.
        """
        self.validate()
        n = np.cross(self.edge_u, self.edge_v)
        n_dot_n = float(np.dot(n, n))
        normal = n / np.sqrt(n_dot_n)
        d = float(np.dot(normal, self.corner))

        denom = float(np.dot(normal, ray.direction))
        # Ray parallel to the plane
        if abs(denom) < 1e-12:
            return []

        t = (d - float(np.dot(normal, ray.origin))) / denom
        if t <= T_MIN:
            return []

        # w_u = v x n / dot(n, n), w_v = n x u / dot(n, n)
        # These satisfy: dot(w_u, u) = 1, dot(w_u, v) = 0
        #                dot(w_v, u) = 0, dot(w_v, v) = 1
        w_u = np.cross(self.edge_v, n) / n_dot_n
        w_v = np.cross(n, self.edge_u) / n_dot_n

        point = ray.at(t)
        p_minus_q = point - self.corner
        alpha = float(np.dot(w_u, p_minus_q))
        beta = float(np.dot(w_v, p_minus_q))
        if not (0.0 <= alpha <= 1.0 and 0.0 <= beta <= 1.0):
            return []

        return [LocalHit(t=t, point=point, normal=normal, texture_coordinate=np.array([alpha, beta]))]

    def __repr__(self) -> str:
        return (
            f"Quad(corner={tuple(self.corner)}, edge_u={tuple(self.edge_u)}, "
            f"edge_v={tuple(self.edge_v)})"
        )
