"""Axis-aligned box primitive with slab-method intersection.

The box spans ``minimum`` to ``maximum`` in object space; the default is the
unit cube centered at the origin. Scaled and rotated boxes are built by placing
the leaf under transform nodes.
"""

from __future__ import annotations

import numpy as np

from src.sgraph.core.errors import IntersectionError
from src.sgraph.core.ray import Ray, vec3
from src.sgraph.geometry.mesh import T_MIN, LocalHit, Mesh

# Texture axes (s, t) used for faces perpendicular to x, y and z
_FACE_UV_AXES = {0: (2, 1), 1: (0, 2), 2: (0, 1)}


class Box(Mesh):
    """An axis-aligned box.

    Attributes:
        minimum: The minimum corner (3,).
        maximum: The maximum corner (3,).
    """

    def __init__(
        self,
        minimum: tuple[float, float, float] = (-0.5, -0.5, -0.5),
        maximum: tuple[float, float, float] = (0.5, 0.5, 0.5),
    ) -> None:
        self.minimum = vec3(*minimum)
        self.maximum = vec3(*maximum)

    def validate(self) -> None:
        if np.any(self.maximum <= self.minimum):
            raise IntersectionError(
                f"Box maximum {tuple(self.maximum)} must exceed minimum {tuple(self.minimum)}"
            )

    def _face_hit(self, ray: Ray, t: float, axis: int) -> LocalHit:
        point = ray.at(t)
        normal = np.zeros(3)
        center = 0.5 * (self.minimum[axis] + self.maximum[axis])
        normal[axis] = 1.0 if point[axis] >= center else -1.0

        size = self.maximum - self.minimum
        s_axis, t_axis = _FACE_UV_AXES[axis]
        uv = np.array([
            (point[s_axis] - self.minimum[s_axis]) / size[s_axis],
            (point[t_axis] - self.minimum[t_axis]) / size[t_axis],
        ])
        return LocalHit(t=t, point=point, normal=normal, texture_coordinate=np.clip(uv, 0.0, 1.0))

    def intersect(self, ray: Ray) -> list[LocalHit]:
        """Return the entry and exit intersections of the ray with the box.

        Raises:
            IntersectionError: If the box is degenerate.
        """
        self.validate()
        t_near = -np.inf
        t_far = np.inf
        near_axis = far_axis = -1

        for axis in range(3):
            o = ray.origin[axis]
            d = ray.direction[axis]
            lo = self.minimum[axis]
            hi = self.maximum[axis]
            if abs(d) < 1e-12:
                # Parallel to this slab: must already be inside it
                if o < lo or o > hi:
                    return []
                continue
            t0 = (lo - o) / d
            t1 = (hi - o) / d
            if t0 > t1:
                t0, t1 = t1, t0
            if t0 > t_near:
                t_near, near_axis = t0, axis
            if t1 < t_far:
                t_far, far_axis = t1, axis
            if t_near > t_far:
                return []

        hits = []
        if near_axis >= 0 and t_near > T_MIN:
            hits.append(self._face_hit(ray, float(t_near), near_axis))
        if far_axis >= 0 and t_far > T_MIN:
            hits.append(self._face_hit(ray, float(t_far), far_axis))
        return hits

    def __repr__(self) -> str:
        return f"Box(minimum={tuple(self.minimum)}, maximum={tuple(self.maximum)})"
