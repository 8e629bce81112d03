"""Object-space mesh interface shared by all primitives.

A mesh lives in its own object space. Leaf nodes transform rays into that
space, call ``intersect``, and map the resulting ``LocalHit`` records back to
view space.
"""

from __future__ import annotations

from dataclasses import dataclass

from src.sgraph.core.ray import Ray, Vec

# Hits closer than this along the local ray are ignored
T_MIN = 0.0


@dataclass(eq=False)
class LocalHit:
    """A ray/primitive intersection expressed in the mesh's object space.

    Attributes:
        t: Ray parameter of the hit (same on the local and the caller's ray).
        point: Intersection point in object space (3,).
        normal: Unit outward surface normal in object space (3,).
        texture_coordinate: (s, t) texture coordinate in [0, 1].
    """

    t: float
    point: Vec
    normal: Vec
    texture_coordinate: Vec


class Mesh:
    """Base class for primitives that can be intersected by a ray.

    Subclasses implement ``intersect`` and return every intersection with
    t > T_MIN, in no particular order. Shadow tests need entry and exit hits,
    so closed shapes report both.
    """

    def intersect(self, ray: Ray) -> list[LocalHit]:
        raise NotImplementedError

    def validate(self) -> None:
        """Check the mesh's parameters.

        Raises:
            IntersectionError: If the mesh is degenerate.
        """
