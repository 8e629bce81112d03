"""View-space hit records and closest-hit selection.

A ``HitRecord`` is what a leaf node produces for each intersection of a ray
with its mesh, after mapping the mesh's object-space hit back into the space of
the transform stack handed to the traversal (view space for primary rays).
Records live for one pixel: they are created by the traversal, reduced to the
closest one and, if any, passed to the shader.

Example:
    >>> from src.sgraph.scene.intersection import closest_hit
    >>> closest_hit([]) is None
    True
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Optional

import numpy as np
import numpy.typing as npt

from src.sgraph.materials.phong import Material
from src.sgraph.materials.texture import TextureImage


@dataclass(eq=False)
class HitRecord:
    """Record of a ray-scene intersection in view space.

    Records are ordered by ``t`` (smaller is closer), so ``min(records)`` is
    the closest hit. NaN is rejected to keep the order total.

    Attributes:
        t: The ray parameter of the intersection.
        intersection: Homogeneous intersection point (4,), w=1.
        normal: Homogeneous unit surface normal (4,), w=0.
        texture_coordinate: (s, t) texture coordinate (2,).
        material: Material of the surface that was hit.
        texture: Texture of the surface, or None if it could not be resolved.
        node_name: Name of the leaf node that produced the hit.
    """

    t: float
    intersection: npt.NDArray[np.float64]
    normal: npt.NDArray[np.float64]
    texture_coordinate: npt.NDArray[np.float64] = field(default_factory=lambda: np.zeros(2))
    material: Material = field(default_factory=Material)
    texture: Optional[TextureImage] = None
    node_name: str = ""

    def __post_init__(self) -> None:
        self.t = float(self.t)
        if math.isnan(self.t):
            raise ValueError("HitRecord t must not be NaN")

    @property
    def position(self) -> npt.NDArray[np.float64]:
        """The intersection point as a 3-vector."""
        return self.intersection[:3]

    @property
    def normal3(self) -> npt.NDArray[np.float64]:
        """The surface normal as a 3-vector."""
        return self.normal[:3]

    def __lt__(self, other: HitRecord) -> bool:
        return self.t < other.t

    def __repr__(self) -> str:
        return f"HitRecord(t={self.t:.6g}, node={self.node_name!r}, position={self.position.tolist()})"


def closest_hit(records: Iterable[HitRecord]) -> Optional[HitRecord]:
    """Return the record with minimum t, or None if there are none.

    Ties keep the first record in traversal order.
    """
    best: Optional[HitRecord] = None
    for record in records:
        if best is None or record.t < best.t:
            best = record
    return best
