"""Geometry module for object-space mesh primitives.

Components:
    mesh: LocalHit record and the Mesh base class
    sphere: Sphere primitive with robust ray-sphere intersection
    quad: Parallelogram primitive
    box: Axis-aligned box primitive

Each mesh reports every intersection of an object-space ray as a list of
LocalHit records; leaf nodes map them back to view space.
"""

from .box import Box
from .mesh import LocalHit, Mesh
from .quad import Quad
from .sphere import Sphere

__all__ = [
    "Mesh",
    "LocalHit",
    "Sphere",
    "Quad",
    "Box",
]
