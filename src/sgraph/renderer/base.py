"""Renderer contract the scene graph delegates to.

The interactive path hands meshes and textures to a renderer and asks it to
draw the graph; the ray-traced path only uses the renderer to intersect leaf
meshes and to resolve texture names. Any object with these methods can be
installed on a ``Scenegraph``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Protocol, runtime_checkable

import numpy as np
import numpy.typing as npt

if TYPE_CHECKING:
    from src.sgraph.core.ray import Ray
    from src.sgraph.core.transform import TransformStack
    from src.sgraph.geometry.mesh import LocalHit, Mesh
    from src.sgraph.materials.phong import Material
    from src.sgraph.materials.texture import TextureImage, TextureSource
    from src.sgraph.scene.nodes import Node


@runtime_checkable
class SceneGraphRenderer(Protocol):
    """Interface between a scene graph and the component owning mesh geometry."""

    def add_mesh(self, name: str, mesh: Mesh) -> None:
        """Register a mesh under a unique name."""

    def add_texture(self, name: str, source: TextureSource) -> None:
        """Register a texture (path, array or TextureImage) under a name."""

    def draw(self, root: Node, stack: TransformStack) -> None:
        """Draw the graph rooted at ``root`` with the given modelview stack."""

    def light_on(self, root: Node, stack: TransformStack) -> None:
        """Enable every light reachable from ``root``."""

    def draw_mesh(
        self,
        mesh_name: str,
        material: Material,
        texture_name: str,
        transform: npt.NDArray[np.float64],
    ) -> None:
        """Draw one mesh instance; called by leaf nodes during ``draw``."""

    def intersect(self, mesh_name: str, ray: Ray) -> list[LocalHit]:
        """Intersect an object-space ray with a registered mesh.

        Raises:
            IntersectionError: If the mesh is unknown or malformed.
        """

    def get_texture(self, name: str) -> Optional[TextureImage]:
        """Return the texture registered under ``name``, or None."""

    def dispose(self) -> None:
        """Release every resource held by the renderer."""
