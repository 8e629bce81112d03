"""Headless renderer: owns meshes and textures without a GPU.

``HeadlessRenderer`` is the renderer used by the ray-traced path and by tests.
It keeps the mesh and texture registries a scene graph hands it, answers the
intersection and texture queries of leaf nodes, and records what an
interactive renderer would have drawn so the ``draw`` and ``light_on`` paths
can be inspected.

Example:
    >>> from src.sgraph.geometry import Sphere
    >>> from src.sgraph.renderer.headless import HeadlessRenderer
    >>> renderer = HeadlessRenderer()
    >>> renderer.add_mesh("sphere", Sphere())
    >>> renderer.mesh_names
    ['sphere']
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

import numpy as np
import numpy.typing as npt

from src.sgraph.core.errors import IntersectionError, TextureSampleError
from src.sgraph.core.ray import Ray
from src.sgraph.geometry.mesh import LocalHit, Mesh
from src.sgraph.materials.phong import Material
from src.sgraph.materials.texture import TextureImage, TextureSource, load_texture
from src.sgraph.scene.light import Light

if TYPE_CHECKING:
    from src.sgraph.core.transform import TransformStack
    from src.sgraph.scene.nodes import Node

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class DrawCommand:
    """One mesh instance drawn during a ``draw`` pass."""

    mesh_name: str
    material: Material
    texture_name: str
    transform: npt.NDArray[np.float64]


@dataclass(eq=False)
class LightState:
    """A light enabled by ``light_on``, expressed in view space.

    Attributes:
        light: The light as declared on its node.
        position: View-space homogeneous position (4,).
        spot_direction: View-space homogeneous spot axis (4,).
    """

    light: Light
    position: npt.NDArray[np.float64]
    spot_direction: npt.NDArray[np.float64]


class HeadlessRenderer:
    """Renderer that intersects meshes on the CPU and records draw calls.

    Attributes:
        draw_commands: Mesh instances from the most recent ``draw``.
        light_states: Lights from the most recent ``light_on``.
    """

    def __init__(self) -> None:
        self._meshes: dict[str, Mesh] = {}
        self._textures: dict[str, TextureImage] = {}
        self.draw_commands: list[DrawCommand] = []
        self.light_states: list[LightState] = []

    @property
    def mesh_names(self) -> list[str]:
        return sorted(self._meshes)

    @property
    def texture_names(self) -> list[str]:
        return sorted(self._textures)

    def add_mesh(self, name: str, mesh: Mesh) -> None:
        """Register a mesh.

        Raises:
            TypeError: If ``mesh`` is not a Mesh.
        """
        if not isinstance(mesh, Mesh):
            raise TypeError(f"Expected a Mesh for {name!r}, got {type(mesh).__name__}")
        self._meshes[name] = mesh

    def add_texture(self, name: str, source: TextureSource) -> None:
        """Register a texture; a texture that fails to load is left out.

        Leaves referring to a missing texture shade with plain white.
        """
        try:
            self._textures[name] = load_texture(source, name=name)
        except TextureSampleError as exc:
            logger.warning("Texture %r not registered: %s", name, exc)

    def get_texture(self, name: str) -> Optional[TextureImage]:
        return self._textures.get(name)

    def intersect(self, mesh_name: str, ray: Ray) -> list[LocalHit]:
        """Intersect an object-space ray with a registered mesh.

        Raises:
            IntersectionError: If no mesh is registered under ``mesh_name`` or
                the mesh is degenerate.
        """
        mesh = self._meshes.get(mesh_name)
        if mesh is None:
            raise IntersectionError(f"Unknown mesh {mesh_name!r}")
        mesh.validate()
        return mesh.intersect(ray)

    def draw(self, root: Node, stack: TransformStack) -> None:
        self.draw_commands = []
        root.draw(self, stack)

    def draw_mesh(
        self,
        mesh_name: str,
        material: Material,
        texture_name: str,
        transform: npt.NDArray[np.float64],
    ) -> None:
        self.draw_commands.append(DrawCommand(mesh_name, material, texture_name, np.array(transform)))

    def light_on(self, root: Node, stack: TransformStack) -> None:
        self.light_states = [
            LightState(light, matrix @ light.position, matrix @ light.spot_direction)
            for light, matrix in root.get_lights(stack).items()
        ]

    def dispose(self) -> None:
        self._meshes.clear()
        self._textures.clear()
        self.draw_commands = []
        self.light_states = []
