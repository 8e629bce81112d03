"""Scene graph container and rendering entry points.

A ``Scenegraph`` owns the root node and name registries for meshes, nodes and
textures. It renders two ways:

- ``draw`` and ``light_on`` delegate the interactive path to a renderer.
- ``ray_trace`` traces a still image through the same renderer, which answers
  leaf intersections and texture lookups.

Example:
    >>> from src.sgraph.core.transform import TransformStack
    >>> from src.sgraph.geometry import Sphere
    >>> from src.sgraph.renderer import HeadlessRenderer
    >>> from src.sgraph.scene.nodes import LeafNode
    >>> from src.sgraph.scene.scenegraph import Scenegraph
    >>> graph = Scenegraph()
    >>> graph.add_polygon_mesh("sphere", Sphere())
    >>> graph.make_scenegraph(LeafNode("ball", mesh_name="sphere"))
    >>> graph.set_renderer(HeadlessRenderer())
    >>> image = graph.ray_trace(32, 32, TransformStack(), fov_degrees=60.0)
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Optional

from src.sgraph.core.config import RayTraceConfig
from src.sgraph.core.errors import NotReadyError
from src.sgraph.core.image import RenderedImage
from src.sgraph.core.tracer import ProgressCallback, RayTracer
from src.sgraph.core.transform import TransformStack
from src.sgraph.geometry.mesh import Mesh
from src.sgraph.materials.texture import WHITE, TextureSource
from src.sgraph.preview.export import ImageSequenceWriter
from src.sgraph.renderer.base import SceneGraphRenderer
from src.sgraph.scene.nodes import Node

logger = logging.getLogger(__name__)


class Scenegraph:
    """A hierarchical scene with its meshes, named nodes and textures.

    Attributes:
        config: Parameters used by ``ray_trace``.
    """

    def __init__(self, config: Optional[RayTraceConfig] = None) -> None:
        self._root: Optional[Node] = None
        self._renderer: Optional[SceneGraphRenderer] = None
        self._meshes: dict[str, Mesh] = {}
        self._nodes: dict[str, Node] = {}
        self._textures: dict[str, TextureSource] = {"white": WHITE}
        self.config = config if config is not None else RayTraceConfig()

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    def make_scenegraph(self, root: Node) -> None:
        """Install the root node and point every node back at this graph."""
        self._root = root
        root.set_scenegraph(self)

    def set_renderer(self, renderer: SceneGraphRenderer) -> None:
        """Install the renderer and hand it every registered mesh and texture.

        Raises:
            RuntimeError: If a renderer is already installed.
        """
        if self._renderer is not None:
            raise RuntimeError("Renderer already set for this scene graph")
        self._renderer = renderer
        for name, mesh in self._meshes.items():
            renderer.add_mesh(name, mesh)
        for name, texture in self._textures.items():
            renderer.add_texture(name, texture)

    def add_polygon_mesh(self, name: str, mesh: Mesh) -> None:
        """Register a mesh under a unique name.

        Raises:
            ValueError: If a mesh with this name is already registered.
        """
        if name in self._meshes:
            raise ValueError(f"Mesh {name!r} already registered")
        self._meshes[name] = mesh
        if self._renderer is not None:
            self._renderer.add_mesh(name, mesh)

    def add_node(self, name: str, node: Node) -> None:
        """Register a node for lookup by name.

        Raises:
            ValueError: If a node with this name is already registered.
        """
        if name in self._nodes:
            raise ValueError(f"Node {name!r} already registered")
        self._nodes[name] = node

    def add_texture(self, name: str, source: TextureSource) -> None:
        """Register a texture (image path, array or TextureImage) under a unique name.

        Raises:
            ValueError: If a texture with this name is already registered,
                including the built-in 'white'.
        """
        if name in self._textures:
            raise ValueError(f"Texture {name!r} already registered")
        self._textures[name] = source
        if self._renderer is not None:
            self._renderer.add_texture(name, source)

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    def get_root(self) -> Optional[Node]:
        return self._root

    def get_renderer(self) -> Optional[SceneGraphRenderer]:
        return self._renderer

    def get_polygon_meshes(self) -> dict[str, Mesh]:
        return dict(self._meshes)

    def get_nodes(self) -> dict[str, Node]:
        """Return a copy of the node registry, sorted by name."""
        return dict(sorted(self._nodes.items()))

    def get_textures(self) -> dict[str, TextureSource]:
        return dict(self._textures)

    # -------------------------------------------------------------------------
    # Interactive path
    # -------------------------------------------------------------------------

    def draw(self, stack: TransformStack) -> None:
        """Draw the scene if both a root and a renderer are installed."""
        if self._root is not None and self._renderer is not None:
            self._renderer.draw(self._root, stack)

    def light_on(self, stack: TransformStack) -> None:
        """Enable the scene's lights if both a root and a renderer are installed."""
        if self._root is not None and self._renderer is not None:
            self._renderer.light_on(self._root, stack)

    def dispose(self) -> None:
        if self._renderer is not None:
            self._renderer.dispose()

    # -------------------------------------------------------------------------
    # Ray-traced path
    # -------------------------------------------------------------------------

    def _tracer(self) -> RayTracer:
        if self._root is None:
            raise NotReadyError("Cannot ray trace: no root node (call make_scenegraph first)")
        if self._renderer is None:
            raise NotReadyError("Cannot ray trace: no renderer (call set_renderer first)")
        return RayTracer(self._root, self._renderer, self.config)

    def ray_trace(
        self,
        width: int,
        height: int,
        stack: TransformStack,
        fov_degrees: float,
        *,
        progress_callback: Optional[ProgressCallback] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> RenderedImage:
        """Ray trace the scene into an image.

        Args:
            width: Image width in pixels.
            height: Image height in pixels.
            stack: Initial transform stack mapping world to view space.
            fov_degrees: Vertical field of view in degrees.
            progress_callback: Called with (rows_done, rows_total).
            cancel_event: Set to stop tracing between scan lines.

        Raises:
            NotReadyError: If the root or the renderer is missing.
            RenderCancelled: If ``cancel_event`` is set mid-trace.
        """
        tracer = self._tracer()
        return tracer.render(
            width,
            height,
            stack,
            fov_degrees,
            progress_callback=progress_callback,
            cancel_event=cancel_event,
        )

    def ray_trace_to_file(
        self,
        width: int,
        height: int,
        stack: TransformStack,
        fov_degrees: float,
        writer: ImageSequenceWriter,
        **kwargs,
    ) -> Path:
        """Ray trace the scene and write it to the writer's next file.

        Returns:
            The path written.

        Raises:
            NotReadyError: If the root or the renderer is missing.
            OutputWriteError: If the image cannot be written.
        """
        image = self.ray_trace(width, height, stack, fov_degrees, **kwargs)
        return writer.write(image)
