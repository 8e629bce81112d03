"""Scene-graph node variants and their traversal operations.

Three flat variants share one traversal contract:

- ``GroupNode``: an ordered list of owned children.
- ``TransformNode``: a single child placed by a local transform.
- ``LeafNode``: a reference to a named mesh plus its material and texture.

Every node can carry lights. Traversals take a ``TransformStack`` whose top
maps the caller's scope to view space and return results expressed in that
view space:

- ``ray_cast(stack, ray, renderer)`` returns every ``HitRecord`` of the ray.
- ``get_lights(stack)`` maps every reachable light to the transform active
  where it was declared. A light reachable along two paths keeps the
  transform of the first path found (depth-first, children in order).

Example:
    >>> from src.sgraph.core.transform import TransformStack, translate
    >>> from src.sgraph.scene.nodes import GroupNode, LeafNode, TransformNode
    >>> root = GroupNode("root")
    >>> moved = TransformNode("moved", translate(0.0, 0.0, -5.0))
    >>> moved.add_child(LeafNode("ball", mesh_name="sphere"))
    >>> root.add_child(moved)
    >>> root.find("ball").mesh_name
    'sphere'
"""

from __future__ import annotations

import logging
import weakref
from typing import TYPE_CHECKING, Optional

import numpy as np
import numpy.typing as npt

from src.sgraph.core.errors import IntersectionError, TextureSampleError
from src.sgraph.core.ray import Ray, normalize, point4, vector4
from src.sgraph.core.transform import TransformStack, identity, normal_matrix
from src.sgraph.materials.phong import DEFAULT_MATERIAL, Material
from src.sgraph.materials.texture import TextureImage
from src.sgraph.scene.intersection import HitRecord
from src.sgraph.scene.light import Light

if TYPE_CHECKING:
    from src.sgraph.renderer.base import SceneGraphRenderer
    from src.sgraph.scene.scenegraph import Scenegraph

logger = logging.getLogger(__name__)

Matrix = npt.NDArray[np.float64]
LightMap = dict[Light, Matrix]


class Node:
    """Behavior shared by every node variant.

    Attributes:
        name: Name of the node (used for lookup and in logs).
        lights: Lights declared at this node, in its local frame.
    """

    def __init__(self, name: str = "") -> None:
        self.name = name
        self.lights: list[Light] = []
        self._scenegraph: Optional[weakref.ref[Scenegraph]] = None

    # -------------------------------------------------------------------------
    # Structure
    # -------------------------------------------------------------------------

    @property
    def children(self) -> list[Node]:
        return []

    def add_light(self, light: Light) -> None:
        self.lights.append(light)

    def set_scenegraph(self, graph: Scenegraph) -> None:
        """Install a non-owning back-reference to the graph on this subtree."""
        self._scenegraph = weakref.ref(graph)
        for child in self.children:
            child.set_scenegraph(graph)

    @property
    def scenegraph(self) -> Optional[Scenegraph]:
        """The owning scene graph, or None if unset or already collected."""
        return self._scenegraph() if self._scenegraph is not None else None

    def find(self, name: str) -> Optional[Node]:
        """Depth-first search for a node by name (including this one)."""
        if self.name == name:
            return self
        for child in self.children:
            found = child.find(name)
            if found is not None:
                return found
        return None

    # -------------------------------------------------------------------------
    # Traversal
    # -------------------------------------------------------------------------

    def ray_cast(self, stack: TransformStack, ray: Ray, renderer: SceneGraphRenderer) -> list[HitRecord]:
        raise NotImplementedError

    def get_lights(self, stack: TransformStack) -> LightMap:
        """Collect every light reachable from this node.

        Returns:
            Mapping from light to the matrix taking the light's local frame to
            the view space of ``stack``. Insertion order is discovery order.
        """
        found: LightMap = {}
        self._gather_lights(stack, found)
        return found

    def _gather_lights(self, stack: TransformStack, found: LightMap) -> None:
        self._declare_lights(stack.top, found)
        for child in self.children:
            child._gather_lights(stack, found)

    def _declare_lights(self, matrix: Matrix, found: LightMap) -> None:
        for light in self.lights:
            # first discovery wins
            found.setdefault(light, matrix)

    def draw(self, renderer: SceneGraphRenderer, stack: TransformStack) -> None:
        for child in self.children:
            child.draw(renderer, stack)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


class GroupNode(Node):
    """A node owning an ordered list of children."""

    def __init__(self, name: str = "", children: Optional[list[Node]] = None) -> None:
        super().__init__(name)
        self._children: list[Node] = []
        for child in children or []:
            self.add_child(child)

    @property
    def children(self) -> list[Node]:
        return list(self._children)

    def add_child(self, child: Node) -> None:
        self._children.append(child)
        graph = self.scenegraph
        if graph is not None:
            child.set_scenegraph(graph)

    def ray_cast(self, stack: TransformStack, ray: Ray, renderer: SceneGraphRenderer) -> list[HitRecord]:
        """Concatenate the hits of every child, in child order."""
        scope = stack.push()
        hits: list[HitRecord] = []
        for child in self._children:
            hits.extend(child.ray_cast(scope, ray, renderer))
        return hits


class TransformNode(Node):
    """A node placing its single child with a local transform.

    The effective local transform is ``animation_transform @ transform``, so
    animation is applied on top of the static placement.

    Attributes:
        transform: Static local-to-parent transform (4x4).
        animation_transform: Time-varying transform applied after ``transform``.
    """

    def __init__(
        self,
        name: str = "",
        transform: Optional[npt.ArrayLike] = None,
        child: Optional[Node] = None,
    ) -> None:
        super().__init__(name)
        self.transform = identity() if transform is None else np.array(transform, dtype=np.float64)
        self.animation_transform = identity()
        self._child: Optional[Node] = None
        if child is not None:
            self.add_child(child)

    @property
    def children(self) -> list[Node]:
        return [] if self._child is None else [self._child]

    def add_child(self, child: Node) -> None:
        """Attach the single child.

        Raises:
            ValueError: If the node already has a child.
        """
        if self._child is not None:
            raise ValueError(f"Transform node {self.name!r} already has a child")
        self._child = child
        graph = self.scenegraph
        if graph is not None:
            child.set_scenegraph(graph)

    def set_transform(self, transform: npt.ArrayLike) -> None:
        self.transform = np.array(transform, dtype=np.float64)

    def set_animation_transform(self, transform: npt.ArrayLike) -> None:
        self.animation_transform = np.array(transform, dtype=np.float64)

    @property
    def local_transform(self) -> Matrix:
        return self.animation_transform @ self.transform

    def ray_cast(self, stack: TransformStack, ray: Ray, renderer: SceneGraphRenderer) -> list[HitRecord]:
        if self._child is None:
            return []
        return self._child.ray_cast(stack.push(self.local_transform), ray, renderer)

    def _gather_lights(self, stack: TransformStack, found: LightMap) -> None:
        # Lights on a transform node live in its transformed frame
        scope = stack.push(self.local_transform)
        self._declare_lights(scope.top, found)
        if self._child is not None:
            self._child._gather_lights(scope, found)

    def draw(self, renderer: SceneGraphRenderer, stack: TransformStack) -> None:
        if self._child is not None:
            self._child.draw(renderer, stack.push(self.local_transform))


class LeafNode(Node):
    """A node drawing one named mesh with a material and texture.

    Attributes:
        mesh_name: Name of the mesh registered with the renderer.
        material: Material applied to the mesh.
        texture_name: Name of the texture registered with the renderer.
    """

    def __init__(
        self,
        name: str = "",
        mesh_name: str = "",
        material: Material = DEFAULT_MATERIAL,
        texture_name: str = "white",
    ) -> None:
        super().__init__(name)
        self.mesh_name = mesh_name
        self.material = material
        self.texture_name = texture_name
        self._failure_reported = False
        self._texture_failure_reported = False

    def _report_failure(self, exc: IntersectionError) -> None:
        if not self._failure_reported:
            self._failure_reported = True
            logger.warning("Leaf %r produced no hits: %s", self.name, exc)
        else:
            logger.debug("Leaf %r produced no hits: %s", self.name, exc)

    def _resolve_texture(self, renderer: SceneGraphRenderer) -> Optional[TextureImage]:
        """Look up this leaf's texture; a failed lookup leaves the hit untextured."""
        try:
            return renderer.get_texture(self.texture_name)
        except TextureSampleError as exc:
            level = logging.DEBUG if self._texture_failure_reported else logging.WARNING
            self._texture_failure_reported = True
            logger.log(level, "Leaf %r has no texture %r: %s", self.name, self.texture_name, exc)
            return None

    def ray_cast(self, stack: TransformStack, ray: Ray, renderer: SceneGraphRenderer) -> list[HitRecord]:
        """Intersect the ray with this leaf's mesh.

        The ray is mapped into object space by the inverse of the stack top;
        hit points go back through the top matrix and normals through its
        inverse transpose. A failed intersection yields no hits.
        """
        top = stack.top
        try:
            inverse = np.linalg.inv(top)
        except np.linalg.LinAlgError:
            self._report_failure(IntersectionError(f"singular transform on leaf {self.name!r}"))
            return []

        try:
            local_hits = renderer.intersect(self.mesh_name, ray.transformed(inverse))
        except IntersectionError as exc:
            self._report_failure(exc)
            return []
        if not local_hits:
            return []

        texture = self._resolve_texture(renderer)
        to_view_normal = normal_matrix(top)
        records = []
        for hit in local_hits:
            normal = to_view_normal @ vector4(hit.normal)
            records.append(
                HitRecord(
                    t=hit.t,
                    intersection=top @ point4(hit.point),
                    normal=np.append(normalize(normal[:3]), 0.0),
                    texture_coordinate=np.array(hit.texture_coordinate, dtype=np.float64),
                    material=self.material,
                    texture=texture,
                    node_name=self.name,
                )
            )
        return records

    def draw(self, renderer: SceneGraphRenderer, stack: TransformStack) -> None:
        renderer.draw_mesh(self.mesh_name, self.material, self.texture_name, stack.top)

    def __repr__(self) -> str:
        return f"LeafNode(name={self.name!r}, mesh={self.mesh_name!r})"
