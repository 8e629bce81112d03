"""Cornell box scene graph.

This module builds the classic Cornell box as a scene graph, the demo scene
for the ray-traced path. It exercises every node variant: the walls and
objects are unit meshes placed by transform nodes under one group, the main
light hangs off the root and an optional spotlight hangs off its own
transform node.

The Cornell box consists of:
- 5 walls forming an open box (left, right, back, floor, ceiling)
- Left wall: red, right wall: green (as seen from the camera)
- Back, floor, ceiling: white
- A checker-textured sphere and a short rotated block on the floor
- A point light just below the ceiling, plus a spotlight aimed at the sphere

The box spans 0 to ``box_size`` on each axis with the camera outside the
open front, looking toward +z.

Example:
    >>> from src.sgraph.scene.cornell_box import create_cornell_box_scene
    >>> graph, camera = create_cornell_box_scene()
    >>> image = graph.ray_trace(64, 64, camera.view_stack(), camera.vfov)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np
import numpy.typing as npt

from src.sgraph.core.transform import TransformStack, look_at, rotate, scale, translate
from src.sgraph.geometry import Box, Quad, Sphere
from src.sgraph.materials.phong import Material
from src.sgraph.renderer.base import SceneGraphRenderer
from src.sgraph.renderer.headless import HeadlessRenderer
from src.sgraph.scene.light import Light
from src.sgraph.scene.nodes import GroupNode, LeafNode, TransformNode
from src.sgraph.scene.scenegraph import Scenegraph

RGB = tuple[float, float, float]

# =============================================================================
# Cornell Box Parameters
# =============================================================================


@dataclass
class CornellBoxParams:
    """Parameters for configuring a Cornell box scene.

    Attributes:
        light_intensity: Scale applied to the light's diffuse and specular color.
        light_color: RGB color of the lights (each component in [0, 1]).
        left_wall_color: RGB reflectance of the wall on the image's left.
        right_wall_color: RGB reflectance of the wall on the image's right.
        back_wall_color: RGB reflectance of the back wall, floor and ceiling.
        spotlight: Whether to add the spotlight aimed at the sphere.
        spot_cutoff_degrees: Half-angle of the spotlight cone.

    Example:
        >>> params = CornellBoxParams()
        >>> params.left_wall_color
        (0.65, 0.05, 0.05)
        >>> warm = CornellBoxParams(light_color=(1.0, 0.9, 0.8), spotlight=False)
    """

    light_intensity: float = 1.0
    light_color: RGB = (1.0, 1.0, 1.0)
    left_wall_color: RGB = (0.65, 0.05, 0.05)
    right_wall_color: RGB = (0.12, 0.45, 0.15)
    back_wall_color: RGB = (0.73, 0.73, 0.73)
    spotlight: bool = True
    spot_cutoff_degrees: float = 20.0

    def __post_init__(self) -> None:
        if self.light_intensity < 0.0:
            raise ValueError(f"light_intensity must be >= 0, got {self.light_intensity}")


@dataclass
class CornellBoxCamera:
    """Camera placement for the Cornell box.

    Attributes:
        eye: Camera position in world space.
        center: Point the camera looks at.
        up: Up direction.
        vfov: Vertical field of view in degrees.
    """

    eye: tuple[float, float, float]
    center: tuple[float, float, float]
    up: tuple[float, float, float] = (0.0, 1.0, 0.0)
    vfov: float = 40.0

    def view_matrix(self) -> npt.NDArray[np.float64]:
        return look_at(self.eye, self.center, self.up)

    def view_stack(self) -> TransformStack:
        """Return a transform stack whose top maps world to view space."""
        return TransformStack(self.view_matrix())


# =============================================================================
# Cornell Box Constants
# =============================================================================

# Classic Cornell box dimensions (approximately 555x555x555 units)
BOX_SIZE = 555.0

SPHERE_RADIUS = 90.0
BLOCK_SIZE = 165.0
CAMERA_DISTANCE = 800.0

# Mesh names registered with the scene graph
QUAD_MESH = "quad"
SPHERE_MESH = "sphere"
BOX_MESH = "box"
CHECKER_TEXTURE = "checker"


def _material(color: RGB, specular: float = 0.1, shininess: float = 10.0) -> Material:
    return Material(
        ambient=tuple(0.1 * c for c in color),
        diffuse=color,
        specular=(specular, specular, specular),
        shininess=shininess,
    )


def checker_texture(squares: int = 8, size: int = 64) -> npt.NDArray[np.float32]:
    """Return an (size, size, 3) black-and-white checkerboard in [0, 1]."""
    cells = (np.arange(size) * squares) // size
    board = (cells[:, None] + cells[None, :]) % 2
    gray = np.where(board == 0, 1.0, 0.25).astype(np.float32)
    return np.repeat(gray[:, :, None], 3, axis=2)


# =============================================================================
# Cornell Box Factory
# =============================================================================


def _wall(name: str, placement: npt.NDArray[np.float64], material: Material) -> TransformNode:
    return TransformNode(name, placement, LeafNode(f"{name}-mesh", QUAD_MESH, material))


def create_cornell_box_scene(
    box_size: float = BOX_SIZE,
    params: Optional[CornellBoxParams] = None,
    renderer: Optional[SceneGraphRenderer] = None,
) -> tuple[Scenegraph, CornellBoxCamera]:
    """Create a Cornell box scene graph with a standard camera.

    Every wall is the unit quad (normal +z) scaled to the box size, turned to
    face into the box and moved into place.

    Args:
        box_size: The size of the box in each dimension.
        params: Optional CornellBoxParams; defaults to CornellBoxParams().
        renderer: Renderer to install; defaults to a new HeadlessRenderer.

    Returns:
        A tuple of (Scenegraph, CornellBoxCamera). The scene graph has its
        root and renderer set and is ready to ray trace.
    """
    if params is None:
        params = CornellBoxParams()
    s = box_size
    half = 0.5 * s

    graph = Scenegraph()
    graph.add_polygon_mesh(QUAD_MESH, Quad())
    graph.add_polygon_mesh(SPHERE_MESH, Sphere())
    graph.add_polygon_mesh(BOX_MESH, Box())
    graph.add_texture(CHECKER_TEXTURE, checker_texture())

    white = _material(params.back_wall_color)
    wall_size = scale(s, s, 1.0)

    # =========================================================================
    # Walls
    # =========================================================================

    walls = [
        _wall("back-wall", translate(half, half, s) @ rotate(180.0, (0, 1, 0)) @ wall_size, white),
        _wall("floor", translate(half, 0.0, half) @ rotate(-90.0, (1, 0, 0)) @ wall_size, white),
        _wall("ceiling", translate(half, s, half) @ rotate(90.0, (1, 0, 0)) @ wall_size, white),
        # The camera looks toward +z, so +x is on the image's left
        _wall(
            "left-wall",
            translate(s, half, half) @ rotate(-90.0, (0, 1, 0)) @ wall_size,
            _material(params.left_wall_color),
        ),
        _wall(
            "right-wall",
            translate(0.0, half, half) @ rotate(90.0, (0, 1, 0)) @ wall_size,
            _material(params.right_wall_color),
        ),
    ]

    # =========================================================================
    # Objects
    # =========================================================================

    sphere_center = (s * 0.65, SPHERE_RADIUS, s * 0.4)
    sphere = TransformNode(
        "sphere",
        translate(*sphere_center) @ scale(SPHERE_RADIUS, SPHERE_RADIUS, SPHERE_RADIUS),
        LeafNode(
            "sphere-mesh",
            SPHERE_MESH,
            _material((0.9, 0.9, 0.9), specular=0.6, shininess=40.0),
            CHECKER_TEXTURE,
        ),
    )
    block = TransformNode(
        "block",
        translate(s * 0.3, 0.5 * BLOCK_SIZE, s * 0.55)
        @ rotate(-18.0, (0, 1, 0))
        @ scale(BLOCK_SIZE, BLOCK_SIZE, BLOCK_SIZE),
        LeafNode("block-mesh", BOX_MESH, white),
    )

    root = GroupNode("root", [*walls, sphere, block])

    # =========================================================================
    # Lights
    # =========================================================================

    color = np.array(params.light_color)
    root.add_light(
        Light.point(
            (half, s - 5.0, half),
            ambient=tuple(0.2 * color),
            diffuse=tuple(params.light_intensity * color),
            specular=tuple(params.light_intensity * color),
            name="ceiling-light",
        )
    )

    if params.spotlight:
        # The spotlight lives in its mount's frame, straight above the sphere
        mount = TransformNode("spot-mount", translate(sphere_center[0], s - 5.0, sphere_center[2]))
        mount.add_light(
            Light.spotlight(
                (0.0, 0.0, 0.0),
                (0.0, -1.0, 0.0),
                params.spot_cutoff_degrees,
                diffuse=tuple(0.5 * params.light_intensity * color),
                specular=tuple(0.5 * params.light_intensity * color),
                name="spotlight",
            )
        )
        root.add_child(mount)

    for node in [root, *walls, sphere, block]:
        graph.add_node(node.name, node)
    graph.make_scenegraph(root)
    graph.set_renderer(renderer if renderer is not None else HeadlessRenderer())

    # =========================================================================
    # Camera Setup
    # =========================================================================

    camera = CornellBoxCamera(
        eye=(half, half, -CAMERA_DISTANCE),
        center=(half, half, half),
        up=(0.0, 1.0, 0.0),
        vfov=40.0,
    )
    return graph, camera


def get_cornell_box_bounds(box_size: float = BOX_SIZE) -> dict[str, tuple[float, float, float]]:
    """Get the bounding box of the Cornell box scene.

    Returns:
        A dictionary with keys 'min', 'max', 'center' and 'size'.
    """
    return {
        "min": (0.0, 0.0, 0.0),
        "max": (box_size, box_size, box_size),
        "center": (box_size / 2.0, box_size / 2.0, box_size / 2.0),
        "size": (box_size, box_size, box_size),
    }
