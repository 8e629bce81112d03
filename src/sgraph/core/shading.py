"""Shadow testing and Phong shading of a closest hit.

Everything here works in the view space of the transform stack handed in: hit
positions and normals come from the hit-testing traversal, and each light is
moved into view space with the matrix recorded when it was discovered.

Shading a hit:

1. Start from the material's ambient reflectance.
2. For each light that ``can_see_light`` reports as visible:
   - if the light is a spotlight and the surface lies outside its cone
     (``dot(-spot, L) > cutoff`` fails), add ``spot_brightness * ambient``;
   - otherwise add the Phong ambient, diffuse and specular terms.
3. Modulate by the texture color at the hit's texture coordinate.
4. Clamp every channel to [0, 1].

Example:
    >>> from src.sgraph.core.shading import phong_terms
    >>> import numpy as np
    >>> from src.sgraph.materials.phong import Material
    >>> from src.sgraph.scene.light import Light
    >>> material = Material(diffuse=(1.0, 1.0, 1.0))
    >>> light = Light.point((0.0, 0.0, 1.0), diffuse=(0.5, 0.5, 0.5))
    >>> ambient, diffuse, specular = phong_terms(
    ...     material, light, np.array([0.0, 0.0, 1.0]), np.array([0.0, 0.0, 1.0]), np.array([0.0, 0.0, 1.0])
    ... )
    >>> diffuse
    array([0.5, 0.5, 0.5])
"""

from __future__ import annotations

import logging
import math
import threading
from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt

from src.sgraph.core.config import SHADOW_EPSILON, RayTraceConfig
from src.sgraph.core.errors import SceneGraphError, TextureSampleError
from src.sgraph.core.ray import Ray, length, normalize, reflect
from src.sgraph.core.transform import TransformStack
from src.sgraph.materials.phong import Material
from src.sgraph.scene.intersection import HitRecord
from src.sgraph.scene.light import Light

if TYPE_CHECKING:
    from src.sgraph.renderer.base import SceneGraphRenderer
    from src.sgraph.scene.nodes import LightMap, Node

logger = logging.getLogger(__name__)

Color = npt.NDArray[np.float64]

_WHITE = np.ones(3)

# Nodes whose texture fallback has already been warned about
_texture_fallbacks_reported: set[str] = set()
_texture_fallbacks_lock = threading.Lock()


# =============================================================================
# Light geometry
# =============================================================================


def light_position_in_view(light: Light, matrix: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    """Return the light's 3D view-space position (or travel direction if directional)."""
    position = matrix @ light.position
    if light.is_positional:
        return position[:3] / position[3]
    return position[:3]


def direction_to_light(light: Light, matrix: npt.NDArray[np.float64], point: npt.NDArray[np.float64]) -> Color:
    """Return the unit vector L from ``point`` toward the light."""
    position = light_position_in_view(light, matrix)
    if light.is_positional:
        return normalize(position - point)
    return normalize(-position)


# =============================================================================
# Visibility
# =============================================================================


def can_see_light(
    hit: HitRecord,
    light: Light,
    light_matrix: npt.NDArray[np.float64],
    stack: TransformStack,
    root: Node,
    renderer: SceneGraphRenderer,
    *,
    epsilon: float = SHADOW_EPSILON,
) -> bool:
    """Return whether the light reaches the hit point unobstructed.

    For a positional light the shadow ray's direction is the unnormalised
    vector from the hit to the light, so t=1 lands on the light and an occluder
    counts only when ``epsilon < t < 1 + epsilon``. For a directional light the
    direction is the unit vector toward the light and any hit beyond
    ``epsilon`` occludes. The ray origin is pushed ``epsilon`` along the
    direction to step off the surface.

    Args:
        hit: The closest hit being shaded.
        light: The light to test.
        light_matrix: Matrix taking the light's local frame to view space.
        stack: Transform stack for the shadow traversal (world to view).
        root: Root of the scene graph.
        renderer: Renderer answering leaf intersections.
        epsilon: Shadow offset and lower bound on occluder t.
    """
    position = light_position_in_view(light, light_matrix)
    if light.is_positional:
        direction = position - hit.position
        t_max = 1.0 + epsilon
        if length(direction) < 1e-12:
            return True
    else:
        direction = normalize(-position)
        t_max = math.inf

    shadow_ray = Ray(origin=hit.position + epsilon * normalize(direction), direction=direction)
    for occluder in root.ray_cast(stack, shadow_ray, renderer):
        if epsilon < occluder.t < t_max:
            return False
    return True


# =============================================================================
# Phong terms
# =============================================================================


def phong_terms(
    material: Material,
    light: Light,
    normal: Color,
    to_light: Color,
    to_viewer: Color,
) -> tuple[Color, Color, Color]:
    """Return the (ambient, diffuse, specular) contribution of one light.

    Args:
        material: Material of the surface.
        light: The light source.
        normal: Unit surface normal N.
        to_light: Unit vector L toward the light.
        to_viewer: Unit vector V toward the viewer.
    """
    n_dot_l = float(np.dot(normal, to_light))
    ambient = material.ambient_array() * np.array(light.ambient)
    diffuse = material.diffuse_array() * np.array(light.diffuse) * max(n_dot_l, 0.0)
    if n_dot_l > 0.0:
        reflected = normalize(reflect(-to_light, normal))
        r_dot_v = max(float(np.dot(reflected, to_viewer)), 0.0)
        specular = material.specular_array() * np.array(light.specular) * r_dot_v**material.shininess
    else:
        specular = np.zeros(3)
    return ambient, diffuse, specular


def outside_spot_cone(light: Light, light_matrix: npt.NDArray[np.float64], to_light: Color) -> bool:
    """Return whether L falls outside the light's spot cone.

    Lights without a cutoff, directional lights and spotlights with a
    zero-length axis have no cone.
    """
    if not light.is_spotlight or not light.is_positional:
        return False
    spot = normalize((light_matrix @ light.spot_direction)[:3])
    if not spot.any():
        return False
    return not float(np.dot(-spot, to_light)) > light.spot_cutoff


def light_contribution(
    hit: HitRecord,
    light: Light,
    light_matrix: npt.NDArray[np.float64],
    config: RayTraceConfig,
) -> Color:
    """Return what one visible light adds to the hit's color."""
    point = hit.position
    to_light = direction_to_light(light, light_matrix, point)
    if outside_spot_cone(light, light_matrix, to_light):
        return config.spot_brightness * hit.material.ambient_array()
    ambient, diffuse, specular = phong_terms(
        hit.material, light, normalize(hit.normal3), to_light, normalize(-point)
    )
    return ambient + diffuse + specular


# =============================================================================
# Texture
# =============================================================================


def texture_color(hit: HitRecord) -> Color:
    """Sample the hit's texture, falling back to white.

    Raises:
        TextureSampleError: If the hit has no texture or the coordinate is
            out of range.
    """
    if hit.texture is None:
        raise TextureSampleError(f"No texture resolved for node {hit.node_name!r}")
    s, t = hit.texture_coordinate
    return hit.texture.sample(float(s), float(t)).astype(np.float64)


# =============================================================================
# Shading
# =============================================================================


def _report_texture_fallback(hit: HitRecord, exc: TextureSampleError) -> None:
    """Warn once per node about a texture fallback, then log at DEBUG."""
    with _texture_fallbacks_lock:
        first = hit.node_name not in _texture_fallbacks_reported
        _texture_fallbacks_reported.add(hit.node_name)
    level = logging.WARNING if first else logging.DEBUG
    logger.log(level, "Texture lookup failed for %r, using white: %s", hit.node_name, exc)


def shade(
    hit: HitRecord,
    lights: LightMap,
    stack: TransformStack,
    root: Node,
    renderer: SceneGraphRenderer,
    config: RayTraceConfig,
) -> Color:
    """Compute the final clamped RGB color of a hit.

    A light whose visibility test or contribution raises a
    ``SceneGraphError`` is skipped; a failed texture lookup shades as white.
    """
    color = hit.material.ambient_array().astype(np.float64)

    for light, matrix in lights.items():
        try:
            if not can_see_light(hit, light, matrix, stack, root, renderer, epsilon=config.shadow_epsilon):
                continue
            color = color + light_contribution(hit, light, matrix, config)
        except SceneGraphError as exc:
            logger.warning("Skipping light %r: %s", light.name, exc)

    try:
        color = color * texture_color(hit)
    except TextureSampleError as exc:
        _report_texture_fallback(hit, exc)
        color = color * _WHITE

    return np.clip(color, 0.0, 1.0)
