"""Core ray-tracing module.

Components:
    ray: Ray data structure and vector utilities
    transform: Persistent transform stack and 4x4 matrix builders
    errors: Exception hierarchy
    config: Ray-trace configuration
    image: Float image buffers and 8-bit quantisation (Taichi kernel)
    shading: Shadow tests and Phong shading
    tracer: Full-image ray tracing driver

Traversal and shading run on the Python side with NumPy: scene graphs are
recursive, polymorphic structures that Taichi kernels cannot walk.
"""

from .config import SHADOW_EPSILON, SPOT_BRIGHTNESS, RayTraceConfig
from .errors import (
    IntersectionError,
    NotReadyError,
    OutputWriteError,
    RenderCancelled,
    SceneGraphError,
    TextureSampleError,
)
from .ray import Ray, as_vec3, length, normalize, point4, reflect, vec3, vector4
from .transform import TransformStack, identity, look_at, normal_matrix, rotate, scale, translate

# Note: shading and tracer are NOT imported here to avoid circular imports
# with the scene package. Import them directly from src.sgraph.core.tracer.

__all__ = [
    "Ray",
    "vec3",
    "as_vec3",
    "point4",
    "vector4",
    "length",
    "normalize",
    "reflect",
    "TransformStack",
    "identity",
    "translate",
    "scale",
    "rotate",
    "look_at",
    "normal_matrix",
    "RayTraceConfig",
    "SHADOW_EPSILON",
    "SPOT_BRIGHTNESS",
    "SceneGraphError",
    "NotReadyError",
    "IntersectionError",
    "TextureSampleError",
    "OutputWriteError",
    "RenderCancelled",
]
