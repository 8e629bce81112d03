"""Scene module for scene graphs, lights and hit records.

Components:
    light: Point, directional and spot lights
    intersection: View-space hit records and closest-hit selection
    nodes: Group, transform and leaf nodes with their traversals
    scenegraph: Scene graph container and rendering entry points
    cornell_box: Cornell box demo scene

The scene graph is a tree: group nodes own ordered children, transform nodes
own a single child and place it with a local transform, and leaf nodes refer
to a mesh registered with the renderer. Any node may carry lights.
"""

from .intersection import HitRecord, closest_hit
from .light import Light
from .nodes import GroupNode, LeafNode, Node, TransformNode

# Note: scenegraph and cornell_box are NOT imported here to avoid circular
# imports with the tracer. Import them directly:
#   from src.sgraph.scene.scenegraph import Scenegraph

__all__ = [
    "HitRecord",
    "closest_hit",
    "Light",
    "Node",
    "GroupNode",
    "TransformNode",
    "LeafNode",
]
