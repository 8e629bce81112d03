"""Scene-graph ray tracer.

This package renders hierarchical 3D scenes two ways: an interactive path
delegated to a renderer object, and an offline ray-traced path producing a
still image with Phong shading, hard shadows, spotlights and textures.

Subpackages:
    core: Rays, transform stacks, shading and the ray tracing driver
    geometry: Object-space mesh primitives (sphere, quad, box)
    materials: Phong materials and textures
    scene: Scene-graph nodes, lights, hit records and the Scenegraph
    renderer: Renderer contract and the headless renderer
    preview: PNG export and numbered output files
"""

__version__ = "0.1.0"
