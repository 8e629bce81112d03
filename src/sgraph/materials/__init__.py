"""Materials module for surface appearance.

Components:
    phong: Ambient/diffuse/specular material with shininess exponent
    texture: Texture images with (s, t) sampling and Pillow loading
"""

from .phong import DEFAULT_MATERIAL, Material
from .texture import WHITE, TextureImage, TextureSource, load_texture

__all__ = [
    "Material",
    "DEFAULT_MATERIAL",
    "TextureImage",
    "TextureSource",
    "WHITE",
    "load_texture",
]
