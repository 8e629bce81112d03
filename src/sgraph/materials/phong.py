"""Phong surface material.

A material carries the ambient, diffuse and specular reflectances of a surface
and its specular shininess exponent. Materials are read-only during shading.

Example:
    >>> from src.sgraph.materials.phong import Material
    >>> red = Material(ambient=(0.2, 0.0, 0.0), diffuse=(0.8, 0.0, 0.0))
    >>> red.shininess
    1.0
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

RGB = tuple[float, float, float]


def _validate_rgb(name: str, value: RGB) -> RGB:
    """Check a reflectance triple and return it as floats.

    Raises:
        ValueError: If the triple does not have 3 components or any is negative.
    """
    if len(value) != 3:
        raise ValueError(f"{name} must have 3 components, got {len(value)}")
    result = tuple(float(c) for c in value)
    for i, component in enumerate(result):
        if component < 0.0:
            raise ValueError(f"{name} component {i} = {component} is negative.")
    return result


@dataclass(frozen=True)
class Material:
    """Phong material parameters.

    Attributes:
        ambient: Ambient reflectance (R, G, B).
        diffuse: Diffuse reflectance (R, G, B).
        specular: Specular reflectance (R, G, B).
        shininess: Specular exponent (>= 0).
    """

    ambient: RGB = (0.0, 0.0, 0.0)
    diffuse: RGB = (0.0, 0.0, 0.0)
    specular: RGB = (0.0, 0.0, 0.0)
    shininess: float = 1.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "ambient", _validate_rgb("ambient", self.ambient))
        object.__setattr__(self, "diffuse", _validate_rgb("diffuse", self.diffuse))
        object.__setattr__(self, "specular", _validate_rgb("specular", self.specular))
        if self.shininess < 0.0:
            raise ValueError(f"Shininess = {self.shininess} is negative.")
        object.__setattr__(self, "shininess", float(self.shininess))

    def ambient_array(self) -> np.ndarray:
        return np.array(self.ambient)

    def diffuse_array(self) -> np.ndarray:
        return np.array(self.diffuse)

    def specular_array(self) -> np.ndarray:
        return np.array(self.specular)


DEFAULT_MATERIAL = Material(ambient=(0.3, 0.3, 0.3), diffuse=(0.8, 0.8, 0.8), specular=(0.2, 0.2, 0.2), shininess=10.0)
