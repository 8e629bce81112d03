"""Light sources attached to scene-graph nodes.

A light's position is homogeneous: w=0 encodes a directional light (x, y, z
then give the direction in which its light travels) and w!=0 a positional
light. Positions and spot directions are stored in the local
frame of the node that owns the light; the tracer maps them to view space with
the transform under which the light was discovered.

Example:
    >>> from src.sgraph.scene.light import Light
    >>> lamp = Light.point((0.0, 5.0, 0.0), diffuse=(1.0, 1.0, 1.0))
    >>> lamp.is_positional, lamp.is_spotlight
    (True, False)
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Optional

import numpy as np
import numpy.typing as npt

from src.sgraph.core.ray import as_vec3

RGB = tuple[float, float, float]


@dataclass(eq=False)
class Light:
    """A Phong light source.

    Lights compare and hash by identity: two lights with equal parameters
    attached at different places are different lights.

    Attributes:
        position: Homogeneous position (4,). w=0 means directional.
        spot_direction: Spotlight axis as a homogeneous vector (4,), w=0.
        spot_cutoff: Cosine of the spotlight half-angle, or None if the light
            is not a spotlight.
        ambient: Ambient intensity (R, G, B).
        diffuse: Diffuse intensity (R, G, B).
        specular: Specular intensity (R, G, B).
        name: Optional label used in logs.
    """

    position: npt.NDArray[np.float64] = field(default_factory=lambda: np.array([0.0, 0.0, 0.0, 1.0]))
    spot_direction: npt.NDArray[np.float64] = field(default_factory=lambda: np.array([0.0, 0.0, -1.0, 0.0]))
    spot_cutoff: Optional[float] = None
    ambient: RGB = (0.0, 0.0, 0.0)
    diffuse: RGB = (0.0, 0.0, 0.0)
    specular: RGB = (0.0, 0.0, 0.0)
    name: str = ""

    def __post_init__(self) -> None:
        position = np.asarray(self.position, dtype=np.float64).reshape(-1)
        if position.shape[0] == 3:
            position = np.append(position, 1.0)
        if position.shape[0] != 4:
            raise ValueError(f"Light position must have 3 or 4 components, got {position.shape[0]}")
        self.position = position
        self.spot_direction = np.append(as_vec3(self.spot_direction), 0.0)
        if self.spot_cutoff is not None and not -1.0 <= self.spot_cutoff <= 1.0:
            raise ValueError(f"spot_cutoff is a cosine and must lie in [-1, 1], got {self.spot_cutoff}")
        for label in ("ambient", "diffuse", "specular"):
            value = tuple(float(c) for c in getattr(self, label))
            if len(value) != 3:
                raise ValueError(f"Light {label} must have 3 components, got {len(value)}")
            setattr(self, label, value)

    @property
    def is_positional(self) -> bool:
        return self.position[3] != 0.0

    @property
    def is_spotlight(self) -> bool:
        return self.spot_cutoff is not None

    @classmethod
    def point(cls, position: tuple[float, float, float], **kwargs) -> Light:
        """Create a positional light at a 3D point."""
        return cls(position=np.array([*position, 1.0]), **kwargs)

    @classmethod
    def directional(cls, direction: tuple[float, float, float], **kwargs) -> Light:
        """Create a directional light whose rays travel along ``direction``.

        The stored position is the travel direction with w=0; shading
        recovers the surface-to-light vector as its negation.
        """
        return cls(position=np.append(as_vec3(direction), 0.0), **kwargs)

    @classmethod
    def spotlight(
        cls,
        position: tuple[float, float, float],
        direction: tuple[float, float, float],
        cutoff_degrees: float,
        **kwargs,
    ) -> Light:
        """Create a positional spotlight with a cone half-angle in degrees."""
        if not 0.0 <= cutoff_degrees <= 180.0:
            raise ValueError(f"cutoff_degrees must lie in [0, 180], got {cutoff_degrees}")
        return cls(
            position=np.array([*position, 1.0]),
            spot_direction=np.array([*direction, 0.0]),
            spot_cutoff=math.cos(math.radians(cutoff_degrees)),
            **kwargs,
        )

    def __repr__(self) -> str:
        kind = "spot" if self.is_spotlight else ("point" if self.is_positional else "directional")
        return f"Light(name={self.name!r}, kind={kind}, position={self.position.tolist()})"
