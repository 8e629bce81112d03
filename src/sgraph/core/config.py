"""Configuration for the ray-traced rendering path.

Example:
    >>> from src.sgraph.core.config import RayTraceConfig
    >>> config = RayTraceConfig(max_workers=4)
    >>> config.shadow_epsilon
    0.001
"""

from dataclasses import asdict, dataclass, fields
from typing import Any

# Offset applied to shadow-ray origins to avoid self-intersection
SHADOW_EPSILON = 1e-3

# Fraction of the material ambient added for a light whose spot cone misses
SPOT_BRIGHTNESS = 0.4


@dataclass
class RayTraceConfig:
    """Tunable parameters of a full-image ray trace.

    Attributes:
        shadow_epsilon: Shadow ray origin offset and lower bound on occluder t.
        spot_brightness: Scale of the material ambient added when a surface
            lies outside a spotlight's cone.
        max_workers: Number of worker threads tracing scan lines. 1 traces
            serially on the calling thread.
        background: RGB color written for rays that hit nothing.
    """

    shadow_epsilon: float = SHADOW_EPSILON
    spot_brightness: float = SPOT_BRIGHTNESS
    max_workers: int = 1
    background: tuple[float, float, float] = (0.0, 0.0, 0.0)

    def __post_init__(self) -> None:
        if self.shadow_epsilon <= 0.0:
            raise ValueError(f"shadow_epsilon must be positive, got {self.shadow_epsilon}")
        if self.spot_brightness < 0.0:
            raise ValueError(f"spot_brightness must be >= 0, got {self.spot_brightness}")
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {self.max_workers}")
        if len(self.background) != 3:
            raise ValueError(f"background must have 3 components, got {self.background}")
        self.background = tuple(float(c) for c in self.background)

    def to_dict(self) -> dict[str, Any]:
        """Return the configuration as a plain dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RayTraceConfig":
        """Build a configuration from a dictionary, rejecting unknown keys.

        Raises:
            ValueError: If ``data`` contains keys that are not config fields.
        """
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown config keys: {sorted(unknown)}")
        return cls(**data)
