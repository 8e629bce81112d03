"""Texture images and texture-coordinate sampling.

Textures are stored as float32 RGB arrays in [0, 1], row 0 first. Images
loaded from disk with Pillow have row 0 at the top while texture coordinates
put t=0 at the bottom, so they are flagged ``flip_vertical``.

Example:
    >>> from src.sgraph.materials.texture import TextureImage
    >>> checker = TextureImage.from_array([[[0.0, 0.0, 0.0], [1.0, 1.0, 1.0]]])
    >>> checker.sample(0.9, 0.0)
    array([1., 1., 1.], dtype=float32)
"""

from __future__ import annotations

from pathlib import Path
from typing import Union

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

from src.sgraph.core.errors import TextureSampleError

# Tolerance on texture coordinates slightly outside [0, 1] from rounding
_COORD_TOLERANCE = 1e-6


class TextureImage:
    """An RGB texture addressed by (s, t) coordinates in [0, 1].

    Attributes:
        pixels: Float32 array of shape (H, W, 3) with values in [0, 1].
        flip_vertical: Whether t must be flipped (t -> 1 - t) before lookup.
        name: Optional name the texture was registered under.
    """

    def __init__(
        self,
        pixels: npt.NDArray[np.float32],
        *,
        flip_vertical: bool = False,
        name: str = "",
    ) -> None:
        if pixels.ndim != 3 or pixels.shape[2] != 3 or pixels.shape[0] == 0 or pixels.shape[1] == 0:
            raise ValueError(f"Texture pixels must have shape (H, W, 3), got {pixels.shape}")
        self.pixels = pixels
        self.flip_vertical = flip_vertical
        self.name = name

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @classmethod
    def from_array(cls, array: npt.ArrayLike, *, flip_vertical: bool = False, name: str = "") -> TextureImage:
        """Build a texture from an (H, W, 3) array.

        Integer arrays are treated as 8-bit and scaled to [0, 1].
        """
        arr = np.asarray(array)
        if np.issubdtype(arr.dtype, np.integer):
            arr = arr.astype(np.float32) / 255.0
        arr = np.clip(arr.astype(np.float32), 0.0, 1.0)
        return cls(arr, flip_vertical=flip_vertical, name=name)

    @classmethod
    def from_file(cls, path: Union[str, Path], *, name: str = "") -> TextureImage:
        """Load a texture from an image file with Pillow.

        Raises:
            TextureSampleError: If the file cannot be read as an image.
        """
        try:
            with PILImage.open(path) as image:
                rgb = np.asarray(image.convert("RGB"), dtype=np.float32) / 255.0
        except (OSError, ValueError) as exc:
            raise TextureSampleError(f"Cannot load texture {path!s}: {exc}") from exc
        return cls(rgb, flip_vertical=True, name=name or Path(path).stem)

    @classmethod
    def solid(cls, rgb: tuple[float, float, float], *, name: str = "") -> TextureImage:
        """Build a 1x1 texture of a single color."""
        return cls.from_array(np.array([[rgb]], dtype=np.float32), name=name)

    def sample(self, s: float, t: float) -> npt.NDArray[np.float32]:
        """Return the nearest texel color at (s, t).

        Raises:
            TextureSampleError: If either coordinate lies outside [0, 1] or is NaN.
        """
        if not (-_COORD_TOLERANCE <= s <= 1.0 + _COORD_TOLERANCE) or not (
            -_COORD_TOLERANCE <= t <= 1.0 + _COORD_TOLERANCE
        ):
            raise TextureSampleError(f"Texture coordinate ({s}, {t}) outside [0, 1]")
        if self.flip_vertical:
            t = 1.0 - t
        col = min(max(int(s * self.width), 0), self.width - 1)
        row = min(max(int(t * self.height), 0), self.height - 1)
        return self.pixels[row, col].copy()

    def __repr__(self) -> str:
        return f"TextureImage(name={self.name!r}, size={self.width}x{self.height}, flip={self.flip_vertical})"


# Default texture every scene graph registers as "white"
WHITE = TextureImage.solid((1.0, 1.0, 1.0), name="white")

TextureSource = Union[str, Path, TextureImage, npt.NDArray[np.generic]]


def load_texture(source: TextureSource, name: str = "") -> TextureImage:
    """Resolve a texture registration (path, array or TextureImage) to a texture.

    Raises:
        TextureSampleError: If a path cannot be loaded.
    """
    if isinstance(source, TextureImage):
        return source
    if isinstance(source, (str, Path)):
        return TextureImage.from_file(source, name=name)
    return TextureImage.from_array(source, name=name)
