"""Image export utilities for ray-traced images.

This module saves rendered images as 8-bit PNG files with Pillow and names
sequential outputs through an ``ImageSequenceWriter``, which owns its own
counter so independent render jobs never share numbering.

Example:
    >>> from src.sgraph.preview.export import ImageSequenceWriter
    >>> writer = ImageSequenceWriter("renders")
    >>> writer.next_path().name
    'image001.png'
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Union

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

from src.sgraph.core.errors import OutputWriteError
from src.sgraph.core.image import RenderedImage, quantize_rgb8

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def image_to_uint8(image: Union[RenderedImage, npt.ArrayLike]) -> npt.NDArray[np.uint8]:
    """Convert a rendered image or float (H, W, 3) array to 8-bit RGB."""
    if isinstance(image, RenderedImage):
        return image.to_rgb8()
    arr = np.asarray(image)
    if arr.dtype == np.uint8:
        return arr
    return quantize_rgb8(arr)


def save_png(image: Union[RenderedImage, npt.ArrayLike], filepath: PathLike) -> Path:
    """Save an image as an 8-bit RGB PNG file.

    Args:
        image: A RenderedImage, a float (H, W, 3) array in linear [0, 1] or a
            uint8 (H, W, 3) array.
        filepath: Output file path (should end in .png).

    Returns:
        The path written.

    Raises:
        OutputWriteError: If Pillow cannot write the file.
    """
    path = Path(filepath)
    image_uint8 = image_to_uint8(image)
    try:
        pil_image = PILImage.fromarray(image_uint8)
        pil_image.save(path, format="PNG")
    except (OSError, ValueError) as exc:
        raise OutputWriteError(f"Cannot write {path}: {exc}") from exc
    logger.info("Wrote %dx%d image to %s", image_uint8.shape[1], image_uint8.shape[0], path)
    return path


class ImageSequenceWriter:
    """Writes images to sequentially numbered files in a directory.

    Every call to ``write`` consumes the next index, even when the write
    fails, so a retried render never overwrites an earlier output.

    Attributes:
        directory: Directory receiving the files.
        pattern: ``str.format`` pattern with an ``index`` field.
    """

    def __init__(
        self,
        directory: PathLike = ".",
        pattern: str = "image{index:03d}.png",
        start: int = 1,
    ) -> None:
        if "{index" not in pattern:
            raise ValueError(f"Pattern must contain an {{index}} field, got {pattern!r}")
        self.directory = Path(directory)
        self.pattern = pattern
        self._next_index = start
        self._lock = threading.Lock()

    @property
    def next_index(self) -> int:
        return self._next_index

    def _claim_index(self) -> int:
        with self._lock:
            index = self._next_index
            self._next_index += 1
        return index

    def next_path(self) -> Path:
        """Return the path the next write will use, without consuming it."""
        return self.directory / self.pattern.format(index=self._next_index)

    def write(self, image: Union[RenderedImage, npt.ArrayLike]) -> Path:
        """Write an image to the next numbered file.

        Returns:
            The path written.

        Raises:
            OutputWriteError: If the file cannot be written.
        """
        path = self.directory / self.pattern.format(index=self._claim_index())
        return save_png(image, path)
