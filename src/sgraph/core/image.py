"""Float image buffers and 8-bit quantisation.

The tracer writes linear RGB into a float32 NumPy buffer of shape
(height, width, 3), row 0 at the top. Quantisation to 8-bit RGB runs as a
Taichi kernel over the whole buffer.

Example:
    >>> import numpy as np
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.sgraph.core.image import quantize_rgb8
    >>> quantize_rgb8(np.full((1, 1, 3), 0.5, dtype=np.float32))
    array([[[128, 128, 128]]], dtype=uint8)
"""

from dataclasses import dataclass

import numpy as np
import numpy.typing as npt
import taichi as ti

# =============================================================================
# Quantisation
# =============================================================================


@ti.kernel
def _quantize_kernel(
    src: ti.types.ndarray(dtype=ti.f32, ndim=3),
    dst: ti.types.ndarray(dtype=ti.u8, ndim=3),
):
    """Clamp each channel to [0, 1] and round it to 8 bits."""
    for i, j, c in ti.ndrange(src.shape[0], src.shape[1], src.shape[2]):
        v = ti.min(ti.max(src[i, j, c], 0.0), 1.0)
        dst[i, j, c] = ti.cast(v * 255.0 + 0.5, ti.u8)


def quantize_rgb8(image: npt.ArrayLike) -> npt.NDArray[np.uint8]:
    """Convert a linear float RGB image to clamped 8-bit RGB.

    NaNs become 0 and infinities saturate before quantisation.

    Args:
        image: Array of shape (H, W, 3).

    Returns:
        uint8 array of the same shape.

    Raises:
        ValueError: If ``image`` is not an (H, W, 3) array.
    """
    src = np.nan_to_num(np.asarray(image, dtype=np.float32), nan=0.0, posinf=1.0, neginf=0.0)
    if src.ndim != 3 or src.shape[2] != 3:
        raise ValueError(f"Expected an (H, W, 3) image, got shape {src.shape}")
    dst = np.zeros(src.shape, dtype=np.uint8)
    if src.size:
        _quantize_kernel(np.ascontiguousarray(src), dst)
    return dst


# =============================================================================
# Rendered image
# =============================================================================


@dataclass
class RenderedImage:
    """The result of a full-image ray trace.

    Attributes:
        pixels: Linear RGB float32 buffer of shape (height, width, 3), row 0
            at the top of the image.
    """

    pixels: npt.NDArray[np.float32]

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    def to_rgb8(self) -> npt.NDArray[np.uint8]:
        """Return the image as clamped 8-bit RGB."""
        return quantize_rgb8(self.pixels)

    def __repr__(self) -> str:
        return f"RenderedImage({self.width}x{self.height})"
