"""Preview module for image output.

Components:
    export: PNG export and sequentially numbered output files

Example:
    >>> from src.sgraph.preview import ImageSequenceWriter
    >>> writer = ImageSequenceWriter("renders")
    >>> path = writer.write(image)  # renders/image001.png
"""

from src.sgraph.preview.export import ImageSequenceWriter, image_to_uint8, save_png

__all__ = [
    "ImageSequenceWriter",
    "image_to_uint8",
    "save_png",
]
