"""Full-image ray tracing driver.

For each pixel (row i from the top, column j from the left) the tracer casts a
primary ray from the camera at the origin of view space through the image
plane at distance ``d = (height / 2) / tan(fov / 2)``:

    origin    = (0, 0, 0)
    direction = (-width / 2 + j, height / 2 - i, -d)

and then, on three independent clones of the initial transform stack:

1. collects every hit of the ray and keeps the closest one,
2. collects the lights reachable in the scene graph,
3. shades the closest hit (or writes the background color on a miss).

Pixels depend only on read-only scene state, so scan lines can be traced on
worker threads. Each scan line owns its stack clones and writes a disjoint row
of the output buffer.

Example:
    >>> from src.sgraph.core.tracer import RayTracer
    >>> tracer = RayTracer(root, renderer)
    >>> image = tracer.render(64, 48, stack, fov_degrees=60.0)
    >>> image.pixels.shape
    (48, 64, 3)
"""

from __future__ import annotations

import logging
import math
import threading
import time
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import TYPE_CHECKING, Optional

import numpy as np
import numpy.typing as npt

from src.sgraph.core.config import RayTraceConfig
from src.sgraph.core.errors import RenderCancelled, SceneGraphError
from src.sgraph.core.image import RenderedImage
from src.sgraph.core.ray import Ray
from src.sgraph.core.shading import shade
from src.sgraph.core.transform import TransformStack
from src.sgraph.scene.intersection import closest_hit

if TYPE_CHECKING:
    from src.sgraph.renderer.base import SceneGraphRenderer
    from src.sgraph.scene.nodes import Node

logger = logging.getLogger(__name__)

# Type alias for progress callback
# Callback receives (rows_done, rows_total)
ProgressCallback = Callable[[int, int], None]


def camera_distance(height: int, fov_degrees: float) -> float:
    """Distance from the eye to the image plane for a vertical field of view.

    Raises:
        ValueError: If the field of view is not in (0, 180) degrees.
    """
    if not 0.0 < fov_degrees < 180.0:
        raise ValueError(f"Field of view must be in (0, 180) degrees, got {fov_degrees}")
    return (0.5 * height) / math.tan(math.radians(0.5 * fov_degrees))


def primary_ray(row: int, col: int, width: int, height: int, distance: float) -> Ray:
    """Return the view-space ray through pixel (row, col)."""
    return Ray(
        origin=np.zeros(3),
        direction=np.array([-0.5 * width + col, 0.5 * height - row, -distance]),
    )


class RayTracer:
    """Traces a scene graph into a float RGB image.

    Attributes:
        root: Root node of the scene graph.
        renderer: Renderer answering leaf intersections and texture lookups.
        config: Shading and scheduling parameters.
    """

    def __init__(
        self,
        root: Node,
        renderer: SceneGraphRenderer,
        config: Optional[RayTraceConfig] = None,
    ) -> None:
        self.root = root
        self.renderer = renderer
        self.config = config if config is not None else RayTraceConfig()

    def trace_pixel(self, ray: Ray, stack: TransformStack) -> npt.NDArray[np.float64]:
        """Return the color seen along one primary ray."""
        hit_stack = stack.clone()
        light_stack = stack.clone()
        shade_stack = stack.clone()

        hit = closest_hit(self.root.ray_cast(hit_stack, ray, self.renderer))
        if hit is None:
            return np.array(self.config.background, dtype=np.float64)

        lights = self.root.get_lights(light_stack)
        return shade(hit, lights, shade_stack, self.root, self.renderer, self.config)

    def trace_row(
        self,
        row: int,
        width: int,
        height: int,
        distance: float,
        stack: TransformStack,
    ) -> npt.NDArray[np.float32]:
        """Trace one scan line and return its (width, 3) colors."""
        colors = np.zeros((width, 3), dtype=np.float32)
        for col in range(width):
            ray = primary_ray(row, col, width, height, distance)
            try:
                colors[col] = self.trace_pixel(ray, stack)
            except SceneGraphError as exc:
                logger.warning("Pixel (%d, %d) left black: %s", row, col, exc)
        return colors

    def render(
        self,
        width: int,
        height: int,
        stack: TransformStack,
        fov_degrees: float,
        *,
        progress_callback: Optional[ProgressCallback] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> RenderedImage:
        """Trace a full image.

        Args:
            width: Image width in pixels.
            height: Image height in pixels.
            stack: Initial transform stack (world to view).
            fov_degrees: Vertical field of view in degrees.
            progress_callback: Called with (rows_done, rows_total) after every
                finished scan line.
            cancel_event: When set, tracing stops before the next scan line.

        Returns:
            The traced image.

        Raises:
            ValueError: If width or height is not positive or the field of
                view is out of range.
            RenderCancelled: If ``cancel_event`` was set before all scan lines
                finished.
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"Image size must be positive, got {width}x{height}")
        distance = camera_distance(height, fov_degrees)
        pixels = np.zeros((height, width, 3), dtype=np.float32)
        cancel = cancel_event if cancel_event is not None else threading.Event()

        start = time.perf_counter()
        if self.config.max_workers == 1:
            self._render_serial(pixels, distance, stack, progress_callback, cancel)
        else:
            self._render_threaded(pixels, distance, stack, progress_callback, cancel)

        logger.debug(
            "Traced %dx%d image in %.3fs with %d worker(s)",
            width,
            height,
            time.perf_counter() - start,
            self.config.max_workers,
        )
        return RenderedImage(pixels)

    def _render_serial(
        self,
        pixels: npt.NDArray[np.float32],
        distance: float,
        stack: TransformStack,
        progress_callback: Optional[ProgressCallback],
        cancel: threading.Event,
    ) -> None:
        height, width = pixels.shape[:2]
        for row in range(height):
            if cancel.is_set():
                logger.info("Render cancelled after %d/%d rows", row, height)
                raise RenderCancelled(row, height)
            pixels[row] = self.trace_row(row, width, height, distance, stack)
            if progress_callback is not None:
                progress_callback(row + 1, height)

    def _render_threaded(
        self,
        pixels: npt.NDArray[np.float32],
        distance: float,
        stack: TransformStack,
        progress_callback: Optional[ProgressCallback],
        cancel: threading.Event,
    ) -> None:
        height, width = pixels.shape[:2]

        def task(row: int) -> Optional[npt.NDArray[np.float32]]:
            if cancel.is_set():
                return None
            return self.trace_row(row, width, height, distance, stack)

        rows_done = 0
        with ThreadPoolExecutor(max_workers=self.config.max_workers) as pool:
            futures = {pool.submit(task, row): row for row in range(height)}
            try:
                for future in as_completed(futures):
                    colors = future.result()
                    if colors is not None:
                        pixels[futures[future]] = colors
                        rows_done += 1
                        if progress_callback is not None:
                            progress_callback(rows_done, height)
                    if cancel.is_set() and rows_done < height:
                        logger.info("Render cancelled after %d/%d rows", rows_done, height)
                        raise RenderCancelled(rows_done, height)
            except BaseException:
                # Rows not yet started are dropped; running rows finish
                pool.shutdown(wait=False, cancel_futures=True)
                raise
