"""Scanline renderer with progress reporting.

This module provides a convenient wrapper around the integrator that:
- Sizes the render target and uploads the camera
- Hands scanlines to the worker pool in batches
- Reports progress between batches (callback or generator)
- Collects telemetry and converts the result to 8-bit RGB

Example:
    >>> from fastray.config import RenderSettings, init_runtime
    >>> init_runtime()
    >>> from fastray.core.renderer import ScanlineRenderer
    >>> from fastray.scene.scenes import create_default_scene
    >>>
    >>> scene, camera = create_default_scene()
    >>> renderer = ScanlineRenderer(RenderSettings(200, 100, samples_per_pixel=8), camera)
    >>> image = renderer.render()
    >>> image.shape
    (100, 200, 3)
"""

import logging
import time
from collections.abc import Callable, Generator
from os import PathLike

import numpy as np
import numpy.typing as npt

from fastray.camera.rays import Camera, setup_camera
from fastray.config import RenderSettings
from fastray.core.integrator import (
    get_linear_image,
    render_rows,
    setup_render_target,
    to_rgb8,
)
from fastray.core.stats import RenderStats
from fastray.preview.export import save_png

logger = logging.getLogger(__name__)

# Type alias for progress callback
# Callback receives (scanlines_completed, total_scanlines)
ProgressCallback = Callable[[int, int], None]


class ScanlineRenderer:
    """Renders the current world through one camera.

    The world itself (shape tree and materials) is global state managed by
    fastray.scene.manager.SceneManager and must be set before rendering.

    Attributes:
        settings: Image and sampling parameters.
        camera: The camera rays are generated from.
        stats: Telemetry of the most recent render.
    """

    def __init__(self, settings: RenderSettings, camera: Camera) -> None:
        """Initialize the renderer.

        Raises:
            ValueError: If the image exceeds the supported size.
        """
        self.settings = settings
        self.camera = camera
        self.stats = RenderStats()
        setup_render_target(settings.width, settings.height)

    @property
    def width(self) -> int:
        return self.settings.width

    @property
    def height(self) -> int:
        return self.settings.height

    def render_progressive(self) -> Generator[tuple[int, int], None, None]:
        """Render the image, yielding progress after each batch of scanlines.

        Yields:
            Tuple of (scanlines_completed, total_scanlines).
        """
        settings = self.settings
        setup_camera(self.camera)
        setup_render_target(settings.width, settings.height)
        self.stats.reset()

        logger.info(
            "Rendering %dx%d at %d spp, max depth %d",
            settings.width,
            settings.height,
            settings.samples_per_pixel,
            settings.max_depth,
        )
        start = time.perf_counter()

        for row_start in range(0, settings.height, settings.rows_per_batch):
            row_end = min(row_start + settings.rows_per_batch, settings.height)
            render_rows(
                row_start,
                row_end,
                settings.samples_per_pixel,
                settings.max_depth,
                self.stats.counters,
            )
            logger.debug("Rendered rows [%d, %d)", row_start, row_end)
            yield (self.stats.scanlines_completed, settings.height)

        elapsed = time.perf_counter() - start
        logger.info(
            "Render finished in %.2fs: %d rays traced (%.0f rays/s)",
            elapsed,
            self.stats.rays_traced,
            self.stats.rays_traced / elapsed if elapsed > 0 else 0.0,
        )

    def render(self, callback: ProgressCallback | None = None) -> npt.NDArray[np.uint8]:
        """Render the image and return it as 8-bit RGB.

        Args:
            callback: Optional callback called after each batch of scanlines.
                Receives (scanlines_completed, total_scanlines).

        Returns:
            uint8 array of shape (height, width, 3), top scanline first.
        """
        for completed, total in self.render_progressive():
            if callback is not None:
                callback(completed, total)
        return self.get_image_rgb8()

    def get_image_linear(self) -> npt.NDArray[np.float32]:
        """Get the averaged linear colours, shape (height, width, 3)."""
        return get_linear_image()

    def get_image_rgb8(self) -> npt.NDArray[np.uint8]:
        """Get the tone-mapped image, shape (height, width, 3)."""
        return to_rgb8(self.get_image_linear())

    def save_image(self, filepath: str | PathLike) -> None:
        """Save the rendered image as a PNG file."""
        save_png(self.get_image_rgb8(), filepath)

    def __repr__(self) -> str:
        """Return a string representation of the renderer state."""
        return (
            f"ScanlineRenderer(width={self.width}, height={self.height}, "
            f"samples_per_pixel={self.settings.samples_per_pixel}, {self.stats!r})"
        )
