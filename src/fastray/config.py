"""Render configuration and Taichi runtime initialisation.

``init_runtime`` must run before any module that declares Taichi fields is
imported (cameras, materials, the scene arena, the integrator).

Example:
    >>> from fastray.config import RenderSettings, init_runtime
    >>> init_runtime(seed=7)
    >>> settings = RenderSettings(width=400, height=200, samples_per_pixel=16)
    >>> settings.aspect_ratio
    2.0
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import taichi as ti

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderSettings:
    """Image and sampling parameters of a render.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        samples_per_pixel: Number of jittered paths averaged per pixel.
        max_depth: Number of bounces a path may take. 0 renders only the
            sky and black silhouettes.
        rows_per_batch: Scanlines handed to the worker pool per kernel
            launch. Progress is reported between batches.
    """

    width: int = 800
    height: int = 400
    samples_per_pixel: int = 100
    max_depth: int = 50
    rows_per_batch: int = 16

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Image dimensions must be positive, got {self.width}x{self.height}")
        if self.samples_per_pixel <= 0:
            raise ValueError(f"samples_per_pixel must be positive, got {self.samples_per_pixel}")
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be non-negative, got {self.max_depth}")
        if self.rows_per_batch <= 0:
            raise ValueError(f"rows_per_batch must be positive, got {self.rows_per_batch}")

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height


def init_runtime(seed: int = 0, num_threads: int | None = None, debug: bool = False) -> None:
    """Initialise Taichi on the CPU backend.

    Args:
        seed: Seed of the per-thread random number generators.
        num_threads: Size of the CPU worker pool. Defaults to Taichi's choice
            (the number of hardware threads).
        debug: Enable Taichi's debug mode (bounds checks in kernels).
    """
    kwargs = {"arch": ti.cpu, "random_seed": seed, "debug": debug}
    if num_threads is not None:
        if num_threads <= 0:
            raise ValueError(f"num_threads must be positive, got {num_threads}")
        kwargs["cpu_max_num_threads"] = num_threads

    ti.init(**kwargs)
    logger.debug("Taichi runtime initialised: %s", kwargs)
