"""Preview module for rendered output.

Components:
    export: PNG and plain-text PPM export of 8-bit images

Tone mapping from linear colour to 8-bit happens in
fastray.core.integrator.to_rgb8; the functions here only serialize.

Example:
    >>> from fastray.preview import save_png
    >>> save_png(renderer.render(), "output.png")
"""

from fastray.preview.export import (
    compute_rmse,
    save_png,
    write_ppm,
)

__all__ = [
    "save_png",
    "write_ppm",
    "compute_rmse",
]
