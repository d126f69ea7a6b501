"""Render telemetry shared between the host and the render kernel.

The counters live in a small int64 NumPy array that the kernel receives by
reference and updates with atomic adds, so the host can read them between
batches without any extra synchronisation.
"""

import numpy as np
import numpy.typing as npt

# Indices into RenderStats.counters
RAYS_TRACED = 0
SCANLINES_COMPLETED = 1
NUM_COUNTERS = 2


class RenderStats:
    """Monotonic counters for one render.

    Attributes:
        counters: The int64 array handed to the render kernel.
    """

    def __init__(self) -> None:
        self.counters: npt.NDArray[np.int64] = np.zeros(NUM_COUNTERS, dtype=np.int64)

    @property
    def rays_traced(self) -> int:
        """Rays submitted to the scene so far, primary and scattered."""
        return int(self.counters[RAYS_TRACED])

    @property
    def scanlines_completed(self) -> int:
        return int(self.counters[SCANLINES_COMPLETED])

    def reset(self) -> None:
        self.counters[:] = 0

    def __repr__(self) -> str:
        return (
            f"RenderStats(rays_traced={self.rays_traced}, "
            f"scanlines_completed={self.scanlines_completed})"
        )
