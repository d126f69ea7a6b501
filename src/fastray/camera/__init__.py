"""Camera module for view and ray generation.

This module provides camera models for generating primary rays:

Components:
    viewport: Reduced image-plane form shared by all cameras
    pinhole: Simple pinhole (perspective) camera model
    thin_lens: Camera with depth of field
    rays: Device-side ray generation from the uploaded camera

Camera responsibilities:
    - Transform (s, t) image coordinates to world-space rays
    - Apply anti-aliasing jitter for sub-pixel sampling
    - Support look-at positioning with up vector
    - Sample the lens disk for depth of field
"""

from .pinhole import PinholeCamera
from .rays import (
    Camera,
    clear_camera,
    get_camera_info,
    get_camera_origin,
    get_ray,
    get_ray_jittered,
    is_camera_ready,
    setup_camera,
)
from .thin_lens import ThinLensCamera
from .viewport import CameraViewport, make_viewport, orthonormal_basis

__all__ = [
    "Camera",
    "CameraViewport",
    "PinholeCamera",
    "ThinLensCamera",
    "make_viewport",
    "orthonormal_basis",
    "setup_camera",
    "clear_camera",
    "is_camera_ready",
    "get_ray",
    "get_ray_jittered",
    "get_camera_origin",
    "get_camera_info",
]
