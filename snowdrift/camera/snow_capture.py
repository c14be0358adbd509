# snowdrift/camera/snow_capture.py

import numpy as np
from typing import Optional
from snowdrift.camera.camera import Camera
from snowdrift.camera.camera_controller import CameraController
from snowdrift.core.config import CaptureSettings
from snowdrift.core.logging import get_logger
from snowdrift.utils.math import quaternion_from_axis_angle

logger = get_logger()

# Maps the camera's -Z view axis onto world -Y
LOOK_DOWN = quaternion_from_axis_angle(np.array([1.0, 0.0, 0.0]), -np.pi / 2.0)


def footprint_contains(point, anchor, snow_bounds: float) -> bool:
    """
    True when point lies strictly inside the square footprint that starts
    at anchor and spans snow_bounds on x and z. Points on the edge are outside.
    """
    px, pz = float(point[0]), float(point[2])
    ax, az = float(anchor[0]), float(anchor[2])
    return (ax < px < ax + snow_bounds) and (az < pz < az + snow_bounds)


class SnowCaptureController(CameraController):
    """
    Keeps an orthographic top-down camera framed on a snow patch footprint.

    center() is called after every patch rebuild; should_recenter() is the
    per-tick containment test for the tracked object.
    """

    def __init__(self, camera: Optional[Camera], settings: Optional[CaptureSettings] = None):
        super().__init__(camera)
        self.settings = settings or CaptureSettings()

        # Last footprint handed to center()
        self.anchor: Optional[np.ndarray] = None
        self.snow_bounds = 0.0

        self._missing_camera_reported = False
        self._missing_tracker_reported = False

    def center(self, anchor, snow_bounds: float) -> bool:
        """
        Place the camera above the middle of the footprint and size its
        orthographic view to cover it exactly. Returns False and changes
        nothing when no camera is assigned; the error is reported once
        until a camera shows up.
        """
        if self.camera is None:
            if not self._missing_camera_reported:
                logger.error("Snow capture camera has not been assigned!")
                self._missing_camera_reported = True
            return False
        self._missing_camera_reported = False

        self.anchor = np.array(anchor, dtype=np.float64)
        self.snow_bounds = float(snow_bounds)

        half = self.snow_bounds * 0.5
        camera = self.camera
        camera.transform.set_world_position([
            self.anchor[0] + half,
            self.settings.height,
            self.anchor[2] + half,
        ])
        camera.transform.set_world_rotation(LOOK_DOWN)
        camera.orthographic = True
        camera.ortho_size = half
        camera.aspect_ratio = 1.0
        camera.near_clip = self.settings.near_clip
        camera.far_clip = self.settings.far_clip
        return True

    def should_recenter(self, tracked, anchor, snow_bounds: float) -> bool:
        """Containment test for the tracked position; None counts as outside."""
        if tracked is None:
            if not self._missing_tracker_reported:
                logger.error("No tracked object assigned, snow capture will not follow it")
                self._missing_tracker_reported = True
            return False
        self._missing_tracker_reported = False
        return footprint_contains(tracked, anchor, snow_bounds)

    def update(self, dt: float, alpha: float = 1.0):
        if not self.enabled or self.anchor is None:
            return
        self.center(self.anchor, self.snow_bounds)
