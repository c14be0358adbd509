# snowdrift/camera/camera_controller.py

from abc import ABC, abstractmethod
from typing import Optional
from snowdrift.camera.camera import Camera


class CameraController(ABC):
    """
    Base class for camera control strategies.
    Controllers update camera position/rotation based on different logic.
    """

    def __init__(self, camera: Optional[Camera]):
        self.camera = camera
        self.enabled = True

    @abstractmethod
    def update(self, dt: float, alpha: float = 1.0):
        """Update camera transform."""
        pass
