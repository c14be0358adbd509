# snowdrift/camera/camera.py

import numpy as np
from snowdrift.scene.transform import Transform


class Camera:
    """
    Base camera class.
    Represents a viewport into the 3D world. Looks down its local -Z axis.
    """

    def __init__(self, name: str = "Camera"):
        self.name = name
        self.transform = Transform()

        # Projection
        self.orthographic = False
        self.field_of_view = 60.0
        self.ortho_size = 5.0  # Half of the vertical view extent, in world units
        self.near_clip = 0.1
        self.far_clip = 1000.0
        self.aspect_ratio = 16.0 / 9.0

    @property
    def forward(self) -> np.ndarray:
        """World-space view direction."""
        return self.transform.transform_direction([0.0, 0.0, -1.0])

    def get_projection_matrix(self) -> np.ndarray:
        """Get projection matrix."""
        if self.orthographic:
            return self._orthographic_matrix()

        fov_rad = np.radians(self.field_of_view)
        f = 1.0 / np.tan(fov_rad / 2.0)

        proj = np.zeros((4, 4), dtype=np.float32)
        proj[0, 0] = f / self.aspect_ratio
        proj[1, 1] = f
        proj[2, 2] = (self.far_clip + self.near_clip) / (self.near_clip - self.far_clip)
        proj[2, 3] = (2.0 * self.far_clip * self.near_clip) / (self.near_clip - self.far_clip)
        proj[3, 2] = -1.0

        return proj

    def _orthographic_matrix(self) -> np.ndarray:
        top = self.ortho_size
        right = self.ortho_size * self.aspect_ratio
        near, far = self.near_clip, self.far_clip

        proj = np.eye(4, dtype=np.float32)
        proj[0, 0] = 1.0 / right
        proj[1, 1] = 1.0 / top
        proj[2, 2] = -2.0 / (far - near)
        proj[2, 3] = -(far + near) / (far - near)

        return proj
