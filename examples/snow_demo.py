# examples/snow_demo.py

import sys
import os
import math

# Add project root to path if running directly
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "../")))

from snowdrift.camera.camera import Camera
from snowdrift.core.application import Application
from snowdrift.core.config import CaptureSettings, SnowSettings
from snowdrift.core.logging import get_logger
from snowdrift.rendering.mesh import MeshRenderer
from snowdrift.scene.transform import Transform
from snowdrift.terrain.snow_patch import SnowPatch
from snowdrift.terrain.terrain_data import HeightmapTerrain

logger = get_logger()


class SnowDemo(Application):
    """
    A tracker circles over Perlin terrain. Whenever it walks out of the
    snow footprint the patch is re-anchored under it, which rebuilds the
    mesh through the transform listener.
    """

    def initialize_game(self):
        logger.info("Initializing snow demo...")

        self.terrain = HeightmapTerrain.from_noise(resolution=257, size=(512.0, 60.0, 512.0), seed=7)

        self._angle = 0.0
        self.tracker = Transform(position=self._orbit_position())
        self.capture_camera = Camera("SnowCapture")

        patch_entity = self.world.create_entity("Snow")
        self.patch_transform = patch_entity.add_component(Transform())
        patch_entity.add_component(MeshRenderer(color=(0.95, 0.97, 1.0, 1.0)))
        self.patch = patch_entity.add_component(SnowPatch(
            self.terrain,
            SnowSettings.from_config(self.config),
            capture_camera=self.capture_camera,
            tracking=self.tracker,
            capture_settings=CaptureSettings.from_config(self.config),
        ))

        self._recenter_patch()

    def _recenter_patch(self):
        bounds = self.patch.settings.sample_size * self.terrain.heightmap_scale[0]
        position = self.tracker.get_world_position()
        self.patch_transform.set_world_position([position[0] - bounds * 0.5, 0.0, position[2] - bounds * 0.5])

    def _orbit_position(self):
        return [256.0 + 120.0 * math.cos(self._angle), 0.0, 256.0 + 120.0 * math.sin(self._angle)]

    def update(self, dt: float):
        self._angle += dt * 0.3
        self.tracker.set_world_position(self._orbit_position())

        # SnowPatchSystem already re-centers the camera; only the containment result is needed here
        inside = self.patch.capture.should_recenter(
            self.tracker.get_world_position(),
            self.patch_transform.get_world_position(),
            self.patch.snow_bounds,
        )
        if self.patch.bound and not inside:
            self._recenter_patch()


if __name__ == "__main__":
    SnowDemo(headless="--headless" in sys.argv).run(max_frames=600 if "--headless" in sys.argv else None)
