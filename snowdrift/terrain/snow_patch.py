# snowdrift/terrain/snow_patch.py

from typing import List, Optional, Type
from snowdrift.camera.camera import Camera
from snowdrift.camera.snow_capture import SnowCaptureController
from snowdrift.core.config import CaptureSettings, SnowSettings
from snowdrift.core.logging import get_logger
from snowdrift.ecs.component import Component
from snowdrift.ecs.system import System
from snowdrift.rendering.mesh import MeshRenderer
from snowdrift.scene.transform import Transform
from snowdrift.terrain.snow_sampler import PatchMeshSampler, SnowSample
from snowdrift.terrain.terrain_data import TerrainDataSource

logger = get_logger()


class SnowPatch(Component):
    """
    Snow layer draped over the terrain under its entity.

    The entity needs a Transform (the patch anchor, minimum x/z corner of
    the footprint) and a MeshRenderer that receives the generated mesh.
    """

    def __init__(self, terrain: Optional[TerrainDataSource], settings: Optional[SnowSettings] = None,
                 capture_camera: Optional[Camera] = None, tracking: Optional[Transform] = None,
                 capture_settings: Optional[CaptureSettings] = None):
        super().__init__()

        self.terrain = terrain
        self.settings = (settings or SnowSettings()).clamped()
        self.tracking = tracking

        self.sampler = PatchMeshSampler()
        self.capture = SnowCaptureController(capture_camera, capture_settings)

        # Footprint of the last successful rebuild
        self.snow_bounds = 0.0
        self.last_sample: Optional[SnowSample] = None

        self._bound_transform: Optional[Transform] = None

    @property
    def capture_camera(self) -> Optional[Camera]:
        return self.capture.camera

    @capture_camera.setter
    def capture_camera(self, camera: Optional[Camera]):
        self.capture.camera = camera

    @property
    def bound(self) -> bool:
        return self._bound_transform is not None

    def _transform(self) -> Transform:
        transform = self.sibling(Transform)
        if transform is None:
            raise RuntimeError("SnowPatch requires a Transform on its entity")
        return transform

    def bind(self):
        """Rebuild whenever the entity's transform moves, starting now."""
        transform = self._transform()
        if self._bound_transform is not transform:
            self.unbind()
            transform.add_listener(self.on_position_changed)
            self._bound_transform = transform

        try:
            self.refresh()
        except Exception:
            # Retry the whole bind on the next tick
            self.unbind()
            raise

    def unbind(self):
        if self._bound_transform is not None:
            self._bound_transform.remove_listener(self.on_position_changed)
            self._bound_transform = None

    def on_position_changed(self, transform: Transform):
        # Runs inside whoever moved the transform; the last good mesh stays up on failure
        try:
            self.refresh()
        except Exception as e:
            logger.error(f"Snow patch rebuild failed: {e}", exc_info=True)

    def refresh(self) -> SnowSample:
        """
        Rebuild the mesh and re-center the capture camera.
        Used for moves, settings edits and explicit refresh requests alike.
        """
        anchor = self._transform().get_world_position()
        sample = self.sampler.sample(anchor, self.settings, self.terrain)

        renderer = self.sibling(MeshRenderer)
        if renderer is not None:
            renderer.set_mesh(sample.mesh)
        else:
            logger.warning(f"Entity {self.entity.id} has no MeshRenderer to show its snow patch")

        self.snow_bounds = sample.snow_bounds
        self.last_sample = sample

        self.capture.center(anchor, self.snow_bounds)
        return sample

    def apply_settings(self, settings: SnowSettings) -> SnowSample:
        """Swap in edited settings, clamped to their valid ranges, and rebuild."""
        self.settings = settings.clamped()
        return self.refresh()

    def track(self) -> bool:
        """Re-center the capture camera if the tracked object is inside the footprint."""
        tracked = self.tracking.get_world_position() if self.tracking is not None else None
        anchor = self._transform().get_world_position()

        if self.capture.should_recenter(tracked, anchor, self.snow_bounds):
            self.capture.center(anchor, self.snow_bounds)
            return True
        return False

    def on_destroy(self):
        self.unbind()


class SnowPatchSystem(System):
    """
    Drives snow patches: binds each new patch to its transform (which
    triggers the first rebuild) and runs the tracking check every tick.
    """

    def __init__(self):
        super().__init__()
        self.priority = 50

    def get_required_components(self) -> List[Type[Component]]:
        return [Transform, SnowPatch, MeshRenderer]

    def update(self, entities: List, dt: float):
        for entity in entities:
            patch = entity.get_component(SnowPatch)
            if not patch.active:
                continue

            # A failing patch must not hold up the others this tick
            try:
                if not patch.bound:
                    patch.bind()

                patch.track()
            except Exception as e:
                logger.error(f"Snow patch on entity {entity.id} failed: {e}", exc_info=True)
