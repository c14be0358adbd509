# snowdrift/core/application.py

from abc import ABC, abstractmethod
from typing import Optional

from snowdrift.camera.camera import Camera
from snowdrift.core.config import Config
from snowdrift.core.logging import get_logger
from snowdrift.core.time import TimeManager
from snowdrift.ecs.world import World
from snowdrift.rendering.mesh import MeshRenderer
from snowdrift.scene.transform import Transform
from snowdrift.terrain.snow_patch import SnowPatch, SnowPatchSystem
from snowdrift.utils.profiler import get_profiler


class Application(ABC):
    """
    Base application class.
    Scenes inherit from this and implement initialize_game().

    Headless applications skip the Panda3D window and run on a manual
    clock: one fixed step per frame. step() drives a single tick directly.
    """

    def __init__(self, config_path: str = "config.json", headless: bool = False):
        self.config = Config(config_path)

        self.logger = get_logger()
        self.logger.info("Initializing Snowdrift")

        self.running = False
        self.headless = headless

        self.time = TimeManager(
            fixed_timestep=self.config.get('engine.fixed_timestep', 1 / 60.0),
            manual=headless,
        )
        self.report_interval = self.config.get('engine.profile_report_interval', 0)
        self.world = World()
        self.backend = None

        # Panda3D camera nodes keyed by engine camera
        self._camera_views = {}

    def run(self, max_frames: Optional[int] = None):
        """Main loop with fixed timestep."""
        self.logger.info("Starting application loop")
        self.initialize()
        self.running = True

        while self.running:
            frame_time = self.time.tick()

            while self.time.consume_fixed_step():
                self.step(self.time.fixed_delta)

            try:
                self.update(frame_time)
                self.render()
            except Exception as e:
                self.logger.error(f"Update/render failed: {e}", exc_info=True)

            if self.report_interval and self.time.frame_count % self.report_interval == 0:
                get_profiler().print_report()

            if max_frames is not None and self.time.frame_count >= max_frames:
                self.quit()

        self.shutdown()

    def initialize(self):
        """Initialize engine and game."""
        self.logger.info("Initializing subsystems")

        try:
            if not self.headless:
                from snowdrift.rendering.panda_backend import PandaBackend
                self.backend = PandaBackend(self.config.get('rendering', {}))
                self.backend.initialize()

            self.world.add_system(SnowPatchSystem())

            self.logger.info("Initializing Game")
            self.initialize_game()
        except Exception as e:
            self.logger.critical(f"Initialization failed: {e}", exc_info=True)
            raise

    @abstractmethod
    def initialize_game(self):
        """Override in game implementation."""
        pass

    def step(self, dt: float):
        """One deterministic simulation tick."""
        try:
            self.fixed_update(dt)
        except Exception as e:
            self.logger.error(f"Fixed update failed: {e}", exc_info=True)

    def fixed_update(self, dt: float):
        """Deterministic simulation update."""
        self.world.update_systems(dt)

    def update(self, dt: float):
        """Variable timestep update (input, movement, etc.)."""
        pass

    def render(self):
        """
        Push changed meshes and their positions into Panda3D and draw a
        frame. Each snow capture camera is shown in its own inset view.
        """
        if self.backend is None:
            return

        for entity in self.world.entities:
            renderer = entity.get_component(MeshRenderer)
            if renderer is None:
                continue

            node_path = self.backend.sync_renderer(renderer)
            transform = entity.get_component(Transform)
            if node_path is not None and transform is not None:
                self.backend.update_node_position(node_path, transform.get_world_position())

            patch = entity.get_component(SnowPatch)
            if patch is not None and patch.capture_camera is not None:
                self._render_capture_camera(patch.capture_camera)

        self.backend.base.taskMgr.step()

    def _render_capture_camera(self, camera: Camera):
        view = self._camera_views.get(camera)
        if view is None:
            view = self.backend.create_camera_view(camera.name)
            self._camera_views[camera] = view
        self.backend.apply_camera(camera, view)

    def shutdown(self):
        """Clean shutdown."""
        self.logger.info("Shutting down")

        try:
            if self.backend is not None:
                self.backend.shutdown()
            self.config.save()
        except Exception as e:
            self.logger.error(f"Shutdown error: {e}", exc_info=True)

        self.logger.info("Shutdown complete")

    def quit(self):
        """Request application exit."""
        self.logger.info("Application quit requested")
        self.running = False
