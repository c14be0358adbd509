import numpy as np
import pytest

from snowdrift.camera.camera import Camera
from snowdrift.core.config import SnowSettings
from snowdrift.ecs.world import World
from snowdrift.rendering.mesh import MeshRenderer
from snowdrift.scene.transform import Transform
from snowdrift.terrain.snow_patch import SnowPatch, SnowPatchSystem
from snowdrift.terrain.terrain_data import HeightmapTerrain


@pytest.fixture
def flat_terrain():
    # 65 samples over 64 units: one world unit per cell
    return HeightmapTerrain.flat(resolution=65, size=(64.0, 10.0, 64.0))


@pytest.fixture
def slope_terrain():
    # Rises 16 units over 64 along x: world height = 0.25 * x
    ramp = np.linspace(0.0, 1.0, 65)
    heights = np.tile(ramp, (65, 1))
    return HeightmapTerrain(heights, size=(64.0, 16.0, 64.0))


@pytest.fixture
def bumpy_terrain():
    x = np.arange(65)
    heights = 0.5 + 0.1 * np.sin(x[None, :] / 6.0) * np.cos(x[:, None] / 8.0)
    return HeightmapTerrain(heights, size=(64.0, 4.0, 64.0))


@pytest.fixture
def settings():
    return SnowSettings(sample_size=8, snow_offset=0.0, edge_falloff=0.0,
                        edge_falloff_strength=2, edge_height_offset=0.0)


@pytest.fixture
def world():
    world = World()
    world.add_system(SnowPatchSystem())
    return world


@pytest.fixture
def make_patch(world, flat_terrain):
    """Entity with Transform, MeshRenderer and SnowPatch, not yet bound."""

    def factory(position=(10.0, 0.0, 10.0), terrain=flat_terrain, settings=None,
                camera=None, tracking=None):
        entity = world.create_entity("Snow")
        transform = entity.add_component(Transform(position=position))
        renderer = entity.add_component(MeshRenderer())
        patch = entity.add_component(SnowPatch(
            terrain,
            settings or SnowSettings(sample_size=8),
            capture_camera=camera if camera is not None else Camera("Capture"),
            tracking=tracking,
        ))
        return entity, transform, renderer, patch

    return factory
