import logging

import numpy as np
import pytest

from snowdrift.core.config import SnowSettings
from snowdrift.rendering.mesh import MeshRenderer
from snowdrift.scene.transform import Transform
from snowdrift.terrain.snow_patch import SnowPatch
from snowdrift.terrain.terrain_data import HeightmapTerrain


def test_first_tick_binds_and_builds(world, make_patch):
    entity, transform, renderer, patch = make_patch()

    world.update_systems(1 / 60.0)

    assert patch.bound
    assert renderer.mesh is not None
    assert renderer.dirty
    assert renderer.mesh.vertex_count == 64
    assert patch.snow_bounds == 8.0
    assert patch.capture_camera.transform.get_world_position() == pytest.approx([14.0, 400.0, 14.0])
    assert patch.capture_camera.ortho_size == 4.0


def test_moving_the_patch_rebuilds(world, make_patch):
    entity, transform, renderer, patch = make_patch()
    world.update_systems(1 / 60.0)
    first_mesh = renderer.mesh

    transform.set_world_position([20.0, 0.0, 30.0])

    assert renderer.mesh is not first_mesh
    assert patch.capture_camera.transform.get_world_position() == pytest.approx([24.0, 400.0, 34.0])


def test_same_position_does_not_rebuild(world, make_patch):
    entity, transform, renderer, patch = make_patch()
    world.update_systems(1 / 60.0)
    first_mesh = renderer.mesh

    transform.set_world_position([10.0, 0.0, 10.0])
    world.update_systems(1 / 60.0)

    assert renderer.mesh is first_mesh


def test_parent_move_rebuilds_child_patch(world, make_patch):
    entity, transform, renderer, patch = make_patch(position=(2.0, 0.0, 2.0))
    parent = Transform(position=(0.0, 0.0, 0.0))
    transform.set_parent(parent)
    world.update_systems(1 / 60.0)
    first_mesh = renderer.mesh

    parent.set_world_position([5.0, 0.0, 5.0])

    assert renderer.mesh is not first_mesh
    assert patch.last_sample.window_min.tolist() == [7.0, 7.0]


def test_tracker_inside_footprint_recenters(world, make_patch):
    tracker = Transform(position=(12.0, 0.0, 12.0))
    entity, transform, renderer, patch = make_patch(tracking=tracker)
    world.update_systems(1 / 60.0)

    camera = patch.capture_camera
    camera.transform.set_world_position([0.0, 0.0, 0.0])

    assert patch.track()
    assert camera.transform.get_world_position() == pytest.approx([14.0, 400.0, 14.0])


def test_tracker_outside_footprint_leaves_camera(world, make_patch):
    tracker = Transform(position=(40.0, 0.0, 12.0))
    entity, transform, renderer, patch = make_patch(tracking=tracker)
    world.update_systems(1 / 60.0)

    camera = patch.capture_camera
    camera.transform.set_world_position([0.0, 0.0, 0.0])

    assert not patch.track()
    world.update_systems(1 / 60.0)
    assert camera.transform.get_world_position() == pytest.approx([0.0, 0.0, 0.0])


def test_missing_tracker_logged_once(world, make_patch, caplog):
    make_patch(tracking=None)

    caplog.clear()
    for _ in range(3):
        world.update_systems(1 / 60.0)

    tracker_errors = [r for r in caplog.records
                      if r.levelno == logging.ERROR and "tracked" in r.getMessage()]
    assert len(tracker_errors) == 1


def test_missing_terrain_keeps_last_good_mesh(world, make_patch, caplog):
    entity, transform, renderer, patch = make_patch()
    world.update_systems(1 / 60.0)
    good_mesh = renderer.mesh

    patch.terrain = None
    caplog.clear()
    transform.set_world_position([30.0, 0.0, 30.0])

    assert renderer.mesh is good_mesh
    assert patch.snow_bounds == 8.0
    assert any("rebuild failed" in r.getMessage() for r in caplog.records)

    with pytest.raises(RuntimeError):
        patch.refresh()


def test_failing_patch_does_not_hold_up_others(world, make_patch, caplog):
    _, _, broken_renderer, broken = make_patch(terrain=None)
    _, _, renderer, patch = make_patch(position=(30.0, 0.0, 30.0))

    caplog.clear()
    world.update_systems(1 / 60.0)

    assert broken_renderer.mesh is None
    assert not broken.bound
    assert renderer.mesh is not None
    assert patch.bound
    assert any("Snow patch on entity" in r.getMessage() for r in caplog.records)
    assert not any("update failed" in r.getMessage() for r in caplog.records)


def test_failed_bind_is_retried(world, make_patch, flat_terrain):
    _, _, renderer, patch = make_patch(terrain=None)
    world.update_systems(1 / 60.0)

    patch.terrain = flat_terrain
    world.update_systems(1 / 60.0)

    assert patch.bound
    assert renderer.mesh.vertex_count == 64


def test_any_rebuild_error_is_contained(world, make_patch, caplog):
    class FailingTerrain(HeightmapTerrain):
        def get_height(self, x, z):
            raise ValueError("heightmap unavailable")

    entity, transform, renderer, patch = make_patch()
    world.update_systems(1 / 60.0)
    good_mesh = renderer.mesh

    patch.terrain = FailingTerrain.flat(resolution=65, size=(64.0, 10.0, 64.0))
    caplog.clear()
    transform.set_world_position([20.0, 0.0, 20.0])

    assert renderer.mesh is good_mesh
    failures = [r for r in caplog.records if "rebuild failed" in r.getMessage()]
    assert len(failures) == 1
    assert failures[0].exc_info is not None


def test_apply_settings_clamps_and_rebuilds(world, make_patch):
    entity, transform, renderer, patch = make_patch()
    world.update_systems(1 / 60.0)

    patch.apply_settings(SnowSettings(sample_size=500, edge_falloff_strength=3, snow_offset=9.0))

    assert patch.settings.sample_size == 128
    assert patch.settings.edge_falloff_strength == 4
    assert patch.settings.snow_offset == 5.0
    assert renderer.mesh.vertex_count == 128 * 128
    assert patch.snow_bounds == 128.0


def test_off_terrain_patch_still_gets_a_mesh(world, make_patch):
    entity, transform, renderer, patch = make_patch(position=(-200.0, 0.0, -200.0))

    world.update_systems(1 / 60.0)

    assert patch.last_sample.out_of_bounds
    assert renderer.mesh.vertex_count == 64


def test_refresh_without_renderer_warns(flat_terrain, caplog):
    from snowdrift.ecs.entity import Entity

    entity = Entity("Bare")
    entity.add_component(Transform(position=(1.0, 0.0, 1.0)))
    patch = entity.add_component(SnowPatch(flat_terrain, SnowSettings(sample_size=4)))

    caplog.clear()
    sample = patch.refresh()

    assert sample.mesh.vertex_count == 16
    assert any("no MeshRenderer" in r.getMessage() for r in caplog.records)


def test_refresh_requires_transform(flat_terrain):
    from snowdrift.ecs.entity import Entity

    entity = Entity("Bare")
    entity.add_component(MeshRenderer())
    patch = entity.add_component(SnowPatch(flat_terrain))

    with pytest.raises(RuntimeError):
        patch.refresh()


def test_destroying_entity_unbinds(world, make_patch):
    entity, transform, renderer, patch = make_patch()
    world.update_systems(1 / 60.0)
    sample = patch.last_sample

    world.destroy_entity(entity)
    transform.set_world_position([40.0, 0.0, 40.0])

    assert not patch.bound
    assert patch.last_sample is sample
    assert entity not in world.entities


def test_mesh_is_local_to_anchor(world, make_patch):
    entity, transform, renderer, patch = make_patch(position=(10.0, 2.0, 10.0))
    world.update_systems(1 / 60.0)

    vertices = renderer.mesh.vertices
    assert vertices[:, 0].min() == pytest.approx(0.0)
    assert vertices[:, 2].max() == pytest.approx(7.0)
    assert np.all(vertices[:, 1] < 0.0)
