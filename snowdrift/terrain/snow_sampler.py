# snowdrift/terrain/snow_sampler.py

import numpy as np
from dataclasses import dataclass
from typing import Tuple
from snowdrift.core.config import SnowSettings
from snowdrift.core.logging import get_logger
from snowdrift.rendering.mesh import Mesh
from snowdrift.terrain.terrain_data import TerrainDataSource
from snowdrift.utils.profiler import profile_section

logger = get_logger()

NOT_ABOVE_TERRAIN = "Snow patch is not above terrain"


@dataclass
class SnowSample:
    """Result of one sampling pass."""

    mesh: Mesh
    snow_bounds: float  # Side length of the square footprint in world units
    window_min: np.ndarray  # Clamped (x, z) window on the terrain, world space
    window_max: np.ndarray
    out_of_bounds: bool


def edge_falloff_weight(x, z, half_size: float, strength: int, edge_falloff: float):
    """
    Rounded-square edge mask: 0 in the middle of the grid, rising towards
    EdgeFalloff at the border. Even strengths keep both axis terms positive.
    """
    xr = ((np.asarray(x, dtype=np.float64) - half_size + 0.5) / half_size) ** strength
    zr = ((np.asarray(z, dtype=np.float64) - half_size + 0.5) / half_size) ** strength
    return edge_falloff * np.abs(xr * 0.5 + zr * 0.5)


def edge_falloff_weights(sample_size: int, strength: int, edge_falloff: float) -> np.ndarray:
    """Falloff for every grid cell, indexed [x, z]."""
    gx, gz = np.meshgrid(np.arange(sample_size), np.arange(sample_size), indexing='ij')
    return edge_falloff_weight(gx, gz, sample_size * 0.5, strength, edge_falloff)


def grid_triangles(sample_size: int) -> np.ndarray:
    """
    Index buffer for a sample_size x sample_size vertex grid where vertex
    (x, z) has index x * sample_size + z. Two triangles per cell, both
    wound so (b - a) x (c - a) points up on level ground.
    """
    n = sample_size
    x, z = np.meshgrid(np.arange(n - 1), np.arange(n - 1), indexing='ij')
    i00 = (x * n + z).ravel()
    i10 = ((x + 1) * n + z).ravel()
    i01 = (x * n + z + 1).ravel()
    i11 = ((x + 1) * n + z + 1).ravel()

    quads = np.stack([i00, i11, i10, i11, i00, i01], axis=1)
    return quads.reshape(-1).astype(np.uint32)


def sampling_window(anchor: np.ndarray, snow_bounds: float, terrain_position: np.ndarray,
                    terrain_size: np.ndarray) -> Tuple[np.ndarray, np.ndarray, bool]:
    """
    Clamp the footprint to the terrain rectangle on x/z.
    The third value is True when nothing of the footprint is left.
    """
    lo_bound = terrain_position[[0, 2]]
    hi_bound = lo_bound + terrain_size[[0, 2]]
    start = np.clip(anchor[[0, 2]], lo_bound, hi_bound)
    end = np.clip(anchor[[0, 2]] + snow_bounds, lo_bound, hi_bound)
    return start, end, bool(np.any(end - start <= 0.0))


class PatchMeshSampler:
    """
    Resamples the terrain under a patch anchor into a snow mesh.

    Vertex positions are local to the anchor. By default each vertex is
    snapped onto the heightmap sample it falls in, so the patch lines up
    with the terrain grid wherever the anchor sits; the normal is read at
    the unsnapped coordinate. With interpolate_heights the vertex stays
    unsnapped and both height and normal are interpolated there.
    """

    def sample(self, anchor, settings: SnowSettings, terrain: TerrainDataSource) -> SnowSample:
        if terrain is None:
            raise RuntimeError("No active terrain to sample snow from")

        with profile_section("SnowSample"):
            return self._sample(np.asarray(anchor, dtype=np.float64), settings, terrain)

    def _sample(self, anchor: np.ndarray, settings: SnowSettings, terrain: TerrainDataSource) -> SnowSample:
        n = settings.sample_size
        vs = np.asarray(terrain.heightmap_scale, dtype=np.float64)
        terrain_size = np.asarray(terrain.size, dtype=np.float64)
        terrain_position = np.asarray(terrain.position, dtype=np.float64)

        if not np.isclose(vs[0], vs[2]):
            logger.warning(f"Heightmap cells are not square ({vs[0]} x {vs[2]}), "
                           f"snow bounds follow the x scale")

        snow_bounds = float(n * vs[0])

        window_min, window_max, out_of_bounds = sampling_window(
            anchor, snow_bounds, terrain_position, terrain_size)
        if out_of_bounds:
            logger.warning(NOT_ABOVE_TERRAIN)

        gx, gz = np.meshgrid(np.arange(n, dtype=np.float64), np.arange(n, dtype=np.float64), indexing='ij')

        weights = edge_falloff_weight(gx, gz, n * 0.5, settings.edge_falloff_strength, settings.edge_falloff)

        # Continuous heightmap coordinates of every grid cell
        dx = gx + (anchor[0] - terrain_position[0]) / vs[0]
        dz = gz + (anchor[2] - terrain_position[2]) / vs[2]
        u = dx * vs[0] / terrain_size[0]
        v = dz * vs[2] / terrain_size[2]

        if settings.interpolate_heights:
            local_x = gx * vs[0]
            local_z = gz * vs[2]
            heights = terrain.get_interpolated_height(u, v)
        else:
            cx = np.floor(dx)
            cz = np.floor(dz)
            local_x = gx * vs[0] - (dx - cx) * vs[0]
            local_z = gz * vs[2] - (dz - cz) * vs[2]
            heights = terrain.get_height(cx.astype(np.int64), cz.astype(np.int64))

        # Pull edges down so they can hide beneath the terrain
        local_y = np.asarray(heights, dtype=np.float64) - anchor[1] - weights * settings.edge_height_offset

        normals = np.asarray(terrain.get_interpolated_normal(u, v), dtype=np.float64)
        positions = np.stack([local_x, local_y, local_z], axis=-1) + normals * settings.snow_offset

        colors = np.zeros((n, n, 4), dtype=np.float64)
        colors[..., 0] = weights
        colors[..., 3] = 1.0

        uvs = np.stack([gx / n, gz / n], axis=-1)

        mesh = Mesh("SnowPatch")
        mesh.vertices = positions.reshape(-1, 3).astype(np.float32)
        mesh.normals = normals.reshape(-1, 3).astype(np.float32)
        mesh.colors = colors.reshape(-1, 4).astype(np.float32)
        mesh.uvs = uvs.reshape(-1, 2).astype(np.float32)
        mesh.indices = grid_triangles(n)
        mesh.calculate_bounds()

        return SnowSample(
            mesh=mesh,
            snow_bounds=snow_bounds,
            window_min=window_min,
            window_max=window_max,
            out_of_bounds=out_of_bounds,
        )
