# snowdrift/terrain/terrain_data.py

import numpy as np
from abc import ABC, abstractmethod
from snowdrift.core.logging import get_logger
from snowdrift.utils.math import lerp, normalize

logger = get_logger()


class TerrainDataSource(ABC):
    """
    Read-only heightfield queried by the snow patch sampler.

    Lookups accept scalars or numpy arrays and broadcast like numpy
    ufuncs, so a whole sample grid is resolved in one call.
    """

    @property
    @abstractmethod
    def heightmap_scale(self) -> np.ndarray:
        """World size of one heightmap cell: (x, vertical scale, z)."""
        pass

    @property
    @abstractmethod
    def size(self) -> np.ndarray:
        """World size of the whole terrain (x, y, z)."""
        pass

    @property
    @abstractmethod
    def position(self) -> np.ndarray:
        """World position of the terrain's minimum corner."""
        pass

    @abstractmethod
    def get_height(self, x, z):
        """World height at integer heightmap sample(s), clamped to the edges."""
        pass

    @abstractmethod
    def get_interpolated_normal(self, u, v) -> np.ndarray:
        """Unit normal(s) at normalized coordinates in [0, 1], shape (..., 3)."""
        pass

    @abstractmethod
    def get_interpolated_height(self, u, v):
        """Bilinear world height at normalized coordinates in [0, 1]."""
        pass


class HeightmapTerrain(TerrainDataSource):
    """
    Terrain backed by a regular grid of normalized heights.

    heights[z, x] holds values in [0, 1] that are scaled by size[1] and
    raised by position[1]; the grid spans size[0] x size[2] world units
    starting at position.
    """

    def __init__(self, heights, size=(256.0, 50.0, 256.0), position=(0.0, 0.0, 0.0)):
        heights = np.asarray(heights, dtype=np.float64)
        if heights.ndim != 2:
            raise ValueError(f"Heightmap must be 2D, got shape {heights.shape}")
        if min(heights.shape) < 2:
            raise ValueError(f"Heightmap needs at least 2 samples per axis, got shape {heights.shape}")

        size = np.array(size, dtype=np.float64)
        if size.shape != (3,) or np.any(size <= 0):
            raise ValueError(f"Terrain size must be three positive values, got {size}")

        self.heights = heights
        self.resolution_z, self.resolution_x = heights.shape
        self._size = size
        self._position = np.array(position, dtype=np.float64)
        self._heightmap_scale = np.array([
            size[0] / (self.resolution_x - 1),
            size[1],
            size[2] / (self.resolution_z - 1),
        ])

        # Absolute world heights, measured from the terrain origin
        self._world_heights = heights * size[1] + self._position[1]
        self._normals = self._compute_normals()

        logger.debug(f"Terrain {self.resolution_x}x{self.resolution_z} samples, "
                     f"cell {self._heightmap_scale[0]:.3f}x{self._heightmap_scale[2]:.3f}")

    @classmethod
    def flat(cls, resolution: int = 33, size=(32.0, 10.0, 32.0), height: float = 0.0,
             position=(0.0, 0.0, 0.0)) -> 'HeightmapTerrain':
        """Level terrain, `height` world units above its origin."""
        heights = np.full((resolution, resolution), height / size[1])
        return cls(heights, size, position)

    @classmethod
    def from_noise(cls, resolution: int = 129, size=(256.0, 40.0, 256.0), position=(0.0, 0.0, 0.0),
                   seed: int = 0, scale: float = 0.03, octaves: int = 4) -> 'HeightmapTerrain':
        """Rolling Perlin terrain. Needs the optional 'noise' package."""
        from noise import pnoise2

        heights = np.empty((resolution, resolution), dtype=np.float64)
        for z in range(resolution):
            for x in range(resolution):
                heights[z, x] = pnoise2(x * scale, z * scale, octaves=octaves, base=seed)

        # pnoise2 is roughly [-1, 1]
        heights = np.clip((heights + 1.0) * 0.5, 0.0, 1.0)
        return cls(heights, size, position)

    @property
    def heightmap_scale(self) -> np.ndarray:
        return self._heightmap_scale

    @property
    def size(self) -> np.ndarray:
        return self._size

    @property
    def position(self) -> np.ndarray:
        return self._position

    @property
    def world_heights(self) -> np.ndarray:
        return self._world_heights

    def get_height(self, x, z):
        xi = np.clip(np.asarray(x).astype(np.int64), 0, self.resolution_x - 1)
        zi = np.clip(np.asarray(z).astype(np.int64), 0, self.resolution_z - 1)
        return self._world_heights[zi, xi]

    def get_interpolated_normal(self, u, v) -> np.ndarray:
        return normalize(self._bilinear(self._normals, u, v))

    def get_interpolated_height(self, u, v):
        return self._bilinear(self._world_heights, u, v)

    def _compute_normals(self) -> np.ndarray:
        """Per-sample normals from central differences of the world heights."""
        dh_dz, dh_dx = np.gradient(self._world_heights, self._heightmap_scale[2], self._heightmap_scale[0])
        normals = np.stack([-dh_dx, np.ones_like(dh_dx), -dh_dz], axis=-1)
        return normalize(normals)

    def _bilinear(self, grid: np.ndarray, u, v):
        fx = np.clip(np.asarray(u, dtype=np.float64), 0.0, 1.0) * (self.resolution_x - 1)
        fz = np.clip(np.asarray(v, dtype=np.float64), 0.0, 1.0) * (self.resolution_z - 1)

        x0 = np.minimum(np.floor(fx).astype(np.int64), self.resolution_x - 2)
        z0 = np.minimum(np.floor(fz).astype(np.int64), self.resolution_z - 2)
        tx = fx - x0
        tz = fz - z0

        # Broadcast weights over a trailing vector axis
        if grid.ndim == 3:
            tx = tx[..., None]
            tz = tz[..., None]

        bottom = lerp(grid[z0, x0], grid[z0, x0 + 1], tx)
        top = lerp(grid[z0 + 1, x0], grid[z0 + 1, x0 + 1], tx)
        return lerp(bottom, top, tz)
