# snowdrift/rendering/mesh.py

import numpy as np
from typing import Optional
from snowdrift.ecs.component import Component
from snowdrift.core.logging import get_logger

logger = get_logger()


class Mesh:
    """
    Mesh data container.
    Stores vertices, normals, colors, UVs, indices.
    """

    def __init__(self, name: str = "Mesh"):
        self.name = name

        # Vertex data
        self.vertices: np.ndarray = np.zeros((0, 3), dtype=np.float32)  # Nx3
        self.normals: np.ndarray = np.zeros((0, 3), dtype=np.float32)  # Nx3
        self.uvs: np.ndarray = np.zeros((0, 2), dtype=np.float32)  # Nx2
        self.colors: Optional[np.ndarray] = None  # Nx4

        # Index buffer, three entries per triangle
        self.indices: Optional[np.ndarray] = None

        # Bounds (for culling)
        self.bounds_min: np.ndarray = np.zeros(3, dtype=np.float32)
        self.bounds_max: np.ndarray = np.zeros(3, dtype=np.float32)

    @property
    def vertex_count(self) -> int:
        return len(self.vertices)

    @property
    def triangle_count(self) -> int:
        if self.indices is None:
            return 0
        return len(self.indices) // 3

    def calculate_bounds(self):
        """Calculate bounding box from vertices."""
        if len(self.vertices) > 0:
            self.bounds_min = np.min(self.vertices, axis=0)
            self.bounds_max = np.max(self.vertices, axis=0)

    def face_normals(self) -> np.ndarray:
        """Unnormalized (b - a) x (c - a) for every triangle, shape Tx3."""
        if self.indices is None or len(self.indices) == 0:
            return np.zeros((0, 3), dtype=np.float32)

        tris = self.indices.reshape(-1, 3)
        v0 = self.vertices[tris[:, 0]]
        v1 = self.vertices[tris[:, 1]]
        v2 = self.vertices[tris[:, 2]]
        return np.cross(v1 - v0, v2 - v0)


class MeshRenderer(Component):
    """
    Mesh renderer component.
    Holds the mesh shown for its entity; a backend uploads it when dirty.
    """

    def __init__(self, mesh: Optional[Mesh] = None, color=(1.0, 1.0, 1.0, 1.0)):
        super().__init__()

        self.mesh = mesh
        self.color = color  # Tint applied on top of vertex colors
        self.visible = True
        self.dirty = mesh is not None
        self._node_path = None  # Handle to backend node

    def set_mesh(self, mesh: Mesh):
        """Replace the displayed mesh. The previous one stays until the backend syncs."""
        self.mesh = mesh
        self.dirty = True

    def on_destroy(self):
        """Clean up the backend node when component is destroyed."""
        if self._node_path is not None:
            self._node_path.removeNode()
            self._node_path = None
