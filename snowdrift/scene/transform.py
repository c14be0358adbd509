# snowdrift/scene/transform.py

import numpy as np
from typing import Callable, List, Optional
from snowdrift.ecs.component import Component
from snowdrift.utils.math import quaternion_to_matrix, quaternion_multiply
from snowdrift.core.logging import get_logger

logger = get_logger()

PositionListener = Callable[['Transform'], None]


def quaternion_inverse(q: np.ndarray) -> np.ndarray:
    """Calculates the inverse of a unit quaternion (its conjugate)."""
    return np.array([-q[0], -q[1], -q[2], q[3]], dtype=np.float32)


class Transform(Component):
    """
    Hierarchical transform component.
    World is Y-up: x/z span the ground plane.

    Listeners registered with add_listener() are called with the transform
    whenever its world position changes, including through a parent move.
    """

    def __init__(self, position=(0.0, 0.0, 0.0)):
        super().__init__()

        # Local space (relative to parent)
        self.local_position = np.array(position, dtype=np.float64)
        self.local_rotation = np.array([0.0, 0.0, 0.0, 1.0], dtype=np.float32)  # Quaternion [x, y, z, w]
        self.local_scale = np.array([1.0, 1.0, 1.0], dtype=np.float32)

        # World space (absolute) - cached values
        self._world_matrix = np.eye(4, dtype=np.float64)
        self._world_position = self.local_position.copy()
        self._world_rotation = self.local_rotation.copy()
        self._dirty = True

        # Hierarchy
        self.parent: Optional[Transform] = None
        self.children: List[Transform] = []

        self._listeners: List[PositionListener] = []

    def add_listener(self, listener: PositionListener):
        """Register a callback fired after the world position changes."""
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: PositionListener):
        if listener in self._listeners:
            self._listeners.remove(listener)

    def set_parent(self, parent: Optional['Transform']):
        """Set parent transform."""
        before = self.get_world_position().copy()
        if self.parent:
            self.parent.children.remove(self)
        self.parent = parent
        if parent:
            parent.children.append(self)
        self._mark_dirty()
        self._notify_if_moved(before)

    def set_local_position(self, position):
        """Set position in local space."""
        before = self.get_world_position().copy()
        self.local_position = np.array(position, dtype=np.float64)
        self._mark_dirty()
        self._notify_if_moved(before)

    def set_local_rotation(self, rotation: np.ndarray):
        """Set rotation in local space (as quaternion)."""
        self.local_rotation = np.array(rotation, dtype=np.float32)
        self._mark_dirty()

    def set_world_position(self, position):
        """Set position in world space."""
        position = np.array(position, dtype=np.float64)
        if self.parent:
            parent_inv_matrix = np.linalg.inv(self.parent.get_world_matrix())
            self.set_local_position(np.dot(parent_inv_matrix, np.append(position, 1.0))[:3])
        else:
            self.set_local_position(position)

    def set_world_rotation(self, rotation: np.ndarray):
        """Set rotation in world space (as quaternion)."""
        if self.parent:
            parent_world_rot_inv = quaternion_inverse(self.parent.get_world_rotation())
            self.set_local_rotation(quaternion_multiply(parent_world_rot_inv, rotation))
        else:
            self.set_local_rotation(rotation)

    def translate(self, delta):
        """Move by delta in world space."""
        self.set_world_position(self.get_world_position() + np.asarray(delta, dtype=np.float64))

    def get_world_matrix(self) -> np.ndarray:
        """Get world transformation matrix."""
        if self._dirty:
            self._update_world_transform()
        return self._world_matrix

    def get_world_position(self) -> np.ndarray:
        """Get position in world space."""
        if self._dirty:
            self._update_world_transform()
        return self._world_position

    def get_world_rotation(self) -> np.ndarray:
        """Get rotation in world space (as quaternion)."""
        if self._dirty:
            self._update_world_transform()
        return self._world_rotation

    def transform_direction(self, direction) -> np.ndarray:
        """Rotate a local direction into world space."""
        d = np.append(np.asarray(direction, dtype=np.float64), 0.0)
        return (self.get_world_matrix() @ d)[:3]

    def _update_world_transform(self):
        """Recalculate world transform from local transform and parent."""
        local_matrix = self._compute_trs_matrix(self.local_position, self.local_rotation, self.local_scale)

        if self.parent:
            self._world_matrix = self.parent.get_world_matrix() @ local_matrix
        else:
            self._world_matrix = local_matrix

        self._world_position = self._world_matrix[:3, 3].copy()

        if self.parent:
            self._world_rotation = quaternion_multiply(self.parent.get_world_rotation(), self.local_rotation)
        else:
            self._world_rotation = self.local_rotation.copy()

        self._dirty = False

    def _mark_dirty(self):
        """Mark this transform and all children as needing update."""
        if not self._dirty:
            self._dirty = True
            for child in self.children:
                child._mark_dirty()

    def _notify_if_moved(self, before: np.ndarray):
        if np.array_equal(before, self.get_world_position()):
            return
        self._notify_subtree()

    def _notify_subtree(self):
        for listener in list(self._listeners):
            listener(self)
        for child in self.children:
            child._notify_subtree()

    def _compute_trs_matrix(self, position, rotation, scale) -> np.ndarray:
        """Compute transformation matrix from Translation-Rotation-Scale."""
        rot_matrix = quaternion_to_matrix(rotation).astype(np.float64)
        scale_matrix = np.diag(np.append(scale, 1.0))
        trans_matrix = np.eye(4, dtype=np.float64)
        trans_matrix[:3, 3] = position
        return trans_matrix @ rot_matrix @ scale_matrix
