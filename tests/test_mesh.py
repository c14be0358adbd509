import numpy as np
import pytest

from snowdrift.rendering.mesh import Mesh, MeshRenderer


@pytest.fixture
def quad():
    mesh = Mesh("Quad")
    mesh.vertices = np.array([[0, 0, 0], [1, 0, 0], [0, 0, 1], [1, 0, 1]], dtype=np.float32)
    # Wound to face +Y
    mesh.indices = np.array([0, 3, 1, 3, 0, 2], dtype=np.uint32)
    return mesh


def test_counts(quad):
    assert quad.vertex_count == 4
    assert quad.triangle_count == 2
    assert Mesh().triangle_count == 0


def test_bounds(quad):
    quad.vertices[3, 1] = 2.0
    quad.calculate_bounds()

    assert quad.bounds_min.tolist() == [0.0, 0.0, 0.0]
    assert quad.bounds_max.tolist() == [1.0, 2.0, 1.0]


def test_face_normals(quad):
    normals = quad.face_normals()

    assert normals.shape == (2, 3)
    assert normals[:, 1] == pytest.approx([1.0, 1.0])
    assert Mesh().face_normals().shape == (0, 3)


def test_renderer_dirty_tracking(quad):
    assert not MeshRenderer().dirty
    assert MeshRenderer(quad).dirty

    renderer = MeshRenderer()
    renderer.set_mesh(quad)

    assert renderer.mesh is quad
    assert renderer.dirty


def test_renderer_destroy_releases_node(quad):
    class FakeNode:
        removed = False

        def removeNode(self):
            self.removed = True

    node = FakeNode()
    renderer = MeshRenderer(quad)
    renderer._node_path = node

    renderer.on_destroy()

    assert node.removed
    assert renderer._node_path is None
