# snowdrift/rendering/panda_backend.py

import numpy as np
from typing import Optional
from panda3d.core import (
    Geom,
    GeomNode,
    GeomTriangles,
    GeomVertexData,
    GeomVertexFormat,
    GeomVertexWriter,
    NodePath,
    OrthographicLens,
    PerspectiveLens,
    Point3,
    Vec3,
    load_prc_file_data,
)
from snowdrift.camera.camera import Camera
from snowdrift.core.logging import get_logger
from snowdrift.rendering.mesh import Mesh, MeshRenderer
from snowdrift.utils.profiler import profile_section

logger = get_logger()


def to_panda(v) -> tuple:
    """Engine space is Y-up, Panda3D is Z-up: swap y and z."""
    return float(v[0]), float(v[2]), float(v[1])


class PandaBackend:
    """
    Panda3D rendering backend adapter.
    Isolates Panda3D-specific code from engine.

    Swapping y/z mirrors the geometry, so triangle winding is reversed on
    upload to keep front faces pointing the same way.
    """

    def __init__(self, config: Optional[dict] = None):
        self.config = config or {}
        self.base = None
        self.scene_graph = None

    def initialize(self):
        """Open a window through ShowBase. Not needed for offscreen node building."""
        load_prc_file_data("", f"""
            win-size {self.config.get('width', 1280)} {self.config.get('height', 720)}
            window-title {self.config.get('title', 'Snowdrift')}
        """)

        from direct.showbase.ShowBase import ShowBase
        import builtins
        if hasattr(builtins, 'base'):
            self.base = builtins.base
        else:
            self.base = ShowBase()

        self.scene_graph = self.base.render
        self.base.disableMouse()
        logger.info("Panda3D initialized")

    def build_geom_node(self, mesh: Mesh) -> GeomNode:
        """Convert Mesh to Panda3D GeomNode."""
        node = GeomNode(mesh.name)
        node.addGeom(self._build_geom(mesh))
        return node

    def _build_geom(self, mesh: Mesh) -> Geom:
        with profile_section("UploadMesh"):
            # V3n3c4t2 carries the falloff mask in the vertex colors
            vformat = GeomVertexFormat.getV3n3c4t2()
            vdata = GeomVertexData(mesh.name, vformat, Geom.UHDynamic)

            vertex = GeomVertexWriter(vdata, 'vertex')
            normal = GeomVertexWriter(vdata, 'normal')
            color = GeomVertexWriter(vdata, 'color')
            texcoord = GeomVertexWriter(vdata, 'texcoord')

            for i in range(len(mesh.vertices)):
                vertex.addData3(*to_panda(mesh.vertices[i]))

                if len(mesh.normals) > i:
                    normal.addData3(*to_panda(mesh.normals[i]))
                else:
                    normal.addData3(0, 0, 1)

                if mesh.colors is not None and len(mesh.colors) > i:
                    c = mesh.colors[i]
                    color.addData4(float(c[0]), float(c[1]), float(c[2]), float(c[3]))
                else:
                    # Default to White so node color works
                    color.addData4(1, 1, 1, 1)

                if len(mesh.uvs) > i:
                    uv = mesh.uvs[i]
                    texcoord.addData2(float(uv[0]), float(uv[1]))
                else:
                    texcoord.addData2(0, 0)

            geom = Geom(vdata)
            tris = GeomTriangles(Geom.UHDynamic)
            if mesh.indices is not None:
                tris.setIndexType(Geom.NTUint32)
                for a, b, c in np.asarray(mesh.indices).reshape(-1, 3):
                    tris.addVertices(int(a), int(c), int(b))
            geom.addPrimitive(tris)
            return geom

    def create_mesh_node(self, mesh: Mesh, parent: Optional[NodePath] = None) -> NodePath:
        """Create a NodePath for a mesh, attached under parent (or the scene graph)."""
        node_path = NodePath(self.build_geom_node(mesh))
        parent = parent if parent is not None else self.scene_graph
        if parent is not None:
            node_path.reparentTo(parent)
        return node_path

    def sync_renderer(self, renderer: MeshRenderer, parent: Optional[NodePath] = None) -> Optional[NodePath]:
        """Push a dirty MeshRenderer's mesh into its node, creating the node on first use."""
        if not renderer.dirty or renderer.mesh is None:
            return renderer._node_path

        if renderer._node_path is None:
            renderer._node_path = self.create_mesh_node(renderer.mesh, parent)
        else:
            geom_node = renderer._node_path.node()
            geom_node.removeAllGeoms()
            geom_node.addGeom(self._build_geom(renderer.mesh))

        renderer._node_path.setColor(*renderer.color)
        if renderer.visible:
            renderer._node_path.show()
        else:
            renderer._node_path.hide()

        renderer.dirty = False
        return renderer._node_path

    def update_node_position(self, node_path: NodePath, position: np.ndarray):
        node_path.setPos(*to_panda(position))

    def create_camera_view(self, name: str, display_region=(0.7, 1.0, 0.7, 1.0)) -> NodePath:
        """
        Extra camera drawing the scene into a corner of the main window.
        Placement and lens come from apply_camera().
        """
        node_path = self.base.makeCamera(self.base.win, displayRegion=display_region, camName=name)
        node_path.reparentTo(self.scene_graph)
        return node_path

    def apply_camera(self, camera: Camera, node_path: NodePath):
        """Copy placement and projection of an engine camera onto a Panda3D camera node."""
        if camera.orthographic:
            lens = OrthographicLens()
            lens.setFilmSize(2.0 * camera.ortho_size * camera.aspect_ratio, 2.0 * camera.ortho_size)
        else:
            lens = PerspectiveLens()
            lens.setFov(camera.field_of_view * camera.aspect_ratio, camera.field_of_view)
        lens.setNearFar(camera.near_clip, camera.far_clip)
        node_path.node().setLens(lens)

        position = camera.transform.get_world_position()
        forward = camera.forward
        up = camera.transform.transform_direction([0.0, 1.0, 0.0])

        node_path.setPos(*to_panda(position))
        node_path.lookAt(Point3(*to_panda(position + forward)), Vec3(*to_panda(up)))

    def shutdown(self):
        """Shutdown Panda3D."""
        if self.base:
            self.base.destroy()
            self.base = None
        logger.info("PandaBackend shutdown")
