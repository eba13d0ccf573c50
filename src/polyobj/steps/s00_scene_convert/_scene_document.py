"""Read polyobj scene documents (YAML or JSON) into polygon mesh records.

A scene document is a node tree. A node may own a polygon mesh and a list of
material slots; the mesh picks its material through a binding that is either
``all_same`` (one index for the whole mesh) or ``by_polygon`` (one index per
polygon).
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Literal, Optional

import numpy as np
import yaml
from pydantic import BaseModel, Field, ValidationError, model_validator

from polyobj.core.diagnostics import Diagnostics
from polyobj.core.errors import SceneLoadError
from polyobj.mesh.materials import RawMaterial, resolve_material_binding
from polyobj.mesh.records import PolygonMesh, drop_invalid_corners
from polyobj.mesh.scene_graph import ImportedScene, SceneGraph

logger = logging.getLogger(__name__)

IDENTITY_4X4 = [1.0, 0.0, 0.0, 0.0, 0.0, 1.0, 0.0, 0.0, 0.0, 0.0, 1.0, 0.0, 0.0, 0.0, 0.0, 1.0]


class MeshDocument(BaseModel):
    positions: list[tuple[float, float, float]] = Field(default_factory=list)
    polygons: list[list[int]] = Field(default_factory=list, description="Vertex indices per polygon")
    normals: Optional[list[tuple[float, float, float]]] = None
    normal_mapping: Literal["by_polygon_vertex", "by_control_point"] = "by_polygon_vertex"
    uvs: list[tuple[float, float]] = Field(default_factory=list, description="UV slots")
    uv_indices: Optional[list[list[int]]] = Field(
        None, description="UV slot per polygon corner (same shape as polygons)"
    )
    material_mapping: Literal["all_same", "by_polygon"] = "all_same"
    material_indices: list[int] = Field(default_factory=list)

    @model_validator(mode="after")
    def _uv_indices_match_polygons(self) -> "MeshDocument":
        if self.uv_indices is None:
            return self
        if len(self.uv_indices) != len(self.polygons):
            raise ValueError(
                f"uv_indices has {len(self.uv_indices)} rows for {len(self.polygons)} polygons"
            )
        for i, (polygon, corners) in enumerate(zip(self.polygons, self.uv_indices)):
            if len(corners) != len(polygon):
                raise ValueError(
                    f"uv_indices row {i} has {len(corners)} entries for a {len(polygon)}-corner polygon"
                )
        return self


class NodeDocument(BaseModel):
    name: str
    transform: list[float] = Field(
        default_factory=lambda: list(IDENTITY_4X4), min_length=16, max_length=16
    )
    materials: list[RawMaterial] = Field(default_factory=list, description="Material slots")
    mesh: Optional[MeshDocument] = None
    children: list["NodeDocument"] = Field(default_factory=list)


class SceneDocument(BaseModel):
    name: Optional[str] = None
    root: NodeDocument


NodeDocument.model_rebuild()


def read_scene_document(path: Path) -> SceneDocument:
    """Parse and validate a scene document. JSON is read as YAML."""
    try:
        with open(path, encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise SceneLoadError(path, str(e)) from e
    if not isinstance(raw, dict):
        raise SceneLoadError(path, "document root must be a mapping")
    try:
        return SceneDocument(**raw)
    except ValidationError as e:
        raise SceneLoadError(path, f"invalid scene document: {e}") from e


def _corner_arrays(mesh_doc: MeshDocument, num_corners: int, corner_vertex: np.ndarray):
    """Per-corner normals, UVs and UV-slot ids for a mesh document."""
    normals = np.zeros((num_corners, 3))
    if mesh_doc.normals:
        src = np.asarray(mesh_doc.normals, dtype=np.float64)
        if mesh_doc.normal_mapping == "by_polygon_vertex":
            n = min(len(src), num_corners)
            normals[:n] = src[:n]
        else:
            ok = (corner_vertex >= 0) & (corner_vertex < len(src))
            normals[ok] = src[corner_vertex[ok]]

    uvs = np.zeros((num_corners, 2))
    uv_index = np.zeros(num_corners, dtype=np.int64)
    if mesh_doc.uvs:
        src = np.asarray(mesh_doc.uvs, dtype=np.float64)
        if mesh_doc.uv_indices is not None:
            flat = [i for corners in mesh_doc.uv_indices for i in corners]
            n = min(len(flat), num_corners)
            uv_index[:n] = flat[:n]
        elif len(src) == len(mesh_doc.positions):
            uv_index = corner_vertex.copy()
        ok = (uv_index >= 0) & (uv_index < len(src))
        uvs[ok] = src[uv_index[ok]]
    return normals, uvs, uv_index


def build_polygon_mesh(
    name: str,
    mesh_doc: MeshDocument,
    slot_names: list[str],
    diagnostics: Diagnostics | None = None,
) -> PolygonMesh:
    """Convert one mesh document into a sanitized PolygonMesh record."""
    face_sizes = [len(p) for p in mesh_doc.polygons]
    corner_vertex = np.asarray(
        [i for polygon in mesh_doc.polygons for i in polygon], dtype=np.int64
    )
    normals, uvs, uv_index = _corner_arrays(mesh_doc, len(corner_vertex), corner_vertex)

    mesh = PolygonMesh.from_sequences(
        name=name,
        vertex_positions=mesh_doc.positions,
        face_sizes=face_sizes,
        corner_vertex_index=corner_vertex,
        corner_normal=normals,
        corner_uv=uvs,
        corner_uv_index=uv_index,
        material_name=resolve_material_binding(
            slot_names, mesh_doc.material_mapping, mesh_doc.material_indices
        ),
    )
    return drop_invalid_corners(mesh, diagnostics)


def load_scene_document(path: Path, diagnostics: Diagnostics | None = None) -> ImportedScene:
    """Load a scene document into an :class:`ImportedScene`.

    Nodes whose mesh has no polygons are kept as group nodes. Every mesh
    node contributes its material slots to the raw material list, in
    traversal order.
    """
    path = Path(path)
    doc = read_scene_document(path)
    graph = SceneGraph()
    scene = ImportedScene(name=doc.name or path.stem, graph=graph)

    def visit(node_doc: NodeDocument, parent: Optional[int], parent_global: np.ndarray) -> None:
        local = np.asarray(node_doc.transform, dtype=np.float64).reshape(4, 4)
        global_ = parent_global @ local
        is_mesh = node_doc.mesh is not None and len(node_doc.mesh.polygons) > 0
        index = graph.add_node(node_doc.name, parent, local if is_mesh else global_)

        if is_mesh:
            slot_names = [m.name for m in node_doc.materials]
            mesh = build_polygon_mesh(node_doc.name, node_doc.mesh, slot_names, diagnostics)
            graph[index].mesh_indices.append(len(scene.meshes))
            scene.meshes.append(mesh)
            scene.raw_materials.extend(node_doc.materials)
            logger.debug(
                f"Mesh '{node_doc.name}': {mesh.num_faces} faces, {mesh.num_vertices} vertices, "
                f"material={mesh.material_name}"
            )

        for child in node_doc.children:
            visit(child, index, global_)

    visit(doc.root, None, np.eye(4))
    logger.info(
        f"Loaded scene document {path.name}: {len(graph)} nodes, "
        f"{len(scene.meshes)} meshes, {len(scene.raw_materials)} material slots"
    )
    return scene
