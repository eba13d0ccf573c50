"""Load interchange formats (GLB/glTF/PLY/OFF/STL) through trimesh.

trimesh delivers triangulated geometry, so every face has three corners.
Each geometry instance in the scene graph becomes one polygon mesh record
under a flat root node; its world transform is recorded on the node.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import numpy as np

from polyobj.core.diagnostics import Diagnostics
from polyobj.core.errors import SceneLoadError
from polyobj.mesh.materials import RawMaterial, ShadingModel
from polyobj.mesh.records import PolygonMesh, drop_invalid_corners
from polyobj.mesh.scene_graph import ImportedScene, SceneGraph

logger = logging.getLogger(__name__)


def _has_trimesh() -> bool:
    """Check if trimesh is available."""
    try:
        import trimesh  # noqa: F401
        return True
    except ImportError:
        return False


def _rgb(color) -> tuple[float, float, float]:
    rgba = np.asarray(color, dtype=np.float64).reshape(-1)
    if rgba.max(initial=0.0) > 1.0:
        rgba = rgba / 255.0
    return (float(rgba[0]), float(rgba[1]), float(rgba[2]))


def _alpha(color) -> float:
    rgba = np.asarray(color, dtype=np.float64).reshape(-1)
    if len(rgba) < 4:
        return 1.0
    return float(rgba[3] / 255.0 if rgba.max() > 1.0 else rgba[3])


def raw_material_from_trimesh(material, fallback_name: str) -> Optional[RawMaterial]:
    """Map a trimesh material onto the importer's raw material record.

    SimpleMaterial carries the full phong set; PBRMaterial only contributes
    its base color and is read as a diffuse-only material. Anything else is
    passed on with its class name as tag so the material table rejects it.
    """
    from trimesh.visual.material import PBRMaterial, SimpleMaterial

    if material is None:
        return None
    name = getattr(material, "name", None) or fallback_name

    if isinstance(material, SimpleMaterial):
        return RawMaterial(
            name=name,
            shading_model=ShadingModel.PHONG.value,
            ambient=_rgb(material.ambient),
            diffuse=_rgb(material.diffuse),
            specular=_rgb(material.specular),
            transparency_factor=1.0 - _alpha(material.diffuse),
            shininess=float(material.glossiness or 0.0),
        )
    if isinstance(material, PBRMaterial):
        base = material.baseColorFactor
        if base is None:
            base = [255, 255, 255, 255]
        return RawMaterial(
            name=name,
            shading_model=ShadingModel.LAMBERT.value,
            diffuse=_rgb(base),
            transparency_factor=1.0 - _alpha(base),
        )
    return RawMaterial(name=name, shading_model=type(material).__name__)


def polygon_mesh_from_trimesh(name: str, geom, material_name: Optional[str]) -> PolygonMesh:
    """Expand a trimesh.Trimesh into per-corner arrays (three corners per face)."""
    faces = np.asarray(geom.faces, dtype=np.int64)
    corner_vertex = faces.reshape(-1)
    normals = np.asarray(geom.vertex_normals, dtype=np.float64)[corner_vertex]

    uv = getattr(geom.visual, "uv", None)
    if uv is not None and len(uv) == len(geom.vertices):
        corner_uv = np.asarray(uv, dtype=np.float64)[corner_vertex]
        corner_uv_index = corner_vertex
    else:
        corner_uv = None
        corner_uv_index = None

    return PolygonMesh.from_sequences(
        name=name,
        vertex_positions=np.asarray(geom.vertices, dtype=np.float64),
        face_sizes=np.full(len(faces), 3, dtype=np.int64),
        corner_vertex_index=corner_vertex,
        corner_normal=normals,
        corner_uv=corner_uv,
        corner_uv_index=corner_uv_index,
        material_name=material_name,
    )


def load_trimesh_scene(path: Path, diagnostics: Diagnostics | None = None) -> ImportedScene:
    """Load ``path`` with trimesh and convert every geometry instance."""
    import trimesh

    path = Path(path)
    try:
        tm_scene = trimesh.load(str(path), force="scene")
    except (OSError, ValueError, KeyError) as e:
        raise SceneLoadError(path, str(e)) from e

    graph = SceneGraph()
    root = graph.add_node(path.stem)
    scene = ImportedScene(name=path.stem, graph=graph)

    for node_name in tm_scene.graph.nodes_geometry:
        transform, geometry_name = tm_scene.graph[node_name]
        geom = tm_scene.geometry.get(geometry_name)
        if not isinstance(geom, trimesh.Trimesh) or len(geom.faces) == 0:
            logger.debug(f"Skipping node '{node_name}': no triangle geometry")
            continue

        raw = raw_material_from_trimesh(
            getattr(geom.visual, "material", None), f"{geometry_name}_material"
        )
        mesh = polygon_mesh_from_trimesh(str(node_name), geom, raw.name if raw else None)

        index = graph.add_node(str(node_name), root, transform)
        graph[index].mesh_indices.append(len(scene.meshes))
        scene.meshes.append(drop_invalid_corners(mesh, diagnostics))
        if raw is not None:
            scene.raw_materials.append(raw)

    logger.info(
        f"Loaded {path.name} via trimesh: {len(scene.meshes)} meshes, "
        f"{len(scene.raw_materials)} materials"
    )
    return scene
