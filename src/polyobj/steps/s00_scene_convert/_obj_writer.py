"""OBJ writer: triangle meshes + material table -> Wavefront OBJ/MTL text.

Vertex and UV indices are renumbered into one 1-based index space spanning
every group in the file: each group is offset by the position and UV-slot
counts of the groups written before it. Normals are addressed by vertex
index, so every face corner is written as ``v/t/v``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import numpy as np

from polyobj.core.errors import FileOpenError, NoMeshesError
from polyobj.mesh.materials import MaterialTable
from polyobj.mesh.records import TriangleMesh

logger = logging.getLogger(__name__)


@dataclass
class ObjExportResult:
    obj_path: Path
    mtl_path: Optional[Path]
    num_positions: int
    num_uvs: int
    num_triangles: int


def obj_header(creator: str) -> str:
    return (
        "###################\n"
        "#\n"
        "# Wavefront OBJ File\n"
        f"# Created with {creator}\n"
        "#\n"
        "###################\n\n"
    )


def mtl_header(creator: str) -> str:
    return (
        "#\n"
        "# Wavefront material file\n"
        f"# Created with {creator}\n"
        "#\n\n"
    )


def _rows(prefix: str, values: np.ndarray) -> list[str]:
    return [f"{prefix} " + " ".join(f"{x:f}" for x in row) + "\n" for row in values.tolist()]


def render_obj(
    meshes: list[TriangleMesh],
    materials: MaterialTable,
    mtl_name: str,
    creator: str = "polyobj",
) -> str:
    """Render the geometry file.

    Args:
        meshes: Triangle meshes in extraction order.
        materials: Scene material table; ``mtllib`` is written only when it
            is non-empty.
        mtl_name: Base name of the companion material file (no extension).
        creator: Name shown in the header comment.
    """
    lines = [obj_header(creator)]
    if len(materials) > 0:
        lines.append(f"mtllib ./{mtl_name}.mtl\n\n")

    vertex_base, uv_base = 1, 1
    for mesh in meshes:
        lines.append(f"g {mesh.name}\n")
        lines.extend(_rows("v", mesh.positions))
        lines.extend(_rows("vt", mesh.vertex_uv))
        lines.extend(_rows("vn", mesh.vertex_normal))
        if mesh.material_name:
            lines.append(f"usemtl {mesh.material_name}\n")

        v = (mesh.triangle_vertex_index + vertex_base).reshape(-1, 3).tolist()
        t = (mesh.triangle_uv_index + uv_base).reshape(-1, 3).tolist()
        for (v0, v1, v2), (t0, t1, t2) in zip(v, t):
            lines.append(f"f {v0}/{t0}/{v0} {v1}/{t1}/{v1} {v2}/{t2}/{v2}\n")

        vertex_base += mesh.num_positions
        uv_base += mesh.num_uvs
    return "".join(lines)


def render_mtl(materials: MaterialTable, creator: str = "polyobj") -> str:
    lines = [mtl_header(creator)]
    for name in materials:
        m = materials[name]
        lines.append(f"newmtl {m.name}\n")
        lines.append("Ka {:f} {:f} {:f}\n".format(*m.ambient))
        lines.append("Kd {:f} {:f} {:f}\n".format(*m.diffuse))
        lines.append("Ks {:f} {:f} {:f}\n".format(*m.specular))
        lines.append(f"Tr {m.transparency:f}\n")
        lines.append(f"Ns {m.shininess:f}\n")
        lines.append("\n")
    return "".join(lines)


def _write_text(path: Path, text: str) -> None:
    try:
        f = open(path, "w", encoding="utf-8", newline="\n")
    except OSError as e:
        raise FileOpenError(path, e.strerror or str(e)) from e
    with f:
        f.write(text)


def export_obj(
    meshes: list[TriangleMesh],
    materials: MaterialTable,
    obj_path: Path,
    *,
    creator: str = "polyobj",
) -> ObjExportResult:
    """Write ``obj_path`` and, when materials exist, its sibling ``.mtl``.

    Raises:
        NoMeshesError: ``meshes`` is empty; nothing is written.
        FileOpenError: an output file cannot be opened; no partial output
            is left behind.
    """
    if not meshes:
        raise NoMeshesError()

    obj_path = Path(obj_path)
    mtl_path = obj_path.with_suffix(".mtl") if len(materials) > 0 else None

    obj_text = render_obj(meshes, materials, obj_path.stem, creator)
    mtl_text = render_mtl(materials, creator) if mtl_path is not None else None

    _write_text(obj_path, obj_text)
    if mtl_path is not None:
        try:
            _write_text(mtl_path, mtl_text)
        except FileOpenError:
            obj_path.unlink(missing_ok=True)
            raise

    result = ObjExportResult(
        obj_path=obj_path,
        mtl_path=mtl_path,
        num_positions=sum(m.num_positions for m in meshes),
        num_uvs=sum(m.num_uvs for m in meshes),
        num_triangles=sum(m.num_triangles for m in meshes),
    )
    logger.info(
        f"OBJ exported: {obj_path} ({len(meshes)} groups, {result.num_positions} v, "
        f"{result.num_triangles} f, {len(materials)} materials)"
    )
    return result
