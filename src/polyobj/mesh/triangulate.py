"""Fan triangulation of polygon meshes.

Each face of n corners starting at flat corner offset k becomes n - 2
triangles (k, k+j+1, k+j+2), j = 0..n-3, all sharing the face's first corner.
This is exact for convex faces and a best-effort split for non-convex or
non-planar ones.

Per-vertex normals and per-slot UVs are not averaged: the corner emitted
last for a given vertex (or UV slot) wins, in face order and then
(pivot, j+1, j+2) order within each triangle.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor

import numpy as np

from polyobj.core.contracts import IssueKind
from polyobj.core.diagnostics import Diagnostics
from polyobj.core.errors import MalformedFaceError

from .records import PolygonMesh, TriangleMesh, drop_invalid_corners

logger = logging.getLogger(__name__)


def fan_corners(face_sizes: np.ndarray, face_offsets: np.ndarray) -> np.ndarray:
    """Flat corner positions of the fan triangles, three per triangle.

    Args:
        face_sizes: (F,) corner count per face, each >= 3.
        face_offsets: (F,) flat offset of each face's first corner.

    Returns:
        (3T,) int64 array of flat corner positions.
    """
    tris_per_face = face_sizes - 2
    num_tris = int(tris_per_face.sum())
    face_of_tri = np.repeat(np.arange(len(face_sizes)), tris_per_face)
    first_tri = np.cumsum(tris_per_face) - tris_per_face
    j = np.arange(num_tris, dtype=np.int64) - first_tri[face_of_tri]
    pivot = face_offsets[face_of_tri]
    return np.stack([pivot, pivot + j + 1, pivot + j + 2], axis=1).reshape(-1).astype(np.int64)


def scatter_last(target: np.ndarray, index: np.ndarray, values: np.ndarray) -> None:
    """Write ``values`` into ``target[index]`` keeping the last value per index."""
    if len(index) == 0:
        return
    uniq, first_in_reversed = np.unique(index[::-1], return_index=True)
    last = len(index) - 1 - first_in_reversed
    target[uniq] = values[last]


def triangulate(mesh: PolygonMesh, diagnostics: Diagnostics | None = None) -> TriangleMesh:
    """Fan-triangulate one polygon mesh.

    Corners with an out-of-range vertex id or a negative UV-slot id are
    dropped and reported before the fan is built.

    Raises:
        MalformedFaceError: if any face declares fewer than 3 corners.
    """
    sizes = mesh.face_sizes.astype(np.int64)
    bad = np.flatnonzero(sizes < 3)
    if len(bad):
        raise MalformedFaceError(mesh.name, bad.tolist(), sizes[bad].tolist())

    mesh = drop_invalid_corners(mesh, diagnostics)

    offsets = np.cumsum(sizes) - sizes
    fits = offsets + sizes <= mesh.num_corners
    if not fits.all():
        skipped = np.flatnonzero(~fits)
        message = (
            f"{len(skipped)} face(s) from #{int(skipped[0])} need corners past the "
            f"{mesh.num_corners} available, skipped"
        )
        if diagnostics is not None:
            diagnostics.report(IssueKind.TRUNCATED_FACE, mesh.name, message)
        else:
            logger.warning(f"{mesh.name}: {message}")
        sizes = sizes[fits]
        offsets = offsets[fits]

    corners = fan_corners(sizes, offsets)

    vertex_index = mesh.corner_vertex_index
    uv_index = mesh.corner_uv_index
    num_positions = int(vertex_index.max()) + 1 if len(vertex_index) else 1
    num_uvs = int(uv_index.max()) + 1 if len(uv_index) else 1

    positions = np.zeros((num_positions, 3), dtype=np.float64)
    n = min(num_positions, mesh.num_vertices)
    positions[:n] = mesh.vertex_positions[:n]

    tri_vertex_index = vertex_index[corners]
    tri_normal = mesh.corner_normal[corners]
    tri_uv = mesh.corner_uv[corners]
    tri_uv_index = uv_index[corners]

    vertex_normal = np.zeros((num_positions, 3), dtype=np.float64)
    vertex_uv = np.zeros((num_uvs, 2), dtype=np.float64)
    scatter_last(vertex_normal, tri_vertex_index, tri_normal)
    scatter_last(vertex_uv, tri_uv_index, tri_uv)

    tri_mesh = TriangleMesh(
        name=mesh.name,
        positions=positions,
        triangle_vertex_index=tri_vertex_index,
        triangle_normal=tri_normal,
        triangle_uv=tri_uv,
        triangle_uv_index=tri_uv_index,
        vertex_normal=vertex_normal,
        vertex_uv=vertex_uv,
        material_name=mesh.material_name,
        source_faces=len(sizes),
    )
    logger.debug(
        f"Triangulated '{mesh.name}': {len(sizes)} faces -> {tri_mesh.num_triangles} triangles "
        f"({num_positions} positions, {num_uvs} uv slots)"
    )
    return tri_mesh


def triangulate_all(
    meshes: list[PolygonMesh],
    *,
    workers: int = 1,
    diagnostics: Diagnostics | None = None,
) -> list[TriangleMesh]:
    """Triangulate meshes, returning results in the same order as ``meshes``.

    With ``workers > 1`` meshes are triangulated on a thread pool; export
    numbering depends on mesh order, so results are collected in input order.
    """
    if workers <= 1 or len(meshes) <= 1:
        return [triangulate(m, diagnostics) for m in meshes]

    with ThreadPoolExecutor(max_workers=workers) as executor:
        return list(executor.map(lambda m: triangulate(m, diagnostics), meshes))
