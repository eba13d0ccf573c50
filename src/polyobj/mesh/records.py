"""Polygon and triangle mesh records.

A PolygonMesh is what an importer hands over: variable-size faces with one
normal, UV and UV-slot id per face corner. A TriangleMesh is the derived
triangle soup the OBJ writer consumes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Optional

import numpy as np

from polyobj.core.contracts import IssueKind
from polyobj.core.diagnostics import Diagnostics

logger = logging.getLogger(__name__)


def _as_array(values, dtype, width: int | None = None) -> np.ndarray:
    arr = np.asarray(values, dtype=dtype)
    if width is None:
        return arr.reshape(-1)
    return arr.reshape(-1, width)


@dataclass(frozen=True)
class PolygonMesh:
    """Raw polygon mesh as supplied by an importer."""

    name: str
    vertex_positions: np.ndarray  # (V, 3) float64
    face_sizes: np.ndarray  # (F,) int64
    corner_vertex_index: np.ndarray  # (C,) int64
    corner_normal: np.ndarray  # (C, 3) float64
    corner_uv: np.ndarray  # (C, 2) float64
    corner_uv_index: np.ndarray  # (C,) int64
    material_name: Optional[str] = None

    @classmethod
    def from_sequences(
        cls,
        name: str,
        vertex_positions,
        face_sizes,
        corner_vertex_index,
        corner_normal=None,
        corner_uv=None,
        corner_uv_index=None,
        material_name: Optional[str] = None,
    ) -> "PolygonMesh":
        """Build a record from plain sequences.

        Missing normals default to zero vectors, missing UVs to (0, 0) and
        missing UV-slot ids to slot 0.
        """
        corner_vertex_index = _as_array(corner_vertex_index, np.int64)
        n = len(corner_vertex_index)
        if corner_normal is None:
            corner_normal = np.zeros((n, 3))
        if corner_uv is None:
            corner_uv = np.zeros((n, 2))
        if corner_uv_index is None:
            corner_uv_index = np.zeros(n, dtype=np.int64)
        return cls(
            name=name,
            vertex_positions=_as_array(vertex_positions, np.float64, 3),
            face_sizes=_as_array(face_sizes, np.int64),
            corner_vertex_index=corner_vertex_index,
            corner_normal=_as_array(corner_normal, np.float64, 3),
            corner_uv=_as_array(corner_uv, np.float64, 2),
            corner_uv_index=_as_array(corner_uv_index, np.int64),
            material_name=material_name,
        )

    @property
    def num_faces(self) -> int:
        return len(self.face_sizes)

    @property
    def num_corners(self) -> int:
        return len(self.corner_vertex_index)

    @property
    def num_vertices(self) -> int:
        return len(self.vertex_positions)

    @property
    def is_consistent(self) -> bool:
        """True when every corner sequence has sum(face_sizes) entries."""
        expected = int(self.face_sizes.sum())
        return all(
            len(seq) == expected
            for seq in (
                self.corner_vertex_index,
                self.corner_normal,
                self.corner_uv,
                self.corner_uv_index,
            )
        )


def drop_invalid_corners(mesh: PolygonMesh, diagnostics: Diagnostics | None = None) -> PolygonMesh:
    """Remove corners whose vertex index is negative or past the last position.

    Corners with a negative UV-slot id are dropped too. The corner is removed
    from all four corner sequences. ``face_sizes`` is left as declared, so the
    returned record may be inconsistent; the triangulator skips the faces
    that run out of corners.
    """
    idx = mesh.corner_vertex_index
    uv_idx = mesh.corner_uv_index
    valid = (idx >= 0) & (idx < mesh.num_vertices) & (uv_idx >= 0)
    if valid.all():
        return mesh

    if diagnostics is not None:
        for corner in np.flatnonzero(~valid):
            diagnostics.report(
                IssueKind.INVALID_CORNER_INDEX,
                mesh.name,
                f"corner {int(corner)} references vertex {int(idx[corner])} / uv slot "
                f"{int(uv_idx[corner])} (mesh has {mesh.num_vertices} vertices), corner dropped",
            )
    else:
        logger.warning(f"{mesh.name}: dropped {int((~valid).sum())} corner(s) with invalid vertex index")

    return replace(
        mesh,
        corner_vertex_index=mesh.corner_vertex_index[valid],
        corner_normal=mesh.corner_normal[valid],
        corner_uv=mesh.corner_uv[valid],
        corner_uv_index=mesh.corner_uv_index[valid],
    )


@dataclass
class TriangleMesh:
    """Triangle soup produced by fan triangulation.

    ``positions`` and ``vertex_normal`` are indexed by original vertex id and
    ``vertex_uv`` by UV-slot id. Neither is compacted.
    """

    name: str
    positions: np.ndarray  # (P, 3) float64
    triangle_vertex_index: np.ndarray  # (3T,) int64
    triangle_normal: np.ndarray  # (3T, 3) float64
    triangle_uv: np.ndarray  # (3T, 2) float64
    triangle_uv_index: np.ndarray  # (3T,) int64
    vertex_normal: np.ndarray  # (P, 3) float64
    vertex_uv: np.ndarray  # (U, 2) float64
    material_name: Optional[str] = None
    source_faces: int = field(default=0)

    @property
    def num_triangles(self) -> int:
        return len(self.triangle_vertex_index) // 3

    @property
    def num_positions(self) -> int:
        return len(self.positions)

    @property
    def num_uvs(self) -> int:
        return len(self.vertex_uv)

    def triangles(self) -> np.ndarray:
        """(T, 3) view of the triangle vertex indices."""
        return self.triangle_vertex_index.reshape(-1, 3)
