"""Shared pytest fixtures for polyobj tests."""

from pathlib import Path

import numpy as np
import pytest
import yaml

from polyobj.mesh.records import PolygonMesh


@pytest.fixture
def single_triangle() -> PolygonMesh:
    """One triangle, one UV slot per corner, +Z normals."""
    return PolygonMesh.from_sequences(
        name="Triangle",
        vertex_positions=[(0, 0, 0), (1, 0, 0), (0, 1, 0)],
        face_sizes=[3],
        corner_vertex_index=[0, 1, 2],
        corner_normal=[(0, 0, 1)] * 3,
        corner_uv=[(0, 0), (1, 0), (0, 1)],
        corner_uv_index=[0, 1, 2],
    )


@pytest.fixture
def quad_and_triangle() -> PolygonMesh:
    """A quad (0,1,2,3) followed by a triangle (4,5,6)."""
    positions = np.arange(21, dtype=np.float64).reshape(7, 3)
    return PolygonMesh.from_sequences(
        name="QuadTri",
        vertex_positions=positions,
        face_sizes=[4, 3],
        corner_vertex_index=[0, 1, 2, 3, 4, 5, 6],
        corner_uv_index=[0, 1, 2, 3, 4, 5, 6],
    )


@pytest.fixture
def write_scene(tmp_path: Path):
    """Return a helper that dumps a scene document dict to YAML."""

    def _write(doc: dict, name: str = "scene.yaml") -> Path:
        path = tmp_path / name
        with open(path, "w", encoding="utf-8") as f:
            yaml.safe_dump(doc, f)
        return path

    return _write


@pytest.fixture
def two_mesh_scene() -> dict:
    """Scene document with a group node and two mesh nodes."""
    return {
        "name": "two_meshes",
        "root": {
            "name": "RootNode",
            "children": [
                {
                    "name": "Group",
                    "transform": [1, 0, 0, 0, 0, 1, 0, 0, 0, 0, 1, 2, 0, 0, 0, 1],
                    "children": [
                        {
                            "name": "Quad",
                            "transform": [1, 0, 0, 1, 0, 1, 0, 0, 0, 0, 1, 0, 0, 0, 0, 1],
                            "materials": [
                                {"name": "red", "shading_model": "phong", "diffuse": [1, 0, 0],
                                 "transparency_factor": 0.25, "shininess": 10},
                            ],
                            "mesh": {
                                "positions": [[0, 0, 0], [1, 0, 0], [1, 1, 0], [0, 1, 0]],
                                "polygons": [[0, 1, 2, 3]],
                                "normals": [[0, 0, 1]] * 4,
                                "uvs": [[0, 0], [1, 0], [1, 1], [0, 1]],
                                "material_indices": [0],
                            },
                        },
                        {
                            "name": "Tri",
                            "materials": [
                                {"name": "blue", "shading_model": "lambert", "diffuse": [0, 0, 1]},
                            ],
                            "mesh": {
                                "positions": [[0, 0, 1], [1, 0, 1], [0, 1, 1]],
                                "polygons": [[0, 1, 2]],
                                "material_indices": [0],
                            },
                        },
                    ],
                },
            ],
        },
    }
