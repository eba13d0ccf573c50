"""End-to-end conversion of the bundled sample scene."""

import shutil
from pathlib import Path

import pytest

from polyobj.core.pipeline_runner import convert_file

SAMPLE = Path(__file__).resolve().parents[2] / "samples" / "crate_scene.yaml"


@pytest.fixture
def sample_copy(tmp_path: Path) -> Path:
    target = tmp_path / SAMPLE.name
    shutil.copy(SAMPLE, target)
    return target


def _lines(path: Path, prefix: str) -> list[str]:
    return [l for l in path.read_text(encoding="utf-8").splitlines() if l.startswith(prefix + " ")]


@pytest.mark.e2e
class TestCrateScene:
    def test_counts(self, sample_copy: Path):
        out = convert_file(sample_copy)
        assert out.num_meshes == 2
        assert out.num_triangles == 16
        assert out.num_positions == 13
        assert out.num_uvs == 4
        assert out.num_materials == 2
        assert out.issues == []

    def test_obj_layout(self, sample_copy: Path):
        out = convert_file(sample_copy)
        assert _lines(out.obj_path, "g") == ["g Crate", "g Roof"]
        assert _lines(out.obj_path, "usemtl") == ["usemtl wood", "usemtl slate"]
        assert _lines(out.obj_path, "mtllib") == ["mtllib ./crate_scene.mtl"]

        faces = _lines(out.obj_path, "f")
        assert len(faces) == 16
        assert faces[0] == "f 1/1/1 4/1/4 3/1/3"
        assert faces[12] == "f 9/2/9 10/3/10 11/4/11"

    def test_vertex_normals(self, sample_copy: Path):
        out = convert_file(sample_copy)
        normals = _lines(out.obj_path, "vn")
        assert len(normals) == 13
        assert normals[0] == "vn -0.577350 -0.577350 -0.577350"
        assert normals[8] == "vn 0.000000 0.000000 0.000000"

    def test_mtl(self, sample_copy: Path):
        out = convert_file(sample_copy)
        mtl = out.mtl_path.read_text(encoding="utf-8")
        assert _lines(out.mtl_path, "newmtl") == ["newmtl slate", "newmtl wood"]
        assert "Kd 0.600000 0.400000 0.200000\n" in mtl
        assert "Ns 12.000000\n" in mtl
        assert "Kd 0.300000 0.300000 0.350000\n" in mtl

    def test_every_face_index_in_range(self, sample_copy: Path):
        out = convert_file(sample_copy)
        for face in _lines(out.obj_path, "f"):
            for corner in face.split()[1:]:
                v, t, n = (int(x) for x in corner.split("/"))
                assert 1 <= v <= out.num_positions
                assert 1 <= t <= out.num_uvs
                assert n == v
