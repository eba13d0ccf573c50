"""Tests for S00: Scene conversion step (scene -> OBJ/MTL)."""

from pathlib import Path

import pytest

from polyobj.core.contracts import IssueKind
from polyobj.core.errors import MalformedFaceError, NoMeshesError
from polyobj.steps.s00_scene_convert.config import SceneConvertConfig
from polyobj.steps.s00_scene_convert.contracts import SceneConvertInput, SceneConvertOutput
from polyobj.steps.s00_scene_convert.step import SceneConvertStep


def _face_lines(path: Path) -> list[str]:
    return [line for line in path.read_text(encoding="utf-8").splitlines() if line.startswith("f ")]


# ── Contract tests ──


class TestSceneConvertContracts:
    def test_config_defaults(self):
        cfg = SceneConvertConfig()
        assert cfg.creator == "polyobj"
        assert cfg.write_materials is True
        assert cfg.workers == 1
        assert ".yaml" in cfg.document_extensions
        assert ".glb" in cfg.trimesh_extensions

    def test_config_rejects_zero_workers(self):
        with pytest.raises(ValueError):
            SceneConvertConfig(workers=0)

    def test_supported_extensions(self):
        cfg = SceneConvertConfig()
        assert cfg.is_document(Path("a.YAML"))
        assert cfg.is_supported(Path("b.stl"))
        assert not cfg.is_document(Path("b.stl"))
        assert not cfg.is_supported(Path("c.fbx"))

    def test_default_obj_path(self):
        inp = SceneConvertInput(scene_path=Path("/data/scene.yaml"))
        assert inp.obj_path() == Path("/data/scene.obj")

    def test_output_base_keeps_dots(self):
        inp = SceneConvertInput(scene_path=Path("a.yaml"), output_base=Path("out/model.v2"))
        assert inp.obj_path() == Path("out/model.v2.obj")

    def test_output_schema(self):
        schema = SceneConvertOutput.model_json_schema()
        for key in ("obj_path", "mtl_path", "num_meshes", "num_triangles", "issues"):
            assert key in schema["properties"]

    def test_step_schemas(self):
        assert "scene_path" in SceneConvertStep.get_input_schema()["properties"]
        assert "workers" in SceneConvertStep.get_config_schema()["properties"]


# ── Validation tests ──


class TestSceneConvertValidation:
    def test_missing_file(self, tmp_path: Path):
        step = SceneConvertStep(config=SceneConvertConfig())
        assert not step.validate_inputs(SceneConvertInput(scene_path=tmp_path / "nope.yaml"))

    def test_unsupported_extension(self, tmp_path: Path):
        path = tmp_path / "notes.txt"
        path.write_text("hello", encoding="utf-8")
        step = SceneConvertStep(config=SceneConvertConfig())
        assert not step.validate_inputs(SceneConvertInput(scene_path=path))
        with pytest.raises(ValueError, match="validation failed"):
            step.execute(SceneConvertInput(scene_path=path))


# ── Conversion tests ──


class TestSceneConvertRun:
    def test_two_meshes(self, write_scene, two_mesh_scene):
        scene_path = write_scene(two_mesh_scene)
        out = SceneConvertStep(config=SceneConvertConfig()).execute(SceneConvertInput(scene_path=scene_path))

        assert out.obj_path == scene_path.with_suffix(".obj")
        assert out.mtl_path == scene_path.with_suffix(".mtl")
        assert out.num_meshes == 2
        assert out.num_positions == 7
        assert out.num_uvs == 5
        assert out.num_triangles == 3
        assert out.num_materials == 2
        assert out.issues == []
        assert _face_lines(out.obj_path) == [
            "f 1/1/1 2/2/2 3/3/3",
            "f 1/1/1 3/3/3 4/4/4",
            "f 5/5/5 6/5/6 7/5/7",
        ]

    def test_meta_filled(self, write_scene, two_mesh_scene):
        out = SceneConvertStep(config=SceneConvertConfig()).execute(
            SceneConvertInput(scene_path=write_scene(two_mesh_scene))
        )
        assert out.meta is not None
        assert out.meta.step_name == "scene_convert"
        assert out.meta.params["creator"] == "polyobj"

    def test_mtl_sorted_by_name(self, write_scene, two_mesh_scene):
        out = SceneConvertStep(config=SceneConvertConfig()).execute(
            SceneConvertInput(scene_path=write_scene(two_mesh_scene))
        )
        newmtl = [l for l in out.mtl_path.read_text(encoding="utf-8").splitlines() if l.startswith("newmtl")]
        assert newmtl == ["newmtl blue", "newmtl red"]

    def test_output_base(self, tmp_path: Path, write_scene, two_mesh_scene):
        scene_path = write_scene(two_mesh_scene)
        out = SceneConvertStep(config=SceneConvertConfig()).execute(
            SceneConvertInput(scene_path=scene_path, output_base=tmp_path / "out" / "model")
        )
        assert out.obj_path == tmp_path / "out" / "model.obj"
        assert out.mtl_path == tmp_path / "out" / "model.mtl"
        assert "mtllib ./model.mtl" in out.obj_path.read_text(encoding="utf-8")

    def test_without_materials(self, write_scene, two_mesh_scene):
        cfg = SceneConvertConfig(write_materials=False)
        scene_path = write_scene(two_mesh_scene)
        out = SceneConvertStep(config=cfg).execute(SceneConvertInput(scene_path=scene_path))
        text = out.obj_path.read_text(encoding="utf-8")
        assert out.mtl_path is None
        assert out.num_materials == 0
        assert "mtllib" not in text
        assert "usemtl" not in text
        assert not scene_path.with_suffix(".mtl").exists()

    def test_threads_match_sequential(self, tmp_path: Path, write_scene, two_mesh_scene):
        scene_path = write_scene(two_mesh_scene)
        seq = SceneConvertStep(config=SceneConvertConfig()).execute(
            SceneConvertInput(scene_path=scene_path, output_base=tmp_path / "seq")
        )
        par = SceneConvertStep(config=SceneConvertConfig(workers=4)).execute(
            SceneConvertInput(scene_path=scene_path, output_base=tmp_path / "par")
        )
        seq_text = seq.obj_path.read_text(encoding="utf-8").replace("seq.mtl", "X.mtl")
        par_text = par.obj_path.read_text(encoding="utf-8").replace("par.mtl", "X.mtl")
        assert seq_text == par_text

    def test_recovered_issues_reported(self, write_scene):
        doc = {"root": {"name": "Root", "mesh": {
            "positions": [[0, 0, 0], [1, 0, 0], [1, 1, 0], [0, 1, 0]],
            "polygons": [[0, 1, 2, 3], [0, 1, 7]],
        }}}
        out = SceneConvertStep(config=SceneConvertConfig()).execute(
            SceneConvertInput(scene_path=write_scene(doc))
        )
        kinds = [issue.kind for issue in out.issues]
        assert kinds == [IssueKind.INVALID_CORNER_INDEX, IssueKind.TRUNCATED_FACE]
        assert out.num_triangles == 2

    def test_unsupported_material_reported(self, write_scene):
        doc = {"root": {
            "name": "Root",
            "materials": [{"name": "fancy", "shading_model": "toon"}],
            "mesh": {"positions": [[0, 0, 0], [1, 0, 0], [0, 1, 0]], "polygons": [[0, 1, 2]],
                     "material_indices": [0]},
        }}
        out = SceneConvertStep(config=SceneConvertConfig()).execute(
            SceneConvertInput(scene_path=write_scene(doc))
        )
        assert [issue.kind for issue in out.issues] == [IssueKind.UNSUPPORTED_MATERIAL]
        assert out.num_materials == 0
        assert out.mtl_path is None

    def test_malformed_face_aborts(self, write_scene):
        doc = {"root": {"name": "Root", "mesh": {
            "positions": [[0, 0, 0], [1, 0, 0], [0, 1, 0]],
            "polygons": [[0, 1, 2], [0, 1]],
        }}}
        scene_path = write_scene(doc)
        with pytest.raises(MalformedFaceError):
            SceneConvertStep(config=SceneConvertConfig()).execute(SceneConvertInput(scene_path=scene_path))
        assert not scene_path.with_suffix(".obj").exists()

    def test_no_meshes(self, write_scene):
        scene_path = write_scene({"root": {"name": "Empty"}})
        with pytest.raises(NoMeshesError):
            SceneConvertStep(config=SceneConvertConfig()).execute(SceneConvertInput(scene_path=scene_path))
        assert not scene_path.with_suffix(".obj").exists()
