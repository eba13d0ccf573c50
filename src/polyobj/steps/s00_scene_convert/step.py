"""Step 00: Scene conversion, polygon scene -> triangulated OBJ + MTL.

Loads a scene document or a trimesh-readable file, builds the material
table, fan-triangulates every mesh and writes the OBJ/MTL pair.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import ClassVar

from polyobj.core.diagnostics import Diagnostics
from polyobj.core.errors import FileOpenError
from polyobj.core.step_base import BaseStep
from polyobj.mesh.materials import MaterialTable, extract_materials
from polyobj.mesh.scene_graph import ImportedScene
from polyobj.mesh.triangulate import triangulate_all
from .config import SceneConvertConfig
from .contracts import SceneConvertInput, SceneConvertOutput

logger = logging.getLogger(__name__)


def load_scene(inputs: SceneConvertInput, config: SceneConvertConfig, diagnostics: Diagnostics) -> ImportedScene:
    """Dispatch to the importer that handles the input's extension."""
    if config.is_document(inputs.scene_path):
        from ._scene_document import load_scene_document

        return load_scene_document(inputs.scene_path, diagnostics)

    from ._trimesh_scene import load_trimesh_scene

    return load_trimesh_scene(inputs.scene_path, diagnostics)


class SceneConvertStep(BaseStep[SceneConvertInput, SceneConvertOutput, SceneConvertConfig]):
    name: ClassVar[str] = "scene_convert"
    input_type: ClassVar = SceneConvertInput
    output_type: ClassVar = SceneConvertOutput
    config_type: ClassVar = SceneConvertConfig

    def validate_inputs(self, inputs: SceneConvertInput) -> bool:
        if not inputs.scene_path.is_file():
            logger.error(f"Scene file not found: {inputs.scene_path}")
            return False
        if not self.config.is_supported(inputs.scene_path):
            logger.error(f"Unsupported scene format: {inputs.scene_path.suffix}")
            return False
        if not self.config.is_document(inputs.scene_path):
            from ._trimesh_scene import _has_trimesh

            if not _has_trimesh():
                logger.error(
                    "trimesh not installed, cannot read "
                    f"{inputs.scene_path.suffix} files. Install with: pip install trimesh"
                )
                return False
        return True

    def run(self, inputs: SceneConvertInput) -> SceneConvertOutput:
        from ._obj_writer import export_obj

        diagnostics = Diagnostics(logger)

        # --- Import ---
        scene = load_scene(inputs, self.config, diagnostics)

        # --- Materials ---
        if self.config.write_materials:
            materials = extract_materials(scene.raw_materials, diagnostics)
            meshes = scene.meshes
        else:
            materials = MaterialTable()
            meshes = [replace(m, material_name=None) for m in scene.meshes]

        # --- Triangulation (order preserved for export numbering) ---
        tri_meshes = triangulate_all(meshes, workers=self.config.workers, diagnostics=diagnostics)

        # --- Export ---
        obj_path = inputs.obj_path()
        try:
            obj_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FileOpenError(obj_path, e.strerror or str(e)) from e
        result = export_obj(tri_meshes, materials, obj_path, creator=self.config.creator)

        if diagnostics.issues:
            logger.warning(f"{len(diagnostics)} issue(s) recovered while converting {inputs.scene_path.name}")

        return SceneConvertOutput(
            obj_path=result.obj_path,
            mtl_path=result.mtl_path,
            num_meshes=len(tri_meshes),
            num_positions=result.num_positions,
            num_uvs=result.num_uvs,
            num_triangles=result.num_triangles,
            num_materials=len(materials),
            issues=list(diagnostics.issues),
        )
