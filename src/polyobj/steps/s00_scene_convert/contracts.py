"""I/O contracts for Step 00: Scene conversion (scene -> OBJ/MTL)."""

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

from polyobj.core.contracts import Issue, StepMeta


class SceneConvertInput(BaseModel):
    scene_path: Path = Field(..., description="Scene document (.yaml/.json) or trimesh-readable file")
    output_base: Optional[Path] = Field(
        None, description="Output path without extension (default: scene path without extension)"
    )

    def obj_path(self) -> Path:
        base = self.output_base if self.output_base is not None else self.scene_path.with_suffix("")
        return base.with_name(base.name + ".obj")


class SceneConvertOutput(BaseModel):
    obj_path: Path = Field(..., description="Written geometry file")
    mtl_path: Optional[Path] = Field(None, description="Written material file, if any materials")
    num_meshes: int = Field(0, description="Triangle meshes exported")
    num_positions: int = Field(0, description="Total 'v' records across all groups")
    num_uvs: int = Field(0, description="Total 'vt' records across all groups")
    num_triangles: int = Field(0, description="Total 'f' records across all groups")
    num_materials: int = Field(0, description="Materials in the material table")
    issues: list[Issue] = Field(default_factory=list, description="Recovered problems")
    meta: Optional[StepMeta] = None
