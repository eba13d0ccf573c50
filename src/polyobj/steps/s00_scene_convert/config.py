"""Configuration for Step 00: Scene conversion (scene -> OBJ/MTL)."""

from pathlib import Path

from pydantic import BaseModel, Field


class SceneConvertConfig(BaseModel):
    creator: str = Field("polyobj", description="Name written in the OBJ/MTL header comment")
    write_materials: bool = Field(True, description="Write mtllib/usemtl and the companion .mtl file")
    workers: int = Field(1, ge=1, description="Threads used to triangulate meshes (export stays ordered)")

    # Input formats
    document_extensions: list[str] = Field(
        default=[".yaml", ".yml", ".json"],
        description="Extensions read as polyobj scene documents",
    )
    trimesh_extensions: list[str] = Field(
        default=[".glb", ".gltf", ".ply", ".off", ".stl"],
        description="Extensions loaded through trimesh",
    )

    def is_document(self, path: Path) -> bool:
        return path.suffix.lower() in self.document_extensions

    def is_supported(self, path: Path) -> bool:
        suffix = path.suffix.lower()
        return suffix in self.document_extensions or suffix in self.trimesh_extensions
