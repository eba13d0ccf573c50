"""Common Pydantic models shared across the converter."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field


class StepMeta(BaseModel):
    """Metadata attached to every step output for reproducibility."""

    step_name: str
    elapsed_seconds: float = 0.0
    params: dict[str, Any] = Field(default_factory=dict)


class IssueKind(str, Enum):
    """Kinds of locally recovered problems."""

    INVALID_CORNER_INDEX = "invalid_corner_index"
    TRUNCATED_FACE = "truncated_face"
    UNSUPPORTED_MATERIAL = "unsupported_material"


class Issue(BaseModel):
    """One recovered problem: what kind, which mesh/material, and details."""

    kind: IssueKind
    subject: str
    message: str


class BatchEntry(BaseModel):
    """Outcome of converting one file during a directory batch."""

    scene_path: Path
    obj_path: Optional[Path] = None
    num_meshes: int = 0
    num_triangles: int = 0
    num_issues: int = 0
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None
