"""polyobj core: base step, shared contracts, errors, diagnostics."""

from .step_base import BaseStep
from .contracts import Issue, IssueKind, StepMeta
from .diagnostics import Diagnostics
from .errors import (
    ConversionError,
    FileOpenError,
    MalformedFaceError,
    NoMeshesError,
    SceneLoadError,
)
from .pipeline_runner import load_step_config, convert_file, convert_directory
from .logging import setup_logging

__all__ = [
    "BaseStep",
    "Issue",
    "IssueKind",
    "StepMeta",
    "Diagnostics",
    "ConversionError",
    "FileOpenError",
    "MalformedFaceError",
    "NoMeshesError",
    "SceneLoadError",
    "load_step_config",
    "convert_file",
    "convert_directory",
    "setup_logging",
]
