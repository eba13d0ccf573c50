"""Typed failures that abort a conversion.

Corner- and material-level problems are not exceptions: they are recovered
where they happen and reported through :class:`polyobj.core.diagnostics.Diagnostics`.
"""

from __future__ import annotations

from pathlib import Path


class ConversionError(Exception):
    """Base class for mesh- and file-level conversion failures."""


class SceneLoadError(ConversionError):
    """The input scene could not be read or parsed."""

    def __init__(self, path: Path, reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Failed to load scene {self.path}: {reason}")


class MalformedFaceError(ConversionError, ValueError):
    """A mesh declares faces with fewer than three corners."""

    def __init__(self, mesh_name: str, face_indices: list[int], face_sizes: list[int]):
        self.mesh_name = mesh_name
        self.face_indices = list(face_indices)
        self.face_sizes = list(face_sizes)
        shown = ", ".join(
            f"#{i} ({n} corners)" for i, n in zip(self.face_indices[:5], self.face_sizes[:5])
        )
        more = f" and {len(self.face_indices) - 5} more" if len(self.face_indices) > 5 else ""
        super().__init__(
            f"Mesh '{mesh_name}' has {len(self.face_indices)} face(s) with fewer "
            f"than 3 corners: {shown}{more}"
        )


class NoMeshesError(ConversionError):
    """Export was requested with an empty mesh list."""

    def __init__(self, message: str = "No triangulated meshes to export"):
        super().__init__(message)


class FileOpenError(ConversionError, OSError):
    """An output file could not be opened for writing."""

    def __init__(self, path: Path, reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Cannot open {self.path} for writing: {reason}")
