"""Material table: deduplicated shading coefficients keyed by material name."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, Field

from polyobj.core.contracts import IssueKind
from polyobj.core.diagnostics import Diagnostics

logger = logging.getLogger(__name__)

Color = tuple[float, float, float]

DEFAULT_AMBIENT: Color = (0.2, 0.2, 0.2)
DEFAULT_DIFFUSE: Color = (1.0, 1.0, 1.0)
DEFAULT_SPECULAR: Color = (1.0, 1.0, 1.0)


class ShadingModel(str, Enum):
    PHONG = "phong"  # ambient, diffuse, specular, transparency, shininess
    LAMBERT = "lambert"  # ambient, diffuse, transparency
    UNSUPPORTED = "unsupported"

    @classmethod
    def from_tag(cls, tag: str) -> "ShadingModel":
        try:
            model = cls(tag.strip().lower())
        except ValueError:
            return cls.UNSUPPORTED
        return model


class RawMaterial(BaseModel):
    """Material definition as delivered by an importer, not yet deduplicated."""

    name: str
    shading_model: str = Field("phong", description="Shading model tag, e.g. 'phong' or 'lambert'")
    ambient: Color = DEFAULT_AMBIENT
    diffuse: Color = DEFAULT_DIFFUSE
    specular: Color = DEFAULT_SPECULAR
    transparency_factor: float = Field(0.0, description="0 = opaque, 1 = fully transparent")
    shininess: float = 0.0


@dataclass(frozen=True)
class Material:
    name: str
    shading_model: ShadingModel
    ambient: Color = DEFAULT_AMBIENT
    diffuse: Color = DEFAULT_DIFFUSE
    specular: Color = DEFAULT_SPECULAR
    transparency: float = 1.0  # written as Tr, 1 - transparency_factor
    shininess: float = 0.0

    @classmethod
    def from_raw(cls, raw: RawMaterial, model: ShadingModel) -> "Material":
        if model is ShadingModel.PHONG:
            return cls(
                name=raw.name,
                shading_model=model,
                ambient=tuple(raw.ambient),
                diffuse=tuple(raw.diffuse),
                specular=tuple(raw.specular),
                transparency=1.0 - raw.transparency_factor,
                shininess=raw.shininess,
            )
        if model is ShadingModel.LAMBERT:
            return cls(
                name=raw.name,
                shading_model=model,
                ambient=tuple(raw.ambient),
                diffuse=tuple(raw.diffuse),
                transparency=1.0 - raw.transparency_factor,
            )
        raise ValueError(f"Material '{raw.name}' has no supported shading model")


class MaterialTable(Mapping):
    """Read-only mapping of material name to :class:`Material`.

    Iteration is ordered by name so the MTL output does not depend on the
    order in which meshes referenced their materials.
    """

    def __init__(self, materials: Iterable[Material] = ()):
        self._by_name: dict[str, Material] = {}
        for material in materials:
            self._by_name.setdefault(material.name, material)

    def __getitem__(self, name: str) -> Material:
        return self._by_name[name]

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._by_name))

    def __len__(self) -> int:
        return len(self._by_name)

    def __repr__(self) -> str:
        return f"MaterialTable({list(self)})"


def extract_materials(
    raw_materials: Iterable[RawMaterial],
    diagnostics: Diagnostics | None = None,
) -> MaterialTable:
    """Build the scene material table.

    The first supported material with a given name wins. Materials with an
    unrecognized shading model are skipped and do not claim their name.
    """
    accepted: dict[str, Material] = {}
    for raw in raw_materials:
        if raw.name in accepted:
            continue
        model = ShadingModel.from_tag(raw.shading_model)
        if model is ShadingModel.UNSUPPORTED:
            message = f"shading model '{raw.shading_model}' is not supported, material skipped"
            if diagnostics is not None:
                diagnostics.report(IssueKind.UNSUPPORTED_MATERIAL, raw.name, message)
            else:
                logger.warning(f"{raw.name}: {message}")
            continue
        accepted[raw.name] = Material.from_raw(raw, model)

    logger.debug(f"Material table: {len(accepted)} material(s)")
    return MaterialTable(accepted.values())


def resolve_material_binding(
    slot_names: list[str],
    mapping: Literal["all_same", "by_polygon"],
    indices: list[int],
) -> Optional[str]:
    """Resolve a mesh's material slots to a single material name.

    ``all_same`` uses the first index. ``by_polygon`` keeps the material of
    the last polygon with a usable index, so per-face assignments collapse to
    one material per mesh.
    """
    if mapping == "all_same":
        candidates = indices[:1]
    else:
        candidates = indices

    name = None
    for idx in candidates:
        if 0 <= idx < len(slot_names):
            name = slot_names[idx]
    return name
