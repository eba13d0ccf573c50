"""Conversion orchestrator: loads step config and converts one file or a directory."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel

from .contracts import BatchEntry
from .errors import ConversionError

logger = logging.getLogger(__name__)


def load_step_config(config_path: Path, config_class: type[BaseModel]) -> BaseModel:
    """Load a step-specific YAML config into its Pydantic model."""
    with open(config_path, encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    return config_class(**raw)


def convert_file(scene_path: Path, output_base: Optional[Path] = None, config=None):
    """Convert a single scene file to OBJ/MTL.

    Args:
        scene_path: Input scene (scene document or trimesh-readable file).
        output_base: Output path without extension; defaults to the input
            path with its extension replaced.
        config: SceneConvertConfig; defaults are used when omitted.

    Returns:
        SceneConvertOutput of the conversion step.
    """
    from polyobj.steps.s00_scene_convert.config import SceneConvertConfig
    from polyobj.steps.s00_scene_convert.contracts import SceneConvertInput
    from polyobj.steps.s00_scene_convert.step import SceneConvertStep

    step = SceneConvertStep(config=config or SceneConvertConfig())
    return step.execute(SceneConvertInput(scene_path=scene_path, output_base=output_base))


def convert_directory(directory: Path, config=None) -> list[BatchEntry]:
    """Convert every supported scene file directly inside ``directory``.

    Files are processed in name order. A failing file is recorded in its
    entry and does not stop the batch; unsupported extensions are skipped.
    """
    from polyobj.steps.s00_scene_convert.config import SceneConvertConfig

    config = config or SceneConvertConfig()
    entries: list[BatchEntry] = []

    candidates = sorted(p for p in Path(directory).iterdir() if p.is_file())
    supported = [p for p in candidates if config.is_supported(p)]
    logger.info(f"Batch '{directory}': {len(supported)} of {len(candidates)} files supported")

    for scene_path in supported:
        try:
            output = convert_file(scene_path, config=config)
        except (ConversionError, ValueError) as e:
            logger.error(f"{scene_path.name}: {e}")
            entries.append(BatchEntry(scene_path=scene_path, error=str(e)))
            continue
        entries.append(BatchEntry(
            scene_path=scene_path,
            obj_path=output.obj_path,
            num_meshes=output.num_meshes,
            num_triangles=output.num_triangles,
            num_issues=len(output.issues),
        ))

    failed = sum(1 for e in entries if not e.ok)
    logger.info(f"Batch complete: {len(entries) - failed} converted, {failed} failed")
    return entries
