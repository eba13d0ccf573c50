"""Base class for conversion steps.

A step declares typed Input, Output and Config pydantic models so that the
CLI, the batch runner and tests can build, validate and inspect it the same
way.
"""

from __future__ import annotations

import time
import logging
from abc import ABC, abstractmethod
from typing import Generic, TypeVar, ClassVar

from pydantic import BaseModel

from .contracts import StepMeta

InputT = TypeVar("InputT", bound=BaseModel)
OutputT = TypeVar("OutputT", bound=BaseModel)
ConfigT = TypeVar("ConfigT", bound=BaseModel)

logger = logging.getLogger(__name__)


class BaseStep(ABC, Generic[InputT, OutputT, ConfigT]):
    """Abstract base for conversion steps.

    Subclasses set ``input_type``, ``output_type`` and ``config_type`` and
    implement :meth:`run` and :meth:`validate_inputs`::

        class SceneConvertStep(BaseStep[SceneConvertInput, SceneConvertOutput, SceneConvertConfig]):
            input_type = SceneConvertInput
            output_type = SceneConvertOutput
            config_type = SceneConvertConfig

            def run(self, inputs): ...
            def validate_inputs(self, inputs): ...

    If the output model has a ``meta`` field it is filled with a
    :class:`StepMeta` after the run.
    """

    name: ClassVar[str] = ""
    input_type: ClassVar[type[BaseModel]]
    output_type: ClassVar[type[BaseModel]]
    config_type: ClassVar[type[BaseModel]]

    def __init__(self, config: ConfigT):
        self.config = config

    @abstractmethod
    def run(self, inputs: InputT) -> OutputT:
        """Execute this step. Returns output model."""
        ...

    @abstractmethod
    def validate_inputs(self, inputs: InputT) -> bool:
        """Check that the input artifacts exist and can be handled."""
        ...

    def execute(self, inputs: InputT) -> OutputT:
        """Run with logging, timing, and validation."""
        step_name = self.name or self.__class__.__name__
        logger.info(f"[{step_name}] Validating inputs...")

        if not self.validate_inputs(inputs):
            raise ValueError(f"[{step_name}] Input validation failed")

        logger.info(f"[{step_name}] Starting...")
        t0 = time.time()
        result = self.run(inputs)
        elapsed = time.time() - t0
        logger.info(f"[{step_name}] Done in {elapsed:.2f}s")

        if "meta" in type(result).model_fields:
            result.meta = StepMeta(
                step_name=step_name,
                elapsed_seconds=elapsed,
                params=self.config.model_dump(mode="json"),
            )
        return result

    @classmethod
    def get_input_schema(cls) -> dict:
        """Return JSON schema for inputs."""
        return cls.input_type.model_json_schema()

    @classmethod
    def get_output_schema(cls) -> dict:
        """Return JSON schema for outputs."""
        return cls.output_type.model_json_schema()

    @classmethod
    def get_config_schema(cls) -> dict:
        """Return JSON schema for config."""
        return cls.config_type.model_json_schema()
