"""Render pipeline: engines, post-processing stages and the README sink."""

from readme_generator.render.engine import RegistryLoader, TemplateEngine
from readme_generator.render.models import LintWarning, RenderedOutput, SourceFile
from readme_generator.render.pipeline import RenderPipeline, readme_task
from readme_generator.render.stages import BUILTIN_STAGES, StageRegistry

__all__ = [
    "BUILTIN_STAGES",
    "LintWarning",
    "RegistryLoader",
    "RenderPipeline",
    "RenderedOutput",
    "SourceFile",
    "StageRegistry",
    "TemplateEngine",
    "readme_task",
]
