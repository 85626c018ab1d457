"""README generator driven by a declarative task graph.

Builds a ``README.md`` from a project-local ``.verb.md`` template by
composing built-in and project fragments (docs, layouts, includes, badges)
with project metadata, then pushing the result through a staged render
pipeline.

Quick usage::

    from readme_generator import Config, ReadmeGenerator

    generator = ReadmeGenerator(Config(cwd=Path("./my-project")))
    result = await generator.generate()
    print(result.written)
"""

from readme_generator.config import Config, EngineConfig, ProjectConfig
from readme_generator.generator import GenerationResult, ReadmeGenerator

__all__ = [
    "Config",
    "EngineConfig",
    "GenerationResult",
    "ProjectConfig",
    "ReadmeGenerator",
]

__version__ = "0.4.0"
