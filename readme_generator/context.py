"""Run-scoped context handed to every task body.

The context owns all mutable state of one generation run: the data
accumulator, the template registry, registered files, middleware, stage
and engine registries, options and collected warnings.  Tasks communicate
only through it.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from readme_generator.acquisition import (
    AcquisitionState,
    ConfirmPrompt,
    ConflictResolver,
    confirm_with_rich,
    resolve_conflict_with_rich,
)
from readme_generator.config import Config, ProjectConfig
from readme_generator.data import DataContext, select_alias_strategy
from readme_generator.errors import AcquisitionError
from readme_generator.middleware import Middleware
from readme_generator.render.engine import TemplateEngine
from readme_generator.render.models import RESERVED_KEYS, LintWarning, RenderedOutput, SourceFile
from readme_generator.render.stages import StageRegistry
from readme_generator.tasks.graph import TaskGraph, TaskRunResult
from readme_generator.templates.registry import TemplateRegistry, rename_key
from readme_generator.utils import parse_front_matter, print_debug


@dataclass
class RunContext:
    """State shared by the tasks of one generation run."""

    config: Config
    graph: TaskGraph
    project: ProjectConfig = field(default_factory=ProjectConfig)
    data: DataContext = field(default_factory=DataContext)
    templates: TemplateRegistry = field(default_factory=TemplateRegistry)
    files: dict[str, SourceFile] = field(default_factory=dict)
    middleware: Middleware = field(default_factory=Middleware)
    stages: StageRegistry = field(default_factory=StageRegistry)
    engines: dict[str, TemplateEngine] = field(default_factory=dict)
    primary_engine: TemplateEngine | None = None
    options: dict[str, Any] = field(default_factory=dict)
    warnings: list[LintWarning] = field(default_factory=list)
    outputs: list[RenderedOutput] = field(default_factory=list)
    acquisition: AcquisitionState | None = None
    scaffolded: Path | None = None
    confirm: ConfirmPrompt = confirm_with_rich
    resolve_conflict: ConflictResolver = resolve_conflict_with_rich
    to_alias: Callable[[str], str] = field(init=False)

    def __post_init__(self) -> None:
        self.to_alias = select_alias_strategy(self.config.is_generator)

    # -- Options -------------------------------------------------------------

    def option(self, key: str, default: Any = None) -> Any:
        return self.options.get(key, default)

    # -- Files ---------------------------------------------------------------

    async def add_file(self, path: Path, contents: str, key: str | None = None) -> SourceFile:
        """Register a template file, running ``on_load`` middleware.

        The key defaults to the path relative to the project root with its
        extension removed (``README.md`` -> ``README``).

        Raises:
            AcquisitionError: If the front matter is not valid YAML.
        """
        try:
            meta, body = parse_front_matter(contents)
        except yaml.YAMLError as exc:
            raise AcquisitionError(f"Invalid front matter in {path}: {exc}") from exc

        file = SourceFile(
            key=key or rename_key(path, self.config.root),
            path=path,
            contents=body,
            data=meta,
        )
        file = await self.middleware.handle("on_load", file, self)
        self.files[file.key] = file
        print_debug(f"registered file '{file.key}' ({file.path})")
        return file

    def has_reserved_file(self) -> bool:
        return any(key in self.files for key in RESERVED_KEYS)

    # -- Warnings ------------------------------------------------------------

    def warn(self, warning: LintWarning) -> None:
        self.warnings.append(warning)

    # -- Nested builds -------------------------------------------------------

    async def build(self, name: str) -> TaskRunResult | None:
        """Start a fresh invocation of *name* on the same graph."""
        return await self.graph.run(name, self)
