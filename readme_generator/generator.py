"""README generator: task definitions, orchestration and CLI.

Task graph::

    default ─ readme ─┬─ setup ─┬─ options
                      │         ├─ plugins
                      │         ├─ middleware
                      │         └─ data
                      ├─ templates
                      └─ verbmd ··> ask ─ prompt-verbmd ··> new

(``··>`` marks a nested build started from inside a task body.)

Usage::

    readme-generator                 # generate README.md in the cwd
    readme-generator new             # scaffold a .verb.md
    readme-generator --no-verbmd     # never prompt for a missing .verb.md
"""

from __future__ import annotations

import asyncio
import importlib
import sys
import time
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from readme_generator.acquisition import (
    ConfirmPrompt,
    ConflictResolver,
    new_task,
    prompt_verbmd_task,
    verbmd_task,
)
from readme_generator.config import Config, ProjectConfig
from readme_generator.context import RunContext
from readme_generator.data import package_metadata
from readme_generator.errors import ConfigError, ReadmeGeneratorError
from readme_generator.middleware import README_PATTERN, lint_layout, remove_stale_readme
from readme_generator.render.engine import TemplateEngine
from readme_generator.render.models import LintWarning
from readme_generator.render.pipeline import readme_task
from readme_generator.render.stages import BUILTIN_STAGES
from readme_generator.tasks.graph import TaskGraph
from readme_generator.templates.loader import load_templates
from readme_generator.utils import (
    console,
    exists,
    format_duration,
    load_json,
    print_debug,
    print_error,
    print_success,
    print_warnings_table,
    set_verbose,
)

GETTING_STARTED_URL = "https://github.com/generate/getting-started-guide"


# ---------------------------------------------------------------------------
# Result
# ---------------------------------------------------------------------------


class GenerationResult(BaseModel):
    """What a generation run did.  Returned instead of an end-of-run event."""

    task: str
    executed: list[str] = Field(default_factory=list)
    written: list[Path] = Field(default_factory=list)
    warnings: list[LintWarning] = Field(default_factory=list)
    acquisition: str | None = None
    duration_seconds: float = 0.0


# ---------------------------------------------------------------------------
# Task bodies
# ---------------------------------------------------------------------------


def options_task(ctx: RunContext) -> None:
    """Seed run options and process the project's ``package.json``."""
    config = ctx.config
    ctx.options.update(
        {
            "toc_footer": config.toc_footer,
            "layout": config.layout,
            "pipeline": list(config.pipeline),
            "missing_fragments": config.missing_fragments,
        }
    )

    if exists(config.package_json_path):
        try:
            pkg = load_json(config.package_json_path)
        except ValueError as exc:
            raise ConfigError(f"invalid JSON: {exc}", key=str(config.package_json_path)) from exc
        ctx.data.merge(package_metadata(pkg, ctx.to_alias))
        ctx.project = ProjectConfig.from_mapping(pkg.get("verb"))

    process_config(ctx, ctx.project)


def process_config(ctx: RunContext, project: ProjectConfig) -> None:
    """Apply the non-template parts of the project configuration.

    Run options given explicitly (CLI or ``Config``) win over the project's.
    """
    if project.data:
        ctx.data.merge(project.data)
    if project.layout and not ctx.config.layout:
        ctx.options["layout"] = project.layout
    if project.pipeline and not ctx.config.pipeline:
        ctx.options["pipeline"] = list(project.pipeline)
    if isinstance(project.toc, dict) and "footer" in project.toc:
        ctx.options["toc_footer"] = str(project.toc["footer"])
    if project.toc and "toc" not in ctx.options["pipeline"]:
        ctx.options["pipeline"] = ["toc", *ctx.options["pipeline"]]


def plugins_task(ctx: RunContext) -> None:
    """Register engines, post-processing stages and configured plugins."""
    config = ctx.config
    helpers = {"to_alias": ctx.to_alias}

    def on_missing(name: str) -> None:
        ctx.warn(LintWarning(filename=config.readme, message=f"missing template fragment '{name}'"))

    ctx.primary_engine = TemplateEngine(
        ctx.templates,
        config.engine.primary,
        missing=config.missing_fragments,
        on_missing=on_missing,
        helpers=helpers,
        name="primary",
    )
    secondary = TemplateEngine(
        ctx.templates,
        config.engine.secondary,
        missing=config.missing_fragments,
        on_missing=on_missing,
        helpers=helpers,
        name="secondary",
        fragments=ctx.primary_engine,
    )
    for ext in config.engine.extensions:
        ctx.engines[ext if ext.startswith(".") else f".{ext}"] = secondary

    for name, stage in BUILTIN_STAGES.items():
        ctx.stages.register(name, stage)

    for spec in [*config.plugins, *ctx.project.plugins]:
        load_plugin(spec)(ctx)


def load_plugin(spec: str) -> Any:
    """Import a ``package.module:function`` plugin.

    Raises:
        ConfigError: If the module or attribute cannot be loaded.
    """
    module_name, _, attr = spec.partition(":")
    if not module_name or not attr:
        raise ConfigError("expected 'module:function'", key=f"plugins.{spec}")
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise ConfigError(str(exc), key=f"plugins.{spec}") from exc
    plugin = getattr(module, attr, None)
    if not callable(plugin):
        raise ConfigError(f"'{attr}' is not callable", key=f"plugins.{spec}")
    return plugin


def middleware_task(ctx: RunContext) -> None:
    """Register file middleware."""
    ctx.middleware.pre_render(README_PATTERN, remove_stale_readme)
    if ctx.config.lint_layout:
        ctx.middleware.on_load(README_PATTERN, lint_layout)


def data_task(ctx: RunContext) -> None:
    """Merge the data used for rendering templates."""
    print_debug("loading data")
    ctx.data.merge({"verb": {}})
    ctx.data.merge({"links": {"generate": {"getting_started": GETTING_STARTED_URL}}})

    if exists(ctx.config.bower_path):
        ctx.data.merge({"bower": True})

    ctx.data.merge({"prefix": "Copyright"})
    print_debug("data finished")


def templates_task(ctx: RunContext) -> None:
    """Load layouts, includes, docs and badges, then apply ``views``."""
    print_debug("loading templates")
    load_templates(ctx.templates, ctx.config.root, views=ctx.project.views)
    print_debug("templates finished")


def register_tasks(graph: TaskGraph) -> TaskGraph:
    """Register every readme-generator task on *graph*."""
    graph.register("options", [], options_task, silent=True)
    graph.register("plugins", [], plugins_task, silent=True)
    graph.register("middleware", [], middleware_task, silent=True)
    graph.register("data", [], data_task, silent=True, description="Load data for rendering")
    graph.register("new", [], new_task, description="Add a .verb.md template to the cwd")
    graph.register("verbmd", [], verbmd_task, silent=True, description="Load or create .verb.md")
    graph.register(
        "prompt-verbmd", [], prompt_verbmd_task, description="Ask to add a .verb.md template"
    )
    graph.register("ask", ["prompt-verbmd"], description="Alias for prompt-verbmd")
    graph.register(
        "templates", [], templates_task, silent=True, description="Load layouts, includes, badges"
    )
    graph.register("setup", ["options", "plugins", "middleware", "data"], silent=True)
    graph.register(
        "readme",
        ["setup", "templates", "verbmd"],
        readme_task,
        silent=True,
        description="Generate README.md from .verb.md",
    )
    graph.register("default", ["readme"], description="Alias for readme")
    return graph


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------


class ReadmeGenerator:
    """Runs readme-generator tasks for one project.

    A generator holds the state of a single run; create a new instance for
    each generation.

    Attributes:
        config: Run configuration.
        graph: Task graph with every task registered.
        ctx: Run context shared by the tasks.
    """

    def __init__(
        self,
        config: Config,
        *,
        confirm: ConfirmPrompt | None = None,
        resolve_conflict: ConflictResolver | None = None,
    ) -> None:
        self.config = config
        self.graph = register_tasks(TaskGraph())
        self.ctx = RunContext(config=config, graph=self.graph)
        if confirm is not None:
            self.ctx.confirm = confirm
        if resolve_conflict is not None:
            self.ctx.resolve_conflict = resolve_conflict

    async def generate(self, task: str = "default") -> GenerationResult:
        """Build *task* (the README by default).

        Raises:
            TaskGraphError: If *task* is unknown.
            TaskFailedError: If any task in the run fails.
        """
        start = time.monotonic()
        run = await self.graph.run(task, self.ctx)
        return GenerationResult(
            task=task,
            executed=run.executed if run else [],
            written=[out.path for out in self.ctx.outputs],
            warnings=list(self.ctx.warnings),
            acquisition=self.ctx.acquisition.value if self.ctx.acquisition else None,
            duration_seconds=time.monotonic() - start,
        )


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``readme-generator``."""
    import argparse

    task_names = register_tasks(TaskGraph()).names()

    parser = argparse.ArgumentParser(
        prog="readme-generator",
        description="Generate a README.md from a .verb.md template",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  readme-generator\n"
            "  readme-generator new\n"
            "  readme-generator --dest docs --pipeline toc,trailing-newline\n"
        ),
    )
    parser.add_argument("task", nargs="?", default="default", choices=task_names)
    parser.add_argument("--cwd", default=None, help="Project root (default: .)")
    parser.add_argument("--dest", default=None, help="Output directory (default: project root)")
    parser.add_argument("--readme", default=None, help="Input template (default: .verb.md)")
    parser.add_argument(
        "--no-verbmd",
        dest="verbmd",
        action="store_false",
        default=None,
        help="Do not load or offer to create the input template",
    )
    parser.add_argument(
        "--generator",
        dest="is_generator",
        action="store_true",
        default=None,
        help="Use generator-style aliases (generate-foo-bar -> fooBar)",
    )
    parser.add_argument("--layout", default=None, help="Fallback layout name")
    parser.add_argument(
        "--pipeline",
        default=None,
        help="Comma-separated post-processing stages (e.g. toc,collapse-newlines)",
    )
    parser.add_argument(
        "--strict-fragments",
        action="store_true",
        help="Fail on missing includes, badges, docs and layouts",
    )
    parser.add_argument("--verbose", "-v", action="store_true", default=None)

    args = parser.parse_args(argv)

    overrides: dict[str, Any] = {
        "cwd": Path(args.cwd) if args.cwd else None,
        "dest": Path(args.dest) if args.dest else None,
        "readme": args.readme,
        "verbmd": args.verbmd,
        "is_generator": args.is_generator,
        "layout": args.layout,
        "verbose": args.verbose,
    }
    if args.pipeline is not None:
        overrides["pipeline"] = [s.strip() for s in args.pipeline.split(",") if s.strip()]
    if args.strict_fragments:
        overrides["missing_fragments"] = "strict"

    try:
        config = Config.from_env(**overrides)
    except ValueError as exc:
        print_error(f"Invalid configuration: {exc}")
        sys.exit(1)

    set_verbose(config.verbose)
    generator = ReadmeGenerator(config)

    try:
        result = asyncio.run(generator.generate(args.task))
    except ReadmeGeneratorError as exc:
        print_error(f"Error: {exc}")
        sys.exit(1)

    for path in result.written:
        console.print(f"  [green]+[/green] {path}")
    print_warnings_table(result.warnings)
    print_success(f"Finished '{result.task}' in {format_duration(result.duration_seconds)}")


if __name__ == "__main__":
    main()
