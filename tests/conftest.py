"""Shared pytest fixtures for the readme-generator test suite.

Provides reusable fixtures for:
- Temporary project directories with package.json and .verb.md
- Run configuration pointing at those projects
- Run contexts with scripted prompt answers
"""

from __future__ import annotations

import json
import textwrap
from pathlib import Path
from typing import Any

import pytest

from readme_generator.config import Config
from readme_generator.context import RunContext
from readme_generator.tasks.graph import TaskGraph


# ---------------------------------------------------------------------------
# Sample content
# ---------------------------------------------------------------------------

SAMPLE_PACKAGE: dict[str, Any] = {
    "name": "demo",
    "description": "A demo package.",
    "version": "1.0.0",
    "license": "MIT",
    "author": {"name": "Jane Doe"},
    "repository": "octo/demo",
}

SAMPLE_VERBMD = textwrap.dedent("""\
    ---
    layout: false
    ---
    # {{ name }}

    > {{ description }}
""")


def write_package_json(root: Path, pkg: dict[str, Any] | None = None, **extra: Any) -> Path:
    """Write a package.json into *root* and return its path."""
    data = {**(pkg if pkg is not None else SAMPLE_PACKAGE), **extra}
    path = root / "package.json"
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# Paths & Directories
# ---------------------------------------------------------------------------

@pytest.fixture
def tmp_project_dir(tmp_path: Path) -> Path:
    """Empty temporary project directory (auto-cleanup)."""
    project_dir = tmp_path / "demo"
    project_dir.mkdir()
    yield project_dir


@pytest.fixture
def demo_project(tmp_project_dir: Path) -> Path:
    """Project with a package.json and a layout-free .verb.md."""
    write_package_json(tmp_project_dir)
    (tmp_project_dir / ".verb.md").write_text(SAMPLE_VERBMD, encoding="utf-8")
    return tmp_project_dir


# ---------------------------------------------------------------------------
# Configuration & context
# ---------------------------------------------------------------------------

@pytest.fixture
def config(demo_project: Path) -> Config:
    """Run configuration for ``demo_project``."""
    return Config(cwd=demo_project)


class ScriptedPrompts:
    """Stand-in for the interactive prompts that records every question."""

    def __init__(self, confirm: bool = True, overwrite: bool = False) -> None:
        self.answer = confirm
        self.overwrite = overwrite
        self.questions: list[str] = []
        self.conflicts: list[Path] = []

    def confirm(self, message: str) -> bool:
        self.questions.append(message)
        return self.answer

    def resolve_conflict(self, dest: Path, candidate: str) -> bool:
        self.conflicts.append(dest)
        return self.overwrite


@pytest.fixture
def prompts() -> ScriptedPrompts:
    return ScriptedPrompts()


def make_context(config: Config, prompts: ScriptedPrompts | None = None) -> RunContext:
    """Build a bare run context (no tasks registered) for *config*."""
    ctx = RunContext(config=config, graph=TaskGraph())
    if prompts is not None:
        ctx.confirm = prompts.confirm
        ctx.resolve_conflict = prompts.resolve_conflict
    return ctx


@pytest.fixture
def ctx(config: Config, prompts: ScriptedPrompts) -> RunContext:
    return make_context(config, prompts)


@pytest.fixture
def make_ctx():
    """Factory fixture: ``make_ctx(config, prompts=None) -> RunContext``."""
    return make_context


@pytest.fixture
def write_pkg():
    """Factory fixture: ``write_pkg(root, pkg=None, **extra) -> Path``."""
    return write_package_json
