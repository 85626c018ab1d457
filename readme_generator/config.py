"""readme-generator configuration.

Typed configuration for a generation run plus the project-level ``verb``
section read from ``package.json``.  All settings use Pydantic v2 models so
they are validated at construction time.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from readme_generator.errors import ConfigError

DEFAULT_TOC_FOOTER = (
    "\n\n_(TOC generated by [verb](https://github.com/verbose/verb) using "
    "[markdown-toc](https://github.com/jonschlinkert/markdown-toc))_"
)

OUTPUT_BASENAME = "README.md"


class Delimiters(BaseModel):
    """Jinja2 delimiter set for one template engine."""

    variable_start: str = Field(default="{{")
    variable_end: str = Field(default="}}")
    block_start: str = Field(default="{%")
    block_end: str = Field(default="%}")
    comment_start: str = Field(default="{#")
    comment_end: str = Field(default="#}")

    def as_env_kwargs(self) -> dict[str, str]:
        """Return the delimiters as ``jinja2.Environment`` keyword arguments."""
        return {
            "variable_start_string": self.variable_start,
            "variable_end_string": self.variable_end,
            "block_start_string": self.block_start,
            "block_end_string": self.block_end,
            "comment_start_string": self.comment_start,
            "comment_end_string": self.comment_end,
        }


def erb_delimiters() -> Delimiters:
    """``<%= %>`` / ``<% %>`` / ``<%# %>``: the per-file engine's default set.

    It differs from the primary set so text produced by the primary pass
    (including ``{% raw %}`` output and data values) is not re-evaluated.
    """
    return Delimiters(
        variable_start="<%=",
        variable_end="%>",
        block_start="<%",
        block_end="%>",
        comment_start="<%#",
        comment_end="%>",
    )


class EngineConfig(BaseModel):
    """Delimiters for the primary render pass and the per-file engines."""

    primary: Delimiters = Field(default_factory=Delimiters)
    secondary: Delimiters = Field(default_factory=erb_delimiters)
    extensions: list[str] = Field(
        default=[".md"],
        description="File extensions handled by the per-file engine pass",
    )


class Config(BaseModel):
    """Run configuration.

    Instances are created once by the CLI (or by the caller) and threaded
    through every task via the run context.
    """

    cwd: Path = Field(default=Path("."))
    dest: Path | None = Field(default=None, description="Output directory (default: cwd)")
    readme: str = Field(default=".verb.md", description="Input template, relative to cwd")
    verbmd: bool = Field(default=True, description="Load or offer to create the input template")
    is_generator: bool = Field(default=False, description="Project is a generate-* generator")
    pipeline: list[str] = Field(default_factory=list, description="Post-processing stage names")
    missing_fragments: Literal["ignore", "strict"] = Field(default="ignore")
    layout: str | None = Field(default=None, description="Fallback layout when front matter has none")
    toc_footer: str = Field(default=DEFAULT_TOC_FOOTER)
    lint_layout: bool = Field(default=True)
    plugins: list[str] = Field(default_factory=list, description="'module:function' plugin specs")
    verbose: bool = Field(default=False)
    engine: EngineConfig = Field(default_factory=EngineConfig)

    # ------------------------------------------------------------------
    # Derived paths (read-only properties)
    # ------------------------------------------------------------------

    @property
    def root(self) -> Path:
        """Absolute project root."""
        return self.cwd.resolve()

    @property
    def dest_dir(self) -> Path:
        """Absolute output directory."""
        return (self.root / self.dest).resolve() if self.dest else self.root

    @property
    def input_path(self) -> Path:
        """Absolute path of the input template."""
        return (self.root / self.readme).resolve()

    @property
    def output_path(self) -> Path:
        """Absolute path of the generated README."""
        return self.dest_dir / OUTPUT_BASENAME

    @property
    def package_json_path(self) -> Path:
        return self.root / "package.json"

    @property
    def bower_path(self) -> Path:
        return self.root / "bower.json"

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------

    @classmethod
    def from_env(cls, **overrides: Any) -> "Config":
        """Build a ``Config`` from environment variables.

        Recognised variables (all optional):
            README_GENERATOR_CWD, README_GENERATOR_DEST, README_GENERATOR_README,
            README_GENERATOR_VERBMD, README_GENERATOR_PIPELINE,
            README_GENERATOR_VERBOSE.

        Keyword arguments override anything read from the environment.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("README_GENERATOR_CWD"):
            kwargs["cwd"] = Path(os.environ["README_GENERATOR_CWD"])
        if os.environ.get("README_GENERATOR_DEST"):
            kwargs["dest"] = Path(os.environ["README_GENERATOR_DEST"])
        if os.environ.get("README_GENERATOR_README"):
            kwargs["readme"] = os.environ["README_GENERATOR_README"]
        if os.environ.get("README_GENERATOR_VERBMD"):
            kwargs["verbmd"] = _env_flag(os.environ["README_GENERATOR_VERBMD"])
        if os.environ.get("README_GENERATOR_PIPELINE"):
            kwargs["pipeline"] = [
                s.strip() for s in os.environ["README_GENERATOR_PIPELINE"].split(",") if s.strip()
            ]
        if os.environ.get("README_GENERATOR_VERBOSE"):
            kwargs["verbose"] = _env_flag(os.environ["README_GENERATOR_VERBOSE"])

        kwargs.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**kwargs)


def _env_flag(value: str) -> bool:
    return value.strip().lower() not in ("0", "false", "no", "off", "")


# ---------------------------------------------------------------------------
# Project configuration (package.json "verb" section)
# ---------------------------------------------------------------------------


class ProjectConfig(BaseModel):
    """The ``verb`` section of a project's ``package.json``.

    Unknown keys are kept so plugins can read their own settings.
    """

    model_config = ConfigDict(extra="allow")

    views: dict[str, dict[str, Any]] | None = None
    data: dict[str, Any] = Field(default_factory=dict)
    layout: str | None = None
    toc: bool | dict[str, Any] | None = None
    pipeline: list[str] | None = None
    plugins: list[str] = Field(default_factory=list)

    @classmethod
    def from_mapping(cls, raw: Any) -> "ProjectConfig":
        """Validate a raw ``verb`` section.

        Raises:
            ConfigError: If the section is not a mapping or fails validation.
        """
        if raw is None:
            return cls()
        if not isinstance(raw, dict):
            raise ConfigError("expected an object", key="verb")
        try:
            return cls.model_validate(raw)
        except ValidationError as exc:
            raise ConfigError(str(exc), key="verb") from exc
