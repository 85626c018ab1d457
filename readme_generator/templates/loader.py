"""Template source resolution.

``load_templates`` fills a ``TemplateRegistry`` from the built-in template
directory, the static in-memory sets and the project's ``docs`` directory,
in a fixed order.  ``apply_views`` is the configuration override pass that
runs strictly after all four categories are loaded.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

from readme_generator.errors import ConfigError
from readme_generator.templates import static
from readme_generator.templates.registry import (
    GlobSource,
    TemplateFragment,
    TemplateRegistry,
    normalize_category,
)
from readme_generator.utils import print_debug

BUILTIN_TEMPLATES_DIR = Path(__file__).parent / "builtin"


def builtin_path(*parts: str) -> Path:
    """Path inside the built-in template directory."""
    return BUILTIN_TEMPLATES_DIR.joinpath(*parts)


def load_templates(
    registry: TemplateRegistry,
    project_root: Path,
    views: Mapping[str, Any] | None = None,
    *,
    builtin_dir: Path = BUILTIN_TEMPLATES_DIR,
) -> TemplateRegistry:
    """Load all four fragment categories, then apply ``views`` overrides.

    Resolution order:

    1. docs: built-in ``docs/*.md``, then project ``docs/*.md``.
    2. layouts: built-in ``layouts/*.md``.
    3. includes: built-in ``includes/**/*.md``, the static include set,
       then project ``docs/*.md``.
    4. badges: the static badge set.
    5. ``views`` from project configuration, when given.

    Raises:
        ConfigError: If ``views`` is malformed.
    """
    project_docs = project_root / "docs"
    has_project_docs = project_docs.is_dir()

    registry.load_category("docs", GlobSource("*.md", builtin_dir / "docs"), label="builtin")
    if has_project_docs:
        registry.load_category("docs", GlobSource("*.md", project_docs), label="project")

    registry.load_category("layouts", GlobSource("*.md", builtin_dir / "layouts"), label="builtin")

    registry.load_category("includes", GlobSource("**/*.md", builtin_dir / "includes"), label="builtin")
    registry.load_category("includes", static.INCLUDES, label="static")
    if has_project_docs:
        registry.load_category("includes", GlobSource("*.md", project_docs), label="project")

    registry.load_category("badges", static.BADGES, label="static")

    print_debug(f"loaded {len(registry)} template fragment(s)")

    if views is not None:
        apply_views(registry, views, project_root)
    return registry


def apply_views(
    registry: TemplateRegistry,
    views: Mapping[str, Any],
    project_root: Path,
) -> list[TemplateFragment]:
    """Register fragments declared in a ``views`` configuration section.

    Each category maps keys to either inline content, ``{"content": ...}``
    or ``{"path": ...}`` (relative to the project root).

    Example::

        {"layouts": {"default": "# {{ name }}\\n{{ body }}"},
         "includes": {"footer": {"path": "templates/footer.md"}}}

    Raises:
        ConfigError: On unknown categories, bad values or unreadable paths.
    """
    if not isinstance(views, Mapping):
        raise ConfigError("expected an object of categories", key="views")

    registered: list[TemplateFragment] = []
    for raw_category, entries in views.items():
        category = normalize_category(str(raw_category))
        if not isinstance(entries, Mapping):
            raise ConfigError("expected an object of fragments", key=f"views.{raw_category}")

        resolved: dict[str, str] = {}
        for key, value in entries.items():
            resolved[str(key)] = _view_content(f"views.{raw_category}.{key}", value, project_root)
        registered.extend(registry.load_category(category, resolved, label="views"))

    print_debug(f"applied {len(registered)} view override(s)")
    return registered


def _view_content(where: str, value: Any, project_root: Path) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, Mapping):
        if isinstance(value.get("content"), str):
            return value["content"]
        if isinstance(value.get("path"), str):
            path = project_root / value["path"]
            try:
                return path.read_text(encoding="utf-8")
            except OSError as exc:
                raise ConfigError(f"cannot read {path}: {exc}", key=where) from exc
    raise ConfigError("expected a string, {'content': ...} or {'path': ...}", key=where)
