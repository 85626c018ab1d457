"""Template fragment registry.

Fragments are grouped into four categories (docs, layouts, includes,
badges) and keyed by a normalized relative path.  Within a category the
last registration of a key wins, which is what gives project templates and
``views`` configuration their override power over the built-ins.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Any

from pydantic import BaseModel, Field

from readme_generator.errors import ConfigError

CATEGORIES: tuple[str, ...] = ("docs", "layouts", "includes", "badges")

_CATEGORY_ALIASES: dict[str, str] = {
    "doc": "docs",
    "docs": "docs",
    "layout": "layouts",
    "layouts": "layouts",
    "include": "includes",
    "includes": "includes",
    "badge": "badges",
    "badges": "badges",
}

# Lookup order used by ``find`` when a template name carries no category.
_FIND_ORDER: tuple[str, ...] = ("includes", "docs", "layouts", "badges")

_KEY_PREFIX_RE = re.compile(r"^(templates|docs)/?(layouts|includes)/?")


def normalize_category(name: str) -> str:
    """Map singular/plural category names to the canonical plural form.

    Raises:
        ConfigError: If *name* is not a known category.
    """
    try:
        return _CATEGORY_ALIASES[name]
    except KeyError:
        raise ConfigError(
            f"unknown template category (expected one of {', '.join(CATEGORIES)})",
            key=name,
        ) from None


def rename_key(path: str | Path, base: str | Path | None = None) -> str:
    """Derive a fragment key from a file path.

    The path is made relative to *base* (when given), a leading
    ``templates/layouts/``-style prefix is removed, and the extension is
    stripped.

    Examples::

        rename_key("/x/templates/includes/install.md", "/x/templates/includes") -> "install"
        rename_key("templates/layouts/default.md") -> "default"
        rename_key("/proj/.verb.md", "/proj") -> ".verb"
    """
    p = Path(path)
    if base is not None and p.is_absolute():
        try:
            p = p.relative_to(Path(base))
        except ValueError:
            pass
    name = PurePosixPath(p.as_posix())
    stripped = _KEY_PREFIX_RE.sub("", str(name), count=1)
    suffix = PurePosixPath(stripped).suffix
    return stripped[: -len(suffix)] if suffix else stripped


@dataclass(frozen=True)
class GlobSource:
    """A glob pattern evaluated relative to a base directory."""

    pattern: str
    cwd: Path

    def matches(self) -> list[Path]:
        """Return matching files in sorted order (empty if *cwd* is missing)."""
        if not self.cwd.is_dir():
            return []
        return sorted(p for p in self.cwd.glob(self.pattern) if p.is_file())


class TemplateFragment(BaseModel):
    """A reusable piece of markup keyed by its normalized path."""

    category: str = Field(..., description="docs, layouts, includes or badges")
    key: str = Field(..., description="Normalized relative key")
    content: str = Field(default="")
    path: Path | None = Field(default=None, description="Source file, if loaded from disk")
    source: str = Field(default="", description="Where the fragment came from")


class TemplateRegistry:
    """Holds every fragment loaded for one generation run."""

    def __init__(self) -> None:
        self._fragments: dict[str, dict[str, TemplateFragment]] = {c: {} for c in CATEGORIES}

    # -- Registration --------------------------------------------------------

    def register(
        self,
        category: str,
        key: str,
        content: str,
        *,
        path: Path | None = None,
        source: str = "",
    ) -> TemplateFragment:
        """Register a single fragment, replacing any existing one with *key*."""
        cat = normalize_category(category)
        fragment = TemplateFragment(category=cat, key=key, content=content, path=path, source=source)
        self._fragments[cat][key] = fragment
        return fragment

    def load_category(
        self,
        category: str,
        source: GlobSource | Mapping[str, Any],
        *,
        label: str = "",
    ) -> list[TemplateFragment]:
        """Register every fragment found in *source* under *category*.

        Args:
            category: Target category.
            source: A ``GlobSource`` to scan, or an in-memory mapping of
                ``{key: content}``.  Mapping values may also be
                ``{"content": ...}`` dictionaries.
            label: Provenance recorded on each fragment.

        Returns:
            The fragments registered by this call, in registration order.
        """
        loaded: list[TemplateFragment] = []
        if isinstance(source, GlobSource):
            for file_path in source.matches():
                key = rename_key(file_path, source.cwd)
                content = file_path.read_text(encoding="utf-8")
                loaded.append(
                    self.register(category, key, content, path=file_path, source=label or str(source.cwd))
                )
            return loaded

        for raw_key, value in source.items():
            key = rename_key(str(raw_key))
            loaded.append(self.register(category, key, _fragment_content(raw_key, value), source=label))
        return loaded

    # -- Lookup --------------------------------------------------------------

    def get(self, category: str, key: str) -> TemplateFragment | None:
        """Return the fragment registered under *key*, or ``None``."""
        return self._fragments[normalize_category(category)].get(key)

    def find(self, name: str) -> TemplateFragment | None:
        """Resolve a template name such as ``"install"`` or ``"layouts/default"``.

        A leading category segment restricts the lookup; otherwise the
        categories are searched in include, doc, layout, badge order.
        """
        head, _, rest = name.partition("/")
        if rest and head in _CATEGORY_ALIASES:
            return self.get(head, rename_key(rest))

        key = rename_key(name)
        for category in _FIND_ORDER:
            fragment = self._fragments[category].get(key)
            if fragment is not None:
                return fragment
        return None

    def keys(self, category: str) -> list[str]:
        """Return the registered keys of *category* in registration order."""
        return list(self._fragments[normalize_category(category)])

    def __len__(self) -> int:
        return sum(len(c) for c in self._fragments.values())


def _fragment_content(key: Any, value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, Mapping) and isinstance(value.get("content"), str):
        return value["content"]
    raise ConfigError("fragment must be a string or an object with 'content'", key=str(key))
