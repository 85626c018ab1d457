"""Jinja2 template engine bound to a fragment registry.

Each engine owns a Jinja2 ``Environment`` whose loader resolves template
names against the run's ``TemplateRegistry``, so ``{% include "install-npm" %}``
and ``{{ include("install-npm") }}`` both find registered fragments.  Missing
fragments either render as an empty string (recording a warning) or raise,
depending on the configured policy.

An engine may delegate fragment and layout rendering to another engine so a
per-file engine with its own delimiters still renders fragments written in
the primary syntax.  A layout receives the wrapped content as data and never
re-evaluates it.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from typing import Any

from jinja2 import BaseLoader, Environment, TemplateNotFound, pass_context
from jinja2.runtime import Context

from readme_generator.config import Delimiters
from readme_generator.templates.registry import TemplateRegistry, rename_key
from readme_generator.utils import camel_case, parse_front_matter

_NO_LAYOUT = {"", "none", "nil", "false"}

MissingHandler = Callable[[str], None]


class RegistryLoader(BaseLoader):
    """Jinja2 loader backed by a ``TemplateRegistry``."""

    def __init__(self, registry: TemplateRegistry, on_missing: Callable[[str], str]) -> None:
        self.registry = registry
        self.on_missing = on_missing

    def get_source(
        self, environment: Environment, template: str
    ) -> tuple[str, str | None, Callable[[], bool]]:
        fragment = self.registry.find(template)
        if fragment is None:
            return self.on_missing(template), None, lambda: True
        filename = str(fragment.path) if fragment.path else None
        return fragment.content, filename, lambda: True


class TemplateEngine:
    """Renders template text against run data with registry-backed helpers.

    Args:
        registry: Fragments available to includes, badges, docs and layouts.
        delimiters: Jinja2 delimiter set for this engine.
        missing: ``"ignore"`` renders missing fragments as ``""`` and calls
            *on_missing*; ``"strict"`` raises ``TemplateNotFound``.
        on_missing: Called with the name of each missing fragment.
        helpers: Extra template globals (e.g. ``to_alias``).
        name: Engine label used in error messages.
        fragments: Engine that renders fragment and layout content.  Defaults
            to this engine; an engine with its own delimiters passes the
            engine whose syntax the fragments are written in.
    """

    def __init__(
        self,
        registry: TemplateRegistry,
        delimiters: Delimiters | None = None,
        *,
        missing: str = "ignore",
        on_missing: MissingHandler | None = None,
        helpers: Mapping[str, Any] | None = None,
        name: str = "jinja",
        fragments: TemplateEngine | None = None,
    ) -> None:
        self.registry = registry
        self.missing = missing
        self.on_missing = on_missing
        self.name = name
        self.fragments = fragments or self
        self.env = Environment(
            loader=RegistryLoader(registry, self._missing_source),
            autoescape=False,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
            **(delimiters or Delimiters()).as_env_kwargs(),
        )
        self.env.filters["camel_case"] = camel_case
        self.env.filters["slugify"] = _slugify_filter
        self.env.globals["include"] = self._helper("includes")
        self.env.globals["badge"] = self._helper("badges")
        self.env.globals["doc"] = self._helper("docs")
        if helpers:
            self.env.globals.update(helpers)

    # -- Rendering -----------------------------------------------------------

    def render(self, text: str, data: Mapping[str, Any]) -> str:
        """Render template *text* with *data* as the context."""
        return self.env.from_string(text).render(dict(data))

    def render_layout(self, body: str, layout: str | None, data: Mapping[str, Any]) -> str:
        """Wrap *body* in *layout* and its parent layouts.

        A layout receives the wrapped content as ``body``; its own front
        matter may name a parent ``layout``.
        """
        seen: list[str] = []
        while layout and layout.strip().lower() not in _NO_LAYOUT:
            key = rename_key(layout)
            if key in seen:
                raise TemplateNotFound(f"layout cycle: {' -> '.join(seen + [key])}")
            seen.append(key)

            fragment = self.registry.get("layouts", key)
            if fragment is None:
                self._missing_source(f"layouts/{key}")
                break

            meta, text = parse_front_matter(fragment.content)
            body = self.fragments.render(text, {**data, **meta, "body": body})
            parent = meta.get("layout")
            layout = str(parent) if parent else None
        return body

    # -- Helpers -------------------------------------------------------------

    def _helper(self, category: str) -> Callable[..., str]:
        @pass_context
        def render_fragment(context: Context, name: str) -> str:
            fragment = self.registry.get(category, rename_key(name))
            if fragment is None:
                return self._missing_source(f"{category}/{name}")
            return self.fragments.render(fragment.content, context.get_all())

        render_fragment.__name__ = category.rstrip("s")
        return render_fragment

    def _missing_source(self, name: str) -> str:
        if self.missing == "strict":
            raise TemplateNotFound(name)
        if self.on_missing is not None:
            self.on_missing(name)
        return ""


def _slugify_filter(value: str) -> str:
    """Convert a string to a URL-safe anchor slug."""
    slug = re.sub(r"[^a-z0-9]+", "-", str(value).lower().strip())
    return slug.strip("-")
