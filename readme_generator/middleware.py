"""File middleware: hooks that run when files are loaded or rendered.

Hooks are registered against a regular expression matched (``re.search``)
on the file path.  A hook receives the file and the run context, and may
return a replacement ``SourceFile``; returning ``None`` keeps the file as is.
Hooks may be coroutine functions.
"""

from __future__ import annotations

import inspect
import re
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from readme_generator.render.models import LintWarning, SourceFile
from readme_generator.utils import print_debug, remove_matching

if TYPE_CHECKING:
    from readme_generator.context import RunContext

Hook = Callable[[SourceFile, "RunContext"], Any]

EVENTS: tuple[str, ...] = ("on_load", "pre_render", "post_render")

README_PATTERN = re.compile(r"(verb|readme)\.md$", re.IGNORECASE)


class Middleware:
    """Ordered hook lists per event."""

    def __init__(self) -> None:
        self._hooks: dict[str, list[tuple[re.Pattern[str], Hook]]] = {e: [] for e in EVENTS}

    def register(self, event: str, pattern: str | re.Pattern[str], hook: Hook) -> None:
        if event not in self._hooks:
            raise ValueError(f"Unknown middleware event '{event}'")
        compiled = re.compile(pattern) if isinstance(pattern, str) else pattern
        self._hooks[event].append((compiled, hook))

    def on_load(self, pattern: str | re.Pattern[str], hook: Hook) -> None:
        self.register("on_load", pattern, hook)

    def pre_render(self, pattern: str | re.Pattern[str], hook: Hook) -> None:
        self.register("pre_render", pattern, hook)

    def post_render(self, pattern: str | re.Pattern[str], hook: Hook) -> None:
        self.register("post_render", pattern, hook)

    def count(self, event: str) -> int:
        return len(self._hooks[event])

    async def handle(self, event: str, file: SourceFile, ctx: "RunContext") -> SourceFile:
        """Run every hook for *event* whose pattern matches *file*."""
        target = file.path.as_posix()
        for pattern, hook in self._hooks[event]:
            if not pattern.search(target):
                continue
            replaced = hook(file, ctx)
            if inspect.isawaitable(replaced):
                replaced = await replaced
            if replaced is not None:
                file = replaced
        return file


# ---------------------------------------------------------------------------
# Built-in hooks
# ---------------------------------------------------------------------------


async def remove_stale_readme(file: SourceFile, ctx: "RunContext") -> None:
    """Delete an existing README in the output directory before rendering."""
    removed = await remove_matching(ctx.config.dest_dir, "readme.md")
    for path in removed:
        print_debug(f"removed stale {path}")


def lint_layout(file: SourceFile, ctx: "RunContext") -> None:
    """Warn when a readme template does not declare a layout."""
    if "layout" in file.data or ctx.options.get("layout"):
        return
    ctx.warn(
        LintWarning(
            filename=file.filename,
            message="no layout defined; add 'layout: default' to the front matter",
        )
    )
