"""Post-processing stages applied to rendered README text.

A stage is a callable ``(text, ctx) -> str`` (or a coroutine function
returning ``str``).  Stages are looked up by name from the run's
``StageRegistry`` in the order given by the ``pipeline`` option.
"""

from __future__ import annotations

import re
from collections.abc import Awaitable, Callable, Iterable
from typing import TYPE_CHECKING, Any, Union

from readme_generator.errors import ConfigError

if TYPE_CHECKING:
    from readme_generator.context import RunContext

Stage = Callable[[str, "RunContext"], Union[str, Awaitable[str]]]

TOC_MARKER = "<!-- toc -->"

_HEADING_RE = re.compile(r"^(#{2,4})\s+(.+?)\s*#*\s*$")
_FENCE_RE = re.compile(r"^\s*(```|~~~)")


class StageRegistry:
    """Named post-processing stages."""

    def __init__(self) -> None:
        self._stages: dict[str, Stage] = {}

    def register(self, name: str, stage: Stage) -> None:
        self._stages[name] = stage

    def resolve(self, names: Iterable[Any]) -> list[tuple[str, Stage]]:
        """Turn a ``pipeline`` option into ``(name, stage)`` pairs.

        Entries may be stage names or callables.

        Raises:
            ConfigError: If a name is not registered.
        """
        resolved: list[tuple[str, Stage]] = []
        for entry in names:
            if callable(entry):
                resolved.append((getattr(entry, "__name__", repr(entry)), entry))
                continue
            stage = self._stages.get(str(entry))
            if stage is None:
                raise ConfigError(
                    f"unknown pipeline stage '{entry}' (available: {', '.join(sorted(self._stages))})",
                    key="pipeline",
                )
            resolved.append((str(entry), stage))
        return resolved

    def names(self) -> list[str]:
        return sorted(self._stages)

    def __contains__(self, name: object) -> bool:
        return name in self._stages


# ---------------------------------------------------------------------------
# Built-in stages
# ---------------------------------------------------------------------------


def toc(text: str, ctx: "RunContext") -> str:
    """Insert a table of contents after the first ``<!-- toc -->`` marker."""
    if TOC_MARKER not in text:
        return text

    lines: list[str] = []
    in_fence = False
    for line in text.splitlines():
        if _FENCE_RE.match(line):
            in_fence = not in_fence
            continue
        if in_fence:
            continue
        match = _HEADING_RE.match(line)
        if not match:
            continue
        level = len(match.group(1))
        title = match.group(2)
        lines.append(f"{'  ' * (level - 2)}- [{title}](#{_anchor(title)})")

    if not lines:
        return text

    footer = ctx.options.get("toc_footer", "")
    block = f"{TOC_MARKER}\n\n" + "\n".join(lines) + footer
    return text.replace(TOC_MARKER, block, 1)


def collapse_newlines(text: str, ctx: "RunContext") -> str:
    """Collapse runs of blank lines down to a single blank line."""
    return re.sub(r"\n[ \t]*(?:\n[ \t]*){2,}", "\n\n", text)


def trailing_newline(text: str, ctx: "RunContext") -> str:
    """Ensure the document ends with exactly one newline."""
    return text.rstrip() + "\n"


def _anchor(title: str) -> str:
    plain = re.sub(r"\[([^\]]*)\]\([^)]*\)", r"\1", title)
    slug = re.sub(r"[^\w\- ]+", "", plain.lower().strip())
    return slug.replace(" ", "-")


BUILTIN_STAGES: dict[str, Stage] = {
    "toc": toc,
    "collapse-newlines": collapse_newlines,
    "trailing-newline": trailing_newline,
}
