"""Shared utility functions for the readme generator.

Provides JSON/YAML I/O, file-system helpers, name helpers, and Rich-based
console reporting used by the task graph and the CLI.
"""

from __future__ import annotations

import asyncio
import json
import re
from pathlib import Path
from typing import Any

import yaml
from rich.console import Console
from rich.table import Table

console = Console()

_verbose = False


# ---------------------------------------------------------------------------
# JSON / YAML I/O
# ---------------------------------------------------------------------------


def load_json(path: str | Path) -> dict[str, Any]:
    """Load and parse a JSON file.

    Args:
        path: Path to the JSON file.

    Returns:
        Parsed dictionary.

    Raises:
        FileNotFoundError: If the file does not exist.
        json.JSONDecodeError: If the file is not valid JSON.
    """
    file_path = Path(path)
    raw = file_path.read_text(encoding="utf-8")
    data = json.loads(raw)
    if not isinstance(data, dict):
        return {"_root": data}
    return data


_FRONT_MATTER_RE = re.compile(r"\A---[ \t]*\r?\n(.*?)\r?\n---[ \t]*(?:\r?\n|\Z)", re.DOTALL)


def parse_front_matter(text: str) -> tuple[dict[str, Any], str]:
    """Split YAML front matter from a template body.

    Returns:
        A ``(data, body)`` tuple.  ``data`` is empty when the text has no
        front matter block.

    Raises:
        yaml.YAMLError: If the front matter is not valid YAML.
    """
    match = _FRONT_MATTER_RE.match(text)
    if not match:
        return {}, text
    data = yaml.safe_load(match.group(1)) or {}
    if not isinstance(data, dict):
        data = {"_front_matter": data}
    return data, text[match.end():]


# ---------------------------------------------------------------------------
# File-system helpers
# ---------------------------------------------------------------------------


def exists(path: str | Path) -> bool:
    """Return ``True`` if *path* exists (file or directory)."""
    return Path(path).exists()


def read_text(path: str | Path) -> str:
    """Read a UTF-8 text file."""
    return Path(path).read_text(encoding="utf-8")


def _write_file(path: Path, content: str) -> None:
    """Synchronous helper: create parent dirs and write content."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


async def write_file(path: str | Path, content: str) -> Path:
    """Write *content* to *path* without blocking the event loop."""
    out = Path(path)
    await asyncio.to_thread(_write_file, out, content)
    return out


async def remove_matching(directory: str | Path, filename: str) -> list[Path]:
    """Delete every file in *directory* whose name matches *filename*
    case-insensitively.

    Returns:
        The paths that were removed.
    """
    dir_path = Path(directory)
    if not dir_path.is_dir():
        return []

    wanted = filename.lower()
    removed: list[Path] = []
    for entry in sorted(dir_path.iterdir()):
        if entry.is_file() and entry.name.lower() == wanted:
            await asyncio.to_thread(entry.unlink)
            removed.append(entry)
    return removed


# ---------------------------------------------------------------------------
# String / name helpers
# ---------------------------------------------------------------------------


def camel_case(value: str) -> str:
    """Convert ``some-thing`` or ``some_thing`` to ``someThing``.

    Examples::

        camel_case("foo-bar") -> "fooBar"
        camel_case("foo") -> "foo"
    """
    parts = [p for p in re.split(r"[-_.\s]+", value) if p]
    if not parts:
        return ""
    head, *tail = parts
    return head[0].lower() + head[1:] + "".join(word.capitalize() for word in tail)


def format_duration(seconds: float) -> str:
    """Format a duration in seconds to a human-readable string.

    Examples::

        format_duration(0.0042) -> "4ms"
        format_duration(3.7)    -> "3.7s"
    """
    if seconds < 0:
        return "0ms"
    if seconds < 1:
        return f"{int(seconds * 1000)}ms"
    return f"{seconds:.1f}s"


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def set_verbose(enabled: bool) -> None:
    """Toggle debug output for :func:`print_debug`."""
    global _verbose
    _verbose = enabled


def print_debug(message: str) -> None:
    """Print a dim debug line when verbose mode is enabled."""
    if _verbose:
        console.print(f"[dim]{message}[/dim]")


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{message}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message."""
    console.print(f"[bold red]{message}[/bold red]")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{message}[/bold yellow]")


def print_warnings_table(warnings: list[Any], title: str = "Warnings") -> None:
    """Print lint warnings as a two-column ``filename | message`` table."""
    if not warnings:
        return
    table = Table(title=title, show_header=True, header_style="bold yellow")
    table.add_column("File", style="dim", no_wrap=True)
    table.add_column("Message")

    for warning in warnings:
        table.add_row(warning.filename, warning.message)

    console.print(table)
    console.print()
