"""Source acquisition: make sure there is an input template to render.

``decide`` evaluates, in priority order:

1. a file is already registered under a reserved key, or acquisition is
   disabled (``--no-verbmd``) -- nothing to do;
2. the configured input file exists -- load it;
3. otherwise prompt the user, and scaffold a new ``.verb.md`` from the
   built-in basic template if they accept.

Prompting and conflict resolution are delegated to injectable callables so
tests (and non-interactive hosts) can replace the Rich prompts.
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Awaitable, Callable
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Union

from rich.prompt import Confirm

from readme_generator.errors import AcquisitionError
from readme_generator.templates.loader import builtin_path
from readme_generator.utils import console, print_debug, print_warning, read_text, write_file

if TYPE_CHECKING:
    from readme_generator.context import RunContext

ConfirmPrompt = Callable[[str], Union[bool, Awaitable[bool]]]
ConflictResolver = Callable[[Path, str], Union[bool, Awaitable[bool]]]

PROMPT_MESSAGE = "Can't find a .verb.md, want to add one?"
NEW_TEMPLATE_NAME = ".verb.md"
BASIC_TEMPLATE = builtin_path("verbmd", "basic.md")


class AcquisitionState(str, Enum):
    """Outcome of the ``verbmd`` task."""

    NOT_NEEDED = "not_needed"
    DISABLED = "disabled"
    LOAD_EXISTING = "load_existing"
    PROMPT = "prompt"
    DECLINED = "declined"
    CREATED = "created"


def decide(ctx: "RunContext") -> AcquisitionState:
    """Pick the acquisition branch; the first satisfied condition wins."""
    if ctx.has_reserved_file():
        return AcquisitionState.NOT_NEEDED
    if not ctx.config.verbmd:
        return AcquisitionState.DISABLED
    if ctx.config.input_path.exists():
        return AcquisitionState.LOAD_EXISTING
    return AcquisitionState.PROMPT


# ---------------------------------------------------------------------------
# Task bodies
# ---------------------------------------------------------------------------


async def verbmd_task(ctx: "RunContext") -> None:
    """Load the input template, or offer to create one."""
    state = decide(ctx)
    print_debug(f"acquisition: {state.value}")

    if state in (AcquisitionState.NOT_NEEDED, AcquisitionState.DISABLED):
        ctx.acquisition = state
        return

    if state is AcquisitionState.LOAD_EXISTING:
        await _load_source(ctx, ctx.config.input_path)
        ctx.acquisition = state
        return

    ctx.acquisition = AcquisitionState.PROMPT
    await ctx.build("ask")

    if ctx.acquisition is AcquisitionState.CREATED:
        await _load_source(ctx, ctx.scaffolded or ctx.config.input_path)


async def _load_source(ctx: "RunContext", path: Path) -> None:
    """Register *path* as the input template under the ``README`` key.

    Raises:
        AcquisitionError: If the file cannot be read.
    """
    try:
        contents = await asyncio.to_thread(read_text, path)
    except (OSError, UnicodeDecodeError) as exc:
        raise AcquisitionError(f"Cannot read input template {path}: {exc}") from exc
    await ctx.add_file(path, contents, key="README")


async def prompt_verbmd_task(ctx: "RunContext") -> None:
    """Ask whether to add a ``.verb.md``; run ``new`` on confirmation."""
    answer = await _call(ctx.confirm, PROMPT_MESSAGE)
    if not answer:
        ctx.acquisition = AcquisitionState.DECLINED
        print_warning("No .verb.md found; nothing to render.")
        return
    await ctx.build("new")


async def new_task(ctx: "RunContext") -> Path | None:
    """Write a new ``.verb.md`` from the built-in basic template.

    Returns:
        The written path, or ``None`` if the conflict resolver declined to
        overwrite an existing file.
    """
    dest = ctx.config.dest_dir / NEW_TEMPLATE_NAME
    candidate = await asyncio.to_thread(read_text, BASIC_TEMPLATE)

    if dest.exists():
        existing = await asyncio.to_thread(read_text, dest)
        if existing == candidate:
            print_debug(f"{dest} is up to date")
            ctx.acquisition = AcquisitionState.CREATED
            ctx.scaffolded = dest
            return dest
        if not await _call(ctx.resolve_conflict, dest, candidate):
            console.print(f"  [yellow]skipped[/yellow] {dest}")
            ctx.acquisition = AcquisitionState.DECLINED
            return None

    await write_file(dest, candidate)
    console.print(f"  [green]+[/green] created {dest}")
    ctx.acquisition = AcquisitionState.CREATED
    ctx.scaffolded = dest
    return dest


# ---------------------------------------------------------------------------
# Default interactive collaborators
# ---------------------------------------------------------------------------


async def confirm_with_rich(message: str) -> bool:
    """Ask a yes/no question on the terminal."""
    return await asyncio.to_thread(Confirm.ask, message, default=True, console=console)


async def resolve_conflict_with_rich(dest: Path, candidate: str) -> bool:
    """Ask whether an existing, different file should be overwritten."""
    return await asyncio.to_thread(
        Confirm.ask, f"{dest} already exists. Overwrite?", default=False, console=console
    )


async def _call(fn: Callable[..., Union[bool, Awaitable[bool]]], *args: object) -> bool:
    result = fn(*args)
    if inspect.isawaitable(result):
        result = await result
    return bool(result)
