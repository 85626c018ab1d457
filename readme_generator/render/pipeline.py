"""Render pipeline: source template -> README.md.

Stages, in strict order:

1. ``select``      -- pick the designated source file from the registered files
2. ``pre_render``  -- middleware (removes a stale README from the destination)
3. ``primary``     -- render with the primary engine against the run data
4. ``engine``      -- render again with the engine registered for the file's
                      extension, wrapping the result in its layout chain
5. ``post_render`` -- middleware
6. ``postprocess`` -- the configured ``pipeline`` stages, in order
7. ``write``       -- rename to ``README.md`` and write to the destination

``RenderPipeline.run`` is an async generator yielding one ``RenderedOutput``
per written file; the run is complete when the generator is exhausted.
Any stage error is raised as ``RenderError`` naming the stage.
"""

from __future__ import annotations

import inspect
from collections.abc import AsyncIterator, Awaitable, Callable
from typing import TYPE_CHECKING, Any, TypeVar

from readme_generator.acquisition import AcquisitionState
from readme_generator.errors import ConfigError, RenderError, SourceNotFoundError
from readme_generator.render.models import RESERVED_KEYS, RenderedOutput, SourceFile
from readme_generator.utils import print_debug, print_warning, write_file

if TYPE_CHECKING:
    from readme_generator.context import RunContext

T = TypeVar("T")

# Acquisition outcomes where "nothing to render" is a normal ending.
_NO_SOURCE_OK = (AcquisitionState.DISABLED, AcquisitionState.DECLINED)


class RenderPipeline:
    """Turns the run's source template into the final README."""

    def __init__(self, ctx: "RunContext") -> None:
        self.ctx = ctx

    # -- Stage 1 ---------------------------------------------------------------

    def select(self) -> SourceFile | None:
        """Return the designated source file.

        Files registered with the configured input path take precedence over
        files registered under a reserved key.  Returns ``None`` when the
        user declined (or disabled) acquisition.

        Raises:
            SourceNotFoundError: If no source is registered otherwise.
        """
        target = self.ctx.config.input_path
        for file in self.ctx.files.values():
            if file.path == target:
                return file
        for key in RESERVED_KEYS:
            if key in self.ctx.files:
                return self.ctx.files[key]
        if self.ctx.acquisition in _NO_SOURCE_OK:
            return None
        raise SourceNotFoundError(str(target))

    # -- Stages 2-7 ------------------------------------------------------------

    async def run(self) -> AsyncIterator[RenderedOutput]:
        source = self.select()
        if source is None:
            print_warning("No source template registered; README not generated.")
            return

        ctx = self.ctx
        file = await self._stage("pre_render", source, ctx.middleware.handle, "pre_render", source, ctx)
        data = {**ctx.data.snapshot(), **file.data}

        text = await self._stage("primary", file, self._render_primary, file, data)
        text = await self._stage("engine", file, self._render_engine, file, text, data)

        file = file.model_copy(update={"contents": text})
        file = await self._stage("post_render", file, ctx.middleware.handle, "post_render", file, ctx)

        text = await self._postprocess(file)

        dest = ctx.config.output_path
        await self._stage("write", file, write_file, dest, text)
        output = RenderedOutput(source=file.path, path=dest, contents=text)
        ctx.outputs.append(output)
        print_debug(f"wrote {dest}")
        yield output

    def _render_primary(self, file: SourceFile, data: dict[str, Any]) -> str:
        engine = self.ctx.primary_engine
        if engine is None:
            raise RenderError("primary", "no primary engine registered", file.filename)
        return engine.render(file.contents, data)

    def _render_engine(self, file: SourceFile, text: str, data: dict[str, Any]) -> str:
        engine = self.ctx.engines.get(file.extension)
        if engine is None:
            print_debug(f"no engine for '{file.extension}', skipping second pass")
            return text
        rendered = engine.render(text, data)
        layout = file.layout or self.ctx.option("layout")
        return engine.render_layout(rendered, layout, data)

    async def _postprocess(self, file: SourceFile) -> str:
        text = file.contents
        stages = self.ctx.stages.resolve(self.ctx.option("pipeline", []))
        for name, stage in stages:
            text = await self._stage(f"postprocess:{name}", file, stage, text, self.ctx)
        return text

    @staticmethod
    async def _stage(
        name: str,
        file: SourceFile,
        fn: Callable[..., T | Awaitable[T]],
        *args: Any,
    ) -> T:
        try:
            result = fn(*args)
            if inspect.isawaitable(result):
                result = await result
        except (RenderError, ConfigError):
            raise
        except Exception as exc:
            raise RenderError(name, f"{type(exc).__name__}: {exc}", file.filename) from exc
        return result  # type: ignore[return-value]


def readme_task(ctx: "RunContext") -> AsyncIterator[RenderedOutput]:
    """Body of the ``readme`` task: a stream of written outputs."""
    return RenderPipeline(ctx).run()
