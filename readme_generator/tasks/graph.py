"""Named-task registry with dependency resolution and ordered execution.

A task declares the names it depends on; ``run`` resolves the full
dependency closure, executes it dependency-first (each task at most once per
invocation) and stops at the first failure.

Task bodies receive the run context as their only argument and may be:

* a plain function,
* a coroutine function,
* a function returning an (async) iterator -- a *stream*.  A stream task is
  complete only once the iterator is exhausted, and an error raised while
  iterating fails the task.
"""

from __future__ import annotations

import inspect
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any

from readme_generator.errors import (
    CycleDetectedError,
    TaskFailedError,
    TaskGraphError,
    UnknownTaskError,
)
from readme_generator.utils import console, format_duration, print_debug

TaskBody = Callable[[Any], Any]
TaskCallback = Callable[[BaseException | None], None]


@dataclass
class Task:
    """A named unit of work with declared dependencies."""

    name: str
    dependencies: list[str] = field(default_factory=list)
    body: TaskBody | None = None
    silent: bool = False
    description: str = ""


@dataclass
class TaskRunResult:
    """Outcome of one successful ``TaskGraph.run`` invocation."""

    task: str
    executed: list[str] = field(default_factory=list)
    durations: dict[str, float] = field(default_factory=dict)
    emitted: dict[str, list[Any]] = field(default_factory=dict)


class TaskGraph:
    """Registry of tasks and their dependency declarations."""

    def __init__(self) -> None:
        self._tasks: dict[str, Task] = {}

    # -- Registration --------------------------------------------------------

    def register(
        self,
        name: str,
        dependencies: Iterable[str] = (),
        body: TaskBody | None = None,
        *,
        silent: bool = False,
        description: str = "",
    ) -> Task:
        """Add (or replace) a task definition.

        A task registered without a body only runs its dependencies, which
        makes it an alias or a group.
        """
        if not isinstance(name, str) or not name.strip():
            raise TaskGraphError("task name must be a non-empty string")
        task = Task(
            name=name,
            dependencies=list(dependencies),
            body=body,
            silent=silent,
            description=description,
        )
        if name in self._tasks:
            print_debug(f"task '{name}' redefined")
        self._tasks[name] = task
        return task

    def task(
        self,
        name: str,
        dependencies: Iterable[str] = (),
        *,
        silent: bool = False,
        description: str = "",
    ) -> Callable[[TaskBody], TaskBody]:
        """Decorator form of :meth:`register`."""

        def decorator(body: TaskBody) -> TaskBody:
            self.register(name, dependencies, body, silent=silent, description=description)
            return body

        return decorator

    def get(self, name: str) -> Task:
        try:
            return self._tasks[name]
        except KeyError:
            raise UnknownTaskError(name) from None

    def names(self) -> list[str]:
        return list(self._tasks)

    def __contains__(self, name: object) -> bool:
        return name in self._tasks

    # -- Planning ------------------------------------------------------------

    def resolve(self, name: str) -> list[Task]:
        """Return *name*'s dependency closure in execution order.

        Dependencies are visited depth-first in their declared order, so the
        order is deterministic; a task reachable through several paths is
        listed once, at its first position.

        Raises:
            UnknownTaskError: If *name* or any dependency is not registered.
            CycleDetectedError: If the closure contains a cycle.
        """
        order: list[Task] = []
        done: set[str] = set()
        path: list[str] = []

        def visit(task_name: str, required_by: str) -> None:
            if task_name in done:
                return
            if task_name in path:
                raise CycleDetectedError(path[path.index(task_name):] + [task_name])
            if task_name not in self._tasks:
                raise UnknownTaskError(task_name, required_by)

            task = self._tasks[task_name]
            path.append(task_name)
            for dep in task.dependencies:
                visit(dep, task_name)
            path.pop()

            done.add(task_name)
            order.append(task)

        visit(name, "")
        return order

    # -- Execution -----------------------------------------------------------

    async def run(
        self,
        name: str,
        ctx: Any,
        callback: TaskCallback | None = None,
    ) -> TaskRunResult | None:
        """Run *name* and everything it depends on.

        Args:
            name: Task to build.
            ctx: Run context handed to every task body.
            callback: Optional completion callback.  When given it receives
                ``None`` on success or the error on failure, and the error is
                not raised.

        Returns:
            The run result, or ``None`` if the run failed and a callback was
            given.

        Raises:
            TaskGraphError: Structural problems, before any body runs.
            TaskFailedError: The first task body that failed.
        """
        try:
            result = await self._run(name, ctx)
        except (TaskGraphError, TaskFailedError) as exc:
            if callback is None:
                raise
            callback(exc)
            return None

        if callback is not None:
            callback(None)
        return result

    async def _run(self, name: str, ctx: Any) -> TaskRunResult:
        plan = self.resolve(name)
        print_debug(f"build '{name}': {' -> '.join(t.name for t in plan)}")

        result = TaskRunResult(task=name)
        for task in plan:
            start = time.monotonic()
            if not task.silent:
                console.print(f"[cyan]Starting[/cyan] '{task.name}'...")
            try:
                emitted = await self._execute(task, ctx)
            except TaskFailedError:
                raise
            except Exception as exc:
                raise TaskFailedError(task.name, exc) from exc

            elapsed = time.monotonic() - start
            result.executed.append(task.name)
            result.durations[task.name] = elapsed
            if emitted:
                result.emitted[task.name] = emitted
            if not task.silent:
                console.print(
                    f"[green]Finished[/green] '{task.name}' after {format_duration(elapsed)}"
                )
        return result

    @staticmethod
    async def _execute(task: Task, ctx: Any) -> list[Any]:
        if task.body is None:
            return []

        outcome = task.body(ctx)
        if inspect.isawaitable(outcome):
            outcome = await outcome

        emitted: list[Any] = []
        if hasattr(outcome, "__aiter__"):
            async for item in outcome:
                emitted.append(item)
        elif inspect.isgenerator(outcome):
            emitted.extend(outcome)
        return emitted
