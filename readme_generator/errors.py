"""Exception hierarchy shared by every readme-generator component.

Every fatal condition raised inside a task body ends up wrapped in a
``TaskFailedError`` by the task graph, so callers only need to catch that
(or the common ``ReadmeGeneratorError`` base) to report a failed run.
"""

from __future__ import annotations


class ReadmeGeneratorError(Exception):
    """Base class for all errors raised by the generator."""


class ConfigError(ReadmeGeneratorError):
    """Raised when project or run configuration is malformed."""

    def __init__(self, message: str, key: str = "") -> None:
        self.key = key
        super().__init__(f"{key}: {message}" if key else message)


class AcquisitionError(ReadmeGeneratorError):
    """Raised when the input template exists but cannot be loaded."""


class RenderError(ReadmeGeneratorError):
    """Raised when a render pipeline stage fails.

    Attributes:
        stage: Name of the pipeline stage that failed.
        filename: Source file being rendered, if known.
    """

    def __init__(self, stage: str, message: str, filename: str = "") -> None:
        self.stage = stage
        self.filename = filename
        where = f" ({filename})" if filename else ""
        super().__init__(f"[{stage}]{where} {message}")


class SourceNotFoundError(RenderError):
    """Raised when the designated source file is not registered."""

    def __init__(self, path: str) -> None:
        super().__init__("select", f"Source template not registered: {path}")


# ---------------------------------------------------------------------------
# Task graph
# ---------------------------------------------------------------------------


class TaskGraphError(ReadmeGeneratorError):
    """Structural problem in the task graph, detected before execution."""


class UnknownTaskError(TaskGraphError):
    """A task (or one of its dependencies) is not registered."""

    def __init__(self, name: str, required_by: str = "") -> None:
        self.name = name
        self.required_by = required_by
        if required_by:
            message = f"Task '{required_by}' depends on unknown task '{name}'"
        else:
            message = f"Unknown task '{name}'"
        super().__init__(message)


class CycleDetectedError(TaskGraphError):
    """The dependency declarations form a cycle."""

    def __init__(self, path: list[str]) -> None:
        self.path = path
        super().__init__(f"Cycle detected in task graph: {' -> '.join(path)}")


class TaskFailedError(ReadmeGeneratorError):
    """A task body failed; the rest of the run was abandoned."""

    def __init__(self, task: str, cause: BaseException) -> None:
        self.task = task
        self.cause = cause
        super().__init__(f"Task '{task}' failed: {cause}")
