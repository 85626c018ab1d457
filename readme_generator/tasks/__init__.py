"""Task graph: named tasks, dependency resolution and ordered execution.

Quick usage::

    from readme_generator.tasks import TaskGraph

    graph = TaskGraph()
    graph.register("data", [], load_data)
    graph.register("readme", ["data"], render_readme)
    await graph.run("readme", ctx)
"""

from readme_generator.tasks.graph import Task, TaskGraph, TaskRunResult

__all__ = [
    "Task",
    "TaskGraph",
    "TaskRunResult",
]
