"""Task graph, sub-command manifest and command invocation."""

from docpipe.tasks.graph import (
    RunContext,
    Task,
    TaskGraph,
    TaskResult,
    TaskSource,
    TaskStatus,
    format_task_name,
)
from docpipe.tasks.invoke import CommandInvoker
from docpipe.tasks.manifest import load_manifest

__all__ = [
    "TaskGraph",
    "Task",
    "TaskSource",
    "TaskStatus",
    "TaskResult",
    "RunContext",
    "format_task_name",
    "CommandInvoker",
    "load_manifest",
]
