"""Exception types raised by the docpipe build pipeline.

Fatal errors propagate out of TaskGraph.run and become the process exit code.
Non-fatal conditions (missing taxonomy sources, partial command entries) are
logged where they are detected and never raised past their component.
"""

from pathlib import Path


class DocpipeError(Exception):
    """Base class for all docpipe errors."""


class CyclicDependencyError(DocpipeError):
    """Raised when task resolution revisits a task on the current path."""

    def __init__(self, cycle: list[str]) -> None:
        self.cycle = cycle
        super().__init__(f"Cyclic task dependency: {' -> '.join(cycle)}")


class UnknownTaskError(DocpipeError):
    """Raised when a target or dependency names a task that was never declared."""

    def __init__(self, task_name: str, required_by: str | None = None) -> None:
        self.task_name = task_name
        self.required_by = required_by
        message = f"Task not found: {task_name}"
        if required_by:
            message += f" (required by {required_by})"
        super().__init__(message)


class DuplicateTaskError(DocpipeError):
    """Raised when the same task name is explicitly declared twice."""

    def __init__(self, task_name: str) -> None:
        self.task_name = task_name
        super().__init__(f"Task already declared: {task_name}")


class TaskActionError(DocpipeError):
    """Raised when a task's action fails and the task is not continue-on-error."""

    def __init__(self, task_name: str, original: BaseException) -> None:
        self.task_name = task_name
        self.original = original
        super().__init__(f"Task '{task_name}' failed: {original}")


class CommandInvocationError(DocpipeError):
    """Raised when an external sub-command cannot be started or exits non-zero."""

    def __init__(
        self,
        command: str,
        message: str,
        exit_code: int | None = None,
    ) -> None:
        self.command = command
        self.exit_code = exit_code
        full_message = f"Command failed: {command} - {message}"
        if exit_code is not None:
            full_message += f" (exit code: {exit_code})"
        super().__init__(full_message)


class MissingSourceError(DocpipeError):
    """Raised (or logged) when an input file does not exist."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        super().__init__(f"Source file not found: {self.path}")


class MalformedSourceError(DocpipeError):
    """Raised when an input file exists but cannot be parsed."""

    def __init__(self, path: Path | str, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Malformed source {self.path}: {reason}")
