"""Task graph orchestrator.

Tasks are declared by name with an ordered list of dependencies. ``run``
resolves the full execution plan first (depth-first, dependencies before
dependents, each task once), then executes it in order. Because the plan is
complete before anything runs, a dependency cycle or an unknown task is
reported without executing a single action.

Failure is not atomic: when a task fails, the output of tasks that already
completed stays on disk. Re-running the pipeline overwrites it.
"""

import logging
import time
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum

from docpipe.errors import (
    CyclicDependencyError,
    DuplicateTaskError,
    TaskActionError,
    UnknownTaskError,
)
from docpipe.utils.logging import task_extra

logger = logging.getLogger(__name__)

Action = Callable[[], None]
Invoker = Callable[[str], None]
NameFormat = str | Callable[[str], str]


class TaskSource(Enum):
    """Where a task's declaration came from."""

    DECLARED = "declared"
    MANIFEST = "manifest"


class TaskStatus(Enum):
    """Outcome of one task in a run."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED = "skipped"
    RECOVERED = "recovered"


@dataclass
class Task:
    """A named unit of work in the build graph.

    Attributes:
        name: Display name; lookups are case-insensitive
        depends_on: Names of tasks that must complete first, in order
        action: Zero-argument callable, None for pure aggregate tasks
        description: Shown by ``docpipe list``
        continue_on_error: Log a failing action and carry on instead of aborting
        precondition: When it returns False the action is skipped
        source: Explicit declaration or manifest registration
        invocation: Manifest invocation string (manifest tasks only)
    """

    name: str
    depends_on: list[str] = field(default_factory=list)
    action: Action | None = None
    description: str = ""
    continue_on_error: bool = False
    precondition: Callable[[], bool] | None = None
    source: TaskSource = TaskSource.DECLARED
    invocation: str | None = None

    @property
    def key(self) -> str:
        return task_key(self.name)


@dataclass
class TaskResult:
    """Result of one executed task."""

    name: str
    status: TaskStatus
    duration_seconds: float = 0.0
    error: str | None = None


@dataclass
class RunContext:
    """Per-run state.

    Holds the set of completed tasks and the results so far. A fresh context
    per ``run`` keeps separate runs in the same process from leaking state.
    """

    completed: set[str] = field(default_factory=set)
    results: list[TaskResult] = field(default_factory=list)
    messages: list[str] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return all(r.status != TaskStatus.FAILED for r in self.results)

    def record(self, result: TaskResult) -> None:
        self.results.append(result)
        if result.status != TaskStatus.FAILED:
            self.completed.add(task_key(result.name))

    def note(self, message: str) -> None:
        self.messages.append(message)

    def report(self) -> list[tuple[str, str, str]]:
        """Build time report rows: (task, status, duration)."""
        rows = [
            (r.name, r.status.value, f"{r.duration_seconds:.2f}s")
            for r in self.results
        ]
        total = sum(r.duration_seconds for r in self.results)
        rows.append(("Total", "", f"{total:.2f}s"))
        return rows


def task_key(name: str) -> str:
    """Normalize a task name for lookup."""
    return name.strip().casefold()


def format_task_name(name: str, name_format: NameFormat | None) -> str:
    """Apply the display hook to a task name.

    ``name_format`` is a template with one placeholder (``{name}``, ``{}`` or
    ``{0}``) or a callable receiving the name.
    """
    if name_format is None:
        return name
    if callable(name_format):
        return name_format(name)
    return name_format.format(name, name=name)


class TaskGraph:
    """Registry of tasks and the runner that executes them.

    Usage:
        graph = TaskGraph()
        graph.declare_task("Clean", action=clean)
        graph.declare_task("Pages", depends_on=["Clean"], action=render)
        graph.register_manifest({"lint": "eslint ."}, invoker=run_command)
        context = graph.run(["Pages"])
    """

    def __init__(self, name_format: NameFormat | None = None) -> None:
        """Initialize an empty graph.

        Raises:
            ValueError: If a template ``name_format`` uses a placeholder other
                than ``{name}``, ``{}`` or ``{0}``
        """
        if isinstance(name_format, str):
            try:
                format_task_name("Build", name_format)
            except (AttributeError, KeyError, IndexError, ValueError) as e:
                raise ValueError(f"Invalid task name format {name_format!r}: {e}") from e

        self._tasks: dict[str, Task] = {}
        self.name_format = name_format

    # =========================================================================
    # Registration
    # =========================================================================

    def declare_task(
        self,
        name: str,
        depends_on: Iterable[str] = (),
        action: Action | None = None,
        description: str = "",
        continue_on_error: bool = False,
        precondition: Callable[[], bool] | None = None,
    ) -> Task:
        """Declare a task.

        Raises:
            DuplicateTaskError: If a task with this name is already declared
            ValueError: If the name is blank
        """
        if not name or not name.strip():
            raise ValueError("Task name must not be empty")

        key = task_key(name)
        if key in self._tasks:
            raise DuplicateTaskError(name)

        task = Task(
            name=name.strip(),
            depends_on=list(depends_on),
            action=action,
            description=description,
            continue_on_error=continue_on_error,
            precondition=precondition,
        )
        self._tasks[key] = task
        return task

    def register_manifest(
        self,
        manifest: Mapping[str, str],
        invoker: Invoker,
        command_template: str | None = None,
    ) -> list[Task]:
        """Declare one task per manifest entry not already declared.

        Call after all explicit declarations: explicit tasks win on a name
        collision and the manifest entry is ignored.

        Args:
            manifest: Sub-command name -> invocation string
            invoker: Runs a command string, raising on failure
            command_template: Command to run instead of the raw invocation,
                with ``{name}`` and ``{invocation}`` substituted

        Returns:
            The tasks that were registered
        """
        registered: list[Task] = []

        for name, invocation in manifest.items():
            key = task_key(name)
            if key in self._tasks:
                logger.debug("Manifest entry '%s' shadowed by declared task", name)
                continue

            if command_template:
                command = command_template.format(name=name, invocation=invocation)
            else:
                command = invocation

            task = Task(
                name=name,
                action=_invoke_action(invoker, command),
                description=f"Runs: {invocation}",
                source=TaskSource.MANIFEST,
                invocation=invocation,
            )
            self._tasks[key] = task
            registered.append(task)

        if registered:
            logger.debug("Registered %d manifest task(s)", len(registered))
        return registered

    # =========================================================================
    # Introspection
    # =========================================================================

    def get(self, name: str) -> Task:
        """Get a task by name.

        Raises:
            UnknownTaskError: If no such task is declared
        """
        try:
            return self._tasks[task_key(name)]
        except KeyError:
            raise UnknownTaskError(name) from None

    def __contains__(self, name: str) -> bool:
        return task_key(name) in self._tasks

    def tasks(self) -> list[Task]:
        """All tasks, declared ones first then manifest ones, in registration order."""
        return list(self._tasks.values())

    # =========================================================================
    # Resolution
    # =========================================================================

    def plan(self, targets: Iterable[str]) -> list[Task]:
        """Resolve the execution order for the requested targets.

        Raises:
            UnknownTaskError: If a target or dependency is not declared
            CyclicDependencyError: If a dependency chain loops back on itself
        """
        order: list[Task] = []
        visited: set[str] = set()
        path: list[str] = []

        def visit(name: str, required_by: str | None) -> None:
            key = task_key(name)
            if key not in self._tasks:
                raise UnknownTaskError(name, required_by)

            task = self._tasks[key]
            if key in visited:
                return

            on_path = [task_key(n) for n in path]
            if key in on_path:
                start = on_path.index(key)
                raise CyclicDependencyError([*path[start:], task.name])

            path.append(task.name)
            for dependency in task.depends_on:
                visit(dependency, task.name)
            path.pop()

            visited.add(key)
            order.append(task)

        for target in targets:
            visit(target, None)

        return order

    # =========================================================================
    # Execution
    # =========================================================================

    def run(
        self,
        targets: Iterable[str],
        context: RunContext | None = None,
    ) -> RunContext:
        """Run the targets and everything they depend on.

        Each task runs at most once. A failing action aborts the run unless
        the task is continue-on-error, in which case the failure is logged
        and the task counts as done.

        Args:
            targets: Task names, resolved in order
            context: Run state; tasks already completed in it are not re-run

        Returns:
            The run context with one result per executed task

        Raises:
            CyclicDependencyError: Before any task runs
            UnknownTaskError: Before any task runs
            TaskActionError: When a task fails; results so far stay in context
        """
        context = context or RunContext()
        targets = list(targets)
        plan = self.plan(targets)

        logger.debug("Execution plan: %s", " -> ".join(t.name for t in plan))

        for task in plan:
            if task.key in context.completed:
                continue
            self._execute(task, context)

        return context

    def _execute(self, task: Task, context: RunContext) -> None:
        extra = task_extra(task.name)

        if task.precondition is not None and not task.precondition():
            logger.info("Precondition false, skipping", extra=extra)
            context.note(f"{task.name}: skipped (precondition)")
            context.record(TaskResult(task.name, TaskStatus.SKIPPED))
            return

        logger.info(format_task_name(task.name, self.name_format), extra=extra)
        started = time.perf_counter()

        try:
            if task.action is not None:
                task.action()
        except Exception as e:
            duration = time.perf_counter() - started
            if task.continue_on_error:
                logger.warning("Error ignored (continue on error): %s", e, extra=extra)
                context.note(f"{task.name}: {e}")
                context.record(TaskResult(task.name, TaskStatus.RECOVERED, duration, str(e)))
                return

            logger.error("Failed: %s", e, extra=extra)
            context.record(TaskResult(task.name, TaskStatus.FAILED, duration, str(e)))
            raise TaskActionError(task.name, e) from e

        duration = time.perf_counter() - started
        context.record(TaskResult(task.name, TaskStatus.SUCCEEDED, duration))


def _invoke_action(invoker: Invoker, command: str) -> Action:
    def action() -> None:
        invoker(command)

    return action
