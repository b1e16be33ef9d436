"""External command invocation.

Manifest tasks and the site build step run shell-style command strings.
Commands are split with shlex and run without a shell, in the site root,
with output streamed to the terminal.
"""

import logging
import shlex
import subprocess
from pathlib import Path

from docpipe.errors import CommandInvocationError

logger = logging.getLogger(__name__)


class CommandInvoker:
    """Runs command strings synchronously.

    Usage:
        invoker = CommandInvoker(cwd=config.root)
        invoker("npm run build")
    """

    def __init__(self, cwd: Path | None = None) -> None:
        self.cwd = cwd

    def __call__(self, command: str) -> None:
        """Run a command and wait for it.

        Raises:
            CommandInvocationError: If the command is empty, cannot be
                started, or exits non-zero
        """
        args = shlex.split(command)
        if not args:
            raise CommandInvocationError(command, "empty command")

        logger.debug("Running: %s (cwd: %s)", command, self.cwd or ".")

        try:
            result = subprocess.run(args, cwd=self.cwd, check=False)
        except FileNotFoundError as e:
            raise CommandInvocationError(command, f"executable not found: {args[0]}") from e
        except OSError as e:
            raise CommandInvocationError(command, str(e)) from e

        if result.returncode != 0:
            raise CommandInvocationError(command, "non-zero exit", exit_code=result.returncode)
