"""Preflight validation.

Checks, before a run, that the inputs the pipeline reads and the external
command it hands off to are in place. Missing required items fail the check;
missing optional ones (taxonomy files, the manifest) are warnings, matching
how the pipeline itself treats them.
"""

import shlex
import shutil
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from docpipe.config import DocpipeConfig


@dataclass
class PreflightCheck:
    """Result of checking a single input or tool.

    Attributes:
        name: What was checked
        available: Whether it is present
        required: Whether its absence fails the run
        path: Resolved file or executable path
        version: Tool version if applicable
        message: Status message (human-readable context)
    """

    name: str
    available: bool
    required: bool = True
    path: str | None = None
    version: str | None = None
    message: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "name": self.name,
            "available": self.available,
            "required": self.required,
            "path": self.path,
            "version": self.version,
            "message": self.message,
        }


@dataclass
class PreflightResult:
    """Result of preflight validation.

    Attributes:
        success: Whether all required items are available
        checks: Individual check results
        errors: Messages for missing required items
        warnings: Messages for missing optional items
    """

    success: bool = True
    checks: list[PreflightCheck] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def add_check(self, check: PreflightCheck) -> None:
        """Add a check result."""
        self.checks.append(check)

        if not check.available:
            if check.required:
                self.success = False
                self.errors.append(f"Required: {check.name} ({check.message})")
            else:
                self.warnings.append(f"Optional: {check.name} ({check.message})")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "success": self.success,
            "checks": [c.to_dict() for c in self.checks],
            "errors": self.errors,
            "warnings": self.warnings,
        }


class PreflightChecker:
    """Validates pipeline inputs and the site build command.

    Usage:
        result = PreflightChecker().check_all(config)
        if not result.success:
            raise typer.Exit(1)
    """

    def __init__(self, timeout: int = 10) -> None:
        """Initialize preflight checker.

        Args:
            timeout: Timeout in seconds for version checks
        """
        self.timeout = timeout

    def check_file(self, name: str, path: Path, required: bool) -> PreflightCheck:
        """Check that an input file exists."""
        if path.is_file():
            return PreflightCheck(name=name, available=True, required=required, path=str(path))
        return PreflightCheck(
            name=name,
            available=False,
            required=required,
            message=f"not found: {path}",
        )

    def get_command_version(self, executable: str) -> str | None:
        """Get the first line of ``<executable> --version``, None on failure."""
        try:
            result = subprocess.run(
                [executable, "--version"],
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except (OSError, subprocess.TimeoutExpired):
            return None

        if result.returncode != 0:
            return None
        output = result.stdout.strip() or result.stderr.strip()
        return output.split("\n")[0] if output else None

    def check_command(self, name: str, command: str, required: bool = True) -> PreflightCheck:
        """Check that the executable of a command string is on PATH."""
        args = shlex.split(command)
        if not args:
            return PreflightCheck(name=name, available=False, required=required, message="empty command")

        path = shutil.which(args[0])
        if path is None:
            return PreflightCheck(
                name=name,
                available=False,
                required=required,
                message=f"'{args[0]}' not found in PATH",
            )

        return PreflightCheck(
            name=name,
            available=True,
            required=required,
            path=path,
            version=self.get_command_version(path),
        )

    def check_all(
        self,
        config: DocpipeConfig,
        skip_pages: bool = False,
        skip_site: bool = False,
    ) -> PreflightResult:
        """Run every check the configured pipeline needs.

        Args:
            config: docpipe configuration
            skip_pages: Don't require the command metadata file
            skip_site: Don't require the site build command

        Returns:
            PreflightResult
        """
        result = PreflightResult()

        if not skip_pages:
            result.add_check(
                self.check_file(
                    "command metadata",
                    config.resolve(config.pages.metadata),
                    required=True,
                )
            )

        for source in config.taxonomy.sources:
            result.add_check(
                self.check_file(f"taxonomy {Path(source).name}", config.resolve(source), required=False)
            )

        if config.manifest.enabled:
            result.add_check(
                self.check_file("sub-command manifest", config.resolve(config.manifest.path), required=False)
            )

        if not skip_site:
            result.add_check(self.check_command("site build command", config.site.build_command))

        return result
