"""Shared pytest fixtures for docpipe tests.

Fixtures are organized by category:
- Site fixtures: A copy of the sample documentation site per test
- Configuration fixtures: Config dicts for various scenarios
- Command fixtures: Help data for the renderer
- Invocation fixtures: A recording invoker instead of real subprocesses
"""

import logging
import shutil
from pathlib import Path
from typing import Any

import pytest

from docpipe.config import DocpipeConfig, load_config
from tests.fixtures import SAMPLE_SITE_PATH

# =============================================================================
# Site Fixtures
# =============================================================================


@pytest.fixture
def sample_site(tmp_path: Path) -> Path:
    """Copy the sample site into a temporary directory and return its root."""
    site = tmp_path / "site"
    shutil.copytree(SAMPLE_SITE_PATH, site)
    return site


@pytest.fixture
def site_config(sample_site: Path) -> DocpipeConfig:
    """Load the sample site's docpipe.yaml."""
    return load_config(config_path=sample_site / "docpipe.yaml")


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture
def minimal_config() -> dict[str, Any]:
    """Return a minimal valid docpipe configuration."""
    return {
        "pages": {
            "output_dir": "docs/commands",
        }
    }


@pytest.fixture
def full_config() -> dict[str, Any]:
    """Return a complete docpipe configuration with all sections."""
    return {
        "pages": {
            "metadata": "help/export.json",
            "output_dir": "docs/reference",
            "extension": ".md",
            "description_template": "Reference for {name}",
            "keywords": ["Build", "Reference"],
            "sidebar": False,
            "sidebar_prefix": "reference",
        },
        "taxonomy": {
            "sources": ["blog/authors.yml"],
            "output_suffix": ".json",
        },
        "manifest": {
            "path": "tools.yaml",
            "key": "",
            "command": "",
            "enabled": True,
        },
        "site": {
            "build_command": "make site",
        },
        "tasks": {
            "default": "GenerateCommandPages",
            "name_format": "--- {name} ---",
            "continue_on_error": ["SyncTaxonomy"],
        },
    }


# =============================================================================
# Command Fixtures
# =============================================================================


@pytest.fixture
def exec_help() -> dict[str, Any]:
    """Return complete help data for a single command."""
    return {
        "name": "Exec",
        "synopsis": "Helper function for executing command-line programs.",
        "description": "Runs a scriptblock and checks $lastexitcode.",
        "parameters": [
            {"name": "cmd", "type": "ScriptBlock", "required": True, "position": "1"},
            {"name": "maxRetries", "type": "Int32", "default": 0},
        ],
        "examples": [
            {"code": "exec { svn info }", "remarks": "Runs svn info."},
        ],
        "related_links": ["Assert"],
    }


# =============================================================================
# Invocation Fixtures
# =============================================================================


class RecordingInvoker:
    """Invoker that records commands instead of running them."""

    def __init__(self, fail_on: set[str] | None = None) -> None:
        self.commands: list[str] = []
        self.fail_on = fail_on or set()

    def __call__(self, command: str) -> None:
        self.commands.append(command)
        if command in self.fail_on:
            raise RuntimeError(f"{command} exited with 1")


@pytest.fixture
def invoker() -> RecordingInvoker:
    """Return a recording invoker."""
    return RecordingInvoker()


# =============================================================================
# Logging Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_docpipe_logging():
    """Drop handlers the CLI attaches so later tests don't log to closed streams."""
    logger = logging.getLogger("docpipe")
    level = logger.level
    yield
    logger.handlers.clear()
    logger.setLevel(level)
