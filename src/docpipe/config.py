"""docpipe configuration system.

Configuration is YAML-based with a handful of CLI overrides.
Supports environment variable substitution (${VAR}) in config files.

Configuration file discovery (in priority order):
1. CLI --config argument
2. ./.docpipe/config.yaml
3. ./docpipe.yaml

Relative paths in the config resolve against the site root: the directory
that holds docpipe.yaml (the parent of .docpipe/ for the nested form), or the
current directory when no config file was found.
"""

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

DEFAULT_BANNER = """:::info This page was generated
Contributions are welcome in [psake](https://github.com/psake/psake).
:::"""

DEFAULT_FOOTER = """## VERSION

*This page was generated using comment-based help in [{module} {version}](https://github.com/psake/psake).*"""

# =============================================================================
# Configuration Dataclasses
# =============================================================================


@dataclass
class PagesConfig:
    """Command reference page generation.

    Attributes:
        metadata: Exported command help (YAML or JSON)
        output_dir: Directory the pages are written to (wiped by Clean)
        extension: Page file extension; also the suffix the link rewriter appends
        description_template: Front matter description, ``{name}`` is the command
        keywords: Front matter keywords, emitted in this order
        banner: Block placed before the first section
        footer: Block placed after the last section (``{module}``, ``{version}``)
        sidebar: Whether to write docusaurus.sidebar.js next to the pages
        sidebar_prefix: Doc id prefix used in the sidebar
    """

    metadata: str = "build/commands.yaml"
    output_dir: str = "docs/commands"
    extension: str = ".mdx"
    description_template: str = 'Help page for the PowerShell Psake "{name}" command'
    keywords: list[str] = field(
        default_factory=lambda: ["PowerShell", "Psake", "Help", "Documentation"]
    )
    banner: str = DEFAULT_BANNER
    footer: str = DEFAULT_FOOTER
    sidebar: bool = True
    sidebar_prefix: str = "commands"

    def __post_init__(self) -> None:
        """Validate page configuration."""
        if not self.extension.startswith("."):
            raise ValueError(f"Page extension must start with '.': {self.extension}")
        if "{name}" not in self.description_template:
            raise ValueError("description_template must contain a {name} placeholder")


@dataclass
class TaxonomyConfig:
    """Blog taxonomy synchronization.

    Attributes:
        sources: Key-to-record YAML files, each optional
        output_suffix: Suffix that replaces the source suffix for the output file
    """

    sources: list[str] = field(
        default_factory=lambda: ["blog/authors.yml", "blog/tags.yml"]
    )
    output_suffix: str = ".json"

    def __post_init__(self) -> None:
        """Validate taxonomy configuration."""
        if not self.output_suffix.startswith("."):
            raise ValueError(f"Output suffix must start with '.': {self.output_suffix}")


@dataclass
class ManifestConfig:
    """Sub-command manifest used to auto-register tasks.

    Attributes:
        path: Manifest file (package.json by default)
        key: Object inside the manifest holding name -> invocation
        command: Template for the command each manifest task runs.
            ``{name}`` and ``{invocation}`` are substituted; empty runs the
            invocation string as-is.
        enabled: Whether manifest tasks are registered at all
    """

    path: str = "package.json"
    key: str = "scripts"
    command: str = "npm run {name}"
    enabled: bool = True


@dataclass
class SiteConfig:
    """The opaque site bundler (Build Driver).

    Attributes:
        build_command: Shell command that turns the content directory into a site
    """

    build_command: str = "npm run build"


@dataclass
class TasksConfig:
    """Task runner settings.

    Attributes:
        default: Task run when no target is given
        name_format: Template for the "starting task" line, one placeholder
        continue_on_error: Task names whose failures are logged and ignored
    """

    default: str = "Build"
    name_format: str = "Executing {name}"
    continue_on_error: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        """Validate task runner settings."""
        if self.name_format:
            try:
                self.name_format.format("Build", name="Build")
            except (AttributeError, KeyError, IndexError, ValueError) as e:
                raise ValueError(
                    f"name_format may only use a {{name}} or {{}} placeholder: {self.name_format!r}"
                ) from e


@dataclass
class DocpipeConfig:
    """Top-level docpipe configuration.

    Attributes:
        pages: Command reference generation
        taxonomy: Blog taxonomy sync
        manifest: Sub-command manifest
        site: Site bundler
        tasks: Task runner settings
    """

    pages: PagesConfig = field(default_factory=PagesConfig)
    taxonomy: TaxonomyConfig = field(default_factory=TaxonomyConfig)
    manifest: ManifestConfig = field(default_factory=ManifestConfig)
    site: SiteConfig = field(default_factory=SiteConfig)
    tasks: TasksConfig = field(default_factory=TasksConfig)

    # Runtime state (set by load_config)
    _config_path: Path | None = field(default=None, repr=False)
    _root: Path | None = field(default=None, repr=False)

    @property
    def config_path(self) -> Path | None:
        """Get the path to the config file that was loaded."""
        return self._config_path

    @property
    def root(self) -> Path:
        """Site root that relative paths resolve against."""
        return self._root if self._root is not None else Path.cwd()

    def resolve(self, path: str | Path) -> Path:
        """Resolve a configured path against the site root."""
        candidate = Path(path)
        if candidate.is_absolute():
            return candidate
        return self.root / candidate


# =============================================================================
# Environment Variable Substitution
# =============================================================================

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)\}")


def substitute_env_vars(value: Any) -> Any:
    """Substitute environment variables in config values.

    Supports ${VAR} syntax, recursively through dicts and lists.

    Raises:
        ValueError: If a referenced variable is not set
    """
    if isinstance(value, str):

        def replace_var(match: re.Match[str]) -> str:
            var_name = match.group(1)
            env_value = os.environ.get(var_name)
            if env_value is None:
                raise ValueError(f"Environment variable not set: {var_name}")
            return env_value

        return _ENV_VAR_RE.sub(replace_var, value)

    elif isinstance(value, dict):
        return {k: substitute_env_vars(v) for k, v in value.items()}

    elif isinstance(value, list):
        return [substitute_env_vars(v) for v in value]

    return value


# =============================================================================
# Config File Discovery
# =============================================================================


def find_config_file(start_path: Path | None = None) -> Path | None:
    """Find configuration file in standard locations.

    Search order:
    1. ./.docpipe/config.yaml
    2. ./docpipe.yaml

    Args:
        start_path: Starting directory for search (defaults to cwd)

    Returns:
        Path to config file if found, None otherwise
    """
    if start_path is None:
        start_path = Path.cwd()

    start_path = start_path.resolve()

    candidates = [
        start_path / ".docpipe" / "config.yaml",
        start_path / "docpipe.yaml",
    ]

    for candidate in candidates:
        if candidate.exists():
            return candidate

    return None


def _root_for(config_file: Path) -> Path:
    parent = config_file.resolve().parent
    if parent.name == ".docpipe":
        return parent.parent
    return parent


# =============================================================================
# Config Loading
# =============================================================================


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ValueError(f"Config section '{name}' must be a mapping")
    return section


def load_config_from_dict(data: dict[str, Any]) -> DocpipeConfig:
    """Load configuration from a dictionary.

    Unknown keys inside a section are rejected so typos surface early.

    Args:
        data: Configuration dictionary

    Returns:
        DocpipeConfig instance
    """
    data = substitute_env_vars(data)

    config = DocpipeConfig()
    sections = {
        "pages": PagesConfig,
        "taxonomy": TaxonomyConfig,
        "manifest": ManifestConfig,
        "site": SiteConfig,
        "tasks": TasksConfig,
    }

    for name, section_cls in sections.items():
        if name not in data:
            continue
        section_data = _section(data, name)
        try:
            setattr(config, name, section_cls(**section_data))
        except TypeError as e:
            raise ValueError(f"Invalid keys in config section '{name}': {e}") from e

    return config


def load_config(
    config_path: Path | None = None,
    auto_discover: bool = True,
) -> DocpipeConfig:
    """Load configuration from file.

    Args:
        config_path: Explicit path to config file
        auto_discover: Whether to search for config file if not specified

    Returns:
        DocpipeConfig instance

    Raises:
        FileNotFoundError: If config_path specified but doesn't exist
    """
    if config_path is not None:
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        found_path: Path | None = config_path
    elif auto_discover:
        found_path = find_config_file()
    else:
        found_path = None

    if found_path is not None:
        with open(found_path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Config file must contain a mapping: {found_path}")
        config = load_config_from_dict(data)
        config._config_path = found_path
        config._root = _root_for(found_path)
    else:
        config = DocpipeConfig()

    return config


def create_default_config() -> str:
    """Create default configuration YAML content.

    Returns:
        YAML string with default configuration and comments
    """
    return '''# docpipe configuration
# Paths are relative to the directory holding this file.

# Command reference pages
pages:
  metadata: "build/commands.yaml"   # exported command help (YAML or JSON)
  output_dir: "docs/commands"       # wiped and regenerated on every run
  extension: ".mdx"
  description_template: 'Help page for the PowerShell Psake "{name}" command'
  keywords: ["PowerShell", "Psake", "Help", "Documentation"]
  sidebar: true
  sidebar_prefix: "commands"

# Blog taxonomy sync (authors.yml -> authors.json, tags.yml -> tags.json)
taxonomy:
  sources:
    - "blog/authors.yml"
    - "blog/tags.yml"
  output_suffix: ".json"

# Every script in the manifest becomes a task
manifest:
  path: "package.json"
  key: "scripts"
  command: "npm run {name}"

# Site bundler
site:
  build_command: "npm run build"

tasks:
  default: "Build"
  name_format: "Executing {name}"
  # continue_on_error: ["SyncTaxonomy"]
'''
