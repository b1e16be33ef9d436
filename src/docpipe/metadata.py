"""Command metadata providers.

The pipeline treats the source of command help as a black box queried by
name. Providers turn whatever the source exports into CommandReferenceEntry
objects; the renderer never sees the raw format.

Export file layout understood by FileMetadataProvider (YAML or JSON):

    module: psake
    version: 4.9.1
    commands:
      Assert:
        synopsis: ...
        parameters:
          - name: conditionToCheck
            type: Object
            required: true
      Exec: {...}

``commands`` may also be a list of mappings that each carry a ``name``.
"""

import json
import logging
from abc import ABC, abstractmethod
from collections.abc import Iterator, Mapping
from pathlib import Path
from typing import Any

import yaml

from docpipe.errors import MalformedSourceError, MissingSourceError
from docpipe.models.reference import CommandReferenceEntry

logger = logging.getLogger(__name__)


class MetadataProvider(ABC):
    """Abstract source of command reference metadata.

    Attributes:
        module_name: Name of the module the commands belong to
        module_version: Version of that module, shown in page footers
    """

    module_name: str = ""
    module_version: str = ""

    @abstractmethod
    def list_commands(self) -> list[str]:
        """Return exported command names in a stable order."""

    @abstractmethod
    def get_entry(self, name: str) -> CommandReferenceEntry:
        """Return the entry for one command.

        Raises:
            KeyError: If the command is not exported
        """

    def entries(self) -> Iterator[CommandReferenceEntry]:
        """Yield every entry in ``list_commands`` order."""
        for name in self.list_commands():
            yield self.get_entry(name)


class MappingMetadataProvider(MetadataProvider):
    """Provider backed by an in-memory name -> help data mapping."""

    def __init__(
        self,
        commands: Mapping[str, Mapping[str, Any] | None],
        module_name: str = "",
        module_version: str = "",
    ) -> None:
        self.module_name = module_name
        self.module_version = module_version
        self._entries: dict[str, CommandReferenceEntry] = {}

        for name, data in commands.items():
            entry = CommandReferenceEntry.from_dict(dict(data or {}), name=name)
            self._entries[entry.name] = entry

    def list_commands(self) -> list[str]:
        return sorted(self._entries)

    def get_entry(self, name: str) -> CommandReferenceEntry:
        return self._entries[name]


class FileMetadataProvider(MappingMetadataProvider):
    """Provider that reads an exported help file (YAML or JSON)."""

    def __init__(self, path: Path) -> None:
        self.path = path
        data = self._load(path)

        raw_commands = data.get("commands") or {}
        commands: dict[str, Mapping[str, Any] | None] = {}

        if isinstance(raw_commands, list):
            for index, item in enumerate(raw_commands):
                if not isinstance(item, dict) or not item.get("name"):
                    raise MalformedSourceError(path, f"command #{index} has no name")
                commands[str(item["name"])] = item
        elif isinstance(raw_commands, dict):
            for name, item in raw_commands.items():
                if item is not None and not isinstance(item, dict):
                    raise MalformedSourceError(path, f"command '{name}' is not a mapping")
                commands[str(name)] = item
        else:
            raise MalformedSourceError(path, "'commands' must be a mapping or a list")

        try:
            super().__init__(
                commands,
                module_name=str(data.get("module") or ""),
                module_version=str(data.get("version") or ""),
            )
        except ValueError as e:
            raise MalformedSourceError(path, str(e)) from e

        logger.debug("Loaded %d command(s) from %s", len(self._entries), path)

    @staticmethod
    def _load(path: Path) -> dict[str, Any]:
        if not path.exists():
            raise MissingSourceError(path)

        try:
            text = path.read_text(encoding="utf-8")
            if path.suffix.lower() == ".json":
                data = json.loads(text)
            else:
                data = yaml.safe_load(text)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError, yaml.YAMLError) as e:
            raise MalformedSourceError(path, str(e)) from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise MalformedSourceError(path, "top level must be a mapping")
        return data
