"""Command reference entities.

This module contains the entities behind the command reference pages:
- CommandParameter: One parameter of an exported command
- CommandExample: One usage example
- CommandReferenceEntry: Help metadata for a single exported command
- FrontMatter: Page metadata block consumed by the site generator
- GeneratedPage: A rendered page before and after link rewriting
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

# Optional fields whose absence is reported as a partial entry
CORE_FIELDS = ("synopsis", "description", "parameters", "examples")


def _text(value: Any) -> str:
    """Normalize a help text value (None, str, or list of paragraphs)."""
    if value is None:
        return ""
    if isinstance(value, list):
        return "\n\n".join(str(v).strip() for v in value if v is not None).strip()
    return str(value).strip()


@dataclass
class CommandParameter:
    """Single command parameter.

    Attributes:
        name: Parameter name without the leading dash
        type: Parameter type name
        required: Whether the parameter is mandatory
        default: Default value, None when there is none
        description: Help text
        position: Positional index or "Named"
        aliases: Alternative names
        pipeline_input: Whether the parameter accepts pipeline input
    """

    name: str
    type: str = "Object"
    required: bool = False
    default: str | None = None
    description: str = ""
    position: str = "Named"
    aliases: list[str] = field(default_factory=list)
    pipeline_input: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CommandParameter":
        """Create a parameter from exported help data.

        Raises:
            ValueError: If the parameter has no name
        """
        name = str(data.get("name") or "").lstrip("-")
        if not name:
            raise ValueError("Command parameter without a name")
        default = data.get("default")
        aliases = data.get("aliases") or []
        if isinstance(aliases, str):
            aliases = [aliases]
        return cls(
            name=name,
            type=str(data.get("type") or "Object"),
            required=bool(data.get("required", False)),
            default=None if default is None else str(default),
            description=_text(data.get("description")),
            position=str(data.get("position") or "Named"),
            aliases=[str(a) for a in aliases],
            pipeline_input=bool(data.get("pipeline_input", False)),
        )


@dataclass
class CommandExample:
    """Single usage example.

    Attributes:
        code: Example code
        remarks: Explanation shown under the code
        title: Optional heading, defaults to "EXAMPLE n"
    """

    code: str
    remarks: str = ""
    title: str | None = None

    @classmethod
    def from_value(cls, value: Any) -> "CommandExample":
        """Create an example from a bare string or a mapping."""
        if isinstance(value, dict):
            return cls(
                code=_text(value.get("code")),
                remarks=_text(value.get("remarks")),
                title=value.get("title"),
            )
        return cls(code=_text(value))


@dataclass
class CommandReferenceEntry:
    """Help metadata for a single exported command.

    Only ``name`` is mandatory; every other field may be absent, in which
    case the corresponding page section is rendered empty.

    Attributes:
        name: Command name, also the page id and file name
        synopsis: One-line summary
        syntax: Syntax lines; derived from parameters when empty
        description: Long description
        parameters: Parameters in declaration order
        examples: Examples in order
        inputs: Pipeline input description
        outputs: Output description
        notes: Additional notes
        related_links: Names of related commands (bare links)
    """

    name: str
    synopsis: str = ""
    syntax: list[str] = field(default_factory=list)
    description: str = ""
    parameters: list[CommandParameter] = field(default_factory=list)
    examples: list[CommandExample] = field(default_factory=list)
    inputs: str = ""
    outputs: str = ""
    notes: str = ""
    related_links: list[str] = field(default_factory=list)

    _missing: tuple[str, ...] = field(default=(), repr=False, compare=False)

    def __post_init__(self) -> None:
        """Validate the entry."""
        if not self.name or not self.name.strip():
            raise ValueError("Command reference entry without a name")

    @classmethod
    def from_dict(cls, data: dict[str, Any], name: str | None = None) -> "CommandReferenceEntry":
        """Create an entry from exported help data.

        Args:
            data: Help data for one command
            name: Name to use when the data itself carries none (mapping key)

        Raises:
            ValueError: If no name is available
        """
        entry_name = str(data.get("name") or name or "").strip()

        syntax = data.get("syntax") or []
        if isinstance(syntax, str):
            syntax = [syntax]

        related = data.get("related_links") or []
        if isinstance(related, str):
            related = [related]

        missing = tuple(f for f in CORE_FIELDS if not data.get(f))

        return cls(
            name=entry_name,
            synopsis=_text(data.get("synopsis")),
            syntax=[str(s).strip() for s in syntax],
            description=_text(data.get("description")),
            parameters=[CommandParameter.from_dict(p) for p in data.get("parameters") or []],
            examples=[CommandExample.from_value(e) for e in data.get("examples") or []],
            inputs=_text(data.get("inputs")),
            outputs=_text(data.get("outputs")),
            notes=_text(data.get("notes")),
            related_links=[str(r).strip() for r in related],
            _missing=missing,
        )

    def missing_fields(self) -> list[str]:
        """Return the core help fields this entry lacks."""
        if self._missing:
            return list(self._missing)
        return [f for f in CORE_FIELDS if not getattr(self, f)]

    def syntax_lines(self) -> list[str]:
        """Return syntax lines, deriving one from the parameters if needed."""
        if self.syntax:
            return list(self.syntax)
        if not self.parameters:
            return []

        parts = [self.name]
        for param in self.parameters:
            token = f"-{param.name} <{param.type}>"
            parts.append(token if param.required else f"[{token}]")
        return [" ".join(parts)]


@dataclass
class FrontMatter:
    """Page metadata block.

    Attributes:
        id: Document id
        title: Page title
        description: Page description
        keywords: Keywords, emitted in order
        hide_title: Site option
        hide_table_of_contents: Site option
        custom_edit_url: None disables the "edit this page" link
    """

    id: str
    title: str
    description: str
    keywords: tuple[str, ...] = ()
    hide_title: bool = False
    hide_table_of_contents: bool = False
    custom_edit_url: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to an ordered dictionary for serialization."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "keywords": list(self.keywords),
            "hide_title": self.hide_title,
            "hide_table_of_contents": self.hide_table_of_contents,
            "custom_edit_url": self.custom_edit_url,
        }

    def to_yaml(self) -> str:
        """Serialize deterministically (field order kept, no key sorting)."""
        return yaml.safe_dump(
            self.to_dict(),
            sort_keys=False,
            default_flow_style=False,
            allow_unicode=True,
            width=1000,
        )


@dataclass
class GeneratedPage:
    """A rendered reference page.

    Attributes:
        path: Output file path
        front_matter: Page metadata
        body: Markdown body
    """

    path: Path
    front_matter: FrontMatter
    body: str

    @property
    def text(self) -> str:
        """Full file content: front matter fence followed by the body."""
        return f"---\n{self.front_matter.to_yaml()}---\n\n{self.body.rstrip()}\n"
