"""Unit tests for command metadata providers and reference entities."""

import json
from pathlib import Path

import pytest

from docpipe.errors import MalformedSourceError, MissingSourceError
from docpipe.metadata import FileMetadataProvider, MappingMetadataProvider
from docpipe.models.reference import CommandParameter, CommandReferenceEntry


class TestCommandReferenceEntry:
    """Tests for CommandReferenceEntry."""

    def test_from_dict_full(self, exec_help: dict) -> None:
        """Test converting complete help data."""
        entry = CommandReferenceEntry.from_dict(exec_help)

        assert entry.name == "Exec"
        assert entry.parameters[0].name == "cmd"
        assert entry.parameters[0].required is True
        assert entry.parameters[1].default == "0"
        assert entry.examples[0].remarks == "Runs svn info."
        assert entry.related_links == ["Assert"]
        assert entry.missing_fields() == []

    def test_name_only_entry(self) -> None:
        """Test an entry with only a name reports its missing fields."""
        entry = CommandReferenceEntry.from_dict({"name": "Foo"})

        assert entry.synopsis == ""
        assert entry.parameters == []
        assert entry.missing_fields() == ["synopsis", "description", "parameters", "examples"]

    def test_name_from_key(self) -> None:
        """Test the mapping key is used when data has no name."""
        entry = CommandReferenceEntry.from_dict({"synopsis": "x"}, name="Task")

        assert entry.name == "Task"

    def test_missing_name_rejected(self) -> None:
        """Test an entry must have a name."""
        with pytest.raises(ValueError):
            CommandReferenceEntry.from_dict({"synopsis": "x"})

    def test_description_paragraph_list(self) -> None:
        """Test list-valued help text is joined into paragraphs."""
        entry = CommandReferenceEntry.from_dict(
            {"name": "Foo", "description": ["First.", "Second."]}
        )

        assert entry.description == "First.\n\nSecond."

    def test_syntax_derived_from_parameters(self) -> None:
        """Test syntax is derived when the help has none."""
        entry = CommandReferenceEntry(
            name="Assert",
            parameters=[
                CommandParameter(name="conditionToCheck", required=True),
                CommandParameter(name="failureMessage", type="String"),
            ],
        )

        assert entry.syntax_lines() == [
            "Assert -conditionToCheck <Object> [-failureMessage <String>]"
        ]

    def test_explicit_syntax_wins(self) -> None:
        entry = CommandReferenceEntry(
            name="Exec",
            syntax=["Exec [-cmd] <ScriptBlock>"],
            parameters=[CommandParameter(name="cmd")],
        )

        assert entry.syntax_lines() == ["Exec [-cmd] <ScriptBlock>"]

    def test_parameter_dash_stripped(self) -> None:
        param = CommandParameter.from_dict({"name": "-taskList", "aliases": "t"})

        assert param.name == "taskList"
        assert param.aliases == ["t"]


class TestMappingMetadataProvider:
    """Tests for MappingMetadataProvider."""

    def test_commands_sorted(self) -> None:
        provider = MappingMetadataProvider({"Task": {}, "Assert": None, "Exec": {"synopsis": "x"}})

        assert provider.list_commands() == ["Assert", "Exec", "Task"]
        assert [e.name for e in provider.entries()] == ["Assert", "Exec", "Task"]

    def test_get_unknown_raises(self) -> None:
        provider = MappingMetadataProvider({})

        with pytest.raises(KeyError):
            provider.get_entry("Nope")


class TestFileMetadataProvider:
    """Tests for FileMetadataProvider."""

    def test_load_yaml_export(self, sample_site: Path) -> None:
        """Test loading the sample site's help export."""
        provider = FileMetadataProvider(sample_site / "build" / "commands.yaml")

        assert provider.module_name == "psake"
        assert provider.module_version == "4.9.1"
        assert provider.list_commands() == ["Assert", "Exec", "FormatTaskName"]
        assert provider.get_entry("Exec").syntax[0].startswith("Exec [-cmd]")

    def test_load_json_list(self, tmp_path: Path) -> None:
        """Test a JSON export with a list of commands."""
        path = tmp_path / "commands.json"
        path.write_text(json.dumps({"commands": [{"name": "Task", "synopsis": "Defines a task"}]}))

        provider = FileMetadataProvider(path)

        assert provider.get_entry("Task").synopsis == "Defines a task"
        assert provider.module_version == ""

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(MissingSourceError):
            FileMetadataProvider(tmp_path / "absent.yaml")

    def test_malformed_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "commands.yaml"
        path.write_text("commands: [unclosed\n")

        with pytest.raises(MalformedSourceError):
            FileMetadataProvider(path)

    def test_undecodable_file(self, tmp_path: Path) -> None:
        path = tmp_path / "commands.yaml"
        path.write_bytes(b"commands:\n  Exec:\n    synopsis: \xff\xfe\n")

        with pytest.raises(MalformedSourceError):
            FileMetadataProvider(path)

    def test_list_item_without_name(self, tmp_path: Path) -> None:
        """Test the provider never yields an entry without a name."""
        path = tmp_path / "commands.yaml"
        path.write_text("commands:\n  - synopsis: nameless\n")

        with pytest.raises(MalformedSourceError, match="no name"):
            FileMetadataProvider(path)
