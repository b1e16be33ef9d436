"""Unit tests for the reference page renderer."""

import logging
from pathlib import Path

import pytest
import yaml

from docpipe.config import PagesConfig
from docpipe.models.reference import CommandReferenceEntry
from docpipe.templates import SIDEBAR_FILE, ReferencePageRenderer

SECTIONS = [
    "## SYNOPSIS",
    "## SYNTAX",
    "## DESCRIPTION",
    "## EXAMPLES",
    "## PARAMETERS",
    "## INPUTS",
    "## OUTPUTS",
    "## NOTES",
    "## RELATED LINKS",
    "## VERSION",
]


def split_page(text: str) -> tuple[dict, str]:
    """Split a page into parsed front matter and body."""
    assert text.startswith("---\n")
    _, front, body = text.split("---\n", 2)
    return yaml.safe_load(front), body


class TestReferencePageRenderer:
    """Tests for ReferencePageRenderer."""

    @pytest.fixture
    def renderer(self) -> ReferencePageRenderer:
        """Create a renderer instance."""
        return ReferencePageRenderer(module_name="psake", module_version="4.9.1")

    @pytest.fixture
    def exec_entry(self, exec_help: dict) -> CommandReferenceEntry:
        return CommandReferenceEntry.from_dict(exec_help)

    def test_one_file_per_entry(self, renderer: ReferencePageRenderer, tmp_path: Path) -> None:
        """Test each entry becomes <name>.mdx."""
        entries = [CommandReferenceEntry(name="Task"), CommandReferenceEntry(name="Assert")]

        written = renderer.render(entries, tmp_path / "commands")

        assert [p.name for p in written] == ["Assert.mdx", "Task.mdx"]
        assert all(p.exists() for p in written)

    def test_front_matter(
        self,
        renderer: ReferencePageRenderer,
        exec_entry: CommandReferenceEntry,
        tmp_path: Path,
    ) -> None:
        """Test front matter is derived from the entry name and fixed values."""
        page = renderer.render_page(exec_entry, tmp_path)
        front, _ = split_page(page.text)

        assert front["id"] == "Exec"
        assert front["title"] == "Exec"
        assert front["description"] == 'Help page for the PowerShell Psake "Exec" command'
        assert front["keywords"] == ["PowerShell", "Psake", "Help", "Documentation"]
        assert front["custom_edit_url"] is None

    def test_section_order(
        self,
        renderer: ReferencePageRenderer,
        exec_entry: CommandReferenceEntry,
        tmp_path: Path,
    ) -> None:
        """Test sections appear in the fixed order between banner and footer."""
        body = renderer.render_page(exec_entry, tmp_path).body

        positions = [body.index(heading) for heading in SECTIONS]
        assert positions == sorted(positions)
        assert body.startswith(":::info This page was generated")
        assert body.rstrip().endswith("(https://github.com/psake/psake).*")
        assert "[psake 4.9.1]" in body

    def test_content_rendered(
        self,
        renderer: ReferencePageRenderer,
        exec_entry: CommandReferenceEntry,
        tmp_path: Path,
    ) -> None:
        """Test entry fields land in their sections."""
        body = renderer.render_page(exec_entry, tmp_path).body

        assert "Helper function for executing command-line programs." in body
        assert "```powershell\nExec -cmd <ScriptBlock> [-maxRetries <Int32>]\n```" in body
        assert "### EXAMPLE 1\n\n```powershell\nexec { svn info }\n```\n\nRuns svn info." in body
        assert "### -cmd" in body
        assert "Type: ScriptBlock" in body
        assert "Required: True" in body
        assert "Default value: 0" in body
        assert "Default value: None" in body

    def test_related_links_rewritten(
        self,
        renderer: ReferencePageRenderer,
        exec_entry: CommandReferenceEntry,
        tmp_path: Path,
    ) -> None:
        """Test bare related links are filled in before the page is final."""
        body = renderer.render_page(exec_entry, tmp_path).body

        assert "[Assert](Assert.mdx)" in body
        assert "[Assert]()" not in body

    def test_full_markdown_related_link_kept(
        self,
        renderer: ReferencePageRenderer,
        tmp_path: Path,
    ) -> None:
        """Test related links that are already markdown links pass through."""
        entry = CommandReferenceEntry(name="Exec", related_links=["[Online](https://psake.dev)"])

        body = renderer.render_page(entry, tmp_path).body

        assert "[Online](https://psake.dev)" in body

    def test_deterministic_output(
        self,
        renderer: ReferencePageRenderer,
        exec_entry: CommandReferenceEntry,
        tmp_path: Path,
    ) -> None:
        """Test rendering twice produces byte-identical files."""
        out_dir = tmp_path / "commands"

        first = [p.read_bytes() for p in renderer.render([exec_entry], out_dir)]
        sidebar_first = (out_dir / SIDEBAR_FILE).read_bytes()
        second = [p.read_bytes() for p in renderer.render([exec_entry], out_dir)]

        assert first == second
        assert sidebar_first == (out_dir / SIDEBAR_FILE).read_bytes()

    def test_partial_entry_renders_empty_sections(
        self,
        renderer: ReferencePageRenderer,
        tmp_path: Path,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """Test a name-only entry still produces a page with every section."""
        entry = CommandReferenceEntry.from_dict({"name": "Foo"})

        with caplog.at_level(logging.WARNING, logger="docpipe"):
            written = renderer.render([entry], tmp_path)

        front, body = split_page(written[0].read_text())
        assert front["id"] == "Foo"
        assert front["title"] == "Foo"
        for heading in SECTIONS:
            assert heading in body
        assert "## SYNOPSIS\n\n## SYNTAX\n\n## DESCRIPTION\n\n## EXAMPLES\n\n## PARAMETERS\n" in body
        assert "Foo has incomplete help" in caplog.text

    def test_page_ends_with_single_newline(
        self,
        renderer: ReferencePageRenderer,
        exec_entry: CommandReferenceEntry,
        tmp_path: Path,
    ) -> None:
        text = renderer.render_page(exec_entry, tmp_path).text

        assert text.endswith("*\n")
        assert not text.endswith("\n\n")

    def test_custom_config(self, tmp_path: Path) -> None:
        """Test extension, description, keywords and blocks come from config."""
        config = PagesConfig(
            extension=".md",
            description_template="Reference for {name}",
            keywords=["Build"],
            banner="",
            footer="",
            sidebar=False,
        )
        renderer = ReferencePageRenderer(config)
        entry = CommandReferenceEntry(name="Task", related_links=["Exec"])

        written = renderer.render([entry], tmp_path)
        front, body = split_page(written[0].read_text())

        assert written[0].name == "Task.md"
        assert front["description"] == "Reference for Task"
        assert front["keywords"] == ["Build"]
        assert body.lstrip().startswith("## SYNOPSIS")
        assert "[Exec](Exec.md)" in body
        assert not (tmp_path / SIDEBAR_FILE).exists()

    def test_footer_without_version(self, tmp_path: Path) -> None:
        """Test the footer reads cleanly when the module version is unknown."""
        renderer = ReferencePageRenderer(module_name="psake")

        body = renderer.render_page(CommandReferenceEntry(name="Task"), tmp_path).body

        assert "[psake](https://github.com/psake/psake)" in body


class TestSidebar:
    """Tests for the sidebar index."""

    def test_sidebar_lists_pages_in_order(self, tmp_path: Path) -> None:
        renderer = ReferencePageRenderer()
        entries = [CommandReferenceEntry(name="Task"), CommandReferenceEntry(name="Assert")]

        path = renderer.write_sidebar(entries, tmp_path)
        text = path.read_text()

        assert path.name == "docusaurus.sidebar.js"
        assert "module.exports = [" in text
        assert text.index('"commands/Assert"') < text.index('"commands/Task"')

    def test_sidebar_without_prefix(self, tmp_path: Path) -> None:
        renderer = ReferencePageRenderer(PagesConfig(sidebar_prefix=""))

        text = renderer.write_sidebar([CommandReferenceEntry(name="Exec")], tmp_path).read_text()

        assert '  "Exec",' in text
