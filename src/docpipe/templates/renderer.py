"""Reference page renderer (one page per exported command).

Renders CommandReferenceEntry objects to markdown pages using Jinja2
templates. Output is deterministic: same entries always produce the same
bytes, so re-running the pipeline on unchanged help leaves the pages as-is.
"""

import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from jinja2 import Environment, PackageLoader, select_autoescape

from docpipe.config import PagesConfig
from docpipe.models.reference import CommandReferenceEntry, FrontMatter, GeneratedPage
from docpipe.renderers.links import count_bare_links, rewrite_links

logger = logging.getLogger(__name__)

SIDEBAR_FILE = "docusaurus.sidebar.js"


class ReferencePageRenderer:
    """Renders command help to reference pages.

    Usage:
        renderer = ReferencePageRenderer(config.pages, module_version="4.9.1")
        paths = renderer.render(provider.entries(), out_dir)
    """

    def __init__(
        self,
        config: PagesConfig | None = None,
        module_name: str = "",
        module_version: str = "",
    ) -> None:
        """Initialize the renderer.

        Args:
            config: Page settings (defaults when None)
            module_name: Module name for the version footer
            module_version: Module version for the version footer
        """
        self.config = config or PagesConfig()
        self.module_name = module_name or "psake"
        self.module_version = module_version

        self._env = Environment(
            loader=PackageLoader("docpipe", "templates"),
            autoescape=select_autoescape(["html", "xml"]),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )

    def _footer(self) -> str:
        footer = self.config.footer
        if not self.module_version:
            footer = footer.replace(" {version}", "")
        footer = footer.replace("{module}", self.module_name)
        return footer.replace("{version}", self.module_version)

    def front_matter(self, entry: CommandReferenceEntry) -> FrontMatter:
        """Derive the front matter for an entry."""
        return FrontMatter(
            id=entry.name,
            title=entry.name,
            description=self.config.description_template.replace("{name}", entry.name),
            keywords=tuple(self.config.keywords),
        )

    def render_body(self, entry: CommandReferenceEntry) -> str:
        """Render the markdown body of one page (links not yet rewritten)."""
        template = self._env.get_template("command.md.j2")
        context: dict[str, Any] = {
            "entry": entry,
            "syntax": entry.syntax_lines(),
            "banner": self.config.banner.strip(),
            "footer": self._footer().strip(),
        }
        return template.render(**context)

    def render_page(self, entry: CommandReferenceEntry, out_dir: Path) -> GeneratedPage:
        """Render one entry to a page with its links rewritten.

        Missing help fields produce empty sections and a warning, never an error.
        """
        missing = entry.missing_fields()
        if missing:
            logger.warning(
                "Command %s has incomplete help (missing: %s)",
                entry.name,
                ", ".join(missing),
            )

        page = GeneratedPage(
            path=out_dir / f"{entry.name}{self.config.extension}",
            front_matter=self.front_matter(entry),
            body=self.render_body(entry),
        )

        bare = count_bare_links(page.body)
        if bare:
            page.body = rewrite_links(page.body, self.config.extension)
            logger.debug("Rewrote %d link(s) in %s", bare, page.path.name)

        return page

    def render(
        self,
        entries: Iterable[CommandReferenceEntry],
        out_dir: Path,
    ) -> list[Path]:
        """Render and write one page per entry, plus the sidebar index.

        Args:
            entries: Command entries
            out_dir: Output directory (created if missing)

        Returns:
            Paths of the written pages, in name order
        """
        ordered = sorted(entries, key=lambda e: e.name)
        out_dir.mkdir(parents=True, exist_ok=True)

        written: list[Path] = []
        for entry in ordered:
            page = self.render_page(entry, out_dir)
            page.path.write_text(page.text, encoding="utf-8", newline="\n")
            written.append(page.path)

        if self.config.sidebar:
            self.write_sidebar(ordered, out_dir)

        logger.info("Wrote %d command page(s) to %s", len(written), out_dir)
        return written

    def write_sidebar(
        self,
        entries: Iterable[CommandReferenceEntry],
        out_dir: Path,
    ) -> Path:
        """Write the sidebar index listing every generated page."""
        prefix = self.config.sidebar_prefix.strip("/")
        doc_ids = [
            f"{prefix}/{entry.name}" if prefix else entry.name
            for entry in sorted(entries, key=lambda e: e.name)
        ]
        template = self._env.get_template("sidebar.js.j2")
        sidebar_path = out_dir / SIDEBAR_FILE
        sidebar_path.write_text(template.render(doc_ids=doc_ids), encoding="utf-8", newline="\n")
        logger.debug("Wrote sidebar index %s (%d item(s))", sidebar_path, len(doc_ids))
        return sidebar_path
