"""Documentation build pipeline.

Wires the components into the task graph the CLI runs:

    Build
    ├── GenerateCommandPages
    │   └── Clean
    ├── SyncTaxonomy
    └── BuildSite

plus one task per script in the sub-command manifest (package.json).
"""

import logging
import shutil
from collections.abc import Callable
from pathlib import Path

from docpipe.config import DocpipeConfig
from docpipe.metadata import FileMetadataProvider, MetadataProvider
from docpipe.models.taxonomy import SyncResult, SyncStatus
from docpipe.taxonomy import TaxonomySynchronizer
from docpipe.tasks.graph import TaskGraph, task_key
from docpipe.tasks.invoke import CommandInvoker
from docpipe.tasks.manifest import load_manifest
from docpipe.templates.renderer import ReferencePageRenderer
from docpipe.utils.logging import get_logger

logger = get_logger(__name__)

CLEAN = "Clean"
GENERATE_PAGES = "GenerateCommandPages"
SYNC_TAXONOMY = "SyncTaxonomy"
BUILD_SITE = "BuildSite"
BUILD = "Build"


class DocsPipeline:
    """The site's build steps and the task graph that orders them.

    Each step is a plain method so it can be run on its own (the CLI's
    ``pages`` and ``sync`` commands) or as a task action.

    Usage:
        pipeline = DocsPipeline(config)
        graph = pipeline.build_graph()
        graph.run(["Build"])
    """

    def __init__(
        self,
        config: DocpipeConfig | None = None,
        provider: MetadataProvider | None = None,
        invoker: Callable[[str], None] | None = None,
    ) -> None:
        """Initialize the pipeline.

        Args:
            config: docpipe configuration (defaults if None)
            provider: Command metadata; read from ``pages.metadata`` when None
            invoker: Runs external commands; CommandInvoker in the site root when None
        """
        self.config = config or DocpipeConfig()
        self._provider = provider
        self.invoker = invoker or CommandInvoker(cwd=self.config.root)

    @property
    def pages_dir(self) -> Path:
        return self.config.resolve(self.config.pages.output_dir)

    @property
    def provider(self) -> MetadataProvider:
        """Command metadata, loaded on first use."""
        if self._provider is None:
            self._provider = FileMetadataProvider(self.config.resolve(self.config.pages.metadata))
        return self._provider

    # =========================================================================
    # Steps
    # =========================================================================

    def clean(self) -> None:
        """Remove previously generated pages."""
        out_dir = self.pages_dir.resolve()
        if out_dir == self.config.root.resolve() or out_dir in self.config.root.resolve().parents:
            raise ValueError(f"Refusing to clean {out_dir}: it contains the site root")

        if out_dir.exists():
            shutil.rmtree(out_dir)
            logger.info("Removed %s", out_dir)
        out_dir.mkdir(parents=True, exist_ok=True)

    def generate_pages(self) -> list[Path]:
        """Render one reference page per exported command."""
        provider = self.provider
        renderer = ReferencePageRenderer(
            self.config.pages,
            module_name=provider.module_name,
            module_version=provider.module_version,
        )
        return renderer.render(provider.entries(), self.pages_dir)

    def sync_taxonomy(self, strict: bool = False) -> list[SyncResult]:
        """Convert the blog taxonomy files for the content editor."""
        synchronizer = TaxonomySynchronizer(self.config.taxonomy.output_suffix)
        sources = [self.config.resolve(s) for s in self.config.taxonomy.sources]
        results = synchronizer.sync(sources, strict=strict)

        written = sum(1 for r in results if r.status == SyncStatus.WRITTEN)
        logger.structured(
            logging.INFO,
            f"Taxonomy sync: {written} of {len(results)} file(s) written",
            written=written,
            failed=sum(1 for r in results if r.status == SyncStatus.FAILED),
            total=len(results),
        )
        return results

    def build_site(self) -> None:
        """Hand the finished content to the site bundler."""
        self.invoker(self.config.site.build_command)

    # =========================================================================
    # Graph
    # =========================================================================

    def build_graph(self, include_manifest: bool = True) -> TaskGraph:
        """Declare the built-in tasks, then fill in manifest tasks.

        Args:
            include_manifest: Register tasks from the sub-command manifest

        Returns:
            Task graph ready to run
        """
        graph = TaskGraph(name_format=self.config.tasks.name_format or None)
        tolerant = {task_key(name) for name in self.config.tasks.continue_on_error}

        def declare(name: str, **kwargs) -> None:
            graph.declare_task(name, continue_on_error=task_key(name) in tolerant, **kwargs)

        declare(
            CLEAN,
            action=self.clean,
            description="Remove previously generated command pages",
        )
        declare(
            GENERATE_PAGES,
            depends_on=[CLEAN],
            action=self.generate_pages,
            description="Render one reference page per exported command",
        )
        declare(
            SYNC_TAXONOMY,
            action=self.sync_taxonomy,
            description="Convert blog authors and tags for the content editor",
        )
        declare(
            BUILD_SITE,
            action=self.build_site,
            description=f"Run the site bundler ({self.config.site.build_command})",
        )
        declare(
            BUILD,
            depends_on=[GENERATE_PAGES, SYNC_TAXONOMY, BUILD_SITE],
            description="Regenerate content and build the site",
        )

        if include_manifest and self.config.manifest.enabled:
            manifest = load_manifest(
                self.config.resolve(self.config.manifest.path),
                key=self.config.manifest.key,
            )
            graph.register_manifest(
                manifest,
                invoker=self.invoker,
                command_template=self.config.manifest.command or None,
            )

        return graph
