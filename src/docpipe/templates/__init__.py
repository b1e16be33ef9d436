"""docpipe template rendering.

Jinja2 templates for the command reference pages and their sidebar index.
Templates are designed to produce identical output for identical input.
"""

from docpipe.templates.renderer import SIDEBAR_FILE, ReferencePageRenderer

__all__ = ["ReferencePageRenderer", "SIDEBAR_FILE"]
