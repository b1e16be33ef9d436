"""Post-processing applied to rendered pages."""

from docpipe.renderers.links import count_bare_links, rewrite_links

__all__ = ["rewrite_links", "count_bare_links"]
