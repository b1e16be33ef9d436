"""Cross-reference link rewriting for generated pages.

Exported help lists related commands as bare markdown links whose target is
empty, e.g. ``[Exec]()``. The site resolves page links by file name, so each
bare link gets ``Label`` plus the page extension as its target.

The rewrite is a pure text transform. It does not check that the target page
exists; a link to a command that was not generated stays broken.
"""

import re

DEFAULT_EXTENSION = ".mdx"

# [Label]() with a non-empty label and an empty (or blank) target
BARE_LINK_RE = re.compile(r"\[(?P<label>[^\[\]\n]*\S[^\[\]\n]*)\]\(\s*\)")


def count_bare_links(text: str) -> int:
    """Count links whose target is empty."""
    return len(BARE_LINK_RE.findall(text))


def rewrite_links(text: str, extension: str = DEFAULT_EXTENSION) -> str:
    """Fill in the target of every bare link.

    Args:
        text: Rendered page text
        extension: Suffix appended to the label to form the target

    Returns:
        Text with ``[Label]()`` replaced by ``[Label](Label<extension>)``.
        Links that already have a target are left untouched.

    Examples:
        >>> rewrite_links("See [Exec]()")
        'See [Exec](Exec.mdx)'
        >>> rewrite_links("[Exec](already-set)")
        '[Exec](already-set)'
    """

    def fill(match: re.Match[str]) -> str:
        label = match.group("label")
        return f"[{label}]({label.strip()}{extension})"

    return BARE_LINK_RE.sub(fill, text)
