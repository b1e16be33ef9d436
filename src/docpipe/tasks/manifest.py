"""Sub-command manifest loading.

The manifest is a flat mapping of sub-command name -> invocation string; by
default the ``scripts`` object of the site's package.json. Each entry becomes
an invokable task (see TaskGraph.register_manifest).
"""

import json
import logging
from pathlib import Path

import yaml

from docpipe.errors import MalformedSourceError

logger = logging.getLogger(__name__)


def load_manifest(path: Path, key: str | None = "scripts") -> dict[str, str]:
    """Load the sub-command manifest.

    JSON is read from ``.json`` files, YAML from anything else.

    Args:
        path: Manifest file
        key: Object inside the file holding the mapping; None or empty when
            the whole file is the mapping

    Returns:
        Name -> invocation mapping in file order. Empty when the file is missing.

    Raises:
        MalformedSourceError: If the file cannot be parsed or is not a flat
            string mapping
    """
    if not path.exists():
        logger.warning("Manifest not found, no sub-command tasks registered: %s", path)
        return {}

    try:
        text = path.read_text(encoding="utf-8")
        if path.suffix.lower() == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError, yaml.YAMLError) as e:
        raise MalformedSourceError(path, str(e)) from e

    if key:
        if not isinstance(data, dict):
            raise MalformedSourceError(path, "top level must be a mapping")
        data = data.get(key) or {}

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise MalformedSourceError(path, f"'{key or 'manifest'}' must be a mapping")

    manifest: dict[str, str] = {}
    for name, invocation in data.items():
        if not isinstance(invocation, str):
            raise MalformedSourceError(path, f"invocation for '{name}' must be a string")
        manifest[str(name)] = invocation

    logger.debug("Loaded %d manifest entries from %s", len(manifest), path)
    return manifest
