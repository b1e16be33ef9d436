"""Test fixtures for docpipe.

Sample Sites:
- sample_site: A documentation site with exported command help, blog
  taxonomy files and a package.json manifest
"""

from pathlib import Path

FIXTURES_DIR = Path(__file__).parent

SAMPLE_SITE_PATH = FIXTURES_DIR / "sample_site"
