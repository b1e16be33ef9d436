"""docpipe - Documentation build pipeline.

docpipe regenerates the machine-derived parts of a documentation site and then
hands the finished content to the site's own bundler:

- Command reference pages rendered from exported command help
- Bare cross-reference links filled in on the generated pages
- Blog author and tag taxonomies converted for the content editor
- A small task graph that runs these steps, plus any site scripts

Core principles:
- Reproducibility: Same input produces byte-identical output
- Re-run and overwrite: Generated files are replaced wholesale on every run
- CI/CD Compatibility: No interactive prompts, meaningful exit codes
"""

__version__ = "0.1.0"
__author__ = "docpipe Contributors"
