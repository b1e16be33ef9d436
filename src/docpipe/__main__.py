"""Entry point for running docpipe as a module.

Usage:
    python -m docpipe [command] [options]

Example:
    python -m docpipe run Build
    python -m docpipe list
"""

from docpipe.cli import app

if __name__ == "__main__":
    app()
