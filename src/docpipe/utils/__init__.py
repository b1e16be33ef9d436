"""docpipe utility modules.

- logging: Standardized logging with human/verbose/JSON modes
- preflight: Input file and external tool availability checks
"""

from docpipe.utils.logging import get_logger, setup_logging
from docpipe.utils.preflight import PreflightChecker, PreflightResult

__all__ = [
    "get_logger",
    "setup_logging",
    "PreflightChecker",
    "PreflightResult",
]
