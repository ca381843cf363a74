"""Logging for the analysis pipeline.

The parser, resolver and extractor log through module loggers and never
configure handlers themselves. ``validspec analyze`` calls
setup_logging() before reading the source file; logs go to stderr so the
JSON descriptors printed on stdout stay machine-readable.
"""

import logging
import sys

LOG_FORMAT = "%(asctime)s - %(levelname)s - [%(name)s] - %(message)s"
LOG_DATEFMT = "%Y-%m-%dT%H:%M:%S"

# Grammar binding loggers stay at WARNING, even under --verbose
_SUPPRESSED_LOGGERS = (
    "tree_sitter",
    "tree_sitter_rust",
)

_configured = False


def setup_logging(level: str = "INFO") -> None:
    """Send root logging to stderr at ``level``; only the first call applies."""
    global _configured  # noqa: PLW0603
    if _configured:
        return
    _configured = True

    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format=LOG_FORMAT,
        datefmt=LOG_DATEFMT,
        stream=sys.stderr,
    )

    for name in _SUPPRESSED_LOGGERS:
        lg = logging.getLogger(name)
        lg.setLevel(logging.WARNING)
