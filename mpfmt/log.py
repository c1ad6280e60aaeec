"""
Structured logging setup using structlog on top of stdlib logging.

Mpfmt modules log through ``structlog.wrap_logger(logging.getLogger(__name__))``, so their events
are ordinary stdlib records under the "mpfmt" logger hierarchy. An unconfigured host therefore sees
nothing below WARNING. Applications that want the events rendered call setup_logging() once at
startup, or attach their own handlers to the "mpfmt" logger.
"""

# Standard library -----------------------------------------------------------------------------------------------------
import logging
import sys
from typing import Literal

# Third-party ----------------------------------------------------------------------------------------------------------
import structlog

Renderer = Literal["console", "json"]

LOGGER_NAME = "mpfmt"


# Methods --------------------------------------------------------------------------------------------------------------

def setup_logging(level: str = "WARNING", *, renderer: Renderer = "console"):
    """
    Configure structlog and a stderr handler on the "mpfmt" logger.

    Replaces handlers a previous call installed and stops propagation to the root logger,
    so every event is written once.

    Args:
        level: Standard logging level name; "DEBUG" shows every extraction and rendering.
        renderer: "console" for human-readable lines, "json" for one JSON object per line.

    Raises:
        ValueError: If level or renderer is unknown.
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"unknown log level: {level!r}")
    if renderer == "console":
        final = structlog.dev.ConsoleRenderer(colors=False)
    elif renderer == "json":
        final = structlog.processors.JSONRenderer()
    else:
        raise ValueError(f"renderer must be 'console' or 'json', not {renderer!r}")

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(structlog.stdlib.ProcessorFormatter(
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, final],
    ))

    logger = logging.getLogger(LOGGER_NAME)
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.setLevel(numeric_level)
    logger.propagate = False
