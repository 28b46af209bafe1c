"""Structured logging setup using structlog.

One shared processor chain (context vars, log level, timestamps, stack
info) feeds either a coloured ``ConsoleRenderer`` for local use or a
``JSONRenderer`` for production.  The caller decides which:
``load_config()`` sets ``logging.json`` from ``APP_ENV``.

Context variables carry the per-pass and per-request fields: the
coordinator binds ``pass_id``/``source`` for the length of a pass, the
request middleware binds ``generation``.  Provider modules log plain events
and inherit those fields.

The stdlib root logger is routed through the same formatter so uvicorn
records look like ours.  httpx and Python-Markdown are held at WARNING;
at INFO and DEBUG they narrate every tarball request and every extension
load.
"""

import logging
import sys

import structlog

_CHATTY_LIBRARIES = ("httpx", "httpcore", "MARKDOWN")


def configure_logging(log_level: str = "INFO", json_output: bool = False) -> structlog.BoundLogger:
    """Configure structlog for the wiki server and the ingestion CLI.

    Args:
        log_level: Logging level name (DEBUG, INFO, WARNING, ERROR).
        json_output: Render JSON lines instead of the console format.

    Returns:
        A configured structlog BoundLogger.
    """
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if json_output:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=[*shared_processors, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(log_level.upper())
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            *shared_processors,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level.upper())

    for name in _CHATTY_LIBRARIES:
        logging.getLogger(name).setLevel(max(logging.WARNING, root_logger.level))

    return structlog.get_logger()


def get_logger(name: str) -> structlog.BoundLogger:
    """Return a structlog logger bound with ``logger_name=name``.

    Falls back to :func:`configure_logging` defaults when nothing has
    configured structlog yet (tests, ad-hoc scripts).
    """
    if not structlog.is_configured():
        configure_logging()

    return structlog.get_logger(logger_name=name)
