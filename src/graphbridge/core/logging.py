# src/graphbridge/core/logging.py
"""Structured logging setup for the graphbridge CLI and embedding hosts.

The walkers log through module-level ``structlog.get_logger(__name__)``
loggers and never configure anything themselves. configure_logging() wires
structlog into stdlib logging once, so walker events and third-party records
(Dynaconf, pydantic) share one renderer:

    configure_logging(level="DEBUG")            # console lines on stderr
    configure_logging(json_output=True)         # one JSON object per event

Output always goes to stderr: ``graphbridge scaffold`` and ``graphbridge
prune`` print their documents on stdout, and log lines must not end up
inside them. The handler looks sys.stderr up at emit time, so redirections
made after configuration (test runners, embedding hosts) are honoured.
"""

import logging
import sys
from typing import Any, TextIO

import structlog
from structlog.stdlib import ProcessorFormatter

# Libraries that log configuration chatter at DEBUG
_QUIET_LOGGERS: tuple[str, ...] = (
    "dynaconf",
    "pydantic",
)


class _CurrentStderrHandler(logging.StreamHandler):  # type: ignore[type-arg]
    """StreamHandler bound to whatever sys.stderr is when a record is emitted."""

    def __init__(self, level: int = logging.NOTSET) -> None:
        logging.Handler.__init__(self, level)

    @property
    def stream(self) -> TextIO:  # type: ignore[override]
        return sys.stderr


def _drop_formatter_bookkeeping(
    logger: logging.Logger | None,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Remove the keys ProcessorFormatter adds for its own use.

    Both keys are always present when records come through ProcessorFormatter.
    """
    del event_dict["_record"]
    del event_dict["_from_structlog"]
    return event_dict


def _resolve_level(level: int | str) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return resolved


def configure_logging(
    *,
    json_output: bool = False,
    level: int | str = "INFO",
) -> None:
    """Route structlog and stdlib logging through one stderr handler.

    Args:
        json_output: Render events as JSON lines instead of console text
        level: Root log level, as a name ("DEBUG") or a logging constant

    Raises:
        ValueError: If ``level`` is not a known level name
    """
    log_level = _resolve_level(level)

    pre_chain: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
    ]

    renderer: Any
    if json_output:
        renderer = structlog.processors.JSONRenderer(default=str)
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=[*pre_chain, ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        # configure_logging() may run more than once per process (CLI tests)
        cache_logger_on_first_use=False,
    )

    handler = _CurrentStderrHandler()
    handler.setFormatter(
        ProcessorFormatter(
            processors=[_drop_formatter_bookkeeping, structlog.processors.format_exc_info, renderer],
            foreign_pre_chain=pre_chain,
        )
    )

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(log_level)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))
