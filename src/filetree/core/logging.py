"""Structured logging for scan runs.

structlog events are rendered by stdlib handlers, one per configured
output. Console outputs go quiet while a spinner is live; file outputs
always receive everything. Each scan binds a short run ID that is
attached to every record it emits.
"""

from __future__ import annotations

import logging
import sys
from contextvars import ContextVar
from pathlib import Path
from typing import TYPE_CHECKING, Any
from uuid import uuid4

import structlog

if TYPE_CHECKING:
    from filetree.config.models import LoggingConfig, LogOutputConfig

_run_id: ContextVar[str | None] = ContextVar("run_id", default=None)

# First file output of the active configuration; shown when a scan aborts.
_log_file_path: Path | None = None


def get_run_id() -> str | None:
    return _run_id.get()


def set_run_id(run_id: str | None = None) -> str:
    """Set or generate the scan run correlation ID."""
    rid = run_id or uuid4().hex[:12]
    _run_id.set(rid)
    return rid


def clear_run_id() -> None:
    _run_id.set(None)


def get_log_file_path() -> Path | None:
    return _log_file_path


def _add_run_id(
    _logger: structlog.types.WrappedLogger,
    _method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    if rid := get_run_id():
        event_dict["run_id"] = rid
    return event_dict


_PRE_CHAIN: list[structlog.types.Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.processors.add_log_level,
    structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S", key="timestamp"),
    _add_run_id,  # type: ignore[list-item]
]


class ConsoleSuppressingFilter(logging.Filter):
    """Drops console records while a Rich live display owns the terminal."""

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: ARG002
        from filetree.core.progress import is_console_suppressed

        return not is_console_suppressed()


def _handler_for(output: LogOutputConfig, root_level: str) -> logging.Handler:
    handler: logging.Handler
    if output.destination in ("stderr", "stdout"):
        stream = sys.stderr if output.destination == "stderr" else sys.stdout
        handler = logging.StreamHandler(stream)
        handler.addFilter(ConsoleSuppressingFilter())
        renderer: structlog.types.Processor = (
            structlog.processors.JSONRenderer()
            if output.format == "json"
            else structlog.dev.ConsoleRenderer(
                colors=stream.isatty(), pad_event_to=0, pad_level=False
            )
        )
    else:
        path = Path(output.destination)
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(path, mode="a")
        renderer = (
            structlog.processors.JSONRenderer()
            if output.format == "json"
            else structlog.dev.ConsoleRenderer(colors=False, pad_event_to=0, pad_level=False)
        )

    handler.setLevel(getattr(logging, output.level or root_level))
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(processor=renderer, foreign_pre_chain=_PRE_CHAIN)
    )
    return handler


def configure_logging(config: LoggingConfig) -> None:
    """Install one handler per configured output on the root logger.

    Safe to call again; previous handlers are closed and replaced.
    """
    global _log_file_path

    root_level = getattr(logging, config.level)
    structlog.configure(
        processors=[*_PRE_CHAIN, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.make_filtering_bound_logger(root_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    root_logger = logging.getLogger()
    for old in root_logger.handlers:
        old.close()
    root_logger.handlers.clear()
    root_logger.setLevel(root_level)
    # Engine statement echo is noise at INFO
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    _log_file_path = next(
        (Path(o.destination) for o in config.outputs if o.destination not in ("stderr", "stdout")),
        None,
    )
    for output in config.outputs:
        root_logger.addHandler(_handler_for(output, config.level))


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    logger = structlog.get_logger()
    if name:
        logger = logger.bind(logger=name)
    return logger  # type: ignore[no-any-return]
