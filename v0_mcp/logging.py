import logging
import sys
import time
import uuid
from collections.abc import Iterator
from contextlib import contextmanager

from loguru import logger

_LOG_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<magenta>{extra[tool]}</magenta>#{extra[request_id]} | <level>{message}</level>"
)

_NOISY_LOGGERS = ("httpcore", "httpx", "mcp")
_LOGURU_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class _InterceptHandler(logging.Handler):
    """Forward stdlib records (the v0 client, httpx, mcp) into loguru, keeping the caller location."""

    def emit(self, record: logging.LogRecord) -> None:
        level: str | int = record.levelno
        if record.levelname in _LOGURU_LEVELS:
            level = record.levelname

        depth = 2
        frame = logging.currentframe()
        while frame is not None and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(log_level: str = "INFO") -> None:
    """Configure loguru as the sole logging handler.

    - Removes default loguru handler
    - Adds a stderr handler whose format carries the tool name and request id (stdout carries the
      MCP JSON-RPC stream and must never receive log output)
    - Intercepts stdlib logging via _InterceptHandler
    - Quiets noisy third-party loggers
    """
    logger.remove()

    logger.configure(extra={"tool": "-", "request_id": "-"})
    logger.add(
        sys.stderr,
        format=_LOG_FORMAT,
        level=log_level.upper(),
        colorize=False,
    )

    logging.basicConfig(handlers=[_InterceptHandler()], level=0, force=True)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


@contextmanager
def log_tool_call(tool_name: str) -> Iterator[None]:
    """Log a tool invocation with a unique request ID, outcome, and duration."""
    rid = uuid.uuid4().hex[:8]

    with logger.contextualize(tool=tool_name, request_id=rid):
        logger.info("tool {tool} called", tool=tool_name)
        start = time.perf_counter()
        try:
            yield
        except Exception as exc:
            duration_ms = (time.perf_counter() - start) * 1000
            logger.error(
                "tool {tool} -> FAILED ({duration_ms:.0f}ms): {error}",
                tool=tool_name,
                duration_ms=duration_ms,
                error=exc,
            )
            raise
        duration_ms = (time.perf_counter() - start) * 1000
        logger.info(
            "tool {tool} -> ok ({duration_ms:.0f}ms)",
            tool=tool_name,
            duration_ms=duration_ms,
        )
