"""
Logging setup for the invoice printer.

Call configure_logging() once at app startup. The level usually comes from
INVOICE_LOG_LEVEL through level_from_name().
"""
import logging
import sys

QUIET_LOGGERS = ("httpx", "multipart", "reportlab", "uvicorn.access")


def level_from_name(name: str | None, default: int = logging.INFO) -> int:
    """'debug' -> logging.DEBUG; unknown or empty names fall back to default."""
    if not name:
        return default
    level = logging.getLevelName(name.strip().upper())
    return level if isinstance(level, int) else default


def configure_logging(level: int = logging.INFO) -> None:
    """Configure root logger with structured format."""
    fmt = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
    logging.basicConfig(
        level=level,
        format=fmt,
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(sys.stderr)],
        force=True,
    )
    # Request logs and PDF internals drown out print/history events
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
