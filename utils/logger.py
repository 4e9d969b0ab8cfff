"""
utils/logger.py
───────────────
Loguru logger for the matching engine, configured once at import.

  stderr   — human-readable, tagged with the emitting component
  log file — serialized JSON lines (cascade stages, oracle failures,
             directory loads) for later analysis

Modules get a tagged logger with `component_logger("oracle")`; plain
`logger` records are tagged "engine".
"""

import sys

from loguru import logger

from config.settings import get_settings

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<magenta>{extra[component]: <9}</magenta> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> — "
    "<level>{message}</level>"
)


def setup_logger() -> None:
    settings = get_settings()
    logger.remove()
    logger.configure(extra={"component": "engine"})

    logger.add(sys.stderr, level=settings.log_level, format=CONSOLE_FORMAT, colorize=True)

    settings.log_file.parent.mkdir(parents=True, exist_ok=True)
    logger.add(
        str(settings.log_file),
        level="DEBUG",
        rotation="10 MB",
        retention="14 days",
        serialize=True,
    )


def component_logger(component: str):
    """Logger whose records carry `component` in their extra fields."""
    return logger.bind(component=component)


setup_logger()

__all__ = ["logger", "component_logger"]
