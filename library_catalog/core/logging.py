"""
Library Catalog - Structured Logging Module

Every module logs through get_logger(__name__) with snake_case event names
and key/value context, e.g.::

    logger.warning("advanced_search_parse_failed", query=q, position=7)

The CLI configures output once from Settings (LIBCAT_LOG_LEVEL,
LIBCAT_LOG_JSON). Library code never configures logging itself.

Patterns Applied:
- One-time configure_logging() guarded by a module flag
- Console renderer for terminals, JSON renderer for log shipping
- Log records go to stderr so CLI result lines on stdout stay parseable

Anti-Patterns Avoided:
- structlog.configure() called per get_logger() - PREVENTED via _configured flag
- Silently falling back to INFO on a misspelt level name
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, Any, Final

import structlog
from structlog.typing import EventDict

from library_catalog.core.exceptions import ConfigurationError

if TYPE_CHECKING:
    from library_catalog.core.config import Settings

SERVICE_NAME: Final[str] = "library-catalog"

LOG_LEVELS: Final[dict[str, int]] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

_configured: bool = False


def add_service_info(
    logger: logging.Logger,  # noqa: ARG001 - Required by structlog interface
    method_name: str,  # noqa: ARG001 - Required by structlog interface
    event_dict: EventDict,
) -> EventDict:
    """Stamp every event with ``service="library-catalog"``."""
    event_dict["service"] = SERVICE_NAME
    return event_dict


def resolve_log_level(name: str) -> int:
    """Map a level name (any case) to its numeric value.

    Raises:
        ConfigurationError: If the name is not a standard level.
    """
    try:
        return LOG_LEVELS[name.strip().upper()]
    except KeyError:
        raise ConfigurationError(
            f"Unknown log level {name!r}; expected one of {', '.join(LOG_LEVELS)}"
        ) from None


def configure_logging(log_level: str = "INFO", json_output: bool = False) -> None:
    """Configure structlog and stdlib logging; later calls are no-ops.

    Args:
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL.
        json_output: Render JSON lines instead of the console format.

    Raises:
        ConfigurationError: If ``log_level`` is not a standard level.
    """
    global _configured

    if _configured:
        return

    level = resolve_log_level(log_level)
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=level)

    renderer: Any = (
        structlog.processors.JSONRenderer(ensure_ascii=False)
        if json_output
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            add_service_info,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )

    _configured = True


def configure_from_settings(settings: Settings) -> None:
    """configure_logging() driven by LIBCAT_LOG_LEVEL / LIBCAT_LOG_JSON."""
    configure_logging(log_level=settings.log_level, json_output=settings.log_json)


def get_logger(name: str) -> Any:
    """Return a lazily bound structlog logger for ``name``."""
    return structlog.get_logger(name)


def reset_logging() -> None:
    """Forget the one-time configuration; for tests."""
    global _configured
    _configured = False
    structlog.reset_defaults()
