"""
Structured logging setup using structlog.

Library modules obtain loggers with ``structlog.get_logger(__name__)`` and
emit key-value events. Applications embedding ruletree call
``setup_structured_logging()`` once to route those events through the stdlib
logging root handler as JSON (default) or human-readable console lines.
"""

import logging
import logging.config
from typing import Optional

import structlog

from ..config.settings import Settings, get_settings

APPLICATION_NAME = 'ruletree'


def build_processors(log_format: str) -> list:
    """Processor chain shared by every configured logger."""
    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="ISO"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if log_format == 'console':
        processors.append(structlog.dev.ConsoleRenderer(colors=False))
    else:
        processors.append(structlog.processors.JSONRenderer())
    return processors


def setup_structured_logging(
    settings: Optional[Settings] = None,
    cache_loggers: bool = True
) -> structlog.stdlib.BoundLogger:
    """
    Configure structlog and the stdlib root logger.

    Args:
        settings: Settings to apply, defaults to the process-wide settings
        cache_loggers: Cache bound loggers on first use

    Returns:
        Configured structured logger for the application
    """
    settings = settings or get_settings()

    structlog.configure(
        processors=build_processors(settings.log_format),
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=cache_loggers,
    )

    logging.config.dictConfig({
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {
            'plain': {
                'format': '%(message)s'
            }
        },
        'handlers': {
            'console': {
                'class': 'logging.StreamHandler',
                'formatter': 'plain',
                'stream': 'ext://sys.stdout'
            }
        },
        'loggers': {
            '': {
                'handlers': ['console'],
                'level': settings.log_level,
            }
        }
    })

    logger = structlog.get_logger(APPLICATION_NAME)
    logger.info(
        "Structured logging initialized",
        log_level=settings.log_level,
        log_format=settings.log_format,
        trace_rules=settings.trace_rules,
        metrics_enabled=settings.metrics_enabled
    )
    return logger


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger, defaulting to the application logger name."""
    return structlog.get_logger(name or APPLICATION_NAME)
