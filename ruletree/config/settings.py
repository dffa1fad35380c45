"""
Environment-driven settings for ruletree.

Settings are read from the process environment after loading an optional
``.env`` file with python-dotenv (existing environment variables win). They
control the ambient behaviour around validation: structured logging output,
rule tracing default, and metrics collection.

Environment variables:
    RULETREE_LOG_LEVEL: stdlib log level name (default INFO)
    RULETREE_LOG_FORMAT: ``json`` or ``console`` (default json)
    RULETREE_TRACE_RULES: default for the ``debug`` option (default false)
    RULETREE_METRICS_ENABLED: record prometheus counters (default true)
"""

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

import structlog
from dotenv import find_dotenv, load_dotenv

from ..validation.exceptions import ConfigurationError

logger = structlog.get_logger(__name__)

ENV_PREFIX = 'RULETREE_'

VALID_LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')
VALID_LOG_FORMATS = ('json', 'console')

TRUE_VALUES = ('true', '1', 'yes', 'on')
FALSE_VALUES = ('false', '0', 'no', 'off', '')


@dataclass(frozen=True)
class Settings:
    log_level: str = 'INFO'
    log_format: str = 'json'
    trace_rules: bool = False
    metrics_enabled: bool = True


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in TRUE_VALUES:
        return True
    if value in FALSE_VALUES:
        return False
    raise ConfigurationError(
        message=f"{name} must be a boolean, got '{raw}'",
        error_code="INVALID_SETTING",
        config_key=name,
        config_source="environment"
    )


def _parse_choice(name: str, raw: str, choices: tuple) -> str:
    if raw not in choices:
        raise ConfigurationError(
            message=f"{name} must be one of {', '.join(choices)}, got '{raw}'",
            error_code="INVALID_SETTING",
            config_key=name,
            config_source="environment"
        )
    return raw


def load_settings(env_file: Optional[str] = None) -> Settings:
    """
    Load settings from the environment and an optional ``.env`` file.

    Args:
        env_file: Path to a .env file; the nearest .env is used when omitted

    Returns:
        Frozen settings instance

    Raises:
        ConfigurationError: If a variable holds an invalid value
    """
    dotenv_path = env_file or find_dotenv(usecwd=True)
    if dotenv_path:
        load_dotenv(dotenv_path, override=False)

    defaults = Settings()
    settings = Settings(
        log_level=_parse_choice(
            f'{ENV_PREFIX}LOG_LEVEL',
            os.getenv(f'{ENV_PREFIX}LOG_LEVEL', defaults.log_level).upper(),
            VALID_LOG_LEVELS
        ),
        log_format=_parse_choice(
            f'{ENV_PREFIX}LOG_FORMAT',
            os.getenv(f'{ENV_PREFIX}LOG_FORMAT', defaults.log_format).lower(),
            VALID_LOG_FORMATS
        ),
        trace_rules=_parse_bool(
            f'{ENV_PREFIX}TRACE_RULES',
            os.getenv(f'{ENV_PREFIX}TRACE_RULES', 'false')
        ),
        metrics_enabled=_parse_bool(
            f'{ENV_PREFIX}METRICS_ENABLED',
            os.getenv(f'{ENV_PREFIX}METRICS_ENABLED', 'true')
        ),
    )

    logger.debug(
        "Settings loaded",
        log_level=settings.log_level,
        log_format=settings.log_format,
        trace_rules=settings.trace_rules,
        metrics_enabled=settings.metrics_enabled,
        env_file=dotenv_path or None
    )
    return settings


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Process-wide settings, loaded once; ``get_settings.cache_clear()`` reloads."""
    return load_settings()
