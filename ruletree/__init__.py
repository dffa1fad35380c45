"""
ruletree: declarative validation, normalization and filtering of nested data.

Example:
    from ruletree import validate, RuleValidationError

    rules = {
        'name': {'required': True, 'format': 'string', 'maxLength': 64},
        'tags': {'format': 'array', 'childRules': {'*': {'format': 'string'}}},
    }
    try:
        validate(payload, rules, filter=True)
    except RuleValidationError as e:
        print(e.path, e.reason)
"""

from .validation.engine import RuleEngine, validate
from .validation.conditions import ConditionRegistry
from .validation.exceptions import (
    ConfigurationError,
    ConversionError,
    ErrorCategory,
    ErrorSeverity,
    RuleTreeError,
    RuleValidationError,
)
from .validation.models import MISSING, WILDCARD
from .validation.options import ValidationOptions, load_options
from .formats import FormatRegistry, create_default_format_registry, default_format_registry
from .config import Settings, get_settings, load_settings
from .monitoring import setup_structured_logging

__version__ = '1.0.0'

__all__ = [
    'validate',
    'RuleEngine',
    'ValidationOptions',
    'load_options',
    'ConditionRegistry',
    'FormatRegistry',
    'create_default_format_registry',
    'default_format_registry',
    'RuleTreeError',
    'RuleValidationError',
    'ConfigurationError',
    'ConversionError',
    'ErrorSeverity',
    'ErrorCategory',
    'MISSING',
    'WILDCARD',
    'Settings',
    'get_settings',
    'load_settings',
    'setup_structured_logging',
]
