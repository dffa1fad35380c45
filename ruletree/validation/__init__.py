"""
Rule tree validation engine and its building blocks.

The engine itself lives in ``ruletree.validation.engine``; this package
namespace only re-exports the exception hierarchy and value primitives so
that collaborators (formats, settings) can import them without pulling in
the engine.
"""

from .exceptions import (
    ConfigurationError,
    ConversionError,
    ErrorCategory,
    ErrorSeverity,
    RuleTreeError,
    RuleValidationError,
)
from .models import MISSING, WILDCARD, is_missing

__all__ = [
    'RuleTreeError',
    'RuleValidationError',
    'ConfigurationError',
    'ConversionError',
    'ErrorSeverity',
    'ErrorCategory',
    'MISSING',
    'WILDCARD',
    'is_missing',
]
