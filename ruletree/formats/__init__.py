"""
Format registries and the built-in format library.
"""

from .builtin import (
    BUILTIN_CONVERTERS,
    BUILTIN_VALIDATORS,
    create_default_format_registry,
    default_format_registry,
)
from .registry import FormatRegistry

__all__ = [
    'FormatRegistry',
    'BUILTIN_VALIDATORS',
    'BUILTIN_CONVERTERS',
    'create_default_format_registry',
    'default_format_registry',
]
