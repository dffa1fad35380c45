"""
Validation options and their marshmallow loading schema.

Options arrive as a plain mapping (``{'filter': True, 'conditions': {...}}``),
as keyword arguments, or as a ready ``ValidationOptions`` instance. Mappings
are loaded through ``ValidationOptionsSchema`` so that wrongly typed options
fail loudly as configuration errors instead of silently changing behaviour.
"""

import dataclasses
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from marshmallow import EXCLUDE, Schema, fields, post_load, validates
from marshmallow import ValidationError as MarshmallowValidationError

from ..config.settings import get_settings
from ..formats.builtin import default_format_registry
from ..formats.registry import FormatRegistry
from .conditions import ConditionRegistry
from .exceptions import ConfigurationError


@dataclass
class ValidationOptions:
    """
    Options for one ``validate`` call.

    Attributes:
        filter: Remove mapping keys not named by a wildcard-free rule map
        debug: Trace every rule application through the structured logger
        convert: Replace validated values with their format converter output
        conditions: Named predicates used by conditional rule alternatives
        formats: Format registry consulted by the ``format`` constraint
    """
    filter: bool = False
    debug: bool = False
    convert: bool = False
    conditions: ConditionRegistry = field(default_factory=ConditionRegistry)
    formats: FormatRegistry = field(default_factory=lambda: default_format_registry)

    def __post_init__(self):
        if not isinstance(self.conditions, ConditionRegistry):
            self.conditions = ConditionRegistry(self.conditions)
        if self.formats is None:
            self.formats = default_format_registry


class ValidationOptionsSchema(Schema):
    """Loads a mapping of validation options into ``ValidationOptions``."""

    class Meta:
        unknown = EXCLUDE

    filter = fields.Boolean(load_default=False)
    debug = fields.Boolean(load_default=None, allow_none=True)
    convert = fields.Boolean(load_default=False)
    conditions = fields.Raw(load_default=None, allow_none=True)
    formats = fields.Raw(load_default=None, allow_none=True)

    @validates('conditions')
    def validate_conditions(self, value, **kwargs):
        if value is None:
            return
        if not isinstance(value, Mapping):
            raise MarshmallowValidationError("conditions must be a mapping of name to predicate")
        not_callable = sorted(str(name) for name, predicate in value.items() if not callable(predicate))
        if not_callable:
            raise MarshmallowValidationError(f"conditions are not callable: {', '.join(not_callable)}")

    @validates('formats')
    def validate_formats(self, value, **kwargs):
        if value is not None and not isinstance(value, FormatRegistry):
            raise MarshmallowValidationError("formats must be a FormatRegistry")

    @post_load
    def make_options(self, data: Dict[str, Any], **kwargs) -> ValidationOptions:
        debug = data['debug']
        if debug is None:
            debug = get_settings().trace_rules
        return ValidationOptions(
            filter=data['filter'],
            debug=debug,
            convert=data['convert'],
            conditions=data['conditions'] or {},
            formats=data['formats'] or default_format_registry,
        )


_options_schema = ValidationOptionsSchema()


def load_options(options: Optional[Mapping] = None) -> ValidationOptions:
    """
    Load validation options from a mapping.

    Raises:
        ConfigurationError: If an option has the wrong type
    """
    try:
        return _options_schema.load(dict(options or {}))
    except MarshmallowValidationError as e:
        raise ConfigurationError(
            message=f"Invalid validation options: {e.messages}",
            error_code="INVALID_OPTIONS",
            config_source="options",
            context={'field_errors': e.messages},
            cause=e
        ) from e


def resolve_options(options: Any = None, **overrides) -> ValidationOptions:
    """Normalize the accepted option forms into a ``ValidationOptions`` instance."""
    if isinstance(options, ValidationOptions):
        if not overrides:
            return options
        merged = {f.name: getattr(options, f.name) for f in dataclasses.fields(options)}
        merged.update(overrides)
        return load_options(merged)
    if options is not None and not isinstance(options, Mapping):
        raise ConfigurationError(
            message=f"options must be a mapping or ValidationOptions, got {type(options).__name__}",
            error_code="INVALID_OPTIONS",
            config_source="options"
        )
    merged = dict(options or {})
    merged.update(overrides)
    return load_options(merged)
