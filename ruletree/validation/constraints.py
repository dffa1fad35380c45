"""
Atomic constraint evaluators.

Each evaluator checks one constraint of a rule node against a value and
raises ``RuleValidationError`` on violation. The engine calls them in a fixed
order: required, format, allowedValues, range, minLength, maxLength, length.
"""

from typing import Any, Mapping

from ..formats.registry import FormatRegistry
from .exceptions import ConfigurationError, ConversionError, ErrorCategory, RuleValidationError
from .models import is_missing


def check_required(path: str, rule: Mapping, value: Any) -> None:
    if is_missing(value):
        raise RuleValidationError(path=path, reason="not defined but required", constraint="required")


def check_format(path: str, rule: Mapping, value: Any, formats: FormatRegistry, convert: bool) -> Any:
    """
    Check ``value`` against the rule's named format.

    With ``convert`` enabled and a converter registered, the converter's
    output replaces the value. Otherwise the validator must accept the raw
    value; a format that only has a converter is checked by running the
    converter and discarding its output.

    Returns:
        The converted value, or ``value`` itself when nothing was converted

    Raises:
        RuleValidationError: If the value does not match the format
        ConfigurationError: If the format is not registered at all
    """
    format_name = rule['format']
    validator = formats.lookup_validator(format_name)
    converter = formats.lookup_converter(format_name)

    if converter is not None and (convert or validator is None):
        try:
            converted = converter(value)
        except ConversionError as e:
            raise RuleValidationError(
                path=path,
                reason=f"format error: {e}",
                constraint="format",
                category=ErrorCategory.DATA_PROCESSING,
                cause=e
            ) from e
        return converted if convert else value

    if validator is not None:
        if not validator(value):
            raise RuleValidationError(
                path=path,
                reason=f"is not a valid {format_name} value",
                constraint="format"
            )
        return value

    raise ConfigurationError(
        message=f"{format_name} is not a valid format at location {path}",
        error_code="UNKNOWN_FORMAT",
        config_key=format_name,
        config_source="rules",
        context={'path': path}
    )


def _same_value(left: Any, right: Any) -> bool:
    """Equality that keeps booleans distinct from numbers."""
    if isinstance(left, bool) != isinstance(right, bool):
        return False
    return left == right


def check_allowed_values(path: str, rule: Mapping, value: Any) -> None:
    allowed_values = rule['allowedValues']
    if not any(_same_value(value, allowed) for allowed in allowed_values):
        raise RuleValidationError(
            path=path,
            reason=f"{value} isn't in list of allowedValues; {list(allowed_values)}",
            constraint="allowedValues"
        )


def check_range(path: str, rule: Mapping, value: Any) -> None:
    bounds = rule['range']
    if len(bounds) != 2:
        raise ConfigurationError(
            message=f"range at {path} must be a [min, max] pair",
            error_code="MALFORMED_RULE",
            config_source="rules",
            context={'path': path}
        )
    lower, upper = bounds
    try:
        in_range = lower <= value <= upper
    except TypeError:
        raise RuleValidationError(
            path=path,
            reason=f"{value} cannot be compared with range [{lower},{upper}]",
            constraint="range"
        ) from None
    if not in_range:
        raise RuleValidationError(
            path=path,
            reason=f"{value} is out of range. Must be in [{lower},{upper}]",
            constraint="range"
        )


def _count(path: str, value: Any, constraint: str) -> int:
    try:
        return len(value)
    except TypeError:
        raise RuleValidationError(path=path, reason="has no length", constraint=constraint) from None


def check_min_length(path: str, rule: Mapping, value: Any) -> None:
    min_length = rule['minLength']
    actual = _count(path, value, 'minLength')
    if actual < min_length:
        raise RuleValidationError(
            path=path,
            reason=f"Min length not reached. Expected at least: {min_length} actual: {actual}",
            constraint="minLength"
        )


def check_max_length(path: str, rule: Mapping, value: Any) -> None:
    max_length = rule['maxLength']
    actual = _count(path, value, 'maxLength')
    if actual > max_length:
        raise RuleValidationError(
            path=path,
            reason=f"Max length exceeded. Expected at most: {max_length} actual: {actual}",
            constraint="maxLength"
        )


def check_length(path: str, rule: Mapping, value: Any) -> None:
    length = rule['length']
    actual = _count(path, value, 'length')
    if actual != length:
        raise RuleValidationError(
            path=path,
            reason=f"Value has wrong length. Expected: {length} actual: {actual}",
            constraint="length"
        )


# Value checks in evaluation order, applied when the rule carries the key
VALUE_CHECKS = (
    ('allowedValues', check_allowed_values),
    ('range', check_range),
    ('minLength', check_min_length),
    ('maxLength', check_max_length),
    ('length', check_length),
)
