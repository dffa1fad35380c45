"""
Built-in format library for rule tree validation.

Provides the named validators and converters available to the ``format``
constraint out of the box. Date parsing uses python-dateutil and e-mail
checks use email-validator, the same libraries the date/time and input
validation utilities of the application rely on.

Validators return a boolean. Converters return the converted value or
raise ``ConversionError`` with a descriptive reason, which the engine turns
into a validation error for the offending path.

Formats:
    date, string, object, array, number, boolean, geo, altitude, timestamp,
    uuidnodashes, hex, uuid, email, iso8601DateSubset, year, month, day
"""

import math
import numbers
import re
from collections.abc import Mapping
from datetime import date, datetime
from typing import Any

from dateutil import parser as dateutil_parser
from email_validator import EmailNotValidError, validate_email

from ..validation.exceptions import ConversionError
from ..validation.models import is_sequence
from .registry import FormatRegistry

# Validation constants and patterns
EMAIL_REGEX = re.compile(r'^[a-zA-Z0-9._\-]+@[a-zA-Z0-9.\-]+\.[a-zA-Z]{2,4}$')
EMAIL_MAX_LENGTH = 256

ISO8601_DATE_REGEX = re.compile(r'^([0-9]{4})-(1[0-2]|0[1-9])-(3[0-1]|0[1-9]|[1-2][0-9])$')

ALPHANUMERIC_REGEX = re.compile(r'^[A-Za-z0-9]*$')
HEX_REGEX = re.compile(r'^[A-Fa-f0-9]*$')

# Leading base-10 integer portion of a string, like parseInt
INTEGER_PREFIX_REGEX = re.compile(r'^\s*([+-]?\d+)')

GEO_RANGE = (-180, 180)
ALTITUDE_RANGE = (-4000, 10000)
YEAR_RANGE = (2000, 2099)
MONTH_RANGE = (1, 12)
DAY_RANGE = (1, 31)


# =============================================================================
# VALIDATORS
# =============================================================================

def is_date(value: Any) -> bool:
    """True for date/datetime instances and strings python-dateutil can parse."""
    if isinstance(value, (datetime, date)):
        return True
    if not isinstance(value, str) or not value.strip():
        return False
    try:
        dateutil_parser.parse(value)
        return True
    except (ValueError, OverflowError):
        return False


def is_string(value: Any) -> bool:
    return isinstance(value, str)


def is_object(value: Any) -> bool:
    return isinstance(value, Mapping)


def is_array(value: Any) -> bool:
    return is_sequence(value)


def is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return False
    return not math.isnan(value)


def is_boolean(value: Any) -> bool:
    return isinstance(value, bool)


def _in_range(value: Any, bounds: tuple) -> bool:
    return is_number(value) and bounds[0] <= value <= bounds[1]


def is_geo(value: Any) -> bool:
    return _in_range(value, GEO_RANGE)


def is_altitude(value: Any) -> bool:
    return _in_range(value, ALTITUDE_RANGE)


def is_timestamp(value: Any) -> bool:
    return is_number(value) and value >= 0


def is_uuid_without_dashes(value: Any) -> bool:
    return isinstance(value, str) and len(value) == 32 and bool(ALPHANUMERIC_REGEX.match(value))


def is_hex(value: Any) -> bool:
    return isinstance(value, str) and bool(HEX_REGEX.match(value))


def is_uuid(value: Any) -> bool:
    """36 characters with dashes at positions 8, 13, 18 and 23."""
    if not isinstance(value, str) or len(value) != 36:
        return False
    if any(value[i] != '-' for i in (8, 13, 18, 23)):
        return False
    return is_uuid_without_dashes(value.replace('-', ''))


def is_email(value: Any) -> bool:
    """
    Validate an e-mail address.

    The address must match ``EMAIL_REGEX`` and also be accepted
    by email-validator (syntax only, no DNS deliverability lookup).
    """
    if not isinstance(value, str) or len(value) > EMAIL_MAX_LENGTH:
        return False
    if not EMAIL_REGEX.match(value):
        return False
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def is_iso8601_date_subset(value: Any) -> bool:
    """Exactly ``YYYY-MM-DD`` naming a real calendar day."""
    if not isinstance(value, str) or len(value) != 10:
        return False
    if not ISO8601_DATE_REGEX.match(value):
        return False
    try:
        datetime.strptime(value, '%Y-%m-%d')
    except ValueError:
        return False
    return True


def is_year(value: Any) -> bool:
    return _in_range(value, YEAR_RANGE)


def is_month(value: Any) -> bool:
    return _in_range(value, MONTH_RANGE)


def is_day(value: Any) -> bool:
    return _in_range(value, DAY_RANGE)


# =============================================================================
# CONVERTERS
# =============================================================================

def to_number(value: Any) -> Any:
    """
    Convert a value to a number.

    Numbers pass through unchanged. Strings are parsed for their leading
    base-10 integer portion (``"42px"`` becomes 42).

    Raises:
        ConversionError: If no number can be extracted
    """
    if is_number(value):
        return value
    if isinstance(value, str):
        match = INTEGER_PREFIX_REGEX.match(value)
        if match:
            return int(match.group(1))
    raise ConversionError(f"{value} is not a number or a number string")


def to_boolean(value: Any) -> bool:
    return bool(value)


def _bounded_converter(validator, reason: str):
    def convert(value: Any) -> Any:
        number = to_number(value)
        if validator(number):
            return number
        raise ConversionError(reason)
    return convert


to_geo = _bounded_converter(is_geo, "geo values should be numbers between -180 and 180")
to_altitude = _bounded_converter(is_altitude, "altitude values should be a number between -4000 and 10000")
to_year = _bounded_converter(is_year, "year should be between 2000 and 2099")
to_month = _bounded_converter(is_month, "month should be between 1 and 12")
to_day = _bounded_converter(is_day, "day should be between 1 and 31")


def to_timestamp(value: Any) -> int:
    """Convert to a whole, non-negative timestamp (halves round up)."""
    number = to_number(value)
    if not math.isfinite(number):
        raise ConversionError("timestamp values should be positive numbers")
    rounded = int(math.floor(number + 0.5))
    if is_timestamp(rounded):
        return rounded
    raise ConversionError("timestamp values should be positive numbers")


BUILTIN_VALIDATORS = {
    'date': is_date,
    'string': is_string,
    'object': is_object,
    'array': is_array,
    'number': is_number,
    'boolean': is_boolean,
    'geo': is_geo,
    'altitude': is_altitude,
    'timestamp': is_timestamp,
    'uuidnodashes': is_uuid_without_dashes,
    'hex': is_hex,
    'uuid': is_uuid,
    'email': is_email,
    'iso8601DateSubset': is_iso8601_date_subset,
    'year': is_year,
    'month': is_month,
    'day': is_day,
}

BUILTIN_CONVERTERS = {
    'number': to_number,
    'boolean': to_boolean,
    'geo': to_geo,
    'altitude': to_altitude,
    'timestamp': to_timestamp,
    'year': to_year,
    'month': to_month,
    'day': to_day,
}


def create_default_format_registry() -> FormatRegistry:
    """Build a fresh registry holding every built-in validator and converter."""
    return FormatRegistry(BUILTIN_VALIDATORS, BUILTIN_CONVERTERS)


# Shared default registry used when no registry is passed in the options
default_format_registry = create_default_format_registry()
